"""
JSON schemas for structured model replies.
Pass these to llm_utils.generate_text(response_json_schema=...) for structured output.
"""

REPLACEMENT_FIELD = "replacement"

# --- Range edit (single rewritten span) ---
EDIT_REPLACEMENT_SCHEMA = {
    "type": "object",
    "title": "range_edit",
    "properties": {
        REPLACEMENT_FIELD: {
            "type": "string",
            "description": "Rewritten text for the marked span only, without the edit markers.",
        },
    },
    "required": [REPLACEMENT_FIELD],
}
