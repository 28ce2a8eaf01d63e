"""
Prompt builders for script generation and range-scoped rewrites.
Keeps every instruction sent to the model in one place.
"""

EDIT_START_MARKER = "[[START_EDIT]]"
EDIT_END_MARKER = "[[END_EDIT]]"

# Spoken words per minute used to size the script
WORDS_PER_MINUTE = 150


def format_minutes(minutes: float) -> str:
    """3 -> "3", 4.5 -> "4.5"."""
    return f"{minutes:g}"


def build_generation_system_prompt(length_minutes: float) -> str:
    """
    System instruction for full script generation.

    Args:
        length_minutes: Normalized target length of the spoken script
    """
    minutes = format_minutes(length_minutes)
    target_words = int(round(length_minutes * WORDS_PER_MINUTE))
    return f"""You are a scriptwriter for short-form spoken videos.
Write a script for a video of about {minutes} minute(s) (roughly {target_words} spoken words).

RULES:
- Return ONLY the words the narrator speaks, as plain text.
- No titles, headings, scene directions, timestamps, speaker labels or markdown.
- No commentary before or after the script.
- Open with a hook in the first sentence and end with a clear closing line."""


def build_edit_system_prompt() -> str:
    """System instruction for rewriting one marked span of a script."""
    return f"""You are an editor for spoken video scripts.
The user sends a full script in which ONE span is wrapped between {EDIT_START_MARKER} and {EDIT_END_MARKER}, the selected text on its own, and an instruction.

RULES:
- Rewrite ONLY the text between the markers, following the instruction.
- Keep the rewrite consistent with the surrounding script (tense, voice, facts), so it reads naturally when put back in place.
- Do NOT include the markers or any text outside the marked span in your answer.
- Respond with valid JSON only, exactly in this shape: {{"replacement": "<rewritten text>"}}"""


def build_annotated_script(script: str, start: int, end: int) -> str:
    """Full script with the [start, end) span wrapped in edit markers."""
    return (
        script[:start]
        + EDIT_START_MARKER
        + script[start:end]
        + EDIT_END_MARKER
        + script[end:]
    )


def build_edit_user_prompt(script: str, start: int, end: int, instruction: str) -> str:
    """
    User message for a range edit: annotated script, bare selection and instruction.

    Args:
        script: Full script text
        start: Inclusive start index of the selected span
        end: Exclusive end index of the selected span
        instruction: What to do with the span (already defaulted when blank)
    """
    return f"""FULL SCRIPT (the span to rewrite is marked):
{build_annotated_script(script, start, end)}

SELECTED TEXT:
{script[start:end]}

INSTRUCTION:
{instruction}"""
