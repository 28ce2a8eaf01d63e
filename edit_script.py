"""
Range-scoped rewrite of a script: the model rewrites only script[start:end]
and the reply is parsed defensively into replacement text.
"""

import llm_utils
from build_scripts_utils import coerce_index, parse_replacement, require_text
from config import TEXT_STRUCTURED_OUTPUT, config
from prompt_builders import build_edit_system_prompt, build_edit_user_prompt
from script_errors import InvalidArgument, ServiceUnavailable
from script_schemas import EDIT_REPLACEMENT_SCHEMA


def _log(msg: str) -> None:
    print(f"[EDIT] {msg}")


def validate_range(script: str, start, end) -> tuple[int, int]:
    """
    Check [start, end) is a non-empty half-open range inside script.

    Raises:
        InvalidArgument: start/end are not integers or the range is invalid.
    """
    start = coerce_index(start, "start")
    end = coerce_index(end, "end")
    if start < 0 or end > len(script) or start >= end:
        raise InvalidArgument(
            f"Invalid range [{start}, {end}) for script of length {len(script)}"
        )
    return start, end


def resolve_instruction(instruction) -> str:
    if isinstance(instruction, str) and instruction.strip():
        return instruction.strip()
    return config.default_instruction


def edit_range(script, start, end, selected_text=None, instruction=None) -> str:
    """
    Ask the model to rewrite script[start:end] and return the replacement text.

    The indices are authoritative: selected_text is only compared against the slice
    and a mismatch is logged. The slice itself is what the model sees.

    Returns:
        Replacement text; the original slice when the model's reply is empty.

    Raises:
        InvalidArgument: script is missing, indices are not integers, or the range is invalid.
        ServiceUnavailable: no LLM API key configured.
        UpstreamFailure: the model request failed.
    """
    script = require_text(script, "script", allow_empty=True)
    start, end = validate_range(script, start, end)
    selected_by_index = script[start:end]

    if selected_text is not None and selected_text != selected_by_index:
        _log(
            f"WARNING: selectedText does not match script[{start}:{end}] "
            f"({selected_text[:40]!r} vs {selected_by_index[:40]!r}). Using the indexed text."
            if isinstance(selected_text, str)
            else f"WARNING: selectedText is not a string ({type(selected_text).__name__}). Using the indexed text."
        )

    if not llm_utils.is_configured():
        raise ServiceUnavailable("Server is not configured with an LLM API key.")

    instruction = resolve_instruction(instruction)
    _log(f"Rewriting [{start}, {end}) ({end - start} chars): {instruction[:60]}")
    # Not complete(): its fallback text would be spliced in over the selection
    messages = [
        {"role": "system", "content": build_edit_system_prompt()},
        {"role": "user", "content": build_edit_user_prompt(script, start, end, instruction)},
    ]
    raw = llm_utils.generate_text(
        messages,
        response_json_schema=EDIT_REPLACEMENT_SCHEMA if TEXT_STRUCTURED_OUTPUT else None,
    )
    replacement = parse_replacement(raw, selected_by_index)
    _log(f"✓ Replacement ready ({len(replacement)} chars)")
    return replacement
