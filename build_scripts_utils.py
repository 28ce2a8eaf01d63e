"""
Shared helpers for the generation and edit services: input checks and
defensive parsing of model replies.
"""

import json
import math

from config import DEBUG
from script_errors import InvalidArgument
from script_schemas import REPLACEMENT_FIELD


def _log(msg: str, verbose_only: bool = False) -> None:
    if verbose_only and not DEBUG:
        return
    print(f"[PARSE] {msg}")


def clean_json_response(content: str) -> str:
    """Remove markdown code blocks from JSON response."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def is_number(value) -> bool:
    """True for real numbers (int/float), excluding bool and NaN/inf."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def require_text(value, name: str, allow_empty: bool = False) -> str:
    """
    Return value if it is a string (non-blank unless allow_empty).

    Raises:
        InvalidArgument: value is missing, not a string, or blank.
    """
    if not isinstance(value, str):
        raise InvalidArgument(f"{name} is required and must be a string")
    if not allow_empty and not value.strip():
        raise InvalidArgument(f"{name} must not be empty")
    return value


def coerce_index(value, name: str) -> int:
    """
    Accept an integer index; integral floats from JSON (6.0) are converted.

    Raises:
        InvalidArgument: value is not an integer.
    """
    if is_number(value):
        if isinstance(value, int):
            return value
        if value.is_integer():
            return int(value)
    raise InvalidArgument(f"{name} must be an integer")


def extract_replacement_field(raw: str) -> str | None:
    """
    Parse raw as a {"replacement": "..."} payload.

    Returns the field when it is a string, or None when the reply is not such a payload.
    """
    try:
        payload = json.loads(clean_json_response(raw))
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    value = payload.get(REPLACEMENT_FIELD)
    return value if isinstance(value, str) else None


def parse_replacement(raw: str, original: str) -> str:
    """
    Turn a model reply into replacement text, never raising.

    Order:
    1. a structured payload's textual "replacement" field, used verbatim;
    2. otherwise the raw reply with surrounding whitespace trimmed;
    3. if that leaves nothing, the original text (the splice becomes a no-op).
    """
    raw = raw if isinstance(raw, str) else ""
    replacement = extract_replacement_field(raw)
    if replacement is None:
        _log("Reply is not a structured payload, using raw text.", verbose_only=True)
        replacement = raw.strip()
    elif not replacement.strip():
        replacement = ""

    if not replacement:
        _log("WARNING: Empty replacement from model. Keeping original text.")
        return original
    return replacement
