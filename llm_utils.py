"""
LLM gateway for script generation and editing.
Sends chat-completion requests to an OpenAI-compatible provider selected by .env.

.env variables:
  TEXT_PROVIDER          - "openai" or "xai" (default: openai)
  TEXT_MODEL_OPENAI      - OpenAI chat model (default: gpt-4o-mini)
  TEXT_MODEL_XAI         - xAI (Grok) chat model (default: grok-3-mini)
  TEXT_BASE_URL          - Optional endpoint override (any OpenAI-compatible server)
  TEXT_TEMPERATURE       - Sampling temperature (default: 0.7)
  OPENAI_API_KEY         - Required for OpenAI
  XAI_API_KEY            - Required for xAI
"""

import os
from typing import Any

from config import (
    DEBUG,
    TEXT_BASE_URL,
    TEXT_MODEL_OPENAI,
    TEXT_MODEL_XAI,
    TEXT_PROVIDER,
    TEXT_TEMPERATURE,
)
from script_errors import ServiceUnavailable, UpstreamUnavailable

PROVIDER_BASE_URLS = {
    "openai": None,  # SDK default
    "xai": "https://api.x.ai/v1",
}
PROVIDER_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "xai": "XAI_API_KEY",
}

# Returned when the provider answers without any message content
FALLBACK_COMPLETION_TEXT = "No response from model."


def _log(msg: str, verbose_only: bool = False) -> None:
    """Log with [GATEWAY] prefix. Use verbose_only for extra debug output."""
    if verbose_only and not DEBUG:
        return
    print(f"[GATEWAY] {msg}")


def _resolve_provider(provider: str | None) -> str:
    prov = (provider or TEXT_PROVIDER).lower()
    if prov not in PROVIDER_BASE_URLS:
        raise ValueError(
            f"TEXT_PROVIDER must be 'openai' or 'xai'. Got: {prov}. "
            "Set TEXT_PROVIDER in .env or pass provider=."
        )
    return prov


def get_text_model(provider: str | None = None) -> str:
    prov = _resolve_provider(provider)
    return TEXT_MODEL_XAI if prov == "xai" else TEXT_MODEL_OPENAI


def get_text_model_display(provider: str | None = None) -> str:
    """Return a short string for logging: provider / model (e.g. 'openai / gpt-4o-mini')."""
    prov = _resolve_provider(provider)
    return f"{prov} / {get_text_model(prov)}"


def get_api_key(provider: str | None = None) -> str | None:
    """Bearer credential for the provider, read from the environment at call time."""
    prov = _resolve_provider(provider)
    return os.getenv(PROVIDER_KEY_ENV[prov]) or None


def is_configured(provider: str | None = None) -> bool:
    """True when the provider's API key is set."""
    return get_api_key(provider) is not None


def _ensure_openai_schema(schema: dict) -> dict:
    """Ensure schema has additionalProperties: false for OpenAI Structured Outputs."""
    if schema.get("type") != "object":
        return schema
    result = dict(schema)
    if "additionalProperties" not in result:
        result["additionalProperties"] = False
    if "properties" in result:
        result["properties"] = {
            k: _ensure_openai_schema(v) if isinstance(v, dict) else v
            for k, v in result["properties"].items()
        }
    return result


def _extract_content(response: Any) -> str:
    """Text of the first choice, or "" when the provider sent none."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else ""


def generate_text(
    messages: list[dict[str, str]],
    model: str | None = None,
    provider: str | None = None,
    temperature: float | None = None,
    response_json_schema: dict | None = None,
    **kwargs: Any,
) -> str:
    """
    Send one non-streaming chat-completion request and return the reply text.

    Args:
        messages: List of {"role": "system"|"user"|"assistant", "content": str}.
        model: Model name; if None, use TEXT_MODEL_OPENAI or TEXT_MODEL_XAI.
        provider: "openai" or "xai"; if None, use TEXT_PROVIDER.
        temperature: Sampling temperature; if None, use TEXT_TEMPERATURE.
        response_json_schema: Optional JSON schema dict sent as a strict json_schema
            response_format.
        **kwargs: Passed through to the underlying API.

    Returns:
        The first choice's message content ("" if the provider sent none).

    Raises:
        ServiceUnavailable: no API key configured for the provider.
        UpstreamUnavailable: transport failure or non-success status from the provider.
    """
    prov = _resolve_provider(provider)
    api_key = get_api_key(prov)
    if not api_key:
        raise ServiceUnavailable(
            f"{PROVIDER_KEY_ENV[prov]} is not set. Set it in .env for {prov} text."
        )

    import openai
    from openai import OpenAI

    # Single-shot request: no SDK retries, transport default timeout
    client = OpenAI(
        api_key=api_key,
        base_url=TEXT_BASE_URL or PROVIDER_BASE_URLS[prov],
        max_retries=0,
    )
    model_name = model or get_text_model(prov)
    req: dict[str, Any] = {
        "model": model_name,
        "messages": messages,
        "temperature": TEXT_TEMPERATURE if temperature is None else temperature,
        **kwargs,
    }
    if response_json_schema is not None:
        openai_schema = _ensure_openai_schema(response_json_schema)
        req["response_format"] = {
            "type": "json_schema",
            "json_schema": {
                "name": openai_schema.get("title", "response"),
                "strict": True,
                "schema": openai_schema,
            },
        }

    _log(f"Requesting completion from {prov} / {model_name}", verbose_only=True)
    try:
        response = client.chat.completions.create(**req)
    except openai.APIStatusError as e:
        # Provider error body stays in the log; callers only see the status
        _log(f"WARNING: Provider returned status {e.status_code}: {e.body!r}")
        raise UpstreamUnavailable(f"LLM provider returned status {e.status_code}") from e
    except openai.APIError as e:
        _log(f"WARNING: Provider request failed: {e}")
        raise UpstreamUnavailable("LLM provider request failed") from e
    return _extract_content(response)


def complete(
    system_prompt: str,
    user_prompt: str,
    response_json_schema: dict | None = None,
) -> str:
    """
    Run a single system + user chat exchange.

    Always returns some text: an empty provider reply becomes FALLBACK_COMPLETION_TEXT.
    Callers that must tell an empty reply apart (range edits) use generate_text.
    """
    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]
    text = generate_text(messages, response_json_schema=response_json_schema)
    if not text:
        _log("WARNING: Empty completion from provider, using fallback text.")
        return FALLBACK_COMPLETION_TEXT
    return text
