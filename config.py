"""
Configuration settings for script generation, editing and the studio client.
Values come from .env / the environment; Config holds the fixed defaults.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# LLM provider and model selection (from .env); used by llm_utils
# TEXT_PROVIDER: "openai" or "xai" (both speak the OpenAI chat-completions API)
TEXT_PROVIDER = os.getenv("TEXT_PROVIDER", "openai").lower()
TEXT_MODEL_OPENAI = os.getenv("TEXT_MODEL_OPENAI", "gpt-4o-mini")
TEXT_MODEL_XAI = os.getenv("TEXT_MODEL_XAI", "grok-3-mini")
TEXT_BASE_URL = os.getenv("TEXT_BASE_URL") or None  # Overrides the provider's default endpoint
TEXT_TEMPERATURE = float(os.getenv("TEXT_TEMPERATURE", "0.7"))

# HTTP service
PORT = int(os.getenv("PORT", "8080"))

# Studio client
STUDIO_API_URL = os.getenv("STUDIO_API_URL", "http://localhost:8080")
STUDIO_STATE_FILE = os.getenv("STUDIO_STATE_FILE", ".script_studio.json")


def get_env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag from environment variables."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_env_float(name: str) -> float | None:
    """Read an optional float from environment variables (None when unset or invalid)."""
    value = os.getenv(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


# Ask the provider for a JSON-schema constrained reply on edits.
# Off by default: not every OpenAI-compatible endpoint supports response_format.
TEXT_STRUCTURED_OUTPUT = get_env_flag("TEXT_STRUCTURED_OUTPUT")
DEBUG = get_env_flag("DEBUG")
STUDIO_HTTP_TIMEOUT = get_env_float("STUDIO_HTTP_TIMEOUT")  # None = transport default


class Config:
    # Script length (minutes)
    min_length_minutes = 1
    max_length_minutes = 5
    default_length_minutes = 3

    # Range edits
    default_instruction = "Improve this text."
    max_undo = 1  # Undo frames kept by the document (1 = single-step undo)

    @property
    def length_range(self):
        return (self.min_length_minutes, self.max_length_minutes)


config = Config()
