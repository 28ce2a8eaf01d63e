"""
Error types shared by the services, the HTTP layer and the studio client.
"""


class ScriptStudioError(Exception):
    """Base error for script generation and editing."""

    status_code = 500


class InvalidArgument(ScriptStudioError, ValueError):
    """Caller sent malformed or out-of-range input."""

    status_code = 400


class ServiceUnavailable(ScriptStudioError):
    """The server has no LLM provider credentials configured."""


class UpstreamFailure(ScriptStudioError):
    """Calling the external model failed."""


class UpstreamUnavailable(UpstreamFailure):
    """Raised by the gateway on transport errors or non-success provider status."""


class InvalidTransition(ScriptStudioError):
    """The document is not in a state that allows the requested operation."""


class StudioRequestError(ScriptStudioError):
    """The studio client's request to the service failed."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class StudioBusy(ScriptStudioError):
    """A generation or edit is already in flight for this session."""


def error_status(error: Exception) -> int:
    """Map an exception to the HTTP status the service reports for it."""
    if isinstance(error, ScriptStudioError):
        return error.status_code
    return 500
