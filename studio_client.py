"""
HTTP client for the Script Studio API (server.py).
"""

import requests

from config import DEBUG, STUDIO_API_URL, STUDIO_HTTP_TIMEOUT
from script_document import EditRequest
from script_errors import StudioRequestError

USER_AGENT = "ScriptStudio/1.0 (studio client)"


def _log(msg: str, verbose_only: bool = False) -> None:
    """Log with [CLIENT] prefix. Use verbose_only for extra debug output."""
    if verbose_only and not DEBUG:
        return
    print(f"[CLIENT] {msg}")


class StudioClient:
    """Calls /api/generate and /api/edit; raises StudioRequestError on any failure."""

    def __init__(self, base_url: str | None = None, timeout: float | None = STUDIO_HTTP_TIMEOUT):
        self.base_url = (base_url or STUDIO_API_URL).rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def _post(self, path: str, payload: dict, failure_message: str) -> dict:
        url = f"{self.base_url}{path}"
        _log(f"POST {url}", verbose_only=True)
        try:
            resp = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            _log(f"WARNING: Request to {url} failed: {e}")
            raise StudioRequestError(f"{failure_message}: could not reach {self.base_url}") from e

        data = self._json(resp)
        if not resp.ok:
            message = data.get("error") if isinstance(data.get("error"), str) else failure_message
            _log(f"{path} returned {resp.status_code}: {message}")
            raise StudioRequestError(message, status_code=resp.status_code)
        return data

    @staticmethod
    def _json(resp) -> dict:
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def health(self) -> bool:
        """True when the server answers /health with status ok."""
        try:
            resp = self.session.get(f"{self.base_url}/health", timeout=self.timeout)
        except requests.RequestException:
            return False
        return resp.status_code == 200 and self._json(resp).get("status") == "ok"

    def generate(self, prompt: str, length_minutes: float) -> str:
        data = self._post(
            "/api/generate",
            {"prompt": prompt, "lengthMinutes": length_minutes},
            "Failed to generate script",
        )
        script = data.get("script")
        return script if isinstance(script, str) else ""

    def edit(self, edit_request: EditRequest) -> str:
        """Send an edit; a response without a replacement keeps the selected text."""
        data = self._post("/api/edit", edit_request.to_payload(), "Failed to edit selection")
        replacement = data.get("replacement")
        return replacement if isinstance(replacement, str) else edit_request.selected_text
