"""
Local persistence of the studio's prompt, script and target length.
A single JSON record; missing or corrupt files fall back to defaults.
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path

from build_scripts_utils import is_number
from config import STUDIO_STATE_FILE, config


def _log(msg: str) -> None:
    print(f"[STATE] {msg}")


@dataclass
class SavedState:
    prompt: str = ""
    script: str = ""
    lengthMinutes: float = config.default_length_minutes

    @classmethod
    def from_dict(cls, data) -> "SavedState":
        """Field-wise: anything of the wrong type takes its default."""
        if not isinstance(data, dict):
            return cls()
        prompt = data.get("prompt")
        script = data.get("script")
        length = data.get("lengthMinutes")
        return cls(
            prompt=prompt if isinstance(prompt, str) else "",
            script=script if isinstance(script, str) else "",
            lengthMinutes=length if is_number(length) else config.default_length_minutes,
        )


class StudioStateStore:
    """Reads the saved record once and rewrites it whenever it changes."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path or STUDIO_STATE_FILE)

    def load(self) -> SavedState:
        if not self.path.exists():
            return SavedState()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _log(f"WARNING: Failed to load saved script ({e}). Starting fresh.")
            return SavedState()
        return SavedState.from_dict(data)

    def save(self, state: SavedState) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(asdict(state), f, indent=2, ensure_ascii=False)
        except OSError as e:
            _log(f"WARNING: Failed to save script ({e}).")
