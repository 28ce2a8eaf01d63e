#!/usr/bin/env python3
"""
Script Studio - terminal client.
Generate a script through the API, select a span, rewrite it with AI, undo.
The prompt, script and target length are saved locally between sessions.
"""

import argparse
import threading
from contextlib import contextmanager

from config import config
from prompt_builders import build_annotated_script, format_minutes
from script_document import DocumentState, ScriptDocument
from script_errors import InvalidArgument, ScriptStudioError, StudioBusy, StudioRequestError
from studio_client import StudioClient
from studio_state import SavedState, StudioStateStore


def _log(msg: str) -> None:
    print(f"[STUDIO] {msg}")


class ScriptStudio:
    """
    One editing session: a ScriptDocument, the API client and local persistence.

    Only one generation or edit may be in flight at a time; a second request
    while one is outstanding raises StudioBusy.
    """

    def __init__(self, client: StudioClient | None = None, store: StudioStateStore | None = None):
        self.client = client or StudioClient()
        self.store = store or StudioStateStore()
        saved = self.store.load()
        self._prompt = saved.prompt
        self._length_minutes = saved.lengthMinutes
        self.document = ScriptDocument(saved.script)
        self.error: str | None = None
        self._busy = threading.Lock()

    # --- persisted fields ---

    @property
    def prompt(self) -> str:
        return self._prompt

    @prompt.setter
    def prompt(self, value: str) -> None:
        self._prompt = value
        self._persist()

    @property
    def length_minutes(self) -> float:
        return self._length_minutes

    @length_minutes.setter
    def length_minutes(self, value: float) -> None:
        low, high = config.length_range
        if not (low <= value <= high):
            raise InvalidArgument(f"Length must be between {low} and {high} minutes")
        self._length_minutes = value
        self._persist()

    @property
    def script(self) -> str:
        return self.document.script

    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    def _persist(self) -> None:
        self.store.save(SavedState(
            prompt=self._prompt,
            script=self.document.script,
            lengthMinutes=self._length_minutes,
        ))

    @contextmanager
    def _single_flight(self):
        if not self._busy.acquire(blocking=False):
            raise StudioBusy("A request is already in progress")
        try:
            yield
        finally:
            self._busy.release()

    # --- actions ---

    def generate(self, prompt: str | None = None) -> str:
        """Generate a new script; selection and undo history are reset."""
        if prompt is not None:
            self.prompt = prompt
        self.error = None
        if not self._prompt.strip():
            self.error = "Please enter a prompt for your script."
            raise InvalidArgument(self.error)

        with self._single_flight():
            try:
                script = self.client.generate(self._prompt, self._length_minutes)
            except StudioRequestError as e:
                self.error = str(e) or "Something went wrong while generating the script."
                raise
            self.document.load_script(script)
            self._persist()
        return script

    def select(self, start: int, end: int):
        return self.document.select(start, end)

    def clear_selection(self) -> None:
        self.document.clear_selection()

    def set_text(self, script: str) -> None:
        """Direct edit of the script text; drops the selection."""
        self.document.set_text(script)
        self._persist()

    def edit_selection(self, instruction: str) -> str:
        """
        Rewrite the selected span via the API and select the new text.

        A blank instruction is rejected without contacting the service.
        On failure the script and selection are left unchanged.
        """
        with self._single_flight():
            edit_request = self.document.begin_edit(instruction)
            try:
                replacement = self.client.edit(edit_request)
            except StudioRequestError as e:
                self.document.fail_edit(str(e) or "Something went wrong while editing the selection.", edit_request)
                raise
            except Exception:
                # Leave EDITING on any failure so the selection stays usable
                self.document.fail_edit("Something went wrong while editing the selection.", edit_request)
                raise
            self.document.apply_edit(replacement, edit_request)
            self._persist()
        return replacement

    def undo(self) -> bool:
        """Revert the last AI edit. Returns False when there is nothing to undo."""
        if self.is_busy:
            raise StudioBusy("A request is already in progress")
        undone = self.document.undo()
        if undone:
            self._persist()
        return undone


# =============================================================================
# Terminal front-end
# =============================================================================

HELP_TEXT = """Commands:
  generate [prompt]        Generate a script (uses the saved prompt if omitted)
  minutes <n>              Set target length (1-5)
  show                     Print the script, with the selection marked
  select <start> <end>     Select script[start:end] (start == end clears)
  find <text>              Select the first occurrence of text
  edit <instruction>       Rewrite the selection with AI
  undo                     Undo the last AI edit
  set <text>               Replace the whole script text directly
  status                   Show prompt, length and selection
  help                     Show this help
  quit                     Exit"""


def render_script(studio: ScriptStudio) -> str:
    script = studio.script
    if not script:
        return "(no script yet)"
    selection = studio.document.selection
    if selection is None:
        return script
    return build_annotated_script(script, selection.start, selection.end)


def describe_status(studio: ScriptStudio) -> str:
    document = studio.document
    lines = [
        f"Prompt: {studio.prompt or '(none)'}",
        f"Length: {format_minutes(studio.length_minutes)} min",
    ]
    if document.state is DocumentState.IDLE:
        lines.append("No script yet")
    elif document.selection is not None:
        sel = document.selection
        lines.append(f"Selection [{sel.start}, {sel.end}): {sel.text!r}")
    else:
        lines.append("Select text to edit")
    if document.can_undo:
        lines.append("Undo available")
    if document.last_error:
        lines.append(f"Last error: {document.last_error}")
    return "\n".join(lines)


def run_command(studio: ScriptStudio, line: str) -> bool:
    """Execute one command line. Returns False when the session should end."""
    line = line.strip()
    if not line:
        return True
    command, _, rest = line.partition(" ")
    command = command.lower()
    rest = rest.strip()

    if command in ("quit", "exit"):
        return False
    if command == "help":
        print(HELP_TEXT)
    elif command in ("generate", "gen"):
        _log("Generating…")
        studio.generate(rest or None)
        print(render_script(studio))
    elif command == "minutes":
        try:
            minutes = float(rest)
        except ValueError:
            raise InvalidArgument("Usage: minutes <n>")
        studio.length_minutes = minutes
        _log(f"Target length: {format_minutes(studio.length_minutes)} min")
    elif command == "show":
        print(render_script(studio))
    elif command == "select":
        parts = rest.split()
        if len(parts) != 2 or not all(p.lstrip("-").isdigit() for p in parts):
            raise InvalidArgument("Usage: select <start> <end>")
        start, end = int(parts[0]), int(parts[1])
        selection = studio.select(start, end)
        _log(f"Selected: {selection.text!r}" if selection else "Selection cleared")
    elif command == "find":
        index = studio.script.find(rest) if rest else -1
        if index < 0:
            raise InvalidArgument(f"Text not found: {rest!r}")
        selection = studio.select(index, index + len(rest))
        _log(f"Selected [{selection.start}, {selection.end})")
    elif command == "edit":
        _log("Rewriting…")
        studio.edit_selection(rest)
        print(render_script(studio))
    elif command == "undo":
        _log("Undone" if studio.undo() else "Nothing to undo")
    elif command == "set":
        studio.set_text(rest)
    elif command == "status":
        print(describe_status(studio))
    else:
        print(f"Unknown command: {command}. Type 'help'.")
    return True


def main():
    parser = argparse.ArgumentParser(
        description="Interactive Script Studio client.",
    )
    parser.add_argument("--api-url", default=None,
                        help="Script Studio API base URL (default: STUDIO_API_URL or http://localhost:8080)")
    parser.add_argument("--state-file", default=None,
                        help="Where to save prompt/script/length (default: STUDIO_STATE_FILE or .script_studio.json)")
    args = parser.parse_args()

    studio = ScriptStudio(
        client=StudioClient(base_url=args.api_url),
        store=StudioStateStore(args.state_file),
    )
    if not studio.client.health():
        _log(f"WARNING: API at {studio.client.base_url} is not responding.")
    print(describe_status(studio))
    print("Type 'help' for commands.")

    while True:
        try:
            line = input("studio> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        try:
            if not run_command(studio, line):
                break
        except ScriptStudioError as e:
            print(f"[ERROR] {e}")


if __name__ == "__main__":
    main()
