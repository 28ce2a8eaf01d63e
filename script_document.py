"""
Client-side editing state for one script: the text, the active selection,
the in-flight edit and the undo history.

The document is always in exactly one of four states, each carrying only the
data that state needs:

    Idle      no script
    Viewing   script, no selection
    Selected  script + a non-empty selection
    Editing   script + selection + the EditRequest sent for it

Selection indices are half-open [start, end) offsets into the script, counted as
Python str indices (Unicode code points, not UTF-16 code units). A character
outside the Basic Multilingual Plane, such as most emoji, is one index here
but two in a JavaScript string.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from config import DEBUG, config
from script_errors import InvalidArgument, InvalidTransition


def _log(msg: str, verbose_only: bool = False) -> None:
    if verbose_only and not DEBUG:
        return
    print(f"[DOCUMENT] {msg}")


class DocumentState(Enum):
    IDLE = "idle"
    VIEWING = "viewing"
    SELECTED = "selected"
    EDITING = "editing"


@dataclass(frozen=True)
class Selection:
    start: int
    end: int
    text: str

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class EditRequest:
    """What gets sent to the edit service for one rewrite."""

    script: str
    start: int
    end: int
    selected_text: str
    instruction: str

    def to_payload(self) -> dict:
        return {
            "script": self.script,
            "start": self.start,
            "end": self.end,
            "selectedText": self.selected_text,
            "instruction": self.instruction,
        }


@dataclass(frozen=True)
class Idle:
    kind: ClassVar[DocumentState] = DocumentState.IDLE
    script: ClassVar[str] = ""


@dataclass(frozen=True)
class Viewing:
    kind: ClassVar[DocumentState] = DocumentState.VIEWING
    script: str


@dataclass(frozen=True)
class Selected:
    kind: ClassVar[DocumentState] = DocumentState.SELECTED
    script: str
    selection: Selection


@dataclass(frozen=True)
class Editing:
    kind: ClassVar[DocumentState] = DocumentState.EDITING
    script: str
    selection: Selection
    request: EditRequest


def splice(script: str, start: int, end: int, replacement: str) -> tuple[str, tuple[int, int]]:
    """
    Replace script[start:end] with replacement.

    Returns:
        (new_script, (start, start + len(replacement))), the range now covering replacement.
    """
    if not (0 <= start <= end <= len(script)):
        raise InvalidArgument(f"Invalid range [{start}, {end}) for script of length {len(script)}")
    new_script = script[:start] + replacement + script[end:]
    return new_script, (start, start + len(replacement))


def _viewing(script: str):
    return Viewing(script) if script else Idle()


class ScriptDocument:
    """Owns the script, its selection and undo frames for one editing session."""

    def __init__(self, script: str = "", max_undo: int | None = None):
        self._undo: deque[str] = deque(maxlen=max_undo or config.max_undo)
        self._state = _viewing(script)
        self.last_error: str | None = None

    # --- read access ---

    @property
    def state(self) -> DocumentState:
        return self._state.kind

    @property
    def script(self) -> str:
        return self._state.script

    @property
    def selection(self) -> Selection | None:
        return getattr(self._state, "selection", None)

    @property
    def pending_request(self) -> EditRequest | None:
        return getattr(self._state, "request", None)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def has_selection(self) -> bool:
        return self.selection is not None

    # --- transitions ---

    def load_script(self, script: str) -> None:
        """Replace the script with a freshly generated one. Selection and undo are cleared."""
        if not isinstance(script, str):
            raise InvalidArgument("script must be a string")
        self._undo.clear()
        self._state = _viewing(script)
        self.last_error = None

    def set_text(self, script: str) -> None:
        """
        Direct user edit outside the rewrite flow.

        Old indices may no longer be valid, so the selection is dropped. An edit in
        flight is abandoned: its response will be ignored as stale.
        """
        if not isinstance(script, str):
            raise InvalidArgument("script must be a string")
        if isinstance(self._state, Editing):
            _log("Text changed while an edit was in flight; its response will be ignored.")
        self._state = _viewing(script)
        self.last_error = None

    def select(self, start: int, end: int) -> Selection | None:
        """
        Mark [start, end) as the active selection. start == end collapses it.

        Returns:
            The new Selection, or None when the selection was collapsed.
        """
        if isinstance(self._state, Editing):
            raise InvalidTransition("Cannot change the selection while an edit is in flight")
        if isinstance(self._state, Idle):
            raise InvalidTransition("No script to select from")
        if start == end:
            self.clear_selection()
            return None
        script = self._state.script
        if start < 0 or end > len(script) or start > end:
            raise InvalidArgument(f"Invalid range [{start}, {end}) for script of length {len(script)}")
        selection = Selection(start, end, script[start:end])
        self._state = Selected(script, selection)
        self.last_error = None
        return selection

    def clear_selection(self) -> None:
        if isinstance(self._state, Editing):
            raise InvalidTransition("Cannot change the selection while an edit is in flight")
        self._state = _viewing(self._state.script)
        self.last_error = None

    def begin_edit(self, instruction: str) -> EditRequest:
        """
        Start a rewrite of the current selection.

        Raises:
            InvalidTransition: there is no selection, or an edit is already in flight.
            InvalidArgument: instruction is blank (rejected before contacting the service).
        """
        if isinstance(self._state, Editing):
            raise InvalidTransition("An edit is already in flight")
        if not isinstance(self._state, Selected):
            raise InvalidTransition("Select some text to edit first")
        if not isinstance(instruction, str) or not instruction.strip():
            self.last_error = "Please describe how you want to change the selected text."
            raise InvalidArgument(self.last_error)

        script, selection = self._state.script, self._state.selection
        request = EditRequest(
            script=script,
            start=selection.start,
            end=selection.end,
            selected_text=selection.text,
            instruction=instruction,
        )
        self._state = Editing(script, selection, request)
        self.last_error = None
        return request

    def _is_current(self, request: EditRequest | None) -> bool:
        if not isinstance(self._state, Editing):
            return False
        return request is None or request is self._state.request

    def apply_edit(self, replacement: str, request: EditRequest | None = None) -> bool:
        """
        Splice a successful replacement into the script and select exactly the new text.

        The pre-edit script becomes the undo frame.

        Returns:
            False if the response is stale (no edit in flight, or a different request).
        """
        if not self._is_current(request):
            _log("Ignoring stale edit response.", verbose_only=True)
            return False
        if not isinstance(replacement, str):
            raise InvalidArgument("replacement must be a string")

        script, selection = self._state.script, self._state.selection
        new_script, (new_start, new_end) = splice(script, selection.start, selection.end, replacement)
        self._undo.append(script)
        if new_start == new_end:
            self._state = _viewing(new_script)
        else:
            self._state = Selected(new_script, Selection(new_start, new_end, replacement))
        self.last_error = None
        _log(f"Applied edit: [{selection.start}, {selection.end}) -> [{new_start}, {new_end})", verbose_only=True)
        return True

    def fail_edit(self, message: str, request: EditRequest | None = None) -> bool:
        """Edit failed: back to the same selection with the error recorded."""
        if not self._is_current(request):
            _log("Ignoring stale edit failure.", verbose_only=True)
            return False
        self._state = Selected(self._state.script, self._state.selection)
        self.last_error = message
        return True

    def undo(self) -> bool:
        """
        Restore the script from before the last applied edit and clear the selection.

        Returns:
            False when there is nothing to undo.
        """
        if isinstance(self._state, Editing):
            raise InvalidTransition("Cannot undo while an edit is in flight")
        if not self._undo:
            return False
        self._state = _viewing(self._undo.pop())
        self.last_error = None
        return True
