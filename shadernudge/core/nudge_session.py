"""
Nudge session state machine.

Ties the literal scanner, the placeholder protocol, the live value
broadcast and the UI affordance together:

    IDLE -> SCANNING -> STAGED -> COMMITTING -> IDLE
                               -> CANCELLING -> IDLE

One NudgeSession belongs to one editor and holds at most one open
EditSession. Nothing raises out of the public methods: failures are
logged and turn into a return to IDLE.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from shadernudge import log
from shadernudge.core.errors import CancelFailure, CommitFailure, NudgeError, PersistenceFailure, StageFailure
from shadernudge.core.literal_scanner import scan_at_position_or_selection
from shadernudge.core.persistence import FilePersistence
from shadernudge.core.placeholder import PlaceholderProtocol
from shadernudge.core.text_buffer import TextBuffer, position_after_reformat
from shadernudge.core.text_range import LiteralMatch, Position, TextRange


class SessionState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    STAGED = "staged"
    COMMITTING = "committing"
    CANCELLING = "cancelling"


@dataclass
class EditSession:
    anchor_match: LiteralMatch
    staged_range: TextRange
    current_value: float
    original_value: float
    original_text: str
    staged_text: str


@dataclass
class AffordanceCallbacks:
    on_value_change: Callable[[float], None]
    on_confirm: Callable[[float], None]
    on_cancel: Callable[[], None]


class NudgeAffordance(ABC):
    """
    UI strategy for entering a value.

    The slider and the numeric box are both affordances; the state machine
    does not care which one is in use.
    """

    @abstractmethod
    def open(self, match: LiteralMatch, callbacks: AffordanceCallbacks) -> None:
        """Show the widget at ``match.range`` with ``match.value`` as initial value."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Hide the widget. Must not invoke any callback."""
        ...

    def current_value(self) -> Optional[float]:
        """Value currently shown, if the affordance can tell."""
        return None


class NudgeSession:
    """
    Live literal editing for one text buffer.

    Args:
        buffer: document being edited.
        persistence: saves the document after each transition.
        broadcast: sends a uniform value to connected renderers. Called
            synchronously; must not block.
        affordance: value-entry widget strategy.
        protocol: placeholder protocol (placeholder name, staging mode).
        file_path: returns the document path, or None for an unsaved
            document (then nothing is saved).
    """

    def __init__(
        self,
        buffer: TextBuffer,
        persistence: FilePersistence,
        broadcast: Callable[[float], None],
        affordance: NudgeAffordance,
        protocol: Optional[PlaceholderProtocol] = None,
        file_path: Optional[Callable[[], Optional[str]]] = None,
    ):
        self._buffer = buffer
        self._persistence = persistence
        self._broadcast = broadcast
        self._affordance = affordance
        self._protocol = protocol or PlaceholderProtocol()
        self._file_path = file_path or (lambda: None)

        self._state = SessionState.IDLE
        self._session: Optional[EditSession] = None

        # Optional observer of state transitions (status bar, tests)
        self.on_state_changed: Optional[Callable[[SessionState], None]] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def edit_session(self) -> Optional[EditSession]:
        return self._session

    @property
    def protocol(self) -> PlaceholderProtocol:
        return self._protocol

    def is_active(self) -> bool:
        return self._state is not SessionState.IDLE

    # --- Transitions ---

    def trigger(self) -> bool:
        """
        Nudge gesture.

        From IDLE: scan at the cursor/selection and open a session.
        While STAGED: commit the current value.

        Returns:
            True if a session was opened or committed.
        """
        if self._state is SessionState.STAGED:
            return self.commit(self._affordance.current_value())
        if self._state is not SessionState.IDLE:
            return False

        self._set_state(SessionState.SCANNING)
        try:
            match = scan_at_position_or_selection(
                self._buffer,
                self._buffer.get_cursor(),
                self._buffer.get_selection(),
            )
        except Exception as e:
            log.debug(f"[NudgeSession] Scan failed: {e}")
            match = None

        if match is None:
            self._set_state(SessionState.IDLE)
            return False

        try:
            staged_range = self._protocol.stage(self._buffer, match)
        except StageFailure as e:
            log.warn(f"[NudgeSession] Stage failed: {e}")
            self._set_state(SessionState.IDLE)
            return False

        self._session = EditSession(
            anchor_match=match,
            staged_range=staged_range,
            current_value=match.value,
            original_value=match.value,
            original_text=match.original_text,
            staged_text=self._protocol.staged_text(match),
        )
        self._set_state(SessionState.STAGED)
        log.info(f"[NudgeSession] Staged {match.original_text!r} at {match.range}")

        self._save()

        try:
            self._affordance.open(
                match,
                AffordanceCallbacks(
                    on_value_change=self.on_value_change,
                    on_confirm=self.commit,
                    on_cancel=self.cancel,
                ),
            )
        except Exception as e:
            log.error(e, "[NudgeSession] Failed to open value widget")
            self.cancel()
            return False

        self._send(self._protocol.broadcast_value(match.value, match.value))
        return True

    def on_value_change(self, value: float) -> None:
        """Live value from the affordance; broadcast without debounce."""
        if self._state is not SessionState.STAGED or self._session is None:
            return
        self._session.current_value = value
        self._send(self._protocol.broadcast_value(value, self._session.original_value))

    def commit(self, value: Optional[float] = None) -> bool:
        """
        Write the value into the source and close the session.

        Args:
            value: final value; defaults to the session's current value.

        Returns:
            True if the value was written.
        """
        if self._state is not SessionState.STAGED or self._session is None:
            return False
        session = self._session
        if value is not None:
            session.current_value = value

        self._set_state(SessionState.COMMITTING)
        try:
            text = self._protocol.commit(
                self._buffer,
                session.staged_range,
                session.current_value,
                session.anchor_match.preceding_operator,
                session.staged_text,
            )
        except CommitFailure as e:
            log.error(f"[NudgeSession] Commit failed: {e}")
            self._finish()
            return False

        log.info(f"[NudgeSession] Committed {session.original_text!r} -> {text!r}")
        self._save_and_place_cursor(session.staged_range.range_after_replace(text).end)
        self._finish()
        return True

    def cancel(self) -> bool:
        """
        Restore the original literal and close the session.

        No-op when no session is open.

        Returns:
            True if the original text was restored.
        """
        if self._state is not SessionState.STAGED or self._session is None:
            return False
        session = self._session

        self._set_state(SessionState.CANCELLING)
        try:
            self._protocol.cancel(
                self._buffer, session.staged_range, session.original_text, session.staged_text
            )
        except CancelFailure as e:
            log.error(f"[NudgeSession] Cancel failed: {e}")
            self._finish()
            return False

        log.info(f"[NudgeSession] Cancelled, restored {session.original_text!r}")
        self._send(self._protocol.broadcast_value(session.original_value, session.original_value))
        self._save_and_place_cursor(session.staged_range.range_after_replace(session.original_text).end)
        self._finish()
        return True

    def dispose(self) -> None:
        """Editor teardown: an open session is cancelled."""
        if self._state is SessionState.STAGED:
            self.cancel()

    # --- Internals ---

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        if self.on_state_changed is not None:
            try:
                self.on_state_changed(state)
            except Exception as e:
                log.error(e, "[NudgeSession] State observer failed")

    def _finish(self) -> None:
        self._session = None
        self._set_state(SessionState.IDLE)
        try:
            self._affordance.close()
        except Exception as e:
            log.error(e, "[NudgeSession] Failed to close value widget")

    def _send(self, value: float) -> None:
        try:
            self._broadcast(value)
        except Exception as e:
            log.error(e, "[NudgeSession] Broadcast failed")

    def _save_and_place_cursor(self, cursor: Position) -> None:
        """
        Save, then put the cursor at ``cursor``.

        ``cursor`` is a position in the buffer as it was before saving; if
        the formatter rewrote the buffer it is carried over to the new text.
        """
        written = self._buffer.get_text()
        self._save()
        try:
            current = self._buffer.get_text()
            if current != written:
                cursor = position_after_reformat(written, current, cursor)
            self._buffer.set_cursor(cursor)
        except NudgeError as e:
            log.debug(f"[NudgeSession] Cursor not restored: {e}")

    def _save(self) -> None:
        """Persist the buffer; failures are logged, never raised."""
        path = self._file_path()
        if not path:
            log.debug("[NudgeSession] Document has no path, not saving")
            return

        content = self._buffer.get_text()
        try:
            result = self._persistence.save(path, content)
            if not result.success:
                raise PersistenceFailure(path, result.error or "save rejected")
        except PersistenceFailure as e:
            # Buffer keeps the edit; only the disk copy is stale
            log.error(f"[NudgeSession] Save failed: {e}")
            return
        except Exception as e:
            log.error(e, f"[NudgeSession] Saving {path} raised")
            return

        formatted = result.formatted_content
        if formatted is None or formatted == content:
            return
        if self._state is SessionState.STAGED:
            # Reformatting would move the staged range; the commit/cancel
            # save that ends the session re-syncs buffer and disk.
            log.debug("[NudgeSession] Deferring formatted content until session ends")
            return
        try:
            self._buffer.set_text(formatted)
        except Exception as e:
            log.error(e, "[NudgeSession] Failed to apply formatted content")
