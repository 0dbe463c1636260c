"""
NudgeController - wires live nudging into a QPlainTextEdit.

Owns one NudgeSession per affordance variant over the same document:
- Alt+X         numeric nudge box (staging mode from config, REPLACE by default)
- Ctrl+Shift+I  slider (OFFSET staging: the uniform streams an offset)

Only one of the two may be open at a time. Pressing the same shortcut
again while its session is open commits.
"""

from __future__ import annotations

from typing import Callable, Optional

from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QKeySequence, QShortcut
from PyQt6.QtWidgets import QPlainTextEdit

from shadernudge import log
from shadernudge.core.nudge_session import NudgeSession, SessionState
from shadernudge.core.persistence import FilePersistence
from shadernudge.core.placeholder import PlaceholderProtocol, StagingMode
from shadernudge.editor.qt_text_buffer import QtTextBuffer
from shadernudge.editor.settings import VARIANT_SLIDER, NudgeConfig
from shadernudge.editor.widgets.nudge_widgets import NudgeBoxAffordance, SliderAffordance
from shadernudge.live.renderer_link import RendererLink

NUDGEBOX_SHORTCUT = "Alt+X"
SLIDER_SHORTCUT = "Ctrl+Shift+I"


class NudgeController(QObject):
    # Emitted on the GUI thread, whatever thread the link reported from
    connection_changed = pyqtSignal(bool)
    state_changed = pyqtSignal(str)

    def __init__(
        self,
        editor: QPlainTextEdit,
        link: RendererLink,
        persistence: FilePersistence,
        config: Optional[NudgeConfig] = None,
        file_path: Optional[Callable[[], Optional[str]]] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._config = config or NudgeConfig()
        self._link = link
        self._buffer = QtTextBuffer(editor)

        self._nudgebox_affordance = NudgeBoxAffordance(self._buffer)
        self._slider_affordance = SliderAffordance(self._buffer)

        self._nudgebox_session = NudgeSession(
            self._buffer,
            persistence,
            link.send_uniform_value,
            self._nudgebox_affordance,
            PlaceholderProtocol(self._config.placeholder, self._config.staging_mode),
            file_path,
        )
        self._slider_session = NudgeSession(
            self._buffer,
            persistence,
            link.send_uniform_value,
            self._slider_affordance,
            PlaceholderProtocol(self._config.placeholder, StagingMode.OFFSET),
            file_path,
        )
        for session in (self._nudgebox_session, self._slider_session):
            session.on_state_changed = self._on_session_state

        self._nudgebox_shortcut = QShortcut(QKeySequence(NUDGEBOX_SHORTCUT), editor)
        self._nudgebox_shortcut.setContext(Qt.ShortcutContext.WindowShortcut)
        self._nudgebox_shortcut.activated.connect(self.trigger_nudgebox)

        self._slider_shortcut = QShortcut(QKeySequence(SLIDER_SHORTCUT), editor)
        self._slider_shortcut.setContext(Qt.ShortcutContext.WindowShortcut)
        self._slider_shortcut.activated.connect(self.trigger_slider)

        self._unsubscribe_connection = link.on_connection_change(self.connection_changed.emit)

    @property
    def buffer(self) -> QtTextBuffer:
        return self._buffer

    @property
    def nudgebox_session(self) -> NudgeSession:
        return self._nudgebox_session

    @property
    def slider_session(self) -> NudgeSession:
        return self._slider_session

    @property
    def nudgebox_affordance(self) -> NudgeBoxAffordance:
        return self._nudgebox_affordance

    @property
    def slider_affordance(self) -> SliderAffordance:
        return self._slider_affordance

    def active_session(self) -> Optional[NudgeSession]:
        for session in (self._nudgebox_session, self._slider_session):
            if session.is_active():
                return session
        return None

    def trigger(self) -> bool:
        """Nudge with the configured default variant."""
        if self._config.variant == VARIANT_SLIDER:
            return self.trigger_slider()
        return self.trigger_nudgebox()

    def trigger_nudgebox(self) -> bool:
        return self._trigger(self._nudgebox_session)

    def trigger_slider(self) -> bool:
        return self._trigger(self._slider_session)

    def cancel(self) -> None:
        session = self.active_session()
        if session is not None:
            session.cancel()

    def dispose(self) -> None:
        """Cancel any open session and detach from the link."""
        self._nudgebox_session.dispose()
        self._slider_session.dispose()
        if self._unsubscribe_connection is not None:
            self._unsubscribe_connection()
            self._unsubscribe_connection = None

    def _trigger(self, session: NudgeSession) -> bool:
        active = self.active_session()
        if active is not None and active is not session:
            log.debug("[NudgeController] Another nudge is open, ignoring trigger")
            return False
        return session.trigger()

    def _on_session_state(self, state: SessionState) -> None:
        self.state_changed.emit(state.value)
