"""
EditorWindow - minimal shader editor with live nudging.

A QPlainTextEdit for one GLSL file, a status bar showing whether a
renderer is attached, and the nudge controller on top.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PyQt6.QtGui import QAction, QCloseEvent, QFontDatabase, QKeySequence
from PyQt6.QtWidgets import QFileDialog, QLabel, QMainWindow, QMessageBox, QPlainTextEdit

from shadernudge import log
from shadernudge.core.persistence import FilePersistence
from shadernudge.editor.nudge_controller import NUDGEBOX_SHORTCUT, SLIDER_SHORTCUT, NudgeController
from shadernudge.editor.settings import EditorSettings, NudgeConfig
from shadernudge.live.renderer_link import RendererLink

SHADER_FILTER = "GLSL shaders (*.glsl *.frag *.vert *.comp *.geom *.tesc *.tese);;All files (*)"


class EditorWindow(QMainWindow):
    def __init__(
        self,
        link: RendererLink,
        persistence: FilePersistence,
        config: Optional[NudgeConfig] = None,
        settings: Optional[EditorSettings] = None,
    ):
        super().__init__()
        self._link = link
        self._persistence = persistence
        self._settings = settings or EditorSettings.instance()
        self._file_path: Optional[Path] = None

        self._editor = QPlainTextEdit()
        self._editor.setFont(QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont))
        self._editor.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        self.setCentralWidget(self._editor)

        self._connection_label = QLabel()
        self.statusBar().addPermanentWidget(self._connection_label)

        self.nudge_controller = NudgeController(
            self._editor,
            link,
            persistence,
            config,
            file_path=self.file_path,
            parent=self,
        )
        self.nudge_controller.connection_changed.connect(self._on_connection_changed)
        self.nudge_controller.state_changed.connect(self._on_nudge_state)
        self._on_connection_changed(link.is_connected())

        self._build_menus()
        self._update_title()

        geometry = self._settings.get_window_geometry()
        if geometry:
            self.restoreGeometry(geometry)
        else:
            self.resize(900, 700)

    @property
    def editor(self) -> QPlainTextEdit:
        return self._editor

    def file_path(self) -> Optional[str]:
        return str(self._file_path) if self._file_path is not None else None

    # --- Files ---

    def open_file(self, path: Path | str) -> bool:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.error(f"[EditorWindow] Failed to open {path}: {e}")
            QMessageBox.warning(self, "Open failed", f"Could not open {path}:\n{e}")
            return False

        self.nudge_controller.cancel()
        self._editor.setPlainText(text)
        self._file_path = path
        self._settings.set_last_file_path(path)
        self._update_title()
        log.info(f"[EditorWindow] Opened {path}")
        return True

    def save_file(self) -> bool:
        if self._file_path is None:
            return self._save_file_as()
        result = self._persistence.save(str(self._file_path), self._editor.toPlainText())
        if not result.success:
            QMessageBox.warning(self, "Save failed", result.error or "Unknown error")
            return False
        if result.formatted_content is not None and result.formatted_content != self._editor.toPlainText():
            self.nudge_controller.buffer.set_text(result.formatted_content)
        self.statusBar().showMessage(f"Saved {self._file_path}", 3000)
        return True

    def _open_file_dialog(self) -> None:
        start_dir = str(self._file_path.parent) if self._file_path else ""
        path, _ = QFileDialog.getOpenFileName(self, "Open shader", start_dir, SHADER_FILTER)
        if path:
            self.open_file(path)

    def _save_file_as(self) -> bool:
        path, _ = QFileDialog.getSaveFileName(self, "Save shader", "", SHADER_FILTER)
        if not path:
            return False
        self._file_path = Path(path)
        self._settings.set_last_file_path(path)
        self._update_title()
        return self.save_file()

    # --- UI ---

    def _build_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction("&Open...", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self._open_file_dialog)
        file_menu.addAction(open_action)

        save_action = QAction("&Save", self)
        save_action.setShortcut(QKeySequence.StandardKey.Save)
        save_action.triggered.connect(self.save_file)
        file_menu.addAction(save_action)

        file_menu.addSeparator()
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        # Shortcuts live on the controller; menu shows them as hints only
        nudge_menu = self.menuBar().addMenu("&Nudge")
        box_action = QAction(f"Nudge box\t{NUDGEBOX_SHORTCUT}", self)
        box_action.triggered.connect(self.nudge_controller.trigger_nudgebox)
        nudge_menu.addAction(box_action)

        slider_action = QAction(f"Slider\t{SLIDER_SHORTCUT}", self)
        slider_action.triggered.connect(self.nudge_controller.trigger_slider)
        nudge_menu.addAction(slider_action)

    def _update_title(self) -> None:
        name = self._file_path.name if self._file_path else "untitled"
        self.setWindowTitle(f"{name} - ShaderNudge")

    def _on_connection_changed(self, connected: bool) -> None:
        status = self._link.get_connection_status()
        if not status["is_server_running"]:
            self._connection_label.setText("Renderer: channel stopped")
        elif connected:
            self._connection_label.setText(f"Renderer: connected ({status['client_count']})")
        else:
            self._connection_label.setText("Renderer: waiting")

    def _on_nudge_state(self, state: str) -> None:
        if state == "staged":
            self.statusBar().showMessage("Nudging: Up/Down to step, Enter to commit, Esc to cancel")
        elif state == "idle":
            self.statusBar().clearMessage()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.nudge_controller.dispose()
        self._settings.set_window_geometry(self.saveGeometry())
        self._settings.sync()
        super().closeEvent(event)
