import pytest

pytest.importorskip("PyQt6.QtWidgets")

from PyQt6.QtCore import Qt
from PyQt6.QtTest import QTest
from PyQt6.QtWidgets import QPlainTextEdit

from shadernudge.core.nudge_session import NudgeSession, SessionState
from shadernudge.core.persistence import FilePersistence, SaveResult
from shadernudge.core.text_range import Position
from shadernudge.core.value_stepping import ALT, CTRL
from shadernudge.editor.qt_text_buffer import QtTextBuffer
from shadernudge.editor.widgets.nudge_widgets import (
    NudgeBoxAffordance,
    NudgeBoxPopup,
    SliderPopup,
    modifier_names,
)


class MemoryPersistence(FilePersistence):
    def __init__(self):
        self.saved = []

    def save(self, path, content):
        self.saved.append(content)
        return SaveResult(success=True)


def test_modifier_names():
    mods = Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.AltModifier
    assert modifier_names(mods) == [CTRL, ALT]
    assert modifier_names(Qt.KeyboardModifier.NoModifier) == []


def test_nudgebox_steps_with_modifier_ladder(qapp):
    popup = NudgeBoxPopup(1.0)
    values = []
    popup.value_changed.connect(values.append)

    assert popup.step(1) == 1.1
    assert popup.step(-1, [CTRL]) == 1.099
    assert popup.line_edit.text() == "1.099"
    assert values == [1.1, 1.099]


def test_nudgebox_arrow_keys(qapp):
    popup = NudgeBoxPopup(0.5)
    QTest.keyClick(popup, Qt.Key.Key_Up, Qt.KeyboardModifier.AltModifier)
    assert popup.value() == 0.51
    QTest.keyClick(popup, Qt.Key.Key_Down)
    assert popup.value() == 0.4


def test_nudgebox_typing_is_live(qapp):
    popup = NudgeBoxPopup(1.0)
    values = []
    popup.value_changed.connect(values.append)
    popup.line_edit.clear()
    QTest.keyClicks(popup.line_edit, "2.5")
    assert values == [2.0, 2.5]
    assert popup.value() == 2.5


def test_nudgebox_confirm_and_cancel(qapp):
    popup = NudgeBoxPopup(1.0)
    confirmed = []
    cancelled = []
    popup.confirmed.connect(confirmed.append)
    popup.cancelled.connect(lambda: cancelled.append(True))

    popup.line_edit.setText("3.25xyz")
    popup.confirm()
    assert confirmed == [3.25]

    popup.line_edit.setText("abc")
    popup.confirm()
    assert confirmed == [3.25]
    assert cancelled == [True]

    QTest.keyClick(popup, Qt.Key.Key_Escape)
    assert cancelled == [True, True]


def test_slider_range_and_clamping(qapp):
    popup = SliderPopup(0.5)
    assert (popup.minimum, popup.maximum) == (-2.0, 2.0)
    assert popup.slider.value() == 2500

    popup.set_value(5.0)
    assert popup.value() == 2.0

    popup.slider.setValue(3000)
    assert popup.value() == 1.0


def test_slider_steps_whole_units_by_default(qapp):
    popup = SliderPopup(3.0)
    values = []
    popup.value_changed.connect(values.append)
    popup.step(1)
    popup.step(1, [CTRL])
    assert values == [4.0, 4.1]


def test_affordance_drives_session(qapp):
    editor = QPlainTextEdit()
    editor.setPlainText("x = 1.0;")
    buffer = QtTextBuffer(editor)
    buffer.set_cursor(Position(1, 5))
    sent = []
    affordance = NudgeBoxAffordance(buffer)
    session = NudgeSession(buffer, MemoryPersistence(), sent.append, affordance)

    assert session.trigger() is True
    popup = affordance.popup
    assert popup is not None
    assert editor.toPlainText() == "x = u_inline1f;"

    popup.step(1)
    assert affordance.current_value() == 1.1
    popup.confirm()

    assert session.state is SessionState.IDLE
    assert affordance.popup is None
    assert editor.toPlainText() == "x = 1.1;"
    assert sent == [1.0, 1.1]
