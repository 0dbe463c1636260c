"""
Floating value-entry widgets for the nudge session.

Two variants share one contract:
- NudgeBoxPopup: a small numeric text box, fine steps.
- SliderPopup: a slider plus a number field, ranged by the literal's magnitude.

Keys inside either popup:
    Up / Down      step the value (modifiers pick the step size)
    Enter          confirm
    Escape         cancel

Popups are plain Qt widgets. PopupAffordance adapts them to the
NudgeAffordance interface the session drives.
"""

from __future__ import annotations

import math
from typing import List, Optional

from PyQt6.QtCore import QPoint, Qt, pyqtSignal
from PyQt6.QtGui import QKeyEvent
from PyQt6.QtWidgets import QFrame, QHBoxLayout, QLineEdit, QSlider, QWidget

from shadernudge import log
from shadernudge.core.literal_scanner import parse_leading_float
from shadernudge.core.nudge_session import AffordanceCallbacks, NudgeAffordance
from shadernudge.core.placeholder import format_number
from shadernudge.core.text_range import LiteralMatch
from shadernudge.core.value_stepping import (
    ALT,
    CTRL,
    NUDGEBOX_LADDER,
    SHIFT,
    SLIDER_LADDER,
    StepLadder,
    round_half_away,
    slider_range_for,
    step_value,
)
from shadernudge.editor.qt_text_buffer import QtTextBuffer
from shadernudge.editor.widgets.spinbox import DoubleSpinBox


def modifier_names(modifiers: Qt.KeyboardModifier) -> List[str]:
    names = []
    if modifiers & Qt.KeyboardModifier.ControlModifier:
        names.append(CTRL)
    if modifiers & Qt.KeyboardModifier.ShiftModifier:
        names.append(SHIFT)
    if modifiers & Qt.KeyboardModifier.AltModifier:
        names.append(ALT)
    return names


class NudgePopup(QFrame):
    """Base class for value-entry popups."""

    value_changed = pyqtSignal(float)
    confirmed = pyqtSignal(float)
    cancelled = pyqtSignal()

    ladder: StepLadder = NUDGEBOX_LADDER

    def __init__(self, initial_value: float, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setAutoFillBackground(True)
        self._value = float(initial_value)

    def value(self) -> float:
        return self._value

    def set_value(self, value: float) -> None:
        """Set value from code; emits value_changed if it differs."""
        value = self._clamp(value)
        if value == self._value:
            self._show_value(value)
            return
        self._value = value
        self._show_value(value)
        self.value_changed.emit(value)

    def step(self, direction: int, modifiers: List[str] = ()) -> float:
        """Move the value one ladder step; returns the new value."""
        step = self.ladder.step_for(modifiers)
        self.set_value(step_value(self._value, direction, step))
        return self._value

    def confirm(self) -> None:
        self.confirmed.emit(self._value)

    def cancel(self) -> None:
        self.cancelled.emit()

    def focus_input(self) -> None:
        self.setFocus()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = event.key()
        if key in (Qt.Key.Key_Up, Qt.Key.Key_Down):
            self.step(1 if key == Qt.Key.Key_Up else -1, modifier_names(event.modifiers()))
            event.accept()
        elif key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            self.confirm()
            event.accept()
        elif key == Qt.Key.Key_Escape:
            self.cancel()
            event.accept()
        else:
            super().keyPressEvent(event)

    def _clamp(self, value: float) -> float:
        return value

    def _show_value(self, value: float) -> None:
        pass


class NudgeBoxPopup(NudgePopup):
    """
    Numeric text box.

    Every edit that parses as a number is a live value change. A confirm
    whose text does not parse is turned into a cancel.
    """

    ladder = NUDGEBOX_LADDER

    def __init__(self, initial_value: float, parent: Optional[QWidget] = None):
        super().__init__(initial_value, parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(2, 2, 2, 2)

        self._input = QLineEdit(format_number(initial_value))
        self._input.setFixedWidth(96)
        self._input.textEdited.connect(self._on_text_edited)
        layout.addWidget(self._input)

    @property
    def line_edit(self) -> QLineEdit:
        return self._input

    def focus_input(self) -> None:
        self._input.setFocus()
        self._input.selectAll()

    def confirm(self) -> None:
        parsed = parse_leading_float(self._input.text())
        if parsed is None or math.isnan(parsed):
            log.debug(f"[NudgeBoxPopup] {self._input.text()!r} is not a number, cancelling")
            self.cancel()
            return
        self._value = parsed
        self.confirmed.emit(parsed)

    def _on_text_edited(self, text: str) -> None:
        parsed = parse_leading_float(text)
        if parsed is None or math.isnan(parsed) or parsed == self._value:
            return
        self._value = parsed
        self.value_changed.emit(parsed)

    def _show_value(self, value: float) -> None:
        self._input.setText(format_number(value))


class SliderPopup(NudgePopup):
    """
    Horizontal slider with a number field.

    The range and resolution come from the original literal: small
    literals get a narrow, fine slider.
    """

    ladder = SLIDER_LADDER

    def __init__(self, initial_value: float, parent: Optional[QWidget] = None):
        super().__init__(initial_value, parent)
        self._range = slider_range_for(initial_value)
        self._ticks = int(round((self._range.maximum - self._range.minimum) / self._range.step))
        self._decimals = _decimals_for(self._range.step)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 2, 4, 2)

        self._slider = QSlider(Qt.Orientation.Horizontal)
        self._slider.setRange(0, self._ticks)
        self._slider.setFixedWidth(160)
        # Arrow keys belong to the popup's ladder, not the slider's single step
        self._slider.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self._slider.valueChanged.connect(self._on_slider_moved)
        layout.addWidget(self._slider)

        self._spinbox = DoubleSpinBox()
        self._spinbox.setFixedWidth(80)
        self._spinbox.valueChanged.connect(self._on_spinbox_changed)
        layout.addWidget(self._spinbox)

        self._show_value(self._value)

    @property
    def slider(self) -> QSlider:
        return self._slider

    @property
    def minimum(self) -> float:
        return self._range.minimum

    @property
    def maximum(self) -> float:
        return self._range.maximum

    def focus_input(self) -> None:
        self._spinbox.setFocus()

    def _clamp(self, value: float) -> float:
        return max(self._range.minimum, min(self._range.maximum, value))

    def _show_value(self, value: float) -> None:
        self._slider.blockSignals(True)
        self._slider.setValue(self._tick_for(value))
        self._slider.blockSignals(False)
        self._spinbox.blockSignals(True)
        self._spinbox.setValue(value)
        self._spinbox.blockSignals(False)

    def _tick_for(self, value: float) -> int:
        tick = round((value - self._range.minimum) / self._range.step)
        return max(0, min(self._ticks, tick))

    def _on_slider_moved(self, tick: int) -> None:
        value = round_half_away(self._range.minimum + tick * self._range.step, self._decimals)
        self.set_value(value)

    def _on_spinbox_changed(self, value: float) -> None:
        self.set_value(value)


def _decimals_for(step: float) -> int:
    return max(0, -int(math.floor(math.log10(step))))


class PopupAffordance(NudgeAffordance):
    """
    Shows a popup over the literal in a QPlainTextEdit.

    Subclasses choose the popup class.
    """

    popup_class = NudgePopup

    def __init__(self, buffer: QtTextBuffer):
        self._buffer = buffer
        self._popup: Optional[NudgePopup] = None

    @property
    def popup(self) -> Optional[NudgePopup]:
        return self._popup

    def open(self, match: LiteralMatch, callbacks: AffordanceCallbacks) -> None:
        self.close()
        editor = self._buffer.editor
        popup = self.popup_class(match.value, editor.viewport())
        popup.value_changed.connect(callbacks.on_value_change)
        popup.confirmed.connect(callbacks.on_confirm)
        popup.cancelled.connect(callbacks.on_cancel)

        # Placed under the literal; the literal itself stays visible
        rect = self._buffer.viewport_rect(match.range)
        popup.adjustSize()
        popup.move(QPoint(rect.left(), rect.bottom() + 2))
        popup.show()
        popup.raise_()
        popup.focus_input()
        self._popup = popup

    def close(self) -> None:
        popup = self._popup
        if popup is None:
            return
        self._popup = None
        popup.blockSignals(True)
        popup.hide()
        popup.deleteLater()
        self._buffer.editor.setFocus()

    def current_value(self) -> Optional[float]:
        if self._popup is None:
            return None
        return self._popup.value()


class NudgeBoxAffordance(PopupAffordance):
    popup_class = NudgeBoxPopup


class SliderAffordance(PopupAffordance):
    popup_class = SliderPopup
