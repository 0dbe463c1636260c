"""
QDoubleSpinBox for nudged values.

setKeyboardTracking(False) - valueChanged fires only on Enter / focus loss,
not on every keystroke. Arrow keys are left to the owning popup, which
steps by its own modifier ladder.
"""

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QKeyEvent
from PyQt6.QtWidgets import QAbstractSpinBox, QDoubleSpinBox

_POPUP_KEYS = (Qt.Key.Key_Up, Qt.Key.Key_Down, Qt.Key.Key_Return, Qt.Key.Key_Enter, Qt.Key.Key_Escape)


class DoubleSpinBox(QDoubleSpinBox):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.setKeyboardTracking(False)
        self.setButtonSymbols(QAbstractSpinBox.ButtonSymbols.NoButtons)
        self.setDecimals(4)
        self.setRange(-1e9, 1e9)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if event.key() in _POPUP_KEYS:
            event.ignore()
            return
        super().keyPressEvent(event)
