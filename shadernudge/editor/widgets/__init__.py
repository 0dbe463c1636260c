"""Editor widgets package."""

from shadernudge.editor.widgets.nudge_widgets import (
    NudgeBoxAffordance,
    NudgeBoxPopup,
    NudgePopup,
    PopupAffordance,
    SliderAffordance,
    SliderPopup,
)
from shadernudge.editor.widgets.spinbox import DoubleSpinBox

__all__ = [
    "DoubleSpinBox",
    "NudgeBoxAffordance",
    "NudgeBoxPopup",
    "NudgePopup",
    "PopupAffordance",
    "SliderAffordance",
    "SliderPopup",
]
