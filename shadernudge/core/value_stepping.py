"""
Keyboard stepping of nudged values.

Arrow keys move the value by a step picked from a small ladder by the held
modifiers. The stepped value is rounded to the precision of the step, so
repeated 0.1 steps give 0.3 and not 0.30000000000000004.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence, Tuple

CTRL = "ctrl"
SHIFT = "shift"
ALT = "alt"


@dataclass(frozen=True)
class StepLadder:
    """
    Step sizes selected by modifier keys.

    ``modifier_steps`` is checked in order; the first held modifier wins.
    """

    default_step: float
    modifier_steps: Tuple[Tuple[str, float], ...]

    def step_for(self, modifiers: Sequence[str] = ()) -> float:
        held = set(modifiers)
        for modifier, step in self.modifier_steps:
            if modifier in held:
                return step
        return self.default_step


# Numeric box: fine-grained by default
NUDGEBOX_LADDER = StepLadder(0.1, ((ALT, 0.01), (CTRL, 0.001), (SHIFT, 0.0001)))

# Slider: whole units by default
SLIDER_LADDER = StepLadder(1.0, ((CTRL, 0.1), (SHIFT, 0.01), (ALT, 0.001)))


def decimal_places_for_step(step: float) -> int:
    if step >= 1:
        return 0
    if step >= 0.1:
        return 1
    if step >= 0.01:
        return 2
    if step >= 0.001:
        return 3
    return 4


def round_half_away(value: float, places: int) -> float:
    """Round like toFixed(): halves go away from zero."""
    if math.isnan(value) or math.isinf(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def step_value(value: float, direction: int, step: float) -> float:
    """
    Move ``value`` one step up (direction > 0) or down.

    The result is rounded to the decimal precision of ``step``.
    """
    sign = 1 if direction > 0 else -1
    return round_half_away(value + sign * step, decimal_places_for_step(step))


@dataclass(frozen=True)
class SliderRange:
    minimum: float
    maximum: float
    step: float


def slider_range_for(original_value: float) -> SliderRange:
    """Slider bounds and resolution suited to the magnitude of a literal."""
    magnitude = abs(original_value)
    if magnitude == 0:
        return SliderRange(-1.0, 1.0, 0.01)
    if magnitude < 1:
        return SliderRange(-2.0, 2.0, 0.001)
    if magnitude < 10:
        return SliderRange(-20.0, 20.0, 0.01)
    return SliderRange(-100.0, 100.0, 0.1)
