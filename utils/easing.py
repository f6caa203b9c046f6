"""
utils/easing.py — Easing curves for the timer lead-in animation.

All functions take a normalized time t in [0.0, 1.0] and return a
normalized value. Inputs outside the range are clamped first.
"""

from typing import Callable

EasingFunc = Callable[[float], float]


def _clamp01(t: float) -> float:
    return max(0.0, min(1.0, t))


def linear(t: float) -> float:
    """Linear interpolation (no easing)."""
    return _clamp01(t)


def ease_out_cubic(t: float) -> float:
    """Decelerate to zero velocity (cubic)."""
    t = _clamp01(t)
    return 1 - pow(1 - t, 3)

