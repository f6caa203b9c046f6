"""
utils/color.py — Color helpers for Shadow Pieces.

renderer/cuboid.py derives the cuboid face shades from one base color,
renderer/ui.py pulses the timer bar in the last seconds, and
renderer/reveal.py builds the opaque RGBA fills for the puzzle cards.
"""

from typing import Tuple

RGBColor = Tuple[int, int, int]
RGBAColor = Tuple[int, int, int, int]


def clamp(value: int, lo: int = 0, hi: int = 255) -> int:
    """Clamp an integer to [lo, hi].

    Args:
        value: Input value.
        lo:    Lower bound (inclusive).
        hi:    Upper bound (inclusive).

    Returns:
        value limited to the range.
    """
    return max(lo, min(hi, value))


def shade(color: RGBColor, amount: int) -> RGBColor:
    """Shift every channel by a signed amount.

    Args:
        color:  Base RGB tuple.
        amount: Added to each channel; negative darkens.

    Returns:
        New RGB tuple with every channel clamped to a valid byte.
    """
    return tuple(clamp(c + amount) for c in color)


def lighter(color: RGBColor, amount: int = 40) -> RGBColor:
    """Return a lighter version of color, used for the cuboid top face.

    Args:
        color:  Base RGB tuple.
        amount: How much to brighten each channel.

    Returns:
        Brightened RGB tuple.
    """
    return shade(color, amount)


def darker(color: RGBColor, amount: int = 40) -> RGBColor:
    """Return a darker version of color, used for the cuboid right face.

    Args:
        color:  Base RGB tuple.
        amount: How much to darken each channel.

    Returns:
        Darkened RGB tuple.
    """
    return shade(color, -amount)


def with_opacity(color: RGBColor, opacity: float) -> RGBAColor:
    """Return color as RGBA with opacity in [0.0, 1.0] mapped to 0–255.

    Args:
        color:   Base RGB tuple.
        opacity: 0.0 is fully transparent, 1.0 fully opaque. Clamped.

    Returns:
        An RGBA tuple for drawing on SRCALPHA surfaces.
    """
    alpha = clamp(int(round(255 * max(0.0, min(1.0, opacity)))))
    return (color[0], color[1], color[2], alpha)


def lerp_color(a: RGBColor, b: RGBColor, t: float) -> RGBColor:
    """Linearly interpolate between two RGB colors.

    Args:
        a: Start color (t = 0).
        b: End color (t = 1).
        t: Interpolation factor, clamped to [0, 1].

    Returns:
        Interpolated RGB tuple.
    """
    t = max(0.0, min(1.0, t))
    return tuple(clamp(int(x + (y - x) * t)) for x, y in zip(a, b))
