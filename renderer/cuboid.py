"""
renderer/cuboid.py — Cuboid and flat tile primitives for Shadow Pieces.

The HUD shares one visual language: idle elements are flat tiles, the
element that matters right now (hovered option, picked option, the
filled part of the timer bar) is raised as a cuboid.

A cuboid is three filled polygons sharing edges:
    - Front face  (base color)
    - Top face    (lighter)
    - Right face  (darker)

(x, y) is always the top-left of the front face; `d` is the isometric
depth offset for the top and right faces.
"""

import pygame
from settings import COLOR, CUBOID_DEPTH
from utils.color import lighter, darker, RGBColor


def draw_cuboid(
    surface: pygame.Surface,
    rect: pygame.Rect,
    color: RGBColor,
    d: int = CUBOID_DEPTH,
    border_color: RGBColor | None = None,
) -> None:
    """Draw a raised cuboid whose front face is `rect`.

    Args:
        surface:      Surface to draw onto.
        rect:         Front face in native game coordinates.
        color:        Front face color; top and right faces are derived.
        d:            Isometric depth in pixels.
        border_color: Optional outline color for all three faces.
    """
    x, y, w, h = rect
    front = [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
    top   = [(x, y), (x + w, y), (x + w + d, y - d), (x + d, y - d)]
    right = [(x + w, y), (x + w + d, y - d), (x + w + d, y + h - d), (x + w, y + h)]

    pygame.draw.polygon(surface, lighter(color), top)
    pygame.draw.polygon(surface, darker(color), right)
    pygame.draw.polygon(surface, color, front)

    if border_color is not None:
        for face in (front, top, right):
            pygame.draw.polygon(surface, border_color, face, 1)


def draw_flat_tile(
    surface: pygame.Surface,
    rect: pygame.Rect,
    color: RGBColor,
    border_color: RGBColor | None = COLOR["tile_border"],
) -> None:
    """Draw a flat rectangle with an optional 1px border.

    Used for idle option buttons, empty result blocks and the header.

    Args:
        surface:      Surface to draw onto.
        rect:         Rectangle in native game coordinates.
        color:        Fill color.
        border_color: Outline color, or None for no outline.
    """
    pygame.draw.rect(surface, color, rect)
    if border_color is not None:
        pygame.draw.rect(surface, border_color, rect, 1)


def draw_cuboid_bar(
    surface: pygame.Surface,
    rect: pygame.Rect,
    fill: float,
    fill_color: RGBColor,
    d: int = CUBOID_DEPTH // 2,
) -> None:
    """Draw a horizontal bar whose filled part is a cuboid.

    Args:
        surface:    Surface to draw onto.
        rect:       Full extent of the bar.
        fill:       Fill ratio in [0.0, 1.0], filled from the left.
        fill_color: Color of the filled part.
        d:          Depth of the filled cuboid.
    """
    fill = max(0.0, min(1.0, fill))
    draw_flat_tile(surface, rect, COLOR["tile_border"])
    filled_w = int(rect.w * fill)
    if filled_w > 0:
        draw_cuboid(surface, pygame.Rect(rect.x, rect.y, filled_w, rect.h), fill_color, d=d)
