"""
renderer/reveal.py — Puzzle and reveal transforms for Shadow Pieces.

Everything in the first half of this module is a pure function of
(source image, mode, output size) that returns a new pygame.Surface. None
of them touch the display, so they run headless and can be compared
pixel by pixel in tests:

    render(src, mode, size)  — the puzzle view for the given RenderMode
    reveal(src, size)        — the original picture, contain-fitted
    placeholder(size)        — blank card used when an image failed to load

CENTER_TILE
    Crop the largest centered square, split it 3x3 and scale only the
    middle cell up to the full canvas. Thin border, faint vignette.

SILHOUETTE
    Contain-fit the picture, then stencil it: every pixel keeps its alpha
    but its color becomes the fixed silhouette color. A ground shadow and
    a vignette sit on top.

PuzzleView, at the bottom, is the stateful part: it caches the decoded
source for the current round and re-runs the same transform whenever the
output size changes or the round is revealed. It never fetches anything.
"""

from __future__ import annotations
from enum import Enum, auto

import numpy as np
import pygame

from settings import (
    BORDER_ALPHA, BORDER_WIDTH, CENTER_TILE_DIVISIONS, CENTER_TILE_VIGNETTE,
    COLOR, PUZZLE_MIN_SIZE, PUZZLE_SIZE, SHADOW_ALPHA, SHADOW_CENTER_Y,
    SHADOW_H, SHADOW_W, SILHOUETTE_VIGNETTE,
)
from utils.color import RGBColor, with_opacity
from utils.scaler import fit_contain


WHITE = (255, 255, 255, 255)


class RenderMode(Enum):
    """Which puzzle transform a game uses."""
    CENTER_TILE = auto()
    SILHOUETTE  = auto()


# ── Helpers ───────────────────────────────────────────────────────────────────

def as_rgba(src: pygame.Surface) -> pygame.Surface:
    """Return a 32-bit per-pixel-alpha copy of src.

    Works without a display mode, unlike Surface.convert_alpha(), and
    normalises palette or 24-bit images so smoothscale accepts them.
    Sources that already carry per-pixel alpha are copied byte for byte.

    Args:
        src: Any decoded surface. Never modified.

    Returns:
        A new SRCALPHA surface of the same size.
    """
    if src.get_bitsize() == 32 and src.get_flags() & pygame.SRCALPHA:
        return src.copy()
    out = pygame.Surface(src.get_size(), pygame.SRCALPHA, 32)
    out.blit(src, (0, 0))
    return out


def _canvas(size: int) -> pygame.Surface:
    return pygame.Surface((size, size), pygame.SRCALPHA, 32)


def _scaled(src: pygame.Surface, size: tuple[int, int]) -> pygame.Surface:
    """Smoothscale src to size, always returning a 32-bit SRCALPHA surface.

    Args:
        src:  Source surface. Never modified.
        size: Target (width, height) in pixels.

    Returns:
        A new surface with per-pixel alpha.
    """
    if src.get_bitsize() != 32 or not src.get_flags() & pygame.SRCALPHA:
        src = as_rgba(src)
    return pygame.transform.smoothscale(src, size)


def _place(canvas: pygame.Surface, src: pygame.Surface, topleft: tuple[int, int]) -> None:
    """Copy src onto a fully transparent canvas without alpha blending.

    A normal blit onto alpha 0 rounds both color and alpha down. Taking the
    per-channel maximum against zeros copies the pixels exactly.
    """
    canvas.blit(src, topleft, special_flags=pygame.BLEND_RGBA_MAX)


def _paste_over(card: pygame.Surface, src: pygame.Surface, topleft: tuple[int, int]) -> None:
    """Composite src over an opaque card with exact straight-alpha math.

    Args:
        card:    Opaque 32-bit SRCALPHA surface, modified in place.
        src:     32-bit SRCALPHA surface that fits inside card at topleft.
        topleft: Destination position on card.
    """
    x, y = topleft
    w, h = src.get_size()
    a = pygame.surfarray.array_alpha(src)[:, :, None] / 255.0
    top = pygame.surfarray.array3d(src)

    rgb = pygame.surfarray.pixels3d(card)
    region = rgb[x:x + w, y:y + h]
    region[:] = np.rint(top * a + region * (1.0 - a)).astype(np.uint8)
    del region, rgb


def _darken(surface: pygame.Surface, opacity: np.ndarray) -> None:
    """Composite black over the surface in place, per pixel.

    This is the "over" operator with a black source, done on the pixel
    arrays so partially transparent pixels keep their own color and only
    gain as much alpha as the black layer adds.

    Args:
        surface: 32-bit SRCALPHA surface to darken.
        opacity: Float array shaped (width, height), 0 leaves a pixel
                 untouched and 1 turns it opaque black.
    """
    keep = 1.0 - np.clip(opacity, 0.0, 1.0)
    rgb = pygame.surfarray.pixels3d(surface)
    alpha = pygame.surfarray.pixels_alpha(surface)

    dst_a = alpha / 255.0
    kept_a = dst_a * keep
    out_a = (1.0 - keep) + kept_a
    ratio = np.divide(kept_a, out_a, out=np.zeros_like(out_a), where=out_a > 0)

    rgb[:] = np.rint(rgb * ratio[:, :, None]).astype(np.uint8)
    alpha[:] = np.rint(out_a * 255).astype(np.uint8)
    del rgb, alpha   # release the surface lock


def _shape_mask(size: tuple[int, int], draw) -> np.ndarray:
    """Rasterise a pygame.draw call into a 0–1 coverage array.

    Args:
        size: (width, height) of the mask.
        draw: Callable taking a layer surface and drawing opaque white on it.

    Returns:
        Float array shaped (width, height).
    """
    layer = pygame.Surface(size, pygame.SRCALPHA, 32)
    draw(layer)
    return pygame.surfarray.array_alpha(layer) / 255.0


def _draw_border(surface: pygame.Surface) -> None:
    """Stroke a thin translucent black frame around the surface edge."""
    mask = _shape_mask(
        surface.get_size(),
        lambda layer: pygame.draw.rect(layer, WHITE, layer.get_rect(), BORDER_WIDTH),
    )
    _darken(surface, mask * BORDER_ALPHA)


def _apply_vignette(surface: pygame.Surface, inner: float, outer: float, strength: float) -> None:
    """Darken the surface towards its corners with a radial gradient.

    Args:
        surface:  Square canvas to darken in place.
        inner:    Radius (as a ratio of the short side) where darkening starts.
        outer:    Radius ratio where darkening reaches full strength.
        strength: Opacity of black at and beyond the outer radius, 0–1.
    """
    w, h = surface.get_size()
    short = min(w, h)
    r0, r1 = short * inner, short * outer

    xs = np.arange(w, dtype=np.float32) + 0.5 - w / 2
    ys = np.arange(h, dtype=np.float32) + 0.5 - h / 2
    dist = np.sqrt(xs[:, None] ** 2 + ys[None, :] ** 2)
    ramp = np.clip((dist - r0) / max(r1 - r0, 1e-6), 0.0, 1.0)
    _darken(surface, ramp * strength)


def _stencil(surface: pygame.Surface, color: RGBColor) -> None:
    """Replace every pixel's color with `color`, keeping its alpha."""
    rgb = pygame.surfarray.pixels3d(surface)
    rgb[:] = color
    del rgb


def _draw_ground_shadow(surface: pygame.Surface) -> None:
    """Darken a flat ellipse under the figure, centered at SHADOW_CENTER_Y."""
    w, h = surface.get_size()
    shadow_w = int(w * SHADOW_W)
    shadow_h = max(1, int(h * SHADOW_H))
    rect = pygame.Rect(0, 0, shadow_w, shadow_h)
    rect.center = (w // 2, int(h * SHADOW_CENTER_Y))

    mask = _shape_mask((w, h), lambda layer: pygame.draw.ellipse(layer, WHITE, rect))
    _darken(surface, mask * SHADOW_ALPHA)


# ── Transforms ────────────────────────────────────────────────────────────────

def center_tile_rect(src_w: int, src_h: int) -> pygame.Rect:
    """Return the source rect of the middle cell of the centered square.

    The largest centered square is split CENTER_TILE_DIVISIONS per side;
    the returned cell is the one in the exact middle.
    """
    side = min(src_w, src_h)
    x0 = (src_w - side) // 2
    y0 = (src_h - side) // 2
    tile = max(1, side // CENTER_TILE_DIVISIONS)
    return pygame.Rect(x0 + (side - tile) // 2, y0 + (side - tile) // 2, tile, tile)


def render_center_tile(src: pygame.Surface, size: int) -> pygame.Surface:
    """Scale the middle cell up to the full canvas, then frame and vignette it.

    Args:
        src:  Decoded source image.
        size: Output side length in pixels.

    Returns:
        A new size x size SRCALPHA surface.
    """
    cell = src.subsurface(center_tile_rect(*src.get_size())).copy()
    out = _scaled(cell, (size, size))
    _draw_border(out)
    _apply_vignette(out, *CENTER_TILE_VIGNETTE)
    return out


def render_silhouette(src: pygame.Surface, size: int) -> pygame.Surface:
    """Contain-fit src, stencil it and add the ground shadow, vignette and border.

    Args:
        src:  Decoded source image.
        size: Output side length in pixels.

    Returns:
        A new size x size SRCALPHA surface; transparent pixels stay transparent.
    """
    out = _canvas(size)
    dest = fit_contain(src.get_width(), src.get_height(), size, size)
    _place(out, _scaled(src, dest.size), dest.topleft)
    _stencil(out, COLOR["silhouette"])
    _draw_ground_shadow(out)
    _apply_vignette(out, *SILHOUETTE_VIGNETTE)
    _draw_border(out)
    return out


def render(src: pygame.Surface, mode: RenderMode, size: int) -> pygame.Surface:
    """Return the puzzle view of src for the given mode.

    Args:
        src:  Decoded source image. Never modified.
        mode: RenderMode selecting the transform.
        size: Output side length in pixels. The output is square.

    Returns:
        A new size x size per-pixel-alpha Surface.
    """
    size = max(PUZZLE_MIN_SIZE, int(size))
    if mode is RenderMode.CENTER_TILE:
        return render_center_tile(src, size)
    if mode is RenderMode.SILHOUETTE:
        return render_silhouette(src, size)
    raise ValueError(f"unknown render mode {mode!r}")


def reveal(src: pygame.Surface, size: int) -> pygame.Surface:
    """Return the unmodified picture contain-fitted on a light card."""
    size = max(PUZZLE_MIN_SIZE, int(size))
    out = _canvas(size)
    out.fill(with_opacity(COLOR["reveal_bg"], 1.0))
    dest = fit_contain(src.get_width(), src.get_height(), size, size)
    _paste_over(out, _scaled(src, dest.size), dest.topleft)
    _draw_border(out)
    return out


def placeholder(size: int) -> pygame.Surface:
    """Blank card shown while an image is loading or after it failed."""
    size = max(PUZZLE_MIN_SIZE, int(size))
    out = _canvas(size)
    out.fill(with_opacity(COLOR["placeholder"], 1.0))
    _draw_border(out)
    return out


# ── Stateful view ─────────────────────────────────────────────────────────────

class PuzzleView:
    """Cached source plus the last rendered frame for the current round.

    Attributes:
        mode:          RenderMode used for the unrevealed puzzle.
        size:          Current output side length.
        revealed:      True once the round has been resolved.
        render_count:  Number of transforms run. Useful to assert that
                       repeated reads do not re-render.
        _source:       Decoded source for the current round, or None.
        _surface:      Last rendered frame.
    """

    def __init__(self, mode: RenderMode, size: int = PUZZLE_SIZE) -> None:
        self.mode = mode
        self.size = max(PUZZLE_MIN_SIZE, int(size))
        self.revealed = False
        self.render_count = 0
        self._source: pygame.Surface | None = None
        self._surface: pygame.Surface | None = None

    @property
    def has_source(self) -> bool:
        return self._source is not None

    @property
    def surface(self) -> pygame.Surface:
        """Current frame. Rendered lazily on first access."""
        if self._surface is None:
            self._rerender()
        return self._surface

    def reset(self) -> None:
        """Forget the current round's picture. Call when a new stage begins."""
        self._source = None
        self.revealed = False
        self._surface = None

    def set_source(self, src: pygame.Surface | None) -> None:
        """Install the decoded picture for the current round and re-render."""
        self._source = src
        self._rerender()

    def show_reveal(self) -> None:
        """Switch to the original picture."""
        if not self.revealed:
            self.revealed = True
            self._rerender()

    def resize(self, size: int) -> None:
        """Re-run the current transform at a new size from the cached source."""
        size = max(PUZZLE_MIN_SIZE, int(size))
        if size != self.size:
            self.size = size
            self._rerender()

    def _rerender(self) -> None:
        self.render_count += 1
        if self._source is None:
            self._surface = placeholder(self.size)
        elif self.revealed:
            self._surface = reveal(self._source, self.size)
        else:
            self._surface = render(self._source, self.mode, self.size)
