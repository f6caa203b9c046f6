"""
utils/scaler.py — Resolution scaling and contain-fit math for Shadow Pieces.

The game is designed at 360x640 (9:16 vertical). Scaler letterboxes that
base resolution into any window size without stretching the layout.
fit_contain() is the same math for a single image: the largest box with
the source's aspect ratio that fits inside a destination, centered. The
puzzle transforms in renderer/reveal.py use it for silhouette and reveal.

Usage:
    scaler = Scaler(window_w, window_h)
    scaler.blit(window_surface, game_surface)
    game_x, game_y = scaler.to_game(mouse_x, mouse_y)

    rect = fit_contain(800, 600, 240, 240)   # Rect(0, 30, 240, 180)
"""

import pygame
from settings import SCREEN_W, SCREEN_H


def fit_contain(src_w: int, src_h: int, dst_w: int, dst_h: int) -> pygame.Rect:
    """Return where a src_w x src_h image lands when contain-fitted into dst.

    Aspect ratio is preserved and the result is centered. Sizes are
    rounded to whole pixels and never smaller than 1.

    Args:
        src_w: Source width in pixels.
        src_h: Source height in pixels.
        dst_w: Destination width in pixels.
        dst_h: Destination height in pixels.

    Returns:
        pygame.Rect in destination coordinates.
    """
    src_ratio = src_w / src_h
    dst_ratio = dst_w / dst_h
    w, h = dst_w, dst_h
    if src_ratio > dst_ratio:
        h = round(dst_w / src_ratio)
    else:
        w = round(dst_h * src_ratio)
    w, h = max(1, w), max(1, h)
    return pygame.Rect(round((dst_w - w) / 2), round((dst_h - h) / 2), w, h)


class Scaler:
    """Letterboxes the native game resolution into an arbitrary window.

    Attributes:
        window_w:   Actual window width in pixels.
        window_h:   Actual window height in pixels.
        scale:      Uniform scale factor applied to the game surface.
        offset_x:   Horizontal letterbox offset in window pixels.
        offset_y:   Vertical letterbox offset in window pixels.
        dest_rect:  pygame.Rect describing where the scaled game surface lands.
    """

    def __init__(self, window_w: int, window_h: int) -> None:
        """Initialise the scaler for the given window size.

        Args:
            window_w: Initial window width in pixels.
            window_h: Initial window height in pixels.
        """
        self.window_w = window_w
        self.window_h = window_h
        self._compute(window_w, window_h)

    def _compute(self, window_w: int, window_h: int) -> None:
        """Recalculate scale and offsets. Called on init and on resize.

        Args:
            window_w: Window width in pixels.
            window_h: Window height in pixels.
        """
        self.dest_rect = fit_contain(SCREEN_W, SCREEN_H, max(1, window_w), max(1, window_h))
        self.scale = self.dest_rect.w / SCREEN_W
        self.offset_x = self.dest_rect.x
        self.offset_y = self.dest_rect.y

    def update(self, window_w: int, window_h: int) -> None:
        """Recompute scaling when the window is resized.

        Call this from the main loop whenever a VIDEORESIZE event fires.

        Args:
            window_w: New window width in pixels.
            window_h: New window height in pixels.
        """
        self.window_w = window_w
        self.window_h = window_h
        self._compute(window_w, window_h)

    def blit(self, window_surface: pygame.Surface, game_surface: pygame.Surface) -> None:
        """Scale and blit the game surface onto the window surface.

        Fills letterbox bars with black before blitting so they're always clean.

        Args:
            window_surface: The pygame display surface.
            game_surface:   The native-resolution surface to scale up.
        """
        window_surface.fill((0, 0, 0))
        scaled = pygame.transform.scale(game_surface, self.dest_rect.size)
        window_surface.blit(scaled, self.dest_rect.topleft)

    def to_game(self, window_x: int, window_y: int) -> tuple[int, int]:
        """Convert window pixel coordinates to native game coordinates.

        Values may be negative or exceed screen bounds if the cursor is
        inside a letterbox bar. Callers should guard with in_bounds().

        Args:
            window_x: X coordinate in window pixels.
            window_y: Y coordinate in window pixels.

        Returns:
            (game_x, game_y) in native game pixels.
        """
        game_x = (window_x - self.offset_x) / self.scale
        game_y = (window_y - self.offset_y) / self.scale
        return int(game_x), int(game_y)

    def in_bounds(self, window_x: int, window_y: int) -> bool:
        """Check whether a window coordinate falls inside the game viewport.

        Args:
            window_x: X coordinate in window pixels.
            window_y: Y coordinate in window pixels.

        Returns:
            True if the point is inside dest_rect.
        """
        return self.dest_rect.collidepoint(window_x, window_y)

    def to_window_rect(self, rect: pygame.Rect) -> pygame.Rect:
        """Convert a rect in native game coordinates to window pixels.

        Used to place the puzzle picture, which is rendered at window
        resolution, exactly over its slot in the scaled layout.

        Args:
            rect: Rect in native game coordinates.

        Returns:
            The same area in window pixels.
        """
        return pygame.Rect(
            self.offset_x + round(rect.x * self.scale),
            self.offset_y + round(rect.y * self.scale),
            round(rect.w * self.scale),
            round(rect.h * self.scale),
        )
