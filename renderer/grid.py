"""
renderer/grid.py — Option button layout and hit detection for Shadow Pieces.

OptionGrid lays the current round's options out as text buttons under the
puzzle picture. It handles:
    - Choosing the column count from the option count
    - Computing button rects inside the options region
    - Hit detection against native game coordinates
    - Drawing each button for its state (idle, hovered, picked, answer)

The grid holds no game state. The engine's snapshot tells it which option
is hovered, which one was picked, and which one was the answer.
"""

from __future__ import annotations
import pygame

from settings import (
    SCREEN_W, SCREEN_H,
    OPTION_TILE_H, OPTION_PADDING,
    BOTTOM_PANEL_H, COLOR,
)
from renderer.cuboid import draw_cuboid, draw_flat_tile
from stages.entity import Entity

_MARGIN_X = 16


def option_columns(count: int) -> int:
    """Pick the column count for a stage's options.

    Args:
        count: Number of options in the round.

    Returns:
        4 from eight options, 3 from six, otherwise 2.
    """
    if count >= 8:
        return 4
    if count >= 6:
        return 3
    return 2


class OptionGrid:
    """Clickable grid of option buttons.

    Attributes:
        options:  Options in display order.
        cols:     Number of columns.
        rows:     Number of rows.
        top:      Y pixel where the grid region starts.
        tile_w:   Button width in pixels.
        tile_h:   Button height in pixels.
        padding:  Gap between buttons.
    """

    def __init__(
        self,
        options: tuple[Entity, ...],
        top: int,
        tile_h: int = OPTION_TILE_H,
        padding: int = OPTION_PADDING,
    ) -> None:
        """Lay out the buttons for one round.

        Args:
            options: Options in display order.
            top:     First Y pixel of the options region (ui.options_top()).
            tile_h:  Button height in pixels.
            padding: Gap between buttons in pixels.
        """
        self.options = options
        self.cols = option_columns(len(options))
        self.rows = max(1, -(-len(options) // self.cols))
        self.tile_h = tile_h
        self.padding = padding
        self.tile_w = (SCREEN_W - 2 * _MARGIN_X - (self.cols - 1) * padding) // self.cols

        grid_h = self.rows * tile_h + (self.rows - 1) * padding
        usable_h = SCREEN_H - BOTTOM_PANEL_H - top
        self.top = top + max(0, (usable_h - grid_h) // 2)

    def tile_rect(self, i: int) -> pygame.Rect:
        """Return the button rect of the i-th option.

        Args:
            i: Index into options, filled row by row.

        Returns:
            pygame.Rect in native game coordinates.
        """
        col, row = i % self.cols, i // self.cols
        x = _MARGIN_X + col * (self.tile_w + self.padding)
        y = self.top + row * (self.tile_h + self.padding)
        return pygame.Rect(x, y, self.tile_w, self.tile_h)

    def hit_test(self, gx: int, gy: int) -> Entity | None:
        """Return the option under a game coordinate, or None.

        Always pass game-space coordinates (after Scaler.to_game()).
        Points in the padding between buttons return None.

        Args:
            gx: X in game coordinates.
            gy: Y in game coordinates.

        Returns:
            The Entity under the point, or None.
        """
        for i, option in enumerate(self.options):
            if self.tile_rect(i).collidepoint(gx, gy):
                return option
        return None

    def render(
        self,
        surface: pygame.Surface,
        font: pygame.font.Font,
        highlighted_id: str | None = None,
        picked_id: str | None = None,
        answer_id: str | None = None,
    ) -> None:
        """Draw every button.

        Before submission the hovered option is raised. After submission
        the answer is raised in green and a wrong pick in red.

        Args:
            surface:        Game-space surface to draw on.
            font:           Font for the option labels.
            highlighted_id: Hovered option, ignored once answer_id is known.
            picked_id:      Option the player submitted, if any.
            answer_id:      Correct option, only passed after submission.
        """
        for i, option in enumerate(self.options):
            rect = self.tile_rect(i)
            text_color = COLOR["text"]

            if answer_id is not None and option.id == answer_id:
                draw_cuboid(surface, rect, COLOR["pass"], d=4)
                text_color = COLOR["text_light"]
            elif answer_id is not None and option.id == picked_id:
                draw_cuboid(surface, rect, COLOR["fail"], d=4)
                text_color = COLOR["text_light"]
            elif answer_id is None and option.id == highlighted_id:
                draw_cuboid(surface, rect, COLOR["highlight"], d=4)
                text_color = COLOR["text_light"]
            else:
                draw_flat_tile(surface, rect, COLOR["tile"])

            label = font.render(option.display_name, True, text_color)
            if label.get_width() > rect.w - 6:
                label = pygame.transform.smoothscale(
                    label, (rect.w - 6, max(1, label.get_height() * (rect.w - 6) // label.get_width())),
                )
            surface.blit(label, (rect.centerx - label.get_width() // 2,
                                 rect.centery - label.get_height() // 2))
