"""
renderer/ui.py — HUD rendering for Shadow Pieces.

Draws everything around the option grid:
    - Header bar (game title, stage "i/N", running total)
    - Timer bar, colored by danger tier
    - Outcome banner after a stage is resolved
    - O/X result strip
    - NEXT / RESULT button
    - Transient notice line
    - How-to-play intro with the START button
    - Result screen with the CLAIM button
    - Loading / error screen

All functions are stateless: they take explicit data and draw onto the
surface given. This is the untested painting layer; the pixels of the
puzzle itself come from renderer/reveal.py.

Coordinate system: native 360x640 game space. Scaler handles the rest.
"""

from __future__ import annotations
import math
import os

import pygame
from settings import (
    SCREEN_W, SCREEN_H,
    HEADER_H, TIMER_BAR_H, ACTION_BTN_H, RESULT_STRIP_H, BOTTOM_PANEL_H,
    PUZZLE_SIZE, COLOR, DANGER_COLOR,
    FONT_FAMILY, FONT_PATH, FONT_SIZE_LG, FONT_SIZE_MD, FONT_SIZE_SM,
)
from core.engine import EngineSnapshot, Notice
from core.ledger import ResultRow
from core.timer import DangerTier
from renderer.cuboid import draw_cuboid, draw_flat_tile, draw_cuboid_bar
from utils.color import lerp_color


# ── Font cache ────────────────────────────────────────────────────────────────
_fonts: dict[int, pygame.font.Font] = {}


def font_path() -> str | None:
    """Pick the font file used for every label.

    Returns:
        FONT_PATH if that file exists, else the first installed family from
        FONT_FAMILY, else None (pygame's bundled default font).
    """
    if FONT_PATH and os.path.isfile(FONT_PATH):
        return FONT_PATH
    return pygame.font.match_font(FONT_FAMILY)


def font(size: int) -> pygame.font.Font:
    """Return a cached Hangul-capable font at the given size.

    Args:
        size: Point size.

    Returns:
        A pygame Font shared by every caller asking for that size.
    """
    if size not in _fonts:
        _fonts[size] = pygame.font.Font(font_path(), size)
    return _fonts[size]


def _blit_centered(surface: pygame.Surface, text: pygame.Surface, cx: int, y: int) -> None:
    surface.blit(text, (cx - text.get_width() // 2, y))


# ── Layout ────────────────────────────────────────────────────────────────────

def puzzle_rect(size: int = PUZZLE_SIZE) -> pygame.Rect:
    """Where the puzzle picture sits: centered under the timer bar."""
    return pygame.Rect((SCREEN_W - size) // 2, HEADER_H + TIMER_BAR_H + 12, size, size)


def options_top(size: int = PUZZLE_SIZE) -> int:
    """First Y pixel available to the option grid."""
    return puzzle_rect(size).bottom + 36


# ── Header ────────────────────────────────────────────────────────────────────

def draw_header(surface: pygame.Surface, title: str, stage_label: str, total: int) -> None:
    """Draw the top bar: game title left, stage and running total right.

    Args:
        surface:     Game-space surface.
        title:       Game title.
        stage_label: "i/N" from the snapshot.
        total:       Running total in gold.
    """
    draw_flat_tile(surface, pygame.Rect(0, 0, SCREEN_W, HEADER_H), COLOR["chrome"], None)

    surface.blit(font(FONT_SIZE_SM).render("MINI GAME", True, COLOR["tile"]), (12, 10))
    surface.blit(font(FONT_SIZE_LG).render(title, True, COLOR["text_light"]), (12, 32))

    meta = font(FONT_SIZE_SM)
    stage_surf = meta.render(f"Stage {stage_label}", True, COLOR["tile"])
    total_surf = meta.render(f"Gold {total}", True, COLOR["tile"])
    surface.blit(stage_surf, (SCREEN_W - stage_surf.get_width() - 12, 10))
    surface.blit(total_surf, (SCREEN_W - total_surf.get_width() - 12, 28))


# ── Timer bar ─────────────────────────────────────────────────────────────────

def draw_timer_bar(surface: pygame.Surface, progress_percent: float, tier: DangerTier,
                   now: float = 0.0) -> None:
    """Draw the countdown bar below the header.

    The bar color follows the danger tier. In the CRITICAL tier it
    pulses towards white so the last seconds stand out.

    Args:
        surface:          Game-space surface.
        progress_percent: Bar fill, 0–100.
        tier:             Current DangerTier.
        now:              Seconds, drives the CRITICAL pulse.
    """
    color = DANGER_COLOR[tier.name]
    if tier is DangerTier.CRITICAL:
        pulse = 0.5 + 0.5 * math.sin(now * 12.0)
        color = lerp_color(color, COLOR["tile"], pulse * 0.35)
    draw_cuboid_bar(
        surface,
        pygame.Rect(0, HEADER_H, SCREEN_W, TIMER_BAR_H),
        fill=progress_percent / 100.0,
        fill_color=color,
    )


# ── Outcome ───────────────────────────────────────────────────────────────────

def draw_outcome(surface: pygame.Surface, snap: EngineSnapshot) -> None:
    """Draw the line under the picture once the stage is resolved."""
    rnd = snap.round
    if rnd is None or not rnd.submitted:
        return
    y = puzzle_rect().bottom + 8
    if rnd.is_correct:
        text, color = f"Correct!  +{rnd.reward_delta}", COLOR["pass"]
    elif rnd.picked_id is None:
        text, color = f"Time's up  {rnd.reward_delta:+d}", COLOR["fail"]
    else:
        text, color = f"Wrong  {rnd.reward_delta:+d}", COLOR["fail"]
    _blit_centered(surface, font(FONT_SIZE_MD).render(text, True, color), SCREEN_W // 2, y)
    answer = font(FONT_SIZE_SM).render(f"Answer: {rnd.reveal_label}", True, COLOR["text"])
    _blit_centered(surface, answer, SCREEN_W // 2, y + 18)


# ── Result strip ──────────────────────────────────────────────────────────────

def draw_result_strip(surface: pygame.Surface, results: tuple[ResultRow, ...], total_stages: int) -> None:
    """Draw one block per stage: O in green, X in red, empty for unplayed.

    Args:
        surface:      Game-space surface.
        results:      Ledger rows of the stages played so far.
        total_stages: Number of stages in the catalog.
    """
    block_w, gap = 28, 6
    total_w = total_stages * block_w + (total_stages - 1) * gap
    x0 = (SCREEN_W - total_w) // 2
    y = SCREEN_H - BOTTOM_PANEL_H + 4
    by_stage = {row.stage: row for row in results}

    for i in range(total_stages):
        rect = pygame.Rect(x0 + i * (block_w + gap), y, block_w, RESULT_STRIP_H)
        row = by_stage.get(i + 1)
        if row is None:
            draw_flat_tile(surface, rect, COLOR["tile"])
            continue
        color = COLOR["pass"] if row.is_correct else COLOR["fail"]
        draw_cuboid(surface, rect, color, d=3)
        mark = font(FONT_SIZE_SM).render("O" if row.is_correct else "X", True, COLOR["text_light"])
        surface.blit(mark, (rect.centerx - mark.get_width() // 2, rect.centery - mark.get_height() // 2))


# ── Action button ─────────────────────────────────────────────────────────────

def draw_action_button(surface: pygame.Surface, label: str, hovered: bool = False) -> pygame.Rect:
    """Draw the bottom NEXT / RESULT button.

    Args:
        surface: Game-space surface.
        label:   Button text.
        hovered: Raise the button when the cursor is over it.

    Returns:
        The button rect for hit detection.
    """
    margin = 24
    rect = pygame.Rect(margin, SCREEN_H - ACTION_BTN_H - 12, SCREEN_W - margin * 2, ACTION_BTN_H)
    if hovered:
        draw_cuboid(surface, rect, COLOR["highlight"])
        text_color = COLOR["text_light"]
    else:
        draw_flat_tile(surface, rect, COLOR["tile"])
        text_color = COLOR["text"]
    text = font(FONT_SIZE_LG).render(label, True, text_color)
    surface.blit(text, (rect.centerx - text.get_width() // 2, rect.centery - text.get_height() // 2))
    return rect


# ── Notice ────────────────────────────────────────────────────────────────────

def draw_notice(surface: pygame.Surface, notice: Notice | None) -> None:
    """Draw the transient notice pill above the result strip."""
    if notice is None:
        return
    text = font(FONT_SIZE_MD).render(notice.text, True, COLOR["text_light"])
    pill = pygame.Rect(0, 0, text.get_width() + 24, text.get_height() + 10)
    pill.midbottom = (SCREEN_W // 2, SCREEN_H - BOTTOM_PANEL_H - 6)
    pygame.draw.rect(surface, COLOR["pass"] if notice.ok else COLOR["fail"], pill, border_radius=8)
    surface.blit(text, (pill.x + 12, pill.y + 5))


# ── Result screen ─────────────────────────────────────────────────────────────

def draw_result_screen(surface: pygame.Surface, snap: EngineSnapshot) -> pygame.Rect:
    """Draw the end-of-session summary over the board.

    Args:
        surface: Game-space surface.
        snap:    Snapshot in the FINISHED phase.

    Returns:
        The CLAIM button rect for hit detection.
    """
    overlay = pygame.Surface((SCREEN_W, SCREEN_H), pygame.SRCALPHA)
    overlay.fill((33, 33, 33, 200))
    surface.blit(overlay, (0, 0))

    cx = SCREEN_W // 2
    _blit_centered(surface, font(FONT_SIZE_LG).render("RESULT", True, COLOR["tile"]), cx, 150)
    _blit_centered(surface, font(FONT_SIZE_MD).render(
        f"Correct {snap.correct_count}  /  Wrong {snap.wrong_count}", True, COLOR["tile"]), cx, 190)

    f_sm = font(FONT_SIZE_SM)
    for i, row in enumerate(snap.results):
        mark = "O" if row.is_correct else "X"
        line = f_sm.render(f"Stage {row.stage}   {mark}   {row.reward_delta:+d}", True, COLOR["tile"])
        _blit_centered(surface, line, cx, 222 + i * 18)

    y = 222 + len(snap.results) * 18 + 16
    _blit_centered(surface, font(FONT_SIZE_LG).render(
        f"Total  {snap.running_total} gold", True, COLOR["pass"]), cx, y)

    btn = pygame.Rect(cx - 90, y + 44, 180, ACTION_BTN_H)
    draw_cuboid(surface, btn, COLOR["highlight"])
    label = font(FONT_SIZE_LG).render("CLAIM", True, COLOR["text_light"])
    surface.blit(label, (btn.centerx - label.get_width() // 2, btn.centery - label.get_height() // 2))
    return btn


# ── Intro screen ──────────────────────────────────────────────────────────────

def wrap_text(text: str, fnt: pygame.font.Font, width: int) -> list[str]:
    """Break text into lines no wider than width pixels.

    Args:
        text:  Paragraphs separated by newlines.
        fnt:   Font used to measure each candidate line.
        width: Maximum line width in pixels.

    Returns:
        Lines in reading order. A single word longer than width gets its
        own line rather than being cut.
    """
    lines: list[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if current and fnt.size(candidate)[0] > width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


def draw_intro(surface: pygame.Surface, title: str, how_to: str, entry_fee: int,
               practice: bool = False) -> pygame.Rect:
    """Draw the how-to-play card shown before the entry fee is charged.

    Args:
        surface:   Game-space surface to draw on.
        title:     Game title.
        how_to:    Rules text; newlines start new paragraphs.
        entry_fee: Gold charged on START. Shown as free in practice mode.
        practice:  True when no fee will be charged.

    Returns:
        The START button rect, for hit detection.
    """
    margin = 24
    cx = SCREEN_W // 2
    _blit_centered(surface, font(FONT_SIZE_LG).render(title, True, COLOR["text"]), cx, 96)
    _blit_centered(surface, font(FONT_SIZE_MD).render("HOW TO PLAY", True, COLOR["chrome"]), cx, 130)

    f_sm = font(FONT_SIZE_SM)
    y = 164
    for line in wrap_text(how_to, f_sm, SCREEN_W - margin * 2):
        surface.blit(f_sm.render(line, True, COLOR["text"]), (margin, y))
        y += f_sm.get_linesize()

    fee = "Practice: no entry fee" if practice or entry_fee == 0 else f"Entry fee: {entry_fee} gold"
    _blit_centered(surface, font(FONT_SIZE_MD).render(fee, True, COLOR["chrome"]), cx, y + 16)

    btn = pygame.Rect(cx - 90, SCREEN_H - ACTION_BTN_H - 48, 180, ACTION_BTN_H)
    draw_cuboid(surface, btn, COLOR["highlight"])
    label = font(FONT_SIZE_LG).render("START", True, COLOR["text_light"])
    surface.blit(label, (btn.centerx - label.get_width() // 2, btn.centery - label.get_height() // 2))
    return btn


# ── Loading / error screen ────────────────────────────────────────────────────

def draw_message(surface: pygame.Surface, title: str, detail: str = "") -> None:
    """Full-screen message used while loading and when entry fails."""
    cx = SCREEN_W // 2
    _blit_centered(surface, font(FONT_SIZE_LG).render(title, True, COLOR["text"]), cx, SCREEN_H // 2 - 20)
    if detail:
        _blit_centered(surface, font(FONT_SIZE_SM).render(detail, True, COLOR["chrome"]), cx, SCREEN_H // 2 + 10)
