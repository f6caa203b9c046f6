"""
stages/registry.py — Central registry of the reveal-and-guess games.

Both games run on the same engine. The only things that differ are the
puzzle transform, the stage table, the penalty on a miss and the entry
fee, so each game is one GameDef row below.

Registry format:
    {
        "game_id": GameDef(...),
        ...
    }

    game_id:      Unique string key, used by core/lobby.py to open a session
                  and in log lines.
    render_mode:  RenderMode tag selecting the puzzle transform.
    stages:       Stage catalog from stages/catalog.py.
    penalty:      Currency taken from the running total on a miss or timeout,
                  clamped so the total never drops below zero.
    entry_fee:    Currency charged before the session starts.

Adding a new game:
    1. Add a stage table to stages/catalog.py
    2. Add one GameDef line to GAME_REGISTRY
"""

from __future__ import annotations
from dataclasses import dataclass

from renderer.reveal import RenderMode
from stages.catalog import (
    CENTER_TILE_STAGES, SILHOUETTE_STAGES, StageSpec, validate_catalog,
)


@dataclass(frozen=True)
class GameDef:
    """Static description of one registered game."""
    id: str
    title: str
    render_mode: RenderMode
    stages: tuple[StageSpec, ...]
    penalty: int
    entry_fee: int
    how_to: str = ""


# ── Registry ──────────────────────────────────────────────────────────────────
GAME_REGISTRY: dict[str, GameDef] = {
    "center-tile": GameDef(
        id="center-tile",
        title="Center Piece",
        render_mode=RenderMode.CENTER_TILE,
        stages=CENTER_TILE_STAGES,
        penalty=10,
        entry_fee=25,
        how_to=(
            "The picture is cut into a 3x3 grid and only the middle piece is shown.\n"
            "Pick the right answer before time runs out. A miss or a timeout costs\n"
            "a penalty, and the full picture is revealed after every answer."
        ),
    ),
    "shadow-pieces": GameDef(
        id="shadow-pieces",
        title="Shadow Match",
        render_mode=RenderMode.SILHOUETTE,
        stages=SILHOUETTE_STAGES,
        penalty=5,
        entry_fee=20,
        how_to=(
            "The picture is shown only as a solid silhouette.\n"
            "Each stage has its own time limit and number of options.\n"
            "Rewards 3, 5, 7, 9, 11, 13 (cumulative). A miss or timeout costs 5.\n"
            "When time runs out the stage counts as wrong.\n"
            "The original is revealed after every stage, and the total is paid at the end."
        ),
    ),
}


def get_game(game_id: str) -> GameDef:
    """Look up a registered game.

    Raises:
        KeyError: If no game is registered under game_id.
    """
    try:
        return GAME_REGISTRY[game_id]
    except KeyError:
        raise KeyError(f"unknown game {game_id!r}; known: {sorted(GAME_REGISTRY)}") from None


# ── Validate every stage table at import time ─────────────────────────────────
for _game in GAME_REGISTRY.values():
    validate_catalog(_game.stages)
