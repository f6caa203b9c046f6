"""
stages/catalog.py — Stage specifications for each reveal-and-guess game.

A catalog is an ordered tuple of StageSpec. Each stage fixes its own time
budget, how many options the player picks from, and the reward paid on a
correct answer. Later stages are faster and offer more options.

Catalogs are plain data. validate_catalog() is called by the registry at
import time so a bad table fails loudly before any session starts.
"""

from __future__ import annotations
from dataclasses import dataclass

from core.errors import CatalogError


@dataclass(frozen=True)
class StageSpec:
    """One fixed position in the challenge sequence.

    Attributes:
        index:             1-based stage number, contiguous and ascending.
        time_budget_s:     Seconds on the countdown for this stage.
        option_count:      Number of options shown, answer included.
        reward_on_success: Currency added to the running total on a correct pick.
    """
    index: int
    time_budget_s: float
    option_count: int
    reward_on_success: int


def validate_catalog(catalog: tuple[StageSpec, ...]) -> tuple[StageSpec, ...]:
    """Check a catalog against the stage rules and return it unchanged.

    Raises:
        CatalogError: If the catalog is empty, indices are not 1..N in
                      order, or any budget/option/reward value is out of range.
    """
    if not catalog:
        raise CatalogError("catalog has no stages")

    for expected, stage in enumerate(catalog, start=1):
        if stage.index != expected:
            raise CatalogError(f"stage index {stage.index} found where {expected} was expected")
        if stage.time_budget_s <= 0:
            raise CatalogError(f"stage {stage.index}: time budget must be positive")
        if stage.option_count < 2:
            raise CatalogError(f"stage {stage.index}: needs at least 2 options")
        if stage.reward_on_success < 0:
            raise CatalogError(f"stage {stage.index}: reward cannot be negative")
    return catalog


# ── Center-tile game ──────────────────────────────────────────────────────────
CENTER_TILE_STAGES: tuple[StageSpec, ...] = (
    StageSpec(index=1, time_budget_s=12, option_count=5, reward_on_success=10),
    StageSpec(index=2, time_budget_s=10, option_count=5, reward_on_success=10),
    StageSpec(index=3, time_budget_s=10, option_count=7, reward_on_success=10),
    StageSpec(index=4, time_budget_s=9,  option_count=7, reward_on_success=10),
    StageSpec(index=5, time_budget_s=9,  option_count=9, reward_on_success=15),
    StageSpec(index=6, time_budget_s=8,  option_count=9, reward_on_success=15),
)

# ── Silhouette game ───────────────────────────────────────────────────────────
SILHOUETTE_STAGES: tuple[StageSpec, ...] = (
    StageSpec(index=1, time_budget_s=10, option_count=6,  reward_on_success=3),
    StageSpec(index=2, time_budget_s=9,  option_count=7,  reward_on_success=5),
    StageSpec(index=3, time_budget_s=8,  option_count=8,  reward_on_success=7),
    StageSpec(index=4, time_budget_s=7,  option_count=9,  reward_on_success=9),
    StageSpec(index=5, time_budget_s=6,  option_count=10, reward_on_success=11),
    StageSpec(index=6, time_budget_s=5,  option_count=11, reward_on_success=13),
)
