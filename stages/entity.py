"""
stages/entity.py — Guessable entities and their image asset paths.

An Entity is one row of the remote catalog: an id, the label shown on the
option button, and a rarity tier. The rarity only decides which asset
subfolder the picture lives in; it is never stored separately.

Usage:
    fish = Entity.from_row({"id": "koi", "name_ko": "잉어", "rarity": "희귀"})
    fish.image_ref              # "/aquarium/rare/koi.png"
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from settings import ASSET_CATEGORY


class RarityTier(Enum):
    """Rarity tiers. The value is the tier name, folder is the asset subfolder."""
    COMMON    = "common"
    RARE      = "rare"
    EPIC      = "epic"
    LEGENDARY = "legendary"

    @property
    def folder(self) -> str:
        """Asset subfolder name. Legendary assets live under "legend"."""
        return "legend" if self is RarityTier.LEGENDARY else self.value


# Raw rarity labels as they appear in the catalog, Korean and English
_RARITY_ALIASES = {
    "rare":      RarityTier.RARE,
    "희귀":       RarityTier.RARE,
    "epic":      RarityTier.EPIC,
    "에픽":       RarityTier.EPIC,
    "legend":    RarityTier.LEGENDARY,
    "legendary": RarityTier.LEGENDARY,
    "전설":       RarityTier.LEGENDARY,
    "common":    RarityTier.COMMON,
    "일반":       RarityTier.COMMON,
}


def normalize_rarity(raw: str | None) -> RarityTier:
    """Map a raw catalog rarity label to a RarityTier.

    Args:
        raw: Label from the catalog row, e.g. "희귀", "Epic", None.

    Returns:
        The matching tier. Unknown or missing labels fall back to COMMON.
    """
    key = (raw or "").strip().lower()
    return _RARITY_ALIASES.get(key, RarityTier.COMMON)


def asset_path(rarity: RarityTier, entity_id: str) -> str:
    """Return the public asset path for an entity picture. Performs no I/O."""
    return f"/{ASSET_CATEGORY}/{rarity.folder}/{quote(entity_id, safe='')}.png"


@dataclass(frozen=True)
class Entity:
    """One guessable catalog entry.

    Attributes:
        id:           Unique catalog id.
        display_name: Label shown on the option button and after reveal.
        rarity:       Rarity tier, decides the asset subfolder.
    """
    id: str
    display_name: str
    rarity: RarityTier = RarityTier.COMMON

    @property
    def image_ref(self) -> str:
        return asset_path(self.rarity, self.id)

    @classmethod
    def from_row(cls, row: dict) -> Entity | None:
        """Build an Entity from a remote catalog row.

        Returns None for rows without an id or display name; those are
        not eligible for the pool.
        """
        entity_id = row.get("id")
        name = row.get("name_ko") or row.get("display_name")
        if not entity_id or not name:
            return None
        return cls(
            id=str(entity_id),
            display_name=str(name),
            rarity=normalize_rarity(row.get("rarity")),
        )
