"""
settings.py — Global constants for Shadow Pieces.

All magic numbers live here. No other module should hardcode colors,
dimensions, timing values or service endpoints. Import what you need with:
    from settings import COLOR, SCREEN_W, ...

Deployment values (backend URL, keys, asset locations) are read from the
environment so the same build can point at staging or production.
"""

import os

# ── Screen ────────────────────────────────────────────────────────────────────
SCREEN_W = 360
SCREEN_H = 640
FPS = 60
TITLE = "Shadow Pieces"

# ── Colors ────────────────────────────────────────────────────────────────────
COLOR = {
    "background":   (240, 240, 240),   # #F0F0F0
    "tile":         (255, 255, 255),   # #FFFFFF
    "tile_border":  (204, 204, 204),   # #CCCCCC
    "highlight":    ( 42,  93, 176),   # #2A5DB0: hovered option
    "chrome":       (117, 117, 117),   # #757575
    "text":         ( 33,  33,  33),   # #212121
    "text_light":   (255, 255, 255),   # white text on dark tiles
    "pass":         ( 52, 168,  83),   # correct answer
    "fail":         (234,  67,  53),   # wrong answer / timeout
    "silhouette":   ( 15,  23,  42),   # #0F172A: stencil fill
    "reveal_bg":    (246, 246, 248),   # #F6F6F8: behind the revealed image
    "placeholder":  (226, 232, 240),   # #E2E8F0: image failed to load
}

# Timer ring color per danger tier, keyed by DangerTier.name
DANGER_COLOR = {
    "SAFE":     ( 52, 168,  83),
    "WARN1":    (251, 192,  45),
    "WARN2":    (245, 124,   0),
    "CRITICAL": (229,  57,  53),
}

# ── Cuboid ────────────────────────────────────────────────────────────────────
CUBOID_DEPTH = 10   # px offset for top/right faces (isometric illusion)

# ── Puzzle image ──────────────────────────────────────────────────────────────
PUZZLE_SIZE      = 240    # px: square puzzle canvas in native resolution
PUZZLE_MIN_SIZE  = 64     # px: never render smaller than this
BORDER_WIDTH     = 2      # px: stroke around the puzzle canvas
BORDER_ALPHA     = 0.18   # opacity of the black border stroke

# Radial vignette: (inner radius ratio, outer radius ratio, max darkness)
CENTER_TILE_VIGNETTE = (0.55, 0.80, 0.08)
SILHOUETTE_VIGNETTE  = (0.45, 0.65, 0.12)

# Ground shadow under the silhouette, as ratios of the canvas size
SHADOW_CENTER_Y = 0.78
SHADOW_W        = 0.60
SHADOW_H        = 0.08
SHADOW_ALPHA    = 0.12

CENTER_TILE_DIVISIONS = 3   # 3x3 grid, only the middle cell is shown

# ── Timer ─────────────────────────────────────────────────────────────────────
PREFILL_DURATION_S = 0.6    # cosmetic 0→100% lead-in, consumes no budget

# Danger tiers: remaining-percent ceilings, checked top to bottom
DANGER_THRESHOLDS = (
    ("CRITICAL", 7.0),
    ("WARN2",   15.0),
    ("WARN1",   30.0),
)

# ── Options grid ──────────────────────────────────────────────────────────────
OPTION_TILE_H  = 40    # px
OPTION_PADDING = 8     # gap between option buttons

# ── UI Layout (relative to 360×640) ──────────────────────────────────────────
HEADER_H        = 80    # px: top bar with stage label and running total
TIMER_BAR_H     = 8     # px: thin bar below header
RESULT_STRIP_H  = 16    # px: O/X progress strip
ACTION_BTN_H    = 48    # px: bottom NEXT / CLAIM button
BOTTOM_PANEL_H  = ACTION_BTN_H + RESULT_STRIP_H + 24

NOTICE_DURATION_S = 1.2   # transient notice (toast) lifetime

# ── Fonts ─────────────────────────────────────────────────────────────────────
# Option labels are Korean names, so the first match must carry Hangul glyphs.
# FONT_PATH wins when the file exists; otherwise the first installed family.
FONT_PATH   = os.environ.get(
    "FONT_PATH", os.path.join(os.path.dirname(__file__), "assets", "fonts", "NotoSansKR-Regular.ttf"))
FONT_FAMILY = [
    "notosanscjkkr", "notosanskr", "notosanscjk", "nanumgothic", "malgungothic",
    "applesdgothicneo", "applegothic", "unifont", "couriernew",
]
FONT_SIZE_LG = 18
FONT_SIZE_MD = 14
FONT_SIZE_SM = 11

# ── Remote data service ───────────────────────────────────────────────────────
BACKEND_URL      = os.environ.get("BACKEND_URL", "http://localhost:54321")
BACKEND_API_KEY  = os.environ.get("BACKEND_API_KEY", "")
COUPLE_ID        = os.environ.get("COUPLE_ID", "")
ENTITY_TABLE     = os.environ.get("ENTITY_TABLE", "aquarium_entities")
POOL_SIZE        = 120     # rows requested per pool fetch
REQUEST_TIMEOUT_S = 15

# ── Assets ────────────────────────────────────────────────────────────────────
ASSET_CATEGORY  = "aquarium"
# Local directory that mirrors the public asset tree ("/aquarium/<rarity>/<id>.png")
ASSET_ROOT      = os.environ.get("ASSET_ROOT", os.path.join(os.path.dirname(__file__), "assets"))
# When set, images are fetched over HTTP from this base instead of ASSET_ROOT
ASSET_BASE_URL  = os.environ.get("ASSET_BASE_URL", "")
