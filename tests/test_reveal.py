import pygame
import pytest

from conftest import solid_image
from renderer.reveal import (
    PuzzleView, RenderMode, center_tile_rect, placeholder, render, reveal,
)
from settings import COLOR, PUZZLE_MIN_SIZE
from utils.scaler import fit_contain

BLUE = (20, 60, 220, 255)
GRAY = (120, 120, 120, 255)


def close_to(actual, expected, tol=3):
    return all(abs(a - e) <= tol for a, e in zip(actual, expected))


def nine_cell_image(cell=60):
    """3x3 grid of gray cells with a blue middle cell."""
    surf = pygame.Surface((cell * 3, cell * 3), pygame.SRCALPHA, 32)
    surf.fill(GRAY)
    surf.fill(BLUE, pygame.Rect(cell, cell, cell, cell))
    return surf


def half_transparent_image():
    """Left half transparent, right half opaque red."""
    surf = pygame.Surface((100, 100), pygame.SRCALPHA, 32)
    surf.fill((0, 0, 0, 0))
    surf.fill((200, 40, 40, 255), pygame.Rect(50, 0, 50, 100))
    return surf


# ── Geometry ──────────────────────────────────────────────────────────────────

def test_center_tile_rect_square_source():
    assert center_tile_rect(300, 300) == pygame.Rect(100, 100, 100, 100)


def test_center_tile_rect_uses_centered_square():
    assert center_tile_rect(400, 300) == pygame.Rect(150, 100, 100, 100)
    assert center_tile_rect(300, 600) == pygame.Rect(100, 250, 100, 100)


def test_fit_contain_preserves_aspect_and_centers():
    assert fit_contain(800, 600, 240, 240) == pygame.Rect(0, 30, 240, 180)
    assert fit_contain(600, 800, 240, 240) == pygame.Rect(30, 0, 180, 240)
    assert fit_contain(50, 50, 240, 240) == pygame.Rect(0, 0, 240, 240)


# ── Transforms ────────────────────────────────────────────────────────────────

def test_center_tile_shows_only_middle_cell():
    out = render(nine_cell_image(), RenderMode.CENTER_TILE, 90)
    assert out.get_size() == (90, 90)
    assert close_to(out.get_at((45, 45)), BLUE)
    assert close_to(out.get_at((20, 45)), BLUE)


def test_silhouette_keeps_alpha_and_replaces_color():
    out = render(half_transparent_image(), RenderMode.SILHOUETTE, 64)
    assert tuple(out.get_at((50, 32))) == (*COLOR["silhouette"], 255)
    assert out.get_at((10, 32)).a == 0


def test_silhouette_hides_source_color():
    out = render(solid_image(), RenderMode.SILHOUETTE, 64)
    assert tuple(out.get_at((32, 32)))[:3] == COLOR["silhouette"]


def test_silhouette_preserves_partial_alpha():
    out = render(solid_image(color=(200, 40, 40, 128)), RenderMode.SILHOUETTE, 64)
    px = out.get_at((32, 32))
    assert tuple(px)[:3] == COLOR["silhouette"]
    assert abs(px.a - 128) <= 1


def test_center_tile_keeps_opaque_pixels():
    out = render(solid_image(color=(200, 40, 40, 255)), RenderMode.CENTER_TILE, 64)
    px = out.get_at((32, 32))
    assert px.a == 255
    assert close_to(px, (200, 40, 40, 255), tol=1)


def test_border_darkens_without_touching_interior():
    out = placeholder(64)
    edge = out.get_at((0, 32))
    assert edge.a == 255
    assert edge.r < COLOR["placeholder"][0]
    assert tuple(out.get_at((32, 32))) == (*COLOR["placeholder"], 255)


def test_reveal_keeps_opaque_pixels():
    out = reveal(solid_image(color=(200, 40, 40, 255)), 64)
    px = out.get_at((32, 32))
    assert px.a == 255
    assert close_to(px, (200, 40, 40, 255), tol=1)


def test_transforms_are_pure_and_deterministic():
    src = nine_cell_image()
    before = pygame.image.tobytes(src, "RGBA")
    for mode in RenderMode:
        a = render(src, mode, 96)
        b = render(src, mode, 96)
        assert pygame.image.tobytes(a, "RGBA") == pygame.image.tobytes(b, "RGBA")
    assert pygame.image.tobytes(src, "RGBA") == before


def test_output_never_smaller_than_minimum():
    out = render(solid_image(), RenderMode.CENTER_TILE, 10)
    assert out.get_size() == (PUZZLE_MIN_SIZE, PUZZLE_MIN_SIZE)


def test_reveal_shows_original_colors():
    out = reveal(solid_image(color=(200, 40, 40, 255)), 64)
    assert close_to(out.get_at((32, 32)), (200, 40, 40, 255))


def test_reveal_letterboxes_on_light_card():
    out = reveal(solid_image(size=(200, 100)), 64)
    assert tuple(out.get_at((32, 5)))[:3] == COLOR["reveal_bg"]


def test_placeholder_is_opaque_card():
    out = placeholder(64)
    assert tuple(out.get_at((32, 32))) == (*COLOR["placeholder"], 255)


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        render(solid_image(), "sepia", 64)


# ── PuzzleView ────────────────────────────────────────────────────────────────

def test_view_without_source_shows_placeholder():
    view = PuzzleView(RenderMode.SILHOUETTE, 64)
    assert tuple(view.surface.get_at((32, 32))) == (*COLOR["placeholder"], 255)


def test_view_reads_do_not_rerender():
    view = PuzzleView(RenderMode.SILHOUETTE, 64)
    view.set_source(solid_image())
    count = view.render_count
    for _ in range(5):
        view.surface
    assert view.render_count == count


def test_view_resize_reuses_source():
    src = solid_image()
    view = PuzzleView(RenderMode.CENTER_TILE, 64)
    view.set_source(src)
    view.resize(128)
    assert view.surface.get_size() == (128, 128)
    assert pygame.image.tobytes(view.surface, "RGBA") == pygame.image.tobytes(
        render(src, RenderMode.CENTER_TILE, 128), "RGBA")
    view.resize(128)
    assert view.render_count == 2


def test_view_reveal_and_reset():
    view = PuzzleView(RenderMode.SILHOUETTE, 64)
    view.set_source(solid_image())
    view.show_reveal()
    assert view.revealed
    assert close_to(view.surface.get_at((32, 32)), (200, 40, 40, 255))
    view.reset()
    assert not view.revealed
    assert not view.has_source
