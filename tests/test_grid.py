import pytest

from renderer.grid import OptionGrid, option_columns
from stages.entity import Entity
from utils.color import darker, lerp_color, lighter, with_opacity
from utils.easing import ease_out_cubic, linear
from utils.scaler import Scaler


@pytest.mark.parametrize("count, cols", [(2, 2), (5, 2), (6, 3), (7, 3), (8, 4), (11, 4)])
def test_option_columns(count, cols):
    assert option_columns(count) == cols


def test_hit_test_maps_tiles_to_options():
    options = tuple(Entity(id=f"e{i}", display_name=f"E{i}") for i in range(7))
    grid = OptionGrid(options, top=400)
    assert grid.cols == 3
    assert grid.rows == 3
    for i, option in enumerate(options):
        assert grid.hit_test(*grid.tile_rect(i).center) is option


def test_hit_test_misses_padding_and_outside():
    options = tuple(Entity(id=f"e{i}", display_name=f"E{i}") for i in range(4))
    grid = OptionGrid(options, top=400)
    first, second = grid.tile_rect(0), grid.tile_rect(1)
    gap_x = (first.right + second.left) // 2
    assert grid.hit_test(gap_x, first.centery) is None
    assert grid.hit_test(5, 5) is None


def test_scaler_round_trip():
    scaler = Scaler(720, 1280)
    assert scaler.scale == 2
    assert scaler.to_game(200, 400) == (100, 200)
    assert scaler.in_bounds(10, 10)


def test_scaler_letterboxes_wide_window():
    scaler = Scaler(1000, 640)
    assert scaler.dest_rect.size == (360, 640)
    assert scaler.offset_x == 320
    assert not scaler.in_bounds(100, 300)


@pytest.mark.parametrize("ease", [linear, ease_out_cubic])
def test_easing_endpoints_and_clamp(ease):
    assert ease(0.0) == 0.0
    assert ease(1.0) == 1.0
    assert ease(-1.0) == 0.0
    assert ease(2.0) == 1.0


def test_color_helpers_clamp():
    assert lighter((250, 10, 100)) == (255, 50, 140)
    assert darker((30, 10, 100)) == (0, 0, 60)
    assert with_opacity((1, 2, 3), 1.5) == (1, 2, 3, 255)
    assert with_opacity((1, 2, 3), 0.0) == (1, 2, 3, 0)
    assert lerp_color((0, 0, 0), (200, 100, 50), 0.5) == (100, 50, 25)
