import random

import pytest

from core.errors import EmptyPoolError
from core.round_generator import RoundGenerator
from stages.catalog import CENTER_TILE_STAGES, SILHOUETTE_STAGES
from stages.entity import Entity


def test_one_round_per_stage_in_order(pool):
    rounds = RoundGenerator(random.Random(1)).generate(pool, CENTER_TILE_STAGES)
    assert [r.stage.index for r in rounds] == [1, 2, 3, 4, 5, 6]
    assert all(not r.submitted for r in rounds)


def test_answer_appears_exactly_once_among_unique_options(pool):
    rounds = RoundGenerator(random.Random(2)).generate(pool, CENTER_TILE_STAGES)
    for rnd in rounds:
        ids = [o.id for o in rnd.options]
        assert len(ids) == len(set(ids))
        assert ids.count(rnd.answer.id) == 1
        assert len(ids) == min(rnd.stage.option_count, len(pool))
        assert rnd.image_ref == rnd.answer.image_ref


def test_small_pool_reduces_option_count(pool):
    small = pool[:4]
    rounds = RoundGenerator(random.Random(3)).generate(small, SILHOUETTE_STAGES)
    for rnd in rounds:
        assert len(rnd.options) == 4
        assert {o.id for o in rnd.options} == {e.id for e in small}


def test_single_entity_pool_yields_answer_only():
    only = [Entity(id="koi", display_name="Koi")]
    rounds = RoundGenerator(random.Random(4)).generate(only, SILHOUETTE_STAGES)
    assert all(r.options == (only[0],) for r in rounds)


def test_duplicate_ids_in_pool_are_ignored(pool):
    doubled = pool[:3] + pool[:3]
    rounds = RoundGenerator(random.Random(5)).generate(doubled, SILHOUETTE_STAGES)
    for rnd in rounds:
        assert len(rnd.options) == 3


def test_empty_pool_raises():
    with pytest.raises(EmptyPoolError):
        RoundGenerator().generate([], CENTER_TILE_STAGES)


def test_seeded_generation_is_reproducible(pool):
    a = RoundGenerator(random.Random(42)).generate(pool, SILHOUETTE_STAGES)
    b = RoundGenerator(random.Random(42)).generate(pool, SILHOUETTE_STAGES)
    assert [r.to_dict() for r in a] == [r.to_dict() for r in b]
