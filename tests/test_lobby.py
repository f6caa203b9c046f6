import asyncio
import random

import pytest

from conftest import FakeBackend, start_counting
from core.errors import EmptyPoolError, InsufficientFundsError, PoolFetchError
from core.lobby import open_session
from core.session import Phase
from core.settlement import ClaimOutcome


def open_with(backend, clock, game_id="shadow-pieces", **kwargs):
    return asyncio.run(open_session(
        game_id, backend, clock=clock, rng=random.Random(3), **kwargs,
    ))


def test_fee_is_charged_after_pool_fetch(pool, clock):
    backend = FakeBackend(pool, balance=100)
    engine = open_with(backend, clock)
    assert backend.calls == [("fetch", 8), ("spend", 20)]
    assert backend.balance == 80
    assert engine.phase is Phase.PREFILL
    assert len(engine.state.rounds) == 6


def test_insufficient_funds_aborts_entry(pool, clock):
    backend = FakeBackend(pool, balance=10)
    with pytest.raises(InsufficientFundsError):
        open_with(backend, clock, game_id="center-tile")
    assert backend.calls == [("fetch", 8), ("spend", 25)]
    assert backend.balance == 10


def test_pool_failure_charges_nothing(pool, clock):
    backend = FakeBackend(pool, fetch_error=PoolFetchError("offline"))
    with pytest.raises(PoolFetchError):
        open_with(backend, clock)
    assert backend.calls == [("fetch", 8)]


def test_empty_pool_charges_nothing(clock):
    backend = FakeBackend([])
    with pytest.raises(EmptyPoolError):
        open_with(backend, clock)
    assert [name for name, _ in backend.calls] == ["fetch"]


def test_practice_mode_skips_fee(pool, clock):
    backend = FakeBackend(pool, balance=0)
    engine = open_with(backend, clock, charge_entry_fee=False)
    assert engine.phase is Phase.PREFILL
    assert [name for name, _ in backend.calls] == ["fetch"]


def test_unknown_game(pool, clock):
    with pytest.raises(KeyError):
        open_with(FakeBackend(pool), clock, game_id="tic-tac-toe")


def test_full_session_pays_out_through_backend(pool, clock):
    backend = FakeBackend(pool, balance=20)
    engine = open_with(backend, clock)
    for _ in engine.game.stages:
        start_counting(engine, clock)
        engine.submit(engine.state.current_round.answer.id)
        engine.advance()

    assert engine.snapshot().running_total == 3 + 5 + 7 + 9 + 11 + 13
    assert asyncio.run(engine.claim()) is ClaimOutcome.GRANTED
    assert backend.calls[-1] == ("grant", 48)
    assert backend.balance == 48
