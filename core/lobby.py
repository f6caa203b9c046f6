"""
core/lobby.py — Session entry for the reveal-and-guess games.

open_session() is the only way a ChallengeEngine gets built for play:

    1. Look up the GameDef
    2. Fetch the entity pool   (PoolFetchError / EmptyPoolError abort here)
    3. Charge the entry fee    (InsufficientFundsError aborts here)
    4. Build the engine, generate every round, start stage 1

The pool is fetched before the fee is charged, so a player is never
charged for a session that cannot start.
"""

from __future__ import annotations
import logging
import random
import time
from typing import Awaitable, Callable, Protocol

from core.engine import ChallengeEngine
from core.errors import EmptyPoolError, InsufficientFundsError
from core.round_generator import RoundGenerator
from core.settlement import Settlement
from core.timer import Clock
from stages.entity import Entity
from stages.registry import get_game

logger = logging.getLogger(__name__)


class Backend(Protocol):
    """The slice of services/backend.BackendClient a session needs."""
    fetch_entity_pool: Callable[[], Awaitable[list[Entity]]]
    grant_currency: Callable[[int], Awaitable[bool]]
    spend_currency: Callable[[int], Awaitable[bool]]


async def open_session(
    game_id: str,
    backend: Backend,
    clock: Clock = time.monotonic,
    rng: random.Random | None = None,
    charge_entry_fee: bool = True,
) -> ChallengeEngine:
    """Fetch the pool, charge the fee and return a running engine.

    Args:
        game_id:          Key in stages.registry.GAME_REGISTRY.
        backend:          Catalog and wallet service.
        clock:            Time source for the timer. Injected in tests.
        rng:              Random source for round generation.
        charge_entry_fee: False skips the fee (practice mode).

    Returns:
        A ChallengeEngine already in PREFILL for stage 1.

    Raises:
        KeyError:               Unknown game_id.
        PoolFetchError:         The catalog could not be fetched.
        EmptyPoolError:         The catalog has no eligible entities.
        InsufficientFundsError: The entry fee was refused.
    """
    game = get_game(game_id)
    pool = list(await backend.fetch_entity_pool())
    if not pool:
        raise EmptyPoolError(f"no entities available for {game.id}")

    if charge_entry_fee and game.entry_fee > 0:
        if not await backend.spend_currency(game.entry_fee):
            raise InsufficientFundsError(f"could not charge the {game.entry_fee} gold entry fee")
        logger.info("Charged entry fee %d for %s", game.entry_fee, game.id)

    engine = ChallengeEngine(
        game,
        clock=clock,
        generator=RoundGenerator(rng),
        settlement=Settlement(backend.grant_currency),
    )
    engine.load(pool)
    return engine
