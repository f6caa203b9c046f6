import os
import random

# Headless SDL before pygame is imported anywhere
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest

from core.engine import ChallengeEngine
from core.round_generator import RoundGenerator
from core.settlement import Settlement
from renderer.reveal import RenderMode
from stages.catalog import StageSpec
from stages.entity import Entity, RarityTier
from stages.registry import GameDef


class FakeClock:
    """Manually advanced clock for the timer and notices."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend:
    """In-memory stand-in for services/backend.BackendClient."""

    def __init__(self, pool, balance: int = 100, grant_ok: bool = True, fetch_error=None) -> None:
        self.pool = list(pool)
        self.fetch_error = fetch_error
        self.balance = balance
        self.grant_ok = grant_ok
        self.calls: list[tuple[str, int]] = []

    async def fetch_entity_pool(self):
        self.calls.append(("fetch", len(self.pool)))
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.pool)

    async def spend_currency(self, amount: int) -> bool:
        self.calls.append(("spend", amount))
        if amount > self.balance:
            return False
        self.balance -= amount
        return True

    async def grant_currency(self, amount: int) -> bool:
        self.calls.append(("grant", amount))
        if self.grant_ok:
            self.balance += amount
        return self.grant_ok


SHORT_CATALOG = (
    StageSpec(index=1, time_budget_s=5, option_count=3, reward_on_success=10),
    StageSpec(index=2, time_budget_s=5, option_count=3, reward_on_success=10),
    StageSpec(index=3, time_budget_s=5, option_count=3, reward_on_success=15),
)


@pytest.fixture(scope="session", autouse=True)
def pygame_headless():
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def pool():
    names = ["koi", "guppy", "betta", "tetra", "angelfish", "molly", "danio", "pleco"]
    return [
        Entity(id=name, display_name=name.title(), rarity=RarityTier.COMMON if i % 2 else RarityTier.RARE)
        for i, name in enumerate(names)
    ]


@pytest.fixture()
def short_game():
    return GameDef(
        id="test-game",
        title="Test Game",
        render_mode=RenderMode.SILHOUETTE,
        stages=SHORT_CATALOG,
        penalty=10,
        entry_fee=0,
    )


@pytest.fixture()
def grants():
    return []


@pytest.fixture()
def engine(short_game, clock, pool, grants):
    async def grant(amount):
        grants.append(amount)
        return True

    eng = ChallengeEngine(
        short_game,
        clock=clock,
        generator=RoundGenerator(random.Random(7)),
        settlement=Settlement(grant),
        view_size=64,
    )
    eng.load(pool)
    return eng


def start_counting(engine, clock):
    """Run the lead-in of the current stage to completion."""
    clock.advance(1.0)
    engine.update()


def solid_image(size=(100, 100), color=(200, 40, 40, 255)):
    surf = pygame.Surface(size, pygame.SRCALPHA, 32)
    surf.fill(color)
    return surf
