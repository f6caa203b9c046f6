"""
core/round_generator.py — Builds every round of a session up front.

The generator is the only place that samples from the entity pool. For
each stage of a catalog it applies three rules:

    1. Answer      — one entity, uniform from the whole pool. Sampling is
                     with replacement across stages, so the same entity
                     can be the answer more than once per session.
    2. Distractors — min(option_count - 1, |pool| - 1) distinct entities,
                     uniform from the pool minus the answer.
    3. Shuffle     — answer and distractors are shuffled together.

A pool smaller than a stage's option_count silently yields fewer options
for that stage. The whole sequence is fixed at session start so the O/X
strip can be drawn and tests can inspect every round before playing.
"""

from __future__ import annotations
import logging
import random
from typing import Iterable

from core.errors import EmptyPoolError
from core.session import Round
from stages.catalog import StageSpec
from stages.entity import Entity

logger = logging.getLogger(__name__)


def _dedupe(pool: Iterable[Entity]) -> list[Entity]:
    """Drop entities whose id was already seen, keeping first occurrence order."""
    seen: set[str] = set()
    unique: list[Entity] = []
    for entity in pool:
        if entity.id in seen:
            continue
        seen.add(entity.id)
        unique.append(entity)
    return unique


class RoundGenerator:
    """Random round builder for a stage catalog.

    Attributes:
        _rng: Random source. Unseeded by default; tests pass a seeded
              random.Random for reproducible layouts.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def generate(
        self,
        pool: Iterable[Entity],
        catalog: tuple[StageSpec, ...],
    ) -> list[Round]:
        """Return one Round per stage of the catalog.

        Args:
            pool:    Eligible entities. Duplicate ids are ignored.
            catalog: Ordered stage specs.

        Returns:
            List of fresh, unsubmitted Rounds in stage order.

        Raises:
            EmptyPoolError: If the pool holds no entities.
        """
        entities = _dedupe(pool)
        if not entities:
            raise EmptyPoolError("entity pool is empty; cannot build rounds")

        rounds = [self._build_round(stage, entities) for stage in catalog]
        short = [r.stage.index for r in rounds if len(r.options) < r.stage.option_count]
        if short:
            logger.info(
                "Pool of %d entities is too small for stages %s; options reduced",
                len(entities), short,
            )
        return rounds

    def _build_round(self, stage: StageSpec, entities: list[Entity]) -> Round:
        answer = self._rng.choice(entities)
        others = [e for e in entities if e.id != answer.id]
        n_distractors = min(stage.option_count - 1, len(others))
        distractors = self._rng.sample(others, n_distractors)

        options = [answer, *distractors]
        self._rng.shuffle(options)

        return Round(
            stage=stage,
            answer=answer,
            options=tuple(options),
            image_ref=answer.image_ref,
        )
