"""
core/session.py — Session state for one reveal-and-guess playthrough.

SessionState is the single explicit record of a game in progress:
    - The rounds, generated once up front (one per stage)
    - The current stage index
    - Running total, correct and wrong counts
    - The current phase of the state machine

SessionState does NOT own the timer, the puzzle view or the settlement.
It is a pure data container. core/engine.py is its only writer; everything
else reads it through EngineSnapshot.

Usage:
    state = SessionState(rounds=generate(pool, catalog))
    state.current_round.resolve(picked_id="koi", is_correct=True, reward_delta=10)
    state.to_dict()           # JSON-ready
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto

from stages.catalog import StageSpec
from stages.entity import Entity


class Phase(Enum):
    """State machine phases."""
    LOADING  = auto()
    PREFILL  = auto()
    COUNTING = auto()
    RESOLVED = auto()
    FINISHED = auto()


_OUTCOME_FIELDS = frozenset({"picked_id", "submitted", "is_correct", "reward_delta"})


@dataclass
class Round:
    """The concrete puzzle bound to one stage.

    Once submitted is True the outcome fields are write-once: any later
    assignment raises AttributeError.

    Attributes:
        stage:        The StageSpec this round belongs to.
        answer:       The entity the player has to name.
        options:      Shuffled options, answer included exactly once.
        image_ref:    Asset path of the answer's picture.
        picked_id:    Option id the player submitted. None on timeout.
        submitted:    True once the round has been scored.
        is_correct:   Outcome, None until submitted.
        reward_delta: Signed change applied to the running total, None until submitted.
    """
    stage: StageSpec
    answer: Entity
    options: tuple[Entity, ...]
    image_ref: str
    picked_id: str | None = None
    submitted: bool = False
    is_correct: bool | None = None
    reward_delta: int | None = None

    def __setattr__(self, name, value) -> None:
        if name in _OUTCOME_FIELDS and self.__dict__.get("_sealed", False):
            raise AttributeError(f"round {self.stage.index} is already submitted; {name} is fixed")
        super().__setattr__(name, value)

    @property
    def reveal_label(self) -> str:
        """Label shown with the revealed picture."""
        return self.answer.display_name or self.answer.id

    def has_option(self, option_id: str) -> bool:
        return any(o.id == option_id for o in self.options)

    def resolve(self, picked_id: str | None, is_correct: bool, reward_delta: int) -> None:
        """Write the outcome and freeze the round.

        Args:
            picked_id:    Submitted option id, or None for a timeout.
            is_correct:   Whether the pick matched the answer.
            reward_delta: Signed delta the ledger applied.
        """
        self.picked_id = picked_id
        self.is_correct = is_correct
        self.reward_delta = reward_delta
        self.submitted = True
        object.__setattr__(self, "_sealed", True)

    def to_dict(self) -> dict:
        return {
            "stage": self.stage.index,
            "answer_id": self.answer.id,
            "option_ids": [o.id for o in self.options],
            "image_ref": self.image_ref,
            "picked_id": self.picked_id,
            "submitted": self.submitted,
            "is_correct": self.is_correct,
            "reward_delta": self.reward_delta,
        }


@dataclass
class SessionState:
    """Mutable game state for one full playthrough.

    Attributes:
        rounds:              One Round per stage, fixed at creation.
        current_stage_index: 0-based index into rounds. Never decreases.
        running_total:       Accumulated reward. Never negative.
        correct_count:       Rounds scored correct.
        wrong_count:         Rounds scored wrong, timeouts included.
        phase:               Current Phase.
    """
    rounds: list[Round]
    current_stage_index: int = 0
    running_total: int = 0
    correct_count: int = 0
    wrong_count: int = 0
    phase: Phase = field(default=Phase.LOADING)

    @property
    def current_round(self) -> Round:
        return self.rounds[self.current_stage_index]

    @property
    def is_last_stage(self) -> bool:
        return self.current_stage_index >= len(self.rounds) - 1

    def submitted_count(self) -> int:
        return sum(1 for r in self.rounds if r.submitted)

    def to_dict(self) -> dict:
        return {
            "rounds": [r.to_dict() for r in self.rounds],
            "current_stage_index": self.current_stage_index,
            "running_total": self.running_total,
            "correct_count": self.correct_count,
            "wrong_count": self.wrong_count,
            "phase": self.phase.name,
        }
