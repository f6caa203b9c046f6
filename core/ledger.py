"""
core/ledger.py — Reward accounting for a reveal-and-guess session.

A correct pick adds the stage reward. A wrong pick or a timeout subtracts
the game's penalty, clamped to whatever has been accumulated at that
moment, so the total can never go below zero no matter how many misses
come in a row.

The ledger records one ResultRow per resolved stage. Rows feed the O/X
strip during play and the summary on the result screen.
"""

from __future__ import annotations
from dataclasses import dataclass

from stages.catalog import StageSpec


def apply_correct(acc: int, stage: StageSpec) -> int:
    """Return the total after a correct answer on the given stage."""
    return acc + stage.reward_on_success


def apply_incorrect_or_timeout(acc: int, penalty: int) -> int:
    """Return the total after a miss, never dropping below zero.

    The clamp is taken against acc, the total at the moment of failure.
    A player already at zero pays nothing.
    """
    return acc - min(penalty, acc)


@dataclass(frozen=True)
class ResultRow:
    """Outcome of one resolved stage."""
    stage: int
    is_correct: bool
    reward_delta: int


class RewardLedger:
    """Running total plus finalized per-stage result rows.

    Attributes:
        penalty: Amount taken on each miss before clamping.
        total:   Current running total. Never negative.
        rows:    ResultRow per resolved stage, in resolution order.
    """

    def __init__(self, penalty: int) -> None:
        if penalty < 0:
            raise ValueError("penalty cannot be negative")
        self.penalty = penalty
        self.total = 0
        self.rows: list[ResultRow] = []

    def record(self, stage: StageSpec, is_correct: bool) -> int:
        """Apply one stage outcome and return the signed delta.

        Args:
            stage:      The resolved stage.
            is_correct: True for a correct pick; False for a miss or timeout.

        Returns:
            The change applied to total. Positive on success, zero or
            negative on failure.
        """
        before = self.total
        if is_correct:
            self.total = apply_correct(before, stage)
        else:
            self.total = apply_incorrect_or_timeout(before, self.penalty)
        delta = self.total - before
        self.rows.append(ResultRow(stage=stage.index, is_correct=is_correct, reward_delta=delta))
        return delta
