"""
core/timer.py — Deadline-based countdown for Shadow Pieces.

Every stage runs in two parts:

    PREFILL   — a short cosmetic lead-in that eases the timer ring from
                0% to 100%. It consumes none of the stage budget and is
                not a failure window.
    COUNTING  — the real countdown. The deadline is an absolute clock
                reading taken when the lead-in ends, so a throttled or
                backgrounded loop never drifts: each tick simply compares
                now() against the deadline.

Timer owns only its own state. It does not touch the session, the ledger
or the puzzle view. core/engine.py calls tick() once per frame and reacts
to the events it returns.

Every start(), freeze() and cancel() bumps a registration token. A tick
made with an older token is ignored, so a loop that still holds the
previous stage's token can never fire a timeout on the stage that
replaced it.

Usage:
    timer = ChallengeTimer(clock=time.monotonic)
    token = timer.start(budget_s=10)

    # each frame:
    event = timer.tick(token)
    if event is TimerEvent.EXPIRED:
        # handle time-out in engine.py
"""

from __future__ import annotations
import time
from enum import Enum, auto
from typing import Callable

from settings import DANGER_THRESHOLDS, PREFILL_DURATION_S
from utils.easing import EasingFunc, ease_out_cubic

Clock = Callable[[], float]


class TimerPhase(Enum):
    IDLE     = auto()
    PREFILL  = auto()
    COUNTING = auto()
    FROZEN   = auto()
    EXPIRED  = auto()


class TimerEvent(Enum):
    """Edges reported by tick()."""
    PREFILL_DONE = auto()
    EXPIRED      = auto()


class DangerTier(Enum):
    """Coarse remaining-time bucket. Presentation only, never scored."""
    SAFE     = auto()
    WARN1    = auto()
    WARN2    = auto()
    CRITICAL = auto()


def danger_tier_for(progress_percent: float) -> DangerTier:
    """Map a remaining-time percentage to its DangerTier.

    Args:
        progress_percent: Remaining time in [0, 100].

    Returns:
        CRITICAL at or below 7%, WARN2 at or below 15%, WARN1 at or
        below 30%, otherwise SAFE.
    """
    for name, ceiling in DANGER_THRESHOLDS:
        if progress_percent <= ceiling:
            return DangerTier[name]
    return DangerTier.SAFE


class ChallengeTimer:
    """Cooperative countdown with an eased lead-in.

    Attributes:
        _clock:        Callable returning seconds. Injected for tests.
        _prefill_s:    Lead-in duration in seconds.
        _easing:       Curve applied to the lead-in fill.
        _phase:        Current TimerPhase.
        _token:        Current registration token.
        _budget:       Seconds on the countdown for the current stage.
        _prefill_from: Clock reading when the lead-in started.
        _deadline:     Absolute clock reading at which the countdown hits zero.
        _progress:     Last computed progress in [0, 100].
    """

    def __init__(
        self,
        clock: Clock = time.monotonic,
        prefill_s: float = PREFILL_DURATION_S,
        easing: EasingFunc = ease_out_cubic,
    ) -> None:
        self._clock = clock
        self._prefill_s = prefill_s
        self._easing = easing
        self._phase = TimerPhase.IDLE
        self._token = 0
        self._budget = 0.0
        self._prefill_from = 0.0
        self._deadline = 0.0
        self._progress = 0.0

    # ── Registration ──────────────────────────────────────────────────────────

    def start(self, budget_s: float) -> int:
        """Cancel any running stage and begin the lead-in for a new one.

        Args:
            budget_s: Countdown length in seconds. Must be positive.

        Returns:
            The registration token to pass to tick().
        """
        if budget_s <= 0:
            raise ValueError("time budget must be positive")
        self._token += 1
        self._budget = float(budget_s)
        self._prefill_from = self._clock()
        self._deadline = 0.0
        self._progress = 0.0
        self._phase = TimerPhase.PREFILL
        return self._token

    def freeze(self) -> None:
        """Stop counting and keep the current progress on screen.

        Call this when the round is resolved so the ring holds still
        while the answer is revealed.
        """
        if self._phase in (TimerPhase.PREFILL, TimerPhase.COUNTING):
            self._phase = TimerPhase.FROZEN
        self._token += 1

    def cancel(self) -> None:
        """Drop the current registration entirely and reset to idle."""
        self._token += 1
        self._phase = TimerPhase.IDLE
        self._progress = 0.0

    def is_current(self, token: int) -> bool:
        return token == self._token

    # ── Per-frame update ──────────────────────────────────────────────────────

    def tick(self, token: int | None = None) -> TimerEvent | None:
        """Re-evaluate the clock and report a phase edge if one happened.

        Args:
            token: Registration token from start(). A stale token makes
                   the tick a no-op. None ticks the current registration.

        Returns:
            TimerEvent.PREFILL_DONE on the tick the lead-in completes,
            TimerEvent.EXPIRED on the tick the deadline passes, else None.
        """
        if token is not None and token != self._token:
            return None

        now = self._clock()

        if self._phase is TimerPhase.PREFILL:
            elapsed = (now - self._prefill_from) / self._prefill_s if self._prefill_s > 0 else 1.0
            if elapsed < 1.0:
                self._progress = self._easing(elapsed) * 100.0
                return None
            self._deadline = now + self._budget
            self._progress = 100.0
            self._phase = TimerPhase.COUNTING
            return TimerEvent.PREFILL_DONE

        if self._phase is TimerPhase.COUNTING:
            left = max(0.0, self._deadline - now)
            self._progress = max(0.0, min(100.0, left / self._budget * 100.0))
            if left <= 0.0:
                self._progress = 0.0
                self._phase = TimerPhase.EXPIRED
                self._token += 1
                return TimerEvent.EXPIRED

        return None

    # ── Reads ─────────────────────────────────────────────────────────────────

    @property
    def phase(self) -> TimerPhase:
        return self._phase

    @property
    def token(self) -> int:
        return self._token

    @property
    def progress_percent(self) -> float:
        """Remaining time in [0, 100]. 100 = full time left, 0 = expired."""
        return self._progress

    @property
    def danger_tier(self) -> DangerTier:
        return danger_tier_for(self._progress)

    def remaining_s(self) -> float:
        """Seconds left on the countdown. The full budget during the lead-in."""
        if self._phase is TimerPhase.PREFILL:
            return self._budget
        if self._phase is TimerPhase.COUNTING:
            return max(0.0, self._deadline - self._clock())
        return self._budget * self._progress / 100.0
