"""
core/engine.py — Reveal-and-guess state machine for Shadow Pieces.

ChallengeEngine owns the session and orchestrates every subsystem:
    - SessionState     (rounds, stage index, totals, phase)
    - ChallengeTimer   (eased lead-in + deadline countdown)
    - RewardLedger     (floor-clamped penalty, result rows)
    - PuzzleView       (puzzle / reveal frames for the current round)
    - Settlement       (one-time currency grant at the end)

States:
    LOADING   — no session yet; waiting for the entity pool
    PREFILL   — cosmetic timer lead-in, input ignored
    COUNTING  — live countdown, one submission accepted
    RESOLVED  — outcome and original picture shown, timer frozen
    FINISHED  — terminal; settlement may be claimed

Transitions:
    LOADING   → PREFILL   : load() builds every round
    PREFILL   → COUNTING  : lead-in completes (timer event)
    COUNTING  → RESOLVED  : submit() or the countdown reaches zero
    RESOLVED  → PREFILL   : advance() on any stage but the last
    RESOLVED  → FINISHED  : advance() on the last stage

The presentation layer reads snapshot() and may only call submit(),
advance(), claim() at the end, and the UI-only highlight(). Every
command is a guarded no-op in the wrong phase, which is what makes a
double submission or a timeout after a pick structurally impossible.

Images are loaded by the host (renderer/images.py). The engine publishes
image_request as (generation, ref); a result is applied only when its
generation still matches, so a picture decoded for a stage the player
has already left is discarded.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Iterable

import pygame

from core.errors import GrantError, ImageLoadError
from core.ledger import ResultRow, RewardLedger
from core.round_generator import RoundGenerator
from core.session import Phase, Round, SessionState
from core.settlement import ClaimOutcome, Settlement
from core.timer import Clock, ChallengeTimer, DangerTier, TimerEvent
from renderer.reveal import PuzzleView
from settings import NOTICE_DURATION_S, PUZZLE_SIZE
from stages.catalog import StageSpec
from stages.entity import Entity
from stages.registry import GameDef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """Transient message for the player (the toast line)."""
    text: str
    ok: bool
    expires_at: float


@dataclass(frozen=True)
class RoundView:
    """Read-only view of a Round. The answer is hidden until submission."""
    stage_index: int
    options: tuple[Entity, ...]
    image_ref: str
    submitted: bool
    picked_id: str | None
    is_correct: bool | None
    reward_delta: int | None
    answer_id: str | None
    reveal_label: str | None

    @classmethod
    def of(cls, rnd: Round) -> RoundView:
        return cls(
            stage_index=rnd.stage.index,
            options=rnd.options,
            image_ref=rnd.image_ref,
            submitted=rnd.submitted,
            picked_id=rnd.picked_id,
            is_correct=rnd.is_correct,
            reward_delta=rnd.reward_delta,
            answer_id=rnd.answer.id if rnd.submitted else None,
            reveal_label=rnd.reveal_label if rnd.submitted else None,
        )


@dataclass(frozen=True)
class EngineSnapshot:
    """Everything the presentation layer is allowed to read."""
    phase: Phase
    current_stage: StageSpec | None
    stage_label: str
    total_stages: int
    round: RoundView | None
    progress_percent: float
    danger_tier: DangerTier
    running_total: int
    correct_count: int
    wrong_count: int
    results: tuple[ResultRow, ...]
    revealed: bool
    highlighted_id: str | None
    notice: Notice | None


class ChallengeEngine:
    """Orchestrates one reveal-and-guess session via a state machine.

    Attributes:
        game:              GameDef providing stages, penalty and render mode.
        state:             SessionState, None until load() succeeds.
        timer:             ChallengeTimer for the current stage.
        ledger:            RewardLedger for the session.
        view:              PuzzleView for the current round.
        _generator:        RoundGenerator used by load().
        _settlement:       Settlement for the final grant. None disables claim().
        _tick_token:       Timer registration for the current stage, or None.
        _image_generation: Bumped on every stage change and on close().
        _image_pending:    True until the current round's picture arrives or fails.
        _highlighted:      Option under the cursor. UI only, never scored.
        _notice:           Current transient notice.
        _closed:           True after close(); every command becomes a no-op.
    """

    def __init__(
        self,
        game: GameDef,
        clock: Clock = time.monotonic,
        generator: RoundGenerator | None = None,
        settlement: Settlement | None = None,
        view_size: int = PUZZLE_SIZE,
    ) -> None:
        self.game = game
        self.state: SessionState | None = None
        self.timer = ChallengeTimer(clock=clock)
        self.ledger = RewardLedger(game.penalty)
        self.view = PuzzleView(game.render_mode, view_size)
        self._clock = clock
        self._generator = generator or RoundGenerator()
        self._settlement = settlement
        self._tick_token: int | None = None
        self._image_generation = 0
        self._image_pending = False
        self._highlighted: str | None = None
        self._notice: Notice | None = None
        self._closed = False

    # ── Reads ─────────────────────────────────────────────────────────────────

    @property
    def phase(self) -> Phase:
        return self.state.phase if self.state else Phase.LOADING

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def settlement(self) -> Settlement | None:
        return self._settlement

    def snapshot(self) -> EngineSnapshot:
        """Return a read-only picture of the session for rendering."""
        total_stages = len(self.game.stages)
        notice = self._notice
        if notice and notice.expires_at <= self._clock():
            notice = self._notice = None

        if self.state is None:
            return EngineSnapshot(
                phase=Phase.LOADING, current_stage=None,
                stage_label=f"-/{total_stages}", total_stages=total_stages,
                round=None, progress_percent=0.0, danger_tier=DangerTier.SAFE,
                running_total=0, correct_count=0, wrong_count=0, results=(),
                revealed=False, highlighted_id=None, notice=notice,
            )

        rnd = self.state.current_round
        return EngineSnapshot(
            phase=self.state.phase,
            current_stage=rnd.stage,
            stage_label=f"{rnd.stage.index}/{total_stages}",
            total_stages=total_stages,
            round=RoundView.of(rnd),
            progress_percent=self.timer.progress_percent,
            danger_tier=self.timer.danger_tier,
            running_total=self.state.running_total,
            correct_count=self.state.correct_count,
            wrong_count=self.state.wrong_count,
            results=tuple(self.ledger.rows),
            revealed=self.view.revealed,
            highlighted_id=self._highlighted,
            notice=notice,
        )

    # ── Loading ───────────────────────────────────────────────────────────────

    def load(self, pool: Iterable[Entity]) -> None:
        """Build every round from the pool and start the first stage.

        Raises:
            EmptyPoolError: If the pool is empty. No session is created.
        """
        if self.state is not None or self._closed:
            return
        rounds = self._generator.generate(pool, self.game.stages)
        self.state = SessionState(rounds=rounds)
        logger.info("Session started: game=%s stages=%d", self.game.id, len(rounds))
        self._begin_stage()

    def _begin_stage(self) -> None:
        """Enter PREFILL for the current round, cancelling the previous stage."""
        rnd = self.state.current_round
        self.state.phase = Phase.PREFILL
        self._tick_token = self.timer.start(rnd.stage.time_budget_s)
        self._highlighted = None
        self._image_generation += 1
        self._image_pending = True
        self.view.reset()
        logger.info(
            "Stage %d/%d: %.1fs, %d options",
            rnd.stage.index, len(self.state.rounds), rnd.stage.time_budget_s, len(rnd.options),
        )

    # ── Per-frame update ──────────────────────────────────────────────────────

    def update(self) -> None:
        """Advance the timer by re-reading the clock. Call once per frame."""
        if self._closed or self.state is None or self._tick_token is None:
            return
        if self.state.phase not in (Phase.PREFILL, Phase.COUNTING):
            return

        event = self.timer.tick(self._tick_token)
        if event is TimerEvent.PREFILL_DONE:
            self.state.phase = Phase.COUNTING
        elif event is TimerEvent.EXPIRED:
            self._timeout_auto_submit()

    # ── Commands ──────────────────────────────────────────────────────────────

    def highlight(self, option_id: str | None) -> None:
        """Mark the option under the cursor. Purely visual."""
        if self._closed or self.state is None:
            return
        self._highlighted = option_id

    def submit(self, option_id: str) -> bool:
        """Submit the player's pick for the current round.

        Ignored outside COUNTING, after the round was already submitted,
        or when option_id is not one of the round's options.

        Returns:
            True if the pick was scored.
        """
        if self._closed or self.state is None or self.state.phase is not Phase.COUNTING:
            return False
        rnd = self.state.current_round
        if rnd.submitted or not rnd.has_option(option_id):
            return False
        self._resolve(rnd, option_id, option_id == rnd.answer.id)
        return True

    def _timeout_auto_submit(self) -> None:
        """Score the current round as wrong because the countdown hit zero.

        A highlighted-but-unconfirmed option does not count as a pick.
        """
        rnd = self.state.current_round
        if rnd.submitted:
            return
        logger.info("Stage %d timed out", rnd.stage.index)
        self._resolve(rnd, None, False)

    def _resolve(self, rnd: Round, picked_id: str | None, is_correct: bool) -> None:
        self.timer.freeze()
        self._tick_token = None

        delta = self.ledger.record(rnd.stage, is_correct)
        rnd.resolve(picked_id=picked_id, is_correct=is_correct, reward_delta=delta)

        self.state.running_total = self.ledger.total
        if is_correct:
            self.state.correct_count += 1
        else:
            self.state.wrong_count += 1

        self.view.show_reveal()
        self.state.phase = Phase.RESOLVED
        logger.info(
            "Stage %d resolved: correct=%s delta=%+d total=%d",
            rnd.stage.index, is_correct, delta, self.state.running_total,
        )

    def advance(self) -> bool:
        """Leave RESOLVED: next stage, or FINISHED after the last one.

        Returns:
            True if a transition happened.
        """
        if self._closed or self.state is None or self.state.phase is not Phase.RESOLVED:
            return False

        if self.state.is_last_stage:
            self.timer.cancel()
            self._image_pending = False
            self.state.phase = Phase.FINISHED
            logger.info(
                "Session finished: total=%d correct=%d wrong=%d",
                self.state.running_total, self.state.correct_count, self.state.wrong_count,
            )
            return True

        self.state.current_stage_index += 1
        self._begin_stage()
        return True

    async def claim(self) -> ClaimOutcome | None:
        """Pay out the final total. Safe to call from every close path.

        Returns:
            The ClaimOutcome, or None outside FINISHED, without a
            settlement, or when the grant failed. A failure posts a
            notice and leaves the claim open; it never blocks exit.
        """
        if self.state is None or self.state.phase is not Phase.FINISHED or self._settlement is None:
            return None
        total = self.state.running_total
        try:
            outcome = await self._settlement.claim(total)
        except GrantError as exc:
            logger.warning("Settlement failed: %s", exc)
            self._post_notice("Reward payment failed", ok=False)
            return None
        if outcome is ClaimOutcome.GRANTED and total > 0:
            self._post_notice(f"+{total} gold!", ok=True)
        return outcome

    def close(self) -> None:
        """Unmount: cancel the timer and drop any outstanding image request."""
        if self._closed:
            return
        self.timer.cancel()
        self._tick_token = None
        self._image_generation += 1
        self._image_pending = False
        self._closed = True
        logger.info("Session closed: game=%s", self.game.id)

    # ── Images ────────────────────────────────────────────────────────────────

    @property
    def image_request(self) -> tuple[int, str] | None:
        """(generation, asset ref) of the picture the current round still needs."""
        if self._closed or self.state is None or not self._image_pending:
            return None
        return self._image_generation, self.state.current_round.image_ref

    def deliver_image(self, generation: int, surface: pygame.Surface) -> bool:
        """Install a decoded picture if it still belongs to the current round.

        Returns:
            False when the result is stale and was discarded.
        """
        if self._closed or generation != self._image_generation or not self._image_pending:
            logger.debug("Discarding stale image for generation %d", generation)
            return False
        self._image_pending = False
        self.view.set_source(surface)
        return True

    def image_failed(self, generation: int, error: ImageLoadError) -> bool:
        """Fall back to the placeholder card; the round stays playable."""
        if self._closed or generation != self._image_generation or not self._image_pending:
            return False
        self._image_pending = False
        self.view.set_source(None)
        logger.warning("Round image unavailable: %s", error)
        self._post_notice("Image unavailable", ok=False)
        return True

    def resize(self, size: int) -> None:
        """Re-render the puzzle at a new size from the cached picture."""
        self.view.resize(size)

    # ── Notices ───────────────────────────────────────────────────────────────

    def _post_notice(self, text: str, ok: bool) -> None:
        self._notice = Notice(text=text, ok=ok, expires_at=self._clock() + NOTICE_DURATION_S)
