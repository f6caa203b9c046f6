import pytest

from core.timer import ChallengeTimer, DangerTier, TimerEvent, TimerPhase, danger_tier_for
from utils.easing import linear


def counting_timer(clock, budget):
    timer = ChallengeTimer(clock=clock, prefill_s=0.5)
    token = timer.start(budget)
    clock.advance(0.5)
    assert timer.tick(token) is TimerEvent.PREFILL_DONE
    return timer, token


def test_prefill_fills_without_consuming_budget(clock):
    timer = ChallengeTimer(clock=clock, prefill_s=0.5, easing=linear)
    token = timer.start(10)
    assert timer.phase is TimerPhase.PREFILL

    clock.advance(0.25)
    assert timer.tick(token) is None
    assert timer.progress_percent == pytest.approx(50.0)
    assert timer.remaining_s() == 10

    clock.advance(0.25)
    assert timer.tick(token) is TimerEvent.PREFILL_DONE
    assert timer.phase is TimerPhase.COUNTING
    assert timer.progress_percent == 100.0
    assert timer.remaining_s() == pytest.approx(10.0)


def test_countdown_reports_expiry_once(clock):
    timer, token = counting_timer(clock, 5)

    clock.advance(2.5)
    assert timer.tick(token) is None
    assert timer.progress_percent == pytest.approx(50.0)

    clock.advance(2.5)
    assert timer.tick(token) is TimerEvent.EXPIRED
    assert timer.phase is TimerPhase.EXPIRED
    assert timer.progress_percent == 0.0

    clock.advance(1)
    assert timer.tick(token) is None
    assert timer.tick() is None


def test_throttled_loop_expires_on_first_late_tick(clock):
    timer, token = counting_timer(clock, 5)
    clock.advance(60)
    assert timer.tick(token) is TimerEvent.EXPIRED


def test_stale_token_never_fires_on_new_stage(clock):
    timer, old = counting_timer(clock, 5)

    new = timer.start(10)
    assert new != old
    clock.advance(6)
    assert timer.tick(old) is None
    assert timer.phase is TimerPhase.PREFILL
    assert not timer.is_current(old)
    assert timer.is_current(new)


def test_freeze_holds_progress(clock):
    timer, token = counting_timer(clock, 4)
    clock.advance(1)
    timer.tick(token)
    held = timer.progress_percent

    timer.freeze()
    clock.advance(10)
    assert timer.tick(token) is None
    assert timer.tick() is None
    assert timer.phase is TimerPhase.FROZEN
    assert timer.progress_percent == held
    assert held == pytest.approx(75.0)


def test_cancel_resets_to_idle(clock):
    timer = ChallengeTimer(clock=clock)
    timer.start(4)
    timer.cancel()
    assert timer.phase is TimerPhase.IDLE
    assert timer.progress_percent == 0.0


def test_non_positive_budget_rejected(clock):
    with pytest.raises(ValueError):
        ChallengeTimer(clock=clock).start(0)


@pytest.mark.parametrize("progress, tier", [
    (100.0, DangerTier.SAFE),
    (30.1, DangerTier.SAFE),
    (30.0, DangerTier.WARN1),
    (15.0, DangerTier.WARN2),
    (7.0, DangerTier.CRITICAL),
    (0.0, DangerTier.CRITICAL),
])
def test_danger_tier_thresholds(progress, tier):
    assert danger_tier_for(progress) is tier
