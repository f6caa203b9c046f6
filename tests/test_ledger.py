import pytest

from core.ledger import RewardLedger, apply_correct, apply_incorrect_or_timeout
from stages.catalog import StageSpec

STAGE = StageSpec(index=1, time_budget_s=5, option_count=3, reward_on_success=10)


def test_correct_adds_stage_reward():
    assert apply_correct(5, STAGE) == 15


@pytest.mark.parametrize("acc, penalty, expected", [
    (0, 10, 0),
    (3, 10, 0),
    (10, 10, 0),
    (25, 10, 15),
    (8, 5, 3),
])
def test_penalty_is_clamped_to_current_total(acc, penalty, expected):
    assert apply_incorrect_or_timeout(acc, penalty) == expected


def test_record_returns_applied_delta_and_rows():
    ledger = RewardLedger(penalty=10)
    assert ledger.record(STAGE, True) == 10
    assert ledger.record(STAGE, False) == -10
    assert ledger.record(STAGE, False) == 0
    assert ledger.total == 0
    assert [(r.is_correct, r.reward_delta) for r in ledger.rows] == [
        (True, 10), (False, -10), (False, 0),
    ]


def test_total_never_negative_on_losing_streak():
    ledger = RewardLedger(penalty=5)
    ledger.record(STAGE, True)
    for _ in range(10):
        ledger.record(STAGE, False)
        assert ledger.total >= 0
    assert ledger.total == 0


def test_negative_penalty_rejected():
    with pytest.raises(ValueError):
        RewardLedger(penalty=-1)
