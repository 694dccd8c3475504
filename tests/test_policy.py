from __future__ import annotations

from dataclasses import replace

import pytest

from adaptation.levels import DifficultyLevel
from adaptation.policy import DecisionRequest, applied_rule, decide, validate_request
from data.models import Action, AppliedRule, Provenance


def _req(**overrides) -> DecisionRequest:
    base = DecisionRequest(
        level=DifficultyLevel.MEDIUM,
        consecutive_errors=0,
        hints_used=0,
        retries=0,
        latency_sec=1.0,
        perseveration=0,
        high_frustration_streak=0,
        success_streak=0,
        correct=True,
    )
    return replace(base, **overrides)


def _saturated(**overrides) -> DecisionRequest:
    return _req(
        consecutive_errors=3,
        hints_used=2,
        retries=2,
        latency_sec=12,
        perseveration=2,
        correct=False,
        **overrides,
    )


def test_low_frustration_keeps() -> None:
    result = decide(_req())
    assert result.frustration_value == 0.0
    assert result.action is Action.KEEP
    assert result.suggested_level is DifficultyLevel.MEDIUM
    assert result.next_high_frustration_streak == 0
    assert result.next_success_streak == 1


def test_moderate_frustration_supports() -> None:
    result = decide(_req(consecutive_errors=3, retries=2, latency_sec=3, correct=False))
    assert result.frustration_value == pytest.approx(0.50)
    assert result.action is Action.SUPPORT
    assert result.next_high_frustration_streak == 0
    assert result.next_success_streak == 0


def test_first_high_frustration_supports_and_counts_streak() -> None:
    result = decide(_saturated(high_frustration_streak=0))
    assert result.frustration_value == pytest.approx(1.0)
    assert result.action is Action.SUPPORT
    assert result.next_high_frustration_streak == 1
    assert result.suggested_level is DifficultyLevel.MEDIUM


def test_second_high_frustration_eases_one_level_and_resets_streaks() -> None:
    result = decide(_saturated(high_frustration_streak=1, success_streak=2))
    assert result.action is Action.EASE
    assert result.suggested_level is DifficultyLevel.EASY
    assert result.next_high_frustration_streak == 0
    assert result.next_success_streak == 0


def test_ease_at_lowest_level_stays_at_lowest() -> None:
    result = decide(_saturated(level=DifficultyLevel.EASY, high_frustration_streak=5))
    assert result.action is Action.EASE
    assert result.suggested_level is DifficultyLevel.EASY


def test_third_success_levels_up_and_resets_streak() -> None:
    result = decide(_req(level=DifficultyLevel.EASY, success_streak=2))
    assert result.action is Action.KEEP
    assert result.suggested_level is DifficultyLevel.MEDIUM
    assert result.next_success_streak == 0
    assert applied_rule(result.action, DifficultyLevel.EASY, result.suggested_level) is AppliedRule.LEVELUP_BY_STREAK


def test_level_up_at_top_is_a_no_op() -> None:
    result = decide(_req(level=DifficultyLevel.HARD, success_streak=2))
    assert result.suggested_level is DifficultyLevel.HARD
    assert result.next_success_streak == 0
    assert applied_rule(result.action, DifficultyLevel.HARD, result.suggested_level) is AppliedRule.NONE


def test_incorrect_resets_success_streak() -> None:
    result = decide(_req(success_streak=2, correct=False))
    assert result.next_success_streak == 0
    assert result.suggested_level is DifficultyLevel.MEDIUM


def test_three_correct_trials_in_a_row_level_up_on_the_third() -> None:
    level = DifficultyLevel.EASY
    success = 0
    high = 0
    results = []
    for _ in range(3):
        r = decide(_req(level=level, success_streak=success, high_frustration_streak=high))
        results.append(r)
        success, high = r.next_success_streak, r.next_high_frustration_streak
        before, level = level, r.suggested_level
    assert [r.action for r in results] == [Action.KEEP] * 3
    assert [r.next_success_streak for r in results] == [1, 2, 0]
    assert results[-1].suggested_level is DifficultyLevel.MEDIUM
    assert applied_rule(results[-1].action, before, level) is AppliedRule.LEVELUP_BY_STREAK


def test_high_streak_resets_when_frustration_drops() -> None:
    first = decide(_saturated())
    assert first.next_high_frustration_streak == 1
    calm = decide(_req(high_frustration_streak=first.next_high_frustration_streak))
    assert calm.next_high_frustration_streak == 0


def test_decide_is_deterministic() -> None:
    req = _saturated(high_frustration_streak=1)
    assert decide(req) == decide(req)
    assert decide(req, provenance=Provenance.REMOTE).provenance is Provenance.REMOTE


def test_applied_rule_tags() -> None:
    lvl = DifficultyLevel.MEDIUM
    assert applied_rule(Action.SUPPORT, lvl, lvl) is AppliedRule.SUPPORT_BY_FRUSTRATION
    assert applied_rule(Action.EASE, lvl, DifficultyLevel.EASY) is AppliedRule.EASE_BY_FRUSTRATION
    assert applied_rule(Action.KEEP, lvl, lvl) is AppliedRule.NONE


def test_validate_request_accepts_wire_body() -> None:
    wire = _saturated(high_frustration_streak=1).to_wire()
    req = validate_request(wire)
    assert req == _saturated(high_frustration_streak=1)


@pytest.mark.parametrize(
    "patch, code",
    [
        ({"level": "extreme"}, "level_must_be_easy_medium_or_hard"),
        ({"hintsUsed": -1}, "hintsUsed_must_be_non_negative_int"),
        ({"successStreak": True}, "successStreak_must_be_non_negative_int"),
        ({"latencySec": "slow"}, "latencySec_must_be_non_negative_number"),
        ({"correct": 1}, "correct_must_be_bool"),
    ],
)
def test_validate_request_rejects_bad_fields(patch: dict, code: str) -> None:
    body = _req().to_wire()
    body.update(patch)
    with pytest.raises(ValueError) as excinfo:
        validate_request(body)
    assert str(excinfo.value) == code
