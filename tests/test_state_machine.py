from __future__ import annotations

import random
from dataclasses import dataclass, replace
from pathlib import Path

import pytest

from adaptation.gateway import DecisionGateway
from adaptation.levels import DifficultyLevel
from adaptation.policy import decide
from config.settings import SessionConfig
from data.attempt_log import AttemptLog
from data.models import Action, AppliedRule, Option, Provenance
from game.state_machine import (
    ADVANCE_EASE,
    ADVANCE_NEXT,
    ADVANCE_RETRY,
    PHASE_CHOOSING,
    PHASE_FEEDBACK,
    SessionStateMachine,
    latency_seconds,
)


@dataclass
class RemoteStub:
    def decide(self, req):
        return replace(decide(req), provenance=Provenance.LOCAL)


def _config(tmp_path: Path, max_attempts: int = 100) -> SessionConfig:
    return SessionConfig(
        max_attempts=max_attempts,
        store_path=tmp_path / "attempts.json",
        events_path=tmp_path / "events.jsonl",
    )


def _machine(tmp_path: Path, gateway: DecisionGateway | None = None, **cfg) -> SessionStateMachine:
    return SessionStateMachine(
        gateway=gateway or DecisionGateway(),
        config=_config(tmp_path, **cfg),
        rng=random.Random(1234),
        wall_clock=lambda: 1_700_000_000.0,
        now_ms=0,
    )


def _correct(sm: SessionStateMachine) -> Option:
    return sm.trial.correct_option()


def _wrong(sm: SessionStateMachine, k: int = 0) -> Option:
    return [o for o in sm.trial.options if o.category != sm.trial.target][k]


def _answer_correctly(sm: SessionStateMachine, now_ms: int):
    outcome = sm.choose(_correct(sm), now_ms)
    sm.update(now_ms + sm.config.feedback_delay_ms)
    return outcome


def test_initial_state(tmp_path) -> None:
    sm = _machine(tmp_path)
    assert sm.level is DifficultyLevel.EASY
    assert sm.phase == PHASE_CHOOSING
    assert sm.trial is not None
    assert sm.trial.level is DifficultyLevel.EASY
    c = sm.counters
    assert (c.consecutive_errors, c.retries_this_trial, c.perseveration_count) == (0, 0, 0)
    assert (c.hints_used_this_trial, c.success_streak, c.high_frustration_streak) == (0, 0, 0)
    assert c.last_wrong_option_id is None
    assert len(sm.attempt_log) == 0


def test_latency_rounds_half_up_to_whole_seconds() -> None:
    assert latency_seconds(0, 0) == 0
    assert latency_seconds(0, 2499) == 2
    assert latency_seconds(0, 2500) == 3
    assert latency_seconds(1000, 13_000) == 12


def test_correct_choice_advances_after_feedback_delay(tmp_path) -> None:
    sm = _machine(tmp_path)
    first = sm.trial
    outcome = sm.choose(_correct(sm), 1500)

    assert outcome is not None
    assert outcome.advance == ADVANCE_NEXT
    assert outcome.record.correct is True
    assert outcome.record.trial_id == first.id
    assert outcome.record.latency_seconds == 2
    assert outcome.record.timestamp == 1_700_000_000_000
    assert outcome.record.action is Action.KEEP
    assert sm.phase == PHASE_FEEDBACK
    assert sm.feedback == "correct"

    assert sm.update(1500 + 699) is False
    assert sm.trial is first
    assert sm.update(1500 + 700) is True
    assert sm.trial is not first
    assert sm.trial.target != first.target
    assert sm.phase == PHASE_CHOOSING
    assert sm.trial_started_at_ms == 2200
    assert sm.counters.success_streak == 1


def test_choice_is_ignored_while_feedback_is_pending(tmp_path) -> None:
    sm = _machine(tmp_path)
    sm.choose(_correct(sm), 100)
    assert sm.choose(_correct(sm), 200) is None
    assert len(sm.attempt_log) == 1


def test_wrong_choices_count_errors_retries_and_perseveration(tmp_path) -> None:
    sm = _machine(tmp_path)
    trial = sm.trial
    a, b = _wrong(sm, 0), _wrong(sm, 1)

    out = sm.choose(a, 500)
    assert out.advance == ADVANCE_RETRY
    assert sm.trial is trial
    assert sm.counters.consecutive_errors == 1
    assert sm.counters.retries_this_trial == 1
    assert sm.counters.perseveration_count == 0
    assert sm.counters.last_wrong_option_id == a.id

    sm.choose(a, 1000)
    assert sm.counters.perseveration_count == 1

    sm.choose(b, 1500)
    assert sm.counters.perseveration_count == 1
    assert sm.counters.last_wrong_option_id == b.id
    assert sm.counters.consecutive_errors == 3
    assert sm.feedback == "wrong"

    sm.choose(_correct(sm), 2000)
    c = sm.counters
    assert (c.consecutive_errors, c.retries_this_trial, c.perseveration_count) == (0, 0, 0)
    assert c.last_wrong_option_id is None


def test_support_turns_on_hint_which_clears_after_delay(tmp_path) -> None:
    sm = _machine(tmp_path)
    sm.use_hint()
    sm.use_hint()
    sm.update(0)
    sm.hint_on = False
    out = sm.choose(_wrong(sm), 1000)
    assert out.decision.action is Action.SUPPORT
    assert out.record.applied_rule is AppliedRule.SUPPORT_BY_FRUSTRATION
    assert out.record.hints_used == 2
    assert sm.hint_on is True
    sm.update(1000 + 399)
    assert sm.hint_on is True
    sm.update(1000 + 400)
    assert sm.hint_on is False


def test_use_hint_only_touches_hint_tally(tmp_path) -> None:
    sm = _machine(tmp_path)
    trial = sm.trial
    sm.use_hint()
    assert sm.hint_on is True
    assert sm.counters.hints_used_this_trial == 1
    assert sm.counters.consecutive_errors == 0
    assert sm.trial is trial
    assert len(sm.attempt_log) == 0


def test_three_correct_trials_level_up(tmp_path) -> None:
    sm = _machine(tmp_path)
    outcomes = [_answer_correctly(sm, 1000 * (i + 1)) for i in range(3)]
    assert [o.record.applied_rule for o in outcomes] == [
        AppliedRule.NONE,
        AppliedRule.NONE,
        AppliedRule.LEVELUP_BY_STREAK,
    ]
    last = outcomes[-1].record
    assert last.action is Action.KEEP
    assert last.level_before is DifficultyLevel.EASY
    assert last.level_after is DifficultyLevel.MEDIUM
    assert sm.level is DifficultyLevel.MEDIUM
    assert sm.trial.level is DifficultyLevel.MEDIUM
    assert sm.counters.success_streak == 0


def test_sustained_high_frustration_eases_immediately(tmp_path) -> None:
    sm = _machine(tmp_path)
    now = 0
    for _ in range(3):
        now += 1000
        _answer_correctly(sm, now)
    assert sm.level is DifficultyLevel.MEDIUM

    trial = sm.trial
    sm.use_hint()
    sm.use_hint()
    wrong = _wrong(sm)
    actions = []
    outcome = None
    for _ in range(4):
        now += 1000
        outcome = sm.choose(wrong, now)
        actions.append(outcome.decision.action)

    assert actions == [Action.SUPPORT, Action.SUPPORT, Action.SUPPORT, Action.EASE]
    record = outcome.record
    assert outcome.advance == ADVANCE_EASE
    assert record.applied_rule is AppliedRule.EASE_BY_FRUSTRATION
    assert record.level_before is DifficultyLevel.MEDIUM
    assert record.level_after is DifficultyLevel.EASY
    assert record.frustration_value == pytest.approx(0.80)

    # Новый раунд сразу, без паузы.
    assert sm.trial is not trial
    assert sm.trial.target != trial.target
    assert sm.trial.level is DifficultyLevel.EASY
    assert sm.phase == PHASE_CHOOSING
    assert sm.trial_started_at_ms == now
    c = sm.counters
    assert (c.consecutive_errors, c.retries_this_trial, c.perseveration_count, c.hints_used_this_trial) == (0, 0, 0, 0)
    assert c.last_wrong_option_id is None
    assert c.high_frustration_streak == 0
    assert c.success_streak == 0
    assert sm.hint_on is False


def test_foreign_option_is_rejected(tmp_path) -> None:
    sm = _machine(tmp_path)
    stranger = Option(id="nope", category=sm.trial.target, variant_id="x", hex="#000000")
    with pytest.raises(ValueError):
        sm.choose(stranger, 100)


def test_choose_without_trial_regenerates_and_does_nothing_else(tmp_path) -> None:
    sm = _machine(tmp_path)
    sm.trial = None
    assert sm.choose(Option("x", "red", "red_base", "#FF3B30"), 10) is None
    assert sm.trial is not None
    assert len(sm.attempt_log) == 0


def test_attempt_log_is_bounded_to_most_recent(tmp_path) -> None:
    sm = _machine(tmp_path, max_attempts=5)
    for i in range(12):
        sm.choose(_wrong(sm, i % 2), 100 * (i + 1))
        if sm.phase != PHASE_CHOOSING:
            sm.update(10_000 * (i + 1))
    snap = sm.attempt_log.snapshot()
    assert len(snap) == 5
    assert sm.attempt_log.latest() is snap[-1]


def test_reset_clears_log_and_restores_initial_state(tmp_path) -> None:
    sm = _machine(tmp_path)
    for i in range(3):
        _answer_correctly(sm, 1000 * (i + 1))
    assert sm.level is DifficultyLevel.MEDIUM
    sm.reset(9000)
    assert len(sm.attempt_log) == 0
    assert sm.level is DifficultyLevel.EASY
    assert sm.counters.success_streak == 0
    assert sm.trial.level is DifficultyLevel.EASY
    assert sm.trial_started_at_ms == 9000
    assert sm.last_decision is None


def test_remote_decision_provenance_reaches_the_record(tmp_path) -> None:
    sm = _machine(tmp_path, gateway=DecisionGateway(remote=RemoteStub()))
    out = sm.choose(_correct(sm), 500)
    assert out.record.provenance is Provenance.REMOTE


def test_shared_attempt_log_is_used(tmp_path) -> None:
    log = AttemptLog(max_attempts=3)
    sm = SessionStateMachine(gateway=DecisionGateway(), config=_config(tmp_path), attempt_log=log)
    sm.choose(_wrong(sm), 100)
    assert len(log) == 1
