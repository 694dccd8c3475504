from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from adaptation.frustration import DEFAULT_FRUSTRATION, compute_frustration
from adaptation.levels import DifficultyLevel, parse_level
from config.settings import FrustrationConfig, PolicyConfig
from data.models import Action, AppliedRule, DecisionResult, Provenance

DEFAULT_POLICY = PolicyConfig()


@dataclass(frozen=True)
class DecisionRequest:
    level: DifficultyLevel
    consecutive_errors: int
    hints_used: int
    retries: int
    latency_sec: float
    perseveration: int
    high_frustration_streak: int
    success_streak: int
    correct: bool

    def to_wire(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "errorsConsecutive": self.consecutive_errors,
            "hintsUsed": self.hints_used,
            "retriesSameRound": self.retries,
            "latencySec": self.latency_sec,
            "perseveration": self.perseveration,
            "highFrustrationStreak": self.high_frustration_streak,
            "successStreak": self.success_streak,
            "correct": self.correct,
        }


def decide(
    req: DecisionRequest,
    cfg: PolicyConfig = DEFAULT_POLICY,
    frustration_cfg: FrustrationConfig = DEFAULT_FRUSTRATION,
    provenance: Provenance = Provenance.LOCAL,
) -> DecisionResult:
    """
    Правило выбора действия. Чистая функция: одно и то же и на сервере,
    и в локальном fallback-е.
    """
    score = compute_frustration(
        consecutive_errors=req.consecutive_errors,
        hints_used=req.hints_used,
        retries=req.retries,
        latency_sec=req.latency_sec,
        perseveration=req.perseveration,
        cfg=frustration_cfg,
    )
    f = score.value

    is_high = f >= cfg.ease_threshold
    next_high = req.high_frustration_streak + 1 if is_high else 0

    if f < cfg.support_threshold:
        action = Action.KEEP
    elif f < cfg.ease_threshold:
        action = Action.SUPPORT
    else:
        action = Action.EASE if next_high >= cfg.ease_streak else Action.SUPPORT

    suggested = req.level
    next_success = req.success_streak + 1 if req.correct else 0

    if action is Action.EASE:
        suggested = req.level.down()
        next_success = 0
        next_high = 0
    elif next_success >= cfg.levelup_streak:
        suggested = req.level.up()
        next_success = 0

    return DecisionResult(
        frustration_value=f,
        components=score.components,
        action=action,
        suggested_level=suggested,
        next_high_frustration_streak=next_high,
        next_success_streak=next_success,
        provenance=provenance,
    )


def applied_rule(
    action: Action,
    level_before: DifficultyLevel,
    level_after: DifficultyLevel,
) -> AppliedRule:
    if action is Action.SUPPORT:
        return AppliedRule.SUPPORT_BY_FRUSTRATION
    if action is Action.EASE:
        return AppliedRule.EASE_BY_FRUSTRATION
    if level_after != level_before:
        return AppliedRule.LEVELUP_BY_STREAK
    return AppliedRule.NONE


def validate_request(body: Any) -> DecisionRequest:
    """
    Проверка тела запроса к сервису решений.
    Возвращает DecisionRequest или бросает ValueError с кодом поля.
    """
    if not isinstance(body, dict):
        raise ValueError("body_must_be_object")
    try:
        level = parse_level(body.get("level"))
    except ValueError:
        raise ValueError("level_must_be_easy_medium_or_hard") from None

    ints = {}
    for key in (
        "errorsConsecutive",
        "hintsUsed",
        "retriesSameRound",
        "perseveration",
        "highFrustrationStreak",
        "successStreak",
    ):
        value = body.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"{key}_must_be_non_negative_int")
        ints[key] = value

    latency = body.get("latencySec")
    if isinstance(latency, bool) or not isinstance(latency, (int, float)) or latency < 0:
        raise ValueError("latencySec_must_be_non_negative_number")
    correct = body.get("correct")
    if not isinstance(correct, bool):
        raise ValueError("correct_must_be_bool")

    return DecisionRequest(
        level=level,
        consecutive_errors=ints["errorsConsecutive"],
        hints_used=ints["hintsUsed"],
        retries=ints["retriesSameRound"],
        latency_sec=float(latency),
        perseveration=ints["perseveration"],
        high_frustration_streak=ints["highFrustrationStreak"],
        success_streak=ints["successStreak"],
        correct=correct,
    )
