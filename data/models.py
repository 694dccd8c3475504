from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from adaptation.levels import DifficultyLevel, parse_level

# Категория: символьное имя цвета ("red", "blue", ...), не его hex.
Category = str


class Action(str, Enum):
    KEEP = "keep"
    SUPPORT = "support"
    EASE = "ease"


class Provenance(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"


class AppliedRule(str, Enum):
    NONE = "none"
    SUPPORT_BY_FRUSTRATION = "support_by_frustration"
    EASE_BY_FRUSTRATION = "ease_by_frustration"
    LEVELUP_BY_STREAK = "levelup_by_streak"


@dataclass(frozen=True)
class Option:
    """Один кружок на экране."""
    id: str
    category: Category
    variant_id: str
    hex: str


@dataclass(frozen=True)
class Trial:
    """
    Один раунд: цель + варианты.
    Ровно один вариант имеет category == target.
    """
    id: str
    target: Category
    level: DifficultyLevel
    options: Tuple[Option, ...]

    def correct_option(self) -> Option:
        return next(o for o in self.options if o.category == self.target)

    def find_option(self, option_id: str) -> Optional[Option]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None


@dataclass(frozen=True)
class FrustrationComponents:
    error: float
    hint: float
    retry: float
    latency: float
    perseveration: float

    def to_wire(self) -> Dict[str, float]:
        return {
            "e": self.error,
            "h": self.hint,
            "r": self.retry,
            "t": self.latency,
            "s": self.perseveration,
        }

    @classmethod
    def from_wire(cls, payload: Any) -> "FrustrationComponents":
        if not isinstance(payload, dict):
            raise TypeError("components must be an object")
        return cls(
            error=_unit_float(payload["e"], "e"),
            hint=_unit_float(payload["h"], "h"),
            retry=_unit_float(payload["r"], "r"),
            latency=_unit_float(payload["t"], "t"),
            perseveration=_unit_float(payload["s"], "s"),
        )


@dataclass(frozen=True)
class DecisionResult:
    frustration_value: float
    components: FrustrationComponents
    action: Action
    suggested_level: DifficultyLevel
    next_high_frustration_streak: int
    next_success_streak: int
    provenance: Provenance = Provenance.LOCAL

    def to_wire(self) -> Dict[str, Any]:
        return {
            "frustration": {
                "value": self.frustration_value,
                "components": self.components.to_wire(),
            },
            "action": self.action.value,
            "suggestedLevel": self.suggested_level.value,
            "nextHighFrustrationStreak": self.next_high_frustration_streak,
            "nextSuccessStreak": self.next_success_streak,
        }

    @classmethod
    def from_payload(cls, payload: Any, provenance: Provenance) -> "DecisionResult":
        """
        Разбор ответа сервиса решений.
        Любое несоответствие формы -> KeyError/TypeError/ValueError.
        """
        if not isinstance(payload, dict):
            raise TypeError("decision payload must be an object")
        frustration = payload["frustration"]
        if not isinstance(frustration, dict):
            raise TypeError("frustration must be an object")
        return cls(
            frustration_value=_unit_float(frustration["value"], "value"),
            components=FrustrationComponents.from_wire(frustration["components"]),
            action=Action(payload["action"]),
            suggested_level=parse_level(payload["suggestedLevel"]),
            next_high_frustration_streak=_non_negative_int(
                payload["nextHighFrustrationStreak"], "nextHighFrustrationStreak"
            ),
            next_success_streak=_non_negative_int(payload["nextSuccessStreak"], "nextSuccessStreak"),
            provenance=provenance,
        )


@dataclass
class SessionCounters:
    consecutive_errors: int = 0
    retries_this_trial: int = 0
    perseveration_count: int = 0
    last_wrong_option_id: Optional[str] = None
    hints_used_this_trial: int = 0
    success_streak: int = 0
    high_frustration_streak: int = 0

    def reset_trial(self) -> None:
        # Стрики переживают смену раунда, счётчики раунда нет.
        self.consecutive_errors = 0
        self.retries_this_trial = 0
        self.perseveration_count = 0
        self.last_wrong_option_id = None
        self.hints_used_this_trial = 0


@dataclass(frozen=True)
class AttemptRecord:
    trial_id: str
    target: Category
    chosen_category: Category
    correct: bool
    hints_used: int
    timestamp: int
    latency_seconds: float
    frustration_value: float
    frustration_components: FrustrationComponents
    action: Action
    provenance: Provenance
    level_before: DifficultyLevel
    level_after: DifficultyLevel
    applied_rule: AppliedRule

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["frustration_components"] = asdict(self.frustration_components)
        data["action"] = self.action.value
        data["provenance"] = self.provenance.value
        data["level_before"] = self.level_before.value
        data["level_after"] = self.level_after.value
        data["applied_rule"] = self.applied_rule.value
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "AttemptRecord":
        if not isinstance(data, dict):
            raise TypeError("attempt must be an object")
        comps = data["frustration_components"]
        if not isinstance(comps, dict):
            raise TypeError("frustration_components must be an object")
        correct = data["correct"]
        if not isinstance(correct, bool):
            raise TypeError("correct must be a bool")
        return cls(
            trial_id=str(data["trial_id"]),
            target=str(data["target"]),
            chosen_category=str(data["chosen_category"]),
            correct=correct,
            hints_used=_non_negative_int(data["hints_used"], "hints_used"),
            timestamp=_non_negative_int(data["timestamp"], "timestamp"),
            latency_seconds=_non_negative_number(data["latency_seconds"], "latency_seconds"),
            frustration_value=_unit_float(data["frustration_value"], "frustration_value"),
            frustration_components=FrustrationComponents(
                error=_unit_float(comps["error"], "error"),
                hint=_unit_float(comps["hint"], "hint"),
                retry=_unit_float(comps["retry"], "retry"),
                latency=_unit_float(comps["latency"], "latency"),
                perseveration=_unit_float(comps["perseveration"], "perseveration"),
            ),
            action=Action(data["action"]),
            provenance=Provenance(data["provenance"]),
            level_before=parse_level(data["level_before"]),
            level_after=parse_level(data["level_after"]),
            applied_rule=AppliedRule(data["applied_rule"]),
        )


def _unit_float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be a number")
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} out of [0, 1]: {value}")
    return value


def _non_negative_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer")
    if value < 0:
        raise ValueError(f"{name} must be >= 0")
    return value


def _non_negative_number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be a number")
    value = float(value)
    # json.loads пропускает NaN и Infinity
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"{name} must be a finite number >= 0: {value}")
    return value
