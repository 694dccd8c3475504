import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

from adaptation.gateway import DecisionGateway
from adaptation.levels import DifficultyLevel
from adaptation.policy import DecisionRequest, applied_rule
from config.settings import SessionConfig
from data.attempt_log import AttemptLog
from data.models import Action, AttemptRecord, DecisionResult, Option, SessionCounters, Trial
from game.palette import REFERENCE_PALETTE, Palette
from game.trial_generator import make_trial


# Фазы сессии
PHASE_CHOOSING = "CHOOSING"  # ждём выбор кружка
PHASE_FEEDBACK = "FEEDBACK"  # верный ответ показан, ждём смену раунда

ADVANCE_EASE = "ease"    # раунд заменён сразу, уровень понижен
ADVANCE_NEXT = "next"    # новый раунд после паузы обратной связи
ADVANCE_RETRY = "retry"  # тот же раунд, пробуем ещё раз


@dataclass(frozen=True)
class ChoiceOutcome:
    record: AttemptRecord
    decision: DecisionResult
    advance: str


def latency_seconds(started_ms: int, now_ms: int) -> int:
    # Целые секунды, округление половины вверх.
    return max(0, (now_ms - started_ms + 500) // 1000)


class SessionStateMachine:
    """
    Состояние сессии: уровень, счётчики, текущий раунд.

    Единственное внешнее событие: выбор кружка (choose). Время приходит
    снаружи (now_ms), поэтому вся логика детерминирована в тестах.
    update(now_ms) вызывается каждый кадр и выполняет отложенные переходы
    (смена раунда после паузы, гашение подсказки).
    """

    def __init__(
        self,
        gateway: DecisionGateway,
        config: Optional[SessionConfig] = None,
        attempt_log: Optional[AttemptLog] = None,
        rng: Optional[random.Random] = None,
        palette: Palette = REFERENCE_PALETTE,
        wall_clock: Callable[[], float] = time.time,
        now_ms: int = 0,
    ) -> None:
        self.gateway = gateway
        self.config = config or SessionConfig()
        self.attempt_log = attempt_log if attempt_log is not None else AttemptLog(self.config.max_attempts)
        self.rng = rng or random.Random()
        self.palette = palette
        self.wall_clock = wall_clock

        self.level: DifficultyLevel = DifficultyLevel.lowest()
        self.counters = SessionCounters()
        self.trial: Optional[Trial] = None
        self.trial_started_at_ms: int = now_ms
        self.phase: str = PHASE_CHOOSING
        self.hint_on: bool = False
        self.feedback: str = "idle"  # idle / correct / wrong
        self.next_trial_at_ms: Optional[int] = None
        self.hint_clear_at_ms: Optional[int] = None
        self.last_decision: Optional[DecisionResult] = None

        self.start(now_ms)

    # ------------------------------------------------------------------
    # Жизненный цикл
    # ------------------------------------------------------------------

    def start(self, now_ms: int) -> None:
        """Начальное состояние: нижний уровень, нулевые счётчики, свежий раунд."""
        self.level = DifficultyLevel.lowest()
        self.counters = SessionCounters()
        self.last_decision = None
        self.trial = None
        self._begin_trial(now_ms, previous_target=None)

    def reset(self, now_ms: int) -> None:
        self.attempt_log.clear()
        self.start(now_ms)

    # ------------------------------------------------------------------
    # События
    # ------------------------------------------------------------------

    def use_hint(self) -> None:
        if self.trial is None:
            return
        self.hint_on = True
        self.counters.hints_used_this_trial += 1

    def choose(self, option: Option, now_ms: int) -> Optional[ChoiceOutcome]:
        if self.trial is None:
            # Раунда нет, просто создаём новый.
            self._begin_trial(now_ms, previous_target=None)
            return None
        if self.phase != PHASE_CHOOSING:
            return None
        trial = self.trial
        if trial.find_option(option.id) is None:
            raise ValueError(f"option {option.id!r} is not part of trial {trial.id!r}")

        # 1) латентность и правильность
        latency = latency_seconds(self.trial_started_at_ms, now_ms)
        correct = option.category == trial.target

        # 2) счётчики
        c = self.counters
        if correct:
            c.consecutive_errors = 0
            c.retries_this_trial = 0
            c.perseveration_count = 0
            c.last_wrong_option_id = None
        else:
            c.consecutive_errors += 1
            c.retries_this_trial += 1
            if c.last_wrong_option_id == option.id:
                c.perseveration_count += 1
            else:
                c.last_wrong_option_id = option.id

        # 3) решение (удалённое или локальное)
        decision = self.gateway.decide(
            DecisionRequest(
                level=self.level,
                consecutive_errors=c.consecutive_errors,
                hints_used=c.hints_used_this_trial,
                retries=c.retries_this_trial,
                latency_sec=latency,
                perseveration=c.perseveration_count,
                high_frustration_streak=c.high_frustration_streak,
                success_streak=c.success_streak,
                correct=correct,
            )
        )
        self.last_decision = decision

        # 4) применяем стрики и уровень
        level_before = self.level
        c.high_frustration_streak = decision.next_high_frustration_streak
        c.success_streak = decision.next_success_streak
        if decision.suggested_level != self.level:
            self.level = decision.suggested_level
        if decision.action is Action.SUPPORT:
            self.hint_on = True

        # 5) запись в журнал
        record = AttemptRecord(
            trial_id=trial.id,
            target=trial.target,
            chosen_category=option.category,
            correct=correct,
            hints_used=c.hints_used_this_trial,
            timestamp=int(self.wall_clock() * 1000),
            latency_seconds=latency,
            frustration_value=decision.frustration_value,
            frustration_components=decision.components,
            action=decision.action,
            provenance=decision.provenance,
            level_before=level_before,
            level_after=self.level,
            applied_rule=applied_rule(decision.action, level_before, self.level),
        )
        self.attempt_log.append(record)

        # 6) переход
        if decision.action is Action.EASE:
            self._begin_trial(now_ms, previous_target=trial.target)
            advance = ADVANCE_EASE
        elif correct:
            self.feedback = "correct"
            self.phase = PHASE_FEEDBACK
            self.next_trial_at_ms = now_ms + self.config.feedback_delay_ms
            advance = ADVANCE_NEXT
        else:
            self.feedback = "wrong"
            self.hint_clear_at_ms = now_ms + self.config.hint_clear_delay_ms
            advance = ADVANCE_RETRY

        return ChoiceOutcome(record=record, decision=decision, advance=advance)

    def update(self, now_ms: int) -> bool:
        """Отложенные переходы. Возвращает True, если начался новый раунд."""
        if self.trial is None:
            self._begin_trial(now_ms, previous_target=None)
            return True
        if self.hint_clear_at_ms is not None and now_ms >= self.hint_clear_at_ms:
            self.hint_on = False
            self.hint_clear_at_ms = None
        if (
            self.phase == PHASE_FEEDBACK
            and self.next_trial_at_ms is not None
            and now_ms >= self.next_trial_at_ms
        ):
            self._begin_trial(now_ms, previous_target=self.trial.target)
            return True
        return False

    # ------------------------------------------------------------------

    def _begin_trial(self, now_ms: int, previous_target: Optional[str]) -> None:
        self.trial = make_trial(self.rng, self.level, previous_target, self.palette)
        self.trial_started_at_ms = now_ms
        self.counters.reset_trial()
        self.phase = PHASE_CHOOSING
        self.hint_on = False
        self.feedback = "idle"
        self.next_trial_at_ms = None
        self.hint_clear_at_ms = None
