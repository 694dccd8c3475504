from __future__ import annotations

from dataclasses import dataclass

from config.settings import FrustrationConfig
from data.models import FrustrationComponents

DEFAULT_FRUSTRATION = FrustrationConfig()


@dataclass(frozen=True)
class FrustrationScore:
    value: float  # округлено до 2 знаков
    components: FrustrationComponents


def clamp(v: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, v))


def compute_frustration(
    consecutive_errors: int,
    hints_used: int,
    retries: int,
    latency_sec: float,
    perseveration: int,
    cfg: FrustrationConfig = DEFAULT_FRUSTRATION,
) -> FrustrationScore:
    """
    Композитная оценка фрустрации в [0, 1].

    Каждый сигнал нормируется и обрезается в [0, 1], затем берётся
    взвешенная сумма (веса в сумме дают 1.0). Компоненты возвращаются
    без округления, итоговое значение с округлением до 2 знаков.
    """
    error = clamp(consecutive_errors / cfg.errors_full)
    hint = clamp(hints_used / cfg.hints_full)
    retry = clamp(retries / cfg.retries_full)
    latency = clamp(
        (latency_sec - cfg.latency_floor_sec) / (cfg.latency_ceil_sec - cfg.latency_floor_sec)
    )
    perseveration_n = clamp(perseveration / cfg.perseveration_full)

    value = (
        cfg.w_error * error
        + cfg.w_hint * hint
        + cfg.w_retry * retry
        + cfg.w_latency * latency
        + cfg.w_perseveration * perseveration_n
    )
    return FrustrationScore(
        value=round(clamp(value), 2),
        components=FrustrationComponents(
            error=error,
            hint=hint,
            retry=retry,
            latency=latency,
            perseveration=perseveration_n,
        ),
    )
