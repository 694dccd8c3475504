import math
from collections import Counter
from typing import Dict, Sequence

from data.models import Action, AttemptRecord, Provenance


def round_half_up(value: float, digits: int = 0) -> float:
    # round() в Python банковский, здесь нужно обычное школьное округление.
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def compute_accuracy(attempts: Sequence[AttemptRecord]) -> float:
    if not attempts:
        return 0.0
    return sum(1 for a in attempts if a.correct) / len(attempts)


def session_stats(attempts: Sequence[AttemptRecord]) -> Dict[str, int]:
    total = len(attempts)
    correct = sum(1 for a in attempts if a.correct)
    accuracy = int(round_half_up(compute_accuracy(attempts) * 100)) if total else 0
    return {"total": total, "correct": correct, "accuracy": accuracy}


def _pct(count: int, total: int) -> int:
    return int(round_half_up(count / total * 100))


def dashboard_stats(attempts: Sequence[AttemptRecord]) -> Dict[str, float]:
    total = len(attempts)
    if total == 0:
        return {
            "total": 0,
            "accuracy": 0,
            "avg_latency": 0.0,
            "avg_frustration": 0.0,
            "support_pct": 0,
            "ease_pct": 0,
            "hint_avg": 0.0,
            "remote_pct": 0,
        }

    actions = Counter(a.action for a in attempts)
    remote = sum(1 for a in attempts if a.provenance is Provenance.REMOTE)
    return {
        "total": total,
        "accuracy": int(round_half_up(compute_accuracy(attempts) * 100)),
        "avg_latency": round_half_up(sum(a.latency_seconds for a in attempts) / total, 1),
        "avg_frustration": round_half_up(sum(a.frustration_value for a in attempts) / total, 2),
        "support_pct": _pct(actions[Action.SUPPORT], total),
        "ease_pct": _pct(actions[Action.EASE], total),
        "hint_avg": round_half_up(sum(a.hints_used for a in attempts) / total, 1),
        "remote_pct": _pct(remote, total),
    }


def level_timeline(attempts: Sequence[AttemptRecord]) -> list:
    """Номер уровня после каждой попытки (0 = самый лёгкий)."""
    return [a.level_after.rank for a in attempts]


def print_report(attempts: Sequence[AttemptRecord]) -> None:
    if not attempts:
        print("No attempts found.")
        return
    s = dashboard_stats(attempts)
    print(
        f"attempts={s['total']} "
        f"acc={s['accuracy']}% "
        f"latency={s['avg_latency']:.1f}s "
        f"frustration={s['avg_frustration']:.2f} "
        f"support={s['support_pct']}% "
        f"ease={s['ease_pct']}% "
        f"hints={s['hint_avg']:.1f} "
        f"remote={s['remote_pct']}%"
    )


def main() -> None:
    from config.settings import load_session_config
    from data.attempt_store import load_attempts

    cfg = load_session_config()
    print_report(load_attempts(cfg.store_path, cfg.max_attempts))


if __name__ == "__main__":
    main()
