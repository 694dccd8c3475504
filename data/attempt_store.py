from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from data.models import AttemptRecord

STORE_VERSION = 1


def load_attempts(path: Path, max_attempts: int = 100) -> list[AttemptRecord]:
    """
    Загрузка журнала попыток.
    Любой сбой (нет файла, другая версия, битая запись) -> пустой журнал.
    """
    if not path.exists():
        return []
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return []
    if not isinstance(payload, dict) or payload.get("version") != STORE_VERSION:
        return []
    raw = payload.get("attempts")
    if not isinstance(raw, list):
        return []
    try:
        attempts = [AttemptRecord.from_dict(item) for item in raw]
    except (KeyError, TypeError, ValueError):
        return []
    return attempts[-max_attempts:] if max_attempts > 0 else []


def save_attempts(path: Path, attempts: Sequence[AttemptRecord]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    body = {
        "version": STORE_VERSION,
        "attempts": [a.to_dict() for a in attempts],
    }
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(body, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(path)
