from __future__ import annotations

from typing import Iterable, Tuple

from data.models import AttemptRecord


class AttemptLog:
    """
    Журнал попыток ограниченной длины (самые старые вытесняются первыми).

    Снимок является неизменяемым кортежем: append() подменяет его целиком, поэтому
    читатель (экспорт, дашборд) никогда не видит журнал "посередине" записи.
    """

    def __init__(self, max_attempts: int = 100, records: Iterable[AttemptRecord] = ()) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self._records: Tuple[AttemptRecord, ...] = tuple(records)[-max_attempts:]

    def append(self, record: AttemptRecord) -> None:
        self._records = (self._records + (record,))[-self.max_attempts :]

    def snapshot(self) -> Tuple[AttemptRecord, ...]:
        return self._records

    def clear(self) -> None:
        self._records = ()

    def latest(self) -> AttemptRecord | None:
        return self._records[-1] if self._records else None

    def __len__(self) -> int:
        return len(self._records)
