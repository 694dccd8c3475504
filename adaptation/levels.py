from __future__ import annotations

from enum import Enum


class DifficultyLevel(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def rank(self) -> int:
        return LEVEL_ORDER.index(self)

    def up(self) -> "DifficultyLevel":
        # Выше верхнего уровня не поднимаемся.
        return LEVEL_ORDER[min(self.rank + 1, len(LEVEL_ORDER) - 1)]

    def down(self) -> "DifficultyLevel":
        return LEVEL_ORDER[max(self.rank - 1, 0)]

    @classmethod
    def lowest(cls) -> "DifficultyLevel":
        return LEVEL_ORDER[0]


LEVEL_ORDER: tuple[DifficultyLevel, ...] = (
    DifficultyLevel.EASY,
    DifficultyLevel.MEDIUM,
    DifficultyLevel.HARD,
)


def parse_level(value: object) -> DifficultyLevel:
    """Уровень из строки ("easy"/"medium"/"hard"); иначе ValueError."""
    if isinstance(value, DifficultyLevel):
        return value
    if not isinstance(value, str):
        raise ValueError(f"invalid level: {value!r}")
    return DifficultyLevel(value.strip().lower())
