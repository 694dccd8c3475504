from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

from adaptation.levels import LEVEL_ORDER, DifficultyLevel
from data.models import Category


@dataclass(frozen=True)
class Swatch:
    variant_id: str
    hex: str


@dataclass(frozen=True)
class Palette:
    """
    Таблица контента: категории, базовый оттенок каждой категории
    и пулы похожих оттенков для уровней выше самого лёгкого.
    """

    categories: Tuple[Category, ...]
    canonical: Mapping[Category, Swatch]
    pools: Mapping[Category, Mapping[DifficultyLevel, Tuple[Swatch, ...]]]
    labels: Mapping[Category, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.categories) < 2:
            raise ValueError("palette needs at least 2 categories")
        if len(set(self.categories)) != len(self.categories):
            raise ValueError("palette categories must be unique")
        for cat in self.categories:
            if cat not in self.canonical:
                raise ValueError(f"no canonical swatch for {cat!r}")
            for level in LEVEL_ORDER[1:]:
                if not self.pools.get(cat, {}).get(level):
                    raise ValueError(f"empty {level.value} pool for {cat!r}")

    def pool(self, category: Category, level: DifficultyLevel) -> Tuple[Swatch, ...]:
        return tuple(self.pools[category][level])

    def label(self, category: Category) -> str:
        return self.labels.get(category, category.upper())


def _pool(*pairs: Tuple[str, str]) -> Tuple[Swatch, ...]:
    return tuple(Swatch(variant_id=v, hex=h) for v, h in pairs)


REFERENCE_POOLS: Dict[Category, Dict[DifficultyLevel, Tuple[Swatch, ...]]] = {
    "red": {
        DifficultyLevel.MEDIUM: _pool(
            ("red_soft", "#FF5A5F"),
            ("red_pink", "#FF7AA2"),
            ("red_orange", "#FF6B3D"),
        ),
        DifficultyLevel.HARD: _pool(
            ("red_coral", "#FF6F61"),
            ("red_salmon", "#FF7F7F"),
            ("red_soft", "#FF5A5F"),
        ),
    },
    "blue": {
        DifficultyLevel.MEDIUM: _pool(
            ("blue_soft", "#3B82F6"),
            ("blue_sky", "#60A5FA"),
            ("blue_deep", "#2563EB"),
        ),
        DifficultyLevel.HARD: _pool(
            ("blue_indigo", "#4F46E5"),
            ("blue_navy", "#1D4ED8"),
            ("blue_soft", "#3B82F6"),
        ),
    },
    "yellow": {
        DifficultyLevel.MEDIUM: _pool(
            ("yellow_soft", "#FBBF24"),
            ("yellow_gold", "#F59E0B"),
            ("yellow_light", "#FCD34D"),
        ),
        DifficultyLevel.HARD: _pool(
            ("yellow_warm", "#F4B400"),
            ("yellow_mustard", "#DFAF2B"),
            ("yellow_soft", "#FBBF24"),
        ),
    },
}


REFERENCE_PALETTE = Palette(
    categories=("red", "blue", "yellow"),
    canonical={
        "red": Swatch("red_base", "#FF3B30"),
        "blue": Swatch("blue_base", "#007AFF"),
        "yellow": Swatch("yellow_base", "#FFD60A"),
    },
    pools=REFERENCE_POOLS,
    labels={"red": "КРАСНЫЙ", "blue": "СИНИЙ", "yellow": "ЖЁЛТЫЙ"},
)
