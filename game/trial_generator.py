import random
import uuid
from typing import Optional

from adaptation.levels import DifficultyLevel
from data.models import Category, Option, Trial
from game.palette import REFERENCE_PALETTE, Palette, Swatch


def _new_id() -> str:
    return uuid.uuid4().hex


def _make_option(category: Category, swatch: Swatch) -> Option:
    # id всегда новый, даже для того же базового оттенка.
    return Option(id=_new_id(), category=category, variant_id=swatch.variant_id, hex=swatch.hex)


def make_trial(
    rng: random.Random,
    level: DifficultyLevel,
    previous_target: Optional[Category] = None,
    palette: Palette = REFERENCE_PALETTE,
) -> Trial:
    """
    Генерирует новый раунд.

    - цель выбираем случайно, но не повторяем предыдущую
    - на самом лёгком уровне правильный кружок имеет базовый оттенок,
      выше берётся случайный оттенок из пула похожих для этого уровня
    - отвлекающие кружки всегда базовых оттенков (по одному на каждую другую категорию)
    - порядок вариантов перемешан
    """
    # 1) цель
    candidates = [c for c in palette.categories if c != previous_target]
    target = rng.choice(candidates)

    # 2) правильный вариант
    if level == DifficultyLevel.lowest():
        correct_swatch = palette.canonical[target]
    else:
        correct_swatch = rng.choice(palette.pool(target, level))
    options = [_make_option(target, correct_swatch)]

    # 3) отвлекающие
    for category in palette.categories:
        if category != target:
            options.append(_make_option(category, palette.canonical[category]))

    # 4) перемешиваем
    rng.shuffle(options)

    return Trial(id=_new_id(), target=target, level=level, options=tuple(options))
