from __future__ import annotations

from adaptation.levels import DifficultyLevel
from data.models import Action, AppliedRule, AttemptRecord, FrustrationComponents, Provenance


def make_record(
    n: int = 0,
    correct: bool = True,
    action: Action = Action.KEEP,
    provenance: Provenance = Provenance.LOCAL,
    latency: float = 2.0,
    frustration: float = 0.1,
    hints: int = 0,
    level_after: DifficultyLevel = DifficultyLevel.EASY,
) -> AttemptRecord:
    return AttemptRecord(
        trial_id=f"t{n}",
        target="red",
        chosen_category="red" if correct else "blue",
        correct=correct,
        hints_used=hints,
        timestamp=1_700_000_000_000 + n,
        latency_seconds=latency,
        frustration_value=frustration,
        frustration_components=FrustrationComponents(0.0, 0.0, 0.0, 0.0, 0.0),
        action=action,
        provenance=provenance,
        level_before=DifficultyLevel.EASY,
        level_after=level_after,
        applied_rule=AppliedRule.NONE,
    )
