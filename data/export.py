from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from analytics.metrics import session_stats
from data.models import AttemptRecord, Category

ACTIVITY_ID = "color-tap"


def build_export(
    attempts: Sequence[AttemptRecord],
    targets: Sequence[Category],
    exported_at: datetime | None = None,
) -> dict[str, Any]:
    exported_at = exported_at or datetime.now(timezone.utc)
    return {
        "exported_at": exported_at.isoformat().replace("+00:00", "Z"),
        "activity": ACTIVITY_ID,
        "targets": list(targets),
        "attempts": [a.to_dict() for a in attempts],
        "stats": session_stats(attempts),
    }


def export_filename(moment: datetime | None = None) -> str:
    moment = moment or datetime.now()
    return f"color_tap_session_{moment.strftime('%Y-%m-%d_%H-%M-%S')}.json"


def write_export(directory: Path, document: dict[str, Any], moment: datetime | None = None) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(moment)
    path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
    return path
