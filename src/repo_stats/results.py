from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

from .models import AnalysisResult

DEFAULT_RESULTS_DIR = Path("results")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def write_json(path: Path, data: object) -> None:
    path.write_text(json.dumps(data, indent=2, sort_keys=False) + "\n", encoding="utf-8")


def results_payload(results: list[AnalysisResult], generated_at: dt.datetime) -> dict[str, object]:
    return {
        "generated_at": generated_at.isoformat(timespec="seconds"),
        "repositories": [r.to_dict() for r in results],
    }


def write_results(results: list[AnalysisResult], results_dir: Path = DEFAULT_RESULTS_DIR, now: dt.datetime | None = None) -> Path:
    now = now or dt.datetime.now()
    ensure_dir(results_dir)
    path = results_dir / f"analysis-{now.strftime('%Y-%m-%d_%H-%M-%S')}.json"
    write_json(path, results_payload(results, now))
    return path
