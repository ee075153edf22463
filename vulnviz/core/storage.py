from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from vulnviz.core.models import BuildSnapshot, Finding
from vulnviz.core.utils import ensure_dir, utc_now, write_json

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[2]
RUNS_DIR = BASE_DIR / "runs"

# Only chart the last 10 builds (max)
MAX_TREND_BUILDS = 10


def get_runs_dir() -> Path:
    override = os.environ.get("VULNVIZ_RUNS_DIR", "").strip()
    return Path(override) if override else RUNS_DIR


def _build_dir(build_number: int) -> Path:
    return get_runs_dir() / f"build-{build_number}"


def _build_numbers() -> List[int]:
    runs_dir = get_runs_dir()
    ensure_dir(runs_dir)
    numbers = []
    for d in runs_dir.iterdir():
        if not d.is_dir() or not d.name.startswith("build-"):
            continue
        try:
            numbers.append(int(d.name.split("-", 1)[1]))
        except ValueError:
            logger.warning("Ignoring unexpected directory %s", d)
    return sorted(numbers, reverse=True)


def store_build(snapshot: BuildSnapshot, findings: Optional[List[Finding]] = None) -> Path:
    build_dir = _build_dir(snapshot.build_number)
    ensure_dir(build_dir)
    data = snapshot.flat()
    data["recordedAt"] = utc_now()
    write_json(build_dir / "snapshot.json", data)
    if findings is not None:
        write_json(build_dir / "findings.json", [f.model_dump() for f in findings])
    logger.info("Stored build #%d (%d findings)", snapshot.build_number, snapshot.counts.total)
    return build_dir


def load_build(build_number: int) -> dict | None:
    path = _build_dir(build_number) / "snapshot.json"
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def load_findings(build_number: int) -> list | None:
    path = _build_dir(build_number) / "findings.json"
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def latest_build_number() -> int | None:
    numbers = _build_numbers()
    return numbers[0] if numbers else None


def list_builds() -> list[dict]:
    items = []
    for number in _build_numbers():
        data = load_build(number)
        if data:
            items.append(data)
    return items


def load_trend(limit: int = MAX_TREND_BUILDS) -> list[dict]:
    """Newest-first feed of the last `limit` builds in the flat shape."""
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")
    items = []
    for data in list_builds()[:limit]:
        items.append({k: v for k, v in data.items() if k != "recordedAt"})
    return items
