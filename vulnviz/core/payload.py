"""Validation of JSON payloads at the data-fetch boundary.

Everything that reaches the transforms goes through here first, so the
transforms only ever see well-formed `SeverityCounts` and `BuildSnapshot`
records.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from vulnviz.core.models import SEVERITY_FIELDS, BuildSnapshot, Finding, SeverityCounts
from vulnviz.core.utils import PayloadError

logger = logging.getLogger(__name__)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def _require_counts(data: Any, where: str) -> None:
    if not isinstance(data, dict):
        raise PayloadError(f"{where}: expected an object, got {type(data).__name__}")
    missing = sorted(SEVERITY_FIELDS - set(data))
    if missing:
        raise PayloadError(f"{where}: missing severity fields: {', '.join(missing)}")


def parse_severity_counts(payload: Any) -> SeverityCounts:
    """Validate a `{critical, high, medium, low, info, unassigned}` object."""
    _require_counts(payload, "severity distribution")
    try:
        return SeverityCounts.model_validate({k: payload[k] for k in SEVERITY_FIELDS})
    except ValidationError as exc:
        raise PayloadError(f"severity distribution: {_describe(exc)}") from exc


def parse_build_snapshots(payload: Any, limit: Optional[int] = None) -> List[BuildSnapshot]:
    """Validate the newest-first trend feed.

    Each entry is either flat (`buildNumber` next to the six counts) or
    nested under `counts`. With `limit`, only the newest `limit` builds are
    kept.
    """
    if limit is not None and limit < 1:
        raise PayloadError(f"trend: limit must be at least 1, got {limit}")
    if not isinstance(payload, list):
        raise PayloadError(f"trend: expected an array of builds, got {type(payload).__name__}")
    entries = payload[:limit] if limit is not None else payload

    snapshots: List[BuildSnapshot] = []
    for i, entry in enumerate(entries):
        where = f"trend[{i}]"
        if not isinstance(entry, dict):
            raise PayloadError(f"{where}: expected an object, got {type(entry).__name__}")
        _require_counts(entry.get("counts", entry), where)
        try:
            snapshots.append(BuildSnapshot.model_validate(entry))
        except ValidationError as exc:
            raise PayloadError(f"{where}: {_describe(exc)}") from exc

    if limit is not None and len(payload) > limit:
        logger.debug("Trend feed truncated from %d to %d builds", len(payload), limit)
    return snapshots


def parse_findings(payload: Any) -> List[Finding]:
    """Validate a findings report: a bare array or `{"findings": [...]}`."""
    if isinstance(payload, dict) and "findings" in payload:
        payload = payload["findings"]
    if not isinstance(payload, list):
        raise PayloadError("findings: expected an array of findings")
    findings = []
    for i, entry in enumerate(payload):
        try:
            findings.append(Finding.model_validate(entry))
        except ValidationError as exc:
            raise PayloadError(f"findings[{i}]: {_describe(exc)}") from exc
    return findings


def load_json(path: Path) -> Any:
    path = Path(path)
    logger.debug("Loading %s", path)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise PayloadError(f"{path}: file not found") from exc
    except json.JSONDecodeError as exc:
        raise PayloadError(f"{path}: invalid JSON ({exc.msg} at line {exc.lineno})") from exc
