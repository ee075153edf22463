"""HTTP client for the severity feeds served by the vulnviz API."""

from __future__ import annotations

import logging
import os
from typing import Any, List, Optional

import requests

from vulnviz.core.models import BuildSnapshot, SeverityCounts
from vulnviz.core.payload import parse_build_snapshots, parse_severity_counts
from vulnviz.core.storage import MAX_TREND_BUILDS
from vulnviz.core.utils import FetchError, PayloadError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://127.0.0.1:8000"


def get_api_url() -> str:
    return os.environ.get("VULNVIZ_API_URL", DEFAULT_API_URL)


def fetch_json(url: str, timeout: int = 30, params: Optional[dict] = None) -> Any:
    logger.info("Fetching %s", url)
    try:
        resp = requests.get(url, timeout=timeout, params=params, headers={"Accept": "application/json"})
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"Failed to fetch {url}: {exc}") from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise PayloadError(f"{url}: response is not JSON") from exc


def fetch_severity_distribution(
    base_url: Optional[str] = None,
    build_number: Optional[int] = None,
    timeout: int = 30,
) -> SeverityCounts:
    """Fetch and validate the raw counts of one build (latest by default)."""
    build = "latest" if build_number is None else str(build_number)
    url = (base_url or get_api_url()).rstrip("/") + f"/api/builds/{build}/severity-distribution"
    return parse_severity_counts(fetch_json(url, timeout=timeout))


def fetch_trend(
    base_url: Optional[str] = None,
    limit: int = MAX_TREND_BUILDS,
    timeout: int = 30,
) -> List[BuildSnapshot]:
    """Fetch and validate the newest-first trend feed."""
    url = (base_url or get_api_url()).rstrip("/") + "/api/trend"
    payload = fetch_json(url, timeout=timeout, params={"limit": limit})
    return parse_build_snapshots(payload, limit=limit)
