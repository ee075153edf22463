from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Sequence


class PayloadError(ValueError):
    pass


class FetchError(RuntimeError):
    pass


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_level: str | None = None) -> logging.Logger:
    """Configure root logging once for CLI and script entry points."""
    level_name = log_level or os.environ.get("VULNVIZ_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format=LOG_FORMAT,
    )
    return logging.getLogger("vulnviz")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def format_number(value: float) -> str:
    """Render a number the way a browser prints it: `100`, `0`, `33.3`."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_table(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> str:
    """Lay out rows as a simple pipe-separated text table."""
    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(str(cell)))

    def fmt_row(values):
        return " | ".join(str(v).ljust(col_widths[i]) for i, v in enumerate(values)).rstrip()

    lines = [fmt_row(headers), "-+-".join("-" * w for w in col_widths)]
    lines.extend(fmt_row(row) for row in rows)
    return "\n".join(lines)
