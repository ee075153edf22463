from __future__ import annotations

import math
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from vulnviz.core.utils import format_number

NO_VULNERABILITIES_LABEL = "No Vulnerabilities Found"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"
    UNASSIGNED = "unassigned"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def normalize(cls, severity: Optional[str]) -> "Severity":
        """Map a free-form severity string onto a bucket.

        `moderate` is an alias for medium and `informational` for info.
        Anything unrecognised, including None, lands in unassigned.

        Unlike the Dependency-Track severity mapping this was ported from,
        `info` keeps its own bucket instead of falling into unassigned, so
        the info segment of the bar reflects info findings.
        """
        if severity is None:
            return cls.UNASSIGNED
        key = severity.strip().lower()
        aliases = {"moderate": cls.MEDIUM, "informational": cls.INFO}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            return cls.UNASSIGNED


# Fixed display order, also the order of the bar segments.
SEVERITY_ORDER: List[Severity] = list(Severity)
SEVERITY_FIELDS = frozenset(s.value for s in Severity)


class SeverityCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    critical: int = Field(0, ge=0, strict=True)
    high: int = Field(0, ge=0, strict=True)
    medium: int = Field(0, ge=0, strict=True)
    low: int = Field(0, ge=0, strict=True)
    info: int = Field(0, ge=0, strict=True)
    unassigned: int = Field(0, ge=0, strict=True)

    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low + self.info + self.unassigned

    def get(self, severity: Severity) -> int:
        return getattr(self, Severity(severity).value)


def round_percent(percent: float) -> float:
    """Round to one decimal place, halves rounding up."""
    return math.floor(percent * 10 + 0.5) / 10


class DistributionSegment(BaseModel):
    """One block of the stacked severity bar.

    `percent` is the unrounded share used for the block width; the tooltip
    shows `display_percent`. The empty-state segment carries no severity.
    """

    model_config = ConfigDict(frozen=True)

    severity: Optional[Severity] = None
    label: str
    count: int = Field(ge=0)
    percent: float = Field(ge=0, le=100)
    is_empty_state: bool = False

    @computed_field
    @property
    def display_percent(self) -> float:
        return round_percent(self.percent)

    @computed_field
    @property
    def tooltip(self) -> str:
        if self.is_empty_state:
            return self.label
        return f"{self.label}: {self.count} ({format_number(self.display_percent)}%)"

    @computed_field
    @property
    def css_class(self) -> str:
        if self.severity is None:
            return "severity-info-bg"
        return f"severity-{self.severity.value}-bg"


class BuildSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    build_number: int = Field(alias="buildNumber", ge=0, strict=True)
    counts: SeverityCounts = Field(default_factory=SeverityCounts)

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_counts(cls, data: Any) -> Any:
        # The trend feed serialises each build flat: {"buildNumber": 3, "critical": 1, ...}
        if isinstance(data, dict) and "counts" not in data:
            counts = {k: v for k, v in data.items() if k in SEVERITY_FIELDS}
            rest = {k: v for k, v in data.items() if k not in SEVERITY_FIELDS}
            rest["counts"] = counts
            return rest
        return data

    def flat(self) -> Dict[str, int]:
        """Serialise in the flat feed shape."""
        return {"buildNumber": self.build_number, **self.counts.model_dump()}


class TrendSeries(BaseModel):
    categories: List[str]
    series: Dict[Severity, List[int]]


class Finding(BaseModel):
    package: str
    name: str
    severity: Optional[str] = None
    description: Optional[str] = None

    @property
    def normalized_severity(self) -> Severity:
        return Severity.normalize(self.severity)
