from __future__ import annotations

from collections import Counter
from typing import Iterable, List

from vulnviz.core.models import BuildSnapshot, Finding, Severity, SeverityCounts


class FindingsAggregator:
    """Collects the findings of one build and tallies them by severity."""

    def __init__(self, build_number: int):
        self.build_number = build_number
        self._findings: List[Finding] = []
        self._tally: Counter = Counter()

    def add_findings(self, findings: Iterable[Finding]) -> None:
        for finding in findings:
            self._findings.append(finding)
            self._tally[finding.normalized_severity] += 1

    @property
    def findings(self) -> List[Finding]:
        return list(self._findings)

    @property
    def severity_counts(self) -> SeverityCounts:
        return SeverityCounts(**{s.value: self._tally[s] for s in Severity})

    @property
    def snapshot(self) -> BuildSnapshot:
        return BuildSnapshot(build_number=self.build_number, counts=self.severity_counts)
