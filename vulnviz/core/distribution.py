"""Severity distribution for a single build.

Turns six severity counts into the segments of a 100%-wide stacked bar.
"""

from __future__ import annotations

from typing import List

from vulnviz.core.models import (
    NO_VULNERABILITIES_LABEL,
    SEVERITY_ORDER,
    DistributionSegment,
    SeverityCounts,
)


def empty_state_segment() -> DistributionSegment:
    return DistributionSegment(
        label=NO_VULNERABILITIES_LABEL,
        count=0,
        percent=100.0,
        is_empty_state=True,
    )


def aggregate_distribution(counts: SeverityCounts) -> List[DistributionSegment]:
    """Split a snapshot into one segment per severity.

    Every severity yields a segment, zero-width when its count is 0, so the
    bar always has the same six blocks in the same order. When nothing was
    found the six blocks are replaced by a single empty-state segment.
    """
    total = counts.total
    if total == 0:
        return [empty_state_segment()]

    segments: List[DistributionSegment] = []
    for severity in SEVERITY_ORDER:
        count = counts.get(severity)
        percent = (count / total) * 100 if count > 0 else 0.0
        segments.append(
            DistributionSegment(
                severity=severity,
                label=severity.label,
                count=count,
                percent=percent,
            )
        )
    return segments
