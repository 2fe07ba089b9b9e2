"""Snapshot tree comparison and section order diff."""

import logging
import math
from typing import Iterable, Optional, Sequence

from clonecheck.config import VerificationThresholds, default_thresholds
from clonecheck.constants import CRITICAL_ROLES
from clonecheck.models import (
    ComparisonStats,
    DifferenceType,
    SectionType,
    Severity,
    SnapshotComparison,
    SnapshotDifference,
    SnapshotNode,
)
from clonecheck.snapshot import (
    collect_links,
    collect_names,
    count_by_role,
    count_nodes,
    parse_snapshot,
)

logger = logging.getLogger(__name__)


def _preview(text: str, length: int) -> str:
    return text[:length] + ('...' if len(text) > length else '')


def _missing_elements(source_nodes, clone_nodes) -> list[SnapshotDifference]:
    differences = []
    clone_counts = count_by_role(clone_nodes)

    for role, count in count_by_role(source_nodes).items():
        clone_count = clone_counts.get(role, 0)
        if clone_count < count:
            differences.append(SnapshotDifference(
                type=DifferenceType.MISSING_ELEMENT,
                location=f'role="{role}"',
                expected=f"{count} elements",
                actual=f"{clone_count} elements",
                severity=Severity.CRITICAL if role in CRITICAL_ROLES else Severity.MAJOR,
            ))
    return differences


def _missing_text(
    source_nodes, clone_nodes, thresholds: VerificationThresholds
) -> list[SnapshotDifference]:
    differences = []
    clone_names = [name.lower() for name in collect_names(clone_nodes)]
    clone_name_set = set(clone_names)

    for name in collect_names(source_nodes):
        if len(name) <= thresholds.min_text_length:
            continue

        lowered = name.lower()
        if lowered in clone_name_set:
            continue
        if any(lowered in other or other in lowered for other in clone_names):
            continue

        differences.append(SnapshotDifference(
            type=DifferenceType.MISSING_TEXT,
            location="text content",
            expected=_preview(name, thresholds.text_preview_length),
            actual="not found",
            severity=Severity.MAJOR,
        ))
    return differences


def _missing_links(source_nodes, clone_nodes) -> list[SnapshotDifference]:
    differences = []
    clone_hrefs = {href for href, _ in collect_links(clone_nodes)}

    for href, _ in collect_links(source_nodes):
        if href not in clone_hrefs:
            differences.append(SnapshotDifference(
                type=DifferenceType.MISSING_LINK,
                location=f'link to "{href}"',
                expected=href,
                actual="not found",
                severity=Severity.MAJOR,
            ))
    return differences


def compare_snapshot_nodes(
    source_nodes: Sequence[SnapshotNode],
    clone_nodes: Sequence[SnapshotNode],
    thresholds: Optional[VerificationThresholds] = None,
) -> SnapshotComparison:
    """Diff two parsed snapshot forests.

    Checks per-role element counts, accessible names and link targets. The
    score is the share of source elements left after subtracting one per
    difference, so it can drop below 100 from totals alone while
    ``is_match`` stays True only when there are no differences.

    Args:
        source_nodes: Parsed source snapshot
        clone_nodes: Parsed clone snapshot
        thresholds: Text length and preview settings

    Returns:
        SnapshotComparison
    """
    thresholds = thresholds or default_thresholds

    source_total = count_nodes(source_nodes)
    clone_total = count_nodes(clone_nodes)

    differences = _missing_elements(source_nodes, clone_nodes)
    differences.extend(_missing_text(source_nodes, clone_nodes, thresholds))
    differences.extend(_missing_links(source_nodes, clone_nodes))

    matched = max(0, min(source_total, clone_total) - len(differences))
    if source_total > 0:
        # Round half up
        score = max(0, min(100, math.floor(matched * 100 / source_total + 0.5)))
    else:
        score = 100

    comparison = SnapshotComparison(
        is_match=not differences,
        differences=differences,
        score=score,
        stats=ComparisonStats(
            total_source=source_total,
            total_clone=clone_total,
            matched=matched,
            missing=max(0, source_total - clone_total),
            extra=max(0, clone_total - source_total),
        ),
    )

    logger.debug(
        f"Snapshot comparison: score={score}, differences={len(differences)}, "
        f"source={source_total}, clone={clone_total}"
    )
    return comparison


def compare_snapshots(
    source_snapshot: Optional[str],
    clone_snapshot: Optional[str],
    thresholds: Optional[VerificationThresholds] = None,
) -> SnapshotComparison:
    """Parse and diff two snapshot texts."""
    return compare_snapshot_nodes(
        parse_snapshot(source_snapshot),
        parse_snapshot(clone_snapshot),
        thresholds,
    )


def _type_name(value) -> str:
    return value.value if isinstance(value, SectionType) else str(value)


def compare_section_order(
    source_types: Iterable,
    clone_types: Iterable,
) -> tuple[bool, list[SnapshotDifference]]:
    """Align two section type sequences with two pointers.

    A source section missing from the rest of the clone is a critical
    ``missing_section``; one found further along is a major
    ``order_mismatch`` and the clone pointer skips past it. Repeated types are
    only searched for in the clone's remaining suffix.

    Args:
        source_types: Section types of the source, in order
        clone_types: Section types of the clone, in order

    Returns:
        Tuple of (match, differences)
    """
    source = [_type_name(t) for t in source_types]
    clone = [_type_name(t) for t in clone_types]
    differences: list[SnapshotDifference] = []

    def missing(index: int) -> SnapshotDifference:
        return SnapshotDifference(
            type=DifferenceType.MISSING_SECTION,
            location=f"section {index + 1}",
            expected=source[index],
            actual="not found",
            severity=Severity.CRITICAL,
        )

    source_idx = 0
    clone_idx = 0
    while source_idx < len(source) and clone_idx < len(clone):
        expected = source[source_idx]
        if expected == clone[clone_idx]:
            source_idx += 1
            clone_idx += 1
            continue

        remaining = clone[clone_idx:]
        if expected not in remaining:
            differences.append(missing(source_idx))
        else:
            found_at = clone_idx + remaining.index(expected)
            differences.append(SnapshotDifference(
                type=DifferenceType.ORDER_MISMATCH,
                location=f"section {source_idx + 1}",
                expected=f"{expected} at position {source_idx + 1}",
                actual=f"found at position {found_at + 1}",
                severity=Severity.MAJOR,
            ))
            clone_idx = found_at + 1
        source_idx += 1

    while source_idx < len(source):
        differences.append(missing(source_idx))
        source_idx += 1

    return not differences, differences
