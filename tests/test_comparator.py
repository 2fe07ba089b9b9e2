"""Tests for snapshot comparison and section order diff."""

import pytest

from clonecheck.comparator import (
    compare_section_order,
    compare_snapshot_nodes,
    compare_snapshots,
)
from clonecheck.config import VerificationThresholds
from clonecheck.models import DifferenceType, SectionType, Severity
from clonecheck.snapshot import parse_snapshot


def _types(comparison):
    return [d.type for d in comparison.differences]


class TestCompareSnapshots:
    """Tests for compare_snapshots."""

    def test_identical_snapshots_match(self, source_snapshot, matching_clone_snapshot):
        result = compare_snapshots(source_snapshot, matching_clone_snapshot)

        assert result.is_match is True
        assert result.differences == []
        assert result.score == 100

    def test_self_comparison(self, source_snapshot):
        result = compare_snapshots(source_snapshot, source_snapshot)

        assert result.is_match is True
        assert result.score == 100
        assert result.stats.matched == result.stats.total_source == 11

    def test_missing_content(self, source_snapshot, missing_content_snapshot):
        result = compare_snapshots(source_snapshot, missing_content_snapshot)

        assert result.is_match is False
        assert result.score < 100
        assert DifferenceType.MISSING_TEXT in _types(result)
        assert DifferenceType.MISSING_LINK in _types(result)
        assert DifferenceType.MISSING_ELEMENT in _types(result)

    def test_statistics(self, source_snapshot, missing_content_snapshot):
        stats = compare_snapshots(source_snapshot, missing_content_snapshot).stats

        assert stats.total_source == 11
        assert stats.total_clone == 7
        assert stats.missing == 4
        assert stats.extra == 0
        assert stats.matched == 0

    def test_empty_snapshots(self):
        result = compare_snapshots("", "")

        assert result.is_match is True
        assert result.score == 100

    def test_empty_clone(self, source_snapshot):
        result = compare_snapshots(source_snapshot, "")

        assert result.is_match is False
        assert result.score == 0

    def test_one_missing_link(self):
        source = '- main\n  - link "Home" [href="/"]\n  - link "About" [href="/about"]'
        clone = '- main\n  - link "Home" [href="/"]'

        result = compare_snapshots(source, clone)
        missing_links = [d for d in result.differences if d.type == DifferenceType.MISSING_LINK]

        assert len(missing_links) == 1
        assert missing_links[0].expected == "/about"
        assert missing_links[0].location == 'link to "/about"'
        assert 0 <= result.score <= 99

    def test_extra_clone_elements_still_match(self, source_snapshot):
        clone = source_snapshot + '\n  - button "Extra"'
        result = compare_snapshots(source_snapshot, clone)

        assert result.is_match is True
        assert result.stats.extra == 1

    def test_to_dict(self, source_snapshot):
        payload = compare_snapshots(source_snapshot, source_snapshot).to_dict()

        assert payload["isMatch"] is True
        assert payload["stats"]["totalSourceElements"] == 11


class TestCompareSnapshotNodes:
    """Tests for compare_snapshot_nodes rules."""

    def test_critical_roles(self):
        source = parse_snapshot('- main\n  - heading "Title"\n  - button "Go"')
        clone = parse_snapshot('- region')

        result = compare_snapshot_nodes(source, clone)
        severities = {
            d.location: d.severity for d in result.differences
            if d.type == DifferenceType.MISSING_ELEMENT
        }

        assert severities['role="main"'] == Severity.CRITICAL
        assert severities['role="heading"'] == Severity.CRITICAL
        assert severities['role="button"'] == Severity.MAJOR

    def test_missing_element_counts(self):
        source = parse_snapshot('- list\n  - listitem\n  - listitem')
        clone = parse_snapshot('- list\n  - listitem')

        diff = compare_snapshot_nodes(source, clone).differences[0]

        assert diff.type == DifferenceType.MISSING_ELEMENT
        assert diff.expected == "2 elements"
        assert diff.actual == "1 elements"

    def test_short_names_ignored(self):
        source = parse_snapshot('- button "OK"')
        clone = parse_snapshot('- button "Yes"')

        assert compare_snapshot_nodes(source, clone).is_match is True

    def test_partial_text_match_tolerated(self):
        source = parse_snapshot('- heading "Welcome to Acme"')
        clone = parse_snapshot('- heading "Welcome to Acme Corporation"')

        assert compare_snapshot_nodes(source, clone).is_match is True

    def test_case_insensitive_text(self):
        source = parse_snapshot('- heading "Big News"')
        clone = parse_snapshot('- heading "BIG NEWS"')

        assert compare_snapshot_nodes(source, clone).is_match is True

    def test_long_text_truncated(self):
        long_name = "x" * 150
        source = parse_snapshot(f'- paragraph "{long_name}"')
        clone = parse_snapshot('- paragraph "Something else"')

        diff = next(
            d for d in compare_snapshot_nodes(source, clone).differences
            if d.type == DifferenceType.MISSING_TEXT
        )

        assert diff.expected == "x" * 100 + "..."
        assert diff.actual == "not found"

    def test_custom_text_threshold(self):
        source = parse_snapshot('- button "Buy now"')
        clone = parse_snapshot('- button "Order"')
        thresholds = VerificationThresholds(min_text_length=10)

        assert compare_snapshot_nodes(source, clone, thresholds).is_match is True

    def test_score_clamped(self):
        source = parse_snapshot('- link "Alpha" [href="/a"]')
        clone = parse_snapshot('- link "Beta" [href="/b"]')

        result = compare_snapshot_nodes(source, clone)

        assert result.score == 0
        assert result.stats.matched == 0

    def test_score_rounds_half_up(self):
        source = parse_snapshot("- main\n" + "  - generic\n" * 7)
        clone = parse_snapshot("- main\n  - generic")

        result = compare_snapshot_nodes(source, clone)

        assert result.stats.matched == 1
        assert result.score == 13


class TestCompareSectionOrder:
    """Tests for compare_section_order."""

    def test_same_order(self):
        match, differences = compare_section_order(
            ["header", "main", "footer"], ["header", "main", "footer"]
        )
        assert match is True
        assert differences == []

    def test_accepts_section_types(self):
        match, _ = compare_section_order(
            [SectionType.HEADER, SectionType.MAIN], ["header", "main"]
        )
        assert match is True

    def test_missing_section(self):
        match, differences = compare_section_order(
            ["header", "sidebar", "main"], ["header", "main"]
        )

        assert match is False
        assert len(differences) == 1
        assert differences[0].type == DifferenceType.MISSING_SECTION
        assert differences[0].severity == Severity.CRITICAL
        assert differences[0].expected == "sidebar"
        assert differences[0].location == "section 2"

    def test_order_mismatch(self):
        match, differences = compare_section_order(
            ["header", "main", "footer"], ["main", "header", "footer"]
        )

        assert match is False
        assert differences[0].type == DifferenceType.ORDER_MISMATCH
        assert differences[0].severity == Severity.MAJOR
        assert differences[0].expected == "header at position 1"
        assert differences[0].actual == "found at position 2"

    def test_leftover_source_sections(self):
        _, differences = compare_section_order(["header", "main", "footer"], ["header"])

        assert [d.expected for d in differences] == ["main", "footer"]
        assert all(d.type == DifferenceType.MISSING_SECTION for d in differences)

    def test_empty_clone(self):
        _, differences = compare_section_order(["main"], [])
        assert differences[0].type == DifferenceType.MISSING_SECTION

    def test_extra_clone_sections_ignored(self):
        match, _ = compare_section_order(["main"], ["main", "modal"])
        assert match is True

    @pytest.mark.parametrize("source,clone", [
        (["panel", "panel"], ["panel"]),
        (["header", "panel", "panel"], ["panel", "header"]),
    ])
    def test_duplicate_types_search_suffix_only(self, source, clone):
        match, differences = compare_section_order(source, clone)

        assert match is False
        assert differences[-1].type == DifferenceType.MISSING_SECTION
