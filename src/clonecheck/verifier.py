"""Clone verification: QA checklist, verdict and fix suggestions.

``verify_clone`` runs one attempt and returns a ``VerificationResult``. It
never loops; the driver regenerates the clone and calls it again with the
next attempt number until the result reaches a terminal state.
``VerificationSession`` keeps that bookkeeping for a single page.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from clonecheck.checks import (
    check_data_completeness,
    check_link_integrity,
    check_visual_parity,
)
from clonecheck.comparator import compare_snapshots
from clonecheck.config import VerificationThresholds, default_thresholds
from clonecheck.console_analyzer import ConsoleErrorAnalyzer
from clonecheck.constants import MAX_VERIFICATION_ATTEMPTS
from clonecheck.models import (
    AttemptState,
    ConsoleMessage,
    Diagnostic,
    DifferenceType,
    ExtractedData,
    PageAnalysis,
    QAResult,
    ResponsiveDesignResult,
    Severity,
    SnapshotDifference,
    TestResults,
    VerificationResult,
)

logger = logging.getLogger(__name__)


@dataclass
class QAChecklistParams:
    """Inputs to the QA checklist. Every input is optional."""
    source_analysis: Optional[PageAnalysis] = None
    clone_analysis: Optional[PageAnalysis] = None
    source_data: Optional[ExtractedData] = None
    clone_data: Optional[ExtractedData] = None
    console_messages: list[ConsoleMessage] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    test_results: Optional[TestResults] = None
    responsive_checks: Optional[ResponsiveDesignResult] = None
    base_url: Optional[str] = None  # Enables the internal host check on links
    thresholds: Optional[VerificationThresholds] = None


@dataclass
class _ChecklistOutcome:
    qa_result: QAResult
    differences: list[SnapshotDifference] = field(default_factory=list)
    invalid_links: int = 0
    insecure_links: int = 0
    console_summary: str = ""


# =============================================================================
# QA Checklist
# =============================================================================

def _run_checklist(params: QAChecklistParams) -> _ChecklistOutcome:
    thresholds = params.thresholds or default_thresholds
    qa = QAResult(responsive_design=params.responsive_checks or ResponsiveDesignResult())
    outcome = _ChecklistOutcome(qa_result=qa)

    # Text and images
    if params.source_data is not None and params.clone_data is not None:
        completeness = check_data_completeness(params.source_data, params.clone_data, thresholds)

        qa.text_content_match = completeness.text_complete
        if not qa.text_content_match:
            qa.deviations.append(
                f"Text content incomplete: {len(completeness.missing_items)} items missing"
            )

        qa.images_displayed = completeness.images_complete
        if not qa.images_displayed:
            missing = completeness.source_counts.images - completeness.clone_counts.images
            qa.deviations.append(f"Images incomplete: {missing} images missing")

        for item in completeness.missing_items:
            if item.startswith("Image: "):
                outcome.differences.append(SnapshotDifference(
                    type=DifferenceType.MISSING_IMAGE,
                    location="image",
                    expected=item[len("Image: "):],
                    actual="not found",
                    severity=Severity.MAJOR,
                ))

    # Links
    if params.clone_data is not None:
        integrity = check_link_integrity(params.clone_data.links, params.base_url)
        qa.links_working = integrity.passed
        outcome.invalid_links = len(integrity.invalid_links)
        outcome.insecure_links = len(integrity.missing_security_attributes)
        if outcome.invalid_links:
            qa.deviations.append(f"{outcome.invalid_links} invalid links found")
        if outcome.insecure_links:
            qa.deviations.append(
                f"{outcome.insecure_links} external links missing security attributes"
            )

    # Keyboard navigation follows interactive element parity
    if params.source_analysis is not None and params.clone_analysis is not None:
        parity = check_visual_parity(params.source_analysis, params.clone_analysis)
        outcome.differences.extend(parity.differences)
        qa.keyboard_navigation = parity.interactive_elements_match
        if not qa.keyboard_navigation:
            qa.deviations.append(
                "Interactive elements mismatch - keyboard navigation may be affected"
            )

    # Runtime console
    analyzer = ConsoleErrorAnalyzer(thresholds)
    console = analyzer.analyze(params.console_messages)
    qa.no_console_errors = console.total_errors == 0
    if not qa.no_console_errors:
        qa.deviations.append(f"{console.total_errors} console errors found")
        outcome.console_summary = analyzer.summarize(console)

    # Static analysis
    qa.static_analysis_clean = not params.diagnostics
    if not qa.static_analysis_clean:
        qa.deviations.append(f"{len(params.diagnostics)} TypeScript/lint errors found")

    # Tests
    if params.test_results is not None:
        qa.tests_pass = params.test_results.passed
        if not qa.tests_pass:
            qa.deviations.append(f"{len(params.test_results.failures)} test failures")

    return outcome


def run_qa_checklist(params: Optional[QAChecklistParams] = None) -> QAResult:
    """Run every QA check the given inputs allow.

    Absent inputs leave their check passed; data completeness runs only with
    both extracted datasets.

    Args:
        params: Checklist inputs

    Returns:
        QAResult with per-check outcomes and deviation messages
    """
    return _run_checklist(params or QAChecklistParams()).qa_result


# =============================================================================
# Fix suggestions
# =============================================================================

def generate_fix_suggestions(
    differences: list[SnapshotDifference],
    qa_result: QAResult,
    invalid_links: int = 0,
    insecure_links: int = 0,
    console_summary: str = "",
) -> list[str]:
    """One suggestion per difference type and per failing check, deduplicated."""
    by_type: dict[DifferenceType, list[SnapshotDifference]] = {}
    for diff in differences:
        by_type.setdefault(diff.type, []).append(diff)

    def expected_values(diff_type: DifferenceType) -> str:
        return ', '.join(dict.fromkeys(d.expected for d in by_type[diff_type]))

    suggestions = []

    if DifferenceType.MISSING_SECTION in by_type:
        suggestions.append(f"Add missing sections: {expected_values(DifferenceType.MISSING_SECTION)}")

    if DifferenceType.MISSING_TEXT in by_type:
        suggestions.append(
            f"Add missing text content ({len(by_type[DifferenceType.MISSING_TEXT])} blocks)"
        )

    if DifferenceType.MISSING_LINK in by_type:
        suggestions.append(
            f"Add missing links ({len(by_type[DifferenceType.MISSING_LINK])} links)"
        )

    if DifferenceType.MISSING_IMAGE in by_type:
        suggestions.append(
            f"Add missing images ({len(by_type[DifferenceType.MISSING_IMAGE])} images)"
        )

    if DifferenceType.ORDER_MISMATCH in by_type:
        suggestions.append("Reorder sections to match source page layout")

    if DifferenceType.MISSING_ELEMENT in by_type:
        suggestions.append(
            f"Add missing interactive elements: {expected_values(DifferenceType.MISSING_ELEMENT)}"
        )

    if invalid_links:
        suggestions.append(f"Fix invalid links ({invalid_links} links)")

    if insecure_links:
        suggestions.append(
            'Add target="_blank" and rel="noopener noreferrer" to external links'
        )

    if not qa_result.no_console_errors:
        if console_summary:
            suggestions.append(f"Fix console errors in the clone page ({console_summary})")
        else:
            suggestions.append("Fix console errors in the clone page")

    if not qa_result.static_analysis_clean:
        suggestions.append("Fix TypeScript/lint errors")

    if not qa_result.tests_pass:
        suggestions.append("Fix failing tests")

    responsive = qa_result.responsive_design
    if not responsive.mobile:
        suggestions.append("Fix mobile responsive layout")
    if not responsive.tablet:
        suggestions.append("Fix tablet responsive layout")
    if not responsive.desktop:
        suggestions.append("Fix desktop responsive layout")

    return list(dict.fromkeys(suggestions))


# =============================================================================
# Verification
# =============================================================================

def verify_clone(
    source_snapshot: Optional[str],
    clone_snapshot: Optional[str],
    attempt_number: int = 1,
    **inputs,
) -> VerificationResult:
    """Verify a clone against its source for one attempt.

    Args:
        source_snapshot: Accessibility snapshot of the source page
        clone_snapshot: Accessibility snapshot of the clone
        attempt_number: 1-based attempt number; values below 1 count as 1
        **inputs: Any QAChecklistParams field

    Returns:
        VerificationResult for this attempt
    """
    if attempt_number < 1:
        logger.warning(f"Attempt number {attempt_number} is below 1, verifying as attempt 1")
        attempt_number = 1

    params = QAChecklistParams(**inputs)
    comparison = compare_snapshots(source_snapshot, clone_snapshot, params.thresholds)
    outcome = _run_checklist(params)
    qa_result = outcome.qa_result

    passed = comparison.is_match and qa_result.all_passed

    fix_suggestions: tuple[str, ...] = ()
    if not passed:
        fix_suggestions = tuple(generate_fix_suggestions(
            comparison.differences + outcome.differences,
            qa_result,
            invalid_links=outcome.invalid_links,
            insecure_links=outcome.insecure_links,
            console_summary=outcome.console_summary,
        ))

    result = VerificationResult(
        passed=passed,
        qa_result=qa_result,
        attempt_number=attempt_number,
        can_retry=not passed and attempt_number < MAX_VERIFICATION_ATTEMPTS,
        snapshot_comparison=comparison,
        fix_suggestions=fix_suggestions,
    )

    logger.info(
        f"Verification attempt {attempt_number}/{MAX_VERIFICATION_ATTEMPTS}: "
        f"{'passed' if passed else 'failed'} (score {comparison.score}, "
        f"{len(qa_result.deviations)} deviations)"
    )
    if result.state is AttemptState.EXHAUSTED:
        logger.warning(
            f"Verification failed after {attempt_number} attempts; "
            f"user intervention required"
        )

    return result


def create_verification_summary(result: VerificationResult) -> str:
    """Human-readable report of one verification attempt."""

    def mark(ok: bool) -> str:
        return '✓' if ok else '✗'

    qa = result.qa_result
    lines = [
        '=== Verification Summary ===',
        f"Status: {'PASSED ✓' if result.passed else 'FAILED ✗'}",
        f"Attempt: {result.attempt_number}/{MAX_VERIFICATION_ATTEMPTS}",
        '',
    ]

    if result.snapshot_comparison:
        stats = result.snapshot_comparison.stats
        lines.extend([
            f"Snapshot Match Score: {result.snapshot_comparison.score}%",
            f"Elements: {stats.matched} matched, {stats.missing} missing, {stats.extra} extra",
            '',
        ])

    lines.extend([
        'QA Checklist:',
        f"  Text Content: {mark(qa.text_content_match)}",
        f"  Images: {mark(qa.images_displayed)}",
        f"  Links: {mark(qa.links_working)}",
        f"  Responsive (Mobile): {mark(qa.responsive_design.mobile)}",
        f"  Responsive (Tablet): {mark(qa.responsive_design.tablet)}",
        f"  Responsive (Desktop): {mark(qa.responsive_design.desktop)}",
        f"  Keyboard Navigation: {mark(qa.keyboard_navigation)}",
        f"  No Console Errors: {mark(qa.no_console_errors)}",
        f"  Static Analysis Clean: {mark(qa.static_analysis_clean)}",
        f"  Tests Pass: {mark(qa.tests_pass)}",
        '',
    ])

    if qa.deviations:
        lines.append('Deviations:')
        lines.extend(f"  - {d}" for d in qa.deviations)
        lines.append('')

    if result.fix_suggestions:
        lines.append('Fix Suggestions:')
        lines.extend(f"  - {s}" for s in result.fix_suggestions)
        lines.append('')

    if result.can_retry:
        remaining = MAX_VERIFICATION_ATTEMPTS - result.attempt_number
        lines.append(f"Can retry: Yes ({remaining} attempts remaining)")
    elif not result.passed:
        lines.append('Can retry: No (max attempts reached - user intervention required)')

    lines.append('============================')
    return '\n'.join(lines)


# =============================================================================
# Session
# =============================================================================

class VerificationSession:
    """Attempt bookkeeping for verifying one page.

    Example:
        session = VerificationSession("https://example.com")
        while not session.is_terminal:
            clone_snapshot = regenerate_and_snapshot()
            session.verify(source_snapshot, clone_snapshot)
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url
        self._results: list[VerificationResult] = []

    @property
    def results(self) -> tuple[VerificationResult, ...]:
        return tuple(self._results)

    @property
    def latest(self) -> Optional[VerificationResult]:
        return self._results[-1] if self._results else None

    @property
    def next_attempt(self) -> int:
        return len(self._results) + 1

    @property
    def state(self) -> AttemptState:
        if not self._results:
            return AttemptState.IN_PROGRESS
        return self._results[-1].state

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def record(self, result: VerificationResult) -> AttemptState:
        """Add the result of the next attempt.

        Raises:
            ValueError: If the session is already terminal or the result is
                not for the next attempt
        """
        if self.is_terminal:
            raise ValueError(f"Verification session already {self.state.value}")
        if result.attempt_number != self.next_attempt:
            raise ValueError(
                f"Expected attempt {self.next_attempt}, got {result.attempt_number}"
            )
        self._results.append(result)
        return self.state

    def verify(
        self,
        source_snapshot: Optional[str],
        clone_snapshot: Optional[str],
        **inputs,
    ) -> VerificationResult:
        """Run and record the next attempt."""
        if self.is_terminal:
            raise ValueError(f"Verification session already {self.state.value}")
        inputs.setdefault('base_url', self.url)
        result = verify_clone(source_snapshot, clone_snapshot, self.next_attempt, **inputs)
        self.record(result)
        return result
