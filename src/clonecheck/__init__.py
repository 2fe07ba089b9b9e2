"""Page extraction and clone verification."""

__version__ = "0.1.0"

from clonecheck.extractor import (
    ContentExtractor,
    extract_page_data,
    extract_page_data_silent,
    resolve_url,
    classify_link_type,
)
from clonecheck.snapshot import parse_snapshot
from clonecheck.page_analyzer import analyze_page
from clonecheck.comparator import (
    compare_snapshots,
    compare_snapshot_nodes,
    compare_section_order,
)
from clonecheck.checks import (
    check_data_completeness,
    check_link_integrity,
    check_visual_parity,
)
from clonecheck.console_analyzer import ConsoleErrorAnalyzer
from clonecheck.verifier import (
    QAChecklistParams,
    VerificationSession,
    run_qa_checklist,
    verify_clone,
    create_verification_summary,
)
from clonecheck.sanitize import (
    sanitize_content,
    sanitize_html,
    escape_html,
    contains_xss_patterns,
)
from clonecheck.models import (
    AttemptState,
    ExtractedData,
    PageAnalysis,
    QAResult,
    SnapshotComparison,
    SnapshotNode,
    VerificationResult,
)
from clonecheck.config import VerificationThresholds, load_thresholds, settings
from clonecheck.logging_config import setup_logging

from clonecheck.infrastructure import (
    RateLimiter,
    RateLimitConfig,
    exponential_backoff,
)

__all__ = [
    # Extraction
    "ContentExtractor",
    "extract_page_data",
    "extract_page_data_silent",
    "resolve_url",
    "classify_link_type",
    # Snapshots
    "parse_snapshot",
    "analyze_page",
    "compare_snapshots",
    "compare_snapshot_nodes",
    "compare_section_order",
    # Checks
    "check_data_completeness",
    "check_link_integrity",
    "check_visual_parity",
    "ConsoleErrorAnalyzer",
    # Verification
    "QAChecklistParams",
    "VerificationSession",
    "run_qa_checklist",
    "verify_clone",
    "create_verification_summary",
    # Sanitizer
    "sanitize_content",
    "sanitize_html",
    "escape_html",
    "contains_xss_patterns",
    # Models
    "AttemptState",
    "ExtractedData",
    "PageAnalysis",
    "QAResult",
    "SnapshotComparison",
    "SnapshotNode",
    "VerificationResult",
    # Configuration
    "VerificationThresholds",
    "load_thresholds",
    "settings",
    "setup_logging",
    # Infrastructure
    "RateLimiter",
    "RateLimitConfig",
    "exponential_backoff",
]
