"""Data models for page extraction and clone verification."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from clonecheck.constants import MAX_VERIFICATION_ATTEMPTS


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# Enumerations
# ============================================================================

class LinkType(str, Enum):
    """Classification of an extracted link."""
    INTERNAL = "internal"
    EXTERNAL = "external"
    ANCHOR = "anchor"


class DifferenceType(str, Enum):
    """Kinds of difference between a source page and its clone."""
    MISSING_SECTION = "missing_section"
    EXTRA_SECTION = "extra_section"
    MISSING_TEXT = "missing_text"
    TEXT_MISMATCH = "text_mismatch"
    MISSING_LINK = "missing_link"
    LINK_MISMATCH = "link_mismatch"
    MISSING_IMAGE = "missing_image"
    ORDER_MISMATCH = "order_mismatch"
    ATTRIBUTE_MISMATCH = "attribute_mismatch"
    MISSING_ELEMENT = "missing_element"


class Severity(str, Enum):
    """Severity of a difference."""
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class SectionType(str, Enum):
    """Page region types derived from landmark roles."""
    HEADER = "header"
    SIDEBAR = "sidebar"
    MAIN = "main"
    FOOTER = "footer"
    PANEL = "panel"
    MODAL = "modal"


class InteractiveElementType(str, Enum):
    """Interactive control types derived from widget roles."""
    BUTTON = "button"
    LINK = "link"
    ACCORDION = "accordion"
    DROPDOWN = "dropdown"
    TAB = "tab"
    FORM = "form"


class AttemptState(str, Enum):
    """Where a verification session stands after an attempt."""
    IN_PROGRESS = "in_progress"  # Failed, retries left
    PASSED = "passed"  # Terminal
    EXHAUSTED = "exhausted"  # Terminal, needs a human

    @classmethod
    def resolve(cls, passed: bool, attempt_number: int) -> "AttemptState":
        """Map one attempt's outcome to a state."""
        if passed:
            return cls.PASSED
        if attempt_number >= MAX_VERIFICATION_ATTEMPTS:
            return cls.EXHAUSTED
        return cls.IN_PROGRESS

    @property
    def is_terminal(self) -> bool:
        return self is not AttemptState.IN_PROGRESS


# ============================================================================
# Extraction Models
# ============================================================================

@dataclass
class PageMetadata:
    """SEO and social preview metadata of a page."""

    title: str = ""
    description: str = ""
    og_title: str = ""
    og_description: str = ""
    og_image: str = ""
    canonical: str = ""

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "ogTitle": self.og_title,
            "ogDescription": self.og_description,
            "ogImage": self.og_image,
            "canonical": self.canonical,
        }


@dataclass
class TextBlock:
    """A block of visible text."""

    id: str
    content: str
    tag: str
    order: int  # Document position, 0-indexed

    def to_dict(self) -> dict:
        return {"id": self.id, "content": self.content, "tag": self.tag, "order": self.order}


@dataclass
class ImageData:
    """An image with a resolvable source."""

    src: str
    alt: str = ""
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"src": self.src, "alt": self.alt}
        if self.width is not None:
            data["width"] = self.width
        if self.height is not None:
            data["height"] = self.height
        return data


@dataclass
class LinkData:
    """A hyperlink and its classification."""

    href: str
    text: str = ""
    type: LinkType = LinkType.INTERNAL
    attributes: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "href": self.href,
            "text": self.text,
            "type": self.type.value,
            "attributes": dict(self.attributes),
        }


@dataclass
class ListData:
    """An ordered or unordered list."""

    id: str
    items: list[str] = field(default_factory=list)
    ordered: bool = False
    order: int = 0

    def to_dict(self) -> dict:
        return {"id": self.id, "items": list(self.items), "ordered": self.ordered, "order": self.order}


@dataclass
class FormField:
    """A single form control."""

    name: str
    type: str = "text"
    label: Optional[str] = None
    placeholder: Optional[str] = None
    required: bool = False
    validation: Optional[str] = None  # pattern attribute

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"name": self.name, "type": self.type, "required": self.required}
        for key in ("label", "placeholder", "validation"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class FormData:
    """A form and its fields."""

    id: str
    action: str = ""
    method: str = "GET"
    fields: list[FormField] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "method": self.method,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass(frozen=True)
class ItemCounts:
    """Counts of extracted items, used to compare source and clone."""

    text: int = 0
    images: int = 0
    links: int = 0
    list_items: int = 0

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "images": self.images,
            "links": self.links,
            "listItems": self.list_items,
        }


@dataclass
class ExtractedData:
    """Everything extracted from one page."""

    metadata: PageMetadata = field(default_factory=PageMetadata)
    text_content: list[TextBlock] = field(default_factory=list)
    images: list[ImageData] = field(default_factory=list)
    links: list[LinkData] = field(default_factory=list)
    lists: list[ListData] = field(default_factory=list)
    forms: list[FormData] = field(default_factory=list)
    structured_data: dict[str, Any] = field(default_factory=dict)
    extracted_at: str = field(default_factory=_utc_timestamp)

    @property
    def item_counts(self) -> ItemCounts:
        """Counts derived from the collections, never stored separately."""
        return ItemCounts(
            text=len(self.text_content),
            images=len(self.images),
            links=len(self.links),
            list_items=sum(len(lst.items) for lst in self.lists),
        )

    def to_dict(self) -> dict:
        return {
            "metadata": self.metadata.to_dict(),
            "textContent": [b.to_dict() for b in self.text_content],
            "images": [i.to_dict() for i in self.images],
            "links": [l.to_dict() for l in self.links],
            "lists": [l.to_dict() for l in self.lists],
            "forms": [f.to_dict() for f in self.forms],
            "structuredData": dict(self.structured_data),
            "extractedAt": self.extracted_at,
            "itemCounts": self.item_counts.to_dict(),
        }


# ============================================================================
# Snapshot Models
# ============================================================================

@dataclass
class SnapshotNode:
    """One line of an accessibility snapshot, with its subtree."""

    role: str
    name: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    depth: int = 0
    children: list["SnapshotNode"] = field(default_factory=list)


@dataclass
class SnapshotDifference:
    """A single difference between source and clone."""

    type: DifferenceType
    location: str
    expected: str
    actual: str
    severity: Severity

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "location": self.location,
            "expected": self.expected,
            "actual": self.actual,
            "severity": self.severity.value,
        }


@dataclass
class ComparisonStats:
    """Element totals from a snapshot comparison."""

    total_source: int = 0
    total_clone: int = 0
    matched: int = 0
    missing: int = 0
    extra: int = 0

    def to_dict(self) -> dict:
        return {
            "totalSourceElements": self.total_source,
            "totalCloneElements": self.total_clone,
            "matchedElements": self.matched,
            "missingElements": self.missing,
            "extraElements": self.extra,
        }


@dataclass
class SnapshotComparison:
    """Result of diffing two snapshot trees.

    ``score`` is a coarse signal and can sit below 100 from element totals
    alone; ``is_match`` and ``differences`` are authoritative.
    """

    is_match: bool
    differences: list[SnapshotDifference] = field(default_factory=list)
    score: int = 100
    stats: ComparisonStats = field(default_factory=ComparisonStats)

    def to_dict(self) -> dict:
        return {
            "isMatch": self.is_match,
            "differences": [d.to_dict() for d in self.differences],
            "score": self.score,
            "stats": self.stats.to_dict(),
        }


# ============================================================================
# Page Analysis Models
# ============================================================================

@dataclass
class Section:
    """A landmark region of the page."""

    id: str
    type: SectionType
    selector: str
    children: list["Section"] = field(default_factory=list)


@dataclass
class InteractiveElement:
    """A control the user can operate."""

    type: InteractiveElementType
    selector: str
    action: str


@dataclass
class NavigationPattern:
    """A navigation target found on the page."""

    type: LinkType
    href: str
    text: str = ""


@dataclass
class PageAnalysis:
    """Structural analysis of a page snapshot."""

    url: str
    title: str
    sections: list[Section] = field(default_factory=list)
    navigation: list[NavigationPattern] = field(default_factory=list)
    interactive_elements: list[InteractiveElement] = field(default_factory=list)
    responsive_breakpoints: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)


# ============================================================================
# Check Results
# ============================================================================

@dataclass
class DataCompletenessResult:
    """Source vs clone extracted-data comparison."""

    passed: bool
    text_complete: bool
    images_complete: bool
    links_complete: bool
    source_counts: ItemCounts
    clone_counts: ItemCounts
    missing_items: list[str] = field(default_factory=list)


@dataclass
class InvalidLink:
    href: str
    reason: str


@dataclass
class LinkIntegrityResult:
    """Structural and security validation of a link set."""

    passed: bool
    total_links: int = 0
    valid_links: int = 0
    invalid_links: list[InvalidLink] = field(default_factory=list)
    missing_security_attributes: list[str] = field(default_factory=list)


@dataclass
class VisualParityResult:
    """Layout-level comparison of two page analyses."""

    passed: bool
    section_order_match: bool = True
    typography_match: bool = True
    interactive_elements_match: bool = True
    differences: list[SnapshotDifference] = field(default_factory=list)


# ============================================================================
# External Signals
# ============================================================================

@dataclass
class ConsoleMessage:
    """A runtime console message captured by the driver."""

    level: str
    text: str = ""


@dataclass
class Diagnostic:
    """A static-analysis diagnostic (type checker or linter)."""

    file: str
    message: str


@dataclass
class TestResults:
    """Outcome of the clone's test suite."""

    __test__ = False  # Not a pytest test class

    passed: bool
    failures: list[str] = field(default_factory=list)


@dataclass
class ConsoleErrorAnalysis:
    """Categorised runtime console messages."""

    total_messages: int = 0
    total_errors: int = 0
    total_warnings: int = 0
    errors_by_type: dict[str, int] = field(default_factory=dict)
    common_errors: list[dict] = field(default_factory=list)  # [{message, count}]
    all_errors: list[dict] = field(default_factory=list)  # [{type, message}], capped


# ============================================================================
# QA and Verification Results
# ============================================================================

@dataclass
class ResponsiveDesignResult:
    """Per-breakpoint responsive checks."""

    mobile: bool = True
    tablet: bool = True
    desktop: bool = True

    @property
    def all_passed(self) -> bool:
        return self.mobile and self.tablet and self.desktop

    def to_dict(self) -> dict:
        return {"mobile": self.mobile, "tablet": self.tablet, "desktop": self.desktop}


@dataclass
class QAResult:
    """Outcome of the QA checklist."""

    text_content_match: bool = True
    images_displayed: bool = True
    links_working: bool = True
    responsive_design: ResponsiveDesignResult = field(default_factory=ResponsiveDesignResult)
    keyboard_navigation: bool = True
    no_console_errors: bool = True
    static_analysis_clean: bool = True
    tests_pass: bool = True
    deviations: list[str] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return (
            self.text_content_match
            and self.images_displayed
            and self.links_working
            and self.responsive_design.all_passed
            and self.keyboard_navigation
            and self.no_console_errors
            and self.static_analysis_clean
            and self.tests_pass
        )

    def to_dict(self) -> dict:
        return {
            "textContentMatch": self.text_content_match,
            "imagesDisplayed": self.images_displayed,
            "linksWorking": self.links_working,
            "responsiveDesign": self.responsive_design.to_dict(),
            "keyboardNavigation": self.keyboard_navigation,
            "noConsoleErrors": self.no_console_errors,
            "staticAnalysisClean": self.static_analysis_clean,
            "testsPass": self.tests_pass,
            "deviations": list(self.deviations),
        }


@dataclass(frozen=True)
class VerificationResult:
    """One verification attempt. Never mutated after it is returned."""

    passed: bool
    qa_result: QAResult
    attempt_number: int
    can_retry: bool
    snapshot_comparison: Optional[SnapshotComparison] = None
    fix_suggestions: tuple[str, ...] = ()
    timestamp: str = field(default_factory=_utc_timestamp)

    @property
    def state(self) -> AttemptState:
        return AttemptState.resolve(self.passed, self.attempt_number)

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "qaResult": self.qa_result.to_dict(),
            "snapshotComparison": (
                self.snapshot_comparison.to_dict() if self.snapshot_comparison else None
            ),
            "attemptNumber": self.attempt_number,
            "canRetry": self.can_retry,
            "fixSuggestions": list(self.fix_suggestions),
            "timestamp": self.timestamp,
            "state": self.state.value,
        }
