"""Completeness, link integrity and visual parity checks."""

import logging
from collections import Counter
from typing import Iterable, Optional
from urllib.parse import urlparse

from clonecheck.comparator import compare_section_order
from clonecheck.config import VerificationThresholds, default_thresholds
from clonecheck.models import (
    DataCompletenessResult,
    DifferenceType,
    ExtractedData,
    InvalidLink,
    LinkData,
    LinkIntegrityResult,
    LinkType,
    PageAnalysis,
    Severity,
    SnapshotDifference,
    VisualParityResult,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Data completeness
# =============================================================================

def _missing_text_items(
    source: ExtractedData, clone: ExtractedData, thresholds: VerificationThresholds
) -> list[str]:
    source_texts = list(dict.fromkeys(b.content.lower().strip() for b in source.text_content))
    clone_texts = {b.content.lower().strip() for b in clone.text_content}

    missing = []
    for text in source_texts:
        if len(text) <= thresholds.min_completeness_text_length or text in clone_texts:
            continue
        if any(text in other or other in text for other in clone_texts):
            continue
        missing.append(f'Text: "{text[:thresholds.missing_item_preview_length]}..."')
    return missing


def check_data_completeness(
    source: ExtractedData,
    clone: ExtractedData,
    thresholds: Optional[VerificationThresholds] = None,
) -> DataCompletenessResult:
    """Compare the extracted data of a source page and its clone.

    Each category is complete when the clone has at least as many items as
    the source. Individual text blocks, image sources and link targets the
    clone lacks are listed in ``missing_items``.

    Args:
        source: Data extracted from the source page
        clone: Data extracted from the clone
        thresholds: Text length and preview settings

    Returns:
        DataCompletenessResult
    """
    thresholds = thresholds or default_thresholds
    missing_items = _missing_text_items(source, clone, thresholds)

    clone_srcs = {image.src for image in clone.images}
    for src in dict.fromkeys(image.src for image in source.images):
        if src not in clone_srcs:
            missing_items.append(f"Image: {src}")

    clone_hrefs = {link.href for link in clone.links}
    for href in dict.fromkeys(link.href for link in source.links):
        if href not in clone_hrefs:
            missing_items.append(f"Link: {href}")

    source_counts = source.item_counts
    clone_counts = clone.item_counts
    text_complete = source_counts.text <= clone_counts.text
    images_complete = source_counts.images <= clone_counts.images
    links_complete = source_counts.links <= clone_counts.links

    return DataCompletenessResult(
        passed=not missing_items and text_complete and images_complete and links_complete,
        text_complete=text_complete,
        images_complete=images_complete,
        links_complete=links_complete,
        source_counts=source_counts,
        clone_counts=clone_counts,
        missing_items=missing_items,
    )


# =============================================================================
# Link integrity
# =============================================================================

def _is_absolute_url(href: str) -> bool:
    try:
        parsed = urlparse(href)
        # Accessing port validates it
        parsed.port
    except ValueError:
        return False
    if not parsed.scheme:
        return False
    if parsed.scheme in ('http', 'https'):
        return bool(parsed.hostname)
    return True


def _host(url: str) -> Optional[str]:
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def _has_security_attributes(link: LinkData) -> bool:
    rel = link.attributes.get('rel') or ''
    return (
        link.attributes.get('target') == '_blank'
        and 'noopener' in rel
        and 'noreferrer' in rel
    )


def check_link_integrity(links: Iterable[LinkData], base_url: Optional[str] = None) -> LinkIntegrityResult:
    """Validate a set of links for structure and security.

    Args:
        links: Links to validate
        base_url: Page URL; internal links are checked against its host when given

    Returns:
        LinkIntegrityResult
    """
    links = list(links)
    invalid_links: list[InvalidLink] = []
    missing_security: list[str] = []
    base_host = _host(base_url) if base_url else None

    for link in links:
        href = link.href or ''

        if not href.strip():
            invalid_links.append(InvalidLink(href=href or '(empty)', reason='Empty href attribute'))
            continue

        if href.strip().lower().startswith('javascript:'):
            invalid_links.append(InvalidLink(href=href, reason='JavaScript href should be avoided'))
            continue

        if link.type == LinkType.EXTERNAL:
            if not _has_security_attributes(link):
                missing_security.append(href)
            if not _is_absolute_url(href):
                invalid_links.append(InvalidLink(href=href, reason='Invalid URL format'))

        elif link.type == LinkType.INTERNAL:
            if base_host and href.lower().startswith(('http://', 'https://')):
                if _host(href) != base_host:
                    invalid_links.append(InvalidLink(href=href, reason='Internal link has external URL'))

        elif link.type == LinkType.ANCHOR and not href.startswith('#'):
            invalid_links.append(InvalidLink(href=href, reason='Anchor link should start with #'))

    if invalid_links or missing_security:
        logger.debug(
            f"Link integrity: {len(invalid_links)} invalid, "
            f"{len(missing_security)} missing security attributes"
        )

    return LinkIntegrityResult(
        passed=not invalid_links and not missing_security,
        total_links=len(links),
        valid_links=len(links) - len(invalid_links),
        invalid_links=invalid_links,
        missing_security_attributes=missing_security,
    )


# =============================================================================
# Visual parity
# =============================================================================

def check_visual_parity(source: PageAnalysis, clone: PageAnalysis) -> VisualParityResult:
    """Compare section order, interactive controls and heading structure.

    Args:
        source: Analysis of the source page
        clone: Analysis of the clone

    Returns:
        VisualParityResult
    """
    section_order_match, differences = compare_section_order(
        [section.type for section in source.sections],
        [section.type for section in clone.sections],
    )

    source_counts = Counter(element.type.value for element in source.interactive_elements)
    clone_counts = Counter(element.type.value for element in clone.interactive_elements)

    for element_type in source_counts:
        if element_type not in clone_counts:
            differences.append(SnapshotDifference(
                type=DifferenceType.MISSING_ELEMENT,
                location="interactive element type",
                expected=element_type,
                actual="not found",
                severity=Severity.MAJOR,
            ))

    for element_type, count in source_counts.items():
        clone_count = clone_counts.get(element_type, 0)
        if clone_count < count:
            differences.append(SnapshotDifference(
                type=DifferenceType.MISSING_ELEMENT,
                location=f"{element_type} elements",
                expected=f"{count} {element_type}(s)",
                actual=f"{clone_count} {element_type}(s)",
                severity=Severity.MAJOR,
            ))

    source_headings = sum(
        1 for e in source.interactive_elements if 'heading' in e.action.lower()
    )
    clone_headings = sum(
        1 for e in clone.interactive_elements if 'heading' in e.action.lower()
    )

    return VisualParityResult(
        passed=not differences,
        section_order_match=section_order_match,
        typography_match=source_headings <= clone_headings,
        interactive_elements_match=len(source_counts) <= len(clone_counts),
        differences=differences,
    )
