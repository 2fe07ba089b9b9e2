"""Structural analysis of accessibility snapshots.

Finds landmark sections, interactive controls, navigation targets and
responsive breakpoints, so a source page and its clone can be compared at
layout level.
"""

import logging
import re
from typing import Iterable, Optional

from clonecheck.constants import (
    DEFAULT_BREAKPOINTS,
    INTERACTIVE_ROLES,
    SECTION_ROLES,
    TAILWIND_BREAKPOINTS,
)
from clonecheck.extractor import classify_link_type
from clonecheck.models import (
    InteractiveElement,
    InteractiveElementType,
    LinkType,
    NavigationPattern,
    PageAnalysis,
    Section,
    SectionType,
    SnapshotNode,
)
from clonecheck.snapshot import parse_snapshot, walk

logger = logging.getLogger(__name__)

_TAILWIND_PREFIX = re.compile(r'(?<![\w-])(sm|md|lg|xl|2xl):')

_ACTIONS = {
    InteractiveElementType.BUTTON: 'Click button',
    InteractiveElementType.LINK: 'Follow link',
    InteractiveElementType.TAB: 'Switch to tab',
    InteractiveElementType.DROPDOWN: 'Open dropdown',
    InteractiveElementType.ACCORDION: 'Toggle accordion',
    InteractiveElementType.FORM: 'Fill in form field',
}


def _selector(role: str, name: str) -> str:
    selector = f'[role="{role}"]'
    if name:
        escaped = name.replace('"', '\\"')
        selector += f'[aria-label="{escaped}"]'
    return selector


def identify_sections(nodes: Iterable[SnapshotNode]) -> list[Section]:
    """Map landmark roles to sections.

    A landmark nested inside another becomes a child of the nearest enclosing
    section; landmarks with no enclosing section are returned at top level.

    Args:
        nodes: Parsed snapshot roots

    Returns:
        Top-level sections in document order
    """
    counter = 0

    def visit(node: SnapshotNode, siblings: list[Section]) -> None:
        nonlocal counter
        section_type = SECTION_ROLES.get(node.role)
        if section_type is None:
            for child in node.children:
                visit(child, siblings)
            return

        counter += 1
        section = Section(
            id=f'section-{counter}',
            type=SectionType(section_type),
            selector=_selector(node.role, node.name),
        )
        siblings.append(section)
        for child in node.children:
            visit(child, section.children)

    sections: list[Section] = []
    for node in nodes:
        visit(node, sections)
    return sections


def identify_interactive_elements(nodes: Iterable[SnapshotNode]) -> list[InteractiveElement]:
    """Collect every interactive control, including nested ones."""
    elements = []
    for node in walk(nodes):
        element_type = INTERACTIVE_ROLES.get(node.role)
        if element_type is None:
            continue

        element_type = InteractiveElementType(element_type)
        action = _ACTIONS[element_type]
        if node.name:
            action = f'{action} "{node.name}"'

        elements.append(InteractiveElement(
            type=element_type,
            selector=_selector(node.role, node.name),
            action=action,
        ))
    return elements


def identify_navigation(nodes: Iterable[SnapshotNode], base_url: str) -> list[NavigationPattern]:
    """Collect link targets, first occurrence of each href wins.

    ``mailto:`` and ``tel:`` links always count as external.
    """
    navigation = []
    seen: set[str] = set()

    for node in walk(nodes):
        href = node.attributes.get('href') if node.role == 'link' else None
        if not href or href in seen:
            continue
        seen.add(href)

        if href.lower().startswith(('mailto:', 'tel:')):
            link_type = LinkType.EXTERNAL
        else:
            link_type = classify_link_type(href, base_url)

        navigation.append(NavigationPattern(type=link_type, href=href, text=node.name))
    return navigation


def identify_breakpoints(content: Optional[str], detected: Optional[list[str]] = None) -> list[str]:
    """Responsive breakpoints for a page.

    Args:
        content: Snapshot or markup to scan for Tailwind responsive prefixes
        detected: Breakpoints measured by the driver; returned as given when non-empty

    Returns:
        Breakpoints as ``"NNNpx"`` strings, sorted by width
    """
    if detected:
        return list(detected)

    found = {TAILWIND_BREAKPOINTS[prefix] for prefix in _TAILWIND_PREFIX.findall(content or '')}
    if not found:
        return list(DEFAULT_BREAKPOINTS)

    return sorted(found, key=lambda value: int(value[:-2]))


def _dependency_path(href: str) -> str:
    return href.split('#', 1)[0].split('?', 1)[0]


def collect_dependencies(navigation: Iterable[NavigationPattern]) -> list[str]:
    """Internal pages a clone must also provide, in link order.

    Query strings and fragments are dropped before de-duplication, so
    ``/about?ref=nav`` and ``/about#team`` count once as ``/about``. The
    home page and same-page links are not dependencies.
    """
    dependencies = []
    seen: set[str] = set()

    for nav in navigation:
        if nav.type != LinkType.INTERNAL:
            continue
        path = _dependency_path(nav.href)
        if not path or path == '/' or path in seen:
            continue
        seen.add(path)
        dependencies.append(path)
    return dependencies


def analyze_page(
    snapshot_text: Optional[str],
    url: str,
    title: str,
    breakpoints: Optional[list[str]] = None,
) -> PageAnalysis:
    """Build a PageAnalysis from snapshot text.

    Args:
        snapshot_text: Accessibility snapshot of the page
        url: Page URL, used to classify links
        title: Page title
        breakpoints: Breakpoints measured by the driver, if any

    Returns:
        PageAnalysis for the page
    """
    nodes = parse_snapshot(snapshot_text)
    navigation = identify_navigation(nodes, url)

    analysis = PageAnalysis(
        url=url,
        title=title,
        sections=identify_sections(nodes),
        navigation=navigation,
        interactive_elements=identify_interactive_elements(nodes),
        responsive_breakpoints=identify_breakpoints(snapshot_text, breakpoints),
        dependencies=collect_dependencies(navigation),
    )

    logger.debug(
        f"Analyzed {url}: {len(analysis.sections)} sections, "
        f"{len(analysis.interactive_elements)} interactive elements, "
        f"{len(analysis.navigation)} navigation links"
    )
    return analysis
