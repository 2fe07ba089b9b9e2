"""Accessibility snapshot parser.

A snapshot is the indented outline a browser driver prints for the
accessibility tree::

    - document [url="https://example.com"]
      - banner
        - link "Home" [href="/"]

Each line is ``- ROLE "NAME" [ATTR=VAL, ...]`` with two spaces per level.
"""

import re
from collections import Counter
from typing import Iterable, Iterator, Optional

from clonecheck.constants import SNAPSHOT_INDENT_WIDTH
from clonecheck.models import SnapshotNode

LINE_PATTERN = re.compile(
    r'^(?P<indent>[ \t]*)-\s*'
    r'(?P<role>[A-Za-z][\w-]*)'
    r'(?:\s+"(?P<name>(?:[^"\\]|\\.)*)")?'
    r'(?:\s*\[(?P<attrs>[^\]]*)\])?'
)

ATTRIBUTE_PATTERN = re.compile(
    r'(?P<key>[\w:-]+)'
    r'(?:\s*=\s*(?:"(?P<dq>[^"]*)"|\'(?P<sq>[^\']*)\'|'
    # A comma ends a bare value only before whitespace, "]" or the next key=
    r'(?P<bare>(?:[^\s,\]]|,(?![\s\]]|[\w:-]+\s*=))*)))?'
)


def parse_attributes(text: Optional[str]) -> dict[str, str]:
    """Parse ``key=value`` pairs separated by commas or spaces.

    Values may be double-quoted, single-quoted or bare. Bare values keep
    embedded commas (``href=/w_100,h_100/a.jpg``). A key without a value is
    a flag and maps to ``"true"``.
    """
    attributes: dict[str, str] = {}
    if not text:
        return attributes

    for match in ATTRIBUTE_PATTERN.finditer(text):
        key = match.group('key')
        if match.group('dq') is not None:
            value = match.group('dq')
        elif match.group('sq') is not None:
            value = match.group('sq')
        elif match.group('bare') is not None:
            value = match.group('bare')
        else:
            value = 'true'
        attributes[key] = value
    return attributes


def _depth(indent: str) -> int:
    width = len(indent.expandtabs(SNAPSHOT_INDENT_WIDTH))
    return width // SNAPSHOT_INDENT_WIDTH


def parse_snapshot(text: Optional[str]) -> list[SnapshotNode]:
    """Parse snapshot text into a forest of nodes.

    Lines that are not snapshot entries are skipped. A line indented deeper
    than its predecessor's child level still becomes that predecessor's child.

    Args:
        text: Snapshot text; None or "" yields an empty list

    Returns:
        Root nodes in document order
    """
    if not text:
        return []

    roots: list[SnapshotNode] = []
    stack: list[SnapshotNode] = []

    for line in text.splitlines():
        match = LINE_PATTERN.match(line)
        if not match:
            continue

        name = match.group('name') or ''
        node = SnapshotNode(
            role=match.group('role').lower(),
            name=name.replace('\\"', '"'),
            attributes=parse_attributes(match.group('attrs')),
            depth=_depth(match.group('indent')),
        )

        while stack and stack[-1].depth >= node.depth:
            stack.pop()

        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)

    return roots


def walk(nodes: Iterable[SnapshotNode]) -> Iterator[SnapshotNode]:
    """Yield every node in pre-order."""
    pending = list(reversed(list(nodes)))
    while pending:
        node = pending.pop()
        yield node
        pending.extend(reversed(node.children))


def count_nodes(nodes: Iterable[SnapshotNode]) -> int:
    return sum(1 for _ in walk(nodes))


def count_by_role(nodes: Iterable[SnapshotNode]) -> Counter:
    return Counter(node.role for node in walk(nodes))


def collect_names(nodes: Iterable[SnapshotNode]) -> list[str]:
    """Non-empty accessible names, trimmed, in pre-order."""
    return [node.name.strip() for node in walk(nodes) if node.name and node.name.strip()]


def collect_links(nodes: Iterable[SnapshotNode]) -> list[tuple[str, str]]:
    """``(href, name)`` of every link node that carries an href."""
    return [
        (node.attributes['href'], node.name)
        for node in walk(nodes)
        if node.role == 'link' and node.attributes.get('href')
    ]
