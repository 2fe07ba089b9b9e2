"""Content extraction from raw page HTML.

Turns a page into ``ExtractedData``: metadata, text blocks, images, links,
lists, forms and JSON-LD. Extraction never raises on malformed markup;
anything that cannot be understood is left out.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag
from bs4.exceptions import ParserRejectedMarkup

from clonecheck.config import settings
from clonecheck.constants import (
    JSON_LD_TYPE,
    LINK_ATTRIBUTES,
    NON_CONTENT_TAGS,
    TEXT_TAGS,
)
from clonecheck.models import (
    ExtractedData,
    FormData,
    FormField,
    ImageData,
    LinkData,
    LinkType,
    ListData,
    PageMetadata,
    TextBlock,
)
from clonecheck.sanitize import sanitize_content

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r'\s*(\d+)')


class IdGenerator:
    """Sequential ``{prefix}-{n}`` ids, owned by a single extraction."""

    def __init__(self):
        self._counter = 0

    def next(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"


@dataclass
class ExtractionStats:
    """Per-category counts logged after an extraction."""
    text_blocks: int = 0
    images: int = 0
    links: int = 0
    lists: int = 0
    list_items: int = 0
    forms: int = 0
    form_fields: int = 0

    @classmethod
    def from_data(cls, data: ExtractedData) -> "ExtractionStats":
        counts = data.item_counts
        return cls(
            text_blocks=counts.text,
            images=counts.images,
            links=counts.links,
            lists=len(data.lists),
            list_items=counts.list_items,
            forms=len(data.forms),
            form_fields=sum(len(form.fields) for form in data.forms),
        )


# =============================================================================
# URL helpers
# =============================================================================

def resolve_url(url: Optional[str], base_url: str) -> str:
    """Resolve a possibly relative URL against the page URL.

    Absolute http(s), ``data:`` and ``#fragment`` URLs pass through,
    protocol-relative URLs take the base scheme, everything else is joined
    onto ``base_url``.

    Args:
        url: URL as written in the markup
        base_url: Absolute URL of the page

    Returns:
        Resolved URL, or "" for empty or unparsable input
    """
    if not url:
        return ''
    url = url.strip()
    if not url:
        return ''

    lowered = url.lower()
    if lowered.startswith(('http://', 'https://')):
        return url

    if url.startswith('//'):
        try:
            scheme = urlparse(base_url).scheme
        except ValueError:
            scheme = ''
        return f"{scheme or 'https'}:{url}"

    if lowered.startswith('data:') or url.startswith('#'):
        return url

    try:
        return urljoin(base_url, url)
    except ValueError:
        logger.debug(f"Could not resolve URL {url!r} against {base_url!r}")
        return ''


def classify_link_type(href: Optional[str], base_url: str) -> LinkType:
    """Classify a link as anchor, internal or external.

    Links whose host cannot be determined fall back to internal.
    """
    if not href:
        logger.debug("Empty href, classifying as internal")
        return LinkType.INTERNAL

    if href.startswith('#'):
        return LinkType.ANCHOR

    try:
        base_host = urlparse(base_url).hostname
        link_host = urlparse(urljoin(base_url, href)).hostname
    except ValueError:
        logger.debug(f"Unparsable link {href!r}, classifying as internal")
        return LinkType.INTERNAL

    if not base_host:
        logger.debug(f"Base URL {base_url!r} has no host, classifying {href!r} as internal")
        return LinkType.INTERNAL

    return LinkType.INTERNAL if link_host == base_host else LinkType.EXTERNAL


# =============================================================================
# Parsing helpers
# =============================================================================

def parse_html(html: Optional[str], parser: Optional[str] = None) -> BeautifulSoup:
    """Parse markup, falling back to an empty document if the parser refuses it."""
    parser = parser or settings.HTML_PARSER
    try:
        return BeautifulSoup(html or '', parser)
    except ParserRejectedMarkup as e:
        logger.warning(f"HTML parser rejected markup, extracting nothing: {e}")
        return BeautifulSoup('', parser)


def _attr(tag: Tag, name: str) -> Optional[str]:
    """Attribute value as a string; multi-valued attributes are space-joined."""
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ' '.join(value)
    return str(value)


def _plain_text(tag: Tag) -> str:
    return ' '.join(tag.get_text().split())


def _parse_dimension(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def _find_meta(soup: BeautifulSoup, attr: str, value: str) -> str:
    tag = soup.find(
        'meta',
        attrs={attr: lambda v: v is not None and v.strip().lower() == value},
    )
    if not tag:
        return ''
    return (_attr(tag, 'content') or '').strip()


def _document_positions(soup: BeautifulSoup) -> dict[int, int]:
    """Map each element to its pre-order index in the document."""
    return {id(el): index for index, el in enumerate(soup.find_all(True))}


def _remove_non_content(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(list(NON_CONTENT_TAGS)):
        # Already gone with an enclosing non-content tag
        if not tag.decomposed:
            tag.decompose()


# =============================================================================
# Per-category extraction
# =============================================================================

def _metadata_from_soup(soup: BeautifulSoup, base_url: str) -> PageMetadata:
    title_tag = soup.find('title')
    title = sanitize_content(title_tag.get_text(strip=True)) if title_tag else ''

    canonical = ''
    for link in soup.find_all('link', href=True):
        rel = (_attr(link, 'rel') or '').lower().split()
        if 'canonical' in rel:
            canonical = resolve_url(_attr(link, 'href'), base_url)
            break

    return PageMetadata(
        title=title,
        description=sanitize_content(_find_meta(soup, 'name', 'description')),
        og_title=sanitize_content(_find_meta(soup, 'property', 'og:title')),
        og_description=sanitize_content(_find_meta(soup, 'property', 'og:description')),
        og_image=resolve_url(_find_meta(soup, 'property', 'og:image'), base_url),
        canonical=canonical,
    )


def _text_from_soup(soup: BeautifulSoup, ids: IdGenerator) -> list[TextBlock]:
    """Collect text blocks, one pass per tag, then order by document position."""
    positions = _document_positions(soup)
    positioned: list[tuple[int, TextBlock]] = []

    for tag_name in TEXT_TAGS:
        for element in soup.find_all(tag_name):
            content = sanitize_content(_plain_text(element))
            if not content:
                continue
            block = TextBlock(id=ids.next(tag_name), content=content, tag=tag_name, order=0)
            positioned.append((positions.get(id(element), len(positions)), block))

    positioned.sort(key=lambda item: item[0])

    blocks = []
    for order, (_, block) in enumerate(positioned):
        block.order = order
        blocks.append(block)
    return blocks


def _images_from_soup(soup: BeautifulSoup, base_url: str) -> list[ImageData]:
    images = []
    for img in soup.find_all('img'):
        src = resolve_url(_attr(img, 'src'), base_url)
        if not src:
            continue
        images.append(ImageData(
            src=src,
            alt=sanitize_content(_attr(img, 'alt') or ''),
            width=_parse_dimension(_attr(img, 'width')),
            height=_parse_dimension(_attr(img, 'height')),
        ))
    return images


def _links_from_soup(soup: BeautifulSoup, base_url: str) -> list[LinkData]:
    links = []
    for anchor in soup.find_all('a', href=True):
        raw_href = (_attr(anchor, 'href') or '').strip()
        href = raw_href if raw_href.startswith('#') else resolve_url(raw_href, base_url)

        attributes = {}
        for name in LINK_ATTRIBUTES:
            value = _attr(anchor, name)
            if value is not None:
                attributes[name] = value

        links.append(LinkData(
            href=href,
            text=sanitize_content(_plain_text(anchor)),
            type=classify_link_type(raw_href, base_url),
            attributes=attributes,
        ))
    return links


def _list_items(list_tag: Tag) -> list[str]:
    items = []
    for li in list_tag.find_all('li'):
        text = sanitize_content(_plain_text(li))
        if text:
            items.append(text)
    return items


def _lists_from_soup(soup: BeautifulSoup, ids: IdGenerator) -> list[ListData]:
    """Collect ordered then unordered lists, then order by document position."""
    positions = _document_positions(soup)
    positioned: list[tuple[int, ListData]] = []

    for tag_name, ordered in (('ol', True), ('ul', False)):
        for element in soup.find_all(tag_name):
            items = _list_items(element)
            if not items:
                continue
            lst = ListData(id=ids.next(tag_name), items=items, ordered=ordered, order=0)
            positioned.append((positions.get(id(element), len(positions)), lst))

    positioned.sort(key=lambda item: item[0])

    lists = []
    for order, (_, lst) in enumerate(positioned):
        lst.order = order
        lists.append(lst)
    return lists


def _form_fields(form: Tag) -> list[FormField]:
    fields: list[FormField] = []
    fields_by_key: dict[str, FormField] = {}

    for control in form.find_all(['input', 'textarea', 'select']):
        name = _attr(control, 'name') or ''
        if control.name == 'input':
            field_type = (_attr(control, 'type') or 'text').lower()
            if not name and field_type == 'hidden':
                continue
        else:
            field_type = control.name
            if not name:
                continue

        field = FormField(
            name=name,
            type=field_type,
            label=_attr(control, 'aria-label'),
            placeholder=_attr(control, 'placeholder'),
            required=control.has_attr('required'),
            validation=_attr(control, 'pattern'),
        )
        fields.append(field)

        for key in (name, _attr(control, 'id')):
            if key:
                fields_by_key.setdefault(key, field)

    for label in form.find_all('label'):
        target = _attr(label, 'for')
        text = sanitize_content(_plain_text(label))
        if target and text and target in fields_by_key:
            fields_by_key[target].label = text

    return fields


def _forms_from_soup(soup: BeautifulSoup, ids: IdGenerator) -> list[FormData]:
    forms = []
    for form in soup.find_all('form'):
        forms.append(FormData(
            id=ids.next('form'),
            action=_attr(form, 'action') or '',
            method=(_attr(form, 'method') or 'GET').upper(),
            fields=_form_fields(form),
        ))
    return forms


def _structured_data_from_soup(soup: BeautifulSoup) -> dict:
    """Collect JSON-LD blocks. Invalid blocks are skipped."""
    structured_data: dict = {}
    index = 0

    for script in soup.find_all('script', attrs={'type': lambda t: t and t.strip().lower() == JSON_LD_TYPE}):
        content = script.string or script.get_text()
        if not content or not content.strip():
            continue

        try:
            parsed = json.loads(content)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to parse JSON-LD content: {str(e)[:100]}")
            continue

        if isinstance(parsed, list):
            for i, item in enumerate(parsed):
                structured_data[f"item_{index}_{i}"] = item
        else:
            key = parsed.get('@type') if isinstance(parsed, dict) else None
            if isinstance(key, list):
                key = ','.join(str(k) for k in key)
            structured_data[str(key) if key else f"item_{index}"] = parsed
        index += 1

    return structured_data


# =============================================================================
# Public per-category API
# =============================================================================

def extract_metadata(html: str, base_url: str) -> PageMetadata:
    return _metadata_from_soup(parse_html(html), base_url)


def extract_text_content(html: str) -> list[TextBlock]:
    soup = parse_html(html)
    _remove_non_content(soup)
    return _text_from_soup(soup, IdGenerator())


def extract_images(html: str, base_url: str) -> list[ImageData]:
    return _images_from_soup(parse_html(html), base_url)


def extract_links(html: str, base_url: str) -> list[LinkData]:
    return _links_from_soup(parse_html(html), base_url)


def extract_lists(html: str) -> list[ListData]:
    soup = parse_html(html)
    _remove_non_content(soup)
    return _lists_from_soup(soup, IdGenerator())


def extract_forms(html: str) -> list[FormData]:
    return _forms_from_soup(parse_html(html), IdGenerator())


def extract_structured_data(html: str) -> dict:
    return _structured_data_from_soup(parse_html(html))


def log_extraction_stats(stats: ExtractionStats, level: int = logging.INFO) -> None:
    """Log per-category extraction counts."""
    logger.log(
        level,
        f"Extraction stats: text_blocks={stats.text_blocks}, images={stats.images}, "
        f"links={stats.links}, lists={stats.lists}, list_items={stats.list_items}, "
        f"forms={stats.forms}, form_fields={stats.form_fields}"
    )


# =============================================================================
# Extractor
# =============================================================================

class ContentExtractor:
    """Extracts structured page content for cloning and verification."""

    def __init__(self, parser: Optional[str] = None, silent: bool = False):
        """Initialize the extractor.

        Args:
            parser: BeautifulSoup tree builder (defaults to settings.HTML_PARSER)
            silent: Log statistics at DEBUG instead of INFO
        """
        self.parser = parser or settings.HTML_PARSER
        self.silent = silent

    def extract(self, html: Optional[str], base_url: str) -> ExtractedData:
        """Extract everything from one page.

        Args:
            html: Raw page HTML
            base_url: Absolute URL of the page, used to resolve and classify links

        Returns:
            ExtractedData for the page
        """
        ids = IdGenerator()
        soup = parse_html(html, self.parser)

        metadata = _metadata_from_soup(soup, base_url)
        images = _images_from_soup(soup, base_url)
        links = _links_from_soup(soup, base_url)
        forms = _forms_from_soup(soup, ids)
        structured_data = _structured_data_from_soup(soup)

        # Text and lists ignore script, style and template content
        _remove_non_content(soup)
        text_content = _text_from_soup(soup, ids)
        lists = _lists_from_soup(soup, ids)

        data = ExtractedData(
            metadata=metadata,
            text_content=text_content,
            images=images,
            links=links,
            lists=lists,
            forms=forms,
            structured_data=structured_data,
        )

        log_extraction_stats(
            ExtractionStats.from_data(data),
            level=logging.DEBUG if self.silent else logging.INFO,
        )
        return data

    def extract_many(self, pages: Iterable[tuple[str, str]]) -> list[ExtractedData]:
        """Extract a batch of ``(html, base_url)`` pairs."""
        return [self.extract(html, base_url) for html, base_url in pages]


def extract_page_data(html: Optional[str], base_url: str) -> ExtractedData:
    """Extract all page data and log statistics."""
    return ContentExtractor().extract(html, base_url)


def extract_page_data_silent(html: Optional[str], base_url: str) -> ExtractedData:
    """Extract all page data, logging statistics only at DEBUG."""
    return ContentExtractor(silent=True).extract(html, base_url)
