"""
XSS sanitization for extracted content.

Everything the extractor stores passes through ``sanitize_content`` first.
The pipeline only ever removes or decodes markup, so it is safe to run on
plain text as well as HTML fragments.
"""

from html import unescape
import re
from typing import Optional

# Tags removed together with their content
DANGEROUS_TAGS = (
    'script', 'noscript', 'object', 'embed', 'applet', 'iframe', 'frame',
    'frameset', 'base', 'form', 'input', 'button', 'select', 'textarea',
    'style', 'link', 'meta', 'title', 'html', 'head', 'body',
)

# Attributes that may carry a URL
URL_ATTRIBUTES = (
    'href', 'src', 'action', 'formaction', 'xlink:href', 'poster', 'background',
)

EVENT_HANDLER_PATTERN = re.compile(
    r'[\s/]+on\w+\s*=\s*(?:"[^"]*"|\'[^\']*\'|[^\s>]*)', re.IGNORECASE
)
LEGACY_HANDLER_PATTERN = re.compile(
    r'[\s/]+(?:fscommand|seeksegmenttime)\s*=\s*(?:"[^"]*"|\'[^\']*\'|[^\s>]*)',
    re.IGNORECASE,
)
EVENT_HANDLER_MARKER = re.compile(r'[\s/]+on\w+\s*=', re.IGNORECASE)
SCRIPT_MARKER = re.compile(r'<\s*script', re.IGNORECASE)

DANGEROUS_SCHEME = r'(?:javascript|vbscript|data)\s*:'
# Browsers ignore whitespace inside a scheme name
OBFUSCATED_SCRIPT_SCHEME = re.compile(
    r'(?:j\s*a\s*v\s*a|v\s*b)\s*s\s*c\s*r\s*i\s*p\s*t\s*:', re.IGNORECASE
)

_SCRIPT_BLOCK = re.compile(r'<\s*script\b[^>]*>[\s\S]*?<\s*/\s*script\s*>', re.IGNORECASE)
_SCRIPT_SELF_CLOSING = re.compile(r'<\s*script\b[^>]*/\s*>', re.IGNORECASE)
_NOSCRIPT_BLOCK = re.compile(r'<\s*noscript\b[^>]*>[\s\S]*?<\s*/\s*noscript\s*>', re.IGNORECASE)

_SVG_BLOCK = re.compile(r'<\s*svg\b[^>]*>[\s\S]*?<\s*/\s*svg\s*>', re.IGNORECASE)
_MATH_BLOCK = re.compile(r'<\s*math\b[^>]*>[\s\S]*?<\s*/\s*math\s*>', re.IGNORECASE)

_URL_ATTRIBUTE_PATTERNS = [
    re.compile(
        r'(<[^>]*\s+' + re.escape(attr) + r'\s*=\s*["\']?)\s*' + DANGEROUS_SCHEME + r'[^"\'>\s]*',
        re.IGNORECASE,
    )
    for attr in URL_ATTRIBUTES
]

_DANGEROUS_TAG_PATTERNS = [
    (
        re.compile(r'<\s*' + tag + r'\b[^>]*>[\s\S]*?<\s*/\s*' + tag + r'\s*>', re.IGNORECASE),
        re.compile(r'<\s*' + tag + r'\b[^>]*/\s*>', re.IGNORECASE),
        # Unclosed opener, including one cut off at the end of the input
        re.compile(r'<\s*' + tag + r'\b[^>]*(?:>|$)', re.IGNORECASE),
    )
    for tag in DANGEROUS_TAGS
]

_CSS_EXPRESSION = re.compile(r'expression\s*\([^)]*\)', re.IGNORECASE)
_CSS_JS_URL = re.compile(r'url\s*\(\s*["\']?\s*javascript:[^)]*\)', re.IGNORECASE)
_CSS_BEHAVIOR = re.compile(r'behavior\s*:\s*[^;}"\']*', re.IGNORECASE)
_CSS_MOZ_BINDING = re.compile(r'-moz-binding\s*:\s*[^;}"\']*', re.IGNORECASE)

_HTML_COMMENT = re.compile(r'<!--[\s\S]*?-->')
_CDATA = re.compile(r'<!\[CDATA\[[\s\S]*?\]\]>', re.IGNORECASE)
_PROCESSING_INSTRUCTION = re.compile(r'<\?[\s\S]*?\?>')


def decode_html_entities(text: str) -> str:
    """Decode character references to expose obfuscated payloads.

    Covers the full HTML5 named set, so ``&colon;`` and ``&Tab;`` decode
    the way a browser decodes them.
    """
    if not text:
        return ''
    return unescape(text)


def strip_scripts(content: str) -> str:
    """Remove ``<script>`` and ``<noscript>`` blocks, paired or self-closing."""
    if not content:
        return ''

    result = _SCRIPT_BLOCK.sub('', content)
    result = _SCRIPT_SELF_CLOSING.sub('', result)
    return _NOSCRIPT_BLOCK.sub('', result)


def _has_active_content(block: str) -> bool:
    return bool(SCRIPT_MARKER.search(block) or EVENT_HANDLER_MARKER.search(block))


def strip_dangerous_tags(content: str) -> str:
    """Remove denylisted tags with their content.

    ``<svg>`` and ``<math>`` blocks survive unless they carry a script or an
    event handler.
    """
    if not content:
        return ''

    result = content
    for paired, self_closing, unclosed in _DANGEROUS_TAG_PATTERNS:
        result = paired.sub('', result)
        result = self_closing.sub('', result)
        result = unclosed.sub('', result)

    def drop_if_active(match: re.Match) -> str:
        return '' if _has_active_content(match.group(0)) else match.group(0)

    result = _SVG_BLOCK.sub(drop_if_active, result)
    return _MATH_BLOCK.sub(drop_if_active, result)


def strip_event_handlers(content: str) -> str:
    """Remove ``on*`` handler attributes, after decoding entities."""
    if not content:
        return ''

    result = EVENT_HANDLER_PATTERN.sub('', decode_html_entities(content))
    return LEGACY_HANDLER_PATTERN.sub('', result)


def strip_javascript_urls(content: str) -> str:
    """Remove javascript:, vbscript: and data: URLs from URL attributes."""
    if not content:
        return ''

    result = decode_html_entities(content)
    for pattern in _URL_ATTRIBUTE_PATTERNS:
        result = pattern.sub(r'\1', result)

    # Script schemes left anywhere else, e.g. a second URL in one attribute
    return OBFUSCATED_SCRIPT_SCHEME.sub('', result)


def strip_dangerous_css(content: str) -> str:
    """Remove expression(), url(javascript:...), behavior and -moz-binding."""
    if not content:
        return ''

    result = _CSS_EXPRESSION.sub('', content)
    result = _CSS_JS_URL.sub('url()', result)
    result = _CSS_BEHAVIOR.sub('', result)
    return _CSS_MOZ_BINDING.sub('', result)


def _sanitize_pass(html: str) -> str:
    result = strip_scripts(html)
    result = strip_dangerous_tags(result)
    result = strip_event_handlers(result)
    result = strip_javascript_urls(result)
    result = strip_dangerous_css(result)

    # Markup that can hide payloads
    result = _HTML_COMMENT.sub('', result)
    result = _CDATA.sub('', result)
    result = _PROCESSING_INSTRUCTION.sub('', result)

    return result.strip()


def sanitize_html(html: Optional[str]) -> str:
    """Sanitize HTML or text for storage.

    A removal can expose a new payload (``<scr<script>ipt>``), so passes
    repeat until nothing changes. Every pass either shortens the text or
    leaves it as is, which bounds the loop and makes the result idempotent.

    Args:
        html: Content to sanitize; ``None`` is treated as empty

    Returns:
        Sanitized content
    """
    if not html:
        return ''

    result = html
    while True:
        cleaned = _sanitize_pass(result)
        if cleaned == result:
            return cleaned
        result = cleaned


def sanitize_content(content: Optional[str]) -> str:
    """Sanitize any extracted content for safe display."""
    return sanitize_html(content)


def contains_xss_patterns(content: Optional[str]) -> bool:
    """Return True when content carries a recognisable XSS payload."""
    if not content:
        return False

    decoded = decode_html_entities(content)

    if SCRIPT_MARKER.search(decoded):
        return True
    if EVENT_HANDLER_MARKER.search(decoded):
        return True
    if re.search(DANGEROUS_SCHEME, decoded, re.IGNORECASE):
        return True

    return any(
        re.search(r'<\s*' + tag + r'\b', decoded, re.IGNORECASE)
        for tag in DANGEROUS_TAGS
    )


def escape_html(text: Optional[str]) -> str:
    """Escape text for contexts that must not contain any markup.

    Example:
        >>> escape_html('<b>"x"</b>')
        '&lt;b&gt;&quot;x&quot;&lt;&#x2F;b&gt;'
    """
    if not text:
        return ''

    return (
        str(text)
        .replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('"', '&quot;')
        .replace("'", '&#x27;')
        .replace('/', '&#x2F;')
    )
