# src/clonecheck/constants.py
"""Centralized constants for clone verification.

This module contains magic numbers and fixed values that are used across
multiple modules. For user-configurable thresholds, see config.py and
VerificationThresholds.
"""

# =============================================================================
# Verification Constants
# =============================================================================

# Maximum number of verification attempts before a human has to step in
MAX_VERIFICATION_ATTEMPTS = 3

# Roles whose absence makes a missing_element difference critical
CRITICAL_ROLES = frozenset({"main", "heading"})


# =============================================================================
# Rate Limiting Constants (milliseconds)
# =============================================================================

# Minimum delay between consecutive navigations
MIN_REQUEST_DELAY_MS = 2000

# Initial backoff after a throttling (HTTP 429) response
INITIAL_BACKOFF_MS = 5000

# Upper bound for the exponential backoff
MAX_BACKOFF_MS = 60000


# =============================================================================
# Extraction Constants
# =============================================================================

# Text-bearing tags, scanned in this order (one pass per tag)
TEXT_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6", "p", "span", "li", "div")

# Tags whose content is never page text
NON_CONTENT_TAGS = ("script", "style", "template")

# Link attributes carried over into LinkData.attributes
LINK_ATTRIBUTES = ("target", "rel", "title", "class")

JSON_LD_TYPE = "application/ld+json"

# Default BeautifulSoup tree builder
DEFAULT_HTML_PARSER = "lxml"


# =============================================================================
# Snapshot Constants
# =============================================================================

# Spaces per nesting level in accessibility snapshots
SNAPSHOT_INDENT_WIDTH = 2

# Accessibility role -> section type
SECTION_ROLES = {
    "banner": "header",
    "complementary": "sidebar",
    "main": "main",
    "contentinfo": "footer",
    "region": "panel",
    "dialog": "modal",
    "alertdialog": "modal",
}

# Accessibility role -> interactive element type
INTERACTIVE_ROLES = {
    "button": "button",
    "link": "link",
    "tab": "tab",
    "combobox": "dropdown",
    "listbox": "dropdown",
    "menu": "dropdown",
    "details": "accordion",
    "disclosure": "accordion",
    "textbox": "form",
    "searchbox": "form",
    "checkbox": "form",
    "radio": "form",
    "spinbutton": "form",
    "slider": "form",
    "switch": "form",
}

# Tailwind responsive prefixes -> min-width breakpoint
TAILWIND_BREAKPOINTS = {
    "sm": "640px",
    "md": "768px",
    "lg": "1024px",
    "xl": "1280px",
    "2xl": "1536px",
}

DEFAULT_BREAKPOINTS = ("640px", "768px", "1024px", "1280px", "1536px")
