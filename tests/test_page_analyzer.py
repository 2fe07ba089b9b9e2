"""Tests for snapshot page analysis."""

import pytest

from clonecheck.models import InteractiveElementType, LinkType, NavigationPattern, SectionType
from clonecheck.page_analyzer import (
    analyze_page,
    collect_dependencies,
    identify_breakpoints,
    identify_interactive_elements,
    identify_navigation,
    identify_sections,
)
from clonecheck.snapshot import parse_snapshot

SIMPLE_SNAPSHOT = """
- document [url="https://example.com"]
  - banner
    - navigation "Main Navigation"
      - link "Home" [href="/"]
      - link "About" [href="/about"]
  - main
    - heading "Welcome" [level=1]
    - paragraph "Some text content"
    - button "Click me"
  - contentinfo
    - link "Privacy" [href="/privacy"]
""".strip()

COMPLEX_SNAPSHOT = """
- document [url="https://example.com/page"]
  - banner
    - navigation "Primary Nav"
      - link "Home" [href="/"]
      - link "Products" [href="/products"]
      - link "External" [href="https://external.com"]
  - complementary
    - heading "Sidebar" [level=2]
    - link "Category 1" [href="/category/1"]
  - main
    - region "Content Area"
      - heading "Main Content" [level=1]
      - button "Submit Form"
      - link "Learn More" [href="#details"]
      - combobox "Select Option"
      - details "FAQ Section"
        - button "Toggle FAQ"
  - dialog "Modal Dialog"
    - heading "Modal Title" [level=2]
    - button "Close"
  - contentinfo
    - link "Terms" [href="/terms"]
    - link "Contact" [href="mailto:test@example.com"]
""".strip()

INTERACTIVE_SNAPSHOT = """
- document
  - main
    - button "Primary Action"
    - button "Secondary Action"
    - link "Navigate Away" [href="/other"]
    - tab "Tab 1"
    - tab "Tab 2"
    - combobox "Dropdown Menu"
    - details "Expandable Section"
    - textbox "Search" [placeholder="Search..."]
    - checkbox "Accept Terms"
""".strip()

BASE_URL = "https://example.com"


class TestIdentifySections:
    """Tests for identify_sections."""

    def test_landmarks(self):
        sections = identify_sections(parse_snapshot(SIMPLE_SNAPSHOT))
        assert [s.type for s in sections] == [SectionType.HEADER, SectionType.MAIN, SectionType.FOOTER]

    def test_all_section_types(self):
        sections = identify_sections(parse_snapshot(COMPLEX_SNAPSHOT))
        types = {s.type for s in sections}

        assert types == {
            SectionType.HEADER,
            SectionType.SIDEBAR,
            SectionType.MAIN,
            SectionType.MODAL,
            SectionType.FOOTER,
        }

    def test_nested_region_is_child_panel(self):
        sections = identify_sections(parse_snapshot(COMPLEX_SNAPSHOT))
        main = next(s for s in sections if s.type == SectionType.MAIN)

        assert [c.type for c in main.children] == [SectionType.PANEL]

    def test_unique_ids(self):
        sections = identify_sections(parse_snapshot(COMPLEX_SNAPSHOT))
        ids = [s.id for s in sections] + [c.id for s in sections for c in s.children]
        assert len(ids) == len(set(ids))

    def test_selectors(self):
        sections = identify_sections(parse_snapshot(COMPLEX_SNAPSHOT))
        by_type = {s.type: s for s in sections}

        assert by_type[SectionType.HEADER].selector == '[role="banner"]'
        assert by_type[SectionType.MODAL].selector == '[role="dialog"][aria-label="Modal Dialog"]'

    def test_empty(self):
        assert identify_sections([]) == []


class TestIdentifyInteractiveElements:
    """Tests for identify_interactive_elements."""

    @pytest.fixture
    def elements(self):
        return identify_interactive_elements(parse_snapshot(INTERACTIVE_SNAPSHOT))

    @pytest.mark.parametrize("element_type,count", [
        (InteractiveElementType.BUTTON, 2),
        (InteractiveElementType.LINK, 1),
        (InteractiveElementType.TAB, 2),
        (InteractiveElementType.DROPDOWN, 1),
        (InteractiveElementType.ACCORDION, 1),
        (InteractiveElementType.FORM, 2),
    ])
    def test_counts_by_type(self, elements, element_type, count):
        assert len([e for e in elements if e.type == element_type]) == count

    def test_actions_and_selectors(self, elements):
        for element in elements:
            assert element.action
            assert element.selector.startswith('[role="')

    def test_nested_elements(self):
        elements = identify_interactive_elements(parse_snapshot(COMPLEX_SNAPSHOT))
        buttons = [e for e in elements if e.type == InteractiveElementType.BUTTON]
        assert len(buttons) == 3

    def test_empty(self):
        assert identify_interactive_elements([]) == []


class TestIdentifyNavigation:
    """Tests for identify_navigation."""

    def test_all_links(self):
        navigation = identify_navigation(parse_snapshot(SIMPLE_SNAPSHOT), BASE_URL)

        assert [n.href for n in navigation] == ["/", "/about", "/privacy"]
        assert all(n.type == LinkType.INTERNAL for n in navigation)

    def test_link_types(self):
        navigation = identify_navigation(parse_snapshot(COMPLEX_SNAPSHOT), BASE_URL)
        by_href = {n.href: n.type for n in navigation}

        assert by_href["https://external.com"] == LinkType.EXTERNAL
        assert by_href["#details"] == LinkType.ANCHOR
        assert by_href["mailto:test@example.com"] == LinkType.EXTERNAL
        assert by_href["/products"] == LinkType.INTERNAL

    def test_link_text(self):
        navigation = identify_navigation(parse_snapshot(SIMPLE_SNAPSHOT), BASE_URL)
        assert navigation[0].text == "Home"

    def test_deduplicates_by_href(self):
        snapshot = (
            '- main\n'
            '  - link "Link 1" [href="/same"]\n'
            '  - link "Link 2" [href="/same"]\n'
            '  - link "Link 3" [href="/different"]'
        )
        navigation = identify_navigation(parse_snapshot(snapshot), BASE_URL)

        assert [(n.href, n.text) for n in navigation] == [("/same", "Link 1"), ("/different", "Link 3")]

    def test_empty(self):
        assert identify_navigation([], BASE_URL) == []


class TestIdentifyBreakpoints:
    """Tests for identify_breakpoints."""

    def test_defaults(self):
        assert identify_breakpoints("plain content") == ["640px", "768px", "1024px", "1280px", "1536px"]

    def test_detected_wins(self):
        assert identify_breakpoints("sm:hidden", ["480px", "960px"]) == ["480px", "960px"]

    def test_tailwind_prefixes_sorted(self):
        content = 'class="2xl:grid xl:block sm:hidden lg:flex"'
        assert identify_breakpoints(content) == ["640px", "1024px", "1280px", "1536px"]

    def test_none_content(self):
        assert identify_breakpoints(None) == ["640px", "768px", "1024px", "1280px", "1536px"]


class TestCollectDependencies:
    """Tests for collect_dependencies."""

    def test_only_internal_links(self):
        navigation = [
            NavigationPattern(type=LinkType.INTERNAL, href="/pricing", text="Pricing"),
            NavigationPattern(type=LinkType.EXTERNAL, href="https://other.com/x", text="X"),
            NavigationPattern(type=LinkType.ANCHOR, href="#top", text="Top"),
        ]
        assert collect_dependencies(navigation) == ["/pricing"]

    def test_first_occurrence_order(self):
        navigation = [
            NavigationPattern(type=LinkType.INTERNAL, href="/b?x=1", text="B"),
            NavigationPattern(type=LinkType.INTERNAL, href="/a", text="A"),
            NavigationPattern(type=LinkType.INTERNAL, href="/b", text="B again"),
        ]
        assert collect_dependencies(navigation) == ["/b", "/a"]

    def test_home_and_empty_paths_dropped(self):
        navigation = [
            NavigationPattern(type=LinkType.INTERNAL, href="/#main", text="Home"),
            NavigationPattern(type=LinkType.INTERNAL, href="?sort=asc", text="Sort"),
        ]
        assert collect_dependencies(navigation) == []


class TestAnalyzePage:
    """Tests for analyze_page."""

    def test_structure(self):
        analysis = analyze_page(SIMPLE_SNAPSHOT, "https://example.com/page", "Test Page")

        assert analysis.url == "https://example.com/page"
        assert analysis.title == "Test Page"
        assert len(analysis.sections) == 3
        assert len(analysis.navigation) == 3
        assert analysis.responsive_breakpoints == ["640px", "768px", "1024px", "1280px", "1536px"]

    def test_dependencies(self):
        analysis = analyze_page(COMPLEX_SNAPSHOT, "https://example.com/page", "Test Page")

        assert analysis.dependencies == ["/products", "/category/1", "/terms"]

    def test_dependencies_drop_query_and_fragment(self):
        snapshot = "\n".join([
            '- link "About" [href="/about?ref=nav"]',
            '- link "Team" [href="/about#team"]',
            '- link "Page 2" [href="?page=2"]',
            '- link "Home" [href="/?utm=x"]',
            '- link "Blog" [href="https://example.com/blog#latest"]',
        ])

        analysis = analyze_page(snapshot, BASE_URL, "T")

        assert analysis.dependencies == ["/about", "https://example.com/blog"]

    def test_custom_breakpoints(self):
        analysis = analyze_page(SIMPLE_SNAPSHOT, BASE_URL, "T", ["500px", "900px"])
        assert analysis.responsive_breakpoints == ["500px", "900px"]

    def test_empty_snapshot(self):
        analysis = analyze_page("", BASE_URL, "T")

        assert analysis.sections == []
        assert analysis.navigation == []
        assert analysis.interactive_elements == []
        assert analysis.dependencies == []
