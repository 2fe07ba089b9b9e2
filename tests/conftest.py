"""Shared fixtures for clone verification tests."""

import pytest

from clonecheck.models import (
    ExtractedData,
    ImageData,
    InteractiveElement,
    InteractiveElementType,
    LinkData,
    LinkType,
    NavigationPattern,
    PageAnalysis,
    PageMetadata,
    Section,
    SectionType,
    TextBlock,
)

SOURCE_SNAPSHOT = """
- document [url="https://source.com"]
  - banner
    - navigation "Main Nav"
      - link "Home" [href="/"]
      - link "About" [href="/about"]
  - main
    - heading "Welcome" [level=1]
    - paragraph "Main content here"
    - button "Submit"
  - contentinfo
    - link "Privacy" [href="/privacy"]
""".strip()

MATCHING_CLONE_SNAPSHOT = SOURCE_SNAPSHOT.replace("https://source.com", "http://localhost:3000")

MISSING_CONTENT_SNAPSHOT = """
- document [url="http://localhost:3000"]
  - banner
    - navigation "Main Nav"
      - link "Home" [href="/"]
  - main
    - heading "Welcome" [level=1]
  - contentinfo
""".strip()


@pytest.fixture
def source_snapshot():
    return SOURCE_SNAPSHOT


@pytest.fixture
def matching_clone_snapshot():
    return MATCHING_CLONE_SNAPSHOT


@pytest.fixture
def missing_content_snapshot():
    return MISSING_CONTENT_SNAPSHOT


@pytest.fixture
def make_page_analysis():
    """Factory for a three-section page analysis."""

    def _make(**overrides):
        values = dict(
            url="https://example.com",
            title="Test Page",
            sections=[
                Section(id="section-1", type=SectionType.HEADER, selector='[role="banner"]'),
                Section(id="section-2", type=SectionType.MAIN, selector='[role="main"]'),
                Section(id="section-3", type=SectionType.FOOTER, selector='[role="contentinfo"]'),
            ],
            navigation=[
                NavigationPattern(type=LinkType.INTERNAL, href="/", text="Home"),
                NavigationPattern(type=LinkType.EXTERNAL, href="https://external.com", text="External"),
            ],
            interactive_elements=[
                InteractiveElement(type=InteractiveElementType.BUTTON, selector="button", action="Click Submit"),
                InteractiveElement(type=InteractiveElementType.LINK, selector="a", action="Navigate"),
            ],
            responsive_breakpoints=["768px", "1024px"],
            dependencies=["/about", "/contact"],
        )
        values.update(overrides)
        return PageAnalysis(**values)

    return _make


@pytest.fixture
def make_extracted_data():
    """Factory for a small, fully consistent extraction."""

    def _make(**overrides):
        values = dict(
            metadata=PageMetadata(title="Test Page", description="Test description"),
            text_content=[
                TextBlock(id="h1-1", content="Welcome to our site", tag="h1", order=0),
                TextBlock(id="p-2", content="This is the main content", tag="p", order=1),
            ],
            images=[
                ImageData(src="https://example.com/img1.png", alt="Image 1"),
                ImageData(src="https://example.com/img2.png", alt="Image 2"),
            ],
            links=[
                LinkData(href="/", text="Home", type=LinkType.INTERNAL),
                LinkData(
                    href="https://external.com",
                    text="External",
                    type=LinkType.EXTERNAL,
                    attributes={"target": "_blank", "rel": "noopener noreferrer"},
                ),
            ],
        )
        values.update(overrides)
        return ExtractedData(**values)

    return _make
