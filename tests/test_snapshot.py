"""Tests for accessibility snapshot parsing."""

import pytest

from clonecheck.snapshot import (
    collect_links,
    collect_names,
    count_by_role,
    count_nodes,
    parse_attributes,
    parse_snapshot,
    walk,
)

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


class TestParseSnapshot:
    """Tests for parse_snapshot."""

    def test_parses_tree(self):
        nodes = parse_snapshot(SIMPLE_SNAPSHOT)

        assert len(nodes) == 1
        assert nodes[0].role == "document"
        assert [child.role for child in nodes[0].children] == ["banner", "main", "contentinfo"]

    def test_attributes(self):
        nodes = parse_snapshot(SIMPLE_SNAPSHOT)
        assert nodes[0].attributes["url"] == "https://example.com"

    def test_names(self):
        nav = parse_snapshot(SIMPLE_SNAPSHOT)[0].children[0].children[0]
        assert nav.name == "Main Navigation"

    def test_depth(self):
        document = parse_snapshot(SIMPLE_SNAPSHOT)[0]
        banner = document.children[0]
        nav = banner.children[0]
        home = nav.children[0]

        assert (document.depth, banner.depth, nav.depth, home.depth) == (0, 1, 2, 3)

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_input(self, text):
        assert parse_snapshot(text) == []

    def test_roles_are_lowercased(self):
        nodes = parse_snapshot('- Heading "Title"')
        assert nodes[0].role == "heading"

    def test_skips_non_matching_lines(self):
        text = "garbage line\n- main\n  not a node\n  - heading \"Hi\""
        nodes = parse_snapshot(text)

        assert len(nodes) == 1
        assert [c.role for c in nodes[0].children] == ["heading"]

    def test_multiple_roots(self):
        nodes = parse_snapshot("- banner\n- main\n- contentinfo")
        assert [n.role for n in nodes] == ["banner", "main", "contentinfo"]

    def test_sibling_after_deeper_subtree(self):
        text = "- main\n  - list\n    - listitem\n      - link \"A\"\n  - button \"B\""
        main = parse_snapshot(text)[0]

        assert [c.role for c in main.children] == ["list", "button"]

    def test_odd_indentation_rounds_down(self):
        text = "- main\n   - heading \"H\""
        main = parse_snapshot(text)[0]

        assert main.children[0].depth == 1

    def test_crlf_line_endings(self):
        nodes = parse_snapshot("- main\r\n  - button \"Go\"\r\n")
        assert nodes[0].children[0].name == "Go"

    def test_node_without_name(self):
        nodes = parse_snapshot("- separator")
        assert nodes[0].name == ""
        assert nodes[0].attributes == {}


class TestParseAttributes:
    """Tests for parse_attributes."""

    def test_comma_separated(self):
        assert parse_attributes('level=1, href="/a"') == {"level": "1", "href": "/a"}

    def test_space_separated(self):
        assert parse_attributes('level=2 href=/b') == {"level": "2", "href": "/b"}

    def test_single_quotes(self):
        assert parse_attributes("href='/c'") == {"href": "/c"}

    def test_bare_flags(self):
        assert parse_attributes("checked, level=3") == {"checked": "true", "level": "3"}

    def test_quoted_value_with_spaces(self):
        assert parse_attributes('placeholder="Search the site"') == {"placeholder": "Search the site"}

    def test_bare_value_keeps_embedded_commas(self):
        nodes = parse_snapshot('- link "Img" [href=/img/w_100,h_100/a.jpg]')
        assert nodes[0].attributes == {"href": "/img/w_100,h_100/a.jpg"}

    def test_comma_before_next_key_still_separates(self):
        assert parse_attributes("href=/a,b/c,level=2") == {"href": "/a,b/c", "level": "2"}

    def test_comma_inside_href_does_not_hide_missing_link(self):
        source = parse_snapshot('- link "Img" [href=/img/w_100,h_100/a.jpg]')
        clone = parse_snapshot('- link "Img" [href=/img/w_100,h_200/a.jpg]')

        assert collect_links(source) != collect_links(clone)

    def test_empty(self):
        assert parse_attributes("") == {}
        assert parse_attributes(None) == {}

    def test_flag_in_snapshot_line(self):
        nodes = parse_snapshot('- checkbox "Accept" [checked]')
        assert nodes[0].attributes == {"checked": "true"}


class TestTraversal:
    """Tests for the traversal helpers."""

    @pytest.fixture
    def nodes(self):
        return parse_snapshot(SIMPLE_SNAPSHOT)

    def test_walk_is_pre_order(self, nodes):
        roles = [node.role for node in walk(nodes)]
        assert roles[:5] == ["document", "banner", "navigation", "link", "link"]
        assert roles[5] == "main"

    def test_count_nodes(self, nodes):
        assert count_nodes(nodes) == 11
        assert count_nodes([]) == 0

    def test_count_by_role(self, nodes):
        counts = count_by_role(nodes)
        assert counts["link"] == 3
        assert counts["heading"] == 1

    def test_collect_names(self, nodes):
        names = collect_names(nodes)
        assert names[0] == "Main Navigation"
        assert "Some text content" in names
        assert "" not in names

    def test_collect_links(self, nodes):
        assert collect_links(nodes) == [("/", "Home"), ("/about", "About"), ("/privacy", "Privacy")]
