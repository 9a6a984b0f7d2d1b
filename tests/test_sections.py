"""Tests for clash_patch.sections."""

from clash_patch.sections import (
    Span,
    extract_blocks,
    is_top_level,
    scan,
    splice_section,
    split_lines,
)

DOC = (
    "# generated\n"
    "mixed-port: 7890\n"
    "dns:\n"
    "  enable: true\n"
    "\n"
    "  listen: 198.18.0.2:53\n"
    "proxies: []\n"
    "rules:\n"
    "- DOMAIN,a.com,DIRECT\n"
    "  # keep\n"
    "  - MATCH,DIRECT\n"
)


class TestIsTopLevel:
    def test_markers(self) -> None:
        assert is_top_level("mode: rule\n")
        assert is_top_level("proxies:\n")

    def test_non_markers(self) -> None:
        assert not is_top_level("\n")
        assert not is_top_level("   \n")
        assert not is_top_level("# comment\n")
        assert not is_top_level("  enable: true\n")
        assert not is_top_level("\tenable: true\n")
        assert not is_top_level("- MATCH,DIRECT\n")


class TestScan:
    def test_header_is_leading_comments(self) -> None:
        layout = scan(DOC)
        assert layout.header == Span(0, 1)

    def test_section_names_in_order(self) -> None:
        assert scan(DOC).names() == ["mixed-port", "dns", "proxies", "rules"]

    def test_blank_lines_do_not_end_a_section(self) -> None:
        dns = scan(DOC).find("dns")
        assert dns is not None
        assert (dns.start, dns.end) == (2, 6)

    def test_single_line_sections(self) -> None:
        proxies = scan(DOC).find("proxies")
        assert proxies is not None
        assert proxies.end - proxies.start == 1

    def test_column_zero_items_extend_section(self) -> None:
        rules = scan(DOC).find("rules")
        assert rules is not None
        assert (rules.start, rules.end) == (7, 11)

    def test_no_markers_means_all_header(self) -> None:
        text = "# only\n  indented: 1\n"
        layout = scan(text)
        assert layout.sections == []
        assert layout.header == Span(0, 2)

    def test_empty_document(self) -> None:
        layout = scan("")
        assert layout.sections == []
        assert layout.header == Span(0, 0)

    def test_missing_section(self) -> None:
        assert scan(DOC).find("tun") is None


class TestExtractBlocks:
    def test_verbatim_text(self) -> None:
        blocks = extract_blocks(DOC, {"dns", "rules"})
        assert blocks["dns"] == "dns:\n  enable: true\n\n  listen: 198.18.0.2:53\n"
        assert blocks["rules"].startswith("rules:\n- DOMAIN,a.com,DIRECT\n")

    def test_absent_sections_are_absent(self) -> None:
        blocks = extract_blocks(DOC, ["proxy-groups", "proxies"])
        assert list(blocks) == ["proxies"]
        assert blocks["proxies"] == "proxies: []\n"


class TestSpliceSection:
    def test_replace_keeps_surrounding_bytes(self) -> None:
        text = "a: 1\nb:\n  x: 1\n\n# about c\nc: 3\n"
        out = splice_section(text, "b", "b: []\n")
        assert out == "a: 1\nb: []\n\n# about c\nc: 3\n"

    def test_insert_before_anchor(self) -> None:
        out = splice_section("a: 1\nrules: []\n", "b", "b: []\n", anchor="rules")
        assert out == "a: 1\nb: []\n\nrules: []\n"

    def test_append_at_end(self) -> None:
        out = splice_section("a: 1", "b", "b: []\n")
        assert out == "a: 1\n\nb: []\n"

    def test_append_to_empty_document(self) -> None:
        assert splice_section("", "b", "b: []\n") == "b: []\n"

    def test_last_section_without_newline(self) -> None:
        out = splice_section("a: 1\nb: 2", "b", "b: 3\n")
        assert out == "a: 1\nb: 3"
        assert split_lines(out)[-1] == "b: 3"
