"""Tests for formatting, search and outline helpers."""

import re

import pytest

from mdsession.formatter import (
    compute_stats,
    document_structure,
    format_document,
    search_and_replace,
    selection_stats,
    strip_markdown,
)


class TestFormatDocument:
    def test_heading_and_list_spacing(self):
        text = "##Heading  \n*   bullet\n  +item\n1.first\n3.   third"
        assert format_document(text) == "## Heading\n* bullet\n  +item\n1.first\n3. third"

    def test_collapses_blank_lines(self):
        assert format_document("a\n\n\n\n\nb") == "a\n\nb"

    def test_trims_code_fence_interior(self):
        text = "```python\n\n    x = 1   \n\n```"
        assert format_document(text) == "```python\n    x = 1\n```"

    def test_code_lines_are_not_reformatted(self):
        text = "```bash\n#comment\n-  flag\n```"
        assert format_document(text) == text

    def test_idempotent(self):
        text = "#A\n\n\n\n-  b\n```\n\ncode\n\n```\n"
        once = format_document(text)
        assert format_document(once) == once

    def test_horizontal_rule_untouched(self):
        assert format_document("---") == "---"


class TestSearchAndReplace:
    def test_literal_is_case_insensitive_by_default(self):
        assert search_and_replace("Foo foo", "foo", "bar") == "bar bar"

    def test_case_sensitive(self):
        assert search_and_replace("Foo foo", "foo", "bar", case_sensitive=True) == "Foo bar"

    def test_literal_escapes_metacharacters(self):
        assert search_and_replace("a.b axb", "a.b", "X") == "X axb"

    def test_literal_replacement_is_not_a_template(self):
        assert search_and_replace("x", "x", r"\1$&") == r"\1$&"

    def test_regex_groups(self):
        out = search_and_replace("2026-01-24", r"(\d+)-(\d+)-(\d+)", r"\3/\2/\1", use_regex=True)
        assert out == "24/01/2026"

    def test_whole_word(self):
        assert search_and_replace("art part art", "art", "ART", whole_word=True) == "ART part ART"

    def test_invalid_regex_raises(self):
        with pytest.raises(re.error):
            search_and_replace("x", "[", "y", use_regex=True)


class TestDocumentStructure:
    def test_tree_from_levels(self):
        roots = document_structure("# A\n## B\n## C\n# D")
        assert [n.title for n in roots] == ["A", "D"]
        assert [n.title for n in roots[0].children] == ["B", "C"]
        assert roots[1].children == []

    def test_skipped_levels_attach_to_nearest_lower(self):
        roots = document_structure("## Intro\n#### Deep\n### Mid\n# Top")
        assert [n.title for n in roots] == ["Intro", "Top"]
        intro = roots[0]
        assert [n.title for n in intro.children] == ["Deep", "Mid"]

    def test_slug_and_line_numbers(self):
        roots = document_structure("text\n## Hello, World!  Again\n")
        node = roots[0]
        assert node.id == "hello-world-again"
        assert node.line == 2
        assert node.level == 2

    def test_ignores_non_headings(self):
        assert document_structure("#nospace\n####### seven\nplain") == []


class TestStats:
    def test_compute_stats(self):
        stats = compute_stats("one two\nthree\n\nfour")
        assert stats.characters == 19
        assert stats.words == 4
        assert stats.lines == 4
        assert stats.paragraphs == 2
        assert stats.reading_time == 1

    def test_empty_text(self):
        stats = compute_stats("")
        assert (stats.words, stats.paragraphs, stats.lines, stats.reading_time) == (0, 0, 1, 0)

    def test_reading_time_rounds_up(self):
        assert compute_stats("word " * 201).reading_time == 2

    def test_selection_stats(self):
        assert selection_stats("") is None
        assert selection_stats("a b\nc") == {"chars": 5, "words": 3, "lines": 2}

    def test_strip_markdown(self):
        assert strip_markdown("## **Hi** _there_ ~x~ [a](b)") == " Hi there x ab"
