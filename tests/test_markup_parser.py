"""Tests for the permissive markup parser."""

from __future__ import annotations

import logging
import warnings

import pytest

from metaforge.markup import MarkupNode, ParseContext, parse, parse_attributes
from metaforge.tools.errors import ParseRecoveryWarning


class TestStructure:
    """Nesting, text spans and implicit closing."""

    def test_text_and_elements_keep_document_order(self) -> None:
        tree = parse("Hello <b>world</b>!")

        assert tree == ["Hello ", MarkupNode("b", {}, ["world"]), "!"]

    def test_nested_elements(self) -> None:
        tree = parse("<report>Hello <b>big</b> world</report>")

        report = tree[0]
        assert isinstance(report, MarkupNode)
        assert report.content == ["Hello ", MarkupNode("b", {}, ["big"]), " world"]
        assert report.text() == "Hello big world"
        assert list(report.children()) == [MarkupNode("b", {}, ["big"])]

    def test_unclosed_element_is_closed_at_end_of_input(self) -> None:
        assert parse("<plan>step one") == [MarkupNode("plan", {}, ["step one"])]

    def test_closing_an_outer_tag_closes_inner_ones(self) -> None:
        tree = parse("<a><b>x</a>y")

        assert tree == [MarkupNode("a", {}, [MarkupNode("b", {}, ["x"])]), "y"]

    def test_self_closing_differs_from_empty_element(self) -> None:
        empty, self_closing = parse("<list_files></list_files><list_files/>")

        assert empty == MarkupNode("list_files", {}, [])
        assert not empty.is_self_closing
        assert self_closing.content is None
        assert self_closing.is_self_closing

    def test_self_closing_with_space_before_slash(self) -> None:
        assert parse("<preview />") == [MarkupNode("preview", {}, None)]

    def test_empty_input(self) -> None:
        assert parse("") == []
        assert parse("   \n ", trim_text=True) == []

    def test_malformed_start_tag_stays_literal(self) -> None:
        assert parse("a <div class=foo> b") == ["a <div class=foo> b"]

    def test_to_dict_is_json_ready(self) -> None:
        node = parse('<edit_file path="a.js" start="1" end="2" mode="replace">x</edit_file>')[0]

        assert node.to_dict() == {
            "tag": "edit_file",
            "attributes": {"path": "a.js", "start": "1", "end": "2", "mode": "replace"},
            "content": ["x"],
        }


class TestAttributes:
    def test_double_and_single_quotes(self) -> None:
        tree = parse("""<read_file path="src/app.js" start='3' end="7"/>""")

        assert tree == [MarkupNode("read_file", {"path": "src/app.js", "start": "3", "end": "7"}, None)]

    def test_parse_attributes_ignores_unquoted_pairs(self) -> None:
        assert parse_attributes(' path="a.txt" mode=replace') == {"path": "a.txt"}
        assert parse_attributes(None) == {}

    def test_protected_region_inside_attribute_is_restored(self) -> None:
        node = parse('<read_file path="`notes`.md"/>')[0]

        assert node.attributes == {"path": "`notes`.md"}


class TestProtection:
    """Code spans and comments are never read as markup."""

    def test_inline_code_is_literal(self) -> None:
        assert parse("Use `<b>bold</b>` here") == ["Use `<b>bold</b>` here"]

    def test_inline_code_inside_element_body(self) -> None:
        tree = parse("<report>Call `<preview/>` later</report>")

        assert tree == [MarkupNode("report", {}, ["Call `<preview/>` later"])]

    def test_fenced_block_is_literal(self) -> None:
        assert parse("```\n<b>\n```") == ["```\n<b>\n```"]

    def test_html_comment_is_literal(self) -> None:
        assert parse("<!-- <finish/> -->done") == ["<!-- <finish/> -->done"]

    def test_doctype_is_restored_in_body(self) -> None:
        tree = parse('<create_file path="i.html"><!DOCTYPE html></create_file>')

        assert tree == [MarkupNode("create_file", {"path": "i.html"}, ["<!DOCTYPE html>"])]


class TestExclusion:
    def test_excluded_body_is_raw_text(self) -> None:
        text = '<create_file path="a.html"><div><p>Hi</p></div></create_file>'

        tree = parse(text, excluded_tags=["create_file"])

        assert tree == [MarkupNode("create_file", {"path": "a.html"}, ["<div><p>Hi</p></div>"])]

    def test_same_text_without_exclusion_is_nested(self) -> None:
        text = '<create_file path="a.html"><div><p>Hi</p></div></create_file>'

        node = parse(text)[0]

        assert node.content == [MarkupNode("div", {}, [MarkupNode("p", {}, ["Hi"])])]

    def test_excluded_body_closes_on_first_same_named_end_tag(self) -> None:
        text = '<create_file path="a"><create_file path="b">inner</create_file>tail</create_file>'

        with pytest.warns(ParseRecoveryWarning):
            tree = parse(text, excluded_tags=["create_file"])

        assert tree == [
            MarkupNode("create_file", {"path": "a"}, ['<create_file path="b">inner']),
            "tail",
            "</create_file>",
        ]

    def test_tags_after_excluded_block_are_parsed(self) -> None:
        text = '<edit_file path="a" start="1" end="1" mode="replace"><li>x</li></edit_file><list_files/>'

        tree = parse(text, True, ["create_file", "edit_file"])

        assert tree[0].content == ["<li>x</li>"]
        assert tree[1] == MarkupNode("list_files", {}, None)

    def test_protected_region_in_excluded_body_is_restored(self) -> None:
        text = "<create_file path=\"r.md\">Run `npm start` now</create_file>"

        tree = parse(text, excluded_tags=("create_file",))

        assert tree[0].content == ["Run `npm start` now"]


class TestRecovery:
    def test_unmatched_end_tag_becomes_text_with_warning(self) -> None:
        with pytest.warns(ParseRecoveryWarning, match="Unmatched closing tag </div>"):
            tree = parse("text</div>more")

        assert tree == ["text", "</div>", "more"]

    def test_unmatched_end_tag_with_trim(self) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ParseRecoveryWarning)
            tree = parse(" a </x> b ", trim_text=True)

        assert tree == ["a", "</x>", "b"]

    def test_every_unmatched_end_tag_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="metaforge.markup.parser"), warnings.catch_warnings():
            warnings.simplefilter("ignore", ParseRecoveryWarning)
            parse("a</x>b</y>")
            parse("c</x>")

        assert [record.getMessage() for record in caplog.records if record.name == "metaforge.markup.parser"] == [
            "Unmatched closing tag </x> found.",
            "Unmatched closing tag </y> found.",
            "Unmatched closing tag </x> found.",
        ]

    def test_root_is_never_closed_by_end_tag(self) -> None:
        with pytest.warns(ParseRecoveryWarning):
            tree = parse("<b>x</b></root>")

        assert tree == [MarkupNode("b", {}, ["x"]), "</root>"]

    def test_find_open_skips_root_sentinel(self) -> None:
        context = ParseContext()

        assert context.find_open("root") == -1


class TestTrimming:
    def test_trim_strips_and_drops_empty_spans(self) -> None:
        text = "  intro  \n<finish>\n  All done.\n</finish>\n  "

        assert parse(text, trim_text=True) == ["intro", MarkupNode("finish", {}, ["All done."])]

    def test_whitespace_is_kept_without_trim(self) -> None:
        text = "  intro  \n<finish>All done.</finish>"

        assert parse(text)[0] == "  intro  \n"
