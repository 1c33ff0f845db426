"""Unit tests for the section locator."""

import textwrap

import pytest

from screenspec.contracts import RawDocument, SectionKind
from screenspec.errors import SectionNotFound
from screenspec.locate import RECOGNIZERS, has_header_mark, header_label, locate, recognize_header


def _doc(text):
    return RawDocument.from_text(textwrap.dedent(text))


class TestHeaderLabel:
    """Test cases for header label extraction."""

    @pytest.mark.parametrize(
        "line,label",
        [
            ("## 1. 項目定義 / Item Definition:", "項目定義 / Item Definition"),
            ("【アクション】", "アクション"),
            ("■ 概要", "概要"),
            ("**Overview**", "Overview"),
        ],
    )
    def test_label_is_stripped(self, line, label):
        """Test that heading marks, numbering and brackets are removed."""
        assert header_label(line) == label

    def test_table_rows_are_not_headers(self):
        """Test that table rows never produce a label."""
        assert header_label("| 概要 | Overview |") is None
        assert header_label("   ") is None


class TestRecognizers:
    """Test cases for the per-kind recognizers."""

    def test_bilingual_recognizer_comes_first(self):
        """Test that every kind tries its bilingual label first."""
        for kind, recognizers in RECOGNIZERS.items():
            assert recognizers[0].name.endswith(":bilingual")

    @pytest.mark.parametrize(
        "line,kind",
        [
            ("## 概要 / Overview", SectionKind.OVERVIEW),
            ("## Overview (概要)", SectionKind.OVERVIEW),
            ("## 画面概要", SectionKind.OVERVIEW),
            ("## 項目定義", SectionKind.ITEM_TABLE),
            ("## Item Definition", SectionKind.ITEM_TABLE),
            ("## アクション定義・画面遷移", SectionKind.ACTION_TABLE),
            ("## Action / Transition", SectionKind.ACTION_TABLE),
            ("## イベント / Actions", SectionKind.ACTION_TABLE),
        ],
    )
    def test_recognize_header(self, line, kind):
        """Test Japanese, English and bilingual header variants."""
        assert recognize_header(line) == kind

    def test_prose_is_not_a_header(self):
        """Test that ordinary sentences are not recognized."""
        assert recognize_header("ユーザーがログインする画面。") is None
        assert recognize_header("# ABC_01 ログイン画面") is None


class TestLocate:
    """Test cases for locate()."""

    def test_locate_sample(self, raw_doc):
        """Test that all three sections of the sample are found with their extents."""
        sections = locate(raw_doc)

        assert sections.overview.header == "## 概要 / Overview"
        assert sections.overview.text.strip().startswith("ユーザーがIDとパスワード")
        assert sections.item_table.header == "## 項目定義 / Item Definition"
        assert sections.item_table.line_end == sections.action_table.line_start
        assert sections.action_table.line_end == len(raw_doc)

    def test_missing_overview_yields_empty_section(self):
        """Test that a document without overview still locates."""
        doc = _doc(
            """\
            ## Items
            | No | Name |
            |---|---|
            | 1 | A |
            ## Actions
            | No | Trigger |
            |---|---|
            | 1 | Tap |
            """
        )
        sections = locate(doc)

        assert sections.overview.kind == SectionKind.OVERVIEW
        assert sections.overview.header is None
        assert sections.overview.text == ""

    def test_missing_action_table_fails(self):
        """Test that a missing action section raises SectionNotFound."""
        doc = _doc(
            """\
            ## 概要
            text
            ## 項目定義
            | No | 項目名 |
            """
        )
        with pytest.raises(SectionNotFound) as exc:
            locate(doc)
        assert exc.value.kind == "ActionTable"

    def test_missing_item_table_fails(self):
        """Test that a missing item section raises SectionNotFound."""
        with pytest.raises(SectionNotFound) as exc:
            locate(_doc("## アクション\n| No |\n"))
        assert exc.value.kind == "ItemTable"

    def test_priority_beats_position(self):
        """Test that a bilingual label wins over an earlier single-language one."""
        doc = _doc(
            """\
            ## Items
            draft table
            ## 項目定義 / Item Definition
            | No |
            ## Actions
            | No |
            """
        )
        sections = locate(doc)

        assert sections.item_table.header == "## 項目定義 / Item Definition"
        assert sections.item_table.line_start == 2

    def test_bare_label_in_prose_does_not_end_section(self):
        """Test that an unmarked 'Summary' line stays inside the overview."""
        doc = _doc(
            """\
            ## Overview
            The screen lets a user sign in.
            Summary
            The user enters ID.
            ## Items
            | No |
            ## Actions
            | No |
            """
        )
        overview = locate(doc).overview

        assert overview.lines == (
            "## Overview",
            "The screen lets a user sign in.",
            "Summary",
            "The user enters ID.",
        )

    def test_marked_header_preferred_over_bare_label(self):
        """Test that a bare '画面遷移' in the overview is not taken as the action header."""
        doc = _doc(
            """\
            ## 概要
            画面遷移
            ログイン後にホームへ遷移する。
            ## 項目定義
            | No |
            ## アクション
            | No |
            """
        )
        sections = locate(doc)

        assert sections.action_table.header == "## アクション"
        assert "ログイン後にホームへ遷移する。" in sections.overview.text

    @pytest.mark.parametrize(
        "line,marked",
        [
            ("## 概要", True),
            ("【アクション】", True),
            ("1. Items", True),
            ("概要：", True),
            ("Summary", False),
        ],
    )
    def test_has_header_mark(self, line, marked):
        assert has_header_mark(line) is marked
