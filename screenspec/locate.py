# screenspec/locate.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple

from .contracts import RawDocument, Section, SectionKind
from .errors import SectionNotFound


logger = logging.getLogger("screenspec.locate")

_TABLE_ROW_RE = re.compile(r"^\s*\|")
# heading marks, bullets and "1." / "１．" style numbering in front of a label
_LABEL_PREFIX_RE = re.compile(r"^[\s#■□●◆◇▼▶・]*(?:[0-9０-９]+[.．)）]\s*)?")
_HEADER_MARK_RE = re.compile(r"^\s*(?:#|【|\[|\*\*|[■□●◆◇▼▶・]|[0-9０-９]+[.．)）])")


@dataclass(frozen=True)
class HeaderRecognizer:
    """One acceptable label for a section kind. The whole label must match."""
    name: str
    pattern: Pattern[str]

    def matches(self, label: str) -> bool:
        return self.pattern.fullmatch(label) is not None


def _bilingual(jp: str, en: str) -> str:
    sep = r"\s*[/／(（]\s*"
    close = r"\s*[)）]?"
    return rf"(?:{jp}){sep}(?:{en}){close}|(?:{en}){sep}(?:{jp}){close}"


def _rec(name: str, pattern: str) -> HeaderRecognizer:
    return HeaderRecognizer(name=name, pattern=re.compile(pattern, re.IGNORECASE))


_OVERVIEW_JP = r"(?:画面)?概要"
_OVERVIEW_EN = r"(?:screen\s+)?(?:overview|summary)"

_ITEM_JP = r"(?:画面)?項目(?:定義|一覧)?(?:書)?"
_ITEM_EN = r"(?:screen\s+)?items?(?:\s+(?:definitions?|list))?"

_ACTION_JP = r"(?:アクション|イベント)(?:定義|一覧)?(?:\s*[・/／]\s*画面遷移)?|画面遷移"
_ACTION_EN = r"actions?(?:\s+(?:definitions?|list))?(?:\s*[/&]\s*transitions?)?|(?:screen\s+)?transitions?"


# Ordered per kind: bilingual label first, then Japanese, then English.
RECOGNIZERS: Dict[SectionKind, Tuple[HeaderRecognizer, ...]] = {
    SectionKind.OVERVIEW: (
        _rec("overview:bilingual", _bilingual(_OVERVIEW_JP, _OVERVIEW_EN)),
        _rec("overview:ja", _OVERVIEW_JP),
        _rec("overview:en", _OVERVIEW_EN),
    ),
    SectionKind.ITEM_TABLE: (
        _rec("items:bilingual", _bilingual(_ITEM_JP, _ITEM_EN)),
        _rec("items:ja", _ITEM_JP),
        _rec("items:en", _ITEM_EN),
    ),
    SectionKind.ACTION_TABLE: (
        _rec("actions:bilingual", _bilingual(_ACTION_JP, _ACTION_EN)),
        _rec("actions:ja", _ACTION_JP),
        _rec("actions:en", _ACTION_EN),
    ),
}


@dataclass(frozen=True)
class LocatedSections:
    overview: Section
    item_table: Section
    action_table: Section


def header_label(line: str) -> Optional[str]:
    """
    Label text of a candidate header line, or None for blank lines and table rows.

    '## 1. 項目定義 / Item Definition:' -> '項目定義 / Item Definition'
    '【アクション】' -> 'アクション'
    """
    if not line.strip() or _TABLE_ROW_RE.match(line):
        return None
    label = _LABEL_PREFIX_RE.sub("", line).strip()
    label = label.strip("*").strip()
    if len(label) >= 2 and label[0] in "【[" and label[-1] in "】]":
        label = label[1:-1].strip()
    label = label.rstrip(":：").strip()
    return label or None


def recognize_header(line: str) -> Optional[SectionKind]:
    label = header_label(line)
    if label is None:
        return None
    for kind, recognizers in RECOGNIZERS.items():
        if any(r.matches(label) for r in recognizers):
            return kind
    return None


def has_header_mark(line: str) -> bool:
    """Heading mark, bracket, bullet, numbering or trailing colon."""
    return bool(_HEADER_MARK_RE.match(line)) or line.rstrip().endswith((":", "："))


def _find_header(doc: RawDocument, kind: SectionKind) -> Optional[int]:
    # marked lines before bare labels, then priority order, then top-to-bottom
    labels = [header_label(line) for line in doc.lines]
    marked = [has_header_mark(line) for line in doc.lines]
    for want_mark in (True, False):
        for rec in RECOGNIZERS[kind]:
            for idx, label in enumerate(labels):
                if label is not None and marked[idx] is want_mark and rec.matches(label):
                    logger.debug("Section %s found at line %d by %s", kind.value, idx + 1, rec.name)
                    return idx
    return None


def _section_at(doc: RawDocument, kind: SectionKind, start: int, header_lines: List[int]) -> Section:
    end = next((h for h in header_lines if h > start), len(doc.lines))
    return Section(
        kind=kind,
        line_start=start,
        line_end=end,
        lines=doc.lines[start:end],
        header=doc.lines[start],
    )


def locate(doc: RawDocument) -> LocatedSections:
    """
    Find the Overview, Item table and Action table sections.

    Fails closed with SectionNotFound when the item or action section is
    missing. A missing overview yields an empty Overview section.
    """
    starts: Dict[SectionKind, int] = {}
    for kind in (SectionKind.OVERVIEW, SectionKind.ITEM_TABLE, SectionKind.ACTION_TABLE):
        start = _find_header(doc, kind)
        if start is not None:
            starts[kind] = start

    # a section runs until the next selected header; other label-like lines stay inside it
    header_lines = sorted(starts.values())
    found: Dict[SectionKind, Section] = {
        kind: _section_at(doc, kind, start, header_lines) for kind, start in starts.items()
    }
    for i, line in enumerate(doc.lines):
        if i not in header_lines and recognize_header(line) is not None:
            logger.debug("Line %d looks like a section label; kept inside its section", i + 1)

    for kind in (SectionKind.ITEM_TABLE, SectionKind.ACTION_TABLE):
        if kind not in found:
            raise SectionNotFound(kind.value)

    overview = found.get(SectionKind.OVERVIEW)
    if overview is None:
        logger.info("No overview section; using an empty one")
        overview = Section(kind=SectionKind.OVERVIEW, line_start=0, line_end=0, lines=())

    return LocatedSections(
        overview=overview,
        item_table=found[SectionKind.ITEM_TABLE],
        action_table=found[SectionKind.ACTION_TABLE],
    )
