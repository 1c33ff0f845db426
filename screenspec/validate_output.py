# screenspec/validate_output.py
from __future__ import annotations

import re
from typing import Dict, Iterable, List, Set

from spec_schemas.schemas_output import OutputDocument

from .columns import parse_item_rows
from .contracts import ACTION_SEPARATOR, RawDocument, Violation
from .ingest import ERROR_CODE_RE, SCREEN_CODE_RE
from .locate import locate
from .sentences import split_sentences


_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)


def _codes(pattern: re.Pattern, texts: Iterable[str]) -> Set[str]:
    out: Set[str] = set()
    for t in texts:
        out.update(pattern.findall(t))
    return out


def comparable_source(raw: RawDocument) -> str:
    """Raw text with table escapes undone, the way cell values are read."""
    return _BR_RE.sub("\n", raw.text.replace("\\|", "|"))


def check_error_codes(raw: RawDocument, doc: OutputDocument) -> List[Violation]:
    in_raw = _codes(ERROR_CODE_RE, [raw.text])
    in_out = _codes(ERROR_CODE_RE, doc.content_texts())
    out = [
        Violation("error-codes", code, "error code in source is missing from output")
        for code in sorted(in_raw - in_out)
    ]
    out.extend(
        Violation("error-codes", code, "error code in output does not exist in source")
        for code in sorted(in_out - in_raw)
    )
    return out


def check_screen_codes(raw: RawDocument, doc: OutputDocument) -> List[Violation]:
    in_out = _codes(SCREEN_CODE_RE, doc.content_texts())
    return [
        Violation("screen-codes", code, "screen code in source never appears in output")
        for code in sorted(_codes(SCREEN_CODE_RE, [raw.text]) - in_out)
    ]


def check_text_origin(raw: RawDocument, doc: OutputDocument) -> List[Violation]:
    source = comparable_source(raw)
    out: List[Violation] = []
    seen: Set[str] = set()
    for text in doc.source_texts():
        for sentence in split_sentences(text):
            if sentence == ACTION_SEPARATOR or sentence in seen:
                continue
            seen.add(sentence)
            if sentence not in source:
                out.append(Violation("text-origin", sentence, "sentence does not appear in source"))
    return out


def check_item_order(raw: RawDocument, doc: OutputDocument) -> List[Violation]:
    raw_numbers = [r.item_number for r in parse_item_rows(locate(raw).item_table)]
    position: Dict[str, int] = {}
    for i, num in enumerate(raw_numbers):
        position.setdefault(num, i)

    out_numbers = doc.item_numbers()
    out: List[Violation] = []
    for num in raw_numbers:
        if num not in out_numbers:
            out.append(Violation("item-order", num, "item missing from output"))
    for num in out_numbers:
        if num not in position:
            out.append(Violation("item-order", num, "item in output does not exist in source"))

    for group in doc.groups:
        last = -1
        for it in group.items:
            pos = position.get(it.item_number)
            if pos is None:
                continue
            if pos < last:
                out.append(Violation(
                    "item-order", it.item_number,
                    f"item appears out of source order in group {group.name!r}",
                ))
            last = max(last, pos)
    return out


CHECKS = (
    check_error_codes,
    check_screen_codes,
    check_text_origin,
    check_item_order,
)


def validate(raw: RawDocument, doc: OutputDocument) -> List[Violation]:
    """
    Run every output check and collect all violations (empty list = pass).

    Checks are independent; none stops the others.
    """
    violations: List[Violation] = []
    for check in CHECKS:
        violations.extend(check(raw, doc))
    return violations
