# screenspec/enrich.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Pattern, Tuple

from .contracts import (
    ACTION_SEPARATOR,
    NO_ACTION,
    ActionId,
    ActionIndex,
    ActionRow,
    EnrichedItem,
    ItemRow,
)
from .errors import UnresolvedActionReference
from .sentences import Span, remove_spans, sentence_spans


logger = logging.getLogger("screenspec.enrich")

_ID = r"(?P<id>[A-Za-z0-9][A-Za-z0-9_\-]*)"


@dataclass(frozen=True)
class BackReferenceRecognizer:
    name: str
    pattern: Pattern[str]

    def find_ids(self, sentence: str) -> List[Tuple[int, int, ActionId]]:
        """(match start, match end, id) for every match in the sentence."""
        return [(m.start(), m.end(), m.group("id")) for m in self.pattern.finditer(sentence)]


# Evaluated in order; every recognizer is tried on every sentence.
BACK_REFERENCE_RECOGNIZERS: Tuple[BackReferenceRecognizer, ...] = (
    BackReferenceRecognizer(
        "en:refer-to-action-id",
        re.compile(
            r"\b(?:refer\s+to|see)\s+(?:the\s+)?action\s*(?:id|no\.?|number|#)\s*[:：]?\s*" + _ID,
            re.IGNORECASE,
        ),
    ),
    BackReferenceRecognizer(
        "ja:action-id-sansho",
        re.compile(
            r"アクション\s*(?:ID|ＩＤ|No\.?|番号)\s*[:：]?\s*" + _ID + r"\s*(?:を|の)?\s*参照",
            re.IGNORECASE,
        ),
    ),
    BackReferenceRecognizer(
        "ja:action-n-sansho",
        re.compile(r"アクション\s*" + _ID + r"\s*(?:を|の)?\s*参照"),
    ),
    BackReferenceRecognizer(
        "ja:sansho-action",
        re.compile(r"参照\s*[:：]\s*アクション\s*(?:ID|No\.?|番号)?\s*[:：]?\s*" + _ID, re.IGNORECASE),
    ),
    BackReferenceRecognizer(
        "ja:kome-sansho",
        re.compile(
            r"※\s*(?:アクション\s*)?(?:ID|ＩＤ|No\.?|番号)?\s*[:：]?\s*" + _ID + r"\s*(?:を|の)?\s*参照",
            re.IGNORECASE,
        ),
    ),
)


def find_back_references(text: str) -> List[Tuple[Span, Tuple[ActionId, ...]]]:
    """
    Sentences of text that point at an action row, with the ids they name.

    Returns [(sentence_span, ids)] in text order; ids keep their order of
    appearance inside the sentence. A match overlapping one kept from an
    earlier recognizer is dropped.
    """
    found: List[Tuple[Span, Tuple[ActionId, ...]]] = []
    for s, e in sentence_spans(text):
        sentence = text[s:e]
        hits: List[Tuple[int, int, ActionId]] = []
        for rec in BACK_REFERENCE_RECOGNIZERS:
            for start, end, aid in rec.find_ids(sentence):
                if any(start < h_end and h_start < end for h_start, h_end, _ in hits):
                    continue
                hits.append((start, end, aid))
        if not hits:
            continue
        ids: List[ActionId] = []
        for _, _, aid in sorted(hits):
            if aid not in ids:
                ids.append(aid)
        found.append(((s, e), tuple(ids)))
    return found


def _join_bilingual(source: str, translated: str) -> str:
    # source language block first; identical blocks are written once
    if source and translated and source != translated:
        return f"{source}\n{translated}"
    return source or translated


def format_action_text(row: ActionRow) -> str:
    """Exact trigger text, the separator line, then the exact action detail."""
    trigger = _join_bilingual(row.trigger_japanese, row.trigger_english)
    detail = _join_bilingual(row.action_detail_japanese, row.action_detail_english)
    return "\n".join(part for part in (trigger, ACTION_SEPARATOR, detail) if part)


def enrich_item(row: ItemRow, index: ActionIndex) -> EnrichedItem:
    refs_ja = find_back_references(row.description_japanese)
    refs_en = find_back_references(row.description_english)

    if not refs_ja and not refs_en:
        return EnrichedItem(
            row=row,
            resolved_action_text=NO_ACTION,
            description_japanese_cleaned=row.description_japanese,
            description_english_cleaned=row.description_english,
        )

    ids: List[ActionId] = []
    for _, sentence_ids in refs_ja + refs_en:
        for aid in sentence_ids:
            if aid not in ids:
                ids.append(aid)

    for aid in ids:
        if aid not in index:
            raise UnresolvedActionReference(aid, row.item_number)

    stripped = tuple(
        [row.description_japanese[s:e] for (s, e), _ in refs_ja]
        + [row.description_english[s:e] for (s, e), _ in refs_en]
    )
    logger.debug("Item %s references actions %s", row.item_number, ids)

    return EnrichedItem(
        row=row,
        resolved_action_text="\n\n".join(format_action_text(index[aid]) for aid in ids),
        description_japanese_cleaned=remove_spans(row.description_japanese, [sp for sp, _ in refs_ja]),
        description_english_cleaned=remove_spans(row.description_english, [sp for sp, _ in refs_en]),
        referenced_action_ids=tuple(ids),
        stripped_sentences=stripped,
    )


def enrich(item_rows: Iterable[ItemRow], index: ActionIndex) -> List[EnrichedItem]:
    """One EnrichedItem per ItemRow, same order. Fails closed on a dangling reference."""
    return [enrich_item(row, index) for row in item_rows]
