# screenspec/assemble.py
from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from spec_schemas.schemas_output import (
    DocumentMetadata,
    ErrorCodeRule,
    FieldRule,
    InteractionStep,
    ItemGroup,
    OutputDocument,
    OutputItem,
    ValidationRules,
)

from .contracts import ActionId, ActionRow, EnrichedItem, ItemRow, RequiredFlag, Section
from .ingest import ERROR_CODE_RE
from .sentences import sentence_spans


MAIN_GROUP = "Main Components"
POPUP_GROUP = "Popups"
GROUP_ORDER = (MAIN_GROUP, POPUP_GROUP)

_POPUP_RE = re.compile(r"pop-?up|dialog|modal|ポップアップ|ダイアログ|モーダル", re.IGNORECASE)
_FRAGMENT_LEAD = " \t　:：-－–—)）」』】]"
_FRAGMENT_TAIL = " \t　:：-－–—(（「『【["
# spreadsheet placeholders for "no value"
_EMPTY_MARKS = {"", "-", "－", "—", "ー", "なし", "N/A", "n/a"}


def group_of(item: EnrichedItem, actions: Dict[ActionId, ActionRow]) -> str:
    """
    Popups when any referenced action transitions to a popup/dialog/modal,
    Main Components otherwise. Depends only on the item and its actions.
    """
    for aid in item.referenced_action_ids:
        row = actions.get(aid)
        if row is not None and _POPUP_RE.search(row.screen_transition):
            return POPUP_GROUP
    return MAIN_GROUP


def to_output_item(item: EnrichedItem) -> OutputItem:
    row = item.row
    return OutputItem(
        item_number=row.item_number,
        name_japanese=row.name_japanese,
        name_english=row.name_english,
        item_type=row.item_type,
        is_required=row.is_required,
        required_text=row.required_text,
        data_type=row.data_type,
        max_length=row.max_length,
        format=row.format,
        initial_value=row.initial_value,
        description_japanese=item.description_japanese_cleaned,
        description_english=item.description_english_cleaned,
        action_text=item.resolved_action_text,
        referenced_action_ids=list(item.referenced_action_ids),
    )


def group_items(items: Sequence[EnrichedItem], actions: Dict[ActionId, ActionRow]) -> List[ItemGroup]:
    buckets: Dict[str, List[OutputItem]] = {name: [] for name in GROUP_ORDER}
    for it in items:
        buckets[group_of(it, actions)].append(to_output_item(it))
    return [ItemGroup(name=name, items=buckets[name]) for name in GROUP_ORDER if buckets[name]]


# ----------------------------
# Validation rules
# ----------------------------

def adjacent_fragment(text: str, start: int, end: int) -> str:
    """
    Explanation next to a code at text[start:end], copied from the same sentence.

    Text after the code wins; otherwise the text in front of it.
    Only separator characters at the outer edges are trimmed.
    """
    s_start, s_end = start, end
    for s, e in sentence_spans(text):
        if s <= start < e:
            s_start, s_end = s, e
            break
    after = text[end:s_end].lstrip(_FRAGMENT_LEAD).rstrip()
    if after:
        return after
    return text[s_start:start].rstrip(_FRAGMENT_TAIL).lstrip()


def rule_scan_texts(items: Iterable[EnrichedItem], action_rows: Iterable[ActionRow]) -> List[str]:
    """Cleaned descriptions in item order, then action text in action order."""
    texts: List[str] = []
    for it in items:
        texts.append(it.description_japanese_cleaned)
        texts.append(it.description_english_cleaned)
    for a in action_rows:
        texts.extend([
            a.trigger_japanese,
            a.trigger_english,
            a.action_detail_japanese,
            a.action_detail_english,
            a.remarks,
        ])
    return [t for t in texts if t]


def extract_error_codes(texts: Iterable[str]) -> List[ErrorCodeRule]:
    first: Dict[str, str] = {}
    for text in texts:
        for m in ERROR_CODE_RE.finditer(text):
            code = m.group(0)
            if code not in first:
                first[code] = adjacent_fragment(text, m.start(), m.end())
    return [ErrorCodeRule(code=code, fragment=first[code]) for code in sorted(first)]


def _has_value(cell: str) -> bool:
    return cell.strip() not in _EMPTY_MARKS


def field_rule(row: ItemRow) -> Optional[FieldRule]:
    parts: List[str] = []
    if row.is_required is RequiredFlag.REQUIRED:
        parts.append("Required")
    elif row.is_required is RequiredFlag.CONDITIONAL:
        parts.append("Conditionally required")
    if _has_value(row.data_type):
        parts.append(f"Data type: {row.data_type}")
    if _has_value(row.max_length):
        parts.append(f"Max length: {row.max_length}")
    if _has_value(row.format):
        parts.append(f"Format: {row.format}")
    if not parts:
        return None
    name = row.name_japanese or row.name_english or row.item_number
    return FieldRule(field=name, rule="; ".join(parts))


def build_validation_rules(items: Sequence[EnrichedItem], action_rows: Sequence[ActionRow]) -> ValidationRules:
    field_rules = [fr for fr in (field_rule(it.row) for it in items) if fr is not None]
    return ValidationRules(
        error_codes=extract_error_codes(rule_scan_texts(items, action_rows)),
        field_rules=field_rules,
    )


def to_interaction_step(a: ActionRow) -> InteractionStep:
    return InteractionStep(
        action_id=a.action_id,
        trigger_japanese=a.trigger_japanese,
        trigger_english=a.trigger_english,
        screen_transition=a.screen_transition,
        action_detail_japanese=a.action_detail_japanese,
        action_detail_english=a.action_detail_english,
        remarks=a.remarks,
    )


def assemble(
    overview: Section,
    enriched: Sequence[EnrichedItem],
    action_rows: Sequence[ActionRow],
    metadata: DocumentMetadata,
) -> OutputDocument:
    actions: Dict[ActionId, ActionRow] = {}
    for a in action_rows:
        actions.setdefault(a.action_id, a)

    return OutputDocument(
        metadata=metadata,
        overview=overview.text.strip(),
        groups=group_items(enriched, actions),
        interaction_flow=[to_interaction_step(a) for a in action_rows],
        validation_rules=build_validation_rules(enriched, action_rows),
    )


def group_summary(doc: OutputDocument) -> List[Tuple[str, int]]:
    return [(g.name, len(g.items)) for g in doc.groups]
