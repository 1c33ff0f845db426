# screenspec/columns.py
from __future__ import annotations

from typing import List, Tuple

from .contracts import ActionRow, ItemRow, RequiredFlag, Section
from .table import ColumnSpec, Record, column, parse_table


# Order matters: a header cell goes to the first unassigned field it matches,
# so the more specific (language-tagged) fields come first.
ITEM_COLUMNS: Tuple[ColumnSpec, ...] = (
    column(
        "item_number",
        r"^(?:no\.?|#|番号|項番|項目番号|項目no\.?|stt|item\s*(?:no\.?|number|#))$",
        identifier=True,
    ),
    column(
        "name_japanese",
        r"項目名.*(?:日本語|jp|ja)",
        r"name.*[(（]\s*(?:jp|ja|japanese|日本語)\s*[)）]",
        r"^(?:項目名|論理名|表示名)$",
    ),
    column(
        "name_english",
        r"項目名.*(?:英語|en)",
        r"^(?:item\s*)?name(?:\s*[(（]?\s*(?:en|english|英語)\s*[)）]?)?$",
        r"英語名|物理名",
    ),
    column(
        "item_type",
        r"項目(?:タイプ|種別|区分)|^種別$|^タイプ$|コントロール|部品",
        r"^(?:item\s*|control\s*|component\s*)?type$",
    ),
    column("is_required", r"必須|required|mandatory"),
    column("data_type", r"データ(?:型|タイプ)|^型$|data\s*type"),
    column("max_length", r"桁数|最大長|文字数|最大桁|length|^桁$"),
    column("format", r"フォーマット|書式|形式|format"),
    column("initial_value", r"初期値|初期表示|デフォルト|default|initial"),
    column(
        "description_japanese",
        r"説明.*(?:日本語|jp|ja)",
        r"description.*(?:jp|ja|japanese|日本語)",
        r"^(?:説明|内容|仕様)$",
    ),
    column(
        "description_english",
        r"説明.*(?:英語|en)",
        r"description",
    ),
)

ACTION_COLUMNS: Tuple[ColumnSpec, ...] = (
    column(
        "action_id",
        r"^(?:no\.?|#|id|番号|項番|action\s*(?:id|no\.?|number)|アクション\s*(?:id|no\.?|番号))$",
        identifier=True,
    ),
    column(
        "trigger_japanese",
        r"(?:トリガー|契機|イベント|操作).*(?:日本語|jp|ja)",
        r"trigger.*(?:jp|ja|japanese|日本語)",
        r"^(?:トリガー|契機|イベント|操作)$",
    ),
    column(
        "trigger_english",
        r"(?:トリガー|契機|イベント|操作).*(?:英語|en)",
        r"trigger",
    ),
    column("screen_transition", r"画面遷移|遷移先|遷移|transition|navigat"),
    column(
        "action_detail_japanese",
        r"(?:アクション|処理)(?:詳細|内容).*(?:日本語|jp|ja)",
        r"detail.*(?:jp|ja|japanese|日本語)",
        r"^(?:アクション詳細|アクション内容|処理内容|処理詳細|詳細|アクション)$",
    ),
    column(
        "action_detail_english",
        r"(?:アクション|処理)(?:詳細|内容).*(?:英語|en)",
        r"details?",
        r"^action$",
    ),
    column("remarks", r"備考|remarks?|notes?|comments?"),
)


_REQUIRED_MARKS = {"○", "◯", "〇", "●", "必須", "required", "yes", "y", "✓", "✔", "true", "must"}
_CONDITIONAL_MARKS = ("△", "条件", "conditional")


def classify_required(cell: str) -> RequiredFlag:
    v = cell.strip().casefold()
    if v in _REQUIRED_MARKS:
        return RequiredFlag.REQUIRED
    if any(m in v for m in _CONDITIONAL_MARKS):
        return RequiredFlag.CONDITIONAL
    return RequiredFlag.NONE


def item_row_from_record(rec: Record) -> ItemRow:
    return ItemRow(
        item_number=rec["item_number"],
        name_japanese=rec["name_japanese"],
        name_english=rec["name_english"],
        item_type=rec["item_type"],
        is_required=classify_required(rec["is_required"]),
        required_text=rec["is_required"],
        data_type=rec["data_type"],
        max_length=rec["max_length"],
        format=rec["format"],
        initial_value=rec["initial_value"],
        description_japanese=rec["description_japanese"],
        description_english=rec["description_english"],
    )


def action_row_from_record(rec: Record) -> ActionRow:
    return ActionRow(
        action_id=rec["action_id"],
        trigger_japanese=rec["trigger_japanese"],
        trigger_english=rec["trigger_english"],
        screen_transition=rec["screen_transition"],
        action_detail_japanese=rec["action_detail_japanese"],
        action_detail_english=rec["action_detail_english"],
        remarks=rec["remarks"],
    )


def parse_item_rows(section: Section) -> List[ItemRow]:
    return [item_row_from_record(r) for r in parse_table(section, ITEM_COLUMNS)]


def parse_action_rows(section: Section) -> List[ActionRow]:
    return [action_row_from_record(r) for r in parse_table(section, ACTION_COLUMNS)]
