# screenspec/render_spec_md.py
from __future__ import annotations

from typing import List

from spec_schemas.schemas_output import InteractionStep, ItemGroup, OutputDocument, ValidationRules


ITEM_TABLE_HEADER = ("STT", "Tên thành phần", "Loại", "Bắt buộc", "Mặc định", "Mô tả", "Action")
FIELD_RULE_HEADER = ("Field", "Rule")

TOC = (
    ("1. Overview", "1-overview"),
    ("2. Screen Detail", "2-screen-detail"),
    ("3. Interaction Flow", "3-interaction-flow"),
    ("4. Validation Procedures Detail", "4-validation-procedures-detail"),
)


def _inline(s: str) -> str:
    return s.replace("\n", "<br>")


def _cell(s: str) -> str:
    return _inline(s.replace("|", "\\|"))


def _both(first: str, second: str) -> str:
    if first and second and first != second:
        return f"{first}\n{second}"
    return first or second


def _table(header: tuple, rows: List[List[str]]) -> List[str]:
    out = ["| " + " | ".join(header) + " |", "|" + "---|" * len(header)]
    for r in rows:
        out.append("| " + " | ".join(_cell(c) for c in r) + " |")
    return out


def _render_metadata(doc: OutputDocument) -> List[str]:
    md = doc.metadata
    rows = [
        ["Screen Code", md.screen_code],
        ["Screen Name", md.screen_name],
        ["Description", md.short_description or "-"],
        ["Created", md.created],
        ["Updated", md.updated],
        ["Version", md.version],
    ]
    return _table(("Item", "Value"), rows)


def _render_group(number: int, group: ItemGroup) -> List[str]:
    lines = [f"### 2.{number} {group.name}", ""]
    rows = [
        [
            it.item_number,
            _both(it.name_japanese, it.name_english),
            it.item_type,
            it.required_text,
            it.initial_value,
            _both(it.description_japanese, it.description_english),
            it.action_text,
        ]
        for it in group.items
    ]
    lines.extend(_table(ITEM_TABLE_HEADER, rows))
    lines.append("")
    return lines


def _render_step(n: int, step: InteractionStep) -> List[str]:
    trigger = _both(step.trigger_japanese, step.trigger_english)
    head = f"{n}. **{step.action_id}**: {_inline(trigger) or '-'}"
    if step.screen_transition:
        head += f" → {_inline(step.screen_transition)}"
    lines = [head]
    detail = _both(step.action_detail_japanese, step.action_detail_english)
    if detail:
        lines.append(f"   - {_inline(detail)}")
    if step.remarks:
        lines.append(f"   - Remarks: {_inline(step.remarks)}")
    return lines


def _render_rules(rules: ValidationRules) -> List[str]:
    lines = ["### 4.1 Error Codes", ""]
    if rules.error_codes:
        for ec in rules.error_codes:
            suffix = f": {_inline(ec.fragment)}" if ec.fragment else ""
            lines.append(f"- `{ec.code}`{suffix}")
    else:
        lines.append("_No error codes._")
    lines.extend(["", "### 4.2 Field Rules", ""])
    if rules.field_rules:
        lines.extend(_table(FIELD_RULE_HEADER, [[fr.field, fr.rule] for fr in rules.field_rules]))
    else:
        lines.append("_No field rules._")
    lines.append("")
    return lines


def render_spec_markdown(doc: OutputDocument) -> str:
    md: List[str] = []
    md.append(f"# {doc.metadata.screen_code} {doc.metadata.screen_name}")
    md.append("")
    md.extend(_render_metadata(doc))
    md.append("")

    md.append("## Table of Contents")
    md.append("")
    for title, anchor in TOC:
        md.append(f"- [{title}](#{anchor})")
    md.append("")

    md.append(f"## {TOC[0][0]}")
    md.append("")
    md.append(doc.overview or "_No overview._")
    md.append("")

    md.append(f"## {TOC[1][0]}")
    md.append("")
    for n, group in enumerate(doc.groups, start=1):
        md.extend(_render_group(n, group))

    md.append(f"## {TOC[2][0]}")
    md.append("")
    if doc.interaction_flow:
        for n, step in enumerate(doc.interaction_flow, start=1):
            md.extend(_render_step(n, step))
    else:
        md.append("_No actions._")
    md.append("")

    md.append(f"## {TOC[3][0]}")
    md.append("")
    md.extend(_render_rules(doc.validation_rules))

    return "\n".join(md)
