# screenspec/contracts.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Sequence, Tuple

from spec_schemas.schemas_output import RequiredFlag


# ---- Canonical identifiers ----
# Item numbers and action ids are taken verbatim from the source tables.
# They are never trimmed, case-folded or renumbered.
ItemNumber = str
ActionId = str

# Resolved-action sentinel for items without a back-reference.
NO_ACTION = "-"

# Fixed line between the trigger block and the action-detail block.
ACTION_SEPARATOR = "====="


class SectionKind(str, Enum):
    OVERVIEW = "Overview"
    ITEM_TABLE = "ItemTable"
    ACTION_TABLE = "ActionTable"


@dataclass(frozen=True)
class RawDocument:
    """The input document as an ordered tuple of lines. Never mutated."""
    lines: Tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> "RawDocument":
        return cls(lines=tuple(text.splitlines()))

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def __len__(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class Section:
    """
    A contiguous [line_start, line_end) range of a RawDocument.

    line_start is the header line itself; header is None only for the
    synthetic empty Overview produced when the document has none.
    """
    kind: SectionKind
    line_start: int
    line_end: int
    lines: Sequence[str]
    header: Optional[str] = None

    @property
    def body(self) -> Sequence[str]:
        # everything after the header line
        return self.lines[1:] if self.header is not None else self.lines

    @property
    def text(self) -> str:
        return "\n".join(self.body)


@dataclass(frozen=True)
class ItemRow:
    item_number: ItemNumber
    name_japanese: str = ""
    name_english: str = ""
    item_type: str = ""
    is_required: RequiredFlag = RequiredFlag.NONE
    required_text: str = ""  # raw cell, kept for rendering
    data_type: str = ""
    max_length: str = ""
    format: str = ""
    initial_value: str = ""
    description_japanese: str = ""
    description_english: str = ""


@dataclass(frozen=True)
class ActionRow:
    action_id: ActionId
    trigger_japanese: str = ""
    trigger_english: str = ""
    screen_transition: str = ""
    action_detail_japanese: str = ""
    action_detail_english: str = ""
    remarks: str = ""


class ActionIndex(Mapping[ActionId, ActionRow]):
    """Read-only action_id -> ActionRow lookup; keeps table order."""

    __slots__ = ("_rows",)

    def __init__(self, rows: Mapping[ActionId, ActionRow]) -> None:
        self._rows = MappingProxyType(dict(rows))

    def __getitem__(self, key: ActionId) -> ActionRow:
        return self._rows[key]

    def __iter__(self) -> Iterator[ActionId]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"ActionIndex({list(self._rows)!r})"


@dataclass(frozen=True)
class EnrichedItem:
    """
    An ItemRow plus the result of resolving its action back-references.

    Invariant: when referenced_action_ids is empty, resolved_action_text is
    NO_ACTION and both cleaned descriptions equal the originals exactly.
    """
    row: ItemRow
    resolved_action_text: str
    description_japanese_cleaned: str
    description_english_cleaned: str
    referenced_action_ids: Tuple[ActionId, ...] = ()
    stripped_sentences: Tuple[str, ...] = field(default=())

    @property
    def item_number(self) -> ItemNumber:
        return self.row.item_number

    @property
    def has_action(self) -> bool:
        return bool(self.referenced_action_ids)


@dataclass(frozen=True)
class Violation:
    """One failed output check; token names the offending code/id/sentence."""
    check: str
    token: str
    message: str

    def __str__(self) -> str:
        return f"[{self.check}] {self.token}: {self.message}"
