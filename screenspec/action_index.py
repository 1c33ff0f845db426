# screenspec/action_index.py
from __future__ import annotations

from typing import Dict, Iterable

from .contracts import ActionId, ActionIndex, ActionRow
from .errors import DuplicateActionId


def build_index(action_rows: Iterable[ActionRow]) -> ActionIndex:
    """
    Index action rows by action_id (exact string equality, no normalization).

    Fails closed on a duplicate id instead of letting the later row win.
    """
    idx: Dict[ActionId, ActionRow] = {}
    for row in action_rows:
        if row.action_id in idx:
            raise DuplicateActionId(row.action_id)
        idx[row.action_id] = row
    return ActionIndex(idx)
