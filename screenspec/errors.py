# screenspec/errors.py
from __future__ import annotations

from typing import List, Sequence

from .contracts import Violation


class ScreenSpecError(ValueError):
    """Fail-closed error: the current document cannot be completed."""


class SectionNotFound(ScreenSpecError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Required section not found: {kind}")


class MalformedTable(ScreenSpecError):
    def __init__(self, kind: str, reason: str) -> None:
        self.kind = kind
        self.reason = reason
        super().__init__(f"Malformed {kind} table: {reason}")


class DuplicateActionId(ScreenSpecError):
    def __init__(self, action_id: str) -> None:
        self.action_id = action_id
        super().__init__(f"Duplicate action id in action table: {action_id!r}")


class UnresolvedActionReference(ScreenSpecError):
    def __init__(self, action_id: str, item_number: str = "") -> None:
        self.action_id = action_id
        self.item_number = item_number
        where = f" (item {item_number})" if item_number else ""
        super().__init__(f"Unresolved action reference{where}: action id {action_id!r} not in action table")


class ValidationFailed(ScreenSpecError):
    """Raised by the pipeline with every violation found in one pass."""

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations: List[Violation] = list(violations)
        lines = "\n".join(f" - {v}" for v in self.violations)
        super().__init__(f"Output validation failed with {len(self.violations)} violation(s):\n{lines}")
