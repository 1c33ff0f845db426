# screenspec/pipeline.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from spec_schemas.schemas_output import OutputDocument

from .action_index import build_index
from .assemble import assemble, group_summary
from .columns import parse_action_rows, parse_item_rows
from .config import SpecConfig, resolve_metadata
from .contracts import ActionRow, EnrichedItem, ItemRow, RawDocument, Violation
from .enrich import enrich
from .errors import ValidationFailed
from .locate import LocatedSections, locate
from .spec_logging import log_stage
from .validate_output import validate


logger = logging.getLogger("screenspec.pipeline")


@dataclass(frozen=True)
class PipelineResult:
    """Every artifact of one run. document is only usable when ok is True."""
    raw: RawDocument
    sections: LocatedSections
    item_rows: List[ItemRow]
    action_rows: List[ActionRow]
    enriched: List[EnrichedItem]
    document: OutputDocument
    violations: List[Violation]

    @property
    def ok(self) -> bool:
        return not self.violations


def transform(raw: RawDocument, cfg: SpecConfig) -> PipelineResult:
    """
    Run all stages on one document and collect validation violations.

    Structural errors (SectionNotFound, MalformedTable, DuplicateActionId,
    UnresolvedActionReference) propagate before any document exists.
    """
    with log_stage("locate"):
        sections = locate(raw)

    with log_stage("parse"):
        item_rows = parse_item_rows(sections.item_table)
        action_rows = parse_action_rows(sections.action_table)
    logger.info("Parsed %d items, %d actions", len(item_rows), len(action_rows))

    with log_stage("index"):
        index = build_index(action_rows)

    with log_stage("enrich"):
        enriched = enrich(item_rows, index)
    logger.info("Resolved action references for %d items", sum(1 for e in enriched if e.has_action))

    with log_stage("assemble"):
        metadata = resolve_metadata(raw, sections.overview, cfg)
        document = assemble(sections.overview, enriched, action_rows, metadata)
    logger.info("Groups: %s", group_summary(document))

    with log_stage("validate"):
        violations = validate(raw, document)
    for v in violations:
        logger.warning("Violation %s", v)

    return PipelineResult(
        raw=raw,
        sections=sections,
        item_rows=item_rows,
        action_rows=action_rows,
        enriched=enriched,
        document=document,
        violations=violations,
    )


def generate_spec(raw: RawDocument, cfg: SpecConfig) -> OutputDocument:
    """Validated OutputDocument, or ValidationFailed carrying every violation."""
    result = transform(raw, cfg)
    if not result.ok:
        raise ValidationFailed(result.violations)
    return result.document
