# spec_schemas/schemas_output.py
from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Literal

from pydantic import BaseModel, Field, ConfigDict


class RequiredFlag(str, Enum):
    REQUIRED = "Required"
    CONDITIONAL = "Conditional"
    NONE = "None"


class DocumentMetadata(BaseModel):
    """
    Injected by the caller (dates, version) or derived from the source title.
    Never read from a clock inside the pipeline.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    screen_code: str = Field(..., min_length=1)
    screen_name: str = Field(..., min_length=1)
    short_description: str = ""
    created: str = Field(..., min_length=1)
    updated: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)


class OutputItem(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    item_number: str = Field(..., min_length=1)
    name_japanese: str = ""
    name_english: str = ""
    item_type: str = ""
    is_required: RequiredFlag = RequiredFlag.NONE
    required_text: str = ""
    data_type: str = ""
    max_length: str = ""
    format: str = ""
    initial_value: str = ""

    # back-reference sentences already removed
    description_japanese: str = ""
    description_english: str = ""

    # exact trigger / separator / detail text, or "-"
    action_text: str = "-"
    referenced_action_ids: List[str] = Field(default_factory=list)


class ItemGroup(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: Literal["Main Components", "Popups"]
    items: List[OutputItem] = Field(..., min_length=1)


class InteractionStep(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    action_id: str = Field(..., min_length=1)
    trigger_japanese: str = ""
    trigger_english: str = ""
    screen_transition: str = ""
    action_detail_japanese: str = ""
    action_detail_english: str = ""
    remarks: str = ""


class ErrorCodeRule(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str = Field(..., pattern=r"^[A-Z]{3}-\d{3}$", description="e.g. HCK-001")
    # text next to the first occurrence of the code, copied as-is
    fragment: str = ""


class FieldRule(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str = Field(..., min_length=1)
    rule: str = Field(..., min_length=1)


class ValidationRules(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    error_codes: List[ErrorCodeRule] = Field(default_factory=list)
    field_rules: List[FieldRule] = Field(default_factory=list)


class OutputDocument(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    metadata: DocumentMetadata
    overview: str = ""
    groups: List[ItemGroup] = Field(default_factory=list)
    interaction_flow: List[InteractionStep] = Field(default_factory=list)
    validation_rules: ValidationRules = Field(default_factory=ValidationRules)

    def items(self) -> Iterator[OutputItem]:
        for g in self.groups:
            yield from g.items

    def item_numbers(self) -> List[str]:
        return [it.item_number for it in self.items()]

    def source_texts(self) -> List[str]:
        """
        Every text field that must be copied from the source document.

        Template labels, the rule column and metadata are not included.
        """
        out: List[str] = [self.overview]
        for it in self.items():
            out.extend([
                it.item_number,
                it.name_japanese,
                it.name_english,
                it.item_type,
                it.required_text,
                it.data_type,
                it.max_length,
                it.format,
                it.initial_value,
                it.description_japanese,
                it.description_english,
            ])
            if it.action_text != "-":
                out.append(it.action_text)
        for step in self.interaction_flow:
            out.extend([
                step.action_id,
                step.trigger_japanese,
                step.trigger_english,
                step.screen_transition,
                step.action_detail_japanese,
                step.action_detail_english,
                step.remarks,
            ])
        for ec in self.validation_rules.error_codes:
            out.append(ec.fragment)
        for fr in self.validation_rules.field_rules:
            out.append(fr.field)
        return [t for t in out if t]

    def content_texts(self) -> List[str]:
        """All text of the document, metadata and rule column included."""
        md = self.metadata
        out = [md.screen_code, md.screen_name, md.short_description]
        out.extend(self.source_texts())
        out.extend(ec.code for ec in self.validation_rules.error_codes)
        out.extend(fr.rule for fr in self.validation_rules.field_rules)
        return [t for t in out if t]
