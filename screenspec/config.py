# screenspec/config.py
from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from spec_schemas.schemas_output import DocumentMetadata

from .contracts import RawDocument, Section
from .ingest import detect_screen_code, detect_screen_name
from .io_utils import read_json
from .sentences import split_sentences


@dataclass(frozen=True)
class SpecConfig:
    """
    Values the output metadata block needs but the pipeline must not invent.

    created/updated/version are supplied by the caller (no clock reads).
    screen_code/screen_name/short_description fall back to the source
    document when left as None.
    """
    created: str
    updated: str
    version: str = "1.0"
    screen_code: Optional[str] = None
    screen_name: Optional[str] = None
    short_description: Optional[str] = None


def load_config(path: Optional[Path], **overrides: Any) -> SpecConfig:
    """
    Build a SpecConfig from an optional JSON file plus keyword overrides.

    Overrides that are None keep the file value. Fails closed on unknown keys
    or when created/updated end up missing.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        raw = read_json(path)
        if not isinstance(raw, dict):
            raise ValueError(f"Config must be a JSON object: {path}")
        data.update(raw)
    data.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(SpecConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")
    for key in ("created", "updated"):
        if not data.get(key):
            raise ValueError(f"Config value {key!r} is required (e.g. --{key} 2024-01-31)")
    return SpecConfig(**data)


def resolve_metadata(doc: RawDocument, overview: Section, cfg: SpecConfig) -> DocumentMetadata:
    screen_code = cfg.screen_code or detect_screen_code(doc)
    if not screen_code:
        raise ValueError("No screen code in config and none found in the document.")

    screen_name = cfg.screen_name or detect_screen_name(doc) or screen_code

    short_description = cfg.short_description
    if short_description is None:
        sentences = split_sentences(overview.text)
        short_description = sentences[0] if sentences else ""

    return DocumentMetadata(
        screen_code=screen_code,
        screen_name=screen_name,
        short_description=short_description,
        created=cfg.created,
        updated=cfg.updated,
        version=cfg.version,
    )
