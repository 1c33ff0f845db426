# screenspec/io_utils.py
from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from .contracts import ActionRow, EnrichedItem, ItemRow


# Callers pass either Path or str.
PathLike = Union[str, Path]


def read_json(path: PathLike) -> Any:
    """
    Deterministic JSON reader (fail-closed).
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"JSON file not found: {p}")
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {p}: {e}") from e


def write_json(path: PathLike, obj: Any) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(obj, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def write_text(path: PathLike, text: str) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def item_rows_to_dicts(rows: Iterable[ItemRow]) -> List[Dict[str, Any]]:
    out = []
    for r in rows:
        d = asdict(r)
        d["is_required"] = r.is_required.value
        out.append(d)
    return out


def action_rows_to_dicts(rows: Iterable[ActionRow]) -> List[Dict[str, Any]]:
    return [asdict(r) for r in rows]


def enriched_to_dicts(items: Iterable[EnrichedItem]) -> List[Dict[str, Any]]:
    return [
        {
            "item_number": it.item_number,
            "referenced_action_ids": list(it.referenced_action_ids),
            "resolved_action_text": it.resolved_action_text,
            "description_japanese_cleaned": it.description_japanese_cleaned,
            "description_english_cleaned": it.description_english_cleaned,
            "stripped_sentences": list(it.stripped_sentences),
        }
        for it in items
    ]
