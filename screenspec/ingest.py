# screenspec/ingest.py
from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from .contracts import RawDocument


SCREEN_CODE_RE = re.compile(r"(?<![A-Za-z0-9])[A-Z]{3}_\d{2}(?!\d)")
ERROR_CODE_RE = re.compile(r"(?<![A-Za-z0-9])[A-Z]{3}-\d{3}(?!\d)")

_TITLE_MARKS_RE = re.compile(r"^\s*#+\s*")


def read_raw_document(source_path: Path) -> RawDocument:
    """
    Read a UTF-8 screen description into a RawDocument.

    Fails closed if the file is missing or contains no non-blank line.
    A leading BOM is dropped; every other character is kept as-is.
    """
    if not source_path.exists():
        raise FileNotFoundError(f"Screen description not found: {source_path}")

    raw = source_path.read_text(encoding="utf-8-sig")
    doc = RawDocument.from_text(raw)
    if not any(line.strip() for line in doc.lines):
        raise ValueError(f"Screen description is empty: {source_path}")
    return doc


def detect_title(doc: RawDocument) -> Optional[str]:
    """First Markdown heading of the document, without its '#' marks."""
    for line in doc.lines:
        if line.lstrip().startswith("#"):
            title = _TITLE_MARKS_RE.sub("", line).strip()
            if title:
                return title
    return None


def detect_screen_code(doc: RawDocument) -> Optional[str]:
    """
    Screen code of the document itself.

    The title is preferred; otherwise the first screen-code token in the text.
    """
    title = detect_title(doc)
    if title:
        m = SCREEN_CODE_RE.search(title)
        if m:
            return m.group(0)
    m = SCREEN_CODE_RE.search(doc.text)
    return m.group(0) if m else None


def detect_screen_name(doc: RawDocument) -> Optional[str]:
    """Title text with the screen code and its punctuation removed."""
    title = detect_title(doc)
    if not title:
        return None
    code = detect_screen_code(doc)
    if code and code in title:
        rest = title.replace(code, "", 1).strip(" \t:：-_/|")
        return rest or title
    return title
