# screenspec/table.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from .contracts import Section
from .errors import MalformedTable


logger = logging.getLogger("screenspec.table")

_ROW_START_RE = re.compile(r"^\s*\|")
_UNESCAPED_PIPE_RE = re.compile(r"(?<!\\)\|")
_DELIM_CELL_RE = re.compile(r"^\s*:?-{3,}:?\s*$")
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")

Record = Dict[str, str]


@dataclass(frozen=True)
class ColumnSpec:
    """
    A logical table field and the header texts that identify it.

    Recognizers are tried in order against the normalized header cell.
    identifier columns are mandatory and never forward-filled.
    """
    field: str
    recognizers: Tuple[Pattern[str], ...]
    identifier: bool = False
    fill: bool = True

    def matches(self, header: str) -> bool:
        return any(p.search(header) for p in self.recognizers)


def column(field: str, *patterns: str, identifier: bool = False) -> ColumnSpec:
    return ColumnSpec(
        field=field,
        recognizers=tuple(re.compile(p, re.IGNORECASE) for p in patterns),
        identifier=identifier,
        fill=not identifier,
    )


@dataclass(frozen=True)
class TableGrid:
    """Rows x named columns, as read from the source (no normalization yet)."""
    fields: Tuple[str, ...]
    rows: Tuple[Record, ...]
    header_cells: Tuple[str, ...]


# ----------------------------
# Cell splitting
# ----------------------------

def _ends_row(buf: str) -> bool:
    s = buf.rstrip()
    return s.endswith("|") and not s.endswith("\\|")


def split_cells(row_text: str) -> List[str]:
    """
    Split one logical table row into cell values.

    Splits on unescaped '|', unescapes '\\|', turns <br> into a line break
    and strips outer padding. Inner line breaks are preserved.
    """
    s = row_text.strip()
    if s.startswith("|"):
        s = s[1:]
    if _ends_row(s):
        s = s.rstrip()[:-1]
    cells = _UNESCAPED_PIPE_RE.split(s)
    return [_BR_RE.sub("\n", c.replace("\\|", "|")).strip() for c in cells]


def _is_delimiter_row(cells: Sequence[str]) -> bool:
    return bool(cells) and all(_DELIM_CELL_RE.match(c) for c in cells)


def _normalize_header(cell: str) -> str:
    return _WS_RE.sub(" ", cell).strip()


def _logical_rows(lines: Sequence[str], ncols: int, kind: str) -> List[str]:
    """
    Join physical lines into logical rows.

    A row continues onto the next line while its last cell is still open
    (no closing '|') or while it has fewer cells than the header.
    The table ends at the first line after a complete row that is not a row.
    """
    rows: List[str] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if not _ROW_START_RE.match(line):
            break
        buf = line
        i += 1
        while not (_ends_row(buf) and len(split_cells(buf)) >= ncols):
            if i >= len(lines):
                break
            nxt = lines[i]
            if _ends_row(buf) and (_ROW_START_RE.match(nxt) or "|" not in nxt):
                # short row: next row starts here, or the table ended
                break
            buf = buf + "\n" + nxt
            i += 1
        if not _ends_row(buf):
            raise MalformedTable(kind, f"unterminated row: {buf.splitlines()[0]!r}")
        rows.append(buf)
    return rows


def read_grid(section: Section, columns: Sequence[ColumnSpec]) -> TableGrid:
    """
    Read the first Markdown table of a section into a TableGrid.

    Columns are identified from the header row; unmatched columns are ignored.
    """
    kind = section.kind.value
    body = list(section.body)
    start = next((i for i, line in enumerate(body) if _ROW_START_RE.match(line)), None)
    if start is None:
        raise MalformedTable(kind, "no table found in section")

    header_cells = [_normalize_header(c) for c in split_cells(body[start])]
    assigned: Dict[int, str] = {}
    taken = set()
    for idx, header in enumerate(header_cells):
        for spec in columns:
            if spec.field in taken:
                continue
            if spec.matches(header):
                assigned[idx] = spec.field
                taken.add(spec.field)
                break

    for spec in columns:
        if spec.identifier and spec.field not in taken:
            raise MalformedTable(kind, f"no column for {spec.field!r} in header {header_cells!r}")

    ignored = [h for i, h in enumerate(header_cells) if i not in assigned]
    if ignored:
        logger.debug("%s: ignoring unrecognized columns %s", kind, ignored)

    ncols = len(header_cells)
    logical = _logical_rows(body[start + 1:], ncols, kind)

    fields = tuple(spec.field for spec in columns)
    rows: List[Record] = []
    for row_text in logical:
        cells = split_cells(row_text)
        if _is_delimiter_row(cells):
            continue
        if len(cells) > ncols:
            extra = [c for c in cells[ncols:] if c]
            if extra:
                raise MalformedTable(kind, f"row has more cells than the header: {cells!r}")
            cells = cells[:ncols]
        cells = cells + [""] * (ncols - len(cells))

        rec: Record = {f: "" for f in fields}
        for idx, fname in assigned.items():
            rec[fname] = cells[idx]
        rows.append(rec)

    return TableGrid(fields=fields, rows=tuple(rows), header_cells=tuple(header_cells))


# ----------------------------
# Normalization passes
# ----------------------------

def drop_blank_rows(rows: Sequence[Record]) -> List[Record]:
    return [dict(r) for r in rows if any(v.strip() for v in r.values())]


def forward_fill(rows: Sequence[Record], columns: Sequence[ColumnSpec]) -> List[Record]:
    """
    Expand spreadsheet merges: an empty cell whose upper neighbour is non-empty
    takes the upper value. Applied per column, top to bottom, so a merge spanning
    several rows fills all of them. Input rows are not modified.
    """
    fill_fields = [c.field for c in columns if c.fill]
    out: List[Record] = []
    prev: Optional[Record] = None
    for r in rows:
        new = dict(r)
        if prev is not None:
            for f in fill_fields:
                if new.get(f, "") == "" and prev.get(f, ""):
                    new[f] = prev[f]
        out.append(new)
        prev = new
    return out


def parse_table(section: Section, columns: Sequence[ColumnSpec]) -> List[Record]:
    """
    Parse a section's table into ordered records keyed by field name.

    read_grid -> drop_blank_rows -> forward_fill; every record must carry its
    identifier (fail-closed).
    """
    grid = read_grid(section, columns)
    rows = forward_fill(drop_blank_rows(grid.rows), columns)

    kind = section.kind.value
    for spec in columns:
        if not spec.identifier:
            continue
        for n, r in enumerate(rows, start=1):
            if not r[spec.field]:
                raise MalformedTable(kind, f"data row {n} has an empty {spec.field!r}")

    logger.debug("%s: parsed %d rows", kind, len(rows))
    return rows
