# screenspec/sentences.py
from __future__ import annotations

from typing import List, Tuple

Span = Tuple[int, int]

_TERMINATORS = "。！？!?"
_CLOSERS = "」』）)]】\"'”’"
_INLINE_WS = " \t　"
# a '.' after these does not end a sentence ("action No. 3")
_ABBREVIATIONS = ("No", "no", "NO", "e.g", "i.e", "etc", "vs", "Ex", "ex", "approx")


def _ends_at_period(text: str, i: int) -> bool:
    n = len(text)
    if i + 1 < n and not text[i + 1].isspace():
        return False
    head = text[:i]
    for abbr in _ABBREVIATIONS:
        if head.endswith(abbr):
            before = head[: -len(abbr)]
            if not before or not before[-1].isalnum():
                return False
    return True


def sentence_spans(text: str) -> List[Span]:
    """
    Deterministic sentence segmentation as (start, end) offsets into text.

    A sentence ends at 。！？!? , at a '.' followed by whitespace or end of
    text, or at a line break. Closing brackets/quotes right after the
    terminator belong to the sentence. Spans never include the leading or
    trailing whitespace, nor the line break.
    """
    spans: List[Span] = []
    n = len(text)
    i = 0
    start = -1

    def close(end: int) -> None:
        nonlocal start
        while end > start and text[end - 1].isspace():
            end -= 1
        if end > start:
            spans.append((start, end))
        start = -1

    while i < n:
        ch = text[i]
        if ch == "\n":
            if start >= 0:
                close(i)
            i += 1
            continue
        if start < 0:
            if ch.isspace():
                i += 1
                continue
            start = i
        if ch in _TERMINATORS or (ch == "." and _ends_at_period(text, i)):
            j = i + 1
            while j < n and text[j] in _CLOSERS:
                j += 1
            close(j)
            i = j
            continue
        i += 1

    if start >= 0:
        close(n)
    return spans


def split_sentences(text: str) -> List[str]:
    return [text[s:e] for s, e in sentence_spans(text)]


def remove_spans(text: str, spans: List[Span]) -> str:
    """
    Remove the given sentence spans and nothing else.

    The whitespace between a removed sentence and its neighbour on the same
    line goes with it; a line left empty is dropped together with one line
    break. Every other character is kept as-is.
    """
    out = text
    for s, e in sorted(spans, reverse=True):
        line_start = out.rfind("\n", 0, s) + 1
        line_end = out.find("\n", e)
        if line_end < 0:
            line_end = len(out)
        before = out[line_start:s]
        after = out[e:line_end]

        if not before.strip() and not after.strip():
            if line_end < len(out):
                out = out[:line_start] + out[line_end + 1:]
            elif line_start > 0:
                out = out[:line_start - 1]
            else:
                out = ""
        elif not after.strip():
            cut = s
            while cut > line_start and out[cut - 1] in _INLINE_WS:
                cut -= 1
            out = out[:cut] + out[line_end:]
        else:
            cut = e
            while cut < line_end and out[cut] in _INLINE_WS:
                cut += 1
            out = out[:s] + out[cut:]
    return out
