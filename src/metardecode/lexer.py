"""Tokenizers for raw METAR/SPECI report text.

Two strategies share the ``Token`` type:

- ``tokenize`` (generic): runs of letters and runs of digits only. All
  disambiguation happens in the grammar by looking at token length/text.
  This is what ``metardecode.grammar`` consumes.
- ``tokenize_keywords`` (typed): every FM-15 keyword and fixed-width shape
  is its own class. At each offset all classes are tried; the longest
  match wins and ties go to the class declared first, so ``METAR`` is never
  read as a station and ``VRB`` never swallows the speed digits.

Whitespace is skipped by both and never emitted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from metardecode.errors import LexicalError

LETTERS = "LETTERS"
DIGITS = "DIGITS"

WHITESPACE_RE = re.compile(r"\s+", re.ASCII)

GENERIC_CLASSES: tuple[tuple[str, re.Pattern[str]], ...] = (
    (LETTERS, re.compile(r"[A-Za-z]+")),
    (DIGITS, re.compile(r"[0-9]+")),
)

# Declaration order is the tie-break order for equal-length matches.
KEYWORD_CLASSES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("TYPE", re.compile(r"METAR|SPECI")),
    ("AUTO", re.compile(r"AUTO")),
    ("MPS", re.compile(r"MPS")),
    ("VRB", re.compile(r"VRB")),
    ("KT", re.compile(r"KT")),
    ("GUST", re.compile(r"G")),
    ("VARIATION", re.compile(r"V")),
    ("ICAO", re.compile(r"[a-zA-Z]{4}")),
    ("TIMESTAMP", re.compile(r"[0-9]{6}Z")),
    ("INT3", re.compile(r"[0-9]{3}")),
    ("INT2", re.compile(r"[0-9]{2}")),
)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    offset: int


def _scan(text: str, classes: tuple[tuple[str, re.Pattern[str]], ...]) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    total = len(text)
    while pos < total:
        ws = WHITESPACE_RE.match(text, pos)
        if ws:
            pos = ws.end()
            continue
        best_kind = None
        best_end = pos
        for kind, pattern in classes:
            m = pattern.match(text, pos)
            if m and m.end() > best_end:
                best_kind = kind
                best_end = m.end()
        if best_kind is None:
            raise LexicalError(text, pos)
        tokens.append(Token(best_kind, text[pos:best_end], pos))
        pos = best_end
    return tokens


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into letter and digit runs, skipping whitespace."""
    return _scan(text, GENERIC_CLASSES)


def tokenize_keywords(text: str) -> list[Token]:
    """Split ``text`` into typed FM-15 keyword and shape tokens."""
    return _scan(text, KEYWORD_CLASSES)
