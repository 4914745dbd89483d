"""Helpers for reading report corpora: one report per line."""

from __future__ import annotations

import gzip
from collections.abc import Iterator
from pathlib import Path

END_OF_REPORT = "="


def iter_report_lines(text: str) -> Iterator[str]:
    """Yield report lines, skipping blanks and ``#`` comments.

    A trailing ``=`` end-of-report marker is stripped.
    """
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.endswith(END_OF_REPORT):
            line = line[: -len(END_OF_REPORT)].rstrip()
        if line:
            yield line


def read_corpus(path: Path) -> str:
    if path.suffix.lower() == ".gz":
        with gzip.open(path, "rt", encoding="ascii", errors="replace") as f:
            return f.read()
    return path.read_text(encoding="ascii", errors="replace")


def load_reports(path: Path) -> list[str]:
    """Load report lines from a plain or gzip-compressed text file."""
    return list(iter_report_lines(read_corpus(path)))
