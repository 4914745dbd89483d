"""Aggregate grammar/scan ratios and failure counts across eval logs."""

from __future__ import annotations

import csv
from collections import Counter
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import orjson


def iter_log_entries(path: Path) -> Iterator[dict[str, Any]]:
    """Yield flat entries; JSONL payloads nest the summary under ``evaluation``."""
    if path.suffix.lower() == ".csv":
        with path.open(newline="") as f:
            yield from csv.DictReader(f)
        return
    with path.open("rb") as f:
        for line in f:
            if not line.strip():
                continue
            entry = orjson.loads(line)
            yield {**entry["evaluation"], "tag": entry.get("tag") or ""}


def _counts(value: Any) -> dict[str, int]:
    # CSV rows carry the maps as JSON strings
    return orjson.loads(value) if isinstance(value, str) else dict(value)


def summarize_log(path: Path) -> dict[str, object]:
    entries = list(iter_log_entries(path))
    error_counts: Counter[str] = Counter()
    rule_counts: Counter[str] = Counter()
    for entry in entries:
        error_counts.update(_counts(entry["error_counts"]))
        rule_counts.update(_counts(entry["rule_counts"]))

    def _avg(key: str) -> float:
        if not entries:
            return 0.0
        return round(sum(float(e[key]) for e in entries) / len(entries), 4)

    return {
        "entries": len(entries),
        "records_total": sum(int(e["records"]) for e in entries),
        "average_grammar_ratio": _avg("grammar_ratio"),
        "average_scan_ratio": _avg("scan_ratio"),
        "error_counts": dict(error_counts),
        "rule_counts": dict(rule_counts),
    }
