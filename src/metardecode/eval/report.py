"""Append evaluation summaries to CSV/JSONL logs."""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import orjson

from metardecode.eval.harness import EvalSummary


def summary_to_row(summary: EvalSummary, source: str, tag: str | None = None) -> dict[str, Any]:
    """One CSV row per run; count maps are stored as JSON strings."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "source": source,
        "tag": tag or "",
        "records": summary.records,
        "grammar_ratio": summary.grammar_ratio,
        "scan_ratio": summary.scan_ratio,
        "error_counts": json.dumps(summary.error_counts, sort_keys=True),
        "rule_counts": json.dumps(summary.rule_counts, sort_keys=True),
    }


def append_csv(path: Path, row: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    is_new = not path.exists()
    with path.open("a", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(row.keys()))
        if is_new:
            writer.writeheader()
        writer.writerow(row)


def append_jsonl(path: Path, payload: dict[str, Any]) -> None:
    """Append ``payload`` as one line; ``EvalSummary`` values serialize as objects."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("ab") as f:
        f.write(orjson.dumps(payload) + b"\n")
