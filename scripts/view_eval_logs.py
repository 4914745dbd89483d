"""Quick viewer for eval logs (CSV or JSONL).

Shows aggregate grammar/scan ratios and failure counts by error kind and rule.
"""

from __future__ import annotations

import argparse
from collections import Counter
from pathlib import Path

from rich.console import Console
from rich.table import Table

from metardecode.eval.summarize import iter_log_entries, summarize_log


def main() -> None:
    parser = argparse.ArgumentParser(description="View eval logs.")
    parser.add_argument("log", type=Path, help="CSV or JSONL log file.")
    args = parser.parse_args()

    console = Console()
    summary = summarize_log(args.log)

    console.print("[bold]Aggregate[/]")
    console.print(
        f"- entries: {summary['entries']}, records: {summary['records_total']}, "
        f"avg grammar ratio: {summary['average_grammar_ratio']}, "
        f"avg scan ratio: {summary['average_scan_ratio']}"
    )

    for key, title, label in (
        ("error_counts", "Error Counts", "Kind"),
        ("rule_counts", "Failing Rules", "Rule"),
    ):
        table = Table(title=title)
        table.add_column(label)
        table.add_column("Count", justify="right")
        counts = summary[key]
        assert isinstance(counts, dict)
        for name, count in sorted(counts.items(), key=lambda kv: kv[1], reverse=True):
            table.add_row(name, str(count))
        console.print(table)

    # Ratios by tag (if present)
    tag_counts: Counter[str] = Counter()
    tag_ratio_sum: Counter[str] = Counter()
    for entry in iter_log_entries(args.log):
        tag = str(entry.get("tag") or "")
        if tag:
            tag_counts[tag] += 1
            tag_ratio_sum[tag] += float(entry.get("grammar_ratio", 0.0))
    if tag_counts:
        tag_table = Table(title="Tags")
        tag_table.add_column("Tag")
        tag_table.add_column("Entries", justify="right")
        tag_table.add_column("Avg Grammar Ratio", justify="right")
        for tag, count in tag_counts.most_common():
            avg = tag_ratio_sum[tag] / count if count else 0.0
            tag_table.add_row(tag, str(count), f"{avg:.4f}")
        console.print(tag_table)


if __name__ == "__main__":
    main()
