"""Micro-benchmarks for the grammar and the scanner on synthetic reports."""

from __future__ import annotations

import time

from metardecode.data.generator import generate_reports
from metardecode.decoder import decode_lines


def benchmark_decode(records: int = 1000, runs: int = 3, mode: str = "grammar") -> dict[str, float]:
    lines, _ = generate_reports(count=records)
    best = None
    for _ in range(runs):
        start = time.perf_counter()
        decode_lines(lines, mode=mode)
        elapsed = time.perf_counter() - start
        best = elapsed if best is None or elapsed < best else best
    rate = records / best if best else 0.0
    return {"records": records, "best_seconds": best or 0.0, "reports_per_second": rate}


if __name__ == "__main__":
    for mode in ("grammar", "scan"):
        print(mode, benchmark_decode(mode=mode))
