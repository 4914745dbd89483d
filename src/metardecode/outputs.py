"""Writers for batches of decoded reports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pyarrow as pa

from metardecode.decoder import DecodeResult


def result_to_dict(result: DecodeResult) -> dict[str, Any]:
    return {
        "line_index": result.line_index,
        "raw": result.raw,
        "mode": result.mode,
        "ok": result.ok,
        "report": result.report,
        "error": result.error,
        "missing": result.missing,
    }


def results_to_jsonl(results: list[DecodeResult], path: Path, gzip_output: bool = False) -> None:
    """Write decode results as JSONL for downstream consumption."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if gzip_output:
        import gzip as gzip_lib

        handle = gzip_lib.open(path, "wt", encoding="utf-8")
    else:
        handle = path.open("w", encoding="utf-8")

    with handle as f:
        for r in results:
            f.write(json.dumps(result_to_dict(r)) + "\n")


def _get(payload: dict[str, Any] | None, *keys: str) -> Any:
    value: Any = payload
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _variation(payload: dict[str, Any] | None, key: str) -> Any:
    # scan mode keeps a variation seen without a wind group at the top level
    value = _get(payload, "wind", "variation", key)
    return value if value is not None else _get(payload, "wind_variation", key)


def results_to_table(results: list[DecodeResult]) -> pa.Table:
    """Flatten decode results into one row per report."""
    return pa.table(
        {
            "line_index": pa.array([r.line_index for r in results], type=pa.int64()),
            "raw": pa.array([r.raw for r in results], type=pa.string()),
            "mode": pa.array([r.mode for r in results], type=pa.string()),
            "ok": pa.array([r.ok for r in results], type=pa.bool_()),
            "missing": pa.array([r.missing for r in results], type=pa.list_(pa.string())),
            "type": pa.array([_get(r.report, "type") for r in results], type=pa.string()),
            "station": pa.array([_get(r.report, "station") for r in results], type=pa.string()),
            "day": pa.array([_get(r.report, "timestamp", "day") for r in results], type=pa.int8()),
            "hour": pa.array(
                [_get(r.report, "timestamp", "hour") for r in results], type=pa.int8()
            ),
            "minute": pa.array(
                [_get(r.report, "timestamp", "minute") for r in results], type=pa.int8()
            ),
            "observed_at": pa.array(
                [_get(r.report, "observed_at") for r in results], type=pa.string()
            ),
            "auto": pa.array([bool(_get(r.report, "auto")) for r in results], type=pa.bool_()),
            "wind_direction": pa.array(
                [_get(r.report, "wind", "direction") for r in results], type=pa.int16()
            ),
            "wind_speed": pa.array(
                [_get(r.report, "wind", "speed") for r in results], type=pa.int16()
            ),
            "wind_gust": pa.array(
                [_get(r.report, "wind", "gust") for r in results], type=pa.int16()
            ),
            "wind_unit": pa.array(
                [_get(r.report, "wind", "unit") for r in results], type=pa.string()
            ),
            "wind_variable": pa.array(
                [_get(r.report, "wind", "variable") for r in results], type=pa.bool_()
            ),
            "wind_variation_low": pa.array(
                [_variation(r.report, "low") for r in results], type=pa.int16()
            ),
            "wind_variation_high": pa.array(
                [_variation(r.report, "high") for r in results], type=pa.int16()
            ),
            # errors stored as JSON to keep the schema flat
            "error": pa.array(
                [json.dumps(r.error) if r.error else None for r in results], type=pa.string()
            ),
        }
    )


def results_to_arrow(results: list[DecodeResult], path: Path) -> None:
    """Write decode results to Arrow IPC for analytics-friendly consumption."""
    path.parent.mkdir(parents=True, exist_ok=True)
    table = results_to_table(results)
    with pa.OSFile(str(path), "wb") as sink:
        with pa.ipc.new_file(sink, table.schema) as writer:
            writer.write_table(table)
