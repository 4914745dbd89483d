"""Decode a corpus described by a manifest into Arrow/JSONL outputs."""

from __future__ import annotations

import json
from pathlib import Path

from metardecode.data.loader import load_reports
from metardecode.decoder import decode_lines
from metardecode.manifest import load_manifest, validate_manifest
from metardecode.outputs import results_to_arrow, results_to_jsonl


def decode_manifest(manifest_path: Path, output_dir: Path) -> dict:
    mf = load_manifest(manifest_path)
    validation = validate_manifest(mf)
    if validation.get("warnings"):
        raise RuntimeError(f"Manifest validation warnings: {validation['warnings']}")

    results = decode_lines(load_reports(mf.path), mode=mf.mode, validate=mf.validate)

    output_dir.mkdir(parents=True, exist_ok=True)
    jsonl_path = output_dir / f"{mf.name}_decoded.jsonl"
    arrow_path = output_dir / f"{mf.name}_decoded.arrow"

    results_to_jsonl(results, jsonl_path)
    results_to_arrow(results, arrow_path)

    return {
        "manifest": mf.name,
        "records": len(results),
        "jsonl": str(jsonl_path),
        "arrow": str(arrow_path),
        "validation": validation,
    }


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Decode a corpus described by a manifest.")
    parser.add_argument("manifest", type=Path, help="Path to manifest (json/yaml).")
    parser.add_argument(
        "--output-dir", type=Path, default=Path("artifacts/decoded"), help="Where to write outputs."
    )
    args = parser.parse_args()

    summary = decode_manifest(args.manifest, args.output_dir)
    print(json.dumps(summary, indent=2))
