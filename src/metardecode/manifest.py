from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from metardecode.data.loader import iter_report_lines, read_corpus
from metardecode.decoder import DECODE_MODES, decode_lines


@dataclass
class Manifest:
    name: str
    path: Path
    mode: str = "grammar"
    validate: bool = True
    hash: str | None = None
    notes: str | None = None
    checks: dict[str, Any] | None = None

    @staticmethod
    def from_mapping(payload: dict[str, Any]) -> Manifest:
        mode = str(payload.get("mode", "grammar"))
        if mode not in DECODE_MODES:
            raise ValueError(f"Unsupported mode '{mode}'. Choose from {sorted(DECODE_MODES)}.")
        return Manifest(
            name=str(payload["name"]),
            path=Path(payload["path"]),
            mode=mode,
            validate=bool(payload.get("validate", True)),
            hash=payload.get("hash"),
            notes=payload.get("notes"),
            checks=payload.get("checks"),
        )


def _hash_file(path: Path, algo: str = "sha256") -> str:
    h = hashlib.new(algo)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return f"{algo}:{h.hexdigest()}"


def validate_manifest(manifest: Manifest) -> dict[str, Any]:
    path = manifest.path
    result: dict[str, Any] = {
        "name": manifest.name,
        "path": str(path),
        "exists": path.exists(),
        "size_bytes": path.stat().st_size if path.exists() else 0,
        "mode": manifest.mode,
        "hash_expected": manifest.hash,
        "hash_actual": None,
        "hash_match": None,
        "records": 0,
        "decoded": 0,
        "success_ratio": 0.0,
        "warnings": [],
    }
    if not path.exists():
        result["warnings"].append("file_missing")
        return result

    if manifest.hash:
        algo, expected_hex = (
            manifest.hash.split(":", 1) if ":" in manifest.hash else ("sha256", manifest.hash)
        )
        actual = _hash_file(path, algo=algo)
        result["hash_actual"] = actual
        result["hash_match"] = actual == f"{algo}:{expected_hex.lower()}"
        if not result["hash_match"]:
            result["warnings"].append("hash_mismatch")

    lines = list(iter_report_lines(read_corpus(path)))
    result["records"] = len(lines)
    if not lines:
        result["warnings"].append("no_reports")
        return result
    if manifest.checks and manifest.checks.get("max_records"):
        max_rec = int(manifest.checks["max_records"])
        lines = lines[:max_rec]
        result["records_capped"] = max_rec

    decoded = decode_lines(lines, mode=manifest.mode, validate=manifest.validate)
    ok = sum(1 for r in decoded if r.ok)
    result["decoded"] = ok
    result["success_ratio"] = round(ok / len(decoded), 4)
    if manifest.checks and manifest.checks.get("min_success_ratio") is not None:
        min_ratio = float(manifest.checks["min_success_ratio"])
        if result["success_ratio"] < min_ratio:
            result["warnings"].append("low_success_ratio")
    return result


def load_manifest(path: Path) -> Manifest:
    if path.suffix.lower() in {".yml", ".yaml"}:
        payload = yaml.safe_load(path.read_text())
    else:
        payload = json.loads(path.read_text())
    return Manifest.from_mapping(payload)


def sample_manifest() -> dict[str, Any]:
    return {
        "name": "sample_klax",
        "path": "data/reports/klax.txt",
        "mode": "grammar",
        "validate": True,
        "hash": "sha256:<hex>",
        "notes": "edit with real details",
        "checks": {"max_records": 20000, "min_success_ratio": 0.9},
    }
