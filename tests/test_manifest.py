import json
from pathlib import Path

import pytest
import yaml

from metardecode.manifest import Manifest, load_manifest, validate_manifest


def test_manifest_validation_with_missing_file(tmp_path: Path) -> None:
    mf = Manifest(name="missing", path=tmp_path / "missing.txt")
    result = validate_manifest(mf)
    assert result["warnings"] == ["file_missing"]


def test_manifest_validation_decodes_corpus(tmp_path: Path) -> None:
    data_path = tmp_path / "reports.txt"
    data_path.write_text("METAR KLAX 150324Z 25015KT\nCATGIRL KLAX 150324Z\n")
    mf = Manifest(
        name="sample",
        path=data_path,
        checks={"min_success_ratio": 0.9},
    )
    result = validate_manifest(mf)
    assert result["records"] == 2
    assert result["decoded"] == 1
    assert result["success_ratio"] == 0.5
    assert result["warnings"] == ["low_success_ratio"]


def test_manifest_validation_hash(tmp_path: Path) -> None:
    data_path = tmp_path / "sample.txt"
    data_path.write_bytes(b"abcd")
    mf = Manifest(
        name="sample",
        path=data_path,
        hash="sha256:88d4266fd4e6338d13b845fcf289579d209c897823b9217da3e161936f031589",
    )
    result = validate_manifest(mf)
    assert result["hash_match"] is True
    assert result["records"] == 1  # one line, which does not decode
    assert result["decoded"] == 0


def test_load_manifest_from_yaml_and_json(tmp_path: Path) -> None:
    payload = {"name": "klax", "path": "reports.txt", "mode": "scan", "checks": {"max_records": 5}}
    yml = tmp_path / "manifest.yaml"
    yml.write_text(yaml.safe_dump(payload))
    js = tmp_path / "manifest.json"
    js.write_text(json.dumps(payload))
    for path in (yml, js):
        mf = load_manifest(path)
        assert mf.mode == "scan"
        assert mf.path == Path("reports.txt")
        assert mf.checks == {"max_records": 5}


def test_manifest_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError):
        Manifest.from_mapping({"name": "x", "path": "x.txt", "mode": "fuzzy"})


def test_manifest_validation_accepts_bare_hex_hash(tmp_path: Path) -> None:
    data_path = tmp_path / "sample.txt"
    data_path.write_bytes(b"abcd")
    mf = Manifest(
        name="sample",
        path=data_path,
        hash="88D4266FD4E6338D13B845FCF289579D209C897823B9217DA3E161936F031589",
    )
    result = validate_manifest(mf)
    assert result["hash_match"] is True
    assert "hash_mismatch" not in result["warnings"]
