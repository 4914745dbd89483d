"""Top-level decode entry points.

``parse_metar`` is the strict path: tokenize, run the grammar, then range
check the result with the field decoders. ``decode_lines`` runs either the
strict path or the lenient scanner over many reports and captures failures
as data so a batch never stops on one bad line.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from metardecode.errors import MetarError, ReportValidationError
from metardecode.fields import decode_report, normalize_report, validate_report
from metardecode.grammar import parse_report
from metardecode.lexer import tokenize
from metardecode.report import Report, report_to_dict

DECODE_MODES = {"grammar", "scan"}


def parse_metar(text: str, validate: bool = True) -> Report:
    """Decode one report through the grammar.

    Lexical and structural errors propagate unchanged. With ``validate`` the
    report is range checked and every failing field is collected into one
    ``ReportValidationError``.
    """
    report = parse_report(tokenize(text))
    if not validate:
        return report
    errors = validate_report(report)
    if errors:
        raise ReportValidationError(errors)
    return normalize_report(report)


@dataclass
class DecodeResult:
    line_index: int
    raw: str
    mode: str
    ok: bool
    report: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
    missing: list[str] | None = None


def _scan_missing(report: dict[str, Any]) -> list[str]:
    return [name for name in ("type", "station", "timestamp") if report.get(name) is None]


def decode_line(
    raw: str,
    line_index: int = 0,
    mode: str = "grammar",
    validate: bool = True,
    reference: datetime | None = None,
) -> DecodeResult:
    if mode not in DECODE_MODES:
        raise ValueError(f"Unsupported mode '{mode}'. Choose from {sorted(DECODE_MODES)}.")
    if mode == "scan":
        payload = report_to_dict(decode_report(raw, reference=reference))
        missing = _scan_missing(payload)
        return DecodeResult(line_index, raw, mode, ok=not missing, report=payload, missing=missing)
    try:
        report = parse_metar(raw, validate=validate)
    except MetarError as exc:
        return DecodeResult(line_index, raw, mode, ok=False, error=exc.to_dict())
    return DecodeResult(line_index, raw, mode, ok=True, report=report_to_dict(report))


def decode_lines(
    lines: Iterable[str],
    mode: str = "grammar",
    validate: bool = True,
    max_records: int | None = None,
    reference: datetime | None = None,
) -> list[DecodeResult]:
    """Decode each report line; failures are recorded on the result, not raised."""
    results: list[DecodeResult] = []
    for idx, raw in enumerate(lines):
        if max_records is not None and idx >= max_records:
            break
        results.append(
            decode_line(raw, line_index=idx, mode=mode, validate=validate, reference=reference)
        )
    return results
