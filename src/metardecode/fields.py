"""Field-level decoders and the lenient multi-field scanner.

Each decoder works on one whitespace-delimited substring and returns
``Ok(value)`` or ``Err(ValidationError)``. Decoders compose with ``map``,
``refine`` and ``then``; nothing here raises for an ordinary mismatch.

``decode_report`` runs every registered decoder over every substring of the
raw text. Decoders are not mutually exclusive: each one that accepts a
substring writes its field, and the last write wins (``AUTO`` passes the
station decoder, for example). Missing fields are not an error in this mode.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Generic, TypeVar

from metardecode.errors import ValidationError
from metardecode.report import (
    REPORT_TYPES,
    Report,
    ReportBuilder,
    ScannedReport,
    Timestamp,
    Variation,
    Wind,
)
from metardecode.result import Err, Ok, Result

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")

FieldResult = Result[A, ValidationError]


@dataclass(frozen=True)
class Decoder(Generic[A, B]):
    field: str
    run: Callable[[A], FieldResult[B]]

    def decode(self, value: A) -> FieldResult[B]:
        return self.run(value)

    def map(self, fn: Callable[[B], C]) -> Decoder[A, C]:
        def run(value: A) -> FieldResult[C]:
            outcome = self.run(value)
            if isinstance(outcome, Err):
                return outcome
            return Ok(fn(outcome.value))

        return Decoder(self.field, run)

    def refine(
        self, predicate: Callable[[B], bool], constraint: str, field: str | None = None
    ) -> Decoder[A, B]:
        """Keep the value only if ``predicate`` holds; the first failing refinement wins."""
        name = field or self.field

        def run(value: A) -> FieldResult[B]:
            outcome = self.run(value)
            if isinstance(outcome, Err):
                return outcome
            if not predicate(outcome.value):
                return Err(ValidationError(name, constraint, str(value)))
            return outcome

        return Decoder(self.field, run)

    def then(self, other: Decoder[B, C]) -> Decoder[A, C]:
        def run(value: A) -> FieldResult[C]:
            outcome = self.run(value)
            if isinstance(outcome, Err):
                return outcome
            return other.run(outcome.value)

        return Decoder(self.field, run)


def identity(field: str) -> Decoder[Any, Any]:
    return Decoder(field, Ok)


def pattern(field: str, regex: str, constraint: str, flags: int = 0) -> Decoder[str, re.Match[str]]:
    """Full-match ``regex`` against the substring; classes match ASCII only."""
    compiled = re.compile(regex, flags | re.ASCII)

    def run(text: str) -> FieldResult[re.Match[str]]:
        m = compiled.fullmatch(text)
        if m is None:
            return Err(ValidationError(field, constraint, text))
        return Ok(m)

    return Decoder(field, run)


# --------------------------------------------------------------------------- decoders

report_type_decoder: Decoder[str, str] = pattern(
    "type", "|".join(REPORT_TYPES), "must be METAR or SPECI"
).map(lambda m: m.group(0))

station_decoder: Decoder[str, str] = (
    Decoder("station", lambda text: Ok(text.upper()))
    .then(pattern("station", r"[A-Z]{4}", "must be 4 letters"))
    .map(lambda m: m.group(0))
)

timestamp_shape_decoder: Decoder[str, Timestamp] = pattern(
    "timestamp", r"(\d{2})(\d{2})(\d{2})Z", "must be DDHHMMZ", flags=re.IGNORECASE
).map(lambda m: Timestamp(day=int(m.group(1)), hour=int(m.group(2)), minute=int(m.group(3))))

timestamp_range_decoder: Decoder[Timestamp, Timestamp] = (
    identity("timestamp")
    .refine(lambda ts: 1 <= ts.day <= 31, "day must be within 1..31", field="day")
    .refine(lambda ts: 0 <= ts.hour <= 23, "hour must be within 0..23", field="hour")
    .refine(lambda ts: 0 <= ts.minute <= 59, "minute must be within 0..59", field="minute")
)

raw_timestamp_decoder: Decoder[str, Timestamp] = timestamp_shape_decoder.then(
    timestamp_range_decoder
)


def anchor_timestamp(ts: Timestamp, reference: datetime) -> datetime:
    """Place ``ts`` on the reference month/year in UTC.

    The day is not checked against the month length; day 30 in February
    rolls over into March.
    """
    first = datetime(reference.year, reference.month, 1, ts.hour, ts.minute, tzinfo=timezone.utc)
    return first + timedelta(days=ts.day - 1)


def timestamp_decoder(reference: datetime | None = None) -> Decoder[str, datetime]:
    """Raw timestamp projected onto a calendar point; ``reference`` defaults to now (UTC)."""

    def project(ts: Timestamp) -> datetime:
        return anchor_timestamp(ts, reference or datetime.now(timezone.utc))

    return raw_timestamp_decoder.map(project)


def _in_compass(value: int) -> bool:
    return 0 <= value <= 360


wind_direction_decoder: Decoder[Wind, Wind] = identity("wind").refine(
    lambda w: w.direction is None or _in_compass(w.direction),
    "direction must be within 0..360",
    field="wind.direction",
)

wind_decoder: Decoder[str, Wind] = (
    pattern("wind", r"(\d{3})(\d{2})(KT|MPS)", "must be dddffKT or dddffMPS")
    .map(lambda m: Wind(direction=int(m.group(1)), speed=int(m.group(2)), unit=m.group(3)))
    .then(wind_direction_decoder)
)

variation_range_decoder: Decoder[Variation, Variation] = identity("wind_variation").refine(
    lambda v: _in_compass(v.low) and _in_compass(v.high),
    "variation bounds must be within 0..360",
)

wind_variation_decoder: Decoder[str, Variation] = (
    pattern("wind_variation", r"(\d{3})V(\d{3})", "must be dddVddd")
    .map(lambda m: Variation(low=int(m.group(1)), high=int(m.group(2))))
    .then(variation_range_decoder)
)

auto_decoder: Decoder[str, bool] = pattern("auto", "AUTO", "must be AUTO").map(lambda m: True)


@dataclass(frozen=True)
class FieldDecoder:
    name: str
    decoder: Decoder[str, Any]
    writes: Callable[[ReportBuilder, Any], None]


def _write(field: str) -> Callable[[ReportBuilder, Any], None]:
    def write(builder: ReportBuilder, value: Any) -> None:
        builder.set(field, value)

    return write


def _write_timestamp(reference: datetime | None) -> Callable[[ReportBuilder, Any], None]:
    def write(builder: ReportBuilder, value: Timestamp) -> None:
        builder.set("timestamp", value)
        builder.set("observed_at", anchor_timestamp(value, reference or datetime.now(timezone.utc)))

    return write


def field_decoders(reference: datetime | None = None) -> tuple[FieldDecoder, ...]:
    """Registry visited in priority order for every substring."""
    return (
        FieldDecoder("type", report_type_decoder, _write("type")),
        FieldDecoder("station", station_decoder, _write("station")),
        FieldDecoder("timestamp", raw_timestamp_decoder, _write_timestamp(reference)),
        FieldDecoder("wind", wind_decoder, _write("wind")),
        FieldDecoder("wind_variation", wind_variation_decoder, _write("wind_variation")),
        FieldDecoder("auto", auto_decoder, _write("auto")),
    )


FIELD_DECODERS: dict[str, Decoder[str, Any]] = {
    "type": report_type_decoder,
    "station": station_decoder,
    "timestamp": raw_timestamp_decoder,
    "wind": wind_decoder,
    "wind_variation": wind_variation_decoder,
    "auto": auto_decoder,
}

WHITESPACE_RE = re.compile(r"\s+", re.ASCII)


def decode_field(name: str, text: str) -> Any:
    """Decode one substring as the named field, raising ``ValidationError``."""
    try:
        decoder = FIELD_DECODERS[name]
    except KeyError:
        raise ValueError(f"Unknown field '{name}'. Choose from {sorted(FIELD_DECODERS)}.") from None
    outcome = decoder.decode(text)
    if isinstance(outcome, Err):
        raise outcome.error
    return outcome.value


def decode_report(text: str, reference: datetime | None = None) -> ScannedReport:
    """Best-effort scan of raw report text; fields that never match stay unset."""
    builder = ReportBuilder()
    registry = field_decoders(reference)
    for substring in WHITESPACE_RE.split(text.strip()):
        if not substring:
            continue
        for entry in registry:
            outcome = entry.decoder.decode(substring)
            if isinstance(outcome, Ok):
                entry.writes(builder, outcome.value)
    return builder.build_partial()


def validate_report(report: Report) -> list[ValidationError]:
    """Range-check a grammar-built report field by field.

    A failing field does not stop the others from being checked.
    """
    checks: list[tuple[Decoder[Any, Any], Any]] = [
        (station_decoder, report.station),
        (timestamp_range_decoder, report.timestamp),
    ]
    if report.wind is not None:
        checks.append((wind_direction_decoder, report.wind))
        if report.wind.variation is not None:
            checks.append((variation_range_decoder, report.wind.variation))

    errors: list[ValidationError] = []
    for decoder, value in checks:
        outcome = decoder.decode(value)
        if isinstance(outcome, Err):
            errors.append(outcome.error)
    return errors


def normalize_report(report: Report) -> Report:
    """Return ``report`` with its station upper-cased, the form the decoders accept."""
    return replace(report, station=report.station.upper())
