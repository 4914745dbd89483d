"""Report value types and the assembler that builds them.

``Report`` is what the grammar produces: every implemented field is typed
or the parse failed. ``ScannedReport`` is what the lenient scanner
produces: any field may be missing.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Any

REPORT_TYPES: tuple[str, ...] = ("METAR", "SPECI")
WIND_UNITS: tuple[str, ...] = ("KT", "MPS")


@dataclass(frozen=True)
class Timestamp:
    day: int
    hour: int
    minute: int

    def __str__(self) -> str:
        return f"{self.day:02d}{self.hour:02d}{self.minute:02d}Z"


@dataclass(frozen=True)
class Variation:
    low: int
    high: int

    def __str__(self) -> str:
        return f"{self.low:03d}V{self.high:03d}"


@dataclass(frozen=True)
class Wind:
    speed: int
    unit: str
    direction: int | None = None
    gust: int | None = None
    variable: bool = False
    variation: Variation | None = None

    def __str__(self) -> str:
        head = "VRB" if self.variable or self.direction is None else f"{self.direction:03d}"
        gust = f"G{self.gust:02d}" if self.gust is not None else ""
        text = f"{head}{self.speed:02d}{gust}{self.unit}"
        if self.variation is not None:
            text += f" {self.variation}"
        return text


@dataclass(frozen=True)
class Report:
    type: str
    station: str
    timestamp: Timestamp
    auto: bool = False
    wind: Wind | None = None

    def __str__(self) -> str:
        """Encode back into FM-15 group order."""
        groups = [self.type, self.station, str(self.timestamp)]
        if self.auto:
            groups.append("AUTO")
        if self.wind is not None:
            groups.append(str(self.wind))
        return " ".join(groups)


@dataclass(frozen=True)
class ScannedReport:
    type: str | None = None
    station: str | None = None
    timestamp: Timestamp | None = None
    observed_at: datetime | None = None
    auto: bool = False
    wind: Wind | None = None
    wind_variation: Variation | None = None


class ReportBuilder:
    """Accumulates field values; the last write for a field wins."""

    FIELDS = ("type", "station", "timestamp", "observed_at", "auto", "wind", "wind_variation")

    def __init__(self) -> None:
        self.type: str | None = None
        self.station: str | None = None
        self.timestamp: Timestamp | None = None
        self.observed_at: datetime | None = None
        self.auto = False
        self.wind: Wind | None = None
        self.wind_variation: Variation | None = None

    def set(self, field: str, value: Any) -> ReportBuilder:
        if field not in self.FIELDS:
            raise AttributeError(f"unknown report field: {field}")
        setattr(self, field, value)
        return self

    def _wind(self) -> Wind | None:
        if self.wind is not None and self.wind_variation is not None:
            return replace(self.wind, variation=self.wind_variation)
        return self.wind

    def build(self) -> Report:
        """Freeze into a ``Report``; type, station and timestamp are required."""
        missing = [name for name in ("type", "station", "timestamp") if getattr(self, name) is None]
        if missing:
            raise ValueError(f"cannot build report, missing: {', '.join(missing)}")
        assert self.type is not None and self.station is not None and self.timestamp is not None
        return Report(
            type=self.type,
            station=self.station,
            timestamp=self.timestamp,
            auto=self.auto,
            wind=self._wind(),
        )

    def build_partial(self) -> ScannedReport:
        return ScannedReport(
            type=self.type,
            station=self.station,
            timestamp=self.timestamp,
            observed_at=self.observed_at,
            auto=self.auto,
            wind=self._wind(),
            wind_variation=self.wind_variation,
        )


def report_to_dict(report: Report | ScannedReport) -> dict[str, Any]:
    """Flatten a report into JSON-native data."""
    payload = asdict(report)
    observed_at = payload.get("observed_at")
    if isinstance(observed_at, datetime):
        payload["observed_at"] = observed_at.isoformat()
    return payload
