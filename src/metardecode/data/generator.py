"""Synthetic METAR/SPECI report generator.

Builds well-formed reports covering every implemented group:
- METAR and SPECI headers with 4-letter ICAO stations
- DDHHMMZ timestamps across the full valid range
- optional AUTO flag
- fixed or VRB wind, optional gust, KT or MPS, optional variation

This is used for fixtures, benchmarks, and evaluation baselines.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import asdict, dataclass

from metardecode.report import Report, Timestamp, Variation, Wind

STATIONS: Sequence[str] = ("KLAX", "KJFK", "EGLL", "LFPG", "RJTT", "YSSY", "CYYZ", "EDDF")


@dataclass
class ReportSynthConfig:
    seed: int = 1234
    speci_ratio: float = 0.2
    auto_ratio: float = 0.3
    wind_ratio: float = 0.9  # reports without a wind group stop after the timestamp
    variable_ratio: float = 0.15
    gust_ratio: float = 0.25
    variation_ratio: float = 0.2
    mps_ratio: float = 0.2
    trailing_groups: bool = False  # append visibility/pressure groups the grammar ignores


def _build_wind(rng: random.Random, cfg: ReportSynthConfig) -> Wind:
    speed = rng.randint(0, 45)
    variable = rng.random() < cfg.variable_ratio
    gust = speed + rng.randint(10, 40) if rng.random() < cfg.gust_ratio else None
    variation = None
    direction = None if variable else rng.randrange(0, 361, 10)
    if not variable and rng.random() < cfg.variation_ratio:
        low = rng.randrange(0, 300, 10)
        span = rng.randrange(60, 61 + min(120, 300 - low), 10)
        variation = Variation(low=low, high=low + span)
    return Wind(
        direction=direction,
        speed=speed,
        gust=gust,
        unit="MPS" if rng.random() < cfg.mps_ratio else "KT",
        variable=variable,
        variation=variation,
    )


def build_report(rng: random.Random, cfg: ReportSynthConfig) -> Report:
    return Report(
        type="SPECI" if rng.random() < cfg.speci_ratio else "METAR",
        station=rng.choice(STATIONS),
        timestamp=Timestamp(
            day=rng.randint(1, 31), hour=rng.randint(0, 23), minute=rng.randint(0, 59)
        ),
        auto=rng.random() < cfg.auto_ratio,
        wind=_build_wind(rng, cfg) if rng.random() < cfg.wind_ratio else None,
    )


def generate_reports(
    count: int = 8, config: ReportSynthConfig | None = None
) -> tuple[list[str], list[dict]]:
    """Generate raw report lines plus the field values each one encodes."""
    cfg = config or ReportSynthConfig()
    rng = random.Random(cfg.seed)
    lines: list[str] = []
    metadata: list[dict] = []

    for _ in range(count):
        report = build_report(rng, cfg)
        line = str(report)
        if cfg.trailing_groups:
            line += f" {rng.choice(('9999', 'CAVOK', '4000'))} Q{rng.randint(990, 1035)}"
        lines.append(line)
        metadata.append(asdict(report))

    return lines, metadata
