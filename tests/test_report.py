from datetime import datetime, timezone

import pytest

from metardecode.report import Report, ReportBuilder, Timestamp, Variation, Wind, report_to_dict


def test_builder_requires_core_fields():
    builder = ReportBuilder().set("type", "METAR").set("station", "KLAX")
    with pytest.raises(ValueError, match="timestamp"):
        builder.build()


def test_builder_rejects_unknown_field():
    with pytest.raises(AttributeError):
        ReportBuilder().set("visibility", 9999)


def test_builder_attaches_variation_to_wind():
    builder = ReportBuilder()
    builder.set("type", "METAR").set("station", "KLAX").set("timestamp", Timestamp(1, 0, 0))
    builder.set("wind", Wind(direction=250, speed=15, unit="KT"))
    builder.set("wind_variation", Variation(220, 280))
    report = builder.build()
    assert report.wind is not None
    assert report.wind.variation == Variation(220, 280)


def test_report_encodes_back_to_groups():
    report = Report(
        type="METAR",
        station="KLAX",
        timestamp=Timestamp(5, 3, 4),
        auto=True,
        wind=Wind(speed=5, unit="KT", gust=15, variable=True),
    )
    assert str(report) == "METAR KLAX 050304Z AUTO VRB05G15KT"


def test_report_to_dict_serializes_observed_at():
    builder = ReportBuilder().set("observed_at", datetime(2024, 6, 15, 3, 24, tzinfo=timezone.utc))
    payload = report_to_dict(builder.build_partial())
    assert payload["observed_at"] == "2024-06-15T03:24:00+00:00"
    assert payload["wind"] is None
