from datetime import datetime, timezone

import pytest

from metardecode.errors import ValidationError
from metardecode.fields import (
    anchor_timestamp,
    decode_field,
    identity,
    raw_timestamp_decoder,
    report_type_decoder,
    station_decoder,
    timestamp_decoder,
    wind_decoder,
    wind_variation_decoder,
)
from metardecode.report import Timestamp, Variation, Wind
from metardecode.result import Err, Ok


def test_report_type_decoder_accepts_codes():
    assert report_type_decoder.decode("METAR") == Ok("METAR")
    assert report_type_decoder.decode("SPECI") == Ok("SPECI")


def test_report_type_decoder_rejects_catgirl():
    outcome = report_type_decoder.decode("CATGIRL")
    assert isinstance(outcome, Err)
    assert outcome.error.field == "type"
    with pytest.raises(ValidationError) as excinfo:
        decode_field("type", "CATGIRL")
    assert "METAR or SPECI" in str(excinfo.value)


def test_station_decoder_uppercases_and_checks_shape():
    assert station_decoder.decode("klax") == Ok("KLAX")
    assert isinstance(station_decoder.decode("KLA1"), Err)
    assert isinstance(station_decoder.decode("KLAXX"), Err)


def test_raw_timestamp_decodes_fields():
    assert decode_field("timestamp", "150324Z") == Timestamp(day=15, hour=3, minute=24)


def test_raw_timestamp_rejects_day_32():
    outcome = raw_timestamp_decoder.decode("322561Z")
    assert isinstance(outcome, Err)
    # day is checked first and short-circuits the hour/minute checks
    assert outcome.error.field == "day"
    assert outcome.error.fragment == "322561Z"


@pytest.mark.parametrize(
    ("text", "field"),
    [
        ("002000Z", "day"),
        ("322000Z", "day"),
        ("152400Z", "hour"),
        ("159959Z", "hour"),
        ("152360Z", "minute"),
        ("150099Z", "minute"),
    ],
)
def test_raw_timestamp_names_the_violated_field(text, field):
    with pytest.raises(ValidationError) as excinfo:
        decode_field("timestamp", text)
    assert excinfo.value.field == field


def test_minutes_are_checked_against_their_own_bound():
    # hour 23 with minute 59 is valid; minute 60 fails as minute, never as hour
    assert isinstance(raw_timestamp_decoder.decode("152359Z"), Ok)
    outcome = raw_timestamp_decoder.decode("152360Z")
    assert isinstance(outcome, Err)
    assert outcome.error.field == "minute"
    assert "0..59" in outcome.error.constraint


def test_raw_timestamp_accepts_every_in_range_value():
    for day in range(1, 32):
        assert raw_timestamp_decoder.decode(f"{day:02d}1200Z") == Ok(Timestamp(day, 12, 0))
    for hour in range(24):
        assert raw_timestamp_decoder.decode(f"15{hour:02d}00Z") == Ok(Timestamp(15, hour, 0))
    for minute in range(60):
        assert raw_timestamp_decoder.decode(f"1512{minute:02d}Z") == Ok(Timestamp(15, 12, minute))


def test_raw_timestamp_rejects_bad_shape():
    assert isinstance(raw_timestamp_decoder.decode("15032Z"), Err)
    assert isinstance(raw_timestamp_decoder.decode("150324"), Err)


def test_timestamp_decoder_projects_onto_reference_month():
    reference = datetime(2024, 6, 20, tzinfo=timezone.utc)
    outcome = timestamp_decoder(reference).decode("150324Z")
    assert outcome == Ok(datetime(2024, 6, 15, 3, 24, tzinfo=timezone.utc))


def test_timestamp_projection_does_not_check_month_length():
    # day 30 in February rolls over instead of failing
    leap = anchor_timestamp(Timestamp(30, 6, 0), datetime(2024, 2, 10, tzinfo=timezone.utc))
    assert leap == datetime(2024, 3, 1, 6, 0, tzinfo=timezone.utc)
    common = timestamp_decoder(datetime(2023, 2, 10, tzinfo=timezone.utc)).decode("300600Z")
    assert common == Ok(datetime(2023, 3, 2, 6, 0, tzinfo=timezone.utc))


def test_wind_decoder_fixed_shape():
    assert wind_decoder.decode("25015KT") == Ok(Wind(direction=250, speed=15, unit="KT"))
    assert wind_decoder.decode("36010MPS") == Ok(Wind(direction=360, speed=10, unit="MPS"))


def test_wind_decoder_has_no_gust_or_variable_forms():
    assert isinstance(wind_decoder.decode("25015G25KT"), Err)
    assert isinstance(wind_decoder.decode("VRB05KT"), Err)


def test_wind_decoder_checks_direction_range():
    outcome = wind_decoder.decode("99915KT")
    assert isinstance(outcome, Err)
    assert outcome.error.field == "wind.direction"


def test_wind_variation_decoder():
    assert wind_variation_decoder.decode("220V280") == Ok(Variation(low=220, high=280))
    assert isinstance(wind_variation_decoder.decode("220V999"), Err)
    assert isinstance(wind_variation_decoder.decode("22V280"), Err)


def test_decoder_combinators_compose():
    even = identity("n").refine(lambda n: n % 2 == 0, "must be even").map(lambda n: n // 2)
    assert even.decode(8) == Ok(4)
    outcome = even.decode(3)
    assert isinstance(outcome, Err)
    assert outcome.error.constraint == "must be even"
    assert isinstance(identity("n").then(even).decode(3), Err)


def test_decode_field_unknown_name():
    with pytest.raises(ValueError):
        decode_field("visibility", "9999")


@pytest.mark.parametrize(
    "name, text",
    [
        ("timestamp", "١٥٠٣٢٤Z"),
        ("wind", "２５０１５KT"),
        ("wind_variation", "٢٢٠V٢٨٠"),
    ],
)
def test_non_ascii_digits_are_rejected(name, text):
    with pytest.raises(ValidationError) as excinfo:
        decode_field(name, text)
    assert excinfo.value.fragment == text
