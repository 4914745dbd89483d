import pytest

from metardecode.errors import StructuralParseError
from metardecode.grammar import (
    WIND_PREFIX_ALTERNATIVES,
    Cursor,
    parse_report,
    parse_report_with_rest,
    station,
)
from metardecode.lexer import tokenize
from metardecode.report import Report, Timestamp, Variation, Wind
from metardecode.result import Err, Ok


def _parse(text: str) -> Report:
    return parse_report(tokenize(text))


def test_parse_fixed_wind_report():
    report = _parse("METAR KLAX 150324Z 25015KT")
    assert report == Report(
        type="METAR",
        station="KLAX",
        timestamp=Timestamp(day=15, hour=3, minute=24),
        auto=False,
        wind=Wind(direction=250, speed=15, unit="KT"),
    )
    assert report.wind is not None
    assert report.wind.gust is None
    assert report.wind.variable is False
    assert report.wind.variation is None


def test_parse_variable_wind():
    wind = _parse("METAR KLAX 150324Z VRB05KT").wind
    assert wind is not None
    assert wind.variable is True
    assert wind.direction is None
    assert wind.speed == 5


def test_parse_gust():
    wind = _parse("METAR KLAX 150324Z 25015G25KT").wind
    assert wind is not None
    assert wind.gust == 25
    assert wind.speed == 15


def test_parse_variation():
    wind = _parse("METAR KLAX 150324Z 25015KT 220V280").wind
    assert wind is not None
    assert wind.variation == Variation(low=220, high=280)


def test_parse_auto_and_mps():
    report = _parse("SPECI EGLL 010000Z AUTO 09005MPS")
    assert report.type == "SPECI"
    assert report.auto is True
    assert report.wind is not None
    assert report.wind.unit == "MPS"


def test_wind_group_is_optional():
    report = _parse("METAR KLAX 150324Z")
    assert report.wind is None
    assert report.auto is False


def test_timestamp_marker_is_case_insensitive():
    assert _parse("METAR KLAX 150324z").timestamp == Timestamp(15, 3, 24)


def test_grammar_does_not_range_check():
    assert _parse("METAR KLAX 322561Z").timestamp == Timestamp(day=32, hour=25, minute=61)


def test_trailing_groups_are_left_unconsumed():
    report, rest = parse_report_with_rest(tokenize("METAR KLAX 150324Z 25015KT 10SM FEW020"))
    assert report.wind is not None
    assert [t.text for t in rest] == ["10", "SM", "FEW", "020"]


def test_unknown_report_type_fails_in_report_type_rule():
    with pytest.raises(StructuralParseError) as excinfo:
        _parse("CATGIRL KLAX 150324Z")
    err = excinfo.value
    assert err.rule == "reportType"
    assert err.fragment == "CATGIRL"
    assert err.position == 0


@pytest.mark.parametrize(
    ("text", "rule", "fragment"),
    [
        ("", "reportType", ""),
        ("METAR LAX 150324Z", "station", "LAX"),
        ("METAR KLAX", "timestamp", ""),
        ("METAR KLAX 15032Z", "timestamp", "15032"),
        ("METAR KLAX 150324 25015KT", "timestamp", "25015"),
        ("METAR KLAX 150324Z 25015XX", "windGroup", "XX"),
        ("METAR KLAX 150324Z 25015", "windGroup", ""),
        ("METAR KLAX 150324Z VRB KT", "windGroup", "KT"),
        ("METAR KLAX 150324Z 25015G5KT", "windGroup", "5"),
        ("METAR KLAX 150324Z 25015KT 220V28", "windGroup", "28"),
    ],
)
def test_structural_failures_name_the_rule(text, rule, fragment):
    with pytest.raises(StructuralParseError) as excinfo:
        _parse(text)
    assert excinfo.value.rule == rule
    assert excinfo.value.fragment == fragment


def test_end_of_input_failure_has_no_token():
    with pytest.raises(StructuralParseError) as excinfo:
        _parse("METAR KLAX")
    assert excinfo.value.token_kind is None
    assert "end of input" in str(excinfo.value)


def test_rules_do_not_mutate_the_cursor():
    cursor = Cursor(tuple(tokenize("KLAX")))
    outcome = station(cursor)
    assert isinstance(outcome, Ok)
    after, value = outcome.value
    assert value == "KLAX"
    assert cursor.position == 0
    assert after.position == 1


def test_rule_failure_is_a_value():
    outcome = station(Cursor(tuple(tokenize("123"))))
    assert isinstance(outcome, Err)
    assert outcome.error.rule == "station"


def test_wind_alternatives_are_tried_in_contract_order():
    assert [name for name, _gate, _handler in WIND_PREFIX_ALTERNATIVES] == ["dddff", "VRBff"]


def test_independent_parses_are_identical():
    text = "METAR KLAX 150324Z AUTO 25015G25KT 220V280"
    assert _parse(text) == _parse(text)
