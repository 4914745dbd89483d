"""Grammar rules for the implemented FM-15 subset.

Consumes the generic token stream from ``metardecode.lexer.tokenize``.
Rules run in a fixed order and never backtrack:

    report type -> station -> timestamp -> [AUTO] -> [wind group]

Each rule is a pure function of a ``Cursor`` returning ``Ok((cursor, value))``
or ``Err(StructuralParseError)``. Optional productions are guarded by gates
(predicates over upcoming token length/text); once a gate is satisfied the
production must complete, so a wind group is either fully present or the
parse fails. Tokens after the wind group are left unconsumed.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from metardecode.errors import StructuralParseError
from metardecode.lexer import DIGITS, LETTERS, Token
from metardecode.report import (
    REPORT_TYPES,
    WIND_UNITS,
    Report,
    ReportBuilder,
    Timestamp,
    Variation,
    Wind,
)
from metardecode.result import Err, Ok, Result

RuleResult = Result[tuple["Cursor", Any], StructuralParseError]


@dataclass(frozen=True)
class Cursor:
    tokens: tuple[Token, ...]
    position: int = 0

    def peek(self, ahead: int = 0) -> Token | None:
        idx = self.position + ahead
        return self.tokens[idx] if idx < len(self.tokens) else None

    def advance(self, count: int = 1) -> Cursor:
        return Cursor(self.tokens, self.position + count)

    @property
    def rest(self) -> tuple[Token, ...]:
        return self.tokens[self.position :]


def _fail(rule: str, expected: str, token: Token | None) -> Err[StructuralParseError]:
    if token is None:
        return Err(StructuralParseError(rule, expected))
    return Err(StructuralParseError(rule, expected, token.kind, token.text, token.offset))


def _is_digits(token: Token | None, length: int) -> bool:
    return token is not None and token.kind == DIGITS and len(token.text) == length


def _is_word(token: Token | None, *words: str) -> bool:
    return token is not None and token.kind == LETTERS and token.text in words


def _expect_digits(cursor: Cursor, length: int, rule: str) -> RuleResult:
    token = cursor.peek()
    if not _is_digits(token, length):
        return _fail(rule, f"{length}-digit number", token)
    assert token is not None
    return Ok((cursor.advance(), int(token.text)))


# --------------------------------------------------------------------------- rules


def report_type(cursor: Cursor) -> RuleResult:
    """15.1 code name METAR or SPECI."""
    token = cursor.peek()
    if not _is_word(token, *REPORT_TYPES):
        return _fail("reportType", "METAR or SPECI", token)
    assert token is not None
    return Ok((cursor.advance(), token.text))


def station(cursor: Cursor) -> RuleResult:
    """15.2 ICAO station identifier."""
    token = cursor.peek()
    if token is None or token.kind != LETTERS or len(token.text) != 4:
        return _fail("station", "4-letter ICAO identifier", token)
    return Ok((cursor.advance(), token.text))


def timestamp(cursor: Cursor) -> RuleResult:
    """15.3 day/hour/minute group ``DDHHMMZ``; ranges are not checked here."""
    token = cursor.peek()
    if not _is_digits(token, 6):
        return _fail("timestamp", "6-digit DDHHMM group", token)
    marker = cursor.peek(1)
    if marker is None or marker.kind != LETTERS or marker.text.upper() != "Z":
        return _fail("timestamp", "'Z' after DDHHMM", marker)
    assert token is not None
    text = token.text
    value = Timestamp(day=int(text[0:2]), hour=int(text[2:4]), minute=int(text[4:6]))
    return Ok((cursor.advance(2), value))


def auto_flag(cursor: Cursor) -> RuleResult:
    """15.4 optional AUTO; never fails."""
    if _is_word(cursor.peek(), "AUTO"):
        return Ok((cursor.advance(), True))
    return Ok((cursor, False))


def _fixed_direction(cursor: Cursor) -> RuleResult:
    token = cursor.peek()
    assert token is not None
    fields = {"direction": int(token.text[:3]), "speed": int(token.text[3:]), "variable": False}
    return Ok((cursor.advance(), fields))


def _variable_direction(cursor: Cursor) -> RuleResult:
    speed = _expect_digits(cursor.advance(), 2, "windGroup")
    if isinstance(speed, Err):
        return speed
    after, value = speed.value
    return Ok((after, {"direction": None, "speed": value, "variable": True}))


Gate = Callable[[Cursor], bool]
Handler = Callable[[Cursor], RuleResult]

# Tried top to bottom; the first satisfied gate commits.
WIND_PREFIX_ALTERNATIVES: tuple[tuple[str, Gate, Handler], ...] = (
    ("dddff", lambda c: _is_digits(c.peek(), 5), _fixed_direction),
    ("VRBff", lambda c: _is_word(c.peek(), "VRB"), _variable_direction),
)


def _gust(cursor: Cursor) -> RuleResult:
    if not _is_word(cursor.peek(), "G"):
        return Ok((cursor, None))
    return _expect_digits(cursor.advance(), 2, "windGroup")


def _unit(cursor: Cursor) -> RuleResult:
    token = cursor.peek()
    if not _is_word(token, *WIND_UNITS):
        return _fail("windGroup", "wind unit KT or MPS", token)
    assert token is not None
    return Ok((cursor.advance(), token.text))


def _variation(cursor: Cursor) -> RuleResult:
    if not (_is_digits(cursor.peek(), 3) and _is_word(cursor.peek(1), "V")):
        return Ok((cursor, None))
    low_token = cursor.peek()
    assert low_token is not None
    low = int(low_token.text)
    high = _expect_digits(cursor.advance(2), 3, "windGroup")
    if isinstance(high, Err):
        return high
    after, value = high.value
    return Ok((after, Variation(low=low, high=value)))


def wind_group(cursor: Cursor) -> RuleResult:
    """15.5 optional wind group ``dddff[Gfmfm]KT|MPS [dndndnVdxdxdx]``.

    Returns ``Ok((cursor, None))`` unchanged when no direction/speed gate
    matches.
    """
    for _name, gate, handler in WIND_PREFIX_ALTERNATIVES:
        if gate(cursor):
            prefix = handler(cursor)
            break
    else:
        return Ok((cursor, None))

    if isinstance(prefix, Err):
        return prefix
    cursor, fields = prefix.value

    steps: tuple[tuple[str, Handler], ...] = (
        ("gust", _gust),
        ("unit", _unit),
        ("variation", _variation),
    )
    for key, step in steps:
        outcome = step(cursor)
        if isinstance(outcome, Err):
            return outcome
        cursor, fields[key] = outcome.value
    return Ok((cursor, Wind(**fields)))


# Rule name, rule, report field written on success.
REPORT_RULES: tuple[tuple[str, Callable[[Cursor], RuleResult], str], ...] = (
    ("reportType", report_type, "type"),
    ("station", station, "station"),
    ("timestamp", timestamp, "timestamp"),
    ("autoFlag", auto_flag, "auto"),
    ("windGroup", wind_group, "wind"),
)


def report_statement(cursor: Cursor) -> Result[tuple[Cursor, Report], StructuralParseError]:
    builder = ReportBuilder()
    for _name, rule, field in REPORT_RULES:
        outcome = rule(cursor)
        if isinstance(outcome, Err):
            return outcome
        cursor, value = outcome.value
        builder.set(field, value)
    return Ok((cursor, builder.build()))


def parse_report_with_rest(tokens: Sequence[Token]) -> tuple[Report, tuple[Token, ...]]:
    """Parse a report and also return the tokens the grammar did not consume."""
    outcome = report_statement(Cursor(tuple(tokens)))
    if isinstance(outcome, Err):
        raise outcome.error
    cursor, report = outcome.value
    return report, cursor.rest


def parse_report(tokens: Sequence[Token]) -> Report:
    """Parse a generic token stream into a ``Report``.

    Raises ``StructuralParseError`` naming the first rule that failed.
    Trailing, not-yet-supported groups are ignored.
    """
    report, _rest = parse_report_with_rest(tokens)
    return report
