"""Error taxonomy for tokenizing, parsing, and validating reports.

Errors are plain values inside the grammar and field decoders (carried by
``Err``) and only raised at the public entry points.
"""

from __future__ import annotations

from typing import Any


class MetarError(Exception):
    """Base class for every error surfaced by the decoder."""

    kind = "error"

    def __init__(self, message: str, fragment: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.fragment = fragment

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "fragment": self.fragment}


class LexicalError(MetarError):
    """No token class matches the input at ``position``."""

    kind = "lexical"

    def __init__(self, text: str, position: int) -> None:
        char = text[position] if position < len(text) else ""
        super().__init__(
            f"unrecognized character {char!r} at offset {position}",
            fragment=text[position : position + 16],
        )
        self.char = char
        self.position = position

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({"char": self.char, "position": self.position})
        return payload


class StructuralParseError(MetarError):
    """A grammar rule's gate or expected token class was not satisfied."""

    kind = "structural"

    def __init__(
        self,
        rule: str,
        expected: str,
        token_kind: str | None = None,
        token_text: str = "",
        position: int | None = None,
    ) -> None:
        if token_kind is None:
            found = "end of input"
        else:
            found = f"{token_kind} {token_text!r} at offset {position}"
        super().__init__(f"{rule}: expected {expected}, found {found}", fragment=token_text)
        self.rule = rule
        self.expected = expected
        self.token_kind = token_kind
        self.position = position

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update(
            {
                "rule": self.rule,
                "expected": self.expected,
                "token_kind": self.token_kind,
                "position": self.position,
            }
        )
        return payload


class ValidationError(MetarError):
    """A decoded value falls outside its accepted format or numeric range."""

    kind = "validation"

    def __init__(self, field: str, constraint: str, fragment: str = "") -> None:
        super().__init__(f"{field}: {constraint} (got {fragment!r})", fragment=fragment)
        self.field = field
        self.constraint = constraint

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({"field": self.field, "constraint": self.constraint})
        return payload


class ReportValidationError(MetarError):
    """One or more fields of a structurally valid report failed validation."""

    kind = "validation"

    def __init__(self, errors: list[ValidationError]) -> None:
        fields = ", ".join(err.field for err in errors)
        super().__init__(f"invalid fields: {fields}", fragment=errors[0].fragment if errors else "")
        self.errors = errors

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = [err.to_dict() for err in self.errors]
        return payload
