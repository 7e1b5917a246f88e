"""Declarative request validation built from chained field rules.

Each :class:`FieldRule` applies its sanitisers and checks to one field of a
request payload in the order they were declared, so a check only sees the
sanitisers chained before it. Checks never short-circuit each other, so a
single pass reports all failures for all fields in declaration order.

Example
-------
>>> validator = Validator(
...     FieldRule("email_id").trim().required("Email must be specified.").email("Email is invalid."),
...     FieldRule("password").trim().min_length(6, "Password too short."),
... )
>>> cleaned, errors = validator.validate({"email_id": " a@b.io ", "password": "x"})
>>> [e.message for e in errors]
['Password too short.']
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from email_validator import EmailNotValidError, validate_email

from .errors import FieldError, ValidationFailed

Check = Callable[[str], bool]
Sanitizer = Callable[[str], str]

_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
    "\\": "&#x5C;",
    "`": "&#96;",
}


def escape_html(value: str) -> str:
    """Replace HTML-significant characters with their entities."""
    return "".join(_ESCAPES.get(char, char) for char in value)


def is_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


class FieldRule:
    """Sanitisers and checks for a single named payload field, applied in declaration order."""

    def __init__(self, name: str) -> None:
        self.name = name
        # (sanitizer, None) or (check, message)
        self._steps: list[tuple[Callable[[str], Any], str | None]] = []

    def trim(self) -> "FieldRule":
        return self._sanitizer(str.strip)

    def escape(self) -> "FieldRule":
        return self._sanitizer(escape_html)

    def required(self, message: str) -> "FieldRule":
        return self.min_length(1, message)

    def min_length(self, length: int, message: str) -> "FieldRule":
        return self.must(lambda value: len(value) >= length, message)

    def alphanumeric(self, message: str) -> "FieldRule":
        return self.must(lambda value: value.isascii() and value.isalnum(), message)

    def email(self, message: str) -> "FieldRule":
        return self.must(is_email, message)

    def must(self, predicate: Check, message: str) -> "FieldRule":
        """Register a custom predicate; the field fails with ``message`` when it returns false."""
        self._steps.append((predicate, message))
        return self

    def _sanitizer(self, sanitizer: Sanitizer) -> "FieldRule":
        self._steps.append((sanitizer, None))
        return self

    def run(self, raw: Any) -> tuple[str, list[FieldError]]:
        """Return the final sanitised value and the failures of every check.

        A check sees the value as left by the sanitisers declared before it.
        """
        value = "" if raw is None else str(raw)
        errors: list[FieldError] = []
        for step, message in self._steps:
            if message is None:
                value = step(value)
            elif not step(value):
                errors.append(FieldError(field=self.name, message=message))
        return value, errors


class Validator:
    """Ordered collection of field rules evaluated as one pipeline."""

    def __init__(self, *rules: FieldRule) -> None:
        self._rules = rules

    def validate(self, payload: Mapping[str, Any]) -> tuple[dict[str, str], list[FieldError]]:
        """Return the sanitised values of every declared field and all accumulated errors."""
        cleaned: dict[str, str] = {}
        errors: list[FieldError] = []
        for rule in self._rules:
            cleaned[rule.name], field_errors = rule.run(payload.get(rule.name))
            errors.extend(field_errors)
        return cleaned, errors

    def check(self, payload: Mapping[str, Any]) -> dict[str, str]:
        """Return the sanitised payload or raise :class:`ValidationFailed`."""
        cleaned, errors = self.validate(payload)
        if errors:
            raise ValidationFailed(errors)
        return cleaned
