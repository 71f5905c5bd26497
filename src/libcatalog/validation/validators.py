"""
Built-in validator helpers.

A validator is a callable taking the trimmed field value and raising
``ValueError`` with a user-facing message when the value is unacceptable.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Protocol

from ..core.entities import parse_iso_date

# Words start with an uppercase letter followed by lowercase letters and are
# separated by a single space or hyphen. Apostrophes and other punctuation are
# not separators, so "O'brien" is rejected.
CAPITALIZED_WORDS_PATTERN = r"^[A-Z][a-z]*(?:[-\s][A-Z][a-z]*)*$"


class Validator(Protocol):
    def __call__(self, value: Any) -> None: ...


class MinLengthValidator:
    def __init__(self, minimum: int, message: str | None = None) -> None:
        self.minimum = minimum
        self.message = message or f"Ensure this value has at least {minimum} characters."

    def __call__(self, value: Any) -> None:
        if len(value or "") < self.minimum:
            raise ValueError(self.message)


class MaxLengthValidator:
    def __init__(self, maximum: int, message: str | None = None) -> None:
        self.maximum = maximum
        self.message = message or f"Ensure this value has at most {maximum} characters."

    def __call__(self, value: Any) -> None:
        if len(value or "") > self.maximum:
            raise ValueError(self.message)


class RegexValidator:
    def __init__(self, pattern: str, message: str | None = None) -> None:
        self.pattern = re.compile(pattern)
        self.message = message or "Value does not match required pattern."

    def __call__(self, value: Any) -> None:
        if not isinstance(value, str):
            raise ValueError("Value must be a string for RegexValidator.")
        if not self.pattern.match(value):
            raise ValueError(self.message)


class CapitalizedWordsValidator(RegexValidator):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            CAPITALIZED_WORDS_PATTERN,
            message
            or "The first character must be capitalized, as well as the first character "
            "after a space or special character",
        )


class AlphaNumericMixValidator:
    """
    Require at least one letter and at least one digit, e.g. a publisher name
    followed by a year.
    """

    def __init__(self, message: str | None = None) -> None:
        self.message = message or "Value must contain both letters and numbers."

    def __call__(self, value: Any) -> None:
        text = value or ""
        has_alpha = any(ch.isalpha() for ch in text)
        has_digit = any(ch.isdigit() for ch in text)
        if not (has_alpha and has_digit):
            raise ValueError(self.message)


class ISODateValidator:
    def __init__(self, message: str | None = None) -> None:
        self.message = message or "Invalid date"

    def __call__(self, value: Any) -> None:
        try:
            parse_iso_date(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(self.message) from exc


class ChoiceValidator:
    def __init__(self, choices: Iterable[str], message: str | None = None) -> None:
        self.choices = tuple(choices)
        self.message = message or f"Value must be one of: {', '.join(self.choices)}."

    def __call__(self, value: Any) -> None:
        if value not in self.choices:
            raise ValueError(self.message)
