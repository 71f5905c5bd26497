"""
Validation utilities exposed at the package level.
"""

from .errors import FieldError, ValidationError
from .pipeline import clean_fields, validate_fields
from .rules import RULES, FieldRule, rules_for
from .validators import (
    AlphaNumericMixValidator,
    CapitalizedWordsValidator,
    ChoiceValidator,
    ISODateValidator,
    MaxLengthValidator,
    MinLengthValidator,
    RegexValidator,
)

__all__ = [
    "FieldError",
    "FieldRule",
    "RULES",
    "ValidationError",
    "clean_fields",
    "rules_for",
    "validate_fields",
    "AlphaNumericMixValidator",
    "CapitalizedWordsValidator",
    "ChoiceValidator",
    "ISODateValidator",
    "MaxLengthValidator",
    "MinLengthValidator",
    "RegexValidator",
]
