"""
Declarative field rules and the per-kind rule tables.

Each rule knows how to turn one raw form value into a normalized value and
the list of messages for every check it failed. Rules never stop at the
first failure.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.entities import BookStatus, EntityKind, parse_iso_date
from .sanitizers import escape, to_list, trim
from .validators import (
    AlphaNumericMixValidator,
    CapitalizedWordsValidator,
    ChoiceValidator,
    ISODateValidator,
    MaxLengthValidator,
    MinLengthValidator,
    Validator,
)

# Sentinel for "leave the entity default in place".
UNSET: Any = object()


class FieldRule:
    """
    Base rule for a single form field.
    """

    def __init__(
        self,
        name: str,
        *,
        required: bool = False,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
        validators: Optional[Iterable[Validator]] = None,
        required_message: Optional[str] = None,
        min_length_message: Optional[str] = None,
        max_length_message: Optional[str] = None,
    ) -> None:
        self.name = name
        self.required = required
        self.min_length = min_length
        self.max_length = max_length
        self.extra_validators = list(validators or [])
        self.required_message = required_message or f"{name} must be specified."
        self.min_length_message = min_length_message
        self.max_length_message = max_length_message

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"

    def validators(self) -> List[Validator]:
        checks: List[Validator] = []
        if self.min_length is not None:
            checks.append(
                MinLengthValidator(self.min_length, self.min_length_message or self.required_message)
            )
        elif self.required:
            checks.append(MinLengthValidator(1, self.required_message))
        if self.max_length is not None:
            checks.append(MaxLengthValidator(self.max_length, self.max_length_message))
        checks.extend(self.extra_validators)
        return checks

    def run_validators(self, value: Any) -> List[str]:
        messages: List[str] = []
        for validator in self.validators():
            try:
                validator(value)
            except ValueError as exc:
                messages.append(str(exc))
        return messages

    def clean(self, raw: Any) -> Tuple[Any, List[str]]:
        """
        Return ``(normalized_value, messages)`` for ``raw``.
        """
        value = trim(raw)
        if not value and not self.required:
            return UNSET, []
        messages = self.run_validators(value)
        return self.to_python(value, messages), messages

    def to_python(self, value: str, messages: Sequence[str]) -> Any:
        return escape(value)


class TextRule(FieldRule):
    pass


class NameRule(TextRule):
    """
    Text that must follow the capitalized-words convention.
    """

    def __init__(self, name: str, *, capitalization_message: Optional[str] = None, **kwargs: Any) -> None:
        validators = list(kwargs.pop("validators", None) or [])
        validators.insert(0, CapitalizedWordsValidator(capitalization_message))
        super().__init__(name, validators=validators, **kwargs)


class DateRule(FieldRule):
    """
    Optional ISO 8601 date. Falsy input means "not provided".
    """

    def __init__(self, name: str, *, invalid_message: Optional[str] = None, **kwargs: Any) -> None:
        validators = list(kwargs.pop("validators", None) or [])
        validators.insert(0, ISODateValidator(invalid_message))
        super().__init__(name, validators=validators, **kwargs)

    def to_python(self, value: str, messages: Sequence[str]) -> Any:
        if messages:
            return None
        return parse_iso_date(value)


class ChoiceRule(FieldRule):
    def __init__(
        self, name: str, choices: Iterable[str], *, invalid_message: Optional[str] = None, **kwargs: Any
    ) -> None:
        self.choices = tuple(choices)
        validators = list(kwargs.pop("validators", None) or [])
        validators.insert(0, ChoiceValidator(self.choices, invalid_message))
        super().__init__(name, validators=validators, **kwargs)


class ReferenceRule(FieldRule):
    """
    Identity of another entity, e.g. the author of a book.
    """

    def __init__(self, name: str, target: EntityKind, **kwargs: Any) -> None:
        kwargs.setdefault("required", True)
        super().__init__(name, **kwargs)
        self.target = target


class ReferenceListRule(ReferenceRule):
    """
    Zero or more identities. Absent, scalar and multi-valued input are all
    normalized to a list; blank items are dropped and each item is escaped.
    """

    def __init__(self, name: str, target: EntityKind, **kwargs: Any) -> None:
        kwargs.setdefault("required", False)
        super().__init__(name, target, **kwargs)

    def clean(self, raw: Any) -> Tuple[Any, List[str]]:
        items = [trim(item) for item in to_list(raw)]
        items = [item for item in items if item]
        messages: List[str] = []
        if self.required and not items:
            messages.append(self.required_message)
        return [escape(item) for item in items], messages


_NAME_CAPS_MESSAGE = (
    "The first character of {label} must be capitalized, as well as the first "
    "character after a space or special character"
)

AUTHOR_RULES: Tuple[FieldRule, ...] = (
    NameRule(
        "first_name",
        required=True,
        min_length=1,
        max_length=100,
        required_message="First name must be specified.",
        max_length_message="First name must not exceed 100 characters.",
        capitalization_message=_NAME_CAPS_MESSAGE.format(label="a first name"),
    ),
    NameRule(
        "family_name",
        required=True,
        min_length=1,
        max_length=100,
        required_message="Family name must be specified.",
        max_length_message="Family name must not exceed 100 characters.",
        capitalization_message=_NAME_CAPS_MESSAGE.format(label="a family name"),
    ),
    DateRule("date_of_birth", invalid_message="Invalid date of birth"),
    DateRule("date_of_death", invalid_message="Invalid date of death"),
)

GENRE_RULES: Tuple[FieldRule, ...] = (
    NameRule(
        "name",
        required=True,
        min_length=3,
        required_message="Genre name must be specified.",
        min_length_message="Genre name must at least 3 characters",
        capitalization_message=_NAME_CAPS_MESSAGE.format(label="a genre name"),
    ),
)

BOOK_RULES: Tuple[FieldRule, ...] = (
    TextRule("title", required=True, min_length=1, required_message="Title must not be empty."),
    ReferenceRule("author", EntityKind.AUTHOR, required_message="Author must not be empty."),
    TextRule("summary", required=True, min_length=1, required_message="Summary must not be empty."),
    TextRule("isbn", required=True, min_length=2, required_message="ISBN must not be empty"),
    ReferenceListRule("genre", EntityKind.GENRE),
)

BOOK_INSTANCE_RULES: Tuple[FieldRule, ...] = (
    ReferenceRule("book", EntityKind.BOOK, required_message="Book must be specified."),
    TextRule(
        "imprint",
        required=True,
        min_length=2,
        required_message="Imprint must be specified.",
        validators=[
            AlphaNumericMixValidator(
                "Imprint must include both the publisher name and a date or number."
            )
        ],
    ),
    ChoiceRule("status", BookStatus.choices(), invalid_message="Invalid status."),
    DateRule("due_back", invalid_message="Invalid date"),
)

RULES: Dict[EntityKind, Tuple[FieldRule, ...]] = {
    EntityKind.AUTHOR: AUTHOR_RULES,
    EntityKind.GENRE: GENRE_RULES,
    EntityKind.BOOK: BOOK_RULES,
    EntityKind.BOOK_INSTANCE: BOOK_INSTANCE_RULES,
}


def rules_for(kind: EntityKind) -> Tuple[FieldRule, ...]:
    return RULES[EntityKind(kind)]


def reference_rules(kind: EntityKind) -> List[ReferenceRule]:
    return [rule for rule in rules_for(kind) if isinstance(rule, ReferenceRule)]
