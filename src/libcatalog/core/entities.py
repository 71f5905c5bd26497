"""
Entity types for the catalog and the helpers that move them in and out of
store documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Type, TypeVar


class EntityKind(str, Enum):
    """
    The four kinds of record held in the catalog.
    """

    AUTHOR = "Author"
    GENRE = "Genre"
    BOOK = "Book"
    BOOK_INSTANCE = "BookInstance"

    @classmethod
    def _missing_(cls, value: object) -> Optional["EntityKind"]:
        if isinstance(value, str):
            normalized = value.replace("_", "").replace(" ", "").lower()
            for member in cls:
                if member.value.lower() == normalized:
                    return member
        return None

    @property
    def url_segment(self) -> str:
        return self.value.lower()

    @property
    def entity_class(self) -> Type["Entity"]:
        return ENTITY_CLASSES[self]

    def __str__(self) -> str:
        return self.value


class BookStatus(str, Enum):
    AVAILABLE = "Available"
    MAINTENANCE = "Maintenance"
    LOANED = "Loaned"
    RESERVED = "Reserved"

    @classmethod
    def choices(cls) -> List[str]:
        return [member.value for member in cls]


def format_date_medium(value: Optional[date]) -> str:
    """Render ``value`` like ``Oct 9, 2026``; empty string when unset."""
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def parse_iso_date(value: Any) -> Optional[date]:
    """
    Parse an ISO 8601 date (or date-time, truncated to its date).

    Raises ``ValueError`` for malformed input; falsy input yields ``None``.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        # Date-time forms; a trailing "Z" is not accepted by older interpreters.
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text).date()


TEntity = TypeVar("TEntity", bound="Entity")


@dataclass
class Entity:
    """
    Base class for catalog records.

    ``id`` is assigned by the store on insert and never changes afterwards.
    """

    kind: ClassVar[EntityKind]
    date_fields: ClassVar[tuple[str, ...]] = ()

    id: Optional[str] = field(default=None, kw_only=True)

    @property
    def url(self) -> str:
        return f"/catalog/{self.kind.url_segment}/{self.id}"

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["url"] = self.url
        return data

    def to_document(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {}
        for f in fields(self):
            if f.name == "id":
                continue
            value = getattr(self, f.name)
            if f.name in self.date_fields and value is not None:
                value = value.isoformat()
            elif isinstance(value, list):
                value = list(value)
            document[f.name] = value
        return document

    @classmethod
    def from_document(cls: Type[TEntity], identity: str, document: Mapping[str, Any]) -> TEntity:
        known = {f.name for f in fields(cls)} - {"id"}
        values: Dict[str, Any] = {}
        for key, value in document.items():
            if key not in known:
                continue
            if key in cls.date_fields:
                value = parse_iso_date(value)
            values[key] = value
        return cls(id=identity, **values)


@dataclass
class Author(Entity):
    kind: ClassVar[EntityKind] = EntityKind.AUTHOR
    date_fields: ClassVar[tuple[str, ...]] = ("date_of_birth", "date_of_death")

    first_name: str = ""
    family_name: str = ""
    date_of_birth: Optional[date] = None
    date_of_death: Optional[date] = None

    @property
    def name(self) -> str:
        # Only a complete name is shown; a partial one renders as empty.
        if self.first_name and self.family_name:
            return f"{self.family_name}, {self.first_name}"
        return ""

    @property
    def birth_date_formatted(self) -> str:
        return format_date_medium(self.date_of_birth)

    @property
    def death_date_formatted(self) -> str:
        return format_date_medium(self.date_of_death)

    @property
    def lifespan(self) -> str:
        return f"{self.birth_date_formatted} - {self.death_date_formatted}"

    @property
    def date_of_birth_iso(self) -> str:
        return self.date_of_birth.isoformat() if self.date_of_birth else ""

    @property
    def date_of_death_iso(self) -> str:
        return self.date_of_death.isoformat() if self.date_of_death else ""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["name"] = self.name
        data["lifespan"] = self.lifespan
        return data


@dataclass
class Genre(Entity):
    kind: ClassVar[EntityKind] = EntityKind.GENRE

    name: str = ""


@dataclass
class Book(Entity):
    kind: ClassVar[EntityKind] = EntityKind.BOOK

    title: str = ""
    author: str = ""
    summary: str = ""
    isbn: str = ""
    genre: List[str] = field(default_factory=list)


@dataclass
class BookInstance(Entity):
    kind: ClassVar[EntityKind] = EntityKind.BOOK_INSTANCE
    date_fields: ClassVar[tuple[str, ...]] = ("due_back",)

    book: str = ""
    imprint: str = ""
    status: str = BookStatus.MAINTENANCE.value
    due_back: Optional[date] = field(default_factory=date.today)

    @property
    def due_back_formatted(self) -> str:
        return format_date_medium(self.due_back) or "N/A"

    @property
    def due_back_iso(self) -> str:
        return self.due_back.isoformat() if self.due_back else ""


ENTITY_CLASSES: Dict[EntityKind, Type[Entity]] = {
    EntityKind.AUTHOR: Author,
    EntityKind.GENRE: Genre,
    EntityKind.BOOK: Book,
    EntityKind.BOOK_INSTANCE: BookInstance,
}


def entity_from_row(kind: EntityKind | str, row: tuple[str, Mapping[str, Any]]) -> Entity:
    identity, document = row
    return EntityKind(kind).entity_class.from_document(identity, document)
