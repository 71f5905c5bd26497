"""
Read-side queries backing the catalog's list, detail and form pages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..core.entities import (
    Author,
    Book,
    BookInstance,
    BookStatus,
    Entity,
    EntityKind,
    Genre,
    entity_from_row,
)
from ..errors import NotFoundError
from ..query import Q
from ..storage.base import DocumentStore
from ..utils import gather, get_logger
from ..utils.concurrency import DEFAULT_MAX_WORKERS


@dataclass
class CatalogSummary:
    book_count: int
    book_instance_count: int
    book_instance_available_count: int
    author_count: int
    genre_count: int


@dataclass
class BookListing:
    book: Book
    author: Optional[Author]


@dataclass
class BookInstanceListing:
    instance: BookInstance
    book: Optional[Book]


@dataclass
class AuthorDetail:
    author: Author
    books: List[Book]


@dataclass
class GenreDetail:
    genre: Genre
    books: List[Book]


@dataclass
class BookDetail:
    book: Book
    author: Optional[Author]
    genres: List[Genre]
    instances: List[BookInstance]


@dataclass
class BookInstanceDetail:
    instance: BookInstance
    book: Optional[Book]


@dataclass
class GenreChoice:
    genre: Genre
    checked: bool = False


@dataclass
class BookFormChoices:
    authors: List[Author]
    genres: List[GenreChoice] = field(default_factory=list)


class CatalogBrowser:
    """
    Fan-out reads over the document store. Related reads are issued
    together; they are not guaranteed to see the same snapshot.
    """

    def __init__(self, store: DocumentStore, *, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        self.store = store
        self.max_workers = max_workers
        self.logger = get_logger("services.browse")

    # ------------------------------------------------------------------ #
    def summary(self) -> CatalogSummary:
        counts = gather(
            lambda: self.store.count(EntityKind.BOOK),
            lambda: self.store.count(EntityKind.BOOK_INSTANCE),
            lambda: self.store.count(
                EntityKind.BOOK_INSTANCE, Q(status=BookStatus.AVAILABLE.value)
            ),
            lambda: self.store.count(EntityKind.AUTHOR),
            lambda: self.store.count(EntityKind.GENRE),
            max_workers=self.max_workers,
        )
        return CatalogSummary(*counts)

    # ------------------------------------------------------------------ #
    # Lists
    # ------------------------------------------------------------------ #
    def list_authors(self) -> List[Author]:
        return self._all(EntityKind.AUTHOR, order_by=("family_name",))  # type: ignore[return-value]

    def list_genres(self) -> List[Genre]:
        return self._all(EntityKind.GENRE, order_by=("name",))  # type: ignore[return-value]

    def list_books(self) -> List[BookListing]:
        books, authors = gather(
            lambda: self._all(EntityKind.BOOK, order_by=("title",)),
            lambda: self._all(EntityKind.AUTHOR),
            max_workers=self.max_workers,
        )
        by_id = _index(authors)
        return [BookListing(book=book, author=by_id.get(book.author)) for book in books]

    def list_book_instances(self) -> List[BookInstanceListing]:
        instances, books = gather(
            lambda: self._all(EntityKind.BOOK_INSTANCE),
            lambda: self._all(EntityKind.BOOK),
            max_workers=self.max_workers,
        )
        by_id = _index(books)
        return [
            BookInstanceListing(instance=instance, book=by_id.get(instance.book))
            for instance in instances
        ]

    # ------------------------------------------------------------------ #
    # Details
    # ------------------------------------------------------------------ #
    def author_detail(self, identity: str) -> AuthorDetail:
        author, books = gather(
            lambda: self._get(EntityKind.AUTHOR, identity),
            lambda: self._all(EntityKind.BOOK, Q(author=identity), ("title",)),
            max_workers=self.max_workers,
        )
        return AuthorDetail(author=self._require(EntityKind.AUTHOR, identity, author), books=books)

    def genre_detail(self, identity: str) -> GenreDetail:
        genre, books = gather(
            lambda: self._get(EntityKind.GENRE, identity),
            lambda: self._all(EntityKind.BOOK, Q(genre__contains=identity), ("title",)),
            max_workers=self.max_workers,
        )
        return GenreDetail(genre=self._require(EntityKind.GENRE, identity, genre), books=books)

    def book_detail(self, identity: str) -> BookDetail:
        book, instances = gather(
            lambda: self._get(EntityKind.BOOK, identity),
            lambda: self._all(EntityKind.BOOK_INSTANCE, Q(book=identity)),
            max_workers=self.max_workers,
        )
        book = self._require(EntityKind.BOOK, identity, book)
        genre_ids = list(book.genre)
        calls = [lambda: self._get(EntityKind.AUTHOR, book.author)]
        calls.extend(
            (lambda genre_id=genre_id: self._get(EntityKind.GENRE, genre_id)) for genre_id in genre_ids
        )
        author, *genres = gather(*calls, max_workers=self.max_workers)
        return BookDetail(
            book=book,
            author=author,
            genres=[genre for genre in genres if genre is not None],
            instances=instances,
        )

    def book_instance_detail(self, identity: str) -> BookInstanceDetail:
        instance = self._require(
            EntityKind.BOOK_INSTANCE, identity, self._get(EntityKind.BOOK_INSTANCE, identity)
        )
        return BookInstanceDetail(instance=instance, book=self._get(EntityKind.BOOK, instance.book))

    # ------------------------------------------------------------------ #
    # Forms
    # ------------------------------------------------------------------ #
    def book_form_choices(self, selected_genres: Iterable[str] = ()) -> BookFormChoices:
        """
        Authors and genres for the book form, with the selected genres
        marked as checked.
        """
        selected = set(selected_genres)
        authors, genres = gather(
            self.list_authors,
            self.list_genres,
            max_workers=self.max_workers,
        )
        return BookFormChoices(
            authors=authors,
            genres=[GenreChoice(genre=genre, checked=genre.id in selected) for genre in genres],
        )

    def book_instance_form_choices(self) -> List[Book]:
        return self._all(EntityKind.BOOK, order_by=("title",))  # type: ignore[return-value]

    # ------------------------------------------------------------------ #
    def _get(self, kind: EntityKind, identity: str) -> Optional[Entity]:
        if not identity:
            return None
        document = self.store.find_by_id(kind, identity)
        if document is None:
            return None
        return kind.entity_class.from_document(identity, document)

    def _all(self, kind: EntityKind, where: Q | None = None, order_by: tuple[str, ...] = ()) -> List:
        return [entity_from_row(kind, row) for row in self.store.find_all(kind, where, order_by)]

    def _require(self, kind: EntityKind, identity: str, entity: Optional[Entity]):
        if entity is None:
            self.logger.info("%s %s not found", kind, identity)
            raise NotFoundError(kind, identity)
        return entity


def _index(entities: Iterable[Entity]) -> Dict[str, Entity]:
    return {entity.id: entity for entity in entities if entity.id is not None}
