"""
Catalog example walking through create, dedup, guarded delete and browsing.
"""

from __future__ import annotations

from typing import Any, Dict, List

from libcatalog import CatalogSettings, Committed, EntityKind, create_catalog
from libcatalog.config import Catalog
from libcatalog.services import CatalogBrowser, MutationPipeline


def bootstrap_catalog(dsn: str = "memory://") -> Catalog:
    return create_catalog(CatalogSettings(dsn=dsn))


def _commit(pipeline: MutationPipeline, kind: EntityKind, fields: Dict[str, Any]) -> str:
    result = pipeline.validate_and_create(kind, fields)
    if not isinstance(result, Committed):
        raise RuntimeError(f"Seeding {kind} failed: {result.as_dict()}")
    return result.identity


def seed_sample_data(pipeline: MutationPipeline) -> Dict[str, List[str]]:
    authors = [
        _commit(
            pipeline,
            EntityKind.AUTHOR,
            {"first_name": "Octavia", "family_name": "Butler", "date_of_birth": "1947-06-22"},
        ),
        _commit(
            pipeline, EntityKind.AUTHOR, {"first_name": "Haruki", "family_name": "Murakami"}
        ),
    ]
    genres = [
        _commit(pipeline, EntityKind.GENRE, {"name": name})
        for name in ("Science Fiction", "Magical Realism", "Fantasy")
    ]
    books = [
        _commit(
            pipeline,
            EntityKind.BOOK,
            {
                "title": "Kindred",
                "author": authors[0],
                "summary": "A writer is pulled back in time to antebellum Maryland.",
                "isbn": "9780807083697",
                "genre": genres[0],
            },
        ),
        _commit(
            pipeline,
            EntityKind.BOOK,
            {
                "title": "Kafka on the Shore",
                "author": authors[1],
                "summary": "A runaway boy and an old man drift towards each other.",
                "isbn": "9781400079278",
                "genre": [genres[1], genres[2]],
            },
        ),
    ]
    copies = [
        _commit(
            pipeline,
            EntityKind.BOOK_INSTANCE,
            {"book": books[0], "imprint": "Beacon Press, 2003", "status": "Available"},
        ),
        _commit(
            pipeline,
            EntityKind.BOOK_INSTANCE,
            {
                "book": books[1],
                "imprint": "Vintage 2006",
                "status": "Loaned",
                "due_back": "2026-11-01",
            },
        ),
    ]
    return {"authors": authors, "genres": genres, "books": books, "copies": copies}


def fetch_books_with_authors(browser: CatalogBrowser) -> List[Dict[str, Any]]:
    result: List[Dict[str, Any]] = []
    for listing in browser.list_books():
        detail = browser.book_detail(listing.book.id or "")
        result.append(
            {
                "title": listing.book.title,
                "author": listing.author.name if listing.author else None,
                "genres": [genre.name for genre in detail.genres],
                "copies": len(detail.instances),
            }
        )
    return result


def run_demo(dsn: str = "memory://") -> List[Dict[str, Any]]:
    with bootstrap_catalog(dsn) as catalog:
        seed_sample_data(catalog.pipeline)
        return fetch_books_with_authors(catalog.browser)


if __name__ == "__main__":
    feed = run_demo("sqlite:///catalog_demo.db")
    for entry in feed:
        print(f"{entry['title']} by {entry['author']} [{', '.join(entry['genres'])}]")
