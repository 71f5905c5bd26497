import pytest

from libcatalog.core import EntityKind
from libcatalog.errors import NotFoundError
from libcatalog.services import Committed, Failed, MutationPipeline, Rejected
from libcatalog.storage import InMemoryStore, StoreExecutionError


@pytest.mark.parametrize(
    "fields",
    [
        {"first_name": "Mary", "family_name": "Shelley"},
        {"first_name": "Mary-Anne", "family_name": "Evans", "date_of_birth": "1819-11-22"},
        {"first_name": "Ursula", "family_name": "Le Guin"},
    ],
)
def test_valid_author_is_committed(pipeline, store, fields):
    result = pipeline.validate_and_create("Author", fields)
    assert isinstance(result, Committed)
    assert result.status == "committed"
    assert result.created is True
    assert result.reference == f"/catalog/author/{result.identity}"
    assert store.find_by_id(EntityKind.AUTHOR, result.identity)["first_name"] == fields["first_name"]


@pytest.mark.parametrize("name", ["", "A", "Ab"])
def test_short_genre_is_rejected_with_length_message(pipeline, store, name):
    result = pipeline.validate_and_create("Genre", {"name": name})
    assert isinstance(result, Rejected)
    assert result.status == "rejected"
    assert "Genre name must at least 3 characters" in [e.message for e in result.errors]
    assert store.count(EntityKind.GENRE) == 0


@pytest.mark.parametrize("length, status", [(100, "committed"), (101, "rejected")])
def test_author_name_of_maximum_length_commits(pipeline, length, status):
    name = "A" + "a" * (length - 1)
    result = pipeline.validate_and_create("Author", {"first_name": name, "family_name": name})
    assert result.status == status


@pytest.mark.parametrize("name, status", [("Sc", "rejected"), ("Sci", "committed")])
def test_genre_name_of_minimum_length_commits(pipeline, name, status):
    assert pipeline.validate_and_create("Genre", {"name": name}).status == status


def test_rejected_result_echoes_normalized_candidate(pipeline):
    result = pipeline.validate_and_create(
        "Author", {"first_name": "  mary ", "family_name": "shelley", "date_of_birth": "yesterday"}
    )
    assert isinstance(result, Rejected)
    assert result.candidate.first_name == "mary"
    assert [e.field for e in result.errors] == ["first_name", "family_name", "date_of_birth"]
    payload = result.as_dict()
    assert payload["status"] == "rejected"
    assert payload["errors"][0] == {"field": "first_name", "message": result.errors[0].message}


def test_book_with_unknown_references_is_rejected(pipeline, make, store):
    genre = make("Genre", name="Fantasy")
    result = pipeline.validate_and_create(
        "Book",
        {
            "title": "Dune",
            "author": "nobody",
            "summary": "Sand",
            "isbn": "9780441013593",
            "genre": [genre, "ghost"],
        },
    )
    assert isinstance(result, Rejected)
    assert [(e.field, e.message) for e in result.errors] == [
        ("author", "Author 'nobody' does not exist."),
        ("genre", "Genre 'ghost' does not exist."),
    ]
    assert store.count(EntityKind.BOOK) == 0


def test_reference_errors_keep_rule_order(pipeline):
    result = pipeline.validate_and_create(
        "Book", {"title": "Dune", "author": "nobody", "summary": "", "isbn": "1"}
    )
    assert [e.field for e in result.errors] == ["author", "summary", "isbn"]


def test_book_genre_scalar_is_stored_as_list(pipeline, make, store):
    author = make("Author", first_name="Frank", family_name="Herbert")
    genre = make("Genre", name="Science Fiction")
    result = pipeline.validate_and_create(
        "Book",
        {"title": "Dune", "author": author, "summary": "Sand", "isbn": "9780441013593", "genre": genre},
    )
    assert isinstance(result, Committed)
    assert store.find_by_id(EntityKind.BOOK, result.identity)["genre"] == [genre]


def test_update_preserves_identity(pipeline, make, store):
    author = make("Author", first_name="Mary", family_name="Godwin")
    result = pipeline.validate_and_update(
        "Author", author, {"first_name": "Mary", "family_name": "Shelley"}
    )
    assert isinstance(result, Committed)
    assert result.identity == author
    assert result.created is False
    assert store.count(EntityKind.AUTHOR) == 1
    assert store.find_by_id(EntityKind.AUTHOR, author)["family_name"] == "Shelley"


def test_rejected_update_leaves_record_untouched(pipeline, make, store):
    author = make("Author", first_name="Mary", family_name="Shelley")
    result = pipeline.validate_and_update("Author", author, {"first_name": "", "family_name": "Shelley"})
    assert isinstance(result, Rejected)
    assert result.candidate.id == author
    assert store.find_by_id(EntityKind.AUTHOR, author)["first_name"] == "Mary"


def test_update_of_missing_identity_raises_not_found(pipeline):
    with pytest.raises(NotFoundError):
        pipeline.validate_and_update("Genre", "missing", {"name": "Horror"})


def test_genre_rename_collision_is_not_deduplicated(pipeline, make, store):
    make("Genre", name="Fantasy")
    horror = make("Genre", name="Horror")
    result = pipeline.validate_and_update("Genre", horror, {"name": "Fantasy"})
    assert isinstance(result, Committed)
    assert result.identity == horror
    assert store.count(EntityKind.GENRE) == 2


class FailingStore(InMemoryStore):
    def insert(self, kind, document):
        raise StoreExecutionError("disk full")

    def update(self, kind, identity, document):
        raise StoreExecutionError("disk full")


def test_store_failures_become_failed_results():
    store = FailingStore()
    pipeline = MutationPipeline(store)
    result = pipeline.validate_and_create("Genre", {"name": "Horror"})
    assert isinstance(result, Failed)
    assert result.as_dict() == {"status": "failed", "reason": "disk full"}
    assert store.count(EntityKind.GENRE) == 0

    identity = InMemoryStore.insert(store, EntityKind.GENRE, {"name": "Horror"})
    result = pipeline.validate_and_update("Genre", identity, {"name": "Gothic Horror"})
    assert isinstance(result, Failed)
    assert store.find_by_id(EntityKind.GENRE, identity) == {"name": "Horror"}


class AnonymousInsertStore(InMemoryStore):
    def insert(self, kind, document):
        super().insert(kind, document)
        return ""


def test_insert_without_identity_is_a_failure():
    result = MutationPipeline(AnonymousInsertStore()).validate_and_create("Genre", {"name": "Horror"})
    assert isinstance(result, Failed)
    assert result.reason == "Store returned no identity for new Genre"
