import threading

from libcatalog.core import EntityKind
from libcatalog.query import Q


def test_insert_assigns_identity_and_find_by_id(store):
    identity = store.insert(EntityKind.GENRE, {"name": "Fantasy"})
    assert isinstance(identity, str) and identity
    assert store.find_by_id(EntityKind.GENRE, identity) == {"name": "Fantasy"}
    assert store.find_by_id(EntityKind.GENRE, "missing") is None
    assert store.find_by_id(EntityKind.AUTHOR, identity) is None


def test_returned_documents_are_copies(store):
    identity = store.insert(EntityKind.BOOK, {"title": "Dune", "genre": ["g1"]})
    document = store.find_by_id(EntityKind.BOOK, identity)
    document["genre"].append("g2")
    assert store.find_by_id(EntityKind.BOOK, identity)["genre"] == ["g1"]


def test_find_all_filters_and_orders(store):
    store.insert(EntityKind.BOOK, {"title": "Kindred", "author": "a1", "genre": ["g1"]})
    store.insert(EntityKind.BOOK, {"title": "Dawn", "author": "a1", "genre": ["g1", "g2"]})
    store.insert(EntityKind.BOOK, {"title": "Beloved", "author": "a2", "genre": []})

    rows = store.find_all(EntityKind.BOOK, Q(author="a1"), order_by=("title",))
    assert [doc["title"] for _, doc in rows] == ["Dawn", "Kindred"]

    rows = store.find_all(EntityKind.BOOK, Q(genre__contains="g2"))
    assert [doc["title"] for _, doc in rows] == ["Dawn"]

    rows = store.find_all(EntityKind.BOOK, order_by=("-title",))
    assert [doc["title"] for _, doc in rows] == ["Kindred", "Dawn", "Beloved"]


def test_find_all_without_ordering_keeps_insertion_order(store):
    for title in ("C", "A", "B"):
        store.insert(EntityKind.BOOK, {"title": title})
    assert [doc["title"] for _, doc in store.find_all(EntityKind.BOOK)] == ["C", "A", "B"]


def test_count_with_filter(store):
    store.insert(EntityKind.BOOK_INSTANCE, {"book": "b1", "status": "Available"})
    store.insert(EntityKind.BOOK_INSTANCE, {"book": "b1", "status": "Loaned"})
    assert store.count(EntityKind.BOOK_INSTANCE) == 2
    assert store.count(EntityKind.BOOK_INSTANCE, Q(status="Available")) == 1
    assert store.count(EntityKind.AUTHOR) == 0


def test_update_and_delete_report_missing(store):
    identity = store.insert(EntityKind.GENRE, {"name": "Horror"})
    assert store.update(EntityKind.GENRE, identity, {"name": "Gothic Horror"})
    assert store.find_by_id(EntityKind.GENRE, identity) == {"name": "Gothic Horror"}
    assert not store.update(EntityKind.GENRE, "missing", {"name": "X"})

    assert store.delete(EntityKind.GENRE, identity)
    assert not store.delete(EntityKind.GENRE, identity)
    assert store.find_by_id(EntityKind.GENRE, identity) is None


def test_find_one_collated_matches_case_insensitively(store):
    first = store.insert(EntityKind.GENRE, {"name": "Science Fiction"})
    store.insert(EntityKind.GENRE, {"name": "Café Noir"})

    identity, document = store.find_one_collated(EntityKind.GENRE, "name", "SCIENCE fiction")
    assert identity == first
    assert document["name"] == "Science Fiction"
    assert store.find_one_collated(EntityKind.GENRE, "name", "café noir") is not None
    assert store.find_one_collated(EntityKind.GENRE, "name", "Cafe Noir") is None


def test_concurrent_inserts_are_all_kept(store):
    errors: list[Exception] = []
    barrier = threading.Barrier(4)

    def worker(offset: int) -> None:
        try:
            barrier.wait()
            for idx in range(25):
                store.insert(EntityKind.GENRE, {"name": f"Genre {offset}-{idx}"})
        except Exception as exc:  # pragma: no cover - failure path
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert store.count(EntityKind.GENRE) == 100
