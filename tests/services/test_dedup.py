import threading

from libcatalog.core import EntityKind
from libcatalog.services import Committed, GenreMatcher, MutationPipeline


def test_case_variant_create_returns_existing_genre(pipeline, store):
    first = pipeline.validate_and_create("Genre", {"name": "Fantasy"})
    # The capitalization rule rejects "fantasy", so use an accepted variant
    # that differs only in case from what is stored.
    store.update(EntityKind.GENRE, first.identity, {"name": "FANTASY"})
    second = pipeline.validate_and_create("Genre", {"name": "Fantasy"})

    assert isinstance(second, Committed)
    assert second.identity == first.identity
    assert second.reference == first.reference
    assert second.created is False
    assert second.deduplicated is True
    assert store.count(EntityKind.GENRE) == 1


def test_identical_create_is_idempotent(pipeline, store):
    results = [pipeline.validate_and_create("Genre", {"name": "Science Fiction"}) for _ in range(3)]
    assert len({result.identity for result in results}) == 1
    assert [result.created for result in results] == [True, False, False]
    assert store.count(EntityKind.GENRE) == 1


def test_matcher_respects_accents(store):
    store.insert(EntityKind.GENRE, {"name": "Noir"})
    matcher = GenreMatcher(store)
    assert matcher.find_existing("NOIR").name == "Noir"
    assert matcher.find_existing("Noïr") is None


def test_concurrent_creates_may_race(store):
    """
    The lookup and the insert are separate calls; when both requests read
    before either writes, both insert.
    """
    barrier = threading.Barrier(2)

    class RacingMatcher(GenreMatcher):
        def find_existing(self, name):
            found = super().find_existing(name)
            barrier.wait(timeout=5)
            return found

    pipeline = MutationPipeline(store)
    pipeline.matcher = RacingMatcher(store)
    results = []
    threads = [
        threading.Thread(
            target=lambda: results.append(pipeline.validate_and_create("Genre", {"name": "Horror"}))
        )
        for _ in range(2)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert all(isinstance(result, Committed) for result in results)
    assert store.count(EntityKind.GENRE) == 2


def test_lowercase_variant_fails_capitalization_before_matching(pipeline, store):
    pipeline.validate_and_create("Genre", {"name": "Fantasy"})
    result = pipeline.validate_and_create("Genre", {"name": "fantasy"})
    assert result.status == "rejected"
    assert store.count(EntityKind.GENRE) == 1
