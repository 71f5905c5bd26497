import pytest

from libcatalog.hooks import hooks
from libcatalog.services import CatalogBrowser, MutationPipeline
from libcatalog.storage import InMemoryStore, SQLiteStore, StoreConfig


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        backend = InMemoryStore()
    else:
        backend = SQLiteStore(StoreConfig.from_dsn(f"sqlite:///{tmp_path / 'catalog.db'}"))
    yield backend
    backend.close()


@pytest.fixture(autouse=True)
def clear_hooks():
    hooks.clear()
    yield
    hooks.clear()


@pytest.fixture
def pipeline(store):
    return MutationPipeline(store)


@pytest.fixture
def browser(store):
    return CatalogBrowser(store)


@pytest.fixture
def make(pipeline):
    """Create an entity through the pipeline and return its identity."""

    def _make(kind, **fields):
        result = pipeline.validate_and_create(kind, fields)
        assert result.status == "committed", result
        return result.identity

    return _make
