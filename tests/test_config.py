import logging

import pytest

from libcatalog import CatalogSettings, create_catalog
from libcatalog.storage import InMemoryStore, SQLiteStore, StoreConfigurationError


def test_defaults_without_environment():
    settings = CatalogSettings.from_env({})
    assert settings.dsn == "memory://"
    assert settings.log_level == logging.INFO
    assert settings.slow_call_ms == 100
    assert settings.fanout_workers == 4


def test_reads_prefixed_variables(tmp_path):
    settings = CatalogSettings.from_env(
        {
            "LIBCATALOG_DSN": f"sqlite:///{tmp_path / 'cfg.db'}",
            "LIBCATALOG_LOG_LEVEL": "debug",
            "LIBCATALOG_SLOW_CALL_MS": "250",
            "LIBCATALOG_FANOUT_WORKERS": "8",
        }
    )
    assert settings.log_level == logging.DEBUG
    assert settings.slow_call_ms == 250
    assert settings.fanout_workers == 8
    store = settings.open_store()
    try:
        assert isinstance(store, SQLiteStore)
    finally:
        store.close()


@pytest.mark.parametrize(
    "environ",
    [
        {"LIBCATALOG_SLOW_CALL_MS": "fast"},
        {"LIBCATALOG_FANOUT_WORKERS": "0"},
        {"LIBCATALOG_LOG_LEVEL": "chatty"},
    ],
)
def test_invalid_values_raise(environ):
    with pytest.raises(StoreConfigurationError):
        CatalogSettings.from_env(environ)


def test_numeric_log_level():
    assert CatalogSettings.from_env({"LIBCATALOG_LOG_LEVEL": "30"}).log_level == 30


def test_create_catalog_wires_shared_store():
    store = InMemoryStore()
    with create_catalog(CatalogSettings(fanout_workers=2), store=store) as catalog:
        assert catalog.pipeline.store is store
        assert catalog.browser.store is store
        assert catalog.browser.max_workers == 2
        catalog.pipeline.validate_and_create("Genre", {"name": "Horror"})
        assert catalog.browser.summary().genre_count == 1


def test_create_catalog_reads_environment(monkeypatch):
    monkeypatch.setenv("LIBCATALOG_DSN", "memory://")
    monkeypatch.setenv("LIBCATALOG_FANOUT_WORKERS", "3")
    with create_catalog() as catalog:
        assert isinstance(catalog.store, InMemoryStore)
        assert catalog.settings.fanout_workers == 3
