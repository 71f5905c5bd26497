"""
Environment-driven settings and the application factory.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .services import CatalogBrowser, MutationPipeline
from .storage import DocumentStore, StoreConfigurationError, open_store
from .utils.concurrency import DEFAULT_MAX_WORKERS
from .utils.logging import configure_logging, get_logger

ENV_PREFIX = "LIBCATALOG_"


def _int_setting(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise StoreConfigurationError(f"Invalid integer value for '{key}': {raw!r}") from exc
    if value < 1:
        raise StoreConfigurationError(f"'{key}' must be a positive integer, got {value}")
    return value


def _level_setting(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise StoreConfigurationError(f"Unknown log level for '{key}': {raw!r}")
    return level


@dataclass
class CatalogSettings:
    """
    Runtime settings.

    ``LIBCATALOG_DSN``            store DSN (``memory://`` or ``sqlite:///path``)
    ``LIBCATALOG_LOG_LEVEL``      logging level name or number
    ``LIBCATALOG_SLOW_CALL_MS``   store calls slower than this log at WARNING
    ``LIBCATALOG_FANOUT_WORKERS`` thread pool size for concurrent reads
    """

    dsn: str = "memory://"
    log_level: int = logging.INFO
    slow_call_ms: int = 100
    fanout_workers: int = DEFAULT_MAX_WORKERS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CatalogSettings":
        env = os.environ if environ is None else environ
        return cls(
            dsn=env.get(f"{ENV_PREFIX}DSN") or cls.dsn,
            log_level=_level_setting(env, f"{ENV_PREFIX}LOG_LEVEL", cls.log_level),
            slow_call_ms=_int_setting(env, f"{ENV_PREFIX}SLOW_CALL_MS", cls.slow_call_ms),
            fanout_workers=_int_setting(env, f"{ENV_PREFIX}FANOUT_WORKERS", cls.fanout_workers),
        )

    def open_store(self) -> DocumentStore:
        return open_store(self.dsn, slow_call_ms=self.slow_call_ms)


@dataclass
class Catalog:
    """
    Wiring of one store with the pipeline and browser that use it.
    """

    settings: CatalogSettings
    store: DocumentStore
    pipeline: MutationPipeline
    browser: CatalogBrowser

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "Catalog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_catalog(
    settings: Optional[CatalogSettings] = None,
    *,
    store: Optional[DocumentStore] = None,
) -> Catalog:
    settings = settings or CatalogSettings.from_env()
    configure_logging(settings.log_level)
    store = store or settings.open_store()
    get_logger("config").info("Catalog ready (fan-out workers: %d)", settings.fanout_workers)
    return Catalog(
        settings=settings,
        store=store,
        pipeline=MutationPipeline(store, max_workers=settings.fanout_workers),
        browser=CatalogBrowser(store, max_workers=settings.fanout_workers),
    )
