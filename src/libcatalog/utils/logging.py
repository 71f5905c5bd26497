"""Structured logging helpers for LibCatalog."""

from __future__ import annotations

import functools
import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Iterator, Mapping, Optional, TypeVar

ROOT_LOGGER = "libcatalog"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(correlation_id)s | %(name)s | %(message)s"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

F = TypeVar("F", bound=Callable[..., Any])


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def configure_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Attach the package handler once. Later calls only adjust the level.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(CorrelationIdFilter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO if level is None else level)
    elif level is not None:
        logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def set_correlation_id(value: Optional[str] = None) -> str:
    token = value or str(uuid.uuid4())
    _correlation_id.set(token)
    return token


def get_correlation_id() -> str:
    cid = _correlation_id.get()
    if cid is None:
        cid = set_correlation_id()
    return cid


@contextmanager
def correlation_scope(value: Optional[str] = None) -> Iterator[str]:
    """
    Bind a correlation id for the duration of the block.

    An id already bound by the caller is kept unless ``value`` overrides it.
    """
    cid = value or _correlation_id.get() or str(uuid.uuid4())
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)


def correlated(func: F) -> F:
    """Run ``func`` inside a :func:`correlation_scope`."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        with correlation_scope():
            return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


class CallTimer:
    """
    Context manager logging how long a block took. Blocks at or above
    ``threshold_ms`` are logged at WARNING, the rest at DEBUG.
    """

    def __init__(
        self,
        name: str,
        logger: logging.Logger,
        *,
        context: Mapping[str, Any] | None = None,
        threshold_ms: int = 100,
    ) -> None:
        self.name = name
        self.logger = logger
        self.context = dict(context or {})
        self.threshold_ms = threshold_ms
        self.elapsed_ms: float | None = None
        self._start = 0.0

    def __enter__(self) -> "CallTimer":
        self._start = time.monotonic()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.elapsed_ms = (time.monotonic() - self._start) * 1000
        level = logging.WARNING if self.elapsed_ms >= self.threshold_ms else logging.DEBUG
        extra = {"context": self.context, "elapsed_ms": self.elapsed_ms}
        if exc_type is not None:
            extra["error"] = repr(exc)
        self.logger.log(level, "%s took %.2fms", self.name, self.elapsed_ms, extra=extra)


def time_call(
    name: str,
    logger: logging.Logger,
    *,
    context: Mapping[str, Any] | None = None,
    threshold_ms: int = 100,
) -> CallTimer:
    return CallTimer(name, logger, context=context, threshold_ms=threshold_ms)
