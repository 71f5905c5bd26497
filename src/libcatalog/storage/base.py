"""
Document store protocol and configuration for LibCatalog.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..core.entities import EntityKind
from ..errors import CatalogError
from ..query import Q
from ..security.dsns import DSNConfig, parse_dsn

Document = Dict[str, Any]
Row = Tuple[str, Document]


class StoreError(CatalogError):
    """Base error for persistence failures."""


class StoreConfigurationError(StoreError):
    """Raised when configuration or the requested backend is invalid."""


class StoreConnectionError(StoreError):
    """Raised when opening or using the underlying connection fails."""


class StoreExecutionError(StoreError):
    """Raised when a query or command fails inside the backend."""


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise StoreConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_float(value: str, *, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise StoreConfigurationError(f"Invalid float value for '{key}': {value!r}") from exc


@dataclass
class StoreConfig:
    """
    Normalized store configuration parsed from a DSN.

    Supported schemes are ``memory://`` and ``sqlite:///<path>`` (or
    ``sqlite:///:memory:``). Neither carries a host or credentials; a DSN
    that does is rejected with its credentials redacted from the message.
    Query options: ``timeout`` (seconds) and ``journal_wal`` (bool, SQLite
    only). Any other option is rejected.
    """

    url: str
    backend: str = "memory"
    timeout: float | None = None
    journal_wal: bool = False
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "StoreConfig":
        parsed = parse_dsn(dsn)
        if parsed.driver not in ("memory", "sqlite"):
            raise StoreConfigurationError(
                f"Unsupported store scheme '{parsed.driver}' in {parsed.redacted()}"
            )
        if parsed.username or parsed.password or parsed.host or parsed.port:
            raise StoreConfigurationError(
                f"'{parsed.driver}' stores take no host or credentials: {parsed.redacted()}"
            )
        query = dict(parsed.query)

        timeout = kwargs.pop("timeout", None)
        if timeout is None and "timeout" in query:
            timeout = _parse_float(query.pop("timeout"), key="timeout")
        query.pop("timeout", None)

        journal_wal = kwargs.pop("journal_wal", None)
        if journal_wal is None and "journal_wal" in query:
            journal_wal = _parse_bool(query.pop("journal_wal"), key="journal_wal")
        query.pop("journal_wal", None)

        if query:
            raise StoreConfigurationError(
                f"Unknown store option(s) {', '.join(sorted(query))} in {parsed.redacted()}"
            )

        return cls(
            url=dsn,
            backend=parsed.driver,
            timeout=timeout,
            journal_wal=bool(journal_wal),
            dsn=parsed,
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "StoreConfig":
        value = os.getenv(env_var)
        if not value:
            raise StoreConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    def redacted_dsn(self) -> str:
        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


class DocumentStore(Protocol):
    """
    Query/command surface the catalog services use to reach persistence.

    Identities are opaque strings assigned by the store on insert.
    """

    def find_by_id(self, kind: EntityKind, identity: str) -> Optional[Document]:
        """
        Return the document stored under ``identity`` or ``None``.
        """

    def find_all(
        self,
        kind: EntityKind,
        where: Q | None = None,
        order_by: Sequence[str] = (),
    ) -> List[Row]:
        """
        Return ``(identity, document)`` pairs matching ``where`` in order.
        """

    def count(self, kind: EntityKind, where: Q | None = None) -> int:
        """
        Count documents matching ``where``.
        """

    def insert(self, kind: EntityKind, document: Mapping[str, Any]) -> str:
        """
        Store a new document and return its assigned identity.
        """

    def update(self, kind: EntityKind, identity: str, document: Mapping[str, Any]) -> bool:
        """
        Replace the document under ``identity``; ``False`` if it is missing.
        """

    def delete(self, kind: EntityKind, identity: str) -> bool:
        """
        Remove the document under ``identity``; ``False`` if it is missing.
        """

    def find_one_collated(self, kind: EntityKind, field: str, value: str) -> Optional[Row]:
        """
        Return the first document whose ``field`` equals ``value`` under the
        case-insensitive catalog collation.
        """

    def close(self) -> None:
        """
        Release underlying resources. Implementations should be idempotent.
        """
