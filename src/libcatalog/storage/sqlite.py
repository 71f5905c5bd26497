"""
SQLite-backed document store.
"""

from __future__ import annotations

import json
import sqlite3
import threading
import uuid
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

from ..core.entities import EntityKind
from ..query import Q
from ..query.collation import COLLATION_NAME, compare
from ..query.compiler import DocumentSQLCompiler, json_path
from ..security.dsns import parse_dsn
from ..utils import get_logger, time_call
from .base import (
    Document,
    Row,
    StoreConfig,
    StoreConfigurationError,
    StoreConnectionError,
    StoreExecutionError,
)


@dataclass(slots=True)
class SQLiteConnectionState:
    connection: sqlite3.Connection


TABLE_NAMES = {
    EntityKind.AUTHOR: "author",
    EntityKind.GENRE: "genre",
    EntityKind.BOOK: "book",
    EntityKind.BOOK_INSTANCE: "book_instance",
}


def table_name(kind: EntityKind) -> str:
    return TABLE_NAMES[EntityKind(kind)]


def _quote(identifier: str) -> str:
    escaped = identifier.replace('"', '""')
    return f'"{escaped}"'


class SQLiteStore:
    """
    Document store keeping one table per entity kind, each row holding the
    identity and the JSON-encoded document.

    Every command runs in autocommit mode; there are no multi-document
    transactions.
    """

    def __init__(self, config: StoreConfig | None = None, *, slow_call_ms: int = 100) -> None:
        self.config = config or StoreConfig.from_dsn("sqlite:///:memory:")
        self.slow_call_ms = slow_call_ms
        self.logger = get_logger("storage.sqlite")
        self._lock = threading.RLock()
        self._state: SQLiteConnectionState | None = None
        self.connect()

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    def connect(self) -> sqlite3.Connection:
        path = self._normalize_path(self.config.url)
        timeout = self.config.timeout if self.config.timeout is not None else 5.0
        try:
            connection = sqlite3.connect(
                path,
                isolation_level=None,
                timeout=timeout,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise StoreConnectionError(
                f"Could not open {self.config.descriptive_label()}: {exc}"
            ) from exc
        connection.row_factory = sqlite3.Row
        connection.create_collation(COLLATION_NAME, compare)
        if self.config.journal_wal:
            connection.execute("PRAGMA journal_mode = WAL")

        self._state = SQLiteConnectionState(connection)
        self._ensure_schema()
        self.logger.info("Opened SQLite store %s", self.config.descriptive_label())
        return connection

    def close(self) -> None:
        with self._lock:
            if self._state:
                self._state.connection.close()
                self._state = None

    def _ensure_connection(self) -> sqlite3.Connection:
        if not self._state:
            raise StoreConnectionError("SQLiteStore is not connected.")
        return self._state.connection

    def _ensure_schema(self) -> None:
        for kind in EntityKind:
            self._execute(
                f"CREATE TABLE IF NOT EXISTS {_quote(table_name(kind))} ("
                '"id" TEXT PRIMARY KEY, '
                '"document" TEXT NOT NULL'
                ")"
            )

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def find_by_id(self, kind: EntityKind, identity: str) -> Optional[Document]:
        table = _quote(table_name(kind))
        rows = self._fetchall(f'SELECT "document" FROM {table} WHERE "id" = ?', (identity,))
        if not rows:
            return None
        return json.loads(rows[0]["document"])

    def find_all(
        self,
        kind: EntityKind,
        where: Q | None = None,
        order_by: Sequence[str] = (),
    ) -> List[Row]:
        compiler = DocumentSQLCompiler(where, order_by)
        sql = f'SELECT "id", "document" FROM {_quote(table_name(kind))}'
        params: List[Any] = []

        where_sql, where_params = compiler.compile_where()
        if where_sql:
            sql += f" WHERE {where_sql}"
            params.extend(where_params)

        order_sql, order_params = compiler.compile_order_by()
        sql += f" ORDER BY {order_sql}, rowid" if order_sql else " ORDER BY rowid"
        params.extend(order_params)

        return [(row["id"], json.loads(row["document"])) for row in self._fetchall(sql, params)]

    def count(self, kind: EntityKind, where: Q | None = None) -> int:
        sql = f"SELECT COUNT(*) AS total FROM {_quote(table_name(kind))}"
        where_sql, params = DocumentSQLCompiler(where).compile_where()
        if where_sql:
            sql += f" WHERE {where_sql}"
        return int(self._fetchall(sql, params)[0]["total"])

    def find_one_collated(self, kind: EntityKind, field: str, value: str) -> Optional[Row]:
        sql = (
            f'SELECT "id", "document" FROM {_quote(table_name(kind))} '
            f'WHERE json_extract("document", ?) = ? COLLATE {COLLATION_NAME} '
            "ORDER BY rowid LIMIT 1"
        )
        rows = self._fetchall(sql, (json_path(field), value))
        if not rows:
            return None
        return rows[0]["id"], json.loads(rows[0]["document"])

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #
    def insert(self, kind: EntityKind, document: Mapping[str, Any]) -> str:
        identity = uuid.uuid4().hex
        self._execute(
            f'INSERT INTO {_quote(table_name(kind))} ("id", "document") VALUES (?, ?)',
            (identity, self._encode(document)),
        )
        return identity

    def update(self, kind: EntityKind, identity: str, document: Mapping[str, Any]) -> bool:
        cursor = self._execute(
            f'UPDATE {_quote(table_name(kind))} SET "document" = ? WHERE "id" = ?',
            (self._encode(document), identity),
        )
        return cursor.rowcount > 0

    def delete(self, kind: EntityKind, identity: str) -> bool:
        cursor = self._execute(
            f'DELETE FROM {_quote(table_name(kind))} WHERE "id" = ?', (identity,)
        )
        return cursor.rowcount > 0

    # ------------------------------------------------------------------ #
    # Execution helpers
    # ------------------------------------------------------------------ #
    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        with self._lock:
            connection = self._ensure_connection()
            try:
                with time_call(
                    "sqlite.execute",
                    self.logger,
                    context={"sql": sql},
                    threshold_ms=self.slow_call_ms,
                ):
                    return connection.execute(sql, tuple(params))
            except sqlite3.Error as exc:
                raise StoreExecutionError(f"SQLite error: {exc}") from exc

    def _fetchall(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self._lock:
            cursor = self._execute(sql, params)
            try:
                return cursor.fetchall()
            except sqlite3.Error as exc:
                raise StoreExecutionError(f"SQLite error: {exc}") from exc

    @staticmethod
    def _encode(document: Mapping[str, Any]) -> str:
        return json.dumps(dict(document), ensure_ascii=False, sort_keys=True)

    @staticmethod
    def _normalize_path(url: str) -> str:
        base = url.split("?", 1)[0]
        if base == "sqlite:///:memory:":
            return ":memory:"
        prefix = "sqlite:///"
        if not base.startswith(prefix) or base == prefix:
            raise StoreConfigurationError(
                f"Expected sqlite:///<path>, got {parse_dsn(url).redacted()}"
            )
        return base[len(prefix) :]
