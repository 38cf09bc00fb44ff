# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: SQLAlchemy-backed registry store.

Same contract as the in-memory store. Groups live in ``registry_groups``
as JSON payloads; each secondary index is a (key, group_name, position)
table where the highest position is the most recent write. A transaction
binds one connection for the calling thread so the three tables commit
or roll back together.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from volunteer_registry.core.logging import get_logger
from volunteer_registry.models.domain import Group

logger = get_logger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS registry_groups (
        name VARCHAR(255) PRIMARY KEY,
        group_id BIGINT NOT NULL,
        payload TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS registry_service_index (
        index_key VARCHAR(255) NOT NULL,
        group_name VARCHAR(255) NOT NULL,
        position BIGINT NOT NULL,
        PRIMARY KEY (index_key, group_name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS registry_location_index (
        index_key VARCHAR(255) NOT NULL,
        group_name VARCHAR(255) NOT NULL,
        position BIGINT NOT NULL,
        PRIMARY KEY (index_key, group_name)
    )
    """,
)


class SqlGroupRepository:
    """Group record store persisted in ``registry_groups``."""

    def __init__(self, store: "SqlRegistryStore") -> None:
        self._store = store

    # ── Read ──

    def get(self, name: str) -> Optional[Group]:
        with self._store.connection() as conn:
            row = conn.execute(
                text("SELECT payload FROM registry_groups WHERE name = :name"),
                {"name": name},
            ).fetchone()
        return Group.model_validate_json(row[0]) if row else None

    def get_all(self) -> list[Group]:
        with self._store.connection() as conn:
            rows = conn.execute(
                text("SELECT payload FROM registry_groups ORDER BY group_id")
            ).fetchall()
        return [Group.model_validate_json(r[0]) for r in rows]

    def exists(self, name: str) -> bool:
        with self._store.connection() as conn:
            row = conn.execute(
                text("SELECT 1 FROM registry_groups WHERE name = :name"),
                {"name": name},
            ).fetchone()
        return row is not None

    def count(self) -> int:
        with self._store.connection() as conn:
            return conn.execute(
                text("SELECT COUNT(*) FROM registry_groups")
            ).scalar() or 0

    def max_id(self) -> int:
        with self._store.connection() as conn:
            return conn.execute(
                text("SELECT MAX(group_id) FROM registry_groups")
            ).scalar() or 0

    # ── Write ──

    def put(self, name: str, group: Group) -> None:
        params = {"name": name, "gid": group.id, "payload": group.model_dump_json()}
        with self._store.connection() as conn:
            result = conn.execute(
                text(
                    "UPDATE registry_groups SET group_id = :gid, payload = :payload "
                    "WHERE name = :name"
                ),
                params,
            )
            if result.rowcount == 0:
                conn.execute(
                    text(
                        "INSERT INTO registry_groups (name, group_id, payload) "
                        "VALUES (:name, :gid, :payload)"
                    ),
                    params,
                )

    def clear(self) -> None:
        with self._store.connection() as conn:
            conn.execute(text("DELETE FROM registry_groups"))


class SqlIndexRepository:
    """Secondary index persisted as ordered (key, group_name) rows."""

    def __init__(self, store: "SqlRegistryStore", name: str, table: str) -> None:
        self.name = name
        self._store = store
        self._table = table

    # ── Read ──

    def get(self, key: str) -> Optional[str]:
        with self._store.connection() as conn:
            row = conn.execute(
                text(
                    f"SELECT group_name FROM {self._table} WHERE index_key = :key "
                    "ORDER BY position DESC LIMIT 1"
                ),
                {"key": key},
            ).fetchone()
        return row[0] if row else None

    def get_all(self, key: str) -> list[str]:
        with self._store.connection() as conn:
            rows = conn.execute(
                text(
                    f"SELECT group_name FROM {self._table} WHERE index_key = :key "
                    "ORDER BY position"
                ),
                {"key": key},
            ).fetchall()
        return [r[0] for r in rows]

    def keys(self) -> list[str]:
        with self._store.connection() as conn:
            rows = conn.execute(
                text(
                    f"SELECT index_key FROM {self._table} "
                    "GROUP BY index_key ORDER BY MIN(position)"
                )
            ).fetchall()
        return [r[0] for r in rows]

    def contains(self, key: str) -> bool:
        with self._store.connection() as conn:
            row = conn.execute(
                text(f"SELECT 1 FROM {self._table} WHERE index_key = :key LIMIT 1"),
                {"key": key},
            ).fetchone()
        return row is not None

    def count(self) -> int:
        with self._store.connection() as conn:
            return conn.execute(
                text(f"SELECT COUNT(DISTINCT index_key) FROM {self._table}")
            ).scalar() or 0

    # ── Write ──

    def put(self, key: str, group_name: str) -> None:
        params = {"key": key, "name": group_name}
        with self._store.connection() as conn:
            conn.execute(
                text(
                    f"DELETE FROM {self._table} "
                    "WHERE index_key = :key AND group_name = :name"
                ),
                params,
            )
            position = conn.execute(
                text(f"SELECT COALESCE(MAX(position), 0) + 1 FROM {self._table}")
            ).scalar()
            conn.execute(
                text(
                    f"INSERT INTO {self._table} (index_key, group_name, position) "
                    "VALUES (:key, :name, :position)"
                ),
                {**params, "position": position},
            )

    def clear(self) -> None:
        with self._store.connection() as conn:
            conn.execute(text(f"DELETE FROM {self._table}"))


class SqlRegistryStore:
    """Record store plus both secondary indexes on one SQLAlchemy engine."""

    backend = "sql"

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._local = threading.local()
        self.groups = SqlGroupRepository(self)
        self.services = SqlIndexRepository(self, "service", "registry_service_index")
        self.locations = SqlIndexRepository(self, "location", "registry_location_index")

    # ── Connection scope ──

    def _bound(self) -> Optional[Connection]:
        return getattr(self._local, "conn", None)

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        """The thread's transaction connection, or a short-lived one."""
        conn = self._bound()
        if conn is not None:
            yield conn
            return
        with self._engine.begin() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """All-or-nothing write scope across the three tables."""
        if self._bound() is not None:
            yield
            return
        with self._engine.begin() as conn:
            self._local.conn = conn
            try:
                yield
            finally:
                self._local.conn = None

    # ── Lifecycle ──

    def initialize(self) -> None:
        """Create the tables if they do not exist yet."""
        with self._engine.begin() as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.execute(text(statement))
        logger.info(
            "SQL registry schema ready: url=%s",
            self._engine.url.render_as_string(hide_password=True),
        )

    def ping(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.error("Registry database unreachable: %s", exc)
            return False

    def clear(self) -> None:
        with self.transaction():
            self.groups.clear()
            self.services.clear()
            self.locations.clear()
