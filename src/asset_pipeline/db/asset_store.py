from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol, Sequence

from psycopg import Connection, sql
from psycopg.rows import dict_row

from asset_pipeline.db.connect import connect
from asset_pipeline.parsing.registry import CategorySpec
from asset_pipeline.parsing.types import ValidRecord

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """The batch could not be stored. Nothing from the batch was committed."""


class AssetStore(Protocol):
    """
    The two store operations an import needs.

    - `load_all`: every persisted record of a category, unfiltered, in one read.
    - `save_all`: persist the whole batch or nothing, raising on failure.
    """
    def load_all(self, spec: CategorySpec) -> Sequence[Mapping[str, Any]]: ...

    def save_all(self, spec: CategorySpec, records: Sequence[ValidRecord]) -> None: ...


class PostgresAssetStore:
    """
    `AssetStore` over a psycopg connection.

    Table/column identifiers come only from the whitelisted `CategorySpec`;
    values are always parameterized.

    Without a `conn`, the store connects to `database_url` (or the configured
    DSN) on first use and owns that connection until `close()`.
    """

    def __init__(self, conn: Connection | None = None, *, database_url: str | None = None) -> None:
        self._conn = conn
        self._database_url = database_url
        self._owns_conn = conn is None

    @property
    def conn(self) -> Connection:
        if self._conn is None:
            self._conn = connect(self._database_url)
        return self._conn

    def close(self) -> None:
        """Close the connection, if this store opened one."""
        if self._owns_conn and self._conn is not None:
            self._conn.close()
            self._conn = None

    def load_all(self, spec: CategorySpec) -> list[dict[str, Any]]:
        query = sql.SQL("SELECT {cols} FROM {tbl}").format(
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in spec.columns),
            tbl=sql.Identifier(spec.table_name),
        )
        conn = self.conn
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query)
            rows = cur.fetchall()
        # end the read transaction, the batch insert gets its own
        conn.commit()
        logger.debug("loaded %d existing %s records", len(rows), spec.table_name)
        return rows

    def save_all(self, spec: CategorySpec, records: Sequence[ValidRecord]) -> None:
        """
        Insert `records` in one transaction.

        Any failure rolls the whole batch back and is raised as `PersistenceError`.
        """
        if not records:
            return

        query = sql.SQL("INSERT INTO {tbl} ({cols}) VALUES ({vals})").format(
            tbl=sql.Identifier(spec.table_name),
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in spec.columns),
            vals=sql.SQL(", ").join(sql.Placeholder() for _ in spec.columns),
        )
        params = [tuple(r.values.get(c) for c in spec.columns) for r in records]

        conn = self.conn
        try:
            with conn.cursor() as cur:
                cur.executemany(query, params)
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise PersistenceError(f"batch insert into {spec.table_name} failed: {e}") from e

        logger.info("inserted %d rows into %s", len(params), spec.table_name)
