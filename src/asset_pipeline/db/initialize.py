from __future__ import annotations

import logging
from pathlib import Path

import psycopg

from asset_pipeline.db.connect import connect

logger = logging.getLogger(__name__)


def _statements(script: str) -> list[str]:
    """`--` comment lines dropped, then split on `;`. Empty chunks are skipped."""
    body = "\n".join(line for line in script.splitlines() if not line.lstrip().startswith("--"))
    return [s.strip() for s in body.split(";") if s.strip()]


def run_sql_file(conn: psycopg.Connection, sql_path: Path) -> int:
    """
    Execute a `.sql` file one statement at a time and commit.

    A failing statement is raised as `RuntimeError` with the statement text.
    Returns the number of statements run.
    """
    statements = _statements(sql_path.read_text(encoding="utf-8"))

    with conn.cursor() as cur:
        for i, stmt in enumerate(statements, 1):
            try:
                cur.execute(stmt)
            except psycopg.Error as e:
                conn.rollback()
                raise RuntimeError(
                    f"schema init failed in {sql_path.name}, statement #{i}: {e}\n{stmt}"
                ) from e
    conn.commit()

    logger.info("applied %s (%d statements)", sql_path, len(statements))
    return len(statements)


def db_init(*, sql_path: Path, database_url: str | None = None) -> list[Path]:
    """
    Apply schema SQL to the configured database.

    `sql_path` is either one file or a directory whose `*.sql` files run in
    name order. Returns the files applied.
    """
    files = sorted(sql_path.glob("*.sql")) if sql_path.is_dir() else [sql_path]
    if not files:
        raise FileNotFoundError(f"no .sql files under {sql_path}")

    with connect(database_url) as conn:
        for p in files:
            run_sql_file(conn, p)
    return files
