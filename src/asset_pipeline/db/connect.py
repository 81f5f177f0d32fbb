from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import Connection

from asset_pipeline.config import get_settings


def get_database_url() -> str:
    """Returns the configured DSN."""
    # CLI/runtime uses ASSET_PIPELINE_DSN.
    # tests have ASSET_PIPELINE_TEST_DSN set.
    return get_settings().database_url


def connect(database_url: Optional[str] = None) -> Connection:
    """
    Return a psycopg connection.

    - Uses `ASSET_PIPELINE_DSN`, if not provided earlier.
    - Leaves autocommit OFF (commits explicitly managed by the store).
    """
    url = database_url or get_database_url()
    return psycopg.connect(url)
