"""
Shared FastAPI dependencies.
"""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import HTTPException, status

from asset_pipeline.config import Settings, get_settings
from asset_pipeline.db.asset_store import AssetStore, PostgresAssetStore
from asset_pipeline.parsing.registry import CategorySpec, UnknownCategoryError, get_category_spec


def get_asset_store() -> Iterator[AssetStore]:
    """
    One store per request. It connects only when the import first reads the
    database, so uploads refused by the precondition checks never open one.
    """

    store = PostgresAssetStore()
    try:
        yield store
    finally:
        store.close()


def get_app_settings() -> Settings:
    return get_settings()


def get_category(category: str) -> CategorySpec:
    """
    Resolve the `{category}` path segment. `data-content` and `data_content` are the same category.
    """

    try:
        return get_category_spec(category.strip().lower().replace("-", "_"))
    except UnknownCategoryError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
