"""
FastAPI application for spreadsheet imports.
"""

from __future__ import annotations

from fastapi import FastAPI

from asset_pipeline.api.routers.imports import router as imports_router


def create_app() -> FastAPI:
    app = FastAPI(title="asset-pipeline")
    app.include_router(imports_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
