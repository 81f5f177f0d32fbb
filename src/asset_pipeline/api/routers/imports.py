"""
Spreadsheet import and template HTTP endpoints.
"""

from __future__ import annotations

import logging
import os

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import FileResponse, JSONResponse

from asset_pipeline.api.dependencies import get_app_settings, get_asset_store, get_category
from asset_pipeline.api.schemas import ImportReportResponse
from asset_pipeline.config import Settings
from asset_pipeline.db.asset_store import AssetStore
from asset_pipeline.ingest.pipeline import run_import
from asset_pipeline.ingest.preconditions import UploadSource
from asset_pipeline.ingest.report import FailureKind
from asset_pipeline.ingest.templates import TemplateMissingError, locate_template, template_filename
from asset_pipeline.parsing.registry import CategorySpec

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/asset/import", tags=["import"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# client side problems are 400s, everything else a 500
_FAILURE_STATUS = {
    FailureKind.precondition: status.HTTP_400_BAD_REQUEST,
    FailureKind.unreadable_file: status.HTTP_400_BAD_REQUEST,
    FailureKind.persistence: status.HTTP_500_INTERNAL_SERVER_ERROR,
    FailureKind.internal: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _upload_size(file: UploadFile) -> int:
    """Size in bytes, measured from the spooled stream when the client did not send one."""
    if file.size is not None:
        return file.size
    stream = file.file
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


@router.post("/{category}", response_model=ImportReportResponse)
def import_assets(
    spec: CategorySpec = Depends(get_category),
    file: UploadFile = File(...),
    store: AssetStore = Depends(get_asset_store),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """
    Import one spreadsheet into the category and return the full report.
    """

    try:
        file.file.seek(0)
        source = UploadSource(filename=file.filename, size=_upload_size(file), stream=file.file)
        report = run_import(store, category=spec.category, source=source, settings=settings)
    finally:
        file.file.close()

    status_code = status.HTTP_200_OK if report.success else _FAILURE_STATUS[report.failure or FailureKind.internal]
    body = ImportReportResponse.from_report(report).model_dump(by_alias=True)
    return JSONResponse(status_code=status_code, content=body)


@router.get("/template/{category}")
def download_template(
    spec: CategorySpec = Depends(get_category),
    settings: Settings = Depends(get_app_settings),
) -> FileResponse:
    """
    Return the category's example workbook.
    """

    try:
        path = locate_template(spec, settings.template_dir)
    except TemplateMissingError as exc:
        logger.error("template download failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{spec.label} template file is not available, contact an administrator",
        ) from exc

    return FileResponse(path, media_type=XLSX_MEDIA_TYPE, filename=template_filename(spec))
