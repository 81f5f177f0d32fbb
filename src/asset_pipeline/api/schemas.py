"""
Response schemas for import endpoints.

Fields serialize in camelCase (`totalRows`, `errorDetails`, ...).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from asset_pipeline.ingest.report import ImportReport


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldErrorResponse(_CamelModel):
    """
    One field level reason a row was rejected.
    """

    field: str
    code: str
    message: str


class ErrorDetailResponse(_CamelModel):
    row_number: int = Field(..., ge=1)
    field_errors: list[FieldErrorResponse] = Field(default_factory=list)


class DuplicateRecordResponse(_CamelModel):
    row_number: int = Field(..., ge=1)
    matched_key: list[str]


class SuccessRecordResponse(_CamelModel):
    row_number: int = Field(..., ge=1)
    record_id: str
    name: str
    unit: str


class ImportSummaryResponse(_CamelModel):
    """The four totals again, under the names dashboards read."""

    total_processed: int = Field(0, ge=0)
    successfully_imported: int = Field(0, ge=0)
    duplicates_skipped: int = Field(0, ge=0)
    critical_errors: int = Field(0, ge=0)


class DuplicateDetailsResponse(_CamelModel):
    total_duplicates: int = Field(0, ge=0)
    duplicate_records: list[DuplicateRecordResponse] = Field(default_factory=list)


class ImportReportResponse(_CamelModel):
    """
    API response model for one import. Detail lists are never truncated.
    """

    success: bool
    message: str
    total_rows: int = Field(0, ge=0)
    success_count: int = Field(0, ge=0)
    skip_count: int = Field(0, ge=0)
    error_count: int = Field(0, ge=0)
    error_details: list[ErrorDetailResponse] = Field(default_factory=list)
    duplicate_records: list[DuplicateRecordResponse] = Field(default_factory=list)
    success_records: list[SuccessRecordResponse] = Field(default_factory=list)
    import_summary: ImportSummaryResponse = Field(default_factory=ImportSummaryResponse)
    duplicate_details: DuplicateDetailsResponse = Field(default_factory=DuplicateDetailsResponse)

    @classmethod
    def from_report(cls, report: ImportReport) -> ImportReportResponse:
        duplicates = [
            DuplicateRecordResponse(row_number=d.row_number, matched_key=list(d.matched_key))
            for d in report.duplicate_records
        ]
        return cls(
            success=report.success,
            message=report.message,
            total_rows=report.total_rows,
            success_count=report.success_count,
            skip_count=report.skip_count,
            error_count=report.error_count,
            error_details=[
                ErrorDetailResponse(
                    row_number=e.row_number,
                    field_errors=[
                        FieldErrorResponse(field=fe.field, code=fe.code.value, message=fe.message)
                        for fe in e.field_errors
                    ],
                )
                for e in report.error_details
            ],
            duplicate_records=duplicates,
            success_records=[
                SuccessRecordResponse(row_number=s.row_number, record_id=s.record_id, name=s.name, unit=s.unit)
                for s in report.success_records
            ],
            import_summary=ImportSummaryResponse(
                total_processed=report.total_rows,
                successfully_imported=report.success_count,
                duplicates_skipped=report.skip_count,
                critical_errors=report.error_count,
            ),
            duplicate_details=DuplicateDetailsResponse(total_duplicates=report.skip_count, duplicate_records=duplicates),
        )
