from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from asset_pipeline.ingest.accumulator import ResultAccumulator
from asset_pipeline.parsing.registry import CategorySpec
from asset_pipeline.parsing.types import CompositeKey, FieldError


class FailureKind(str, Enum):
    """Why a whole import failed."""
    precondition = "precondition"       # empty file, bad extension, oversize
    unreadable_file = "unreadable_file"
    persistence = "persistence"
    internal = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    row_number: int
    field_errors: tuple[FieldError, ...]


@dataclass(frozen=True)
class DuplicateDetail:
    row_number: int
    matched_key: CompositeKey


@dataclass(frozen=True)
class SuccessDetail:
    row_number: int
    record_id: str
    name: str
    unit: str


@dataclass(frozen=True)
class ImportReport:
    """
    The outcome of one import.

    `success` is `False` only for pipeline level failures, in which case the
    detail lists are empty and `failure` says why. A completed import where
    every row was rejected is still `success=True`.
    """
    success: bool
    message: str
    total_rows: int = 0
    success_count: int = 0
    skip_count: int = 0
    error_count: int = 0
    error_details: list[ErrorDetail] = field(default_factory=list)
    duplicate_records: list[DuplicateDetail] = field(default_factory=list)
    success_records: list[SuccessDetail] = field(default_factory=list)
    category: str | None = None
    failure: FailureKind | None = None

    def render_one_line(self) -> str:
        """How a report is summarized in the terminal."""
        status = "ok" if self.success else f"failed({self.failure.value if self.failure else 'unknown'})"
        return (
            f"{self.category}: {status} total={self.total_rows} imported={self.success_count} "
            f"skipped={self.skip_count} errors={self.error_count} - {self.message}"
        )


def summary_message(spec: CategorySpec, *, error_count: int, skip_count: int, success_count: int) -> str:
    """
    First match wins: errors, then duplicate skips, then imported rows.
    """
    if error_count > 0:
        return f"{spec.label} import finished: {error_count} rows have errors to correct"
    if skip_count > 0:
        return f"{spec.label} import finished: skipped {skip_count} duplicate rows"
    return f"{spec.label} import finished: imported {success_count} rows"


def build_report(acc: ResultAccumulator, spec: CategorySpec) -> ImportReport:
    """Turn a finished accumulator into the full, untruncated report."""
    success_count = len(acc.valid)
    skip_count = len(acc.duplicates)
    error_count = len(acc.invalid)

    return ImportReport(
        success=True,
        message=summary_message(spec, error_count=error_count, skip_count=skip_count, success_count=success_count),
        total_rows=acc.total,
        success_count=success_count,
        skip_count=skip_count,
        error_count=error_count,
        error_details=[ErrorDetail(row_number=r.source_row, field_errors=r.field_errors) for r in acc.invalid],
        duplicate_records=[DuplicateDetail(row_number=d.source_row, matched_key=d.matched_key) for d in acc.duplicates],
        success_records=[
            SuccessDetail(row_number=v.source_row, record_id=v.record_id, name=v.name, unit=v.unit) for v in acc.valid
        ],
        category=spec.category.value,
    )


def failure_report(message: str, *, kind: FailureKind, category: str | None = None) -> ImportReport:
    """A pipeline level failure: top-level message only, no row detail."""
    return ImportReport(success=False, message=message, category=category, failure=kind)
