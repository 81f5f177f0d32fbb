from __future__ import annotations

import logging
from typing import Iterable

from asset_pipeline.config import Settings, get_settings
from asset_pipeline.db.asset_store import AssetStore, PersistenceError
from asset_pipeline.ingest.accumulator import ResultAccumulator
from asset_pipeline.ingest.preconditions import UploadPreconditionError, UploadSource, validate_upload
from asset_pipeline.ingest.readers import WorkbookReadError, stream_workbook_rows
from asset_pipeline.ingest.report import FailureKind, ImportReport, build_report, failure_report
from asset_pipeline.parsing.registry import CategorySpec, RecordCategory, UnknownCategoryError, get_category_spec
from asset_pipeline.parsing.types import ParsedRow, ValidRecord
from asset_pipeline.reconcile.classifier import classify
from asset_pipeline.reconcile.index import ExistingRecordIndex

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10_000        # rows between progress log lines


def reconcile_rows(
    rows: Iterable[ParsedRow],
    *,
    spec: CategorySpec,
    index: ExistingRecordIndex,
    acc: ResultAccumulator | None = None,
) -> ResultAccumulator:
    """
    Validate and classify each row as it arrives, one at a time.

    Every row lands in exactly one of the accumulator's lists. Row level
    problems never raise: they become `InvalidRow` outcomes.
    """
    acc = acc if acc is not None else ResultAccumulator()

    for row in rows:
        ## -- validate, then check the snapshot for valid rows only
        outcome = spec.validator.validate(row)
        if isinstance(outcome, ValidRecord):
            outcome = classify(outcome, spec=spec, index=index)
        acc.add(outcome)

        if acc.total % PROGRESS_EVERY == 0:
            logger.debug("%s: %d rows processed", spec.category.value, acc.total)

    return acc


def run_import(
    store: AssetStore,
    *,
    category: RecordCategory | str,
    source: UploadSource,
    settings: Settings | None = None,
) -> ImportReport:
    """
    End-to-end import orchestrator:
      - Check upload preconditions (nothing is read before they pass),
      - Build the existing-record index from one bulk read,
      - Stream rows from the workbook,
      - Validate and classify each row,
            - invalid rows -> `error_details`,
            - rows matching a persisted key -> `duplicate_records`,
            - everything else -> `success_records`,
      - Persist all valid rows in one batch,
      - Build the report.

    Never raises: a pipeline level failure is returned as a `success=False`
    report with no row detail.
    """
    settings = settings or get_settings()

    try:
        spec = get_category_spec(category)
    except UnknownCategoryError as e:
        logger.error("import refused: %s", e)
        return failure_report(str(e), kind=FailureKind.internal, category=str(category))

    logger.info("%s import started: file=%s size=%d bytes", spec.label, source.filename, source.size)

    try:
        validate_upload(
            source,
            max_bytes=settings.max_upload_bytes,
            accepted_extensions=settings.accepted_extensions,
        )
    except UploadPreconditionError as e:
        logger.warning("%s import refused: %s", spec.label, e)
        return failure_report(str(e), kind=FailureKind.precondition, category=spec.category.value)

    try:
        ## -- snapshot of what is already persisted
        try:
            existing = store.load_all(spec)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"could not load existing {spec.table_name} records: {e}") from e
        index = ExistingRecordIndex.build(spec, existing)
        logger.info("%s: %d existing records indexed", spec.label, len(index))

        ## -- stream, validate, classify
        rows = stream_workbook_rows(
            source.stream,
            filename=source.filename or "",
            columns=spec.columns,
            header_rows=settings.header_rows,
        )
        acc = reconcile_rows(rows, spec=spec, index=index)

        ## -- one batch, all or nothing
        if acc.valid:
            try:
                store.save_all(spec, acc.valid)
            except PersistenceError:
                raise
            except Exception as e:
                raise PersistenceError(f"batch insert into {spec.table_name} failed: {e}") from e
            logger.info("%s: saved %d rows", spec.label, len(acc.valid))
        else:
            logger.info("%s: no valid rows to save", spec.label)

        report = build_report(acc, spec)

    except WorkbookReadError as e:
        logger.warning("%s import failed, unreadable file: %s", spec.label, e)
        return failure_report(
            f"{spec.label} import failed: {e}", kind=FailureKind.unreadable_file, category=spec.category.value
        )
    except PersistenceError as e:
        logger.exception("%s import failed at the store", spec.label)
        return failure_report(
            f"{spec.label} import failed: {e}", kind=FailureKind.persistence, category=spec.category.value
        )
    except Exception:
        logger.exception("%s import failed", spec.label)
        return failure_report(
            f"{spec.label} import failed while processing the file",
            kind=FailureKind.internal,
            category=spec.category.value,
        )

    logger.info(
        "%s import finished: total=%d imported=%d skipped=%d errors=%d",
        spec.label, report.total_rows, report.success_count, report.skip_count, report.error_count,
    )
    return report
