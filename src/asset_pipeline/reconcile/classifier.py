from __future__ import annotations

from asset_pipeline.parsing.registry import CategorySpec
from asset_pipeline.parsing.types import DuplicateRow, ValidRecord
from asset_pipeline.reconcile.index import ExistingRecordIndex


def classify(record: ValidRecord, *, spec: CategorySpec, index: ExistingRecordIndex) -> ValidRecord | DuplicateRow:
    """
    `DuplicateRow` when the record's composite key is already persisted, else the record itself.

    Only the pre-loaded snapshot is consulted. Two rows of the same upload
    sharing a key both come back valid; uniqueness within an upload is left to
    the store.
    """
    key = spec.composite_key(record.values)
    if index.contains(key):
        return DuplicateRow(source_row=record.source_row, matched_key=key, record=record)
    return record
