from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union


class RejectCode(str, Enum):
    """Typed field error classifications."""
    missing_required = "missing_required"
    invalid_int = "invalid_int"
    invalid_numeric = "invalid_numeric"
    invalid_date = "invalid_date"
    out_of_range = "out_of_range"
    malformed_row = "malformed_row"         # row could not be decoded into the expected columns
    rule_violation = "rule_violation"       # category level cross-field rule


CompositeKey = tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ParsedRow:
    """One raw sheet row, positional cells already mapped onto column names."""
    values: Mapping[str, str | None]
    source_row: int                         # 1-based physical sheet row
    defects: tuple[str, ...] = ()           # structural problems found while decoding


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single field's rejection reason."""
    field: str
    code: RejectCode
    message: str


@dataclass(frozen=True, slots=True)
class ValidRecord:
    """
    A row that passed validation. `values` hold typed values keyed by column name,
    ready for the batch insert.
    """
    record_id: str
    values: dict[str, Any]
    source_row: int

    @property
    def name(self) -> str:
        return self.values["asset_name"]

    @property
    def unit(self) -> str:
        return self.values["report_unit"]


@dataclass(frozen=True, slots=True)
class InvalidRow:
    """Rejected row, with every field error found."""
    source_row: int
    field_errors: tuple[FieldError, ...]


@dataclass(frozen=True, slots=True)
class DuplicateRow:
    """Row whose composite key is already persisted."""
    source_row: int
    matched_key: CompositeKey
    record: ValidRecord = field(repr=False)


RowOutcome = Union[ValidRecord, InvalidRow, DuplicateRow]
