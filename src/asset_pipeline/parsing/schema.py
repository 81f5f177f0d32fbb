from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from .primitives import ParseError, is_blank
from .types import FieldError, InvalidRow, ParsedRow, RejectCode, ValidRecord

# Parser turns one raw cell into a typed value or raises `ParseError`.
# A rule check inspects already typed values and returns an error message or `None`.
Parser = Callable[[Any], Any]
RuleCheck = Callable[[Mapping[str, Any]], "str | None"]


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Any given column's configurable expectations."""
    name: str                   # column name, also the staging/persisted column name.
    parser: Parser              # how to parse this column's raw cell.
    required: bool = True       # whether or not this column's value must exist.


@dataclass(frozen=True, slots=True)
class RowRule:
    """A category specific cross-field rule."""
    name: str
    fields: tuple[str, ...]     # rule only runs when every one of these parsed cleanly
    check: RuleCheck


@dataclass(frozen=True, slots=True)
class RowValidator:
    """
    Validate a single parsed row.

    Either:
    - return the row as a typed `ValidRecord`,
    - or an `InvalidRow` carrying every `FieldError` found.

    Error order is always:
    - 1st: structural defects from decoding (`malformed_row`)
    - 2nd: field errors, in `FieldSpec` order
    - 3rd: rule violations, in `RowRule` order

    Pure: no I/O, and no knowledge of what is already persisted.
    """
    fields: Sequence[FieldSpec]
    rules: Sequence[RowRule] = ()
    id_field: str = "asset_id"

    def validate(self, row: ParsedRow) -> ValidRecord | InvalidRow:
        errors: list[FieldError] = [
            FieldError(field="row", code=RejectCode.malformed_row, message=d) for d in row.defects
        ]

        out: dict[str, Any] = {}
        failed: set[str] = set()
        for f in self.fields:
            raw_v = row.values.get(f.name)
            if is_blank(raw_v) and not f.required:
                out[f.name] = None
                continue
            try:
                out[f.name] = f.parser(raw_v)
            except ParseError as e:
                failed.add(f.name)
                errors.append(FieldError(field=f.name, code=e.code, message=e.detail))

        for rule in self.rules:
            if failed.intersection(rule.fields):
                continue
            message = rule.check(out)
            if message is not None:
                errors.append(FieldError(field=rule.name, code=RejectCode.rule_violation, message=message))

        if errors:
            return InvalidRow(source_row=row.source_row, field_errors=tuple(errors))

        return ValidRecord(record_id=str(out[self.id_field]), values=out, source_row=row.source_row)
