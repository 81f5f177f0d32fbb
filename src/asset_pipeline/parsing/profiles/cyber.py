from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from asset_pipeline.parsing.primitives import parse_date_iso, parse_int, parse_optional_text, parse_required_text
from asset_pipeline.parsing.registry import CategorySpec, RecordCategory
from asset_pipeline.parsing.schema import FieldSpec, RowRule, RowValidator


CYBER_COLUMNS: tuple[str, ...] = (
    "asset_id",
    "report_unit",
    "asset_category",
    "asset_name",
    "asset_content",
    "quantity",
    "used_quantity",
    "put_into_use_date",
    "remarks",
)


def _used_within_quantity(values: Mapping[str, Any]) -> str | None:
    """`used_quantity` can never exceed the owned `quantity`."""
    if values["used_quantity"] > values["quantity"]:
        return f"used_quantity {values['used_quantity']} exceeds quantity {values['quantity']}"
    return None


cyber_validator = RowValidator(
    fields=[
        FieldSpec("asset_id", lambda v: parse_required_text(v, field="asset_id")),
        # composite key, cyber assets also key on their content
        FieldSpec("report_unit", lambda v: parse_required_text(v, field="report_unit")),
        FieldSpec("asset_category", lambda v: parse_required_text(v, field="asset_category")),
        FieldSpec("asset_name", lambda v: parse_required_text(v, field="asset_name")),
        FieldSpec("asset_content", lambda v: parse_required_text(v, field="asset_content")),

        FieldSpec("quantity", lambda v: parse_int(v, field="quantity", minimum=0)),
        FieldSpec("used_quantity", lambda v: parse_int(v, field="used_quantity", minimum=0)),
        FieldSpec("put_into_use_date", lambda v: parse_date_iso(v, field="put_into_use_date"), required=False),
        FieldSpec("remarks", parse_optional_text, required=False),
    ],
    rules=[
        RowRule("used_quantity", fields=("quantity", "used_quantity"), check=_used_within_quantity),
    ],
)

CYBER_SPEC = CategorySpec(
    category=RecordCategory.cyber,
    label="Cyber asset",
    table_name="cyber_asset",
    columns=CYBER_COLUMNS,
    key_fields=("report_unit", "asset_category", "asset_name", "asset_content"),
    validator=cyber_validator,
    example_row=(
        "CY-0001", "Northern Depot", "Network device", "Core switch",
        "48-port L3 switch", 4, 3, date(2023, 9, 15), "",
    ),
)
