from __future__ import annotations

from datetime import date
from decimal import Decimal

from asset_pipeline.parsing.primitives import (
    parse_date_iso,
    parse_decimal,
    parse_int,
    parse_optional_text,
    parse_required_text,
)
from asset_pipeline.parsing.registry import CategorySpec, RecordCategory
from asset_pipeline.parsing.schema import FieldSpec, RowValidator


# sheet column order for software asset workbooks
SOFTWARE_COLUMNS: tuple[str, ...] = (
    "asset_id",
    "report_unit",
    "asset_category",
    "asset_name",
    "acquisition_method",
    "service_status",
    "quantity",
    "unit_price",
    "put_into_use_date",
    "remarks",
)

software_validator = RowValidator(
    fields=[
        FieldSpec("asset_id", lambda v: parse_required_text(v, field="asset_id")),
        # composite key
        FieldSpec("report_unit", lambda v: parse_required_text(v, field="report_unit")),
        FieldSpec("asset_category", lambda v: parse_required_text(v, field="asset_category")),
        FieldSpec("asset_name", lambda v: parse_required_text(v, field="asset_name")),

        FieldSpec("acquisition_method", lambda v: parse_required_text(v, field="acquisition_method")),
        FieldSpec("service_status", lambda v: parse_required_text(v, field="service_status")),
        FieldSpec("quantity", lambda v: parse_int(v, field="quantity", minimum=0)),
        FieldSpec("unit_price", lambda v: parse_decimal(v, field="unit_price", minimum=Decimal("0"))),
        FieldSpec("put_into_use_date", lambda v: parse_date_iso(v, field="put_into_use_date"), required=False),
        FieldSpec("remarks", parse_optional_text, required=False),
    ],
)

SOFTWARE_SPEC = CategorySpec(
    category=RecordCategory.software,
    label="Software asset",
    table_name="software_asset",
    columns=SOFTWARE_COLUMNS,
    key_fields=("report_unit", "asset_category", "asset_name"),
    validator=software_validator,
    example_row=(
        "SW-0001", "Northern Depot", "Operating system", "Kylin OS V10",
        "Purchase", "In service", 12, Decimal("899.00"), date(2024, 3, 1), "",
    ),
)
