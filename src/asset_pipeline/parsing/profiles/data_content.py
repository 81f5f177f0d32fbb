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


DATA_CONTENT_COLUMNS: tuple[str, ...] = (
    "asset_id",
    "report_unit",
    "asset_category",
    "asset_name",
    "development_tool",
    "quantity",
    "information_degree",
    "domestic_rate",
    "put_into_use_date",
    "remarks",
)

# both percentages
_PCT_MIN = Decimal("0")
_PCT_MAX = Decimal("100")

data_content_validator = RowValidator(
    fields=[
        FieldSpec("asset_id", lambda v: parse_required_text(v, field="asset_id")),
        # composite key
        FieldSpec("report_unit", lambda v: parse_required_text(v, field="report_unit")),
        FieldSpec("asset_category", lambda v: parse_required_text(v, field="asset_category")),
        FieldSpec("asset_name", lambda v: parse_required_text(v, field="asset_name")),

        # data assets must name the tool they were built with
        FieldSpec("development_tool", lambda v: parse_required_text(v, field="development_tool")),
        FieldSpec("quantity", lambda v: parse_int(v, field="quantity", minimum=0)),
        FieldSpec(
            "information_degree",
            lambda v: parse_decimal(v, field="information_degree", precision=5, minimum=_PCT_MIN, maximum=_PCT_MAX),
        ),
        FieldSpec(
            "domestic_rate",
            lambda v: parse_decimal(v, field="domestic_rate", precision=5, minimum=_PCT_MIN, maximum=_PCT_MAX),
        ),
        FieldSpec("put_into_use_date", lambda v: parse_date_iso(v, field="put_into_use_date"), required=False),
        FieldSpec("remarks", parse_optional_text, required=False),
    ],
)

DATA_CONTENT_SPEC = CategorySpec(
    category=RecordCategory.data_content,
    label="Data content asset",
    table_name="data_content_asset",
    columns=DATA_CONTENT_COLUMNS,
    key_fields=("report_unit", "asset_category", "asset_name"),
    validator=data_content_validator,
    example_row=(
        "DC-0001", "Northern Depot", "Database", "Personnel archive",
        "PostgreSQL", 1, Decimal("85.50"), Decimal("100.00"), date(2022, 6, 30), "",
    ),
)
