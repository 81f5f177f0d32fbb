from __future__ import annotations

import logging
from pathlib import Path

from openpyxl import Workbook

from asset_pipeline.parsing.registry import CategorySpec

logger = logging.getLogger(__name__)


class TemplateMissingError(FileNotFoundError):
    """No template workbook is available for a category."""


def template_filename(spec: CategorySpec) -> str:
    return f"{spec.table_name}_template.xlsx"


def column_label(column: str) -> str:
    """`put_into_use_date` -> `Put Into Use Date`."""
    return column.replace("_", " ").title()


def locate_template(spec: CategorySpec, template_dir: Path) -> Path:
    """Path of the category's template, raising `TemplateMissingError` when it is absent."""
    path = template_dir / template_filename(spec)
    if not path.is_file():
        raise TemplateMissingError(f"{spec.label} template file is missing: {path}")
    return path


def write_template(spec: CategorySpec, path: Path) -> Path:
    """
    Write a template workbook the importer accepts as-is:
    a title row, a column label row, then one example data row.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook(write_only=True)
    ws = wb.create_sheet(title=spec.category.value)
    ws.append([f"{spec.label} import template"])
    ws.append([column_label(c) for c in spec.columns])
    if spec.example_row:
        ws.append(list(spec.example_row))
    wb.save(path)

    logger.info("wrote %s template to %s", spec.label, path)
    return path
