from __future__ import annotations

import logging
import zipfile
from datetime import date, datetime, time
from typing import IO, Any, Iterable, Iterator, Sequence

import openpyxl
import xlrd
from openpyxl.utils.exceptions import InvalidFileException

from asset_pipeline.parsing.primitives import is_blank
from asset_pipeline.parsing.types import ParsedRow

logger = logging.getLogger(__name__)

# a title row, then a column label row
DEFAULT_HEADER_ROWS = 2


class WorkbookReadError(ValueError):
    """The upload could not be opened or read as a spreadsheet."""


def decode_cell(v: Any) -> str | None:
    """
    Turn a raw spreadsheet cell into the text the validators see.

    No trimming or case folding: integral floats lose their `.0`, dates render as
    `YYYY-MM-DD`, everything else is `str(v)`.
    """
    if v is None:
        return None
    if isinstance(v, str):
        return v
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float):
        return str(int(v)) if v.is_integer() else repr(v)
    if isinstance(v, datetime):
        return v.date().isoformat() if v.time() == time(0) else v.isoformat()
    if isinstance(v, (date, time)):
        return v.isoformat()
    return str(v)


def to_parsed_row(cells: Sequence[Any], *, source_row: int, columns: Sequence[str]) -> ParsedRow:
    """
    Map positional cells onto `columns`.

    Missing trailing cells become `None`. Non-blank cells beyond the schema are
    kept out of `values` and reported as a defect, so the row is rejected rather
    than silently truncated.
    """
    values = {col: decode_cell(cells[i]) if i < len(cells) else None for i, col in enumerate(columns)}

    defects: tuple[str, ...] = ()
    extra = [c for c in cells[len(columns):] if not is_blank(decode_cell(c))]
    if extra:
        defects = (f"row has {len(extra)} unexpected cell(s) beyond column {len(columns)}",)

    return ParsedRow(values=values, source_row=source_row, defects=defects)


def _is_empty_row(cells: Sequence[Any]) -> bool:
    return all(is_blank(decode_cell(c)) for c in cells)


def _data_rows(
    rows: Iterable[Sequence[Any]],
    *,
    columns: Sequence[str],
    header_rows: int,
) -> Iterator[ParsedRow]:
    """Skip headers and blank rows, yield the rest one at a time."""
    for source_row, cells in enumerate(rows, start=1):
        if source_row <= header_rows:
            continue
        if _is_empty_row(cells):
            continue
        yield to_parsed_row(cells, source_row=source_row, columns=columns)


def stream_xlsx_rows(
    stream: IO[bytes],
    *,
    columns: Sequence[str],
    header_rows: int = DEFAULT_HEADER_ROWS,
) -> Iterator[ParsedRow]:
    """
    Yields `ParsedRow` for each data row of the first worksheet of an `.xlsx` stream.

    `source_row` is the 1-based physical sheet row (header rows are counted).
    The workbook is opened read-only, so cells are streamed from the sheet XML
    instead of being loaded at once. Nothing is read until the first `next()`.
    """
    try:
        wb = openpyxl.load_workbook(stream, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise WorkbookReadError(f"file is not a readable .xlsx workbook: {e}") from e

    try:
        if not wb.worksheets:
            raise WorkbookReadError("workbook has no worksheets")
        ws = wb.worksheets[0]
        yield from _data_rows(ws.iter_rows(values_only=True), columns=columns, header_rows=header_rows)
    finally:
        wb.close()


def stream_xls_rows(
    stream: IO[bytes],
    *,
    columns: Sequence[str],
    header_rows: int = DEFAULT_HEADER_ROWS,
) -> Iterator[ParsedRow]:
    """
    Yields `ParsedRow` for each data row of a legacy `.xls` stream.

    The binary `.xls` format has no streaming reader, so the first sheet is held
    in memory while rows are yielded.
    """
    try:
        book = xlrd.open_workbook(file_contents=stream.read(), on_demand=True)
    except xlrd.XLRDError as e:
        raise WorkbookReadError(f"file is not a readable .xls workbook: {e}") from e

    try:
        if book.nsheets == 0:
            raise WorkbookReadError("workbook has no worksheets")
        sheet = book.sheet_by_index(0)

        def _cells() -> Iterator[list[Any]]:
            for i in range(sheet.nrows):
                row: list[Any] = []
                for cell in sheet.row(i):
                    if cell.ctype == xlrd.XL_CELL_DATE:
                        row.append(xlrd.xldate.xldate_as_datetime(cell.value, book.datemode))
                    elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                        row.append(None)
                    else:
                        row.append(cell.value)
                yield row

        yield from _data_rows(_cells(), columns=columns, header_rows=header_rows)
    finally:
        book.release_resources()


def stream_workbook_rows(
    stream: IO[bytes],
    *,
    filename: str,
    columns: Sequence[str],
    header_rows: int = DEFAULT_HEADER_ROWS,
) -> Iterator[ParsedRow]:
    """Pick the reader by file extension. Both readers are lazy generators."""
    if filename.lower().endswith(".xls"):
        logger.debug("reading %s with the legacy .xls reader", filename)
        return stream_xls_rows(stream, columns=columns, header_rows=header_rows)
    return stream_xlsx_rows(stream, columns=columns, header_rows=header_rows)
