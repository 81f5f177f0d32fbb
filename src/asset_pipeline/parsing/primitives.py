from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from .types import RejectCode

# Postgres `integer` bounds
PG_INT_MAX = 2_147_483_647


@dataclass(frozen=True, slots=True)
class ParseError(Exception):
    """Handles rejected fields, with additional rejection details from error messages."""
    code: RejectCode
    detail: str


def is_blank(v: Any) -> bool:
    """`None`, or a string holding only whitespace."""
    if v is None:
        return True
    return isinstance(v, str) and v.strip() == ""


## -- text / str fields

def parse_required_text(v: Any, *, field: str) -> str:
    """
    Required text, kept exactly as decoded from the sheet.
    Raises on `None` or whitespace-only input.

    No trimming or case folding here: key comparison is exact-string.
    """
    if is_blank(v):
        raise ParseError(RejectCode.missing_required, f"{field}: missing required text")
    return str(v)


def parse_optional_text(v: Any) -> str | None:
    """Optional text, `None` when blank."""
    if is_blank(v):
        return None
    return str(v)


## -- typed fields (`None` raises)

def parse_int(v: Any, *, field: str, minimum: int | None = None, maximum: int | None = PG_INT_MAX) -> int:
    """Parse integers, then enforce the inclusive `[minimum, maximum]` range (default upper bound fits `integer`)."""
    if is_blank(v):
        raise ParseError(RejectCode.missing_required, f"{field}: missing required int")
    s = str(v).strip()
    try:
        # "12.3" or "1e-4" should fail, not be coerced to `int`
        if ("." in s) or ("e" in s.lower()):
            raise ValueError(s)
        n = int(s)
    except ValueError:
        raise ParseError(RejectCode.invalid_int, f"{field}: invalid int value {v!r}")

    _check_range(n, field=field, minimum=minimum, maximum=maximum)
    return n


def parse_decimal(
    v: Any,
    *,
    field: str,
    places: int = 2,
    precision: int = 12,
    minimum: Decimal | None = None,
    maximum: Decimal | None = None,
) -> Decimal:
    """
    Parse a decimal quantized to `places` (half-up), then enforce the inclusive range.

    `precision` caps the total digit count like Postgres `numeric(precision, places)`.
    """
    if is_blank(v):
        raise ParseError(RejectCode.missing_required, f"{field}: missing required numeric")
    try:
        d = Decimal(str(v).strip())
        if not d.is_finite():
            raise ValueError(v)
        # quantize raises InvalidOperation past the context's 28 digits
        d = d.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ParseError(RejectCode.invalid_numeric, f"{field}: invalid numeric value {v!r}")

    # total digits, ignoring sign and decimal point
    if len(d.as_tuple().digits) > precision:
        raise ParseError(
            RejectCode.invalid_numeric, f"{field}: numeric exceeds precision ({precision},{places}): {v!r}"
        )
    _check_range(d, field=field, minimum=minimum, maximum=maximum)
    return d



def parse_date_iso(v: Any, *, field: str) -> date:
    """Parse `YYYY-MM-DD`. Timestamps (`YYYY-MM-DDTHH:MM:SS`) keep only their date part."""
    if is_blank(v):
        raise ParseError(RejectCode.missing_required, f"{field}: missing required date")
    s = str(v).strip()
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        raise ParseError(RejectCode.invalid_date, f"{field}: invalid date (expected YYYY-MM-DD): {v!r}")


def _check_range(value: Any, *, field: str, minimum: Any, maximum: Any) -> None:
    if minimum is not None and value < minimum:
        raise ParseError(RejectCode.out_of_range, f"{field}: {value} is below the minimum {minimum}")
    if maximum is not None and value > maximum:
        raise ParseError(RejectCode.out_of_range, f"{field}: {value} is above the maximum {maximum}")
