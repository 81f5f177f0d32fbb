from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import IO, Sequence

logger = logging.getLogger(__name__)


class UploadPreconditionError(ValueError):
    """The upload was refused before any row was read."""


@dataclass(frozen=True)
class UploadSource:
    """An uploaded spreadsheet: its name, its size in bytes, and a binary stream over it."""
    filename: str | None
    size: int
    stream: IO[bytes] | None


def _format_limit(max_bytes: int) -> str:
    mib = max_bytes / (1024 * 1024)
    return f"{mib:g}MB" if mib >= 1 else f"{max_bytes} bytes"


def validate_upload(source: UploadSource, *, max_bytes: int, accepted_extensions: Sequence[str]) -> None:
    """
    Raise `UploadPreconditionError` unless the upload is present, non-empty,
    named with an accepted extension and no larger than `max_bytes`.

    Checks run in that order, so a 0-byte `.csv` reports the empty file.
    """
    if source.stream is None or source.size <= 0:
        raise UploadPreconditionError("Uploaded file is empty")

    filename = (source.filename or "").strip().lower()
    if not filename.endswith(tuple(ext.lower() for ext in accepted_extensions)):
        allowed = " and ".join(accepted_extensions)
        raise UploadPreconditionError(f"Only {allowed} spreadsheet files are accepted")

    if source.size > max_bytes:
        raise UploadPreconditionError(f"File exceeds the {_format_limit(max_bytes)} size limit")

    logger.debug("upload %s passed precondition checks (%d bytes)", source.filename, source.size)
