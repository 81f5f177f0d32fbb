from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence

import pytest
from openpyxl import Workbook

from asset_pipeline.config import Settings
from asset_pipeline.ingest.preconditions import UploadSource
from asset_pipeline.parsing.registry import CategorySpec
from asset_pipeline.parsing.types import ValidRecord


def _find_repo_root(start: Path) -> Path:
    marker = "pyproject.toml"
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if (p / marker).exists():
            return p
    raise RuntimeError(f"Could not find repo root from: {start}")


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """The absolute path to the repo root (finds by walking up to `pyproject.toml`)."""
    return _find_repo_root(Path(__file__))


@dataclass
class FakeAssetStore:
    """
    In-memory `AssetStore`. Records every call so tests can assert on ordering
    and on what was (not) touched.
    """
    existing: dict[str, list[Mapping[str, Any]]] = field(default_factory=dict)
    saved: dict[str, list[ValidRecord]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    fail_on_save: Exception | None = None

    def load_all(self, spec: CategorySpec) -> Sequence[Mapping[str, Any]]:
        self.calls.append(f"load_all:{spec.category.value}")
        return list(self.existing.get(spec.category.value, []))

    def save_all(self, spec: CategorySpec, records: Sequence[ValidRecord]) -> None:
        self.calls.append(f"save_all:{spec.category.value}")
        if self.fail_on_save is not None:
            raise self.fail_on_save
        self.saved.setdefault(spec.category.value, []).extend(records)


@pytest.fixture()
def store() -> FakeAssetStore:
    """A fresh in-memory store per test."""
    return FakeAssetStore()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Default settings, with templates read from a per-test directory."""
    return Settings(template_dir=tmp_path / "templates")


WorkbookFactory = Callable[..., Path]


@pytest.fixture()
def make_workbook(tmp_path: Path) -> WorkbookFactory:
    """
    Write an `.xlsx` with the two header rows the importer skips, then `rows`.
    Returns the workbook's path.
    """
    def _make(rows: Iterable[Sequence[Any]], *, name: str = "upload.xlsx", header_rows: int = 2) -> Path:
        wb = Workbook(write_only=True)
        ws = wb.create_sheet("data")
        for i in range(header_rows):
            ws.append([f"header {i + 1}"])
        for r in rows:
            ws.append(list(r))
        path = tmp_path / name
        wb.save(path)
        return path

    return _make


@pytest.fixture()
def upload_of() -> Callable[[Path], UploadSource]:
    """`UploadSource` over a file on disk, read into memory."""
    def _upload(path: Path, *, filename: str | None = None) -> UploadSource:
        data = path.read_bytes()
        return UploadSource(filename=filename or path.name, size=len(data), stream=io.BytesIO(data))

    return _upload


def software_row(
    asset_id: str = "SW-1",
    unit: str = "Unit A",
    category: str = "Operating system",
    name: str = "Kylin OS",
    quantity: Any = 1,
    unit_price: Any = "10.00",
) -> list[Any]:
    return [asset_id, unit, category, name, "Purchase", "In service", quantity, unit_price, "2024-01-01", None]


@pytest.fixture()
def sw_row() -> Callable[..., list[Any]]:
    """Builder for software sheet rows, defaults produce a valid row."""
    return software_row
