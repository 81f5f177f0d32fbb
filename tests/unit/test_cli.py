from __future__ import annotations

import json
from pathlib import Path

import psycopg
import pytest

from asset_pipeline.cli.main import main
from asset_pipeline.ingest.preconditions import UploadSource
from asset_pipeline.ingest.report import ImportReport, SuccessDetail


def test_cli_help_prints_and_exits_zero(capsys: pytest.CaptureFixture[str]) -> None:
    """CLI is accessible."""
    # argparse exits via SystemExit for -h
    with pytest.raises(SystemExit) as e:
        main(["-h"])

    assert e.value.code == 0
    out = capsys.readouterr().out
    assert "usage: asset-pipeline" in out
    assert "import" in out
    assert "template" in out
    assert "db" in out


def test_cli_import_happy_path_calls_pipeline_and_prints_summary(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """
    The `import` command in isolation: the pipeline is patched, and the store
    never connects, so no Postgres is needed.
    """
    upload = tmp_path / "software.xlsx"
    upload.write_bytes(b"PK\x03\x04 pretend workbook")
    report_path = tmp_path / "report.json"

    calls: dict[str, object] = {}

    def fake_run_import(store: object, *, category: str, source: UploadSource) -> ImportReport:
        calls["category"] = category
        calls["filename"] = source.filename
        calls["size"] = source.size
        return ImportReport(
            success=True,
            message="Software asset import finished: imported 1 rows",
            total_rows=1,
            success_count=1,
            success_records=[SuccessDetail(row_number=3, record_id="SW-1", name="Kylin OS", unit="Unit A")],
            category="software",
        )

    import asset_pipeline.cli.main as cli_main

    monkeypatch.setattr(cli_main, "run_import", fake_run_import)

    rc = main(["import", "--category", "software", "--input", str(upload), "--report", str(report_path)])
    assert rc == 0

    out = capsys.readouterr().out.strip()
    assert out == (
        "software: ok total=1 imported=1 skipped=0 errors=0 - Software asset import finished: imported 1 rows"
    )
    assert calls == {"category": "software", "filename": "software.xlsx", "size": upload.stat().st_size}

    written = json.loads(report_path.read_text(encoding="utf-8"))
    assert written["successCount"] == 1
    assert written["successRecords"][0]["recordId"] == "SW-1"


def test_cli_import_refuses_missing_file_without_touching_the_database(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A missing file is refused before any connection is attempted, and the exit code is 1."""
    attempts: list[object] = []

    def unreachable_db(database_url: object = None) -> object:
        attempts.append(database_url)
        raise psycopg.OperationalError("connection refused")

    import asset_pipeline.db.asset_store as asset_store

    monkeypatch.setattr(asset_store, "connect", unreachable_db)

    rc = main(["import", "--category", "cyber", "--input", str(tmp_path / "nope.xlsx")])

    assert rc == 1
    assert "failed(precondition)" in capsys.readouterr().out
    assert attempts == []


def test_cli_import_unreachable_database_is_a_persistence_failure(
    make_workbook,
    sw_row,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def unreachable_db(database_url: object = None) -> object:
        raise psycopg.OperationalError("connection refused")

    import asset_pipeline.db.asset_store as asset_store

    monkeypatch.setattr(asset_store, "connect", unreachable_db)

    rc = main(["import", "--category", "software", "--input", str(make_workbook([sw_row()]))])

    assert rc == 1
    out = capsys.readouterr().out
    assert "failed(persistence)" in out
    assert "connection refused" in out


def test_cli_template_writes_workbooks(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    single = tmp_path / "my_template.xlsx"
    assert main(["template", "--category", "software", "--output", str(single)]) == 0
    assert single.is_file()

    out_dir = tmp_path / "all"
    out_dir.mkdir()
    assert main(["template", "--all", "--output", str(out_dir)]) == 0
    assert sorted(p.name for p in out_dir.iterdir()) == [
        "cyber_asset_template.xlsx",
        "data_content_asset_template.xlsx",
        "software_asset_template.xlsx",
    ]
    assert "Wrote Cyber asset template" in capsys.readouterr().out
