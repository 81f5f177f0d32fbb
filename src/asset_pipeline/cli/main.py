from __future__ import annotations

import argparse
import logging
from contextlib import nullcontext
from pathlib import Path

from asset_pipeline.api.schemas import ImportReportResponse
from asset_pipeline.config import get_settings
from asset_pipeline.db.asset_store import PostgresAssetStore
from asset_pipeline.db.initialize import db_init
from asset_pipeline.ingest.pipeline import run_import
from asset_pipeline.ingest.preconditions import UploadSource
from asset_pipeline.ingest.templates import template_filename, write_template
from asset_pipeline.parsing.registry import RecordCategory, get_category_spec

CATEGORIES = [c.value for c in RecordCategory]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """
    A CLI for importing asset spreadsheets into a Postgres database.

    The `cmd` options are:
    ## import:
    Stream a workbook through validation and duplicate checks, then save the valid rows.
    - `--category` as the record category,
    - `--input` as the path to the `.xlsx`/`.xls` file,
    - `--report` optionally, where to write the full JSON report.

    A one line summary prints in the terminal upon completion.

    ### Example import usage:
    - `asset-pipeline import --category software --input uploads/software.xlsx`
    - `asset-pipeline import --category cyber --input uploads/cyber.xlsx --report cyber-report.json`

    ## template:
    Write a category's template workbook (title row, label row, one example row).
    - `--output` a file path, or a directory to write `<table>_template.xlsx` into.
    - `--all` to write every category's template into `--output` (a directory).

    ## db:
    Database controlling commands, includes DB initialization functionality.
    - `init` is the command to (re)initialize the DB
    - `--sql` is an optional pointer to which dir contains the SQL file(s).

    ## serve:
    Run the HTTP API with uvicorn.
    """
    p = argparse.ArgumentParser(prog="asset-pipeline")
    p.add_argument("--log-level", default=None, help="Overrides ASSET_PIPELINE_LOG_LEVEL.")
    sub = p.add_subparsers(dest="cmd", required=True)

    # import cmd
    imp = sub.add_parser("import", help="Import a workbook into a category (with a full report).")
    imp.add_argument("--category", required=True, choices=CATEGORIES)
    imp.add_argument("--input", required=True, help="Path to input workbook (.xlsx or .xls).")
    imp.add_argument("--report", default=None, help="Write the full JSON report to this path.")

    # template cmd
    tpl = sub.add_parser("template", help="Write template workbook(s).")
    tpl_which = tpl.add_mutually_exclusive_group(required=True)
    tpl_which.add_argument("--category", choices=CATEGORIES)
    tpl_which.add_argument("--all", action="store_true")
    tpl.add_argument("--output", default=None, help="File or directory. Defaults to the template dir.")

    # db cmd
    db = sub.add_parser("db", help="Database utilities.")
    db_sub = db.add_subparsers(dest="db_cmd", required=True)

    db_init_p = db_sub.add_parser("init", help="Initialize DB schema from SQL file(s).")
    db_init_p.add_argument("--sql", default="sql", help="Path to schema SQL file OR a directory of `.sql` files.")

    # serve cmd
    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    args = p.parse_args(argv)

    settings = get_settings()
    _configure_logging(args.log_level or settings.log_level)

    if args.cmd == "import":
        input_path = Path(args.input)
        size = input_path.stat().st_size if input_path.is_file() else 0

        with (input_path.open("rb") if size else nullcontext()) as stream:
            source = UploadSource(filename=input_path.name, size=size, stream=stream)
            store = PostgresAssetStore()
            try:
                report = run_import(store, category=args.category, source=source)
            finally:
                store.close()

        if args.report:
            Path(args.report).write_text(
                ImportReportResponse.from_report(report).model_dump_json(by_alias=True, indent=2),
                encoding="utf-8",
            )

        print(report.render_one_line())
        return 0 if report.success else 1

    if args.cmd == "template":
        out_dir = settings.template_dir
        categories = CATEGORIES if args.all else [args.category]

        for c in categories:
            spec = get_category_spec(c)
            if args.output is None:
                target = out_dir / template_filename(spec)
            else:
                out = Path(args.output)
                target = out / template_filename(spec) if (args.all or out.is_dir()) else out
            write_template(spec, target)
            print(f"Wrote {spec.label} template to {target}")
        return 0

    if args.cmd == "db" and args.db_cmd == "init":
        applied = db_init(sql_path=Path(args.sql))
        print(f"Initialized schema from {', '.join(p.name for p in applied)}")
        return 0

    if args.cmd == "serve":
        import uvicorn

        uvicorn.run("asset_pipeline.api.app:app", host=args.host, port=args.port)
        return 0

    return 2

