from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..db.purchase_invoices import PersistenceError, PurchaseInvoiceWriter, load_suppliers
from ..ingest.delimited import read_text_file
from ..ingest.errors import IngestionError
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import ImportConfig
from ..services.batch_importer import Persist
from ..services.session import ImportSession
from ..services.summary import render_preview, render_summary_line
from ..services.validator import ValidationOptions

"""CLI entrypoint.

Flow:
- load .env and config/import.yml
- take the supplier snapshot (database, or the config's offline list when
  DISABLE_DB_CONNECT=1)
- ingest one input (--paste / --csv / --xlsx / --ai-json) and print the preview
- unless --dry-run, import the valid rows and print the SUMMARY line
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

logger = logging.getLogger(__name__)


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Provide a psycopg2 cursor on an autocommit connection.

    Resolution order: DATABASE_URL / PGDSN, then PG* variables, then the
    config's database section.
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    # one transaction per invoice: a failed row never rolls back earlier ones
    conn.autocommit = True
    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so its PostgreSQL settings take priority."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Purchase invoice importer")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--paste", metavar="FILE", help="Pasted spreadsheet cells (text file, '-' for stdin)")
    src.add_argument("--csv", metavar="FILE", help="CSV file upload")
    src.add_argument("--xlsx", metavar="FILE", help="Spreadsheet upload (first sheet)")
    src.add_argument("--ai-json", metavar="FILE", help="JSON answer of the AI extractor")
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Config file (YAML)")
    p.add_argument("--dry-run", action="store_true", help="Show the preview and exit without importing")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _offline_persist(payload: dict[str, Any]) -> None:
    logger.debug("mock-insert invoice=%s total=%s", payload["invoice_number"], payload["total"])


def _ingest(session: ImportSession, args: argparse.Namespace) -> None:
    if args.csv:
        session.load_file(Path(args.csv))
    elif args.xlsx:
        session.load_spreadsheet(Path(args.xlsx))
    elif args.ai_json:
        path = Path(args.ai_json)
        session.load_ai_response(read_text_file(path), name=path.name)
    elif args.paste == "-":
        session.load_paste(read_text_file(getattr(sys.stdin, "buffer", sys.stdin)))
    else:
        session.load_paste(read_text_file(Path(args.paste)))


def _run_session(session: ImportSession, args: argparse.Namespace, persist: Persist) -> int:
    try:
        _ingest(session, args)
    except IngestionError as e:
        logger.error("ingestion: %s", e)
        return EXIT_FATAL

    for line in render_preview(session.rows):
        print(line)

    if not args.dry_run:
        session.run_import(persist)

    summary_line = render_summary_line(session.rows, session.summary)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])

    invalid = len(session.rows) - len(session.valid_rows)
    if invalid or session.summary.failed:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    app_logger = setup_logging()

    # None only: an explicit [] must not fall back to sys.argv (pytest args)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(Path(args.config))
    except ConfigError as e:
        app_logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug(app_logger)
        app_logger.debug("debug mode enabled")

    error_log = ErrorLogBuffer(cfg.logs_dir)
    options = ValidationOptions.from_config(cfg)

    try:
        if os.getenv("DISABLE_DB_CONNECT") == "1":
            app_logger.info(f"mode=offline suppliers={len(cfg.suppliers)}")
            session = ImportSession(cfg.suppliers, options, error_log)
            return _run_session(session, args, _offline_persist)

        try:
            with _db_connection(cfg) as cur:
                suppliers = load_suppliers(cur, cfg.database.user_id)
                app_logger.info(f"mode=live suppliers={len(suppliers)}")
                session = ImportSession(suppliers, options, error_log)
                writer = PurchaseInvoiceWriter(cur, user_id=cfg.database.user_id)
                return _run_session(session, args, writer)
        except (psycopg2.Error, PersistenceError) as e:
            app_logger.error(f"database: {e}")
            return EXIT_FATAL
    finally:
        log_path = error_log.flush()
        if log_path is not None:
            app_logger.info(f"error log written: {log_path}")
