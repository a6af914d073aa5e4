# seed_db.py
"""
Database Seeding Script
=======================

Command-line utilities to seed database tables from CSV files (plain or
gzip-compressed).

It supports two modes:
- `load`: Load one CSV file into one table.
- `seed`: Seed tables from `{csv_dir}/{database}_{table}.csv`.

Usage:
    python seed_db.py load --table accounts --file data/accounts.csv.gz
    python seed_db.py seed accounts users --csv-dir database/seeds/csv --truncate

Requirements:
    - Database configuration via environment variables or a .env file
      (DB_URL, or DB_DRIVER/DB_NAME/...). Dry runs never connect; `seed
      --dry-run` only needs a database name (--database-name, SEED_DATABASE_NAME
      or the configured URL).
    - Target tables must already exist.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from pydantic import ValidationError

from common.api_error import ConfigurationError, SeederError
from common.config import (
    AppConfig,
    SeederSettings,
    initialize_config,
    parse_chunk_size,
)
from common.logger import get_app_logger
from csv_seeder.db import DbManager, SqlTableSink, database_name_from_url
from csv_seeder.loader import CountingSink, CsvBulkLoader, LoaderConfig, TableSink
from csv_seeder.seeders import SeederRegistry

logger = get_app_logger("seed_db")


def _chunk_size_arg(value: str):
    try:
        return parse_chunk_size(value)
    except ConfigurationError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def get_db_manager(config: AppConfig) -> DbManager:
    """
    Build and verify the database manager.

    Raises:
        ConfigurationError: If no database is configured
        ConnectionError: If the database is unreachable
    """
    if config.database is None:
        raise ConfigurationError(
            "Database configuration required (set DB_URL or DB_DRIVER/DB_NAME)"
        )
    db_manager = DbManager.from_config(
        config.database, database_name=config.seeder.database_name
    )
    db_manager.verify_connection()
    return db_manager


def dry_run_settings(config: AppConfig, settings: SeederSettings) -> SeederSettings:
    """
    Settings for a dry run, which never connects to the database.

    The database name used in file names comes from the settings, else from
    the configured URL (parsed, not connected).

    Raises:
        ConfigurationError: Neither source names a database
    """
    if settings.database_name:
        return settings
    if config.database is None:
        raise ConfigurationError(
            "A dry run without a database needs --database-name or SEED_DATABASE_NAME"
        )
    name = database_name_from_url(config.database.get_connection_url())
    return SeederSettings(**{**settings.model_dump(), "database_name": name})


def run_load(config: AppConfig, args: argparse.Namespace) -> int:
    """
    Load a single CSV file into a table.

    Example:
        >>> run_load(config, parser.parse_args(["load", "--table", "accounts", "--file", "a.csv"]))
    """
    loader_config = LoaderConfig(
        delimiter=args.delimiter or config.seeder.delimiter,
        chunk_size=args.chunk_size or config.seeder.chunk_size,
        encoding=args.encoding,
    )
    loader = CsvBulkLoader(loader_config, logger=logger.bind(table=args.table))

    db_manager: Optional[DbManager] = None
    sink: TableSink
    if args.dry_run:
        sink = CountingSink(name=args.table)
    else:
        db_manager = get_db_manager(config)
        sink = SqlTableSink(
            db_manager.engine,
            args.table,
            truncate=args.truncate or config.seeder.truncate,
        )

    try:
        result = loader.load_with_result(args.file, sink, clear=args.clear)
    finally:
        if db_manager is not None:
            db_manager.dispose()

    for problem in result.malformed_rows:
        print(f"Skipped: {problem.message}", file=sys.stderr)
    print(f"Loaded: {args.table} ({result.inserted} rows, {result.skipped} skipped)")
    return 0


def run_seed(config: AppConfig, args: argparse.Namespace) -> int:
    """
    Seed tables by naming convention.

    Example:
        >>> run_seed(config, parser.parse_args(["seed", "accounts"]))
    """
    overrides = {
        key: value
        for key, value in {
            "csv_path": args.csv_dir,
            "delimiter": args.delimiter,
            "chunk_size": args.chunk_size,
            "database_name": args.database_name,
            "truncate": True if args.truncate else None,
        }.items()
        if value is not None
    }
    settings = SeederSettings(**{**config.seeder.model_dump(), **overrides})

    db_manager: Optional[DbManager] = None
    if args.dry_run:
        settings = dry_run_settings(config, settings)
    else:
        db_manager = get_db_manager(config)

    try:
        registry = SeederRegistry(db_manager, settings, dry_run=args.dry_run)
        for table in args.tables:
            registry.register(table)
        results = registry.seed_all()
    finally:
        if db_manager is not None:
            db_manager.dispose()

    database = settings.database_name or db_manager.database_name  # type: ignore[union-attr]
    for table, inserted in results.items():
        print(f"Seeded: {database}.{table} ({inserted} rows)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed database tables from CSV files")
    subparsers = parser.add_subparsers(dest="mode", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--delimiter", type=str, default=None, help="Field delimiter (default ',')"
    )
    common.add_argument(
        "--chunk-size",
        type=_chunk_size_arg,
        default=None,
        help="Rows per INSERT, or 'auto' to fit the database's parameter limit",
    )
    common.add_argument(
        "--truncate", action="store_true", help="TRUNCATE instead of DELETE when clearing"
    )
    common.add_argument(
        "--dry-run", action="store_true", help="Parse and count rows without writing"
    )

    # Single file parser
    load_parser = subparsers.add_parser(
        "load", parents=[common], help="Load one CSV file into a table"
    )
    load_parser.add_argument("--table", required=True, help="Target table (REQUIRED)")
    load_parser.add_argument(
        "--file", type=Path, required=True, help="CSV file, plain or gzip (REQUIRED)"
    )
    load_parser.add_argument(
        "--clear",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Empty the table before loading (--no-clear appends)",
    )
    load_parser.add_argument(
        "--encoding", default="utf-8-sig", help="Text encoding (default utf-8-sig)"
    )

    # Convention parser
    seed_parser = subparsers.add_parser(
        "seed", parents=[common], help="Seed tables from {database}_{table}.csv files"
    )
    seed_parser.add_argument("tables", nargs="+", help="Tables to seed, in order")
    seed_parser.add_argument(
        "--csv-dir", type=Path, default=None, help="Directory holding the CSV files"
    )
    seed_parser.add_argument(
        "--database-name", default=None, help="Database name used in file names"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point for database seeding.

    Returns:
        Process exit code: 0 on success, 1 on a seeding error, 2 on a
        configuration error
    """
    args = build_parser().parse_args(argv)

    load_dotenv()
    try:
        config = initialize_config()
    except ConfigurationError as e:
        print(f"FATAL: Configuration error:\n{e}", file=sys.stderr)
        return 2

    try:
        if args.mode == "load":
            return run_load(config, args)
        return run_seed(config, args)
    except (ConfigurationError, ValidationError) as e:
        logger.error("Configuration error", error=str(e))
        return 2
    except (SeederError, ConnectionError) as e:
        logger.error("Seeding failed", error=str(e), code=getattr(e, "code", None))
        return 1


if __name__ == "__main__":
    sys.exit(main())
