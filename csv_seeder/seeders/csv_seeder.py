# csv_seeder/seeders/csv_seeder.py
"""
Base seeder: fills one table from its CSV file.

By default the file is ``{csv_path}/{database}_{table}.csv`` where
``csv_path`` comes from SeederSettings (default ``database/seeds/csv``).
"""

from pathlib import Path
from typing import Iterable, Optional, Union

from common.api_error import SeederEnvironmentError, SeederError
from common.config import ChunkSize, Environment, SeederSettings
from common.logger import AppLogger, get_app_logger
from csv_seeder.db import DbManager, SqlTableSink
from csv_seeder.loader import (
    DEFAULT_NULL_TOKENS,
    CountingSink,
    CsvBulkLoader,
    LoadResult,
    LoaderConfig,
    TableSink,
)


class CsvSeeder:
    """
    Seeds a table from CSV.

    Subclass to customise; every attribute left as None falls back to
    SeederSettings:

        class AccountsSeeder(CsvSeeder):
            table = "accounts"
            environment = "testing"
            headers = ("login", "active")

        AccountsSeeder(db_manager, settings).run()

    Attributes:
        table: Table to seed
        csv_file: File name (relative to the settings' csv_path) or absolute path
        environment: Environment(s) this seeder may run in; None allows all
        chunk_size: Rows per INSERT, or "auto"
        headers: Column names when the file has no header record
        delimiter: Field delimiter
        null_tokens: Values stored as NULL
    """

    table: Optional[str] = None
    csv_file: str = ""
    environment: Optional[Union[str, Iterable[str]]] = None
    chunk_size: Optional[ChunkSize] = None
    headers: Optional[tuple[str, ...]] = None
    delimiter: Optional[str] = None
    null_tokens: frozenset[str] = DEFAULT_NULL_TOKENS

    def __init__(
        self,
        db_manager: Optional[DbManager],
        settings: SeederSettings,
        *,
        table: Optional[str] = None,
        dry_run: bool = False,
        logger: Optional[AppLogger] = None,
    ) -> None:
        self.db_manager = db_manager
        self.settings = settings
        self.dry_run = dry_run
        if table is not None:
            self.table = table
        self._logger = logger or get_app_logger(__name__)
        self.last_result: Optional[LoadResult] = None

        self.assert_can_seed()

    def assert_can_seed(self) -> None:
        """
        Raises:
            SeederEnvironmentError: Seeder restricted to other environment(s)
        """
        if self.environment is None:
            return

        allowed = (
            [self.environment]
            if isinstance(self.environment, str)
            else list(self.environment)
        )
        allowed_envs = {Environment(str(env).lower()) for env in allowed}
        if self.settings.environment not in allowed_envs:
            raise SeederEnvironmentError(
                required=", ".join(sorted(env.value for env in allowed_envs)),
                current=self.settings.environment.value,
            )

    @property
    def database_name(self) -> str:
        """
        Raises:
            SeederError: No name in the settings and no database to take it from
        """
        if self.settings.database_name:
            return self.settings.database_name
        if self.db_manager is None:
            raise SeederError(
                f"Can't name the csv file of seeder [{type(self).__name__}]: "
                "set a database name when seeding without a database",
                code="NO_DATABASE_NAME",
            )
        return self.db_manager.database_name

    def run(self) -> int:
        """Seed the table. Override to seed from several files."""
        return self.seed_with_csv()

    def seed_with_csv(self, csv_file: str = "", table: Optional[str] = None) -> int:
        """
        Replace the contents of a table with the rows of a CSV file.

        Args:
            csv_file: File name or path; defaults to the class attribute,
                then to ``{database}_{table}.csv``
            table: Table to seed; defaults to the class attribute

        Returns:
            Number of rows inserted
        """
        table = self._resolve_table(table)
        path = self.get_csv_file(table, csv_file or self.csv_file)
        sink = self.make_sink(table)

        loader = CsvBulkLoader(
            self.loader_config(), logger=self._logger.bind(table=table)
        )
        result = loader.load_with_result(path, sink, clear=True)
        self.last_result = result

        prefix = "Dry run" if self.dry_run else "Seeded"
        self._logger.info(
            f"{prefix}: {self.database_name}.{table} ({result.inserted} rows)",
            skipped=result.skipped,
        )
        return result.inserted

    def get_csv_file(self, table: str, filename: str = "") -> Path:
        """Locate the CSV file for ``table``."""
        path = Path(filename or f"{self.database_name}_{table}.csv")
        if path.is_absolute():
            return path
        return self.settings.resolved_csv_path() / path

    def loader_config(self) -> LoaderConfig:
        return LoaderConfig(
            delimiter=self.delimiter or self.settings.delimiter,
            chunk_size=(
                self.chunk_size
                if self.chunk_size is not None
                else self.settings.chunk_size
            ),
            headers=self.headers,
            null_tokens=self.null_tokens,
        )

    def make_sink(self, table: str) -> TableSink:
        if self.dry_run:
            return CountingSink(name=table)
        if self.db_manager is None:
            raise SeederError(
                f"Can't seed [{table}] without a database (use a dry run)",
                code="NO_DATABASE",
            )
        return SqlTableSink(
            self.db_manager.engine, table, truncate=self.settings.truncate
        )

    def _resolve_table(self, table: Optional[str]) -> str:
        resolved = table or self.table
        if not resolved:
            raise SeederError(
                f"Can't seed: no table set for seeder [{type(self).__name__}]",
                code="NO_TABLE",
            )
        return resolved


__all__ = ["CsvSeeder"]
