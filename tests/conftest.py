"""Shared pytest fixtures for all tests."""

import gzip
import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest
from sqlalchemy import text

from common.config import configure_structlog
from common.config.initialize_config import reset_config
from csv_seeder.db import DbManager
from csv_seeder.loader import Row, TableSink

# Loader and seeders log; structlog must be configured once per process.
configure_structlog(logging.DEBUG)

_ENV_KEYS = [
    "ENVIRONMENT",
    "LOG_LEVEL",
    "DB_URL",
    "DB_DRIVER",
    "DB_NAME",
    "DB_HOST",
    "DB_PORT",
    "DB_USER",
    "DB_PASSWORD",
    "DB_POOL_SIZE",
    "DB_MAX_OVERFLOW",
    "DB_POOL_TIMEOUT",
    "DB_POOL_RECYCLE",
    "SEED_CSV_PATH",
    "SEED_CSV_DELIMITER",
    "SEED_TRUNCATE",
    "SEED_CHUNK_SIZE",
    "SEED_DATABASE_NAME",
]

ACCOUNTS_DDL = """
CREATE TABLE accounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    login VARCHAR(40) NOT NULL UNIQUE,
    active INTEGER NOT NULL,
    nickname VARCHAR(40),
    created_at DATETIME
)
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from the developer's environment and loaded config."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # Same level as the structlog configuration above
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    reset_config()
    yield
    reset_config()


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write CSV text to tmp_path, optionally gzip-compressed."""

    def _write(name: str, content: str, compress: bool = False) -> Path:
        path = tmp_path / name
        data = content.encode("utf-8")
        path.write_bytes(gzip.compress(data) if compress else data)
        return path

    return _write


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'tests.db'}"


@pytest.fixture
def db_manager(sqlite_url: str):
    """SQLite database named "tests" holding an empty accounts table."""
    manager = DbManager(sqlite_url)
    with manager.begin() as conn:
        conn.execute(text(ACCOUNTS_DDL))
    yield manager
    manager.dispose()


@pytest.fixture
def fetch_accounts(db_manager: DbManager) -> Callable[[], list[tuple]]:
    """Rows of the accounts table as (login, active, nickname), in id order."""

    def _fetch() -> list[tuple]:
        with db_manager.engine.connect() as conn:
            return [
                tuple(row)
                for row in conn.execute(
                    text("SELECT login, active, nickname FROM accounts ORDER BY id")
                )
            ]

    return _fetch


class RecordingSink(TableSink):
    """Records every call in order; optionally fails on the n-th batch."""

    def __init__(
        self,
        fail_on_batch: Optional[int] = None,
        max_parameters: Optional[int] = None,
    ) -> None:
        self.events: list[str] = []
        self.batches: list[list[Row]] = []
        self._fail_on_batch = fail_on_batch
        self._max_parameters = max_parameters

    @property
    def name(self) -> str:
        return "recording"

    def clear(self) -> None:
        self.events.append("clear")
        self.batches = []

    def insert_rows(self, rows: Sequence[Row]) -> None:
        if self._fail_on_batch is not None and len(self.batches) + 1 == self._fail_on_batch:
            raise RuntimeError("disk full")
        self.events.append("insert")
        self.batches.append(list(rows))

    def max_parameters_per_statement(self) -> Optional[int]:
        return self._max_parameters

    @property
    def batch_sizes(self) -> list[int]:
        return [len(batch) for batch in self.batches]


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_sink() -> type[RecordingSink]:
    """The RecordingSink class, for tests needing failure or parameter hints."""
    return RecordingSink
