# csv_seeder/db/db_manager.py
"""
Database manager focused on connection management for seeding runs.

Design principles:
- Single responsibility: engine/connection/session lifecycle only
- Fail fast: invalid configuration or unreachable database stops the run
- Explicit over implicit: tables must already exist (seeding never migrates)
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from sqlalchemy import Connection, Engine, create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from common.config import DatabaseConfig
from common.logger import get_app_logger

logger = get_app_logger(__name__)


def database_name_from_url(url: str) -> str:
    """
    Database name as a seeder sees it; SQLite files use their stem.

    Parses the URL only, no driver is loaded and nothing connects.
    """
    parsed = make_url(url)
    database = parsed.database or ""
    if parsed.get_backend_name() == "sqlite":
        if not database or database == ":memory:":
            return "memory"
        return Path(database).stem
    return database


class DbManager:
    """
    Database engine and session manager.

    Usage:
        db_manager = DbManager.from_config(config.database)
        db_manager.verify_connection()

        with db_manager.begin() as conn:
            conn.execute(...)

        db_manager.dispose()
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True,
        echo: bool = False,
        database_name: Optional[str] = None,
        connect_args: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize database manager.

        Args:
            url: SQLAlchemy database URL (sqlite:///seed.db, postgresql+psycopg://...)
            pool_size: Number of persistent connections (server databases only)
            max_overflow: Additional connections beyond pool_size
            pool_timeout: Seconds to wait for connection from pool
            pool_recycle: Recycle connections after N seconds
            pool_pre_ping: Test connections before using
            echo: Log all SQL statements (use for debugging)
            database_name: Name used in default CSV file names; derived
                from the URL when omitted
            connect_args: Driver-specific connection arguments
        """
        self._validate_url(url)
        parsed = make_url(url)

        self._config: dict[str, Union[str, int]] = {
            "url": parsed.render_as_string(hide_password=True),
            "dialect": parsed.get_backend_name(),
        }

        engine_kwargs: dict[str, Any] = {
            "echo": echo,
            "pool_pre_ping": pool_pre_ping,
            "connect_args": connect_args or {},
        }
        # SQLite uses a single-connection pool; sizing options do not apply
        if parsed.get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
            )
            self._config.update(pool_size=pool_size, max_overflow=max_overflow)

        self.engine: Engine = create_engine(url, **engine_kwargs)
        self.session_maker = sessionmaker(self.engine, expire_on_commit=False)
        self._database_name = database_name or database_name_from_url(url)
        self._verified = False

        logger.debug(
            "DbManager initialized",
            url=self._config["url"],
            database=self._database_name,
        )

    @classmethod
    def from_config(
        cls,
        config: DatabaseConfig,
        *,
        database_name: Optional[str] = None,
        **kwargs: Any,
    ) -> "DbManager":
        """
        Create DbManager from DatabaseConfig.

        Args:
            config: DatabaseConfig instance
            database_name: Overrides the name used in default CSV file names
            **kwargs: Additional arguments passed to __init__

        Example:
            db_manager = DbManager.from_config(config.database)
        """
        return cls(
            url=config.get_connection_url(include_password=True),
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            database_name=database_name,
            **kwargs,
        )

    @staticmethod
    def _validate_url(url: str) -> None:
        """Validate database URL format."""
        if not url or "://" not in url:
            raise ValueError(
                f"Invalid database URL. Expected e.g. sqlite:///seed.db, got: {url[:20]}..."
            )

    @property
    def database_name(self) -> str:
        return self._database_name

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def verify_connection(self) -> None:
        """
        Verify database connection on startup.
        Fails fast if connection cannot be established.

        Raises:
            ConnectionError: If connection fails
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            self._verified = True
            logger.info("Database connection verified", database=self._database_name)
        except Exception as e:
            logger.error("Database connection failed", error=str(e))
            raise ConnectionError(f"Failed to connect to database: {e}") from e

    @contextmanager
    def begin(self) -> Iterator[Connection]:
        """
        Connection inside one transaction: commit on success, rollback on error.

        Wrap a whole load in it to make the load atomic:

            with db_manager.begin() as conn:
                loader.load(path, SqlTableSink(conn, "accounts"), clear=True)
        """
        with self.engine.begin() as conn:
            yield conn

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Provide a transactional ORM session.

        Automatically commits on success, rolls back on exception.
        """
        session = self.session_maker()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error("Session error, rolled back", error=str(e))
            raise
        finally:
            session.close()

    def execute_scalar(
        self,
        query: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Execute query and return single scalar value.

        Example:
            count = db_manager.execute_scalar("SELECT COUNT(*) FROM accounts")
        """
        with self.engine.connect() as conn:
            return conn.execute(text(query), params or {}).scalar()

    def dispose(self) -> None:
        """
        Dispose of all connections and cleanup resources.
        Call this at the end of a seeding run.
        """
        self.engine.dispose()
        logger.debug("Database connections disposed")

    def get_config_snapshot(self) -> dict[str, Any]:
        """Get current configuration (for monitoring/debugging)."""
        return {**self._config, "database": self._database_name}


__all__ = ["DbManager", "database_name_from_url"]
