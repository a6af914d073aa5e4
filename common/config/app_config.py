# common/config/app_config.py
"""
Complete seeder configuration with validation.
Database configuration for the synchronous SQLAlchemy engine.
"""

from typing import Optional, Any
from pydantic import BaseModel, Field, SecretStr, model_validator
from sqlalchemy.engine import make_url
from .config_types import EnvLogLevel, DbDriver, Environment
from .env_config import require_env, get_env, get_env_int
from .logging_config import LoggingConfig
from .seeder_config import SeederSettings, load_seeder_settings


class DatabaseConfig(BaseModel):
    """
    Database configuration.

    Either an explicit SQLAlchemy ``url`` or the individual pieces
    (driver, host, port, name, credentials). For SQLite ``name`` is the
    database file path (or ``:memory:``).
    """

    driver: DbDriver = Field(...)
    name: str = Field(..., min_length=1, description="Database name or SQLite file")

    host: Optional[str] = Field(default=None, min_length=1)
    port: Optional[int] = Field(default=None, gt=0, le=65535)

    # Authentication (keep separate from URL for security)
    username: Optional[str] = Field(default=None, min_length=1)
    password: Optional[SecretStr] = Field(default=None)  # Pydantic hides this in logs

    # Connection pooling (ignored by SQLite)
    pool_size: int = Field(default=5, ge=1, le=100)
    max_overflow: int = Field(default=10, ge=0, le=100)
    pool_timeout: int = Field(default=30, ge=1, le=300)
    pool_recycle: int = Field(default=3600, ge=300)  # Min 5 minutes

    url: Optional[str] = Field(default=None, description="Overrides all other fields")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_server_settings(self) -> "DatabaseConfig":
        """Server databases need a host unless a full URL is given."""
        if self.url is None and not self.driver.is_sqlite and not self.host:
            raise ValueError(f"DB_HOST is required for driver {self.driver.value}")
        return self

    @property
    def is_sqlite(self) -> bool:
        if self.url is not None:
            return make_url(self.url).get_backend_name() == "sqlite"
        return self.driver.is_sqlite

    def get_connection_url(self, include_password: bool = False) -> str:
        """
        Build SQLAlchemy connection URL.

        Args:
            include_password: If True, include password in URL (use for actual connections)
                            If False, mask it (use for logging)

        Returns:
            Database URL string
        """
        if self.url is not None:
            return make_url(self.url).render_as_string(
                hide_password=not include_password
            )

        scheme = f"{self.driver.dialect}+{self.driver.value}"
        if self.driver.is_sqlite:
            return f"{scheme}:///{self.name}"

        if self.username:
            if include_password and self.password:
                auth = f"{self.username}:{self.password.get_secret_value()}"
            elif self.password:
                auth = f"{self.username}:***"
            else:
                auth = self.username
            netloc = f"{auth}@{self.host}"
        else:
            netloc = f"{self.host}"

        if self.port:
            netloc = f"{netloc}:{self.port}"

        return f"{scheme}://{netloc}/{self.name}"

    def to_dict_safe(self) -> dict[str, Any]:
        """Convert to dict with sensitive data masked (safe for logging)."""
        data = self.model_dump()
        if data.get("password"):
            data["password"] = "****"
        if data.get("url"):
            data["url"] = self.get_connection_url(include_password=False)
        return data


class AppConfig(BaseModel):
    """
    Complete seeder configuration.

    All configuration is loaded from environment variables and validated
    at startup. Invalid configuration will fail fast with clear error messages.
    """

    environment: Environment = Field(default=Environment.DEVELOPMENT)

    logging: LoggingConfig
    database: Optional[DatabaseConfig] = None
    seeder: SeederSettings = Field(default_factory=SeederSettings)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_production_settings(self) -> "AppConfig":
        """
        Validate production-specific requirements.
        """
        if self.environment == Environment.PRODUCTION:
            if self.database is None:
                raise ValueError("Database config required in production")
            if self.logging.log_level == EnvLogLevel.DEBUG:
                raise ValueError("DEBUG log level not allowed in production")
        return self


def load_database_config() -> Optional[DatabaseConfig]:
    """
    Load database configuration from environment.

    Environment variables:
    Either:
    - DB_URL: Full SQLAlchemy URL (e.g. sqlite:///seed.db)

    Or:
    - DB_DRIVER: pysqlite, psycopg, psycopg2 or pymysql (required)
    - DB_NAME: Database name / SQLite file (required)
    - DB_HOST, DB_PORT: required for server databases
    - DB_USER, DB_PASSWORD: optional credentials
    - DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT, DB_POOL_RECYCLE: optional
    """
    url = get_env("DB_URL")
    driver_str = get_env("DB_DRIVER")

    # Check if database is configured at all
    if not url and not driver_str:
        return None

    pool_kwargs = {
        "pool_size": get_env_int("DB_POOL_SIZE", 5),
        "max_overflow": get_env_int("DB_MAX_OVERFLOW", 10),
        "pool_timeout": get_env_int("DB_POOL_TIMEOUT", 30),
        "pool_recycle": get_env_int("DB_POOL_RECYCLE", 3600),
    }

    if url:
        parsed = make_url(url)
        driver = (
            DbDriver(parsed.get_driver_name())
            if parsed.get_driver_name() in {d.value for d in DbDriver}
            else DbDriver.PYSQLITE
        )
        return DatabaseConfig(
            driver=driver,
            name=parsed.database or ":memory:",
            url=url,
            **pool_kwargs,
        )

    # Validate driver enum
    try:
        driver = DbDriver(driver_str)
    except ValueError:
        valid_drivers = [d.value for d in DbDriver]
        raise ValueError(
            f"Invalid DB_DRIVER: {driver_str}. Must be one of: {valid_drivers}"
        )

    password_str = get_env("DB_PASSWORD")
    port_str = get_env("DB_PORT")

    return DatabaseConfig(
        driver=driver,
        name=require_env("DB_NAME"),
        host=get_env("DB_HOST"),
        port=int(port_str) if port_str else None,
        username=get_env("DB_USER"),
        password=SecretStr(password_str) if password_str else None,
        **pool_kwargs,
    )


def load_app_config() -> AppConfig:
    """
    Load complete seeder configuration.

    Returns:
        Validated AppConfig instance

    Raises:
        ValidationError: If configuration is invalid
        ConfigurationError: If required env vars are missing
    """
    from .logging_config import load_logging_config

    env_str = get_env("ENVIRONMENT") or Environment.DEVELOPMENT.value

    try:
        environment = Environment(env_str.lower())
    except ValueError:
        valid_envs = [e.value for e in Environment]
        raise ValueError(
            f"Invalid ENVIRONMENT: {env_str}. Must be one of: {valid_envs}"
        )

    return AppConfig(
        environment=environment,
        logging=load_logging_config(),
        database=load_database_config(),
        seeder=load_seeder_settings(environment),
    )


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "load_app_config",
    "load_database_config",
]
