# common/config/config_types.py
"""Configuration type definitions."""

from enum import Enum
import logging


class EnvBool(str, Enum):
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def parse(cls, value: str) -> bool:
        """Parse an env string ("true"/"false", any case) into a bool."""
        return cls(value.strip().lower()) == cls.TRUE

    def __str__(self) -> str:
        """Return string value for easy printing."""
        return self.value


class EnvLogLevel(str, Enum):
    """
    Supported log levels.

    Inherits from str so enum values serialize naturally to JSON/strings
    without custom serialization logic.

    Examples:
        >>> EnvLogLevel.INFO
        <EnvLogLevel.INFO: 'INFO'>
        >>> str(EnvLogLevel.INFO)
        'INFO'
    """

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def level(self) -> int:
        """Get numeric logging level for stdlib logging module."""
        return getattr(logging, self.value)

    def __str__(self) -> str:
        """Return string value for easy printing."""
        return self.value


class Environment(str, Enum):
    """Environment the seeder runs in. Seeders may be restricted to one."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @property
    def is_production(self) -> bool:
        """Check if production environment."""
        return self == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if testing environment."""
        return self == Environment.TESTING

    @property
    def is_development(self) -> bool:
        """Check if development environment."""
        return self == Environment.DEVELOPMENT

    def __str__(self) -> str:
        return self.value


class DbDriver(str, Enum):
    """Supported (synchronous) database drivers."""

    PYSQLITE = "pysqlite"
    PSYCOPG = "psycopg"
    PSYCOPG2 = "psycopg2"
    PYMYSQL = "pymysql"

    @property
    def dialect(self) -> str:
        """SQLAlchemy dialect name for this driver."""
        if self == DbDriver.PYSQLITE:
            return "sqlite"
        if self == DbDriver.PYMYSQL:
            return "mysql"
        return "postgresql"

    @property
    def is_sqlite(self) -> bool:
        return self == DbDriver.PYSQLITE


__all__ = [
    "EnvBool",
    "EnvLogLevel",
    "Environment",
    "DbDriver",
]
