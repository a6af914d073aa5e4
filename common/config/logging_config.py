# common/config/logging_config.py
from dataclasses import dataclass
from .env_config import get_env
from .config_types import EnvLogLevel
from common.api_error import ConfigurationError

_default_log_level_env_key = "LOG_LEVEL"
_default_log_level = EnvLogLevel.INFO


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    log_level: EnvLogLevel

    @property
    def level_value(self) -> str:
        """Get string value of log level."""
        return self.log_level.value

    @property
    def level_int(self) -> int:
        """Get numeric log level."""
        return self.log_level.level


def load_logging_config(
    log_level_env_key: str = _default_log_level_env_key,
) -> LoggingConfig:
    """
    Load logging configuration from environment.

    Unlike the database settings the log level is optional: a seeding run
    from a fresh checkout logs at INFO.

    Args:
        log_level_env_key: Environment variable name

    Returns:
        LoggingConfig instance

    Raises:
        ConfigurationError: If LOG_LEVEL is set to an unknown level
    """
    log_level_val = (
        get_env(log_level_env_key) or _default_log_level.value
    ).upper()

    try:
        return LoggingConfig(log_level=EnvLogLevel(log_level_val))
    except ValueError as exc:
        valid_levels = ", ".join(level.value for level in EnvLogLevel)

        raise ConfigurationError(
            f"Invalid logging configuration. "
            f"{log_level_env_key} must be one of [{valid_levels}]",
            variable=log_level_env_key,
        ) from exc


__all__ = [
    "_default_log_level_env_key",
    "LoggingConfig",
    "load_logging_config",
]
