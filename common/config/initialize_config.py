# common/config/initialize_config.py
"""
Configuration initialization module.

Handles the complete seeder configuration lifecycle.
"""
from typing import Optional, List
from pydantic import ValidationError
from .app_config import AppConfig, load_app_config
from .structlog_config import configure_structlog
from common.api_error import ConfigurationError


class _ConfigState:
    """
    Singleton holding the validated configuration.
    """

    _instance: Optional["_ConfigState"] = None
    _config: Optional[AppConfig]

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = None
        return cls._instance

    @property
    def config(self) -> AppConfig:
        """Get seeder configuration."""
        if not self._config:
            raise RuntimeError(
                "Configuration not initialized. Call initialize_config() at startup."
            )
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._config is not None

    def set_config(self, config: AppConfig) -> None:
        """Set (or replace) seeder configuration."""
        self._config = config

    def reset(self) -> None:
        """Forget the configuration. FOR TESTING ONLY."""
        self._config = None


_state = _ConfigState()


def _format_validation_error(error: ValidationError) -> str:
    errors: List[str] = []
    for item in error.errors():
        field = ".".join(str(x) for x in item["loc"])
        errors.append(f"{field}: {item['msg']}")
    return "Configuration validation failed:\n" + "\n".join(
        f"  - {e}" for e in errors
    )


def initialize_config(json_logs: bool = False) -> AppConfig:
    """
    Initialize and validate all seeder configuration.

    Call once at startup (the CLI does) before seeding. Configuration is
    validated using Pydantic and will fail fast with clear error messages
    if invalid.

    Args:
        json_logs: Render logs as JSON lines instead of the console format

    Returns:
        The validated AppConfig (also available via get_config())

    Raises:
        ConfigurationError: If configuration is invalid or missing
    """
    try:
        config = load_app_config()
    except ValidationError as e:
        # Convert Pydantic errors to ConfigurationError with better messages
        raise ConfigurationError(_format_validation_error(e)) from e
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    configure_structlog(config.logging.level_int, json_logs=json_logs)
    _state.set_config(config)
    return config


def get_config() -> AppConfig:
    """
    Get validated seeder configuration.

    Returns:
        AppConfig instance

    Raises:
        RuntimeError: If not initialized
    """
    return _state.config


def reset_config() -> None:
    """Forget the loaded configuration. FOR TESTING ONLY."""
    _state.reset()


__all__ = ["initialize_config", "get_config", "reset_config"]
