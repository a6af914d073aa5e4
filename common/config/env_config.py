# common/config/env_config.py
import os
from typing import Optional
from common.api_error import ConfigurationError


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Get Env variable with optional default
    """
    return os.getenv(name, default=default)


def require_env(name: str) -> str:
    """
    Get required environment variable or raise immediately.
    """
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(
            f"Missing required env variables: {name}", variable=name
        )
    return value


def get_env_int(name: str, default: int) -> int:
    """
    Get an integer env variable, falling back to default when unset.

    Raises:
        ConfigurationError: If the variable is set but not an integer
    """
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"Env variable {name} must be an integer, got: {value!r}",
            variable=name,
        ) from exc


__all__ = ["require_env", "get_env", "get_env_int"]
