# common/api_error/config_error.py
from typing import Optional


class ConfigurationError(RuntimeError):
    """
    Raised when seeder configuration (env vars, .env file, CLI flags) is invalid.

    ``variable`` names the offending environment variable when there is one.
    """

    def __init__(self, message: str, variable: Optional[str] = None):
        self.variable = variable
        super().__init__(message)


__all__ = ["ConfigurationError"]
