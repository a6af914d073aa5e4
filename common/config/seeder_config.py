# common/config/seeder_config.py
"""Settings shared by every CSV seeder in a run."""

from pathlib import Path
from typing import Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator
from .config_types import EnvBool, Environment
from .env_config import get_env
from common.api_error import ConfigurationError

DEFAULT_CSV_PATH = Path("database") / "seeds" / "csv"
DEFAULT_CHUNK_SIZE = 200

ChunkSize = Union[Literal["auto"], int]


class SeederSettings(BaseModel):
    """
    Immutable settings handed to each seeder.

    Replaces process-wide mutable state (csv path, delimiter, truncate
    flag, database name) with one value passed explicitly.
    """

    csv_path: Path = Field(default=DEFAULT_CSV_PATH)
    delimiter: str = Field(default=",", min_length=1, max_length=1)
    truncate: bool = False
    chunk_size: ChunkSize = DEFAULT_CHUNK_SIZE
    database_name: Optional[str] = Field(default=None, min_length=1)
    environment: Environment = Environment.DEVELOPMENT

    model_config = {"frozen": True}

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: ChunkSize) -> ChunkSize:
        if v != "auto" and v < 1:
            raise ValueError("chunk_size must be a positive integer or 'auto'")
        return v

    def resolved_csv_path(self) -> Path:
        """Absolute CSV directory; relative paths resolve against the cwd."""
        if self.csv_path.is_absolute():
            return self.csv_path
        return Path.cwd() / self.csv_path


def parse_chunk_size(value: str) -> ChunkSize:
    """Parse a chunk size given as text ("auto" or a positive integer)."""
    value = value.strip().lower()
    if value == "auto":
        return "auto"
    try:
        chunk_size = int(value)
    except ValueError:
        chunk_size = 0
    if chunk_size < 1:
        raise ConfigurationError(
            f"Chunk size must be a positive integer or 'auto', got: {value!r}"
        )
    return chunk_size


def load_seeder_settings(
    environment: Environment = Environment.DEVELOPMENT,
) -> SeederSettings:
    """
    Load seeder settings from environment.

    Environment variables (all optional):
    - SEED_CSV_PATH: directory holding the CSV files
    - SEED_CSV_DELIMITER: single character field delimiter
    - SEED_TRUNCATE: "true" to TRUNCATE instead of DELETE before seeding
    - SEED_CHUNK_SIZE: rows per INSERT, or "auto"
    - SEED_DATABASE_NAME: database name used in default file names
    """
    truncate_str = get_env("SEED_TRUNCATE")
    try:
        truncate = EnvBool.parse(truncate_str) if truncate_str else False
    except ValueError as exc:
        raise ConfigurationError(
            f"SEED_TRUNCATE must be 'true' or 'false', got: {truncate_str!r}",
            variable="SEED_TRUNCATE",
        ) from exc

    chunk_size_str = get_env("SEED_CHUNK_SIZE")

    return SeederSettings(
        csv_path=Path(get_env("SEED_CSV_PATH") or DEFAULT_CSV_PATH),
        delimiter=get_env("SEED_CSV_DELIMITER") or ",",
        truncate=truncate,
        chunk_size=(
            parse_chunk_size(chunk_size_str) if chunk_size_str else DEFAULT_CHUNK_SIZE
        ),
        database_name=get_env("SEED_DATABASE_NAME"),
        environment=environment,
    )


__all__ = [
    "ChunkSize",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_CSV_PATH",
    "SeederSettings",
    "load_seeder_settings",
    "parse_chunk_size",
]
