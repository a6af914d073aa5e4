# csv_seeder/__init__.py
"""Seed database tables from (optionally gzipped) CSV files."""

from common.api_error import (
    MalformedHeader,
    MalformedRow,
    SeederError,
    SinkWriteFailed,
    SourceUnavailable,
    UnsupportedFormat,
)
from .loader import (
    CountingSink,
    CsvBulkLoader,
    LoadResult,
    LoaderConfig,
    MemorySink,
    TableSink,
    load_csv,
)

__version__ = "0.1.0"

__all__ = [
    "CsvBulkLoader",
    "LoadResult",
    "LoaderConfig",
    "MemorySink",
    "CountingSink",
    "TableSink",
    "load_csv",
    "SeederError",
    "SourceUnavailable",
    "UnsupportedFormat",
    "MalformedHeader",
    "MalformedRow",
    "SinkWriteFailed",
]
