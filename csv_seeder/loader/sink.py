# csv_seeder/loader/sink.py
"""Destinations for loaded rows."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from .records import Row


class TableSink(ABC):
    """
    Abstract destination of a load, standing in for a database table.

    Implementations must accept batches in call order and never reorder
    rows within a batch.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Sink name for identification in logs."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every row from the destination. Idempotent."""
        pass

    @abstractmethod
    def insert_rows(self, rows: Sequence[Row]) -> None:
        """
        Write one batch of rows.

        Args:
            rows: Rows sharing the same columns, in file order
        """
        pass

    def max_parameters_per_statement(self) -> Optional[int]:
        """
        Bound-parameter ceiling of one insert statement, if any.

        Used to derive the batch size when the loader runs with
        ``chunk_size="auto"``.
        """
        return None


class MemorySink(TableSink):
    """
    Keeps every batch in memory.

    Used in tests and by callers that want the rows back. ``batches`` records the exact batch
    boundaries the loader produced.
    """

    def __init__(self, name: str = "memory", max_parameters: Optional[int] = None):
        self._name = name
        self._max_parameters = max_parameters
        self.batches: list[list[Row]] = []
        self.clear_calls = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def rows(self) -> list[Row]:
        return [row for batch in self.batches for row in batch]

    def clear(self) -> None:
        self.clear_calls += 1
        self.batches = []

    def insert_rows(self, rows: Sequence[Row]) -> None:
        self.batches.append(list(rows))

    def max_parameters_per_statement(self) -> Optional[int]:
        return self._max_parameters



class CountingSink(TableSink):
    """
    Counts rows and batches without keeping them.

    Used for dry runs: memory stays bounded by the loader's batch, not by
    the size of the file.
    """

    def __init__(self, name: str = "count", max_parameters: Optional[int] = None):
        self._name = name
        self._max_parameters = max_parameters
        self.rows = 0
        self.batches = 0
        self.clear_calls = 0

    @property
    def name(self) -> str:
        return self._name

    def clear(self) -> None:
        self.clear_calls += 1
        self.rows = 0
        self.batches = 0

    def insert_rows(self, rows: Sequence[Row]) -> None:
        self.rows += len(rows)
        self.batches += 1

    def max_parameters_per_statement(self) -> Optional[int]:
        return self._max_parameters


__all__ = ["TableSink", "MemorySink", "CountingSink"]
