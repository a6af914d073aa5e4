# csv_seeder/loader/csv_loader.py
"""
Streaming CSV-to-table bulk loader.

Data flow:
    source -> format sniff (plain / gzip) -> csv records -> header
    -> rows (header x fields, null sentinels -> None) -> batches -> sink

Memory stays bounded: at most one open batch (``chunk_size`` rows) and
one in-flight record are held at any time.
"""

import csv
import zlib
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from common.api_error import MalformedRow, SinkWriteFailed, SourceUnavailable
from common.logger import AppLogger, PhaseTimer, get_app_logger
from .loader_config import LoaderConfig
from .records import Row, build_row, read_records, validate_header
from .sink import TableSink
from .source import Source, SourceFormat, describe_source, open_source

# Errors the csv/gzip/codec stack raises while pulling records
_READ_ERRORS = (OSError, EOFError, zlib.error, UnicodeDecodeError)


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one load."""

    inserted: int
    batches: int
    header: tuple[str, ...] = ()
    source_format: SourceFormat = SourceFormat.PLAIN
    malformed_rows: tuple[MalformedRow, ...] = field(default_factory=tuple)

    @property
    def skipped(self) -> int:
        return len(self.malformed_rows)


def _guarded(
    records: Iterator[tuple[int, list[str]]], name: str
) -> Iterator[tuple[int, list[str]]]:
    """Re-raise read failures of the underlying stream as SourceUnavailable."""
    line_number = 0
    try:
        for line_number, fields in records:
            yield line_number, fields
    except csv.Error as exc:
        raise SourceUnavailable(
            f"Can't parse csv source [{name}] after line {line_number}: {exc}",
            source=name,
        ) from exc
    except _READ_ERRORS as exc:
        raise SourceUnavailable(f"Failed reading csv source [{name}]: {exc}", source=name) from exc


class CsvBulkLoader:
    """
    Loads a CSV source into a TableSink in bounded batches.

    Usage:
        loader = CsvBulkLoader(LoaderConfig(chunk_size=500))
        inserted = loader.load("accounts.csv.gz", sink, clear=True)
        for problem in loader.malformed_rows:
            print(problem.message)

    A loader may be reused; ``malformed_rows`` and ``last_result`` describe
    the most recent call to load().
    """

    def __init__(
        self,
        config: Optional[LoaderConfig] = None,
        logger: Optional[AppLogger] = None,
    ) -> None:
        self.config = config or LoaderConfig()
        self._logger = logger or get_app_logger(__name__)
        self.malformed_rows: list[MalformedRow] = []
        self.last_result: Optional[LoadResult] = None

    def load(self, source: Source, sink: TableSink, *, clear: bool = False) -> int:
        """
        Stream ``source`` into ``sink``.

        Args:
            source: Path, binary stream or text stream; may be gzip-compressed
            sink: Destination table
            clear: Call ``sink.clear()`` once before the first insert

        Returns:
            Number of rows inserted (header and malformed rows excluded)

        Raises:
            SourceUnavailable: Source missing/unreadable (before any sink call)
                or failing mid-read
            UnsupportedFormat: Content neither plain text nor gzip (before any
                sink call)
            MalformedHeader: Duplicate column names (before any sink call)
            SinkWriteFailed: Sink rejected the clear or a batch; batches
                flushed earlier stay applied
        """
        return self.load_with_result(source, sink, clear=clear).inserted

    def load_with_result(
        self, source: Source, sink: TableSink, *, clear: bool = False
    ) -> LoadResult:
        """Same as load(), returning the full LoadResult."""
        config = self.config
        name = describe_source(source)
        log = self._logger.bind(source=name, sink=sink.name)
        timer = PhaseTimer()

        self.malformed_rows = []
        inserted = 0
        batches = 0

        with timer.capture("total"), open_source(source, config.encoding) as opened:
            records = _guarded(read_records(opened.stream, config), name)
            header = self._read_header(records)

            if clear:
                self._clear(sink)
                log.debug("Sink cleared")

            if header is None:
                log.info("CSV source is empty", format=str(opened.format))
                result = LoadResult(0, 0, (), opened.format)
                self.last_result = result
                return result

            chunk_size = config.resolve_chunk_size(
                len(header), sink.max_parameters_per_statement()
            )
            log.debug("Loading CSV", columns=len(header), chunk_size=chunk_size)

            batch: list[Row] = []
            for line_number, fields in records:
                try:
                    row = build_row(header, fields, line_number, config.null_tokens)
                except MalformedRow as problem:
                    log.warning(
                        "Skipping malformed row",
                        line=problem.line_number,
                        expected=problem.expected,
                        actual=problem.actual,
                    )
                    self.malformed_rows.append(problem)
                    continue

                batch.append(row)
                if len(batch) >= chunk_size:
                    with timer.capture("insert"):
                        self._flush(sink, batch, inserted)
                    inserted += len(batch)
                    batches += 1
                    log.debug("Batch flushed", rows=len(batch), total=inserted)
                    batch = []

            if batch:
                with timer.capture("insert"):
                    self._flush(sink, batch, inserted)
                inserted += len(batch)
                batches += 1
                log.debug("Batch flushed", rows=len(batch), total=inserted)

        result = LoadResult(
            inserted=inserted,
            batches=batches,
            header=header,
            source_format=opened.format,
            malformed_rows=tuple(self.malformed_rows),
        )
        self.last_result = result

        log.info(
            "CSV loaded",
            rows=inserted,
            batches=batches,
            skipped=result.skipped,
            format=str(opened.format),
            timings_ms=timer.as_dict(),
        )
        return result

    def _read_header(
        self, records: Iterator[tuple[int, list[str]]]
    ) -> Optional[tuple[str, ...]]:
        """Configured headers, else the first record; None for an empty source."""
        if self.config.headers is not None:
            return validate_header(self.config.headers)

        first = next(records, None)
        if first is None:
            return None
        return validate_header(tuple(first[1]))

    @staticmethod
    def _clear(sink: TableSink) -> None:
        try:
            sink.clear()
        except SinkWriteFailed:
            raise
        except Exception as exc:
            raise SinkWriteFailed(
                f"Sink [{sink.name}] failed to clear: {exc}", sink=sink.name
            ) from exc

    @staticmethod
    def _flush(sink: TableSink, batch: Sequence[Row], already_inserted: int) -> None:
        """Hand one batch to the sink. No retries."""
        try:
            sink.insert_rows(batch)
        except SinkWriteFailed:
            raise
        except Exception as exc:
            raise SinkWriteFailed(
                f"Sink [{sink.name}] rejected rows {already_inserted + 1}"
                f"-{already_inserted + len(batch)}: {exc}",
                sink=sink.name,
            ) from exc


def load_csv(
    source: Source,
    sink: TableSink,
    config: Optional[LoaderConfig] = None,
    *,
    clear: bool = False,
) -> LoadResult:
    """
    One-shot load.

    Example:
        >>> result = load_csv("seeds/app_accounts.csv", MemorySink())
        >>> result.inserted, result.skipped
        (2, 0)
    """
    return CsvBulkLoader(config).load_with_result(source, sink, clear=clear)


__all__ = ["CsvBulkLoader", "LoadResult", "load_csv"]
