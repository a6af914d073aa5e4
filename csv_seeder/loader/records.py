# csv_seeder/loader/records.py
"""Turning CSV records into rows."""

import csv
from collections import Counter
from typing import Iterator, Optional, TextIO

from common.api_error import MalformedHeader, MalformedRow
from .loader_config import LoaderConfig

Row = dict[str, Optional[str]]


def read_records(stream: TextIO, config: LoaderConfig) -> Iterator[tuple[int, list[str]]]:
    """
    Yield ``(line_number, fields)`` for every non-blank record.

    ``line_number`` is the physical line the record starts on, so quoted
    fields spanning several lines still point at the right place.
    Blank lines carry no fields and are skipped.

    Parsing is strict: a quoted field left open until the end of the file
    raises csv.Error instead of swallowing the records after it.
    ``config.field_size_limit`` applies while the records are read; the
    previous process-wide limit is restored afterwards.
    """
    reader = csv.reader(
        stream,
        delimiter=config.delimiter,
        quotechar=config.quotechar,
        escapechar=config.escapechar,
        strict=True,
    )
    previous_limit = csv.field_size_limit(config.field_size_limit)
    try:
        next_line = 1
        for fields in reader:
            line_number = next_line
            next_line = reader.line_num + 1
            if not fields:
                continue
            yield line_number, fields
    finally:
        csv.field_size_limit(previous_limit)


def validate_header(header: tuple[str, ...]) -> tuple[str, ...]:
    """Column names must be unique within a row."""
    duplicates = [name for name, count in Counter(header).items() if count > 1]
    if duplicates:
        raise MalformedHeader(
            f"Duplicate column names in header: {', '.join(duplicates)}",
            header=header,
        )
    return header


def build_row(
    header: tuple[str, ...],
    fields: list[str],
    line_number: int,
    null_tokens: frozenset[str],
) -> Row:
    """
    Zip a record against the header, turning null sentinels into None.

    Raises:
        MalformedRow: Field count differs from the header length
    """
    if len(fields) != len(header):
        raise MalformedRow(line_number, expected=len(header), actual=len(fields))
    return {
        column: (None if value in null_tokens else value)
        for column, value in zip(header, fields)
    }


__all__ = ["Row", "build_row", "read_records", "validate_header"]
