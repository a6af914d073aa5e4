# common/api_error/seeder_error.py
from typing import Optional


class SeederError(Exception):
    """Base error for everything that can go wrong while seeding a table."""

    def __init__(
        self,
        message: str,
        code: str = "SEEDER_ERROR",
    ):
        self.message = message
        self.code = code
        super().__init__(self.message)


class SourceUnavailable(SeederError):
    """CSV source is missing, unreadable, or failed mid-read."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(message, code="SOURCE_UNAVAILABLE")


class UnsupportedFormat(SeederError):
    """Content sniffing found neither plain text nor gzip."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(message, code="UNSUPPORTED_FORMAT")


class MalformedHeader(SeederError):
    """Header record cannot name the columns of a row (e.g. duplicates)."""

    def __init__(self, message: str, header: tuple[str, ...] = ()):
        self.header = header
        super().__init__(message, code="MALFORMED_HEADER")


class MalformedRow(SeederError):
    """
    A data record whose field count does not match the header.

    Recoverable: the loader skips the record and keeps the error
    so the caller can report it.
    """

    def __init__(self, line_number: int, expected: int, actual: int):
        self.line_number = line_number
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Line {line_number}: expected {expected} fields, got {actual}",
            code="MALFORMED_ROW",
        )


class SinkWriteFailed(SeederError):
    """Destination rejected a clear or a batch of rows."""

    def __init__(self, message: str, sink: Optional[str] = None):
        self.sink = sink
        super().__init__(message, code="SINK_WRITE_FAILED")


class SeederNotFound(SeederError):
    """No seeder is registered for the requested table."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(
            f"No seeder registered for table [{table}]", code="SEEDER_NOT_FOUND"
        )


class SeederEnvironmentError(SeederError):
    """Seeder is restricted to an environment other than the current one."""

    def __init__(self, required: str, current: str):
        self.required = required
        self.current = current
        super().__init__(
            f"You can seed this data only on [{required}] environment "
            f"(current: [{current}]).",
            code="WRONG_ENVIRONMENT",
        )


__all__ = [
    "SeederError",
    "SourceUnavailable",
    "UnsupportedFormat",
    "MalformedHeader",
    "MalformedRow",
    "SinkWriteFailed",
    "SeederNotFound",
    "SeederEnvironmentError",
]
