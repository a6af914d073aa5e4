# csv_seeder/loader/source.py
"""
Opening CSV sources.

A source is a path, a binary stream or a text stream. Paths and binary
streams are sniffed by content (gzip magic bytes), never by file
extension, so ``accounts.csv`` may well be gzip-compressed.
"""

import codecs
import gzip
import io
import os
import zlib
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterator, TextIO, Union

from common.api_error import SourceUnavailable, UnsupportedFormat

Source = Union[str, os.PathLike, BinaryIO, TextIO]

GZIP_MAGIC = b"\x1f\x8b"
SNIFF_SIZE = 4096

# Containers we recognise but do not read
_FOREIGN_MAGIC: dict[bytes, str] = {
    b"PK\x03\x04": "zip",
    b"BZh": "bzip2",
    b"\xfd7zXZ\x00": "xz",
    b"\x28\xb5\x2f\xfd": "zstd",
}


class SourceFormat(str, Enum):
    """Transport format of a CSV source."""

    PLAIN = "plain"
    GZIP = "gzip"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class OpenedSource:
    """Text stream positioned at the first record, plus what it came from."""

    stream: TextIO
    format: SourceFormat
    name: str


def describe_source(source: Source) -> str:
    """Human readable name for log lines and error messages."""
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    return str(getattr(source, "name", None) or f"<{type(source).__name__}>")


def _is_utf16_or_32(encoding: str) -> bool:
    return codecs.lookup(encoding).name.startswith(("utf-16", "utf-32"))


def sniff_format(head: bytes, encoding: str, name: str = "<stream>") -> SourceFormat:
    """
    Decide between plain text and gzip from the first bytes of a source.

    Args:
        head: Leading bytes of the source (may be empty)
        encoding: Expected text encoding of plain content
        name: Source name used in error messages

    Returns:
        SourceFormat.GZIP for the ``1F 8B`` magic, otherwise SourceFormat.PLAIN

    Raises:
        UnsupportedFormat: Other archive formats, or bytes that are not
            text in ``encoding``
    """
    if head.startswith(GZIP_MAGIC):
        return SourceFormat.GZIP

    for magic, kind in _FOREIGN_MAGIC.items():
        if head.startswith(magic):
            raise UnsupportedFormat(
                f"Source [{name}] is {kind}-compressed; only plain text and gzip are supported",
                source=name,
            )

    if b"\x00" in head and not _is_utf16_or_32(encoding):
        raise UnsupportedFormat(
            f"Source [{name}] contains binary data", source=name
        )

    # final=False: the sniff window may end inside a multi-byte character
    decoder = codecs.getincrementaldecoder(encoding)(errors="strict")
    try:
        decoder.decode(head, final=False)
    except UnicodeDecodeError as exc:
        raise UnsupportedFormat(
            f"Source [{name}] is not {encoding} text: {exc.reason} at byte {exc.start}",
            source=name,
        ) from exc

    return SourceFormat.PLAIN


def _peek(raw: BinaryIO, name: str) -> bytes:
    """Read the sniff window without consuming it."""
    try:
        peek = getattr(raw, "peek", None)
        if peek is not None:
            return peek(SNIFF_SIZE)[:SNIFF_SIZE]
        if raw.seekable():
            position = raw.tell()
            head = raw.read(SNIFF_SIZE)
            raw.seek(position)
            return head
    except (OSError, EOFError, zlib.error) as exc:
        raise SourceUnavailable(f"Can't read csv source [{name}]: {exc}", source=name) from exc

    raise SourceUnavailable(
        f"Can't sniff csv source [{name}]: stream is neither peekable nor seekable",
        source=name,
    )


def _open_path(path: Path, stack: ExitStack) -> BinaryIO:
    if not path.is_file():
        raise SourceUnavailable(f"Can't find csv file [{path}].", source=str(path))
    try:
        return stack.enter_context(path.open("rb"))
    except OSError as exc:
        raise SourceUnavailable(
            f"Can't read csv file [{path}]: {exc.strerror or exc}", source=str(path)
        ) from exc


@contextmanager
def open_source(source: Source, encoding: str = "utf-8-sig") -> Iterator[OpenedSource]:
    """
    Open a CSV source as text, transparently decompressing gzip.

    Files opened here are closed on every exit path. A stream passed in by
    the caller stays open; only the wrappers created around it are released.

    Usage:
        with open_source("database/seeds/csv/app_accounts.csv") as opened:
            for line in opened.stream:
                ...

    Raises:
        SourceUnavailable: Missing/unreadable file or unusable stream
        UnsupportedFormat: Content is neither plain text nor gzip
    """
    name = describe_source(source)

    if isinstance(source, io.TextIOBase):
        yield OpenedSource(stream=source, format=SourceFormat.PLAIN, name=name)  # type: ignore[arg-type]
        return

    with ExitStack() as stack:
        owned = isinstance(source, (str, os.PathLike))
        raw: BinaryIO = _open_path(Path(source), stack) if owned else source  # type: ignore[arg-type]

        source_format = sniff_format(_peek(raw, name), encoding, name)

        binary: BinaryIO = raw
        if source_format is SourceFormat.GZIP:
            binary = stack.enter_context(gzip.GzipFile(fileobj=raw, mode="rb"))  # type: ignore[assignment]
            # Decompressed content must pass the same checks as plain content
            if sniff_format(_peek(binary, name), encoding, name) is SourceFormat.GZIP:
                raise UnsupportedFormat(
                    f"Source [{name}] is gzip inside gzip; only one layer is supported",
                    source=name,
                )

        text = io.TextIOWrapper(binary, encoding=encoding, newline="")  # type: ignore[arg-type]
        try:
            yield OpenedSource(stream=text, format=source_format, name=name)
        finally:
            if binary is raw and not owned:
                # Leave the caller's stream open
                text.detach()
            else:
                text.close()


__all__ = [
    "GZIP_MAGIC",
    "OpenedSource",
    "Source",
    "SourceFormat",
    "describe_source",
    "open_source",
    "sniff_format",
]
