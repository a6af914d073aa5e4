# csv_seeder/loader/loader_config.py
import codecs
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from common.config import ChunkSize, DEFAULT_CHUNK_SIZE

DEFAULT_NULL_TOKENS: frozenset[str] = frozenset({"NULL", "null"})
# Largest value csv.field_size_limit() accepts on every platform (C long)
DEFAULT_FIELD_SIZE_LIMIT = 2**31 - 1


class LoaderConfig(BaseModel):
    """
    Parsing and batching options for one load. Immutable.

    Attributes:
        delimiter: Single character separating fields
        quotechar: Single character enclosing fields that contain the
            delimiter, the quote character or newlines
        escapechar: Optional escape character (None disables escaping)
        chunk_size: Rows per sink.insert_rows() call, or "auto" to derive
            it from the sink's bound-parameter ceiling
        null_tokens: Field values converted to None
        headers: Explicit column names; when set, the first record of
            the file is data, not a header
        encoding: Text encoding of the (decompressed) content
        fallback_chunk_size: Used with "auto" when the sink reports no
            parameter ceiling
        field_size_limit: Largest field, in characters, the reader accepts
            (the csv module defaults to 131072)
    """

    delimiter: str = Field(default=",", min_length=1, max_length=1)
    quotechar: str = Field(default='"', min_length=1, max_length=1)
    escapechar: Optional[str] = Field(default=None, min_length=1, max_length=1)
    chunk_size: ChunkSize = DEFAULT_CHUNK_SIZE
    null_tokens: frozenset[str] = DEFAULT_NULL_TOKENS
    headers: Optional[tuple[str, ...]] = None
    encoding: str = "utf-8-sig"
    fallback_chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1)
    field_size_limit: int = Field(
        default=DEFAULT_FIELD_SIZE_LIMIT, ge=1, le=DEFAULT_FIELD_SIZE_LIMIT
    )

    model_config = {"frozen": True}

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: ChunkSize) -> ChunkSize:
        if v != "auto" and v < 1:
            raise ValueError("chunk_size must be a positive integer or 'auto'")
        return v

    @field_validator("headers")
    @classmethod
    def validate_headers(
        cls, v: Optional[tuple[str, ...]]
    ) -> Optional[tuple[str, ...]]:
        if v is not None and len(v) == 0:
            raise ValueError("headers must name at least one column")
        return v

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding: {v}") from exc
        return v

    def resolve_chunk_size(
        self, column_count: int, max_parameters: Optional[int]
    ) -> int:
        """
        Rows per batch for a header of ``column_count`` columns.

        With "auto", each INSERT stays under the sink's bound-parameter
        ceiling, e.g. SQLite's 999 variables / 4 columns = 249 rows.
        """
        if self.chunk_size != "auto":
            return self.chunk_size
        if not max_parameters or column_count < 1:
            return self.fallback_chunk_size
        return max(1, max_parameters // column_count)


__all__ = ["LoaderConfig", "DEFAULT_NULL_TOKENS", "DEFAULT_FIELD_SIZE_LIMIT"]
