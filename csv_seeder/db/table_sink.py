# csv_seeder/db/table_sink.py
"""TableSink writing to a reflected SQLAlchemy table."""

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence, Union

from sqlalchemy import (
    Connection,
    Engine,
    MetaData,
    Table,
    column,
    delete,
    func,
    insert,
    select,
    table as table_clause,
    text,
)
from sqlalchemy.sql.expression import TableClause
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from common.api_error import SinkWriteFailed
from csv_seeder.loader import Row, TableSink

# Bound-parameter ceilings per statement, by dialect.
# See the #9 of www.sqlite.org/limits.html for SQLite's default.
MAX_PARAMETERS: dict[str, int] = {
    "sqlite": 999,
    "postgresql": 65535,
    "mysql": 65535,
    "mariadb": 65535,
    "mssql": 2100,
}

_NO_TRUNCATE = {"sqlite"}


class SqlTableSink(TableSink):
    """
    Writes batches with one multi-row ``INSERT ... VALUES`` per batch.

    ``bind`` decides transaction scope:
    - an Engine: every clear/insert commits on its own, so batches flushed
      before a failure stay applied
    - a Connection: statements run in the caller's transaction, which
      makes the whole load atomic

    Args:
        bind: Engine or Connection
        table_name: Existing table to seed
        truncate: Clear with TRUNCATE TABLE instead of DELETE (falls back to
            DELETE on engines without TRUNCATE)
        schema: Optional schema the table lives in
    """

    def __init__(
        self,
        bind: Union[Engine, Connection],
        table_name: str,
        *,
        truncate: bool = False,
        schema: Optional[str] = None,
    ) -> None:
        self._bind = bind
        self._table_name = table_name
        self._schema = schema
        self.truncate = truncate
        self._table: Optional[Table] = None
        self._insert_target: Optional[TableClause] = None

    @property
    def name(self) -> str:
        if self._schema:
            return f"{self._schema}.{self._table_name}"
        return self._table_name

    @property
    def dialect_name(self) -> str:
        return self._bind.dialect.name

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        if isinstance(self._bind, Connection):
            yield self._bind
        else:
            with self._bind.begin() as conn:
                yield conn

    @property
    def table(self) -> Table:
        """Reflected table, loaded on first use."""
        if self._table is None:
            try:
                self._table = Table(
                    self._table_name,
                    MetaData(),
                    schema=self._schema,
                    autoload_with=self._bind,
                )
            except NoSuchTableError as exc:
                raise SinkWriteFailed(
                    f"Table [{self.name}] does not exist", sink=self.name
                ) from exc
            except SQLAlchemyError as exc:
                raise SinkWriteFailed(
                    f"Can't reflect table [{self.name}]: {exc}", sink=self.name
                ) from exc
        return self._table

    @property
    def insert_target(self) -> TableClause:
        """
        Untyped view of the table used for inserts.

        CSV values are text; binding them through the reflected column
        types would reject e.g. "2015-04-21" for a SQLite DateTime column.
        Untyped columns hand the strings to the database as-is.
        """
        if self._insert_target is None:
            reflected = self.table
            self._insert_target = table_clause(
                reflected.name,
                *(column(c.name) for c in reflected.columns),
                schema=reflected.schema,
            )
        return self._insert_target

    def clear(self) -> None:
        table = self.table
        try:
            with self._connection() as conn:
                if self.truncate and self.dialect_name not in _NO_TRUNCATE:
                    quoted = conn.dialect.identifier_preparer.format_table(table)
                    conn.execute(text(f"TRUNCATE TABLE {quoted}"))
                else:
                    conn.execute(delete(table))
        except SQLAlchemyError as exc:
            raise SinkWriteFailed(
                f"Can't clear table [{self.name}]: {exc}", sink=self.name
            ) from exc

    def insert_rows(self, rows: Sequence[Row]) -> None:
        if not rows:
            return
        target = self.insert_target
        try:
            with self._connection() as conn:
                conn.execute(insert(target).values(list(rows)))
        except SQLAlchemyError as exc:
            raise SinkWriteFailed(
                f"Insert into [{self.name}] failed: {exc}", sink=self.name
            ) from exc

    def max_parameters_per_statement(self) -> Optional[int]:
        return MAX_PARAMETERS.get(self.dialect_name)

    def count(self) -> int:
        """Current number of rows in the table."""
        with self._connection() as conn:
            return conn.execute(select(func.count()).select_from(self.table)).scalar_one()


__all__ = ["SqlTableSink", "MAX_PARAMETERS"]
