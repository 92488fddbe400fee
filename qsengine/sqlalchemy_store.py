# qsengine/sqlalchemy_store.py
from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Tuple, Union

from sqlalchemy import MetaData, Table
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import Executable

from qsengine.clauses import DeleteStatement, InsertStatement, SelectStatement, UpdateStatement
from qsengine.compiler import (
    compile_delete,
    compile_insert,
    compile_select,
    compile_update,
    referenced_columns,
)
from qsengine.ddl import build_table
from qsengine.errors import StoreExecutionError
from qsengine.model import Column

logger = logging.getLogger(__name__)


class SQLAlchemyStore:
    """
    `Store` backed by a SQLAlchemy Engine or Connection.

    With an Engine every statement runs in its own short transaction
    (`engine.begin()`); with a Connection the caller owns the transaction.
    Clause trees are compiled to Core statements against `Table` objects
    built from the generated columns, so binds, result types and paging
    syntax follow the dialect.
    """

    def __init__(self, bind: Union[Engine, Connection]) -> None:
        self.bind = bind
        self.dialect = bind.dialect
        self._tables: Dict[Tuple[str, Tuple[Column, ...]], Table] = {}

    # ---- helpers -------------------------------------------------------------

    def _table(self, stmt: Any) -> Table:
        columns = tuple(stmt.columns) or referenced_columns(stmt)
        key = (stmt.table, columns)
        table = self._tables.get(key)
        if table is None:
            table = build_table(stmt.table, columns, MetaData(), dialect=self.dialect.name)
            self._tables[key] = table
        return table

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        if isinstance(self.bind, Connection):
            yield self.bind
        else:
            with self.bind.begin() as conn:
                yield conn

    def _execute(self, query: Executable, consume: Callable[[Any], Any]):
        if logger.isEnabledFor(logging.DEBUG):
            compiled = query.compile(dialect=self.dialect)
            logger.debug("%s ; params=%s", compiled, compiled.params)
        try:
            with self._connection() as conn:
                result = conn.execute(query)
                # read results before the connection is released
                return consume(result)
        except SQLAlchemyError as e:
            statement = getattr(e, "statement", None)
            logger.error("Statement failed: %s ; error=%s", statement, e)
            raise StoreExecutionError(str(e), statement=statement, orig=e) from e

    # ---- Store ---------------------------------------------------------------

    def select(self, stmt: SelectStatement) -> List[Dict[str, Any]]:
        query = compile_select(self._table(stmt), stmt)
        return self._execute(query, lambda r: [dict(row) for row in r.mappings()])

    def count(self, stmt: SelectStatement) -> int:
        query = compile_select(self._table(stmt), stmt)
        return int(self._execute(query, lambda r: r.scalar_one()))

    def insert(self, stmt: InsertStatement) -> Any:
        query = compile_insert(self._table(stmt), stmt)
        if stmt.primary_key is None:
            self._execute(query, lambda r: None)
            return None
        identity = self._execute(query, lambda r: r.inserted_primary_key)
        return identity[0] if identity else None

    def update(self, stmt: UpdateStatement) -> int:
        query = compile_update(self._table(stmt), stmt)
        return self._execute(query, lambda r: r.rowcount)

    def delete(self, stmt: DeleteStatement) -> int:
        query = compile_delete(self._table(stmt), stmt)
        return self._execute(query, lambda r: r.rowcount)
