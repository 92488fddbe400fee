# qsengine/sql.py
"""
Dialect-neutral text rendering of a clause tree: ANSI-quoted identifiers,
`?` placeholders, bind values in text order.

Stores execute through `qsengine.compiler`; this rendering is the stable,
readable statement shape used to inspect what a query set or updater built
(recording stores in tests, debugging).
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple, Union

from qsengine.clauses import (
    Condition,
    DeleteStatement,
    InsertStatement,
    SelectStatement,
    UpdateStatement,
)
from qsengine.operators import BINARY_SQL, LIST_OPERATORS, NULL_OPERATORS

Statement = Union[SelectStatement, InsertStatement, UpdateStatement, DeleteStatement]


def ansi_quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class RenderedStatement:
    sql: str
    params: Tuple[Any, ...]


class _Renderer:
    def __init__(self) -> None:
        self.params: List[Any] = []

    def bind(self, value: Any) -> str:
        self.params.append(value)
        return "?"

    def qualified(self, table: str, column: str) -> str:
        return f"{ansi_quote(table)}.{ansi_quote(column)}"

    def condition(self, table: str, cond: Condition) -> str:
        col = self.qualified(table, cond.column.column)
        op = cond.operator
        if op in BINARY_SQL:
            sql = f"{col} {BINARY_SQL[op]} {self.bind(cond.value)}"
        elif op in LIST_OPERATORS:
            values: Sequence[Any] = cond.value or ()
            if not values:
                raise ValueError(f"{op.value} needs at least one value for {cond.column.field}")
            sql = f"{col} {LIST_OPERATORS[op]} ({', '.join(self.bind(v) for v in values)})"
        elif op in NULL_OPERATORS:
            sql = f"{col} {NULL_OPERATORS[op]}"
        else:
            raise ValueError(f"Unsupported operator: {op!r}")
        return sql if cond.implicit else f"({sql})"

    def where(self, table: str, conditions: Sequence[Condition]) -> str:
        if not conditions:
            return ""
        return " WHERE " + " AND ".join(self.condition(table, c) for c in conditions)

    def select(self, stmt: SelectStatement) -> str:
        head = "SELECT count(*)" if stmt.count else "SELECT *"
        sql = f"{head} FROM {ansi_quote(stmt.table)}" + self.where(stmt.table, stmt.conditions)
        if stmt.count:
            return sql
        if stmt.order_by:
            parts = [
                f"{self.qualified(stmt.table, o.column.column)} {'DESC' if o.descending else 'ASC'}"
                for o in stmt.order_by
            ]
            sql += " ORDER BY " + ", ".join(parts)
        if stmt.limit is not None:
            sql += f" LIMIT {int(stmt.limit)}"
        if stmt.offset is not None:
            sql += f" OFFSET {int(stmt.offset)}"
        return sql

    def insert(self, stmt: InsertStatement) -> str:
        cols = ", ".join(ansi_quote(a.column.column) for a in stmt.values)
        marks = ", ".join(self.bind(a.value) for a in stmt.values)
        return f"INSERT INTO {ansi_quote(stmt.table)} ({cols}) VALUES ({marks})"

    def update(self, stmt: UpdateStatement) -> str:
        if not stmt.values:
            raise ValueError("UPDATE needs at least one assignment")
        sets = ", ".join(f"{ansi_quote(a.column.column)} = {self.bind(a.value)}" for a in stmt.values)
        return f"UPDATE {ansi_quote(stmt.table)} SET {sets}" + self.where(stmt.table, stmt.conditions)

    def delete(self, stmt: DeleteStatement) -> str:
        return f"DELETE FROM {ansi_quote(stmt.table)}" + self.where(stmt.table, stmt.conditions)


def render(stmt: Statement) -> RenderedStatement:
    """Render a statement; SET values bind before WHERE values."""
    r = _Renderer()
    if isinstance(stmt, SelectStatement):
        sql = r.select(stmt)
    elif isinstance(stmt, InsertStatement):
        sql = r.insert(stmt)
    elif isinstance(stmt, UpdateStatement):
        sql = r.update(stmt)
    elif isinstance(stmt, DeleteStatement):
        sql = r.delete(stmt)
    else:
        raise TypeError(f"Cannot render {type(stmt).__name__}")
    return RenderedStatement(sql, tuple(r.params))
