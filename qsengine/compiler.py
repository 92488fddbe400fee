# qsengine/compiler.py
"""
Compile a clause tree into SQLAlchemy Core statements.

Conditions combine with AND in their given order. Implicit conditions
(soft-delete scope, point-operation primary key) are emitted as they are;
each user predicate is wrapped in a ``Grouping`` so it renders parenthesised.
Ordering, limit and offset go through ``Select`` so the dialect decides how
they are spelled (SQLite, for one, needs ``LIMIT -1`` before a bare OFFSET).
"""
from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import ColumnElement, Delete, Insert, Select, Table, Update, and_, asc, delete, desc, func, insert, select, update
from sqlalchemy.sql.elements import Grouping

from qsengine.clauses import (
    Condition,
    DeleteStatement,
    InsertStatement,
    Ordering,
    SelectStatement,
    UpdateStatement,
)
from qsengine.model import Column
from qsengine.operators import LIST_OPERATORS, Operator

# ---------------------------------------------------------------------------
# Operator registry
# ---------------------------------------------------------------------------

SQLA_OPERATORS: Dict[Operator, Callable[[Any, Any], ColumnElement]] = {
    Operator.EQ: lambda c, v: c == v,
    Operator.NE: lambda c, v: c != v,
    Operator.GT: lambda c, v: c > v,
    Operator.GTE: lambda c, v: c >= v,
    Operator.LT: lambda c, v: c < v,
    Operator.LTE: lambda c, v: c <= v,
    Operator.LIKE: lambda c, v: c.like(v),
    Operator.IN: lambda c, v: c.in_(list(v)),
    Operator.NOT_IN: lambda c, v: c.not_in(list(v)),
    Operator.IS_NULL: lambda c, v: c.is_(None),
    Operator.IS_NOT_NULL: lambda c, v: c.is_not(None),
}


def referenced_columns(stmt: Any) -> Tuple[Column, ...]:
    """Every column a statement touches, first occurrence first."""
    seen: Dict[str, Column] = {}
    pk = getattr(stmt, "primary_key", None)
    if pk is not None:
        seen[pk.column] = pk
    for a in getattr(stmt, "values", ()):
        seen.setdefault(a.column.column, a.column)
    for c in getattr(stmt, "conditions", ()):
        seen.setdefault(c.column.column, c.column)
    for o in getattr(stmt, "order_by", ()):
        seen.setdefault(o.column.column, o.column)
    return tuple(seen.values())


# ---------------------------------------------------------------------------
# Internal compilation
# ---------------------------------------------------------------------------


def _compile_condition(table: Table, cond: Condition) -> ColumnElement:
    try:
        build = SQLA_OPERATORS[cond.operator]
    except KeyError:
        raise ValueError(f"Unsupported operator: {cond.operator!r}") from None
    if cond.operator in LIST_OPERATORS and not cond.value:
        raise ValueError(f"{cond.operator.value} needs at least one value for {cond.column.field}")
    expr = build(table.c[cond.column.column], cond.value)
    return expr if cond.implicit else Grouping(expr)


def _where(table: Table, conditions: Sequence[Condition]) -> Optional[ColumnElement]:
    if not conditions:
        return None
    return and_(*[_compile_condition(table, c) for c in conditions])


def _apply_order_by(stmt: Select, table: Table, order_by: Sequence[Ordering]) -> Select:
    if not order_by:
        return stmt
    clauses: List[Any] = []
    for o in order_by:
        col = table.c[o.column.column]
        clauses.append(desc(col) if o.descending else asc(col))
    return stmt.order_by(*clauses)


def _apply_limit_offset(stmt: Select, limit: Optional[int], offset: Optional[int]) -> Select:
    if limit is not None:
        stmt = stmt.limit(limit)
    if offset is not None:
        stmt = stmt.offset(offset)
    return stmt


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compile_select(table: Table, stmt: SelectStatement) -> Select:
    """`SELECT <columns>` (or `count(*)`) with conditions, ordering and paging."""
    if stmt.count:
        query = select(func.count()).select_from(table)
    else:
        query = select(table)
    where = _where(table, stmt.conditions)
    if where is not None:
        query = query.where(where)
    if stmt.count:
        return query
    query = _apply_order_by(query, table, stmt.order_by)
    return _apply_limit_offset(query, stmt.limit, stmt.offset)


def compile_insert(table: Table, stmt: InsertStatement) -> Insert:
    query = insert(table)
    if stmt.values:
        query = query.values({table.c[a.column.column]: a.value for a in stmt.values})
    return query


def compile_update(table: Table, stmt: UpdateStatement) -> Update:
    if not stmt.values:
        raise ValueError("UPDATE needs at least one assignment")
    query = update(table).values({table.c[a.column.column]: a.value for a in stmt.values})
    where = _where(table, stmt.conditions)
    return query if where is None else query.where(where)


def compile_delete(table: Table, stmt: DeleteStatement) -> Delete:
    query = delete(table)
    where = _where(table, stmt.conditions)
    return query if where is None else query.where(where)
