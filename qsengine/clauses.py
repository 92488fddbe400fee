# qsengine/clauses.py
"""
Clause tree handed to a `Store`.

Statements are plain frozen values: the table with its mapped columns, the
ordered condition sequence and, for writes, the ordered column -> value
assignments. `qsengine.compiler` turns them into SQLAlchemy Core statements.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Tuple

from qsengine.operators import Operator

if TYPE_CHECKING:  # pragma: no cover
    from qsengine.model import Column


@dataclass(frozen=True)
class Condition:
    """
    One predicate. `implicit` conditions (soft-delete scoping, point-operation
    primary key) are rendered bare; user predicates are parenthesised.
    """
    column: "Column"
    operator: Operator
    value: Any = None
    implicit: bool = False


@dataclass(frozen=True)
class Ordering:
    column: "Column"
    descending: bool = False


@dataclass(frozen=True)
class Assignment:
    column: "Column"
    value: Any


@dataclass(frozen=True)
class SelectStatement:
    table: str
    columns: Tuple["Column", ...]
    conditions: Tuple[Condition, ...] = ()
    order_by: Tuple[Ordering, ...] = ()
    limit: Optional[int] = None
    offset: Optional[int] = None
    count: bool = False


@dataclass(frozen=True)
class InsertStatement:
    table: str
    values: Tuple[Assignment, ...]
    primary_key: Optional["Column"] = None
    columns: Tuple["Column", ...] = ()


@dataclass(frozen=True)
class UpdateStatement:
    table: str
    values: Tuple[Assignment, ...]
    conditions: Tuple[Condition, ...] = ()
    columns: Tuple["Column", ...] = ()


@dataclass(frozen=True)
class DeleteStatement:
    table: str
    conditions: Tuple[Condition, ...] = ()
    columns: Tuple["Column", ...] = ()
