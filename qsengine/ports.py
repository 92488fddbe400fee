# qsengine/ports.py
from __future__ import annotations
from typing import Any, Dict, List, Protocol

from qsengine.clauses import DeleteStatement, InsertStatement, SelectStatement, UpdateStatement


class Store(Protocol):
    """
    Relational store the generated code runs against.

    Receives assembled clause trees and executes them; connection handling,
    transactions and dialect details stay on the store's side.
    """
    def select(self, stmt: SelectStatement) -> List[Dict[str, Any]]: ...

    def count(self, stmt: SelectStatement) -> int: ...

    def insert(self, stmt: InsertStatement) -> Any:
        """Returns the store-assigned identity (or None when the store has none)."""
        ...

    def update(self, stmt: UpdateStatement) -> int:
        """Returns the number of affected rows."""
        ...

    def delete(self, stmt: DeleteStatement) -> int:
        """Returns the number of affected rows."""
        ...
