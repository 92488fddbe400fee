# qsengine/updater.py
from __future__ import annotations
import logging
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from qsengine.clauses import Assignment, Condition, UpdateStatement
from qsengine.errors import EmptyUpdateError, MissingPrimaryKeyError, ValidationError
from qsengine.model import Column, ModelInfo, is_zero
from qsengine.operators import Operator
from qsengine.ports import Store

logger = logging.getLogger(__name__)


class BaseUpdater:
    """
    Partial-update builder for one model.

    Scope is one of:
      - a query set: batch update over its conditions (snapshotted here)
      - an instance: point update by primary key
      - neither: batch update over every live row
    Only fields set through `set_*` end up in the statement.
    """

    model: ClassVar[ModelInfo]

    def __init__(self, store: Store, scope: Any = None, instance: Any = None) -> None:
        if scope is not None and instance is not None:
            raise ValueError("An updater is scoped by a query set or an instance, not both")
        self._store = store
        self._instance = instance
        self._scope: Optional[Tuple[Condition, ...]] = None
        if scope is not None:
            self._scope = tuple(scope.scope_conditions())
        self._values: Dict[str, Assignment] = {}

    def _set(self, column: Column, value: Any):
        if not column.settable:
            raise ValidationError(f"{self.model.name}.{column.field} cannot be updated", fields=[column.field])
        self._values[column.field] = Assignment(column, value)
        return self

    def set_from_instance(self, *columns: Column):
        """Copy the bound instance's current values for `columns`."""
        if self._instance is None:
            raise ValueError("set_from_instance() needs an instance-scoped updater")
        for col in columns:
            self._set(col, getattr(self._instance, col.field))
        return self

    def _conditions(self) -> List[Condition]:
        if self._instance is None:
            if self._scope is not None:
                return list(self._scope)
            return self.model.implicit_conditions()
        pk = self.model.primary_key
        if pk is None:
            raise MissingPrimaryKeyError(self.model.name)
        value = getattr(self._instance, pk.field)
        if is_zero(value):
            raise MissingPrimaryKeyError(self.model.name, pk.field)
        return self.model.implicit_conditions() + [Condition(pk, Operator.EQ, value, implicit=True)]

    def statement(self) -> UpdateStatement:
        if not self._values:
            raise EmptyUpdateError(self.model.name)
        return UpdateStatement(
            table=self.model.table,
            values=tuple(self._values.values()),
            conditions=tuple(self._conditions()),
            columns=self.model.columns,
        )

    def update(self) -> None:
        self.update_num()

    def update_num(self) -> int:
        """Execute the update; returns the number of affected rows."""
        stmt = self.statement()
        affected = self._store.update(stmt)
        logger.debug("Updated %s %s row(s): %s", affected, self.model.table, ", ".join(self._values))
        return affected
