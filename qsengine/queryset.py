# qsengine/queryset.py
from __future__ import annotations
import logging
from typing import Any, ClassVar, Dict, Iterable, List, Optional

from qsengine.clauses import (
    Assignment,
    Condition,
    DeleteStatement,
    Ordering,
    SelectStatement,
    UpdateStatement,
)
from qsengine.errors import NotFoundError, ValidationError
from qsengine.model import Column, ModelInfo, copy_entity, now_utc
from qsengine.operators import Operator
from qsengine.ports import Store

logger = logging.getLogger(__name__)


class BaseQuerySet:
    """
    Chainable filter builder for one model.

    Generated subclasses set `model` / `entity` and add one method per
    (field, operator) pair. Every chain call mutates this builder and returns
    it; a query set is meant for a single logical operation on one thread.
    """

    model: ClassVar[ModelInfo]
    entity: ClassVar[type]

    def __init__(self, store: Store) -> None:
        self._store = store
        self._conditions: List[Condition] = []
        self._ordering: List[Ordering] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        self._preloads: List[str] = []

    # ------------------------------------------------------------------ chain

    def _where(self, column: Column, operator: Operator, value: Any = None):
        self._conditions.append(Condition(column, operator, value))
        return self

    def _where_in(self, column: Column, operator: Operator, values: Iterable[Any]):
        values = tuple(values)
        if not values:
            raise ValidationError(
                f"must pass at least one value to {column.field}_{operator.value}",
                fields=[column.field],
            )
        self._conditions.append(Condition(column, operator, values))
        return self

    def _order_by(self, column: Column, descending: bool = False):
        self._ordering.append(Ordering(column, descending))
        return self

    def _preload(self, field: str):
        self.model.association(field)  # fail early on unknown names
        if field not in self._preloads:
            self._preloads.append(field)
        return self

    def limit(self, limit: int):
        if limit < 0:
            raise ValidationError(f"limit must be >= 0, got {limit}")
        self._limit = limit
        return self

    def offset(self, offset: int):
        if offset < 0:
            raise ValidationError(f"offset must be >= 0, got {offset}")
        self._offset = offset
        return self

    # ---------------------------------------------------------------- helpers

    @property
    def store(self) -> Store:
        return self._store

    def scope_conditions(self) -> List[Condition]:
        """Implicit soft-delete condition first, then user predicates in call order."""
        return self.model.implicit_conditions() + list(self._conditions)

    def _select(self, *, single: bool = False, count: bool = False) -> SelectStatement:
        order = list(self._ordering)
        limit = self._limit
        if single:
            pk = self.model.primary_key
            if not order and pk is not None:
                order = [Ordering(pk)]
            limit = 1
        return SelectStatement(
            table=self.model.table,
            columns=self.model.columns,
            conditions=tuple(self.scope_conditions()),
            order_by=() if count else tuple(order),
            limit=None if count else limit,
            offset=None if count else self._offset,
            count=count,
        )

    def _load(self, stmt: SelectStatement) -> List[Any]:
        rows = self._store.select(stmt)
        entities = [self.model.entity_from_row(self.entity, row) for row in rows]
        for field in self._preloads:
            self._preload_association(field, entities)
        return entities

    def _preload_association(self, field: str, entities: List[Any]) -> None:
        assoc = self.model.association(field)
        keys: List[Any] = []
        for e in entities:
            key = getattr(e, assoc.foreign_key)
            if key is not None and key not in keys:
                keys.append(key)
        if not keys:
            return
        target_qs = assoc.queryset()(self._store)
        target_pk = target_qs.model.primary_key
        related = target_qs._where_in(target_pk, Operator.IN, keys).all()
        by_key: Dict[Any, Any] = {getattr(r, target_pk.field): r for r in related}
        for e in entities:
            setattr(e, field, by_key.get(getattr(e, assoc.foreign_key)))
        logger.debug("Preloaded %d %s for %d %s rows", len(related), field, len(entities), self.model.name)

    # -------------------------------------------------------------- terminals

    def all(self, dest: Optional[List[Any]] = None) -> List[Any]:
        """
        Load every matching row. No match is an empty list, not an error.
        When `dest` is given it is replaced in place and returned.
        """
        entities = self._load(self._select())
        if dest is None:
            return entities
        dest[:] = entities
        return dest

    def one(self, dest: Any = None) -> Any:
        """
        Load exactly one row, ordered by primary key unless an ordering was
        applied. Raises NotFoundError (leaving `dest` untouched) on no match.
        """
        entities = self._load(self._select(single=True))
        if not entities:
            raise NotFoundError(self.model.table)
        found = entities[0]
        if dest is None:
            return found
        copy_entity(found, dest)
        return dest

    def count(self) -> int:
        return int(self._store.count(self._select(count=True)))

    def delete(self) -> None:
        self.delete_num()

    def delete_num(self) -> int:
        """Soft-delete (or physically delete) every match; returns affected rows."""
        conditions = tuple(self.scope_conditions())
        sd = self.model.soft_delete
        if sd is not None:
            stmt = UpdateStatement(self.model.table, (Assignment(sd, now_utc()),), conditions, self.model.columns)
            return self._store.update(stmt)
        return self._store.delete(DeleteStatement(self.model.table, conditions, self.model.columns))
