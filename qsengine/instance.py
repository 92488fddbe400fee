# qsengine/instance.py
from __future__ import annotations
import logging
from typing import Any, ClassVar, List

from qsengine.clauses import Assignment, Condition, DeleteStatement, InsertStatement, UpdateStatement
from qsengine.errors import MissingPrimaryKeyError, ValidationError
from qsengine.model import Column, ModelInfo, is_zero, now_utc
from qsengine.operators import Operator
from qsengine.ports import Store

logger = logging.getLogger(__name__)


def _apply_server_defaults_on_create(model: ModelInfo, entity: Any) -> None:
    ts = now_utc()
    for col in model.columns:
        value = getattr(entity, col.field, None)
        if col.is_created_marker and value is None:
            setattr(entity, col.field, ts)
        elif col.is_updated_marker:
            setattr(entity, col.field, ts)
        elif value is None and col.default_now:
            setattr(entity, col.field, ts.date() if col.type == "date" else ts)
        elif value is None and col.has_default:
            setattr(entity, col.field, col.default)


def _missing_required(model: ModelInfo, entity: Any) -> List[str]:
    return [c.field for c in model.columns if c.required and getattr(entity, c.field, None) is None]


def create(store: Store, entity: Any) -> None:
    """
    Insert `entity`.

    Refuses missing required fields before touching the entity, then stamps
    created/updated markers, fills declared defaults and writes the
    store-assigned identity back to an unset integer primary key.
    """
    model: ModelInfo = type(entity)._model
    missing = _missing_required(model, entity)
    pk = model.primary_key
    pk_unset = pk is not None and is_zero(getattr(entity, pk.field))
    if pk_unset and pk.type != "int":
        # only integer keys are assigned by the store
        missing.insert(0, pk.field)
    if missing:
        raise ValidationError(f"{model.name}: missing required field(s): {', '.join(missing)}", fields=missing)

    _apply_server_defaults_on_create(model, entity)
    values = []
    for col in model.columns:
        if col.primary_key and pk_unset:
            continue
        values.append(Assignment(col, getattr(entity, col.field)))

    stmt = InsertStatement(model.table, tuple(values), primary_key=pk if pk_unset else None, columns=model.columns)
    identity = store.insert(stmt)
    if pk_unset and identity is not None:
        setattr(entity, pk.field, identity)
    logger.debug("Created %s row (identity=%s)", model.table, identity)


def _pk_condition(model: ModelInfo, entity: Any) -> Condition:
    pk = model.primary_key
    if pk is None:
        raise MissingPrimaryKeyError(model.name)
    value = getattr(entity, pk.field)
    if is_zero(value):
        raise MissingPrimaryKeyError(model.name, pk.field)
    return Condition(pk, Operator.EQ, value, implicit=True)


def delete(store: Store, entity: Any) -> None:
    """
    Delete `entity` by primary key.

    With a soft-delete field this is a point UPDATE stamping it, scoped by
    `<soft-delete> IS NULL`; repeating it affects zero rows and still succeeds.
    """
    model: ModelInfo = type(entity)._model
    pk_cond = _pk_condition(model, entity)
    sd = model.soft_delete
    if sd is None:
        store.delete(DeleteStatement(model.table, (pk_cond,), model.columns))
        return

    ts = now_utc()
    conditions = tuple(model.implicit_conditions() + [pk_cond])
    affected = store.update(UpdateStatement(model.table, (Assignment(sd, ts),), conditions, model.columns))
    if affected:
        setattr(entity, sd.field, ts)
    else:
        logger.debug("Soft delete of %s %s matched no live row", model.table, pk_cond.value)


class Entity:
    """Instance operations shared by every generated model dataclass."""

    _model: ClassVar[ModelInfo]

    def get_updater(self, store: Store):
        raise NotImplementedError

    def create(self, store: Store) -> None:
        create(store, self)

    def update(self, store: Store, *columns: Column) -> None:
        """Point-update the given columns with this instance's current values."""
        self.get_updater(store).set_from_instance(*columns).update()

    def delete(self, store: Store) -> None:
        delete(store, self)
