# qsengine/model.py
from __future__ import annotations
from dataclasses import dataclass, fields as dc_fields
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from qsengine.clauses import Condition
from qsengine.operators import Operator

# Server-managed timestamp markers, stamped by create()
CREATED_MARKERS = ("created_at", "createdAt")
UPDATED_MARKERS = ("updated_at", "updatedAt")


@dataclass(frozen=True)
class Column:
    """
    Reference to one mapped column of a generated model.

    Generated `<Model>DBSchema` classes expose one of these per column; they
    double as field selectors for instance `update(store, *columns)`.
    """
    field: str
    column: str
    type: str
    nullable: bool = False
    primary_key: bool = False
    soft_delete: bool = False
    has_default: bool = False
    default: Any = None
    default_now: bool = False

    @property
    def settable(self) -> bool:
        return not (self.primary_key or self.soft_delete)

    @property
    def is_created_marker(self) -> bool:
        return self.type == "datetime" and self.field in CREATED_MARKERS

    @property
    def is_updated_marker(self) -> bool:
        return self.type == "datetime" and self.field in UPDATED_MARKERS

    @property
    def required(self) -> bool:
        """Must carry a value on create."""
        if self.nullable or self.primary_key or self.soft_delete:
            return False
        if self.has_default or self.default_now:
            return False
        return not (self.is_created_marker or self.is_updated_marker)


@dataclass(frozen=True)
class Association:
    """Belongs-to association: `field` is loaded by matching `foreign_key` to the target primary key."""
    field: str
    foreign_key: str
    queryset: Callable[[], Any]


@dataclass(frozen=True)
class ModelInfo:
    name: str
    table: str
    columns: Tuple[Column, ...]
    associations: Tuple[Association, ...] = ()

    @property
    def primary_key(self) -> Optional[Column]:
        for col in self.columns:
            if col.primary_key:
                return col
        return None

    @property
    def soft_delete(self) -> Optional[Column]:
        for col in self.columns:
            if col.soft_delete:
                return col
        return None

    def column(self, field: str) -> Column:
        for col in self.columns:
            if col.field == field:
                return col
        raise KeyError(f"{self.name} has no column field '{field}'")

    def association(self, field: str) -> Association:
        for assoc in self.associations:
            if assoc.field == field:
                return assoc
        raise KeyError(f"{self.name} has no association '{field}'")

    def implicit_conditions(self) -> List[Condition]:
        """Scoping conditions injected ahead of any user predicate."""
        sd = self.soft_delete
        if sd is None:
            return []
        return [Condition(sd, Operator.IS_NULL, implicit=True)]

    def entity_from_row(self, entity_cls: type, row: Mapping[str, Any]) -> Any:
        kwargs: Dict[str, Any] = {}
        for col in self.columns:
            if col.column in row:
                kwargs[col.field] = row[col.column]
        return entity_cls(**kwargs)


def now_utc() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_zero(value: Any) -> bool:
    """True for an unset primary key value (None, 0 or '')."""
    return value is None or value == 0 or value == ""


def copy_entity(src: Any, dest: Any) -> None:
    for f in dc_fields(src):
        setattr(dest, f.name, getattr(src, f.name))
