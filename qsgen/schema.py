"""
Schema Model: the typed, immutable representation of the model definitions
that every generator pass consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple


class TypeCategory(str, Enum):
    BOOLEAN = "boolean"
    ORDERED = "ordered"
    STRING = "string"
    ASSOCIATION = "association"


@dataclass(frozen=True)
class Field:
    name: str
    column: str
    type: str  # canonical scalar type, or the target model name for associations
    category: TypeCategory
    nullable: bool = False
    primary_key: bool = False
    soft_delete: bool = False
    has_default: bool = False
    default: Any = None
    default_now: bool = False
    foreign_key: Optional[str] = None

    @property
    def is_association(self) -> bool:
        return self.category is TypeCategory.ASSOCIATION

    @property
    def is_column(self) -> bool:
        return not self.is_association


@dataclass(frozen=True)
class Model:
    name: str
    table: str
    fields: Tuple[Field, ...]

    @property
    def columns(self) -> Tuple[Field, ...]:
        return tuple(f for f in self.fields if f.is_column)

    @property
    def associations(self) -> Tuple[Field, ...]:
        return tuple(f for f in self.fields if f.is_association)

    @property
    def primary_key(self) -> Optional[Field]:
        return next((f for f in self.fields if f.primary_key), None)

    @property
    def soft_delete(self) -> Optional[Field]:
        return next((f for f in self.fields if f.soft_delete), None)

    def field(self, name: str) -> Field:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)


@dataclass(frozen=True)
class Schema:
    models: Tuple[Model, ...]

    def model(self, name: str) -> Model:
        for m in self.models:
            if m.name == name:
                return m
        raise KeyError(name)
