# qsgen/classifier.py
"""
Field Capability Classifier.

Owns the registry of supported field types and decides, per field, which
predicate operators the generated query set exposes and which special roles
(primary key, soft-delete marker) it plays.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from qsengine.operators import Operator
from qsgen.schema import Field, Model, TypeCategory

# canonical scalar type -> (category, python annotation)
SCALAR_TYPES: Dict[str, Tuple[TypeCategory, str]] = {
    "bool": (TypeCategory.BOOLEAN, "bool"),
    "int": (TypeCategory.ORDERED, "int"),
    "float": (TypeCategory.ORDERED, "float"),
    "decimal": (TypeCategory.ORDERED, "Decimal"),
    "datetime": (TypeCategory.ORDERED, "datetime"),
    "date": (TypeCategory.ORDERED, "date"),
    "time": (TypeCategory.ORDERED, "time"),
    "str": (TypeCategory.STRING, "str"),
}

# accepted spellings (lower-cased) -> canonical scalar type
TYPE_ALIASES: Dict[str, str] = {
    "bool": "bool", "boolean": "bool",
    "int": "int", "integer": "int", "bigint": "int", "smallint": "int",
    "float": "float", "double": "float", "real": "float",
    "decimal": "decimal", "numeric": "decimal",
    "datetime": "datetime", "timestamp": "datetime",
    "date": "date",
    "time": "time",
    "str": "str", "string": "str", "varchar": "str", "text": "str", "char": "str",
}

OPERATORS_BY_CATEGORY: Dict[TypeCategory, Tuple[Operator, ...]] = {
    TypeCategory.BOOLEAN: (Operator.EQ, Operator.NE),
    TypeCategory.ORDERED: (
        Operator.EQ, Operator.NE,
        Operator.GT, Operator.GTE, Operator.LT, Operator.LTE,
        Operator.IN, Operator.NOT_IN,
    ),
    TypeCategory.STRING: (
        Operator.EQ, Operator.NE, Operator.LIKE, Operator.IN, Operator.NOT_IN,
    ),
    TypeCategory.ASSOCIATION: (),
}

NULLABLE_OPERATORS: Tuple[Operator, ...] = (Operator.IS_NULL, Operator.IS_NOT_NULL)

# Soft-delete markers must be nullable timestamps
SOFT_DELETE_TYPES = ("datetime",)
PRIMARY_KEY_TYPES = ("int", "str")


def canonical_type(type_name: str) -> Optional[str]:
    return TYPE_ALIASES.get(type_name.strip().lower())


def category_for(scalar_type: str) -> TypeCategory:
    return SCALAR_TYPES[scalar_type][0]


def annotation_for(field: Field) -> str:
    """Python annotation of a field's value (without the Optional wrapper)."""
    if field.is_association:
        return field.type
    return SCALAR_TYPES[field.type][1]


def operators_for(field: Field) -> Tuple[Operator, ...]:
    """
    Legal predicate operators for `field`, in enum order.
    The soft-delete marker has none: it is only ever an implicit condition.
    """
    if field.soft_delete:
        return ()
    ops = OPERATORS_BY_CATEGORY[field.category]
    if field.nullable and not field.is_association:
        ops = ops + NULLABLE_OPERATORS
    return ops


@dataclass(frozen=True)
class FieldCapabilities:
    field: Field
    operators: Tuple[Operator, ...]
    orderable: bool
    settable: bool
    preloadable: bool


@dataclass(frozen=True)
class ModelCapabilities:
    model: Model
    fields: Tuple[FieldCapabilities, ...]

    @property
    def point_operations(self) -> bool:
        """Lookup/update/delete by identity need a primary key."""
        return self.model.primary_key is not None

    @property
    def soft_delete(self) -> Optional[Field]:
        return self.model.soft_delete

    @property
    def predicate_fields(self) -> Tuple[FieldCapabilities, ...]:
        return tuple(fc for fc in self.fields if fc.operators)

    @property
    def orderable_fields(self) -> Tuple[FieldCapabilities, ...]:
        return tuple(fc for fc in self.fields if fc.orderable)

    @property
    def settable_fields(self) -> Tuple[FieldCapabilities, ...]:
        return tuple(fc for fc in self.fields if fc.settable)

    @property
    def preloadable_fields(self) -> Tuple[FieldCapabilities, ...]:
        return tuple(fc for fc in self.fields if fc.preloadable)


def classify_field(field: Field) -> FieldCapabilities:
    column = field.is_column
    return FieldCapabilities(
        field=field,
        operators=operators_for(field),
        orderable=column and not field.soft_delete,
        settable=column and not (field.primary_key or field.soft_delete),
        preloadable=field.is_association,
    )


def classify(model: Model) -> ModelCapabilities:
    return ModelCapabilities(model=model, fields=tuple(classify_field(f) for f in model.fields))
