# qsgen/extractor.py
"""
Model Schema Extractor: raw definitions (`SchemaDoc`) -> Schema Model.

Pure and deterministic. Field order is declaration order, with the fields of
included mixins spliced in first, in include order.
"""
from __future__ import annotations
import logging
import re
from dataclasses import replace
from typing import Dict, List, Optional, Set, Tuple

from qsengine.queryset import BaseQuerySet
from qsengine.updater import BaseUpdater
from qsgen.classifier import (
    PRIMARY_KEY_TYPES,
    SOFT_DELETE_TYPES,
    TYPE_ALIASES,
    canonical_type,
    category_for,
    classify,
)
from qsgen.errors import (
    DuplicateColumnError,
    SchemaExtractionError,
    UnsupportedFieldTypeError,
)
from qsgen.meta_models import FieldDef, ModelDef, SchemaDoc
from qsgen.naming import (
    RESERVED_FIELD_NAMES,
    RESERVED_MODULE_NAMES,
    column_name,
    is_valid_identifier,
    module_level_names,
    order_method,
    predicate_method,
    preload_method,
    setter_method,
    table_name,
)
from qsgen.schema import Field, Model, Schema, TypeCategory

logger = logging.getLogger(__name__)

_OPTIONAL = re.compile(r"^\s*Optional\[\s*(.+?)\s*\]\s*$")
_NOW_DEFAULTS = {"now", "now()", "current_timestamp", "current_timestamp()"}

# Naming conventions applied when a model leaves the role unmarked
_PK_CONVENTION = ("id",)
_SOFT_DELETE_CONVENTION = ("deleted_at", "deletedAt")


def _members(cls: type) -> frozenset:
    return frozenset(dir(cls)) | frozenset(getattr(cls, "__annotations__", {}))


# Names generated query sets and updaters inherit
_QUERYSET_MEMBERS = _members(BaseQuerySet)
_UPDATER_MEMBERS = _members(BaseUpdater)


def _is_now_default(val: object) -> bool:
    return isinstance(val, str) and val.strip().lower() in _NOW_DEFAULTS


def _check_default(model: str, fd: FieldDef, scalar: str) -> Tuple[object, bool]:
    """Returns (literal default, default_now)."""
    val = fd.default
    if scalar in ("datetime", "date") and _is_now_default(val):
        return None, True
    ok = {
        "bool": isinstance(val, bool),
        "int": isinstance(val, int) and not isinstance(val, bool),
        "float": isinstance(val, (int, float)) and not isinstance(val, bool),
        "decimal": isinstance(val, (int, float, str)) and not isinstance(val, bool),
        "str": isinstance(val, str),
    }.get(scalar, False)
    if not ok:
        raise SchemaExtractionError(f"default {val!r} is not valid for type '{scalar}'", model=model, field=fd.name)
    return val, False


def _expand_fields(md: ModelDef, mixins: Dict[str, List[FieldDef]]) -> List[FieldDef]:
    fields: List[FieldDef] = []
    for name in md.include:
        if name not in mixins:
            raise SchemaExtractionError(f"unknown mixin '{name}'", model=md.name)
        fields.extend(mixins[name])
    fields.extend(md.fields)
    return fields


def _extract_field(md: ModelDef, fd: FieldDef, model_names: Set[str]) -> Field:
    if not is_valid_identifier(fd.name):
        raise SchemaExtractionError("field name is not a valid identifier", model=md.name, field=fd.name)
    if fd.name in RESERVED_FIELD_NAMES:
        raise SchemaExtractionError("field name is reserved for generated methods", model=md.name, field=fd.name)
    if fd.name.startswith("_"):
        raise SchemaExtractionError("field name cannot start with an underscore", model=md.name, field=fd.name)

    type_name = fd.type
    nullable = bool(fd.nullable)
    m = _OPTIONAL.match(type_name)
    if m:
        type_name = m.group(1)
        nullable = True

    if fd.association:
        if type_name not in model_names:
            raise SchemaExtractionError(f"association to unknown model '{type_name}'", model=md.name, field=fd.name)
        if fd.primaryKey or fd.softDelete or fd.has_default or fd.column:
            raise SchemaExtractionError(
                "association fields cannot carry column, default, primary-key or soft-delete markers",
                model=md.name, field=fd.name,
            )
        return Field(
            name=fd.name,
            column="",
            type=type_name,
            category=TypeCategory.ASSOCIATION,
            nullable=True,
            foreign_key=fd.foreignKey or f"{fd.name}_id",
        )

    if fd.foreignKey:
        raise SchemaExtractionError("foreignKey is only valid on association fields", model=md.name, field=fd.name)

    scalar = canonical_type(type_name)
    if scalar is None:
        raise UnsupportedFieldTypeError(md.name, fd.name, type_name, sorted(TYPE_ALIASES))

    default, default_now = (None, False)
    if fd.has_default:
        default, default_now = _check_default(md.name, fd, scalar)

    return Field(
        name=fd.name,
        column=fd.column or column_name(fd.name),
        type=scalar,
        category=category_for(scalar),
        nullable=nullable,
        primary_key=bool(fd.primaryKey),
        soft_delete=bool(fd.softDelete),
        has_default=fd.has_default and not default_now,
        default=default,
        default_now=default_now,
    )


def _single_role(model: str, fields: List[Field], attr: str, label: str) -> Optional[int]:
    marked = [i for i, f in enumerate(fields) if getattr(f, attr)]
    if len(marked) > 1:
        names = ", ".join(fields[i].name for i in marked)
        raise SchemaExtractionError(f"more than one {label} field ({names}); only one is supported", model=model)
    return marked[0] if marked else None


def _apply_conventions(md: ModelDef, raw: List[FieldDef], fields: List[Field]) -> None:
    """Implicit primary key `id` / soft-delete `deleted_at` when nothing is marked."""
    if _single_role(md.name, fields, "primary_key", "primary key") is None:
        for i, (fd, f) in enumerate(zip(raw, fields)):
            if f.is_column and f.name in _PK_CONVENTION and fd.primaryKey is None:
                fields[i] = replace(f, primary_key=True)
                break
    if _single_role(md.name, fields, "soft_delete", "soft-delete") is None:
        for i, (fd, f) in enumerate(zip(raw, fields)):
            if (
                f.name in _SOFT_DELETE_CONVENTION
                and fd.softDelete is None
                and f.type in SOFT_DELETE_TYPES
                and f.nullable
            ):
                fields[i] = replace(f, soft_delete=True)
                break


def _validate_roles(model: str, fields: List[Field]) -> None:
    pk_i = _single_role(model, fields, "primary_key", "primary key")
    if pk_i is not None:
        pk = fields[pk_i]
        if pk.type not in PRIMARY_KEY_TYPES:
            raise SchemaExtractionError(f"primary key must be one of {', '.join(PRIMARY_KEY_TYPES)}", model=model, field=pk.name)
        if pk.nullable:
            raise SchemaExtractionError("primary key cannot be nullable", model=model, field=pk.name)
    sd_i = _single_role(model, fields, "soft_delete", "soft-delete")
    if sd_i is not None:
        sd = fields[sd_i]
        if sd.type not in SOFT_DELETE_TYPES or not sd.nullable:
            raise SchemaExtractionError("soft-delete field must be a nullable datetime", model=model, field=sd.name)
        if sd.has_default or sd.default_now:
            raise SchemaExtractionError("soft-delete field cannot have a default", model=model, field=sd.name)


def _check_columns(model: str, fields: List[Field]) -> None:
    by_column: Dict[str, List[str]] = {}
    for f in fields:
        if f.is_column:
            by_column.setdefault(f.column, []).append(f.name)
    for column, names in by_column.items():
        if len(names) > 1:
            raise DuplicateColumnError(model, column, names)


def _claim(model: str, taken: Dict[str, str], inherited: frozenset, method: str, field: str) -> None:
    if method in inherited:
        raise SchemaExtractionError(f"generated method '{method}' would shadow a built-in member", model=model, field=field)
    owner = taken.setdefault(method, field)
    if owner != field:
        raise SchemaExtractionError(
            f"generated method '{method}' is produced by both '{owner}' and '{field}'", model=model, field=field
        )


def _check_method_names(model: Model) -> None:
    """Every generated query set and updater method name must be unique and new."""
    caps = classify(model)
    methods: Dict[str, str] = {}
    for fc in caps.predicate_fields:
        for op in fc.operators:
            _claim(model.name, methods, _QUERYSET_MEMBERS, predicate_method(fc.field.name, op.value), fc.field.name)
    for fc in caps.orderable_fields:
        for desc in (False, True):
            _claim(model.name, methods, _QUERYSET_MEMBERS, order_method(fc.field.name, desc), fc.field.name)
    for fc in caps.preloadable_fields:
        _claim(model.name, methods, _QUERYSET_MEMBERS, preload_method(fc.field.name), fc.field.name)

    setters: Dict[str, str] = {}
    for fc in caps.settable_fields:
        _claim(model.name, setters, _UPDATER_MEMBERS, setter_method(fc.field.name), fc.field.name)


def extract_model(md: ModelDef, mixins: Dict[str, List[FieldDef]], model_names: Set[str]) -> Model:
    raw = _expand_fields(md, mixins)
    if not raw:
        raise SchemaExtractionError("model has no fields", model=md.name)

    seen: Set[str] = set()
    for fd in raw:
        if fd.name in seen:
            raise SchemaExtractionError("field declared more than once", model=md.name, field=fd.name)
        seen.add(fd.name)

    fields = [_extract_field(md, fd, model_names) for fd in raw]
    if not any(f.is_column for f in fields):
        raise SchemaExtractionError("model has no column fields", model=md.name)

    _apply_conventions(md, raw, fields)
    _validate_roles(md.name, fields)
    _check_columns(md.name, fields)

    for f in fields:
        if f.is_association:
            target = next((x for x in fields if x.name == f.foreign_key), None)
            if target is None or not target.is_column:
                raise SchemaExtractionError(
                    f"foreign key field '{f.foreign_key}' is not a column of this model", model=md.name, field=f.name
                )

    model = Model(name=md.name, table=md.table or table_name(md.name), fields=tuple(fields))
    _check_method_names(model)
    return model


def extract(doc: SchemaDoc) -> Schema:
    """Build the Schema Model; raises SchemaExtractionError and subclasses."""
    names: List[str] = []
    for md in doc.models:
        if not is_valid_identifier(md.name):
            raise SchemaExtractionError("model name is not a valid identifier", model=md.name)
        if md.name in names:
            raise SchemaExtractionError("model declared more than once", model=md.name)
        names.append(md.name)

    # top-level names of the generated module: imports first, then per model
    defined: Dict[str, str] = {}
    for name in names:
        for generated in module_level_names(name):
            if generated in RESERVED_MODULE_NAMES:
                raise SchemaExtractionError(f"generated name '{generated}' is already imported by the module", model=name)
            owner = defined.setdefault(generated, name)
            if owner != name:
                raise SchemaExtractionError(f"generated name '{generated}' clashes with model '{owner}'", model=name)

    model_names = set(names)
    models = tuple(extract_model(md, doc.mixins, model_names) for md in doc.models)

    # belongs-to targets need a primary key to match against
    for m in models:
        for f in m.associations:
            target = next(t for t in models if t.name == f.type)
            if target.primary_key is None:
                raise SchemaExtractionError(
                    f"association target '{target.name}' has no primary key", model=m.name, field=f.name
                )

    logger.info("Extracted %d models: %s", len(models), ", ".join(m.name for m in models))
    return Schema(models=models)
