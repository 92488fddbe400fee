# qsgen/queryset_gen.py
"""
Query Set Generator.

Emits `<Model>QuerySet`: one chain method per (field, legal operator),
ascending/descending ordering per orderable field, one preload method per
association and a typed `get_updater()`. Terminals (`all`, `one`, `count`,
`delete`, ...) are inherited from `qsengine.queryset.BaseQuerySet`.
"""
from __future__ import annotations
import logging
from typing import List

from qsengine.operators import Operator
from qsgen.classifier import FieldCapabilities, ModelCapabilities, annotation_for
from qsgen.entity_gen import INDENT, schema_class_name
from qsgen.naming import constant_name, order_method, predicate_method, preload_method, queryset_class_name, updater_class_name

logger = logging.getLogger(__name__)


def method_name(field: str, op: Operator) -> str:
    return predicate_method(field, op.value)


def _predicate_method(caps: ModelCapabilities, fc: FieldCapabilities, op: Operator) -> List[str]:
    f = fc.field
    qs = queryset_class_name(caps.model.name)
    col = f"{schema_class_name(caps.model)}.{f.name}"
    ann = annotation_for(f)
    name = method_name(f.name, op)
    if op.arity == "variadic":
        sig = f"def {name}(self, *values: {ann}) -> {qs}:"
        body = f"return self._where_in({col}, Operator.{op.name}, values)"
    elif op.arity == "nullary":
        sig = f"def {name}(self) -> {qs}:"
        body = f"return self._where({col}, Operator.{op.name})"
    else:
        sig = f"def {name}(self, value: {ann}) -> {qs}:"
        body = f"return self._where({col}, Operator.{op.name}, value)"
    return [f"{INDENT}{sig}", f"{INDENT * 2}{body}", ""]


def _order_methods(caps: ModelCapabilities, fc: FieldCapabilities) -> List[str]:
    qs = queryset_class_name(caps.model.name)
    col = f"{schema_class_name(caps.model)}.{fc.field.name}"
    lines: List[str] = []
    for desc in (False, True):
        lines += [
            f"{INDENT}def {order_method(fc.field.name, desc)}(self) -> {qs}:",
            f"{INDENT * 2}return self._order_by({col}, descending={desc})",
            "",
        ]
    return lines


def render_queryset(caps: ModelCapabilities) -> List[str]:
    model = caps.model
    qs = queryset_class_name(model.name)
    doc = f"Chainable filters over {model.table!r}."
    if caps.soft_delete is not None:
        doc = f"Chainable filters over live (not soft-deleted) rows of {model.table!r}."
    lines = [
        f"class {qs}(BaseQuerySet):",
        f'{INDENT}"""{doc}"""',
        "",
        f"{INDENT}model = {constant_name(model.name)}",
        f"{INDENT}entity = {model.name}",
        "",
    ]
    for fc in caps.predicate_fields:
        for op in fc.operators:
            lines += _predicate_method(caps, fc, op)
    for fc in caps.orderable_fields:
        lines += _order_methods(caps, fc)
    for fc in caps.preloadable_fields:
        lines += [
            f"{INDENT}def {preload_method(fc.field.name)}(self) -> {qs}:",
            f"{INDENT * 2}return self._preload({fc.field.name!r})",
            "",
        ]
    lines += [
        f"{INDENT}def get_updater(self) -> {updater_class_name(model.name)}:",
        f"{INDENT * 2}return {updater_class_name(model.name)}(self._store, scope=self)",
    ]
    logger.debug("Rendered query set for '%s': %d lines.", model.name, len(lines))
    return lines
