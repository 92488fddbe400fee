# qsgen/entity_gen.py
"""
Emits the per-model data half of a generated module: column references
(`<Model>DBSchema`), the `ModelInfo` constant and the entity dataclass.
"""
from __future__ import annotations
from typing import List

from qsgen.classifier import ModelCapabilities, annotation_for
from qsgen import naming
from qsgen.naming import constant_name
from qsgen.schema import Field, Model

INDENT = "    "


def schema_class_name(model: Model) -> str:
    return naming.schema_class_name(model.name)


def column_literal(field: Field) -> str:
    """`Column(...)` constructor call; only non-default keywords are emitted."""
    parts = [repr(field.name), repr(field.column), repr(field.type)]
    if field.nullable:
        parts.append("nullable=True")
    if field.primary_key:
        parts.append("primary_key=True")
    if field.soft_delete:
        parts.append("soft_delete=True")
    if field.has_default:
        parts.append("has_default=True")
        parts.append(f"default={field.default!r}")
    if field.default_now:
        parts.append("default_now=True")
    return f"Column({', '.join(parts)})"


def render_schema_class(model: Model) -> List[str]:
    lines = [
        f"class {schema_class_name(model)}:",
        f'{INDENT}"""Column references for {model.name} (table {model.table!r})."""',
        "",
    ]
    for f in model.columns:
        lines.append(f"{INDENT}{f.name} = {column_literal(f)}")
    return lines


def render_model_info(model: Model) -> List[str]:
    schema_cls = schema_class_name(model)
    lines = [
        f"{constant_name(model.name)} = ModelInfo(",
        f"{INDENT}name={model.name!r},",
        f"{INDENT}table={model.table!r},",
        f"{INDENT}columns=(",
    ]
    for f in model.columns:
        lines.append(f"{INDENT * 2}{schema_cls}.{f.name},")
    lines.append(f"{INDENT}),")
    if model.associations:
        lines.append(f"{INDENT}associations=(")
        for f in model.associations:
            lines.append(
                f"{INDENT * 2}Association({f.name!r}, {f.foreign_key!r}, lambda: {naming.queryset_class_name(f.type)}),"
            )
        lines.append(f"{INDENT}),")
    lines.append(")")
    return lines


def render_entity(caps: ModelCapabilities) -> List[str]:
    model = caps.model
    lines = [
        "@dataclass",
        f"class {model.name}(Entity):",
        f'{INDENT}"""Row of {model.table!r}."""',
        "",
    ]
    for f in model.fields:
        lines.append(f"{INDENT}{f.name}: Optional[{annotation_for(f)}] = None")
    lines += [
        "",
        f"{INDENT}_model = {constant_name(model.name)}",
        "",
        f"{INDENT}def get_updater(self, store: Store) -> {naming.updater_class_name(model.name)}:",
        f"{INDENT * 2}return {naming.updater_class_name(model.name)}(store, instance=self)",
    ]
    return lines
