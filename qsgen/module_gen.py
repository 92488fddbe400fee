# qsgen/module_gen.py
"""
Assembles one generated module from a Schema Model and drives a full
generation run (load -> extract -> render -> write).

Output is a pure function of the schema: fixed header, sorted imports,
models and members in declaration order, no timestamps. Rendering twice
from the same input yields byte-identical text.
"""
from __future__ import annotations
import ast
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Set

from qsgen.classifier import classify
from qsgen.entity_gen import render_entity, render_model_info, render_schema_class
from qsgen.errors import EmissionError
from qsgen.extractor import extract
from qsgen.loader import load_schema
from qsgen.queryset_gen import render_queryset
from qsgen.schema import Model, Schema
from qsgen.settings import get_settings
from qsgen.updater_gen import render_updater
from qsgen.writer import write_atomic

logger = logging.getLogger(__name__)

HEADER = "# Code generated by qsgen. DO NOT EDIT."

# scalar type -> (module, name) it needs imported for annotations
_TYPE_IMPORTS = {
    "datetime": ("datetime", "datetime"),
    "date": ("datetime", "date"),
    "time": ("datetime", "time"),
    "decimal": ("decimal", "Decimal"),
}


def build_import_block(schema: Schema) -> List[str]:
    stdlib: Dict[str, Set[str]] = {
        "dataclasses": {"dataclass"},
        "typing": {"Optional"},
    }
    for m in schema.models:
        for f in m.columns:
            if f.type in _TYPE_IMPORTS:
                mod, name = _TYPE_IMPORTS[f.type]
                stdlib.setdefault(mod, set()).add(name)

    model_names = ["Column", "ModelInfo"]
    if any(m.associations for m in schema.models):
        model_names.insert(0, "Association")

    lines = ["from __future__ import annotations", ""]
    for mod in sorted(stdlib):
        lines.append(f"from {mod} import {', '.join(sorted(stdlib[mod]))}")
    lines += [
        "",
        "from qsengine.instance import Entity",
        f"from qsengine.model import {', '.join(model_names)}",
        "from qsengine.operators import Operator",
        "from qsengine.ports import Store",
        "from qsengine.queryset import BaseQuerySet",
        "from qsengine.updater import BaseUpdater",
    ]
    return lines


def render_model(model: Model) -> str:
    caps = classify(model)
    banner = f"# --- {model.name} "
    sections = [
        [banner + "-" * max(3, 79 - len(banner))],
        render_schema_class(model),
        render_model_info(model),
        render_entity(caps),
        render_queryset(caps),
        render_updater(caps),
    ]
    return "\n\n\n".join("\n".join(s) for s in sections)


def render_module(schema: Schema, source_name: Optional[str] = None, jobs: int = 1) -> str:
    """Render the whole module; `jobs > 1` renders models in parallel."""
    if jobs > 1 and len(schema.models) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            bodies = list(pool.map(render_model, schema.models))
    else:
        bodies = [render_model(m) for m in schema.models]

    head = [HEADER]
    if source_name:
        head.append(f"# source: {source_name}")
    head.append(f'"""Query sets and updaters for: {", ".join(m.name for m in schema.models)}."""')
    head.append("")
    head += build_import_block(schema)

    content = "\n".join(head) + "\n\n\n" + "\n\n\n".join(bodies) + "\n"
    logger.debug("Rendered module: %d models, %d lines.", len(schema.models), content.count("\n"))
    return content


def check_source(source: str, name: str = "<generated>") -> None:
    try:
        ast.parse(source, filename=name)
    except SyntaxError as e:
        raise EmissionError(f"generated code does not parse ({name}:{e.lineno}): {e.msg}") from e


def generate_querysets(input_path: str | Path, output_path: str | Path, jobs: Optional[int] = None) -> Path:
    """
    Generate the query set module for the schema at `input_path` into
    `output_path`. Any failure raises a GenerationError and leaves
    `output_path` as it was.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    jobs = jobs or get_settings().JOBS

    doc = load_schema(input_path)
    schema = extract(doc)
    source = render_module(schema, source_name=input_path.name, jobs=jobs)
    check_source(source, str(output_path))
    write_atomic(output_path, source)
    logger.info("Generated %d query sets into %s", len(schema.models), str(output_path))
    return output_path
