# qsgen/updater_gen.py
from __future__ import annotations
import logging
from typing import List

from qsgen.classifier import ModelCapabilities, annotation_for
from qsgen.entity_gen import INDENT, schema_class_name
from qsgen.naming import constant_name, setter_method, updater_class_name

logger = logging.getLogger(__name__)


def render_updater(caps: ModelCapabilities) -> List[str]:
    """
    `<Model>Updater` with one `set_<field>` per settable column. Primary key
    and soft-delete marker are never settable.
    """
    model = caps.model
    name = updater_class_name(model.name)
    schema_cls = schema_class_name(model)
    lines = [
        f"class {name}(BaseUpdater):",
        f'{INDENT}"""Partial update of {model.table!r}; only fields passed to set_* are written."""',
        "",
        f"{INDENT}model = {constant_name(model.name)}",
    ]
    for fc in caps.settable_fields:
        f = fc.field
        ann = annotation_for(f)
        if f.nullable:
            ann = f"Optional[{ann}]"
        lines += [
            "",
            f"{INDENT}def {setter_method(f.name)}(self, value: {ann}) -> {name}:",
            f"{INDENT * 2}return self._set({schema_cls}.{f.name}, value)",
        ]
    logger.debug("Rendered updater for '%s': %d setters.", model.name, len(caps.settable_fields))
    return lines
