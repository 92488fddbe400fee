# qsgen/naming.py
from __future__ import annotations
import keyword
import re
from typing import Tuple

_CAMEL_1 = re.compile(r"(.)([A-Z][a-z]+)")
_CAMEL_2 = re.compile(r"([a-z0-9])([A-Z])")

# Names taken by generated entity methods and builder internals
RESERVED_FIELD_NAMES = frozenset({"create", "update", "delete", "get_updater", "_model"})

# Top-level names every generated module imports
RESERVED_MODULE_NAMES = frozenset({
    "annotations", "dataclass", "Optional", "datetime", "date", "time", "Decimal",
    "Entity", "Association", "Column", "ModelInfo", "Operator", "Store",
    "BaseQuerySet", "BaseUpdater",
})


def snake_case(name: str) -> str:
    """UserID -> user_id, createdAt -> created_at, already_snake -> already_snake."""
    s = _CAMEL_1.sub(r"\1_\2", name)
    s = _CAMEL_2.sub(r"\1_\2", s)
    return s.lower()


def pluralize(word: str) -> str:
    """Naive English plural, enough for table names (user -> users, category -> categories)."""
    if not word:
        return word
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def table_name(model_name: str) -> str:
    return pluralize(snake_case(model_name))


def column_name(field_name: str) -> str:
    return snake_case(field_name)


def constant_name(model_name: str) -> str:
    return f"{snake_case(model_name).upper()}_MODEL"


def is_valid_identifier(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def schema_class_name(model_name: str) -> str:
    return f"{model_name}DBSchema"


def queryset_class_name(model_name: str) -> str:
    return f"{model_name}QuerySet"


def updater_class_name(model_name: str) -> str:
    return f"{model_name}Updater"


def module_level_names(model_name: str) -> Tuple[str, ...]:
    """Every top-level name the generated module defines for one model."""
    return (
        model_name,
        schema_class_name(model_name),
        constant_name(model_name),
        queryset_class_name(model_name),
        updater_class_name(model_name),
    )


def predicate_method(field_name: str, operator: str) -> str:
    return f"{field_name}_{operator}"


def order_method(field_name: str, descending: bool = False) -> str:
    return f"order_{'desc' if descending else 'asc'}_by_{field_name}"


def preload_method(field_name: str) -> str:
    return f"preload_{field_name}"


def setter_method(field_name: str) -> str:
    return f"set_{field_name}"
