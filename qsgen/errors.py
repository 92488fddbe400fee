"""
Build-time errors.

Every one of these aborts generation; the output artifact is left untouched.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any, Dict, List, Optional


class GenerationError(Exception):
    """Base class for every build-time failure."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class SchemaExtractionError(GenerationError):
    """The model definitions cannot be turned into a schema."""

    def __init__(self, message: str, model: Optional[str] = None, field: Optional[str] = None) -> None:
        self.message = message
        self.model = model
        self.field = field
        where = ".".join(p for p in (model, field) if p)
        super().__init__(f"{where}: {message}" if where else message)


class InvalidSchemaError(SchemaExtractionError):
    """The input document is unreadable or fails JSON-Schema validation."""


class DuplicateColumnError(SchemaExtractionError):
    def __init__(self, model: str, column: str, fields: List[str]) -> None:
        self.column = column
        self.fields = list(fields)
        super().__init__(
            f"column '{column}' is mapped by more than one field ({', '.join(fields)})",
            model=model,
        )


class UnsupportedFieldTypeError(SchemaExtractionError):
    """
    A field's type has no registered capability mapping.

    Offers close matches among the registered type names.
    """

    def __init__(self, model: str, field: str, type_name: str, known_types: List[str]) -> None:
        self.type_name = type_name
        self.suggestions = get_close_matches(type_name, known_types, n=3, cutoff=0.6)
        message = f"unsupported field type '{type_name}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message, model=model, field=field)


class EmissionError(GenerationError):
    """Rendering or writing the generated module failed."""
