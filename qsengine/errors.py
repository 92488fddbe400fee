"""
Run-time errors raised by generated query sets, updaters and instance
operations.

None of these are fatal to the process: they are raised to the caller, who
decides what to do. A soft delete that matches no rows is not an error.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class QuerySetError(Exception):
    """Base class for every run-time query set error."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class NotFoundError(QuerySetError):
    """`one()` matched zero rows."""

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"record not found in '{table}'")


class EmptyUpdateError(QuerySetError):
    """`update()` was called on an updater with no fields set."""

    def __init__(self, model: str) -> None:
        self.model = model
        super().__init__(f"nothing to update for {model}: no fields were set")


class MissingPrimaryKeyError(QuerySetError):
    """A point operation was requested for an instance without a primary key."""

    def __init__(self, model: str, field: Optional[str] = None) -> None:
        self.model = model
        self.field = field
        if field is None:
            message = f"{model} has no primary key; point operations are unavailable"
        else:
            message = f"{model}.{field} is zero or unset; cannot address the row"
        super().__init__(message)


class ValidationError(QuerySetError):
    """Input to a runtime operation is invalid (missing required fields, empty IN lists...)."""

    def __init__(self, message: str, fields: Optional[List[str]] = None) -> None:
        self.message = message
        self.fields = list(fields or [])
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "VALIDATION_ERROR",
            "message": self.message,
            "fields": self.fields,
        }


class StoreExecutionError(QuerySetError):
    """
    The store failed to execute a statement.

    The underlying exception is kept on ``orig`` (and chained as
    ``__cause__``) without reinterpretation.
    """

    def __init__(self, message: str, statement: Optional[str] = None, orig: Optional[BaseException] = None) -> None:
        self.statement = statement
        self.orig = orig
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "STORE_EXECUTION_ERROR",
            "message": str(self),
            "statement": self.statement,
        }
