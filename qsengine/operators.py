# qsengine/operators.py
from __future__ import annotations
from enum import Enum


class Operator(str, Enum):
    """Closed set of predicate operators a generated query set can apply."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    LIKE = "like"
    IN = "in"
    NOT_IN = "not_in"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"

    @property
    def arity(self) -> str:
        """'unary' (one value), 'variadic' (list of values) or 'nullary'."""
        if self in LIST_OPERATORS:
            return "variadic"
        if self in NULL_OPERATORS:
            return "nullary"
        return "unary"


# Operators rendered as `<column> <sql> ?`
BINARY_SQL = {
    Operator.EQ: "=",
    Operator.NE: "<>",
    Operator.GT: ">",
    Operator.GTE: ">=",
    Operator.LT: "<",
    Operator.LTE: "<=",
    Operator.LIKE: "LIKE",
}

# Operators that take a list of values and expand to `IN (?, ?, ...)`
LIST_OPERATORS = {
    Operator.IN: "IN",
    Operator.NOT_IN: "NOT IN",
}

# Operators without a bound value
NULL_OPERATORS = {
    Operator.IS_NULL: "IS NULL",
    Operator.IS_NOT_NULL: "IS NOT NULL",
}
