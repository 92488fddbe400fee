# qsengine/type_mapping.py
from __future__ import annotations
from sqlalchemy import types


def sqlalchemy_type(scalar_type: str, *, dialect: str = "generic"):
    """
    Map a generated column's scalar type -> SQLAlchemy type.
    Used to process bind parameters and result columns; `dialect` only
    matters for types whose best representation differs per backend.
    """
    st = (scalar_type or "").lower()
    d = (dialect or "generic").lower()

    if st == "bool":
        return types.Boolean()

    if st == "int":
        # sqlite only autoincrements INTEGER PRIMARY KEY
        if d.startswith("sqlite"):
            return types.Integer()
        return types.BigInteger()

    if st == "float":
        return types.Float()

    if st == "decimal":
        # sensible defaults
        return types.Numeric(18, 6)

    if st == "str":
        return types.String(255)

    if st == "datetime":
        # naive DateTime, values are stamped in UTC
        return types.DateTime()

    if st == "date":
        return types.Date()

    if st == "time":
        return types.Time()

    raise ValueError(f"Unsupported column type: {scalar_type}")
