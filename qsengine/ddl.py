# qsengine/ddl.py
from __future__ import annotations
from typing import Dict, Iterable, Sequence

from sqlalchemy import Column, MetaData, Table

from qsengine.model import Column as MappedColumn
from qsengine.model import ModelInfo
from qsengine.type_mapping import sqlalchemy_type


def build_table(name: str, columns: Sequence[MappedColumn], metadata: MetaData, dialect: str = "generic") -> Table:
    """SQLAlchemy Table for a table name and its mapped columns."""
    cols = []
    for col in columns:
        kwargs = {"primary_key": col.primary_key}
        if col.primary_key:
            kwargs["autoincrement"] = col.type == "int"
        else:
            kwargs["nullable"] = col.nullable
        cols.append(Column(col.column, sqlalchemy_type(col.type, dialect=dialect), **kwargs))
    return Table(name, metadata, *cols, extend_existing=True)


def table_for(model: ModelInfo, metadata: MetaData, dialect: str = "generic") -> Table:
    """
    Build the SQLAlchemy Table for a generated model.
    Intended for development databases and tests; this is not a migration tool.
    """
    return build_table(model.table, model.columns, metadata, dialect=dialect)


def create_all(bind, entities: Iterable[type], metadata: MetaData | None = None) -> Dict[str, Table]:
    """Create (if missing) the tables of the given generated entity classes."""
    metadata = metadata or MetaData()
    dialect = bind.dialect.name
    tables = {e._model.table: table_for(e._model, metadata, dialect=dialect) for e in entities}
    metadata.create_all(bind=bind)
    return tables
