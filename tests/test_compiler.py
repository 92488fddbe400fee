import pytest
from sqlalchemy import MetaData
from sqlalchemy.dialects import postgresql, sqlite

from qsengine.clauses import (
    Assignment,
    Condition,
    DeleteStatement,
    InsertStatement,
    Ordering,
    SelectStatement,
    UpdateStatement,
)
from qsengine.compiler import compile_delete, compile_insert, compile_select, compile_update, referenced_columns
from qsengine.ddl import build_table
from qsengine.model import Column
from qsengine.operators import Operator

ID = Column("id", "id", "int", primary_key=True)
NAME = Column("name", "name", "str")
EMAIL = Column("email", "email", "str")
DELETED = Column("deleted_at", "deleted_at", "datetime", nullable=True, soft_delete=True)
COLUMNS = (ID, NAME, EMAIL, DELETED)
LIVE = Condition(DELETED, Operator.IS_NULL, implicit=True)


@pytest.fixture
def users():
    return build_table("users", COLUMNS, MetaData(), dialect="sqlite")


def _sql(query, dialect=None):
    return " ".join(str(query.compile(dialect=dialect or sqlite.dialect())).split())


def test_select_groups_user_predicates_after_scope(users):
    stmt = SelectStatement(
        "users", COLUMNS,
        conditions=(LIVE, Condition(NAME, Operator.EQ, "Ann"), Condition(ID, Operator.NE, 3)),
    )
    sql = _sql(compile_select(users, stmt))
    assert sql.startswith("SELECT users.id, users.name, users.email, users.deleted_at FROM users")
    assert sql.endswith("WHERE users.deleted_at IS NULL AND (users.name = ?) AND (users.id != ?)")


def test_offset_without_limit_follows_dialect(users):
    stmt = SelectStatement("users", COLUMNS, order_by=(Ordering(NAME),), offset=5)
    assert "ORDER BY users.name ASC LIMIT -1 OFFSET ?" in _sql(compile_select(users, stmt))
    pg = _sql(compile_select(users, stmt), postgresql.dialect())
    assert "LIMIT" not in pg
    assert "OFFSET" in pg


def test_count_ignores_ordering_and_paging(users):
    stmt = SelectStatement("users", COLUMNS, conditions=(LIVE,), order_by=(Ordering(ID, descending=True),),
                           limit=3, count=True)
    sql = _sql(compile_select(users, stmt))
    assert sql.startswith("SELECT count(*)")
    assert "ORDER BY" not in sql and "LIMIT" not in sql


def test_list_and_null_operators(users):
    stmt = SelectStatement(
        "users", COLUMNS,
        conditions=(Condition(ID, Operator.NOT_IN, (1, 2)), Condition(EMAIL, Operator.IS_NOT_NULL)),
    )
    sql = _sql(compile_select(users, stmt))
    assert "NOT IN" in sql
    assert "(users.email IS NOT NULL)" in sql


def test_empty_list_is_rejected(users):
    stmt = SelectStatement("users", COLUMNS, conditions=(Condition(ID, Operator.IN, ()),))
    with pytest.raises(ValueError):
        compile_select(users, stmt)


def test_update_and_delete(users):
    upd = UpdateStatement("users", (Assignment(NAME, "Bob"),), (LIVE, Condition(EMAIL, Operator.EQ, "a@x.com")))
    assert _sql(compile_update(users, upd)) == (
        "UPDATE users SET name=? WHERE users.deleted_at IS NULL AND (users.email = ?)"
    )
    dele = DeleteStatement("users", (Condition(ID, Operator.EQ, 4, implicit=True),))
    assert _sql(compile_delete(users, dele)) == "DELETE FROM users WHERE users.id = ?"


def test_update_needs_assignments(users):
    with pytest.raises(ValueError):
        compile_update(users, UpdateStatement("users", ()))


def test_insert(users):
    stmt = InsertStatement("users", (Assignment(NAME, "Ann"), Assignment(EMAIL, "a@x.com")), primary_key=ID)
    assert _sql(compile_insert(users, stmt)) == "INSERT INTO users (name, email) VALUES (?, ?)"


def test_referenced_columns_without_mapped_columns():
    stmt = UpdateStatement("users", (Assignment(NAME, "Bob"),), (LIVE, Condition(NAME, Operator.EQ, "x")))
    assert referenced_columns(stmt) == (NAME, DELETED)
