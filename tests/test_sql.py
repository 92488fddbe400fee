import pytest

from qsengine.clauses import (
    Assignment,
    Condition,
    DeleteStatement,
    InsertStatement,
    Ordering,
    SelectStatement,
    UpdateStatement,
)
from qsengine.model import Column
from qsengine.operators import Operator
from qsengine.sql import ansi_quote, render

ID = Column("id", "id", "int", primary_key=True)
NAME = Column("name", "name", "str")
AGE = Column("age", "age", "int", nullable=True)
DELETED = Column("deleted_at", "deleted_at", "datetime", nullable=True, soft_delete=True)
COLUMNS = (ID, NAME, AGE, DELETED)
LIVE = Condition(DELETED, Operator.IS_NULL, implicit=True)


def test_select_implicit_condition_first_and_bare():
    stmt = SelectStatement(
        "users", COLUMNS,
        conditions=(LIVE, Condition(NAME, Operator.EQ, "Ann"), Condition(AGE, Operator.GTE, 18)),
    )
    r = render(stmt)
    assert r.sql == (
        'SELECT * FROM "users" WHERE "users"."deleted_at" IS NULL'
        ' AND ("users"."name" = ?) AND ("users"."age" >= ?)'
    )
    assert r.params == ("Ann", 18)


def test_select_order_limit_offset():
    stmt = SelectStatement(
        "users", COLUMNS,
        order_by=(Ordering(AGE, descending=True), Ordering(ID)),
        limit=10, offset=20,
    )
    assert render(stmt).sql == (
        'SELECT * FROM "users" ORDER BY "users"."age" DESC, "users"."id" ASC LIMIT 10 OFFSET 20'
    )


def test_count_ignores_order_and_paging():
    stmt = SelectStatement("users", COLUMNS, conditions=(LIVE,), order_by=(Ordering(ID),), count=True)
    assert render(stmt).sql == 'SELECT count(*) FROM "users" WHERE "users"."deleted_at" IS NULL'


def test_list_and_null_operators():
    stmt = SelectStatement(
        "users", COLUMNS,
        conditions=(
            Condition(ID, Operator.NOT_IN, (1, 2, 3)),
            Condition(AGE, Operator.IS_NOT_NULL),
            Condition(NAME, Operator.NE, "x"),
        ),
    )
    r = render(stmt)
    assert r.sql == (
        'SELECT * FROM "users" WHERE ("users"."id" NOT IN (?, ?, ?))'
        ' AND ("users"."age" IS NOT NULL) AND ("users"."name" <> ?)'
    )
    assert r.params == (1, 2, 3, "x")


def test_empty_list_is_rejected():
    stmt = SelectStatement("users", COLUMNS, conditions=(Condition(ID, Operator.IN, ()),))
    with pytest.raises(ValueError):
        render(stmt)


def test_update_binds_set_values_before_where_values():
    stmt = UpdateStatement(
        "users",
        (Assignment(NAME, "Bob"),),
        (LIVE, Condition(NAME, Operator.EQ, "Ann")),
    )
    r = render(stmt)
    assert r.sql == 'UPDATE "users" SET "name" = ? WHERE "users"."deleted_at" IS NULL AND ("users"."name" = ?)'
    assert r.params == ("Bob", "Ann")


def test_update_needs_assignments():
    with pytest.raises(ValueError):
        render(UpdateStatement("users", ()))


def test_insert():
    stmt = InsertStatement("users", (Assignment(NAME, "Ann"), Assignment(AGE, None)), primary_key=ID)
    r = render(stmt)
    assert r.sql == 'INSERT INTO "users" ("name", "age") VALUES (?, ?)'
    assert r.params == ("Ann", None)


def test_delete():
    r = render(DeleteStatement("users", (Condition(ID, Operator.EQ, 5, implicit=True),)))
    assert r.sql == 'DELETE FROM "users" WHERE "users"."id" = ?'
    assert r.params == (5,)


def test_ansi_quote_escapes_quotes():
    assert ansi_quote('we"ird') == '"we""ird"'
