from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pytest

from qsengine.errors import MissingPrimaryKeyError, ValidationError
from qsengine.instance import Entity
from qsengine.model import Column, ModelInfo


@dataclass
class Tag(Entity):
    code: Optional[str] = None
    label: Optional[str] = None

    _model = ModelInfo("Tag", "tags", (
        Column("code", "code", "str", primary_key=True),
        Column("label", "label", "str"),
    ))


def test_create_assigns_identity_and_managed_fields(gen, make_store):
    store = make_store(identity=42)
    user = gen.User(name="Ann", email="a@x.com")
    user.create(store)

    assert user.id == 42
    assert isinstance(user.created_at, datetime)
    assert user.updated_at == user.created_at
    assert user.active is True
    r = store.last
    assert r.sql == (
        'INSERT INTO "users" ("created_at", "updated_at", "deleted_at", "name", "email", "age", "active", "profile_id")'
        " VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
    )
    assert store.statements[-1].primary_key.field == "id"


def test_create_keeps_explicit_created_at_and_primary_key(gen, make_store):
    store = make_store(identity=None)
    stamp = datetime(2020, 1, 1)
    user = gen.User(id=5, name="Ann", email="a@x.com", created_at=stamp)
    user.create(store)
    assert user.id == 5
    assert user.created_at == stamp
    stmt = store.statements[-1]
    assert stmt.primary_key is None
    assert stmt.values[0].column.field == "id"


def test_create_rejects_missing_required_fields(gen, store):
    with pytest.raises(ValidationError) as exc:
        gen.User(name="Ann").create(store)
    assert exc.value.fields == ["email"]
    assert exc.value.to_dict()["error"] == "VALIDATION_ERROR"
    assert store.statements == []


def test_rejected_create_leaves_entity_untouched(gen, store):
    user = gen.User(name="Ann")
    with pytest.raises(ValidationError):
        user.create(store)
    assert user.created_at is None
    assert user.updated_at is None
    assert user.active is None


def test_unset_string_primary_key_is_required(store):
    with pytest.raises(ValidationError) as exc:
        Tag(label="red").create(store)
    assert exc.value.fields == ["code"]
    assert store.statements == []


def test_string_primary_key_is_inserted_as_given(make_store):
    store = make_store(identity=None)
    tag = Tag(code="red", label="Red")
    tag.create(store)
    assert tag.code == "red"
    stmt = store.statements[-1]
    assert stmt.primary_key is None
    assert store.last.sql == 'INSERT INTO "tags" ("code", "label") VALUES (?, ?)'
    assert store.last.params == ("red", "Red")


def test_soft_delete_is_an_idempotent_point_update(gen, make_store):
    store = make_store(affected=1)
    user = gen.User(id=7, name="Ann", email="a@x.com")
    user.delete(store)
    assert user.deleted_at is not None
    r = store.last
    assert r.sql == 'UPDATE "users" SET "deleted_at" = ? WHERE "users"."deleted_at" IS NULL AND "users"."id" = ?'
    assert r.params[1] == 7

    store.affected = 0
    again = gen.User(id=7)
    again.delete(store)
    assert again.deleted_at is None
    assert len(store.statements) == 2


def test_hard_delete(gen, store):
    gen.AuditLog(id=3, message="boot").delete(store)
    r = store.last
    assert r.sql == 'DELETE FROM "audit_logs" WHERE "audit_logs"."id" = ?'
    assert r.params == (3,)


def test_delete_needs_primary_key(gen, store):
    with pytest.raises(MissingPrimaryKeyError):
        gen.AuditLog(message="boot").delete(store)
    assert store.statements == []


def test_update_selected_columns(gen, store):
    user = gen.User(id=9, name="Ann", email="b@x.com", age=40)
    user.update(store, gen.UserDBSchema.email, gen.UserDBSchema.age)
    r = store.last
    assert r.sql == (
        'UPDATE "users" SET "email" = ?, "age" = ? WHERE "users"."deleted_at" IS NULL AND "users"."id" = ?'
    )
    assert r.params == ("b@x.com", 40, 9)
