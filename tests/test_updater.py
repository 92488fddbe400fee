import pytest

from qsengine.errors import EmptyUpdateError, MissingPrimaryKeyError, ValidationError


def test_queryset_scoped_update(gen, store):
    gen.UserQuerySet(store).email_eq("a@x.com").get_updater().set_name("Bob").update()
    r = store.last
    assert r.sql == 'UPDATE "users" SET "name" = ? WHERE "users"."deleted_at" IS NULL AND ("users"."email" = ?)'
    assert r.params == ("Bob", "a@x.com")


def test_update_num_returns_affected_rows(gen, make_store):
    store = make_store(affected=4)
    n = gen.UserQuerySet(store).active_eq(False).get_updater().set_active(True).set_age(None).update_num()
    assert n == 4
    assert store.last.sql.startswith('UPDATE "users" SET "active" = ?, "age" = ? WHERE')


def test_scope_is_snapshotted(gen, store):
    qs = gen.UserQuerySet(store).name_eq("Ann")
    updater = qs.get_updater()
    qs.age_gt(10)
    updater.set_email("new@x.com").update()
    assert '"age"' not in store.last.sql


def test_unscoped_updater_covers_live_rows(gen, store):
    gen.UserUpdater(store).set_active(False).update()
    assert store.last.sql == 'UPDATE "users" SET "active" = ? WHERE "users"."deleted_at" IS NULL'


def test_empty_update_issues_no_statement(gen, store):
    with pytest.raises(EmptyUpdateError):
        gen.UserQuerySet(store).name_eq("Ann").get_updater().update()
    assert store.statements == []


def test_instance_updater_is_a_point_update(gen, store):
    user = gen.User(id=7, name="Ann")
    user.get_updater(store).set_name("Anna").update()
    r = store.last
    assert r.sql == 'UPDATE "users" SET "name" = ? WHERE "users"."deleted_at" IS NULL AND "users"."id" = ?'
    assert r.params == ("Anna", 7)


def test_instance_updater_without_primary_key(gen, store):
    with pytest.raises(MissingPrimaryKeyError) as exc:
        gen.User(name="Ann").get_updater(store).set_name("x").update()
    assert exc.value.field == "id"
    assert store.statements == []


def test_empty_update_is_reported_before_missing_key(gen, store):
    with pytest.raises(EmptyUpdateError):
        gen.User().get_updater(store).update()


def test_primary_key_and_soft_delete_are_not_settable(gen, store):
    assert not hasattr(gen.UserUpdater, "set_id")
    assert not hasattr(gen.UserUpdater, "set_deleted_at")
    with pytest.raises(ValidationError):
        gen.UserUpdater(store)._set(gen.UserDBSchema.id, 3)
