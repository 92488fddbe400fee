import json

import pytest

from qsgen.errors import InvalidSchemaError
from qsgen.loader import load_schema


def test_load_valid_document(schema_file):
    doc = load_schema(schema_file)
    assert [m.name for m in doc.models] == ["User", "Profile", "AuditLog"]
    assert [f.name for f in doc.mixins["base_model"]] == ["id", "created_at", "updated_at", "deleted_at"]


def test_default_presence_is_tracked(schema_file):
    doc = load_schema(schema_file)
    user = doc.models[0]
    by_name = {f.name: f for f in user.fields}
    assert by_name["active"].has_default
    assert not by_name["name"].has_default


def test_missing_file(tmp_path):
    with pytest.raises(InvalidSchemaError, match="not found"):
        load_schema(tmp_path / "nope.json")


def test_malformed_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(InvalidSchemaError, match="Failed to read"):
        load_schema(path)


def test_unknown_field_key_is_rejected(write_schema, schema_doc):
    schema_doc["models"][0]["fields"][0]["unique"] = True
    with pytest.raises(InvalidSchemaError) as exc:
        load_schema(write_schema(schema_doc))
    assert "models/0/fields/0" in str(exc.value)


def test_models_are_required(write_schema):
    with pytest.raises(InvalidSchemaError, match="<root>"):
        load_schema(write_schema({"mixins": {}}))


def test_local_schema_reference_is_used(tmp_path, write_schema, schema_doc):
    strict = {"type": "object", "required": ["models", "version"]}
    (tmp_path / "strict.json").write_text(json.dumps(strict), encoding="utf-8")
    schema_doc["$schema"] = "strict.json"
    with pytest.raises(InvalidSchemaError, match="version"):
        load_schema(write_schema(schema_doc))


def test_broken_json_schema_is_reported(tmp_path, write_schema, schema_doc):
    (tmp_path / "bad_meta.json").write_text(json.dumps({"type": 12}), encoding="utf-8")
    schema_doc["$schema"] = "bad_meta.json"
    with pytest.raises(InvalidSchemaError, match="Invalid JSON-Schema"):
        load_schema(write_schema(schema_doc))
