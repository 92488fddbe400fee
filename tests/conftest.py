import copy
import importlib.util
import json
import sys

import pytest
from sqlalchemy import create_engine

from qsengine.ddl import create_all
from qsengine.sql import render
from qsengine.sqlalchemy_store import SQLAlchemyStore
from qsgen.module_gen import generate_querysets

MODELS_DOC = {
    "mixins": {
        "base_model": [
            {"name": "id", "type": "int"},
            {"name": "created_at", "type": "datetime"},
            {"name": "updated_at", "type": "datetime"},
            {"name": "deleted_at", "type": "Optional[datetime]"},
        ]
    },
    "models": [
        {
            "name": "User",
            "include": ["base_model"],
            "fields": [
                {"name": "name", "type": "str"},
                {"name": "email", "type": "str"},
                {"name": "age", "type": "int", "nullable": True},
                {"name": "active", "type": "bool", "default": True},
                {"name": "profile_id", "type": "int", "nullable": True},
                {"name": "profile", "type": "Profile", "association": True},
            ],
        },
        {
            "name": "Profile",
            "include": ["base_model"],
            "fields": [
                {"name": "bio", "type": "str", "nullable": True},
            ],
        },
        {
            "name": "AuditLog",
            "fields": [
                {"name": "id", "type": "int"},
                {"name": "message", "type": "str"},
            ],
        },
    ],
}


class RecordingStore:
    """Store fake: records every statement and answers with canned results."""

    def __init__(self, rows=None, count=0, identity=1, affected=1):
        self.statements = []
        self.rows = list(rows or [])
        self.count_result = count
        self.identity = identity
        self.affected = affected

    @property
    def rendered(self):
        return [render(s) for s in self.statements]

    @property
    def last(self):
        return render(self.statements[-1])

    def select(self, stmt):
        self.statements.append(stmt)
        return [dict(r) for r in self.rows]

    def count(self, stmt):
        self.statements.append(stmt)
        return self.count_result

    def insert(self, stmt):
        self.statements.append(stmt)
        return self.identity

    def update(self, stmt):
        self.statements.append(stmt)
        return self.affected

    def delete(self, stmt):
        self.statements.append(stmt)
        return self.affected


@pytest.fixture
def schema_doc():
    return copy.deepcopy(MODELS_DOC)


@pytest.fixture
def write_schema(tmp_path):
    def _write(doc, name="models.json"):
        path = tmp_path / name
        path.write_text(json.dumps(doc, indent=2), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def schema_file(write_schema, schema_doc):
    return write_schema(schema_doc)


@pytest.fixture(scope="session")
def gen(tmp_path_factory):
    """The query set module generated from MODELS_DOC, imported."""
    base = tmp_path_factory.mktemp("generated")
    src = base / "models.json"
    src.write_text(json.dumps(MODELS_DOC), encoding="utf-8")
    out = generate_querysets(src, base / "qs_models.py")

    spec = importlib.util.spec_from_file_location("qs_models", out)
    module = importlib.util.module_from_spec(spec)
    sys.modules["qs_models"] = module
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def engine(tmp_path, gen):
    eng = create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_all(eng, [gen.User, gen.Profile, gen.AuditLog])
    yield eng
    eng.dispose()


@pytest.fixture
def db_store(engine):
    return SQLAlchemyStore(engine)


@pytest.fixture
def make_store():
    return RecordingStore
