# qsgen/loader.py
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Optional

from jsonschema import SchemaError, ValidationError
from jsonschema.validators import Draft7Validator
from pydantic import ValidationError as PydanticValidationError

from qsgen.errors import InvalidSchemaError
from qsgen.meta_models import SchemaDoc
from qsgen.settings import get_settings

logger = logging.getLogger(__name__)

BUNDLED_META_SCHEMA = Path(__file__).with_name("model_schema.json")


def _resolve_meta_schema(schema_uri: Optional[str], base_dir: Path) -> Path:
    """
    Resolve the JSON-Schema file with fallbacks:
      1) the document's own $schema, when it names a local file
      2) QSGEN_MODEL_SCHEMA
      3) the bundled model_schema.json
    """
    candidates = []
    if schema_uri and "://" not in schema_uri:
        p = Path(schema_uri)
        candidates.append(p if p.is_absolute() else base_dir / p)
    override = get_settings().MODEL_SCHEMA
    if override:
        candidates.append(Path(override))

    for p in candidates:
        if p.exists():
            return p
    if candidates:
        logger.warning(
            "JSON-Schema not found at %s; using the bundled one", ", ".join(str(c) for c in candidates)
        )
    return BUNDLED_META_SCHEMA


def load_schema(path: str | Path) -> SchemaDoc:
    """Read, validate and parse a model schema document."""
    meta_path = Path(path)
    if not meta_path.exists():
        raise InvalidSchemaError(f"Schema file not found at {path}")

    try:
        data = json.loads(meta_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidSchemaError(f"Failed to read {path}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidSchemaError(f"{path}: top level must be a JSON object")

    schema_path = _resolve_meta_schema(data.get("$schema"), meta_path.parent)
    try:
        meta_schema = json.loads(schema_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidSchemaError(f"Failed to read JSON-Schema at {schema_path}: {e}") from e

    try:
        Draft7Validator.check_schema(meta_schema)
    except SchemaError as e:
        raise InvalidSchemaError(f"Invalid JSON-Schema at {schema_path}: {e.message}") from e
    try:
        Draft7Validator(meta_schema).validate(data)
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path)
        raise InvalidSchemaError(f"Schema validation failed at '{where or '<root>'}': {e.message}") from e

    try:
        doc = SchemaDoc.model_validate(data)
    except PydanticValidationError as e:
        raise InvalidSchemaError(f"Schema validation failed: {e}") from e

    logger.info("Loaded schema from %s with %d models", str(meta_path), len(doc.models))
    return doc
