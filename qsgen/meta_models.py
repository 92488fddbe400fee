# qsgen/meta_models.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class FieldDef(BaseModel):
    """One raw field as written in the model schema document."""
    model_config = ConfigDict(extra="forbid")

    name: str
    type: str
    column: Optional[str] = None
    nullable: Optional[bool] = None
    primaryKey: Optional[bool] = None
    softDelete: Optional[bool] = None
    association: bool = False
    foreignKey: Optional[str] = None
    default: Optional[Any] = None

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set


class ModelDef(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    table: Optional[str] = None
    include: List[str] = Field(default_factory=list)
    fields: List[FieldDef] = Field(default_factory=list)


class SchemaDoc(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    schema_uri: Optional[str] = Field(default=None, alias="$schema")
    mixins: Dict[str, List[FieldDef]] = Field(default_factory=dict)
    models: List[ModelDef]
