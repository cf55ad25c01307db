# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SchemaSlot(BaseModel):
    """The single current-schema slot of a session, as stored in session data."""

    model_config = ConfigDict(populate_by_name=True)

    schema_: Optional[Dict[str, Any]] = Field(default=None, alias="schema", description="Canonical schema or null")
    schemaText: str = Field(default="", description="Text shown in the JSON editor")
    parseError: Optional[str] = Field(default=None, description="Why schemaText could not be loaded")
    selectedEntity: int = Field(default=0, description="Index of the selected entity")


class SchemaStateResponse(SchemaSlot):
    warnings: List[str] = Field(default_factory=list, description="Duplicate entity/attribute name warnings")


class SchemaTextRequest(BaseModel):
    text: str = Field(..., description="Full schema JSON as edited by the user")


class SelectionRequest(BaseModel):
    index: int = Field(..., description="Entity index to select; clamped into range")


class EntityCreateRequest(BaseModel):
    name: Optional[str] = Field(default=None, description="Base name, made unique; defaults to 'Entity'")


class EntityUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, description="New entity name; blank resets to 'Entity'")


class AttributeUpdateRequest(BaseModel):
    """Only the provided fields are applied, in the order name, type, multi-value, key."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, description="New attribute name; blank resets to 'field'")
    type: Optional[str] = Field(default=None, description="String, Int, Bool or Datetime (synonyms accepted)")
    multi_value: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("MultiValue", "multiValue", "multi_value")
    )
    is_key: Optional[bool] = Field(default=None, validation_alias=AliasChoices("IsKey", "isKey", "is_key"))
