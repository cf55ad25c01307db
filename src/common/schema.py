# Copyright (c) 2025 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import uuid
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..config import config
from .enums import AttributeType, ItemStatus, JobStatus, UploadKind
from .files import UploadedFile

# --- Connector Schema Models ---

INTERNAL_FIELD_PREFIX = "__"

# Synonyms seen in SCIM, XSD and AI output, keyed by lower-case spelling
_TYPE_SYNONYMS: Dict[str, AttributeType] = {
    "string": AttributeType.string,
    "str": AttributeType.string,
    "text": AttributeType.string,
    "reference": AttributeType.string,
    "binary": AttributeType.string,
    "int": AttributeType.integer,
    "integer": AttributeType.integer,
    "long": AttributeType.integer,
    "short": AttributeType.integer,
    "number": AttributeType.integer,
    "decimal": AttributeType.integer,
    "bool": AttributeType.boolean,
    "boolean": AttributeType.boolean,
    "datetime": AttributeType.datetime,
    "date": AttributeType.datetime,
    "timestamp": AttributeType.datetime,
}


def normalize_attribute_type(value: Any) -> AttributeType:
    """
    Map a loosely spelled type onto one of the canonical attribute types.
    Unknown spellings fall back to String; types are normalised, never rejected.
    """
    if isinstance(value, AttributeType):
        return value
    key = str(value or "").strip().lower().replace("_", "").replace(" ", "")
    return _TYPE_SYNONYMS.get(key, AttributeType.string)


# Accepted non-canonical spellings of the boolean attribute flags
_FLAG_SPELLINGS: Dict[str, Tuple[str, ...]] = {
    "IsKey": ("isKey", "iskey", "is_key"),
    "MultiValue": ("multiValue", "multivalue", "multi_value"),
}


def _drop_internal_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if not str(k).startswith(INTERNAL_FIELD_PREFIX)}


class Attribute(BaseModel):
    """
    Single attribute of a connector entity.
    Canonical JSON spelling is ``name``, ``type``, ``MultiValue``, ``IsKey``.
    Unknown extra keys are kept, internal ``__*`` keys are dropped.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., description="Attribute name, unique within its entity")
    type: AttributeType = Field(default=AttributeType.string, description="Canonical attribute type")
    multi_value: bool = Field(default=False, alias="MultiValue", description="Attribute holds a list of values")
    is_key: bool = Field(default=False, alias="IsKey", description="Attribute identifies the entity")

    @model_validator(mode="before")
    @classmethod
    def normalize_flags(cls, data: Any) -> Any:
        """
        Resolve IsKey and MultiValue from their accepted spellings (canonical first, then camelCase,
        then snake_case) and keep only the canonical key.
        """
        if not isinstance(data, dict):
            return data
        data = _drop_internal_fields(data)
        for canonical, spellings in _FLAG_SPELLINGS.items():
            flag = next((bool(data[s]) for s in (canonical, *spellings) if s in data), False)
            for spelling in spellings:
                data.pop(spelling, None)
            data[canonical] = flag
        return data

    @field_validator("type", mode="before")
    @classmethod
    def validate_type(cls, v: Any) -> AttributeType:
        return normalize_attribute_type(v)


class Entity(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., description="Entity name, unique within its schema")
    attributes: List[Attribute] = Field(default_factory=list, description="Attributes in insertion order")

    @model_validator(mode="before")
    @classmethod
    def drop_internal_fields(cls, data: Any) -> Any:
        return _drop_internal_fields(data) if isinstance(data, dict) else data


class ConnectorSchema(BaseModel):
    """
    Canonical connector schema: a named, versioned, ordered list of entities.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(default_factory=lambda: config.upload.default_schema_name)
    version: str = Field(default_factory=lambda: config.upload.default_version)
    entities: List[Entity] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def drop_internal_fields(cls, data: Any) -> Any:
        return _drop_internal_fields(data) if isinstance(data, dict) else data

    def to_document(self) -> Dict[str, Any]:
        """Return the canonical JSON-compatible dict."""
        return self.model_dump(by_alias=True, mode="json")


# --- End Connector Schema Models ---


# --- Upload Item Models ---

# Forward order of non-error statuses; error is reachable from any non-terminal status
_STATUS_RANK: Dict[ItemStatus, int] = {
    ItemStatus.pending: 0,
    ItemStatus.uploading: 1,
    ItemStatus.processing: 2,
    ItemStatus.done: 3,
}
TERMINAL_STATUSES = frozenset({ItemStatus.done, ItemStatus.error})


class UploadItem(BaseModel):
    """
    One uploaded file and its processing status. Immutable: status changes produce a new item.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Identifier of the item within its upload batch")
    filename: str = Field(..., description="Original file name")
    content_type: str = Field(default="application/octet-stream", alias="contentType")
    size: int = Field(default=0, description="File size in bytes")
    status: ItemStatus = Field(default=ItemStatus.pending)
    message: Optional[str] = Field(default=None, description="Human-friendly note about the last transition")

    @classmethod
    def for_file(cls, file: UploadedFile) -> "UploadItem":
        """New pending item describing `file`."""
        return cls(
            id=uuid.uuid4().hex,
            filename=file.filename,
            content_type=file.file_type,
            size=file.size,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def advance(self, status: ItemStatus, message: Optional[str] = None) -> "UploadItem":
        """Return a copy in ``status``; raises ValueError when the transition would go backwards."""
        if self.status in TERMINAL_STATUSES:
            raise ValueError(f"Item {self.id} is already {self.status.value}")
        if status != ItemStatus.error and _STATUS_RANK[status] < _STATUS_RANK[self.status]:
            raise ValueError(f"Item {self.id} cannot move from {self.status.value} to {status.value}")
        return self.model_copy(update={"status": status, "message": message})


# --- End Upload Item Models ---


# --- Job Models ---


class JobCreateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    jobId: UUID = Field(..., description="Unique identifier of the created job.")


class BaseProgress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    stage: Optional[str] = Field(default=None, description="High-level stage, e.g., running, finished")
    message: Optional[str] = Field(default=None, description="Human-friendly note about current work")


class UploadProgress(BaseProgress):
    kind: Optional[UploadKind] = Field(default=None, description="Processing path chosen for the batch")
    items: Optional[List[UploadItem]] = Field(default=None, description="Per-file status snapshot")


class BaseJobStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    jobId: UUID = Field(..., description="Job identifier")
    status: JobStatus = Field(..., description="Current status of the job")
    createdAt: Optional[str] = Field(default=None, description="Job creation time (ISO 8601)")
    startedAt: Optional[str] = Field(default=None, description="Job start time (ISO 8601)")
    updatedAt: Optional[str] = Field(default=None, description="Last update time (ISO 8601)")
    result: Optional[Any] = Field(
        default=None,
        description="Result payload when status is 'finished'",
    )
    errors: Optional[list[str]] = Field(
        default=None,
        description="Structured list of error lines/messages. Each list item is a single error line.",
    )


class JobStatusUploadResponse(BaseJobStatusResponse):
    progress: Optional[UploadProgress] = Field(default=None, description="Stage, message and per-file status")


# --- End Job Models ---
