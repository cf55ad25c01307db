# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
Shape checks for raw schema documents.

Every check returns a ParseResult carrying either the parsed value or the reason it was rejected,
so callers decide what to do with rejects instead of probing properties at runtime.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import ValidationError

from ...common.schema import Attribute, ConnectorSchema, Entity

T = TypeVar("T")


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    value: Optional[T] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str) -> "ParseResult[T]":
        return cls(reason=reason)


@dataclass(frozen=True)
class SchemaDocument:
    """A document that passed the schema shape test; entities are still raw."""

    name: Optional[str]
    version: Optional[str]
    entities: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class EntityDocument:
    """An entity that passed the entity shape test; attributes are still raw."""

    name: str
    attributes: List[Any] = field(default_factory=list)


def _non_empty_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def parse_schema_document(raw: Any) -> ParseResult[SchemaDocument]:
    """A schema document is a mapping whose `entities` is a list."""
    if isinstance(raw, ConnectorSchema):
        raw = raw.to_document()
    if not isinstance(raw, dict):
        return ParseResult.failure(f"expected an object, got {type(raw).__name__}")
    entities = raw.get("entities")
    if not isinstance(entities, list):
        return ParseResult.failure("'entities' is missing or not a list")
    return ParseResult.success(
        SchemaDocument(
            name=_non_empty_str(raw.get("name")),
            version=_non_empty_str(raw.get("version")),
            entities=entities,
        )
    )


def parse_entity(raw: Any) -> ParseResult[EntityDocument]:
    """An entity has a string `name` and a list of `attributes`."""
    if isinstance(raw, Entity):
        raw = raw.model_dump(by_alias=True, mode="json")
    if not isinstance(raw, dict):
        return ParseResult.failure(f"expected an object, got {type(raw).__name__}")
    name = raw.get("name")
    if not isinstance(name, str):
        return ParseResult.failure("entity 'name' is not a string")
    attributes = raw.get("attributes")
    if not isinstance(attributes, list):
        return ParseResult.failure(f"entity '{name}' has no attribute list")
    return ParseResult.success(EntityDocument(name=name, attributes=attributes))


def parse_attribute(raw: Any) -> ParseResult[Attribute]:
    """
    An attribute is a mapping with a non-empty string `name`.
    The returned Attribute is a deep copy and never shares state with `raw`.
    """
    if isinstance(raw, Attribute):
        return ParseResult.success(raw.model_copy(deep=True))
    if not isinstance(raw, dict):
        return ParseResult.failure(f"expected an object, got {type(raw).__name__}")
    if not _non_empty_str(raw.get("name")):
        return ParseResult.failure("attribute 'name' is missing or empty")
    try:
        return ParseResult.success(Attribute.model_validate(copy.deepcopy(raw)))
    except ValidationError as exc:
        return ParseResult.failure(f"attribute '{raw['name']}' is invalid: {exc.error_count()} error(s)")
