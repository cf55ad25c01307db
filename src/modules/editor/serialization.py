# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ...common.schema import ConnectorSchema
from ..merge.validation import parse_schema_document

SCHEMA_FILENAME = "schema.json"


@dataclass(frozen=True)
class LoadResult:
    """Parsed schema text: `schema` is None for blank text; `error` is set when the text was rejected."""

    schema: Optional[ConnectorSchema] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def dump_schema(schema: Union[ConnectorSchema, Dict[str, Any], None]) -> str:
    """
    Canonical, pretty-printed JSON of a schema.
    `MultiValue` and `IsKey` are always written, internal-only fields never.
    """
    if schema is None:
        return ""
    if not isinstance(schema, ConnectorSchema):
        schema = ConnectorSchema.model_validate(schema)
    return json.dumps(schema.to_document(), indent=2, ensure_ascii=False)


def load_schema_text(text: str) -> LoadResult:
    """
    Parse user-edited schema text.
    Attribute key flags may be spelled `IsKey` or `isKey`; `IsKey` takes precedence.
    """
    if not text or not text.strip():
        return LoadResult()
    try:
        raw = json.loads(text)
    except ValueError as e:
        return LoadResult(error=f"Invalid JSON: {e}")

    if not parse_schema_document(raw).ok:
        return LoadResult(error="Missing entities[]")
    try:
        return LoadResult(schema=ConnectorSchema.model_validate(raw))
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first["loc"])
        return LoadResult(error=f"Invalid schema at {location}: {first['msg']}")
