# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ...common.enums import UploadKind
from ...common.files import UploadedFile
from ...config import config
from ..merge.validation import ParseResult
from .soap_detector import detect_soap

logger = logging.getLogger(__name__)


@dataclass
class ScimDocuments:
    """SCIM schema resources and resource-type resources collected from an upload batch."""

    schemas: List[Dict[str, Any]] = field(default_factory=list)
    resource_types: List[Dict[str, Any]] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.schemas or self.resource_types)

    def extend(self, other: "ScimDocuments") -> None:
        self.schemas.extend(other.schemas)
        self.resource_types.extend(other.resource_types)


def _is_schema_resource(r: Any) -> bool:
    return isinstance(r, dict) and isinstance(r.get("attributes"), list)


def _is_resource_type(r: Any) -> bool:
    return isinstance(r, dict) and bool(r.get("schema") or r.get("schemaExtensions"))


def parse_scim_document(raw: Any) -> ParseResult[ScimDocuments]:
    """
    Recognise the SCIM shapes we accept:
      - /Schemas or /ResourceTypes envelope: {"Resources": [...]} with at least one attribute-bearing member
      - a single schema resource: string "id" plus "attributes"
      - a /ResourceTypes array or a single resource type: carries "schema" or "schemaExtensions"
    """
    if isinstance(raw, dict):
        resources = raw.get("Resources")
        if isinstance(resources, list) and any(isinstance(r, dict) and r.get("attributes") for r in resources):
            return ParseResult.success(
                ScimDocuments(
                    schemas=[r for r in resources if _is_schema_resource(r)],
                    resource_types=[r for r in resources if _is_resource_type(r)],
                )
            )
        if raw.get("attributes") and isinstance(raw.get("id"), str):
            return ParseResult.success(ScimDocuments(schemas=[raw]))
        if _is_resource_type(raw):
            return ParseResult.success(ScimDocuments(resource_types=[raw]))
    elif isinstance(raw, list) and any(_is_resource_type(r) for r in raw):
        return ParseResult.success(ScimDocuments(resource_types=[r for r in raw if _is_resource_type(r)]))

    return ParseResult.failure("not a SCIM schema or resource type document")


def read_scim_documents(files: Sequence[UploadedFile], limit: Optional[int] = None) -> ScimDocuments:
    """
    Collect SCIM documents from the `.json` files of a batch.
    Files that are not JSON or not SCIM-shaped are skipped; they never abort the batch.
    """
    read_limit = limit if limit is not None else config.upload.scim_read_limit
    collected = ScimDocuments()

    for f in files:
        if not f.has_suffix(".json"):
            continue
        try:
            raw = json.loads(f.text(read_limit))
        except ValueError as e:
            logger.debug("[Classifier] Ignoring non-JSON file %s: %s", f.filename, e)
            continue

        parsed = parse_scim_document(raw)
        if parsed.ok and parsed.value is not None:
            collected.extend(parsed.value)
        else:
            logger.debug("[Classifier] %s is not SCIM: %s", f.filename, parsed.reason)

    return collected


def classify_upload(files: Sequence[UploadedFile], is_soap: Optional[bool] = None) -> UploadKind:
    """
    Decide which processing path applies to an upload batch.

    :param files: The uploaded files.
    :param is_soap: SOAP verdict of an external detector; when None the built-in content sniffing is used.
    :return: scim when any JSON file is SCIM-shaped, soap when the SOAP verdict holds, generic otherwise.
    """
    if read_scim_documents(files):
        kind = UploadKind.scim
    else:
        soap_verdict = detect_soap(files) if is_soap is None else is_soap
        kind = UploadKind.soap if soap_verdict else UploadKind.generic

    logger.info("[Classifier] Classified %d file(s) as %s", len(files), kind.value)
    return kind
