# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
SCIM /Schemas and /ResourceTypes to canonical schema documents.

One document is produced per entity, so duplicates across uploaded files are reconciled by the merge engine.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ...common.schema import normalize_attribute_type
from ...config import config

logger = logging.getLogger(__name__)

ID_ATTRIBUTE = "id"
USER_NAME_ATTRIBUTE = "userName"


def _schema_label(schema: Dict[str, Any]) -> str:
    """Schema name, else the last URN segment of its id (urn:...:core:2.0:User -> User)."""
    name = schema.get("name")
    if isinstance(name, str) and name:
        return name
    schema_id = str(schema.get("id") or "Entity")
    return schema_id.rsplit(":", 1)[-1] or schema_id


def _attribute(name: str, type_: Any, multi: bool) -> Dict[str, Any]:
    return {
        "name": name,
        "type": normalize_attribute_type(type_).value,
        "MultiValue": multi,
        "IsKey": False,
    }


def _scim_attributes(scim_attributes: Sequence[Any], prefix: str = "") -> List[Dict[str, Any]]:
    """
    Flatten SCIM attribute definitions.
    Single-valued complex attributes become dotted sub-attributes (name.givenName);
    multi-valued complex attributes stay one multi-valued String attribute.
    """
    out: List[Dict[str, Any]] = []
    for a in scim_attributes:
        if not isinstance(a, dict) or not isinstance(a.get("name"), str) or not a["name"]:
            continue
        name = f"{prefix}{a['name']}"
        multi = bool(a.get("multiValued"))
        if str(a.get("type", "")).lower() == "complex":
            subs = a.get("subAttributes")
            if not multi and isinstance(subs, list) and subs:
                out.extend(_scim_attributes(subs, prefix=f"{name}."))
            else:
                out.append(_attribute(name, "String", multi))
            continue
        out.append(_attribute(name, a.get("type"), multi))
    return out


def _entity(name: str, attributes: List[Dict[str, Any]], prefer_user_name_as_key: bool) -> Dict[str, Any]:
    """Ensure `id` comes first, drop repeated names and flag exactly one key."""
    unique: Dict[str, Dict[str, Any]] = {}
    if not any(a["name"] == ID_ATTRIBUTE for a in attributes):
        unique[ID_ATTRIBUTE] = _attribute(ID_ATTRIBUTE, "String", False)
    for a in attributes:
        unique.setdefault(a["name"], a)

    key = ID_ATTRIBUTE
    if prefer_user_name_as_key and USER_NAME_ATTRIBUTE in unique:
        key = USER_NAME_ATTRIBUTE
    unique[key]["IsKey"] = True
    return {"name": name, "attributes": list(unique.values())}


def scim_to_schemas(
    resource_types: Sequence[Dict[str, Any]],
    schemas: Sequence[Dict[str, Any]],
    *,
    schema_name: Optional[str] = None,
    version: Optional[str] = None,
    prefer_user_name_as_key: Optional[bool] = None,
) -> List[Dict[str, Any]]:
    """
    Convert SCIM resource types and schema resources into canonical per-entity documents.

    :param resource_types: ResourceType resources (carry "schema" and optionally "schemaExtensions").
    :param schemas: Schema resources (carry "attributes").
    :param schema_name: Name of every produced document, defaults to the configured schema name.
    :param version: Version of every produced document, defaults to the configured version.
    :param prefer_user_name_as_key: Use userName rather than id as key attribute when present.
    :return: One canonical document per entity, resource types first.
    """
    name = schema_name or config.upload.default_schema_name
    ver = version or config.upload.default_version
    prefer_user_name = (
        config.upload.prefer_user_name_as_key if prefer_user_name_as_key is None else prefer_user_name_as_key
    )

    by_id: Dict[str, Dict[str, Any]] = {s["id"]: s for s in schemas if isinstance(s.get("id"), str)}
    used: set[str] = set()
    entities: List[Dict[str, Any]] = []

    for rt in resource_types:
        schema_ids = [rt.get("schema")]
        schema_ids += [ext.get("schema") for ext in rt.get("schemaExtensions") or [] if isinstance(ext, dict)]

        attributes: List[Dict[str, Any]] = []
        for sid in schema_ids:
            schema = by_id.get(sid) if isinstance(sid, str) else None
            if schema is None:
                logger.debug("[SCIM] Resource type %s references unknown schema %s", rt.get("name"), sid)
                continue
            used.add(sid)
            attributes.extend(_scim_attributes(schema.get("attributes") or []))

        core = by_id.get(rt.get("schema")) if isinstance(rt.get("schema"), str) else None
        entity_name = rt.get("name") or rt.get("id") or (_schema_label(core) if core else "Entity")
        entities.append(_entity(str(entity_name), attributes, prefer_user_name))

    for schema in schemas:
        if schema.get("id") in used:
            continue
        entities.append(
            _entity(_schema_label(schema), _scim_attributes(schema.get("attributes") or []), prefer_user_name)
        )

    logger.info("[SCIM] Converted %d resource type(s) and %d schema(s)", len(resource_types), len(schemas))
    return [{"name": name, "version": ver, "entities": [entity]} for entity in entities]
