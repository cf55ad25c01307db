# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
WSDL/XSD to canonical schema documents.

Every named complexType (or element with an anonymous complexType) becomes an entity,
its element and attribute declarations become attributes.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from lxml import etree  # type: ignore

from ...common.enums import AttributeType
from ...common.schema import normalize_attribute_type
from ...config import config

logger = logging.getLogger(__name__)

XSD_NS = "http://www.w3.org/2001/XMLSchema"
_COMPLEX_TYPE = f"{{{XSD_NS}}}complexType"
_ELEMENT = f"{{{XSD_NS}}}element"
_ATTRIBUTE = f"{{{XSD_NS}}}attribute"

_XSD_TYPES: Dict[str, AttributeType] = {
    "string": AttributeType.string,
    "normalizedString": AttributeType.string,
    "token": AttributeType.string,
    "anyURI": AttributeType.string,
    "base64Binary": AttributeType.string,
    "hexBinary": AttributeType.string,
    "int": AttributeType.integer,
    "integer": AttributeType.integer,
    "long": AttributeType.integer,
    "short": AttributeType.integer,
    "byte": AttributeType.integer,
    "unsignedInt": AttributeType.integer,
    "unsignedLong": AttributeType.integer,
    "unsignedShort": AttributeType.integer,
    "positiveInteger": AttributeType.integer,
    "nonNegativeInteger": AttributeType.integer,
    "decimal": AttributeType.integer,
    "double": AttributeType.integer,
    "float": AttributeType.integer,
    "boolean": AttributeType.boolean,
    "dateTime": AttributeType.datetime,
    "date": AttributeType.datetime,
    "time": AttributeType.datetime,
}


def _local(qualified: Optional[str]) -> Optional[str]:
    """Drop a namespace prefix: 'xsd:string' -> 'string'."""
    if not qualified:
        return None
    return qualified.rsplit(":", 1)[-1]


def _map_type(xsd_type: Optional[str]) -> AttributeType:
    local = _local(xsd_type)
    if local is None:
        return AttributeType.string
    return _XSD_TYPES.get(local) or normalize_attribute_type(local)


def _owning_complex_type(node: Any) -> Optional[Any]:
    parent = node.getparent()
    while parent is not None and parent.tag != _COMPLEX_TYPE:
        parent = parent.getparent()
    return parent


def _complex_type_name(ct: Any) -> Optional[str]:
    name = ct.get("name")
    if name:
        return name
    parent = ct.getparent()
    if parent is not None and parent.tag == _ELEMENT:
        return parent.get("name")
    return None


def _attributes(ct: Any) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    seen: set[str] = set()
    for node in ct.iter(_ELEMENT, _ATTRIBUTE):
        if _owning_complex_type(node) is not ct:
            continue
        name = node.get("name") or _local(node.get("ref"))
        if not name or name in seen:
            continue
        seen.add(name)
        max_occurs = node.get("maxOccurs", "1")
        out.append(
            {
                "name": name,
                "type": _map_type(node.get("type")).value,
                "MultiValue": max_occurs not in ("0", "1"),
                "IsKey": False,
            }
        )

    for attr in out:
        if attr["name"].lower() == "id":
            attr["IsKey"] = True
            break
    return out


def _entities(root: Any) -> List[Dict[str, Any]]:
    entities: List[Dict[str, Any]] = []
    for ct in root.iter(_COMPLEX_TYPE):
        name = _complex_type_name(ct)
        if not name:
            continue
        entities.append({"name": name, "attributes": _attributes(ct)})
    return entities


def build_schema_from_soap(
    texts: Sequence[str],
    *,
    schema_name: Optional[str] = None,
    version: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Convert WSDL/XSD texts into canonical schema documents, one per parsable text with at least one entity.
    Unparsable texts are skipped and logged.
    """
    name = schema_name or config.upload.default_schema_name
    ver = version or config.upload.default_version
    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)

    documents: List[Dict[str, Any]] = []
    for index, text in enumerate(texts):
        try:
            root = etree.fromstring(text.encode("utf-8"), parser=parser)
        except etree.XMLSyntaxError as e:
            logger.warning("[SOAP] Skipping document %s, not well-formed XML: %s", index, e)
            continue
        entities = _entities(root)
        if entities:
            documents.append({"name": name, "version": ver, "entities": entities})

    logger.info("[SOAP] Built %d document(s) from %d text(s)", len(documents), len(texts))
    return documents
