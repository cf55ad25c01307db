# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import logging
from typing import Any, Dict, List

from ...common.schema import Attribute, ConnectorSchema, Entity
from ...config import config
from .validation import SchemaDocument, parse_attribute, parse_entity, parse_schema_document

logger = logging.getLogger(__name__)


def _as_document_list(documents: Any) -> List[Any]:
    if isinstance(documents, (list, tuple)):
        return list(documents)
    return [documents]


def _absorb_attributes(target: Entity, raw_attributes: List[Any]) -> None:
    """
    Append attributes whose name is not on `target` yet.
    The first definition of a name wins; a later key flag is cleared when the entity already has a key.
    """
    have = {attr.name for attr in target.attributes}
    has_key = any(attr.is_key for attr in target.attributes)

    for raw in raw_attributes:
        parsed = parse_attribute(raw)
        if not parsed.ok or parsed.value is None:
            logger.debug("[Merge] Skipping attribute of %s: %s", target.name, parsed.reason)
            continue
        attr: Attribute = parsed.value
        if attr.name in have:
            continue
        if attr.is_key and has_key:
            attr = attr.model_copy(update={"is_key": False})
        target.attributes.append(attr)
        have.add(attr.name)
        has_key = has_key or attr.is_key


def merge_schemas(documents: Any) -> ConnectorSchema:
    """
    Merge canonical per-document schemas into one de-duplicated schema.

    - Accepts a single document or a list of them; elements failing the shape test are discarded.
    - Name and version come from the first document that has them, else the configured defaults.
    - Entities combine by exact name in input order; attributes combine by name with first-wins.
    - Entity and attribute order follow first introduction.

    :param documents: Raw document(s), dicts or ConnectorSchema instances.
    :return: New ConnectorSchema that shares no state with the inputs.
    """
    valid: List[SchemaDocument] = []
    for index, raw in enumerate(_as_document_list(documents)):
        parsed = parse_schema_document(raw)
        if not parsed.ok or parsed.value is None:
            logger.debug("[Merge] Discarding document %s: %s", index, parsed.reason)
            continue
        valid.append(parsed.value)

    name = next((doc.name for doc in valid if doc.name), config.upload.default_schema_name)
    version = next((doc.version for doc in valid if doc.version), config.upload.default_version)

    by_name: Dict[str, Entity] = {}
    for doc in valid:
        for raw_entity in doc.entities:
            parsed_entity = parse_entity(raw_entity)
            if not parsed_entity.ok or parsed_entity.value is None:
                logger.debug("[Merge] Skipping entity: %s", parsed_entity.reason)
                continue
            entity_doc = parsed_entity.value
            target = by_name.get(entity_doc.name)
            if target is None:
                target = Entity(name=entity_doc.name, attributes=[])
                by_name[entity_doc.name] = target
            _absorb_attributes(target, entity_doc.attributes)

    logger.info("[Merge] Merged %d document(s) into %d entities", len(valid), len(by_name))
    return ConnectorSchema(name=name, version=version, entities=list(by_name.values()))
