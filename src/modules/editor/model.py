# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
Edit operations on the current schema.

Operations never touch their input: each returns an EditResult holding a new EditorState
with its own deep copy of the schema, plus whether anything changed.
"""

from dataclasses import dataclass, replace
from typing import Any, Collection, List, Optional

from ...common.enums import AttributeType
from ...common.schema import Attribute, ConnectorSchema, Entity, normalize_attribute_type

DEFAULT_ENTITY_NAME = "Entity"
DEFAULT_ATTRIBUTE_NAME = "field"
NEW_ATTRIBUTE_NAME = "new_field"
KEY_ATTRIBUTE_NAME = "id"


class SchemaEditError(LookupError):
    """An edit addressed an entity or attribute that does not exist."""


@dataclass(frozen=True)
class EditorState:
    schema: Optional[ConnectorSchema] = None
    selected: int = 0

    @property
    def entity_count(self) -> int:
        return len(self.schema.entities) if self.schema else 0


@dataclass(frozen=True)
class EditResult:
    state: EditorState
    changed: bool = True


def unique_name(base: str, taken: Collection[str]) -> str:
    """`base` if free, else `base 2`, `base 3`, ..."""
    if base not in taken:
        return base
    n = 2
    while f"{base} {n}" in taken:
        n += 1
    return f"{base} {n}"


def clamp_selection(index: int, count: int) -> int:
    if count <= 0:
        return 0
    return max(0, min(index, count - 1))


def _copy(state: EditorState) -> ConnectorSchema:
    if state.schema is None:
        raise SchemaEditError("There is no schema to edit")
    return state.schema.model_copy(deep=True)


def _entity_at(schema: ConnectorSchema, index: int) -> Entity:
    if not 0 <= index < len(schema.entities):
        raise SchemaEditError(f"Entity {index} does not exist")
    return schema.entities[index]


def _attribute_at(entity: Entity, index: int) -> Attribute:
    if not 0 <= index < len(entity.attributes):
        raise SchemaEditError(f"Attribute {index} does not exist on entity '{entity.name}'")
    return entity.attributes[index]


def get_attribute(state: EditorState, entity_index: int, attribute_index: int) -> Attribute:
    """Attribute at the given address; raises SchemaEditError when there is none."""
    if state.schema is None:
        raise SchemaEditError("There is no schema to edit")
    return _attribute_at(_entity_at(state.schema, entity_index), attribute_index)


def _or_default(name: Optional[str], default: str) -> str:
    return name if name and name.strip() else default


def add_entity(state: EditorState, name: Optional[str] = None) -> EditResult:
    """
    Append an entity seeded with a String key attribute `id` and select it.
    Works on an empty slot by starting a new schema with the default name and version.
    """
    schema = state.schema.model_copy(deep=True) if state.schema else ConnectorSchema()
    entity_name = unique_name(_or_default(name, DEFAULT_ENTITY_NAME), {e.name for e in schema.entities})
    schema.entities.append(
        Entity(
            name=entity_name,
            attributes=[Attribute(name=KEY_ATTRIBUTE_NAME, type=AttributeType.string, is_key=True)],
        )
    )
    return EditResult(EditorState(schema=schema, selected=len(schema.entities) - 1))


def remove_entity(state: EditorState, index: int) -> EditResult:
    """
    Remove entity `index`; an index out of range leaves the state unchanged.
    The selection stays on the same entity when an earlier one is removed.
    """
    if state.schema is None or not 0 <= index < len(state.schema.entities):
        return EditResult(state, changed=False)
    schema = _copy(state)
    del schema.entities[index]
    selected = state.selected - 1 if index < state.selected else state.selected
    return EditResult(EditorState(schema=schema, selected=clamp_selection(selected, len(schema.entities))))


def rename_entity(state: EditorState, index: int, name: Optional[str]) -> EditResult:
    schema = _copy(state)
    _entity_at(schema, index).name = _or_default(name, DEFAULT_ENTITY_NAME)
    return EditResult(replace(state, schema=schema))


def select_entity(state: EditorState, index: int) -> EditResult:
    selected = clamp_selection(index, state.entity_count)
    if selected == state.selected:
        return EditResult(state, changed=False)
    schema = state.schema.model_copy(deep=True) if state.schema else None
    return EditResult(EditorState(schema=schema, selected=selected))


def add_attribute(state: EditorState, entity_index: int) -> EditResult:
    schema = _copy(state)
    entity = _entity_at(schema, entity_index)
    name = unique_name(NEW_ATTRIBUTE_NAME, {a.name for a in entity.attributes})
    entity.attributes.append(Attribute(name=name))
    return EditResult(replace(state, schema=schema))


def remove_attribute(state: EditorState, entity_index: int, attribute_index: int) -> EditResult:
    schema = _copy(state)
    entity = _entity_at(schema, entity_index)
    _attribute_at(entity, attribute_index)
    del entity.attributes[attribute_index]
    return EditResult(replace(state, schema=schema))


def rename_attribute(state: EditorState, entity_index: int, attribute_index: int, name: Optional[str]) -> EditResult:
    schema = _copy(state)
    attr = _attribute_at(_entity_at(schema, entity_index), attribute_index)
    attr.name = _or_default(name, DEFAULT_ATTRIBUTE_NAME)
    return EditResult(replace(state, schema=schema))


def set_attribute_type(state: EditorState, entity_index: int, attribute_index: int, type_: Any) -> EditResult:
    schema = _copy(state)
    attr = _attribute_at(_entity_at(schema, entity_index), attribute_index)
    attr.type = normalize_attribute_type(type_)
    return EditResult(replace(state, schema=schema))


def set_multi_value(state: EditorState, entity_index: int, attribute_index: int, multi_value: bool) -> EditResult:
    schema = _copy(state)
    attr = _attribute_at(_entity_at(schema, entity_index), attribute_index)
    attr.multi_value = bool(multi_value)
    return EditResult(replace(state, schema=schema))


def toggle_key(state: EditorState, entity_index: int, attribute_index: int, make_key: bool) -> EditResult:
    """
    Setting the key flag clears it on every other attribute of the entity, so an entity has at most one key.
    Clearing only touches the target.
    """
    schema = _copy(state)
    entity = _entity_at(schema, entity_index)
    target = _attribute_at(entity, attribute_index)
    if make_key:
        for idx, attr in enumerate(entity.attributes):
            attr.is_key = idx == attribute_index
    else:
        target.is_key = False
    return EditResult(replace(state, schema=schema))


def duplicate_names(schema: Optional[ConnectorSchema]) -> List[str]:
    """Human-readable warnings for entity names, and attribute names within an entity, used more than once."""
    if schema is None:
        return []
    warnings: List[str] = []

    seen_entities: set[str] = set()
    for entity in schema.entities:
        if entity.name in seen_entities:
            warnings.append(f"Duplicate entity name '{entity.name}'")
        seen_entities.add(entity.name)

        seen_attributes: set[str] = set()
        for attr in entity.attributes:
            if attr.name in seen_attributes:
                warnings.append(f"Duplicate attribute name '{attr.name}' in entity '{entity.name}'")
            seen_attributes.add(attr.name)
    return warnings
