"""Unit tests for canonical schema JSON."""

# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import json

import pytest

from src.common.schema import ConnectorSchema
from src.modules.editor.serialization import dump_schema, load_schema_text


def _first_attribute(text):
    result = load_schema_text(text)
    assert result.ok
    return result.schema.entities[0].attributes[0]


def _doc(attribute):
    return json.dumps({"name": "A", "version": "1", "entities": [{"name": "User", "attributes": [attribute]}]})


@pytest.mark.parametrize(
    "attribute, expected",
    [
        ({"name": "id", "IsKey": True}, True),
        ({"name": "id", "isKey": True}, True),
        ({"name": "id", "IsKey": False, "isKey": True}, False),
        ({"name": "id", "IsKey": True, "isKey": False}, True),
        ({"name": "id"}, False),
    ],
)
def test_key_flag_spellings(attribute, expected):
    assert _first_attribute(_doc(attribute)).is_key is expected


def test_dump_writes_canonical_keys_and_drops_internal_fields():
    text = _doc({"name": "id", "type": "string", "isKey": True, "__uiState": {"open": True}, "description": "kept"})
    schema = load_schema_text(text).schema

    dumped = dump_schema(schema)
    attribute = json.loads(dumped)["entities"][0]["attributes"][0]

    assert attribute == {"name": "id", "type": "String", "MultiValue": False, "IsKey": True, "description": "kept"}
    assert dumped.startswith('{\n  "name": "A"')


def test_dump_drops_internal_fields_on_every_level():
    schema = ConnectorSchema.model_validate(
        {"__draft": 1, "entities": [{"name": "User", "__collapsed": True, "attributes": []}]}
    )

    document = json.loads(dump_schema(schema))

    assert "__draft" not in document
    assert "__collapsed" not in document["entities"][0]


def test_dump_keeps_non_ascii():
    schema = ConnectorSchema(name="Účet", entities=[])

    assert '"Účet"' in dump_schema(schema)
    assert dump_schema(None) == ""


def test_blank_text_is_empty_slot():
    result = load_schema_text("  \n")

    assert result.ok
    assert result.schema is None


def test_invalid_json_is_reported():
    result = load_schema_text("{")

    assert not result.ok
    assert result.error.startswith("Invalid JSON")


def test_missing_entities_is_reported():
    result = load_schema_text('{"name": "A"}')

    assert result.error == "Missing entities[]"


def test_entity_without_name_is_reported():
    result = load_schema_text('{"entities": [{"attributes": []}]}')

    assert not result.ok
    assert "entities.0.name" in result.error


def test_dump_then_load_preserves_order():
    text = _doc({"name": "z"})
    schema = load_schema_text(text).schema
    schema.entities[0].attributes.append(schema.entities[0].attributes[0].model_copy(update={"name": "a"}))

    again = load_schema_text(dump_schema(schema)).schema

    assert [a.name for a in again.entities[0].attributes] == ["z", "a"]


@pytest.mark.parametrize(
    "attribute, expected",
    [
        ({"name": "emails", "MultiValue": True}, True),
        ({"name": "emails", "multiValue": True}, True),
        ({"name": "emails", "multi_value": True}, True),
        ({"name": "emails", "MultiValue": False, "multiValue": True}, False),
        ({"name": "emails"}, False),
    ],
)
def test_multi_value_spellings_collapse_to_canonical_key(attribute, expected):
    result = load_schema_text(_doc(attribute))

    exported = json.loads(dump_schema(result.schema))["entities"][0]["attributes"][0]
    assert exported["MultiValue"] is expected
    assert "multiValue" not in exported
    assert "multi_value" not in exported
