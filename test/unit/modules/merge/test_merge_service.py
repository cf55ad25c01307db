"""Unit tests for merging per-document schemas."""

# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import copy

from src.common.schema import ConnectorSchema
from src.modules.merge.service import merge_schemas
from src.modules.merge.validation import parse_attribute, parse_entity, parse_schema_document


def _attr(name, type_="String", multi=False, key=False):
    return {"name": name, "type": type_, "MultiValue": multi, "IsKey": key}


def _names(schema: ConnectorSchema):
    return [(e.name, [a.name for a in e.attributes]) for e in schema.entities]


def test_merge_empty_input_returns_defaults():
    merged = merge_schemas([])

    assert merged.name == "Connector"
    assert merged.version == "1.0.0"
    assert merged.entities == []


def test_merge_accepts_single_document():
    doc = {"name": "Acme", "version": "2.0", "entities": [{"name": "User", "attributes": [_attr("id", key=True)]}]}

    merged = merge_schemas(doc)

    assert merged.name == "Acme"
    assert merged.version == "2.0"
    assert _names(merged) == [("User", ["id"])]


def test_merge_name_and_version_from_first_document_that_has_them():
    docs = [
        {"entities": []},
        {"name": "", "version": "3.1", "entities": []},
        {"name": "Second", "version": "9.9", "entities": []},
    ]

    merged = merge_schemas(docs)

    assert merged.name == "Second"
    assert merged.version == "3.1"


def test_merge_deduplicates_entities_and_attributes_in_first_introduction_order():
    docs = [
        {"entities": [{"name": "User", "attributes": [_attr("id", key=True), _attr("userName")]}]},
        {"entities": [{"name": "Group", "attributes": [_attr("id", key=True)]}]},
        {"entities": [{"name": "User", "attributes": [_attr("userName"), _attr("active", "Bool")]}]},
    ]

    merged = merge_schemas(docs)

    assert _names(merged) == [("User", ["id", "userName", "active"]), ("Group", ["id"])]


def test_merge_first_definition_wins_on_conflict():
    docs = [
        {"entities": [{"name": "User", "attributes": [_attr("age", "Int")]}]},
        {"entities": [{"name": "User", "attributes": [_attr("age", "String", multi=True)]}]},
    ]

    merged = merge_schemas(docs)
    age = merged.entities[0].attributes[0]

    assert age.type.value == "Int"
    assert age.multi_value is False


def test_merge_keeps_only_first_key_per_entity():
    docs = [
        {"entities": [{"name": "User", "attributes": [_attr("id", key=True)]}]},
        {"entities": [{"name": "User", "attributes": [_attr("userName", key=True)]}]},
    ]

    merged = merge_schemas(docs)

    assert [a.is_key for a in merged.entities[0].attributes] == [True, False]


def test_merge_is_idempotent():
    doc = {
        "name": "Acme",
        "version": "1.2",
        "entities": [
            {"name": "User", "attributes": [_attr("id", key=True), _attr("emails", multi=True)]},
            {"name": "Group", "attributes": [_attr("id", key=True)]},
        ],
    }

    once = merge_schemas(doc)
    twice = merge_schemas([once, once])

    assert twice.to_document() == once.to_document()


def test_merge_discards_invalid_elements():
    docs = [
        "not a document",
        {"entities": "nope"},
        {
            "entities": [
                {"name": 42, "attributes": []},
                {"name": "User"},
                {"name": "Group", "attributes": [_attr(""), {"type": "String"}, "x", _attr("id", key=True)]},
            ]
        },
    ]

    merged = merge_schemas(docs)

    assert _names(merged) == [("Group", ["id"])]


def test_merge_does_not_alias_inputs():
    doc = {"entities": [{"name": "User", "attributes": [_attr("id", key=True)]}]}
    original = copy.deepcopy(doc)

    merged = merge_schemas(doc)
    merged.entities[0].attributes[0].name = "changed"

    assert doc == original


def test_merge_normalises_key_spelling_and_types():
    doc = {"entities": [{"name": "User", "attributes": [{"name": "id", "type": "integer", "isKey": True}]}]}

    merged = merge_schemas(doc)
    attr = merged.entities[0].attributes[0]

    assert attr.is_key is True
    assert attr.type.value == "Int"
    assert "isKey" not in merged.to_document()["entities"][0]["attributes"][0]


def test_parse_functions_report_reasons():
    assert not parse_schema_document([]).ok
    assert parse_schema_document({"entities": []}).ok
    assert "attribute list" in parse_entity({"name": "User"}).reason
    assert parse_attribute({"name": "id"}).ok
    assert not parse_attribute({"name": ""}).ok
