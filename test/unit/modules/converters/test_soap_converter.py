"""Unit tests for the WSDL/XSD converter."""

# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

from src.modules.converters.soap import build_schema_from_soap
from src.modules.merge.service import merge_schemas


def _attrs(entity):
    return [(a["name"], a["type"], a["MultiValue"], a["IsKey"]) for a in entity["attributes"]]


def test_complex_types_become_entities(wsdl_text):
    docs = build_schema_from_soap([wsdl_text])

    assert len(docs) == 1
    user, group = docs[0]["entities"]
    assert user["name"] == "User"
    assert _attrs(user) == [
        ("ID", "String", False, True),
        ("login", "String", False, False),
        ("age", "Int", False, False),
        ("enabled", "Bool", False, False),
        ("created", "Datetime", False, False),
        ("emails", "String", True, False),
        ("version", "Int", False, False),
    ]
    assert group["name"] == "Group"
    assert _attrs(group) == [
        ("id", "String", False, True),
        ("members", "String", True, False),
    ]


def test_nested_anonymous_type_attributes_stay_on_inner_entity():
    xsd = """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
      <xs:complexType name="Account">
        <xs:sequence>
          <xs:element name="uid" type="xs:string"/>
          <xs:element name="address">
            <xs:complexType>
              <xs:sequence><xs:element name="street" type="xs:string"/></xs:sequence>
            </xs:complexType>
          </xs:element>
        </xs:sequence>
      </xs:complexType>
    </xs:schema>"""

    entities = build_schema_from_soap([xsd])[0]["entities"]

    assert [(e["name"], [a["name"] for a in e["attributes"]]) for e in entities] == [
        ("Account", ["uid", "address"]),
        ("address", ["street"]),
    ]


def test_malformed_and_empty_documents_are_skipped(wsdl_text):
    empty = '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema"/>'

    docs = build_schema_from_soap(["<wsdl:definitions", empty, wsdl_text])

    assert len(docs) == 1


def test_documents_unite_through_merge(wsdl_text):
    extra = """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
      <xs:complexType name="User">
        <xs:sequence>
          <xs:element name="login" type="xs:int"/>
          <xs:element name="phone" type="xs:string"/>
        </xs:sequence>
      </xs:complexType>
    </xs:schema>"""

    merged = merge_schemas(build_schema_from_soap([wsdl_text, extra]))
    user = merged.entities[0]

    assert [e.name for e in merged.entities] == ["User", "Group"]
    assert [a.name for a in user.attributes][-2:] == ["version", "phone"]
    assert next(a for a in user.attributes if a.name == "login").type.value == "String"
