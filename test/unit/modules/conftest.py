"""Shared test fixtures for all modules."""

# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import json

import pytest

from src.common.files import UploadedFile

USER_SCHEMA_ID = "urn:ietf:params:scim:schemas:core:2.0:User"
GROUP_SCHEMA_ID = "urn:ietf:params:scim:schemas:core:2.0:Group"


@pytest.fixture
def scim_schemas():
    """/Schemas envelope with a minimal User and an attribute-less Group."""
    return {
        "schemas": ["urn:ietf:params:scim:api:messages:2.0:ListResponse"],
        "totalResults": 2,
        "Resources": [
            {
                "id": USER_SCHEMA_ID,
                "name": "User",
                "attributes": [
                    {"name": "userName", "type": "string", "multiValued": False},
                    {"name": "active", "type": "boolean", "multiValued": False},
                ],
            },
            {"id": GROUP_SCHEMA_ID, "name": "Group", "attributes": []},
        ],
    }


@pytest.fixture
def scim_resource_types():
    """/ResourceTypes array for User and Group."""
    return [
        {"id": "User", "name": "User", "endpoint": "/Users", "schema": USER_SCHEMA_ID},
        {"id": "Group", "name": "Group", "endpoint": "/Groups", "schema": GROUP_SCHEMA_ID},
    ]


@pytest.fixture
def make_file():
    """Build an UploadedFile from text, bytes or a JSON-serialisable object."""

    def _make(filename, content, content_type=None):
        if isinstance(content, (dict, list)):
            content = json.dumps(content)
        if isinstance(content, str):
            content = content.encode("utf-8")
        return UploadedFile(filename=filename, content=content, content_type=content_type)

    return _make


@pytest.fixture
def wsdl_text():
    """WSDL with an embedded XSD declaring a User and an anonymous Group element type."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<wsdl:definitions xmlns:wsdl="http://schemas.xmlsoap.org/wsdl/"
                  xmlns:xsd="http://www.w3.org/2001/XMLSchema"
                  xmlns:tns="urn:example:users"
                  targetNamespace="urn:example:users">
  <wsdl:types>
    <xsd:schema targetNamespace="urn:example:users">
      <xsd:complexType name="User">
        <xsd:sequence>
          <xsd:element name="ID" type="xsd:string"/>
          <xsd:element name="login" type="xsd:string"/>
          <xsd:element name="age" type="xsd:int" minOccurs="0"/>
          <xsd:element name="enabled" type="xsd:boolean"/>
          <xsd:element name="created" type="xsd:dateTime"/>
          <xsd:element name="emails" type="xsd:string" maxOccurs="unbounded"/>
        </xsd:sequence>
        <xsd:attribute name="version" type="xsd:long"/>
      </xsd:complexType>
      <xsd:element name="Group">
        <xsd:complexType>
          <xsd:sequence>
            <xsd:element name="id" type="xsd:string"/>
            <xsd:element name="members" type="tns:User" maxOccurs="unbounded"/>
          </xsd:sequence>
        </xsd:complexType>
      </xsd:element>
    </xsd:schema>
  </wsdl:types>
</wsdl:definitions>
"""
