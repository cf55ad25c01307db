"""Unit tests for upload classification."""

# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

from unittest.mock import patch

from src.common.enums import UploadKind
from src.modules.classifier.service import classify_upload, parse_scim_document, read_scim_documents


def test_classify_scim_envelope(make_file, scim_schemas):
    files = [make_file("schemas.json", scim_schemas)]

    assert classify_upload(files) == UploadKind.scim


def test_classify_scim_json_suffix_is_case_insensitive(make_file, scim_resource_types):
    files = [make_file("ResourceTypes.JSON", scim_resource_types)]

    assert classify_upload(files) == UploadKind.scim


def test_classify_ignores_scim_content_without_json_suffix(make_file, scim_schemas):
    files = [make_file("schemas.txt", scim_schemas)]

    assert classify_upload(files, is_soap=False) == UploadKind.generic


def test_classify_skips_malformed_json_and_finds_scim_in_other_file(make_file, scim_schemas):
    files = [
        make_file("broken.json", "{not json"),
        make_file("binary.json", b"\xff\xfe\x00garbage"),
        make_file("schemas.json", scim_schemas),
    ]

    assert classify_upload(files) == UploadKind.scim


def test_classify_scim_wins_over_soap_verdict(make_file, scim_schemas):
    files = [make_file("schemas.json", scim_schemas)]

    assert classify_upload(files, is_soap=True) == UploadKind.scim


def test_classify_uses_given_soap_verdict(make_file):
    files = [make_file("manual.pdf", b"%PDF-1.7")]

    assert classify_upload(files, is_soap=True) == UploadKind.soap
    assert classify_upload(files, is_soap=False) == UploadKind.generic


def test_classify_falls_back_to_soap_detector(make_file, wsdl_text):
    files = [make_file("users.wsdl", wsdl_text)]

    assert classify_upload(files) == UploadKind.soap


def test_classify_generic_for_plain_documents(make_file):
    files = [make_file("guide.md", "# Users API"), make_file("data.json", {"users": []})]

    assert classify_upload(files) == UploadKind.generic


def test_classify_reads_only_head_of_file(make_file, scim_schemas):
    files = [make_file("schemas.json", scim_schemas)]

    with patch("src.modules.classifier.service.config.upload.scim_read_limit", 10):
        assert classify_upload(files, is_soap=False) == UploadKind.generic


def test_parse_scim_document_shapes():
    single_schema = {"id": "urn:x:User", "attributes": [{"name": "userName"}]}
    single_rt = {"name": "User", "schema": "urn:x:User"}

    assert parse_scim_document(single_schema).value.schemas == [single_schema]
    assert parse_scim_document(single_rt).value.resource_types == [single_rt]
    assert parse_scim_document([single_rt, {"other": 1}]).value.resource_types == [single_rt]
    assert not parse_scim_document({"Resources": [{"id": "x"}]}).ok
    assert not parse_scim_document({"attributes": [{"name": "a"}]}).ok
    assert not parse_scim_document("text").ok


def test_read_scim_documents_partitions_envelope(make_file):
    envelope = {
        "Resources": [
            {"id": "urn:x:User", "attributes": [{"name": "userName"}]},
            {"name": "User", "schema": "urn:x:User"},
        ]
    }

    docs = read_scim_documents([make_file("all.json", envelope)])

    assert [s["id"] for s in docs.schemas] == ["urn:x:User"]
    assert [r["name"] for r in docs.resource_types] == ["User"]


def test_read_scim_documents_tolerates_bom(make_file, scim_resource_types):
    raw = b"\xef\xbb\xbf" + make_file("rt.json", scim_resource_types).content

    docs = read_scim_documents([make_file("rt.json", raw)])

    assert len(docs.resource_types) == 2
