"""Unit tests for upload item status transitions and attribute normalisation."""

# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import pytest
from pydantic import ValidationError

from src.common.enums import AttributeType, ItemStatus
from src.common.files import UploadedFile
from src.common.schema import Attribute, UploadItem, normalize_attribute_type


def _item(status=ItemStatus.pending):
    return UploadItem(id="1", filename="a.json", status=status)


def test_for_file_describes_file():
    item = UploadItem.for_file(UploadedFile(filename="a.json", content=b"{}", content_type=None))

    assert item.status == ItemStatus.pending
    assert item.size == 2
    assert item.content_type == "application/octet-stream"
    assert item.model_dump(by_alias=True)["contentType"] == "application/octet-stream"


def test_forward_transitions():
    item = _item()
    item = item.advance(ItemStatus.uploading)
    item = item.advance(ItemStatus.processing, "Queued")
    item = item.advance(ItemStatus.done, "Completed")

    assert (item.status, item.message) == (ItemStatus.done, "Completed")


@pytest.mark.parametrize("status", [ItemStatus.pending, ItemStatus.uploading, ItemStatus.processing])
def test_error_reachable_from_non_terminal(status):
    assert _item(status).advance(ItemStatus.error, "boom").status == ItemStatus.error


def test_backwards_transition_rejected():
    with pytest.raises(ValueError):
        _item(ItemStatus.processing).advance(ItemStatus.uploading)


@pytest.mark.parametrize("terminal", [ItemStatus.done, ItemStatus.error])
def test_terminal_statuses_are_final(terminal):
    with pytest.raises(ValueError):
        _item(terminal).advance(ItemStatus.error, "again")


def test_items_are_immutable():
    item = _item()

    with pytest.raises(ValidationError):
        item.status = ItemStatus.done
    assert item.advance(ItemStatus.uploading) is not item


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("string", AttributeType.string),
        ("INTEGER", AttributeType.integer),
        ("long", AttributeType.integer),
        ("boolean", AttributeType.boolean),
        ("dateTime", AttributeType.datetime),
        ("date_time", AttributeType.datetime),
        ("complex", AttributeType.string),
        (None, AttributeType.string),
    ],
)
def test_type_synonyms(raw, expected):
    assert normalize_attribute_type(raw) == expected


def test_attribute_accepts_snake_case_and_drops_alternate_key_spellings():
    attr = Attribute.model_validate({"name": "id", "multi_value": True, "is_key": True})

    assert attr.multi_value is True
    assert attr.is_key is True
    assert attr.model_dump(by_alias=True) == {"name": "id", "type": AttributeType.string, "MultiValue": True, "IsKey": True}
