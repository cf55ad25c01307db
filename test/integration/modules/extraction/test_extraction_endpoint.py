# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import pytest

from src.modules.extraction.store import get_result_store


@pytest.fixture(autouse=True)
def clean_store():
    get_result_store().clear()
    yield
    get_result_store().clear()


def test_poll_before_webhook_is_pending(test_client):
    response = test_client.get("/api/v1/extraction/results", params={"id": "abc"})

    assert response.status_code == 204
    assert response.content == b""


def test_webhook_then_poll(test_client):
    result = {"entities": [{"name": "User", "attributes": []}]}

    posted = test_client.post("/api/v1/extraction/results/abc", json={"result": result})
    polled = test_client.get("/api/v1/extraction/results", params={"id": "abc"})

    assert posted.status_code == 204
    assert polled.status_code == 200
    assert polled.json() == {"ok": True, "result": result}


def test_failed_result_polls_as_not_ok(test_client):
    test_client.post("/api/v1/extraction/results/abc", json={"status": "failed", "error": "worker crashed"})

    polled = test_client.get("/api/v1/extraction/results", params={"id": "abc"})

    assert polled.json() == {"ok": False, "error": "worker crashed"}


def test_later_webhook_replaces_result(test_client):
    test_client.post("/api/v1/extraction/results/abc", json={"result": "first"})
    test_client.post("/api/v1/extraction/results/abc", json={"result": "second"})

    assert test_client.get("/api/v1/extraction/results", params={"id": "abc"}).json()["result"] == "second"


def test_poll_requires_id(test_client):
    assert test_client.get("/api/v1/extraction/results").status_code == 422
