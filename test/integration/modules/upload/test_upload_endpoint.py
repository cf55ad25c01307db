# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

from unittest.mock import patch
from uuid import uuid4

import pytest

from src.common import jobs
from src.common.session.session import SessionManager


def _create_job(**kwargs):
    return jobs.create_job(kwargs["input_payload"], kwargs["job_type"])


@pytest.fixture
def session_id(test_client):
    return test_client.post("/api/v1/session").json()["sessionId"]


def test_upload_enqueues_job_and_reports_items(test_client, session_id):
    files = [
        ("files", ("schemas.json", b'{"Resources": []}', "application/json")),
        ("files", ("manual.pdf", b"%PDF-1.7", "application/pdf")),
    ]

    with patch("src.modules.upload.router.schedule_coroutine_job", side_effect=_create_job) as mock_schedule:
        response = test_client.post(f"/api/v1/upload/{session_id}", files=files)

    assert response.status_code == 200
    job_id = response.json()["jobId"]
    kwargs = mock_schedule.call_args.kwargs
    assert kwargs["job_type"] == "upload.processUpload"
    assert [f["filename"] for f in kwargs["input_payload"]["files"]] == ["schemas.json", "manual.pdf"]
    assert SessionManager.get_session_data(session_id, "uploadJobId") == job_id

    status = test_client.get(f"/api/v1/upload/{session_id}")
    assert status.status_code == 200
    body = status.json()
    assert body["jobId"] == job_id
    assert body["status"] == "queued"
    assert [(it["filename"], it["status"], it["size"]) for it in body["progress"]["items"]] == [
        ("schemas.json", "pending", 17),
        ("manual.pdf", "pending", 8),
    ]


def test_status_by_explicit_job_id(test_client, session_id):
    job_id = jobs.create_job({"sessionId": session_id}, "upload.processUpload")
    jobs.set_failed(job_id, "All file submissions failed")

    body = test_client.get(f"/api/v1/upload/{session_id}", params={"jobId": str(job_id)}).json()

    assert body["status"] == "failed"
    assert body["errors"] == ["All file submissions failed"]


def test_upload_to_unknown_session(test_client):
    files = [("files", ("schemas.json", b"{}", "application/json"))]

    with patch("src.modules.upload.router.schedule_coroutine_job") as mock_schedule:
        response = test_client.post(f"/api/v1/upload/{uuid4()}", files=files)

    assert response.status_code == 404
    mock_schedule.assert_not_called()


def test_upload_without_files_is_rejected(test_client, session_id):
    assert test_client.post(f"/api/v1/upload/{session_id}").status_code == 422


def test_status_without_upload_is_404(test_client, session_id):
    assert test_client.get(f"/api/v1/upload/{session_id}").status_code == 404
