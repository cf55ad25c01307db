"""Unit tests for file-backed job records."""

# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import asyncio
from uuid import uuid4

import pytest

from src.common import jobs
from src.common.enums import ItemStatus, JobStage, JobStatus, UploadKind
from src.common.schema import UploadItem
from src.common.status_response import build_upload_status_response


async def _drain():
    while jobs._background_tasks:
        await asyncio.gather(*list(jobs._background_tasks))


def test_job_lifecycle_moves_between_directories(isolated_storage):
    job_id = jobs.create_job({"sessionId": "s"}, "upload.processUpload")
    assert (isolated_storage / "jobs" / "queued" / f"{job_id}.json").exists()

    jobs.set_running(job_id)
    assert jobs.get_job_status(job_id)["status"] == JobStatus.running.value

    jobs.set_finished(job_id, {"entityCount": 2})
    status = jobs.get_job_status(job_id)
    assert status["status"] == JobStatus.finished.value
    assert status["result"] == {"entityCount": 2}
    assert status["progress"]["stage"] == JobStage.finished.value
    assert not (isolated_storage / "jobs" / "queued" / f"{job_id}.json").exists()


def test_progress_items_replace_whole_snapshot():
    job_id = jobs.create_job({}, "upload.processUpload")
    first = [UploadItem(id="1", filename="a"), UploadItem(id="2", filename="b")]

    jobs.update_job_progress(job_id, stage=JobStage.uploading, kind=UploadKind.generic, items=first)
    jobs.update_job_progress(job_id, items=[first[0].advance(ItemStatus.error, "Network error")])

    progress = jobs.get_job_status(job_id)["progress"]
    assert progress["stage"] == "uploading"
    assert progress["kind"] == "generic"
    assert [(it["id"], it["status"], it["message"]) for it in progress["items"]] == [("1", "error", "Network error")]


def test_failed_job_normalises_errors():
    job_id = jobs.create_job({}, "upload.processUpload")
    jobs.append_job_error(job_id, "a.pdf: 500 Internal Server Error")

    jobs.set_failed(job_id, "No result within polling window\n\n")

    status = jobs.get_job_status(job_id)
    assert status["status"] == JobStatus.failed.value
    assert status["errors"] == ["a.pdf: 500 Internal Server Error", "No result within polling window"]


def test_unknown_job_is_not_found():
    assert jobs.get_job_status(uuid4())["status"] == JobStatus.not_found.value
    assert build_upload_status_response(uuid4()).status == JobStatus.not_found


def test_recover_stale_running_jobs():
    job_id = jobs.create_job({}, "upload.processUpload")
    jobs.set_running(job_id)

    assert jobs.recover_stale_running_jobs() == 1
    assert jobs.get_job_status(job_id)["status"] == JobStatus.failed.value


@pytest.mark.asyncio
async def test_scheduled_job_receives_job_id_and_finishes():
    seen = {}

    async def worker(value, job_id=None):
        seen["job_id"] = job_id
        jobs.update_job_progress(job_id, items=[UploadItem(id="1", filename="a", status=ItemStatus.done)])
        return {"value": value}

    job_id = jobs.schedule_coroutine_job(
        job_type="test", input_payload={}, worker=worker, worker_args=(3,), initial_stage=JobStage.queue
    )
    await _drain()

    response = build_upload_status_response(job_id)
    assert seen["job_id"] == job_id
    assert response.status == JobStatus.finished
    assert response.result == {"value": 3}
    assert response.progress.items[0].status == ItemStatus.done


@pytest.mark.asyncio
async def test_scheduled_job_failure_is_recorded():
    async def worker():
        raise RuntimeError("All file submissions failed")

    job_id = jobs.schedule_coroutine_job(job_type="test", input_payload={}, worker=worker)
    await _drain()

    status = jobs.get_job_status(job_id)
    assert status["status"] == JobStatus.failed.value
    assert status["errors"] == ["All file submissions failed"]
