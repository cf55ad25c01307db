# Copyright (c) 2025 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
File-backed background jobs.

A job record is a JSON file under ``storage.jobs_dir/<status>/<job id>.json``; a status change
moves the file. Workers are coroutines scheduled on the running event loop.
"""

import asyncio
import inspect
import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Set, Tuple, Union
from uuid import UUID

from ..config import config
from .enums import JobStage, JobStatus, UploadKind
from .schema import UploadItem

logger = logging.getLogger(__name__)

_RECORD_DIRS = (JobStatus.queued, JobStatus.running, JobStatus.finished, JobStatus.failed)
STALE_JOB_MESSAGE = "Recovered at startup: previous process stopped while job was running."

# Strong references to running job tasks, the event loop only keeps weak ones
_background_tasks: Set["asyncio.Task[None]"] = set()


def _dir(status: JobStatus) -> Path:
    path = Path(config.storage.jobs_dir) / status.value
    path.mkdir(parents=True, exist_ok=True)
    return path


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, dict):
        return {key: _jsonable(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(item) for item in obj]
    if hasattr(obj, "model_dump"):
        return obj.model_dump(by_alias=True, mode="json")
    return obj


def _write(path: Path, record: Dict[str, Any]) -> None:
    tmp_path = path.with_suffix(".json.tmp")
    tmp_path.write_text(json.dumps(_jsonable(record), ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(tmp_path, path)


def _locate(job_id: UUID) -> Optional[Path]:
    for status in _RECORD_DIRS:
        path = _dir(status) / f"{job_id}.json"
        if path.exists():
            return path
    return None


def _load(job_id: UUID) -> Tuple[Path, Dict[str, Any]]:
    path = _locate(job_id)
    if path is None:
        raise FileNotFoundError(f"Job {job_id} not found")
    return path, json.loads(path.read_text(encoding="utf-8"))


def _transition(job_id: UUID, status: JobStatus, **fields: Any) -> Dict[str, Any]:
    """
    Move a job record to ``status``. Keyword fields are set on the record, except ``stage``
    and ``message`` which go to its progress (``message`` only when none is set yet).
    """
    path, record = _load(job_id)
    progress = dict(record.get("progress") or {})
    if "stage" in fields:
        progress["stage"] = fields.pop("stage").value
    if "message" in fields:
        progress.setdefault("message", fields.pop("message"))
    if progress:
        record["progress"] = progress

    record.update(fields, status=status.value, updatedAt=_now_iso())
    target = _dir(status) / f"{job_id}.json"
    _write(target, record)
    if target != path:
        path.unlink(missing_ok=True)
    return record


def create_job(input_payload: Dict[str, Any], job_type: str) -> UUID:
    """Create a queued job record and return its id."""
    job_id = uuid.uuid4()
    now = _now_iso()
    _write(
        _dir(JobStatus.queued) / f"{job_id}.json",
        {
            "id": str(job_id),
            "type": job_type,
            "status": JobStatus.queued.value,
            "createdAt": now,
            "updatedAt": now,
            "input": input_payload,
        },
    )
    logger.debug("[Jobs] Created %s job %s", job_type, job_id)
    return job_id


def set_running(job_id: UUID) -> Dict[str, Any]:
    _, record = _load(job_id)
    return _transition(job_id, JobStatus.running, startedAt=record.get("startedAt") or _now_iso())


def set_finished(job_id: UUID, result: Dict[str, Any]) -> Dict[str, Any]:
    """Attach the worker result and close the job."""
    return _transition(job_id, JobStatus.finished, result=result, stage=JobStage.finished, message="completed")


def set_failed(job_id: UUID, error: str) -> Dict[str, Any]:
    """
    Close the job as failed. Every non-blank line of ``error`` becomes one entry of ``errors``,
    after the ones already recorded and without repeating them.
    """
    _, record = _load(job_id)
    errors = list(record.get("errors") or [])
    for line in str(error).splitlines():
        if line.strip() and line not in errors:
            errors.append(line)
    return _transition(job_id, JobStatus.failed, errors=errors or None, stage=JobStage.failed)


def append_job_error(job_id: UUID, message: str) -> None:
    """Record a per-file error on a job that keeps running."""
    path = _locate(job_id)
    if path is None:
        return
    record = json.loads(path.read_text(encoding="utf-8"))
    errors = list(record.get("errors") or [])
    if message not in errors:
        errors.append(message)
    record.update(errors=errors, updatedAt=_now_iso())
    _write(path, record)


def update_job_progress(
    job_id: UUID,
    *,
    stage: Optional[Union[str, JobStage]] = None,
    message: Optional[str] = None,
    kind: Optional[UploadKind] = None,
    items: Optional[Iterable[UploadItem]] = None,
) -> None:
    """
    Update the progress of a job. Progress is best effort and never fails the worker.
    `items` always replaces the whole per-file snapshot, never a single entry.
    """
    try:
        path = _locate(job_id)
        if path is None:
            return
        record = json.loads(path.read_text(encoding="utf-8"))
        progress = dict(record.get("progress") or {})
        if stage is not None:
            progress["stage"] = JobStage(stage).value
        if message is not None:
            progress["message"] = message
        if kind is not None:
            progress["kind"] = kind.value
        if items is not None:
            progress["items"] = [item.model_dump(by_alias=True, mode="json") for item in items]
        record.update(progress=progress, updatedAt=_now_iso())
        _write(path, record)
    except (OSError, ValueError) as e:
        logger.debug("[Jobs] Progress update of %s failed: %s", job_id, e)


def get_job_status(job_id: UUID) -> Dict[str, Any]:
    """Public view of a job: id, status, timestamps, progress, result (finished only) and errors."""
    try:
        _, record = _load(job_id)
    except FileNotFoundError:
        return {"jobId": job_id, "status": JobStatus.not_found.value}

    out: Dict[str, Any] = {"jobId": record.get("id", job_id), "status": record.get("status")}
    out.update({key: record[key] for key in ("createdAt", "startedAt", "updatedAt") if key in record})
    if isinstance(record.get("progress"), dict):
        out["progress"] = record["progress"]
    if out["status"] == JobStatus.finished.value and "result" in record:
        out["result"] = record["result"]
    # Also shown for finished jobs, per-file failures do not fail the job
    if "errors" in record:
        out["errors"] = record["errors"]
    return out


def _result_document(result: Any) -> Dict[str, Any]:
    if hasattr(result, "model_dump"):
        return result.model_dump(by_alias=True, mode="json")
    if isinstance(result, dict):
        return result
    return {"value": repr(result)}


def schedule_coroutine_job(
    *,
    job_type: str,
    input_payload: Dict[str, Any],
    worker: Callable[..., Awaitable[Any]],
    worker_args: Optional[Tuple[Any, ...]] = None,
    worker_kwargs: Optional[Dict[str, Any]] = None,
    initial_stage: Optional[Union[str, JobStage]] = None,
    initial_message: Optional[str] = None,
) -> UUID:
    """
    Create a job record and run `worker` for it in the background.

    The worker gets the job id as keyword `job_id` when its signature declares it. Its return value
    (a pydantic model, a dict or anything else wrapped as ``{"value": repr}``) becomes the job result;
    an exception fails the job with the exception message.
    """
    job_id = create_job(input_payload, job_type)
    kwargs = dict(worker_kwargs or {})
    if "job_id" in inspect.signature(worker).parameters:
        kwargs.setdefault("job_id", job_id)

    async def _runner() -> None:
        try:
            set_running(job_id)
            if initial_stage or initial_message:
                update_job_progress(job_id, stage=initial_stage, message=initial_message)
            result = await worker(*(worker_args or ()), **kwargs)
            set_finished(job_id, result=_result_document(result))
        except asyncio.CancelledError as e:
            try:
                set_failed(job_id, error=f"Job cancelled/interrupted: {e}")
            except OSError:
                logger.debug("[Jobs] Could not mark cancelled job %s as failed", job_id)
            raise
        except Exception as e:
            logger.error("[Jobs] Job %s (%s) failed: %s", job_id, job_type, e)
            set_failed(job_id, error=str(e))

    task = asyncio.create_task(_runner())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return job_id


def recover_stale_running_jobs(note: Optional[str] = None) -> int:
    """
    Fail every job left in ``running`` by a previous process. Called once at startup.

    :return: number of recovered jobs.
    """
    count = 0
    for path in list(_dir(JobStatus.running).glob("*.json")):
        try:
            record = json.loads(path.read_text(encoding="utf-8"))
            set_failed(UUID(record.get("id") or path.stem), note or STALE_JOB_MESSAGE)
            count += 1
        except (OSError, ValueError) as e:
            logger.warning("[Jobs] Could not recover stale job file %s: %s", path, e)
    return count
