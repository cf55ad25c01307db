#  Copyright (C) 2010-2026 Evolveum and contributors
#
#  Licensed under the EUPL-1.2 or later.

from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from .enums import JobStatus
from .jobs import get_job_status
from .schema import JobStatusUploadResponse, UploadItem, UploadProgress


def build_upload_status_response(job_id: UUID) -> JobStatusUploadResponse:
    """Build an upload status response (stage, message, kind and per-file items)."""
    status = get_job_status(job_id)
    raw_status = status.get("status", JobStatus.not_found.value)
    enum_status = JobStatus(raw_status)
    prog = status.get("progress") or {}
    progress: Optional[UploadProgress] = None
    if isinstance(prog, dict) and prog:
        try:
            items = [UploadItem.model_validate(it) for it in prog.get("items") or []]
        except ValidationError:
            items = []
        progress = UploadProgress(
            stage=prog.get("stage"),
            message=prog.get("message"),
            kind=prog.get("kind"),
            items=items or None,
        )

    return JobStatusUploadResponse(
        jobId=status.get("jobId", job_id),
        status=enum_status,
        createdAt=status.get("createdAt"),
        startedAt=status.get("startedAt"),
        updatedAt=status.get("updatedAt"),
        progress=progress,
        result=status.get("result"),
        errors=status.get("errors"),
    )
