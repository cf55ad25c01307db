# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
Upload endpoints, nested under sessions.
An upload batch runs as a background job; its result replaces the session schema.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import File, HTTPException, Query, UploadFile, status
from fastapi import Path as PathParam

from ...common.enums import JobStage
from ...common.files import UploadedFile
from ...common.jobs import schedule_coroutine_job, update_job_progress
from ...common.langfuse import ObservableAPIRouter
from ...common.schema import JobCreateResponse, JobStatusUploadResponse, UploadItem
from ...common.session.session import SessionManager
from ...common.status_response import build_upload_status_response
from . import service

logger = logging.getLogger(__name__)

router = ObservableAPIRouter()


@router.post(
    "/{session_id}",
    response_model=JobCreateResponse,
    summary="Upload files to build the session schema",
)
async def upload_files(
    session_id: UUID = PathParam(..., description="Session ID"),
    files: List[UploadFile] = File(..., description="SCIM JSON, WSDL/XSD or any documents for extraction"),
) -> JobCreateResponse:
    """
    Enqueue a job that classifies the batch, converts it and replaces the session schema with the merged result.
    """
    if not SessionManager.session_exists(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session {session_id} not found")

    uploaded = [
        UploadedFile(filename=f.filename or "upload", content=await f.read(), content_type=f.content_type)
        for f in files
    ]
    if not uploaded:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="No files uploaded")
    items = [UploadItem.for_file(f) for f in uploaded]

    logger.info("[Upload] Session %s: received %d file(s)", session_id, len(uploaded))
    job_id = schedule_coroutine_job(
        job_type="upload.processUpload",
        input_payload={
            "sessionId": str(session_id),
            "files": [{"filename": f.filename, "contentType": f.file_type, "size": f.size} for f in uploaded],
        },
        worker=service.process_upload,
        worker_args=(session_id, uploaded, items),
        initial_stage=JobStage.queue,
        initial_message=f"Queued {len(uploaded)} file(s)",
    )
    update_job_progress(job_id, items=items)

    SessionManager.update_session(session_id, {"uploadJobId": str(job_id)})
    return JobCreateResponse(jobId=job_id)


@router.get(
    "/{session_id}",
    response_model=JobStatusUploadResponse,
    summary="Get upload job status",
    response_model_exclude_none=True,
)
async def get_upload_status(
    session_id: UUID = PathParam(..., description="Session ID"),
    jobId: Optional[UUID] = Query(None, description="Job ID (optional, defaults to the last upload)"),
) -> JobStatusUploadResponse:
    """
    Stage, per-file status, result and errors of an upload job.
    """
    if not SessionManager.session_exists(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session {session_id} not found")

    if not jobId:
        job_id_str = SessionManager.get_session_data(session_id, "uploadJobId")
        if not job_id_str:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No upload job found in session {session_id}")
        return build_upload_status_response(UUID(job_id_str))

    return build_upload_status_response(jobId)
