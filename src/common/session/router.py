# Copyright (c) 2025 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
Session endpoints. A session is the container for one connector schema;
uploads and schema editing are served by their own routers.
"""

import logging
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, status

from .schema import (
    SessionCreateResponse,
    SessionDataResponse,
    SessionMessageResponse,
    SessionSummary,
    SessionUpdateRequest,
)
from .session import SCHEMA_SLOT_KEYS, SessionManager

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(session_id: UUID) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session {session_id} not found")


def _summarize(data: Dict[str, Any]) -> SessionSummary:
    schema = data.get("schema")
    entities = schema.get("entities") if isinstance(schema, dict) else None
    return SessionSummary(
        hasSchema=schema is not None,
        entityCount=len(entities or []),
        parseError=data.get("parseError"),
        uploadJobId=data.get("uploadJobId"),
    )


@router.post(
    "",
    response_model=SessionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new session",
)
async def create_session() -> SessionCreateResponse:
    """
    Create a session holding an empty schema.
    """
    try:
        session_id = SessionManager.create_session()
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return SessionCreateResponse(sessionId=session_id, message="Session created")


@router.post(
    "/{session_id}",
    response_model=SessionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new session with provided ID",
)
async def create_session_with_id(
    session_id: UUID = Path(..., description="Session ID"),
) -> SessionCreateResponse:
    """
    Create a session under the given ID; 409 when it is already taken.
    """
    try:
        SessionManager.create_session_with_id(session_id)
    except FileExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return SessionCreateResponse(sessionId=session_id, message="Session created with provided ID")


@router.get("/{session_id}", response_model=SessionDataResponse, summary="Get session data")
async def get_session(session_id: UUID = Path(..., description="Session ID")) -> SessionDataResponse:
    session = SessionManager.get_session(session_id)
    if session is None:
        raise _not_found(session_id)

    data = session.get("data") or {}
    return SessionDataResponse(
        sessionId=session["sessionId"],
        data=data,
        summary=_summarize(data),
        createdAt=session["createdAt"],
        updatedAt=session["updatedAt"],
    )


@router.head("/{session_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Check if session exists")
async def check_session_exists(session_id: UUID = Path(..., description="Session ID")) -> None:
    if not SessionManager.session_exists(session_id):
        raise _not_found(session_id)


@router.patch("/{session_id}", response_model=SessionMessageResponse, summary="Update session data")
async def update_session(
    request: SessionUpdateRequest,
    session_id: UUID = Path(..., description="Session ID"),
) -> SessionMessageResponse:
    """
    Merge free-form entries into the session data.
    Schema slot keys are rejected with 422, the schema is changed through `/schema` only.
    """
    reserved = sorted(set(request.data) & set(SCHEMA_SLOT_KEYS))
    if reserved:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Keys {reserved} are managed by the schema endpoints",
        )
    if not SessionManager.update_session(session_id, request.data):
        raise _not_found(session_id)
    return SessionMessageResponse(sessionId=session_id, message="Session updated")


@router.delete("/{session_id}", response_model=SessionMessageResponse, summary="Delete a session")
async def delete_session(session_id: UUID = Path(..., description="Session ID")) -> SessionMessageResponse:
    if not SessionManager.delete_session(session_id):
        raise _not_found(session_id)
    logger.info("[Session] Session %s removed through the API", session_id)
    return SessionMessageResponse(sessionId=session_id, message="Session deleted")
