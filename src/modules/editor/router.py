# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
Schema editing endpoints, nested under sessions.
Every mutating endpoint answers with the new schema state including duplicate-name warnings
and is traced like the upload and extraction endpoints.
"""

from functools import partial
from typing import Callable
from uuid import UUID

from fastapi import HTTPException, Query, Response, status
from fastapi import Path as PathParam

from ...common.langfuse import ObservableAPIRouter
from . import model, service
from .schema import (
    AttributeUpdateRequest,
    EntityCreateRequest,
    EntityUpdateRequest,
    SchemaStateResponse,
    SchemaTextRequest,
    SelectionRequest,
)
from .serialization import SCHEMA_FILENAME

router = ObservableAPIRouter()


def _edit(session_id: UUID, operation: Callable[[model.EditorState], model.EditResult]) -> SchemaStateResponse:
    try:
        return service.describe(service.apply_edit(session_id, operation))
    except service.SchemaSlotNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except model.SchemaEditError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{session_id}", response_model=SchemaStateResponse, summary="Get the current schema")
async def get_schema(session_id: UUID = PathParam(..., description="Session ID")) -> SchemaStateResponse:
    """
    Current schema, its editor text, parse error, selected entity and duplicate-name warnings.
    """
    try:
        return service.describe(service.get_slot(session_id))
    except service.SchemaSlotNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{session_id}/text", response_model=SchemaStateResponse, summary="Replace the schema from JSON text")
async def put_schema_text(
    req: SchemaTextRequest,
    session_id: UUID = PathParam(..., description="Session ID"),
) -> SchemaStateResponse:
    """
    Load the schema from edited JSON. Invalid text is kept with `parseError` set and the previous schema retained.
    """
    try:
        return service.describe(service.set_text(session_id, req.text))
    except service.SchemaSlotNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{session_id}/download", summary="Download schema.json")
async def download_schema(
    session_id: UUID = PathParam(..., description="Session ID"),
    raw: bool = Query(False, description="Download the current text as-is even when it does not parse"),
) -> Response:
    try:
        content = service.download(session_id, raw=raw)
    except service.SchemaSlotNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except service.DownloadNotAllowed as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    if content is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session {session_id} has no schema")
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{SCHEMA_FILENAME}"'},
    )


@router.put("/{session_id}/selection", response_model=SchemaStateResponse, summary="Select an entity")
async def put_selection(
    req: SelectionRequest,
    session_id: UUID = PathParam(..., description="Session ID"),
) -> SchemaStateResponse:
    return _edit(session_id, partial(model.select_entity, index=req.index))


# Entities
@router.post(
    "/{session_id}/entities",
    response_model=SchemaStateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an entity",
)
async def post_entity(
    req: EntityCreateRequest,
    session_id: UUID = PathParam(..., description="Session ID"),
) -> SchemaStateResponse:
    """
    Append an entity with a unique name and an `id` key attribute, then select it.
    """
    return _edit(session_id, partial(model.add_entity, name=req.name))


@router.patch("/{session_id}/entities/{entity_index}", response_model=SchemaStateResponse, summary="Rename an entity")
async def patch_entity(
    req: EntityUpdateRequest,
    session_id: UUID = PathParam(..., description="Session ID"),
    entity_index: int = PathParam(..., ge=0, description="Entity index"),
) -> SchemaStateResponse:
    return _edit(session_id, partial(model.rename_entity, index=entity_index, name=req.name))


@router.delete(
    "/{session_id}/entities/{entity_index}", response_model=SchemaStateResponse, summary="Remove an entity"
)
async def delete_entity(
    session_id: UUID = PathParam(..., description="Session ID"),
    entity_index: int = PathParam(..., description="Entity index; out of range leaves the schema unchanged"),
) -> SchemaStateResponse:
    return _edit(session_id, partial(model.remove_entity, index=entity_index))


# Attributes
@router.post(
    "/{session_id}/entities/{entity_index}/attributes",
    response_model=SchemaStateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an attribute",
)
async def post_attribute(
    session_id: UUID = PathParam(..., description="Session ID"),
    entity_index: int = PathParam(..., ge=0, description="Entity index"),
) -> SchemaStateResponse:
    return _edit(session_id, partial(model.add_attribute, entity_index=entity_index))


@router.patch(
    "/{session_id}/entities/{entity_index}/attributes/{attribute_index}",
    response_model=SchemaStateResponse,
    summary="Update an attribute",
)
async def patch_attribute(
    req: AttributeUpdateRequest,
    session_id: UUID = PathParam(..., description="Session ID"),
    entity_index: int = PathParam(..., ge=0, description="Entity index"),
    attribute_index: int = PathParam(..., ge=0, description="Attribute index"),
) -> SchemaStateResponse:
    """
    Apply the provided changes in one write. Setting `IsKey` clears the key flag of every other attribute.
    """
    ai, ei = attribute_index, entity_index

    def _update(state: model.EditorState) -> model.EditResult:
        result = model.EditResult(state, changed=False)
        if req.name is not None:
            result = model.rename_attribute(result.state, ei, ai, req.name)
        if req.type is not None:
            result = model.set_attribute_type(result.state, ei, ai, req.type)
        if req.multi_value is not None:
            result = model.set_multi_value(result.state, ei, ai, req.multi_value)
        if req.is_key is not None:
            result = model.toggle_key(result.state, ei, ai, req.is_key)
        if not result.changed:
            model.get_attribute(state, ei, ai)
        return result

    return _edit(session_id, _update)


@router.delete(
    "/{session_id}/entities/{entity_index}/attributes/{attribute_index}",
    response_model=SchemaStateResponse,
    summary="Remove an attribute",
)
async def delete_attribute(
    session_id: UUID = PathParam(..., description="Session ID"),
    entity_index: int = PathParam(..., ge=0, description="Entity index"),
    attribute_index: int = PathParam(..., ge=0, description="Attribute index"),
) -> SchemaStateResponse:
    return _edit(session_id, partial(model.remove_attribute, entity_index=entity_index, attribute_index=attribute_index))
