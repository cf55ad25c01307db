# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
Extraction result exchange.
The worker posts results to the webhook; the submission orchestrator polls them back by correlation id.
"""

import logging
from typing import Union

from fastapi import Depends, Query, Response, status
from fastapi import Path as PathParam

from ...common.langfuse import ObservableAPIRouter
from .schema import ExtractionPollResponse, ExtractionResult
from .store import ResultStore, get_result_store

logger = logging.getLogger(__name__)

router = ObservableAPIRouter()


@router.post(
    "/results/{request_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Receive an extraction result",
)
async def receive_result(
    body: ExtractionResult,
    request_id: str = PathParam(..., min_length=1, description="Correlation id of the batch"),
    store: ResultStore = Depends(get_result_store),
) -> Response:
    """
    Store the worker's result for a batch. A later post for the same id replaces the earlier one.
    """
    store.put(request_id, body)
    logger.info("[Extraction] Webhook delivered %s result for %s", body.status, request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/results",
    response_model=ExtractionPollResponse,
    response_model_exclude_none=True,
    summary="Poll an extraction result",
    responses={204: {"description": "No result yet"}},
)
async def poll_result(
    request_id: str = Query(..., alias="id", min_length=1, description="Correlation id of the batch"),
    store: ResultStore = Depends(get_result_store),
) -> Union[ExtractionPollResponse, Response]:
    """
    204 while nothing has arrived for the id, otherwise the stored result.
    A failed batch answers `ok: false` with the worker error.
    """
    entry = store.get(request_id)
    if entry is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    if not entry.ready:
        return ExtractionPollResponse(ok=False, error=entry.error)
    return ExtractionPollResponse(ok=True, result=entry.result)
