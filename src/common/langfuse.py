#  Copyright (C) 2010-2026 Evolveum and contributors
#
#  Licensed under the EUPL-1.2 or later.

import json
from typing import Any, Callable, Optional

from fastapi import APIRouter, Request, Response
from fastapi.routing import APIRoute
from langfuse import Langfuse

from ..config import config

"""Langfuse request tracing, used for development and testing purposes"""

# https://langfuse.com/docs/observability/sdk/python/setup
langfuse = Langfuse(
    host=config.langfuse.host,
    public_key=config.langfuse.public_key,
    secret_key=config.langfuse.secret_key,
    tracing_enabled=config.langfuse.tracing_enabled,
    environment=config.langfuse.environment,
)


async def _request_input(request: Request) -> Optional[Any]:
    """JSON body for JSON requests; uploads are summarised by content type only."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith("application/json"):
        try:
            return await request.json()
        except ValueError:
            return None
    if content_type.startswith("multipart/form-data"):
        return {"contentType": "multipart/form-data", "contentLength": request.headers.get("content-length")}
    return None


def _response_output(response: Response) -> Optional[Any]:
    body = getattr(response, "body", b"")
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return body.decode(errors="ignore") if isinstance(body, (bytes, bytearray)) else str(body)


class ObservedRoute(APIRoute):
    """
    Custom API route that starts new langfuse trace and automatically observes request and response.
    Only non-GET requests are traced so status and result polling does not flood the traces.
    """

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def custom_route_handler(request: Request) -> Response:
            if request.method.upper() == "GET":
                return await original_route_handler(request)

            request_input = await _request_input(request)
            with langfuse.start_as_current_span(name="api_request", input=request_input) as span:
                span.update_trace(name=request.url.path, tags=["schema-studio"])
                response: Response = await original_route_handler(request)
                span.update(output=_response_output(response))
                return response

        return custom_route_handler


def ObservableAPIRouter() -> APIRouter:
    """
    Custom API router that automatically starts observing every route with langfuse.
    """

    return APIRouter(route_class=ObservedRoute)
