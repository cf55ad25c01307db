# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
HTTP client of the asynchronous extraction backend.

Files are submitted one multipart request each, tagged with the batch correlation id;
results are polled by that id.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from ...common.files import UploadedFile
from ...config import config

logger = logging.getLogger(__name__)


class ExtractionTransportError(RuntimeError):
    """A submission or poll did not get a 2xx answer; the message is user-facing."""


@dataclass(frozen=True)
class PollResponse:
    """Outcome of a single poll. `result` is only set when the backend reports a finished extraction."""

    complete: bool
    result: Optional[Any] = None


PENDING = PollResponse(complete=False)


def interpret_poll_response(status: int, content_type: Optional[str], body: str) -> PollResponse:
    """
    Decode one 2xx poll answer.

    204 means pending. A JSON object with a non-empty `result` (and `ok` not false) is complete.
    Anything else well-formed is still pending.
    """
    if status == 204 or not body.strip():
        return PENDING
    if content_type and "json" not in content_type.lower():
        logger.debug("[Extraction] Poll answered with %s, treating as pending", content_type)
        return PENDING
    try:
        payload = json.loads(body)
    except ValueError:
        logger.debug("[Extraction] Poll answered with malformed JSON, treating as pending")
        return PENDING

    if not isinstance(payload, dict) or payload.get("ok") is False:
        return PENDING
    result = payload.get("result")
    if not result:
        return PENDING
    return PollResponse(complete=True, result=result)


class ExtractionClient:
    """
    Thin aiohttp wrapper around the submit and poll endpoints.
    A fresh ClientSession is opened per call.
    """

    def __init__(
        self,
        submit_url: Optional[str] = None,
        poll_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.submit_url = submit_url or config.extraction.submit_url
        self.poll_url = poll_url or config.extraction.poll_url
        total = timeout if timeout is not None else config.extraction.request_timeout
        self.timeout = aiohttp.ClientTimeout(total=total) if total is not None else None

    def _session(self) -> aiohttp.ClientSession:
        if self.timeout is None:
            return aiohttp.ClientSession()
        return aiohttp.ClientSession(timeout=self.timeout)

    async def submit_file(self, file: UploadedFile, correlation_id: str) -> None:
        """
        Upload one file tagged with the batch correlation id.

        :raises ExtractionTransportError: "<status> <reason>" on a non-2xx answer, "Network error" when
            the request could not be made or timed out.
        """
        form = aiohttp.FormData()
        form.add_field("file", file.content, filename=file.filename, content_type=file.file_type)
        form.add_field("request_id", correlation_id)
        form.add_field("filename", file.filename)
        form.add_field("fileType", file.file_type)
        form.add_field("size", str(file.size))

        try:
            async with self._session() as session:
                async with session.post(self.submit_url, data=form) as response:
                    if not 200 <= response.status < 300:
                        raise ExtractionTransportError(f"{response.status} {response.reason or ''}".strip())
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("[Extraction] Submitting %s failed: %r", file.filename, e)
            raise ExtractionTransportError("Network error") from e

        logger.debug("[Extraction] Submitted %s for %s", file.filename, correlation_id)

    async def poll_result(self, correlation_id: str) -> PollResponse:
        """
        Ask once for the result of a batch.

        A body that does not decode in its charset counts as pending.

        :raises ExtractionTransportError: on a non-2xx answer or a transport failure.
        """
        try:
            async with self._session() as session:
                async with session.get(self.poll_url, params={"id": correlation_id}) as response:
                    if not 200 <= response.status < 300:
                        raise ExtractionTransportError(f"{response.status} {response.reason or ''}".strip())
                    raw = await response.read()
                    try:
                        body = raw.decode(response.charset or "utf-8")
                    except (UnicodeDecodeError, LookupError) as e:
                        logger.debug("[Extraction] Poll body could not be decoded, treating as pending: %s", e)
                        return PENDING
                    return interpret_poll_response(response.status, response.headers.get("Content-Type"), body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("[Extraction] Polling %s failed: %r", correlation_id, e)
            raise ExtractionTransportError("Network error") from e
