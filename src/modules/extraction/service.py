# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
Submission and polling for the extraction path.

All files of a batch are uploaded concurrently under one correlation id. Once every upload has
settled, the result endpoint is polled on a fixed schedule until a result arrives or the
schedule runs out.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple

from ...common.enums import ItemStatus
from ...common.files import UploadedFile
from ...common.schema import UploadItem
from ...config import config
from ..editor.serialization import dump_schema
from ..merge.service import merge_schemas
from ..merge.validation import parse_schema_document
from .client import ExtractionClient, ExtractionTransportError
from .correlation import generate_correlation_id

logger = logging.getLogger(__name__)

NO_RESULT_MESSAGE = "No result within polling window"
ALL_FAILED_MESSAGE = "All file submissions failed"
COMPLETED_MESSAGE = "Completed"
QUEUED_MESSAGE = "Queued"

ItemsCallback = Callable[[Tuple[UploadItem, ...]], None]


class UploadBatch:
    """
    Per-file status of one submission.
    The item tuple is replaced as a whole on every change and each snapshot is handed to `on_items`.
    """

    def __init__(self, items: Sequence[UploadItem], on_items: Optional[ItemsCallback] = None):
        self._items: Tuple[UploadItem, ...] = tuple(items)
        self._on_items = on_items

    @property
    def items(self) -> Tuple[UploadItem, ...]:
        return self._items

    def _publish(self, items: Tuple[UploadItem, ...]) -> None:
        self._items = items
        if self._on_items is not None:
            self._on_items(items)

    def update(self, item_id: str, status: ItemStatus, message: Optional[str] = None) -> None:
        self._publish(tuple(it.advance(status, message) if it.id == item_id else it for it in self._items))

    def fail(self, item_id: str, message: str) -> None:
        """Move one item to error unless it already reached a terminal status."""
        self._publish(
            tuple(
                it.advance(ItemStatus.error, message) if it.id == item_id and not it.is_terminal else it
                for it in self._items
            )
        )

    def settle(self, status: ItemStatus, message: str) -> None:
        """Move every non-terminal item to `status`; items already done or in error keep theirs."""
        self._publish(tuple(it if it.is_terminal else it.advance(status, message) for it in self._items))


@dataclass(frozen=True)
class SubmissionOutcome:
    """
    Final state of one submission.

    `schema` holds the merged canonical schema when the result decoded; `schema_text` is set whenever a
    result arrived, verbatim if it could not be decoded (then `parse_error` says why).
    """

    correlation_id: str
    items: Tuple[UploadItem, ...]
    schema: Optional[Dict[str, Any]] = None
    schema_text: Optional[str] = None
    parse_error: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def decode_result(payload: Any) -> Tuple[Optional[Dict[str, Any]], str, Optional[str]]:
    """
    Turn a poll result into (merged schema, schema text, parse error).
    The payload may be a JSON string or already structured, holding one document or a list of them.
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        try:
            data = json.loads(payload)
        except ValueError as e:
            return None, payload, f"Invalid JSON: {e}"
        text = payload
    else:
        data = payload
        text = json.dumps(payload, indent=2, ensure_ascii=False)

    documents = data if isinstance(data, list) else [data]
    if not any(parse_schema_document(doc).ok for doc in documents):
        return None, text, "Missing entities[]"

    merged = merge_schemas(documents)
    return merged.to_document(), dump_schema(merged), None


async def submit_and_poll(
    files: Sequence[UploadedFile],
    *,
    items: Optional[Sequence[UploadItem]] = None,
    client: Optional[ExtractionClient] = None,
    delays: Optional[Sequence[float]] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    on_items: Optional[ItemsCallback] = None,
    correlation_id: Optional[str] = None,
) -> SubmissionOutcome:
    """
    Submit a batch for extraction and wait for its result.

    :param files: Files to upload, one request each.
    :param items: Items tracking `files` positionally; fresh pending items when omitted.
    :param client: Extraction backend client.
    :param delays: Wait before each poll in seconds; the configured schedule when omitted.
    :param sleep: Awaitable used to wait between polls.
    :param on_items: Receives every new item snapshot.
    :param correlation_id: Batch id; a random one when omitted.
    :return: SubmissionOutcome, never raises for transport problems or an exhausted schedule.
    """
    client = client or ExtractionClient()
    schedule = list(config.extraction.poll_delays if delays is None else delays)
    cid = correlation_id or generate_correlation_id(config.extraction.correlation_id_length)
    batch = UploadBatch(items if items is not None else [UploadItem.for_file(f) for f in files], on_items)

    logger.info("[Extraction] Submitting %d file(s) as %s", len(files), cid)

    async def _submit(file: UploadedFile, item_id: str) -> bool:
        batch.update(item_id, ItemStatus.uploading)
        try:
            await client.submit_file(file, cid)
        except ExtractionTransportError as e:
            batch.update(item_id, ItemStatus.error, str(e))
            return False
        batch.update(item_id, ItemStatus.processing, QUEUED_MESSAGE)
        return True

    item_ids = [it.id for it in batch.items]
    results = await asyncio.gather(*(_submit(f, i) for f, i in zip(files, item_ids)), return_exceptions=True)
    for item_id, result in zip(item_ids, results):
        if isinstance(result, BaseException):
            logger.error("[Extraction] Unexpected failure while submitting item %s: %s", item_id, result)
            batch.fail(item_id, str(result) or type(result).__name__)

    if not any(result is True for result in results):
        logger.warning("[Extraction] %s: every submission failed, not polling", cid)
        batch.settle(ItemStatus.error, ALL_FAILED_MESSAGE)
        return SubmissionOutcome(correlation_id=cid, items=batch.items, error=ALL_FAILED_MESSAGE)

    payload: Any = None
    for attempt, delay in enumerate(schedule, start=1):
        await sleep(delay)
        try:
            response = await client.poll_result(cid)
        except ExtractionTransportError as e:
            logger.warning("[Extraction] Poll %d/%d for %s failed: %s", attempt, len(schedule), cid, e)
            continue
        if response.complete:
            payload = response.result
            logger.info("[Extraction] Result for %s arrived on poll %d/%d", cid, attempt, len(schedule))
            break
        logger.debug("[Extraction] Poll %d/%d for %s: pending", attempt, len(schedule), cid)
    else:
        logger.warning("[Extraction] %s: %s", cid, NO_RESULT_MESSAGE)
        batch.settle(ItemStatus.error, NO_RESULT_MESSAGE)
        return SubmissionOutcome(correlation_id=cid, items=batch.items, error=NO_RESULT_MESSAGE)

    schema, schema_text, parse_error = decode_result(payload)
    if parse_error:
        logger.warning("[Extraction] Result for %s could not be used as a schema: %s", cid, parse_error)
    batch.settle(ItemStatus.done, COMPLETED_MESSAGE)
    return SubmissionOutcome(
        correlation_id=cid,
        items=batch.items,
        schema=schema,
        schema_text=schema_text,
        parse_error=parse_error,
    )
