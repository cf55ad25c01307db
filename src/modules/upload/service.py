# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
Upload batch processing: classify the batch, run the matching path, merge and store the schema.
"""

import logging
from typing import Any, Dict, Optional, Sequence
from uuid import UUID

from ...common.enums import ItemStatus, JobStage, UploadKind
from ...common.files import UploadedFile
from ...common.jobs import append_job_error, update_job_progress
from ...common.schema import UploadItem
from ...common.session.session import SessionManager
from ..classifier.service import classify_upload, read_scim_documents
from ..converters.scim import scim_to_schemas
from ..converters.soap import build_schema_from_soap
from ..editor.serialization import dump_schema
from ..extraction.service import COMPLETED_MESSAGE, SubmissionOutcome, UploadBatch, submit_and_poll
from ..merge.service import merge_schemas
from .schema import UploadResult

logger = logging.getLogger(__name__)

SCIM_DONE_MESSAGE = "SCIM parsed"
NO_SOAP_ENTITIES_MESSAGE = "No complex types found in the WSDL/XSD files"


def _local_outcome(batch: UploadBatch, documents: Sequence[Dict[str, Any]], done_message: str) -> SubmissionOutcome:
    merged = merge_schemas(list(documents))
    batch.settle(ItemStatus.done, done_message)
    return SubmissionOutcome(
        correlation_id="",
        items=batch.items,
        schema=merged.to_document(),
        schema_text=dump_schema(merged),
    )


def convert_scim(files: Sequence[UploadedFile], batch: UploadBatch) -> SubmissionOutcome:
    batch.settle(ItemStatus.processing, "Parsing SCIM")
    docs = read_scim_documents(files)
    per_entity = scim_to_schemas(docs.resource_types, docs.schemas)
    return _local_outcome(batch, per_entity, SCIM_DONE_MESSAGE)


def convert_soap(files: Sequence[UploadedFile], batch: UploadBatch) -> SubmissionOutcome:
    batch.settle(ItemStatus.processing, "Parsing WSDL/XSD")
    documents = build_schema_from_soap([f.text() for f in files])
    if not documents:
        batch.settle(ItemStatus.error, NO_SOAP_ENTITIES_MESSAGE)
        return SubmissionOutcome(correlation_id="", items=batch.items, error=NO_SOAP_ENTITIES_MESSAGE)
    return _local_outcome(batch, documents, COMPLETED_MESSAGE)


def store_outcome(session_id: UUID, outcome: SubmissionOutcome) -> None:
    """
    Put the outcome into the session schema slot.
    A merged schema replaces the slot wholesale; an unparsable result only replaces the text and sets the parse error.
    """
    if outcome.schema is not None:
        if not SessionManager.replace_schema(session_id, outcome.schema, outcome.schema_text or ""):
            logger.warning("[Upload] Session %s disappeared before its schema could be stored", session_id)
        return
    if outcome.parse_error is not None:
        slot = SessionManager.get_schema_slot(session_id)
        if slot is None:
            logger.warning("[Upload] Session %s disappeared before its schema could be stored", session_id)
            return
        slot.update({"schemaText": outcome.schema_text or "", "parseError": outcome.parse_error})
        SessionManager.save_schema_slot(session_id, slot)


async def process_upload(
    session_id: UUID,
    files: Sequence[UploadedFile],
    items: Optional[Sequence[UploadItem]] = None,
    job_id: Optional[UUID] = None,
) -> UploadResult:
    """
    Job worker for one upload batch.

    :param session_id: Session whose schema slot receives the result.
    :param files: Uploaded files, in memory.
    :param items: Items tracking `files` positionally.
    :param job_id: Job record receiving progress and per-file status.
    :return: UploadResult stored on the finished job.
    :raises RuntimeError: when the batch produced no schema (the job is then marked failed).
    """

    def _progress(**kwargs: Any) -> None:
        if job_id is not None:
            update_job_progress(job_id, **kwargs)

    batch = UploadBatch(
        items if items is not None else [UploadItem.for_file(f) for f in files],
        on_items=lambda snapshot: _progress(items=snapshot),
    )

    _progress(stage=JobStage.classifying, message=f"Classifying {len(files)} file(s)")
    kind = classify_upload(files)
    _progress(kind=kind)
    logger.info("[Upload] Session %s: processing %d file(s) on the %s path", session_id, len(files), kind.value)

    if kind == UploadKind.scim:
        _progress(stage=JobStage.converting, message="Converting SCIM schemas")
        outcome = convert_scim(files, batch)
    elif kind == UploadKind.soap:
        _progress(stage=JobStage.converting, message="Converting WSDL/XSD")
        outcome = convert_soap(files, batch)
    else:
        _progress(stage=JobStage.uploading, message="Submitting files for extraction")
        outcome = await submit_and_poll(files, items=batch.items, on_items=lambda snapshot: _progress(items=snapshot))

    _progress(stage=JobStage.merging, message="Storing schema", items=outcome.items)
    store_outcome(session_id, outcome)
    if job_id is not None:
        for item in outcome.items:
            if item.status == ItemStatus.error:
                append_job_error(job_id, f"{item.filename}: {item.message}")

    if not outcome.ok:
        raise RuntimeError(outcome.error)

    entity_count = len((outcome.schema or {}).get("entities") or [])
    logger.info("[Upload] Session %s: stored schema with %d entities", session_id, entity_count)
    return UploadResult(
        kind=kind,
        correlationId=outcome.correlation_id or None,
        entityCount=entity_count,
        parseError=outcome.parse_error,
        items=list(outcome.items),
    )
