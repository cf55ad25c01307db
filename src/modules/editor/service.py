# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
Session-backed schema editing: loads the schema slot into an EditorState, applies edits and writes the slot back.
"""

import logging
from typing import Callable, Optional
from uuid import UUID

from ...common.schema import ConnectorSchema
from ...common.session.session import SessionManager
from .model import EditorState, EditResult, clamp_selection, duplicate_names
from .schema import SchemaSlot, SchemaStateResponse
from .serialization import dump_schema, load_schema_text

logger = logging.getLogger(__name__)


class SchemaSlotNotFound(LookupError):
    """The session holding the slot does not exist."""


class DownloadNotAllowed(ValueError):
    """The slot holds text that does not parse and the caller did not ask for it as-is."""


def get_slot(session_id: UUID) -> SchemaSlot:
    raw = SessionManager.get_schema_slot(session_id)
    if raw is None:
        raise SchemaSlotNotFound(f"Session {session_id} not found")
    return SchemaSlot.model_validate(raw)


def to_state(slot: SchemaSlot) -> EditorState:
    schema = ConnectorSchema.model_validate(slot.schema_) if slot.schema_ is not None else None
    return EditorState(schema=schema, selected=slot.selectedEntity)


def describe(slot: SchemaSlot) -> SchemaStateResponse:
    """Slot plus duplicate-name warnings for the current schema."""
    warnings = duplicate_names(to_state(slot).schema)
    return SchemaStateResponse(**slot.model_dump(by_alias=True), warnings=warnings)


def _save(session_id: UUID, slot: SchemaSlot) -> SchemaSlot:
    if not SessionManager.save_schema_slot(session_id, slot.model_dump(by_alias=True)):
        raise SchemaSlotNotFound(f"Session {session_id} not found or update failed")
    return slot


def apply_edit(session_id: UUID, operation: Callable[[EditorState], EditResult]) -> SchemaSlot:
    """
    Run one edit operation against the stored schema.
    The edited schema becomes the new text and clears any pending parse error; unchanged results are not written.
    """
    slot = get_slot(session_id)
    result = operation(to_state(slot))
    if not result.changed:
        return slot

    state = result.state
    updated = SchemaSlot(
        schema=state.schema.to_document() if state.schema else None,
        schemaText=dump_schema(state.schema),
        parseError=None,
        selectedEntity=state.selected,
    )
    logger.debug("[Editor] Applied %s to session %s", getattr(operation, "__name__", "edit"), session_id)
    return _save(session_id, updated)


def set_text(session_id: UUID, text: str) -> SchemaSlot:
    """
    Replace the schema from user-edited text.
    Rejected text is kept for further editing next to its parse error, the previous schema stays in place.
    """
    slot = get_slot(session_id)
    loaded = load_schema_text(text)
    if loaded.ok:
        schema = loaded.schema
        count = len(schema.entities) if schema else 0
        updated = SchemaSlot(
            schema=schema.to_document() if schema else None,
            schemaText=text,
            parseError=None,
            selectedEntity=clamp_selection(slot.selectedEntity, count),
        )
    else:
        logger.info("[Editor] Schema text of session %s rejected: %s", session_id, loaded.error)
        count = len(slot.schema_.get("entities") or []) if slot.schema_ else 0
        updated = SchemaSlot(
            schema=slot.schema_,
            schemaText=text,
            parseError=loaded.error,
            selectedEntity=clamp_selection(slot.selectedEntity, count),
        )
    return _save(session_id, updated)


def download(session_id: UUID, raw: bool = False) -> Optional[str]:
    """
    Content of `schema.json`: the canonical pretty-printed schema, or with `raw` the current text as-is.
    Returns None when there is nothing to download.

    :raises DownloadNotAllowed: the text does not parse and `raw` was not requested.
    """
    slot = get_slot(session_id)
    if slot.parseError:
        if not raw:
            raise DownloadNotAllowed(f"Schema text is invalid: {slot.parseError}")
        return slot.schemaText
    if slot.schema_ is None:
        return slot.schemaText if raw and slot.schemaText else None
    return dump_schema(slot.schema_)
