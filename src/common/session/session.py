# Copyright (c) 2025 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
File-backed sessions. Each session is one JSON document under ``storage.sessions_dir``.

Besides free-form data a session owns exactly one schema slot (``schema``, ``schemaText``,
``parseError``, ``selectedEntity``). Slot changes are written as one document replacement,
so readers never see a schema next to the text of another one.
"""

import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from ...config import config
from .schema import Session

logger = logging.getLogger(__name__)

SCHEMA_SLOT_KEYS = ("schema", "schemaText", "parseError", "selectedEntity")


def empty_slot() -> Dict[str, Any]:
    return {"schema": None, "schemaText": "", "parseError": None, "selectedEntity": 0}


def _jsonable(obj: Any) -> Any:
    """UUIDs and pydantic models inside session data are stored in their JSON form."""
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, dict):
        return {key: _jsonable(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(item) for item in obj]
    if hasattr(obj, "model_dump"):
        return obj.model_dump(by_alias=True, mode="json")
    return obj


class SessionManager:
    """Static helpers around the session JSON documents."""

    @staticmethod
    def now_iso() -> str:
        return datetime.now(UTC).isoformat()

    @staticmethod
    def get_session_path(session_id: UUID) -> Path:
        root = Path(config.storage.sessions_dir)
        root.mkdir(parents=True, exist_ok=True)
        return root / f"{session_id}.json"

    @staticmethod
    def _store(session_id: UUID, document: Dict[str, Any]) -> bool:
        # Write next to the target and rename, a crash never leaves half a document behind
        path = SessionManager.get_session_path(session_id)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("[Session] Failed to write %s: %s", path, e)
            return False
        return True

    @staticmethod
    def _load(session_id: UUID) -> Optional[Dict[str, Any]]:
        path = SessionManager.get_session_path(session_id)
        if not path.exists():
            return None
        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("[Session] Failed to read %s: %s", path, e)
            return None

    @staticmethod
    def _create(session_id: UUID) -> UUID:
        now = SessionManager.now_iso()
        session = Session(sessionId=session_id, createdAt=now, updatedAt=now, data=empty_slot())
        if not SessionManager._store(session_id, session.model_dump(mode="json")):
            raise RuntimeError("Unable to persist new session")
        logger.info("[Session] Created session %s", session_id)
        return session_id

    @staticmethod
    def create_session() -> UUID:
        """
        Create a session with an empty schema slot.

        :return: Session ID (UUID v4)
        :raises RuntimeError: the session file could not be written.
        """
        return SessionManager._create(uuid4())

    @staticmethod
    def create_session_with_id(session_id: UUID) -> UUID:
        """
        Create a session under a caller-chosen ID.

        :raises FileExistsError: a session with this ID already exists.
        :raises RuntimeError: the session file could not be written.
        """
        if SessionManager.session_exists(session_id):
            raise FileExistsError(f"Session {session_id} already exists")
        return SessionManager._create(session_id)

    @staticmethod
    def get_session(session_id: UUID) -> Optional[Dict[str, Any]]:
        """Whole session document, or None when it does not exist or cannot be read."""
        return SessionManager._load(session_id)

    @staticmethod
    def session_exists(session_id: UUID) -> bool:
        return SessionManager.get_session_path(session_id).exists()

    @staticmethod
    def update_session(session_id: UUID, data: Dict[str, Any]) -> bool:
        """
        Shallow-merge ``data`` into the session data.

        :return: False when the session does not exist or could not be written.
        """
        session = SessionManager._load(session_id)
        if session is None:
            logger.warning("[Session] Cannot update missing session %s", session_id)
            return False

        session.setdefault("data", {}).update(_jsonable(data))
        session["updatedAt"] = SessionManager.now_iso()
        return SessionManager._store(session_id, session)

    @staticmethod
    def get_session_data(session_id: UUID, key: Optional[str] = None) -> Optional[Any]:
        """Session data, or one entry of it when ``key`` is given."""
        session = SessionManager._load(session_id)
        if session is None:
            return None
        data = session.get("data") or {}
        return data if key is None else data.get(key)

    @staticmethod
    def delete_session(session_id: UUID) -> bool:
        path = SessionManager.get_session_path(session_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error("[Session] Failed to delete %s: %s", path, e)
            return False
        logger.info("[Session] Deleted session %s", session_id)
        return True

    # Schema slot

    @staticmethod
    def get_schema_slot(session_id: UUID) -> Optional[Dict[str, Any]]:
        """
        Schema slot of a session with defaults filled in.

        :return: Dict with the ``SCHEMA_SLOT_KEYS`` or None when the session does not exist.
        """
        data = SessionManager.get_session_data(session_id)
        if data is None:
            return None
        slot = empty_slot()
        slot.update({key: data[key] for key in SCHEMA_SLOT_KEYS if data.get(key) is not None})
        slot["selectedEntity"] = int(slot["selectedEntity"])
        return slot

    @staticmethod
    def save_schema_slot(session_id: UUID, slot: Dict[str, Any]) -> bool:
        """Write every slot key at once; missing keys are stored as None."""
        return SessionManager.update_session(session_id, {key: slot.get(key) for key in SCHEMA_SLOT_KEYS})

    @staticmethod
    def replace_schema(session_id: UUID, schema: Dict[str, Any], schema_text: str) -> bool:
        """
        Replace the current schema wholesale. Pending text edits and their parse error are dropped
        and the selection goes back to the first entity.
        """
        logger.info("[Session] Replacing schema of session %s", session_id)
        slot = empty_slot()
        slot.update(schema=schema, schemaText=schema_text)
        return SessionManager.save_schema_slot(session_id, slot)
