# Copyright (c) 2025 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field


class Session(BaseModel):
    """
    On-disk session document (camelCase, snake_case accepted when reading older files).
    """

    sessionId: UUID = Field(..., validation_alias=AliasChoices("sessionId", "session_id"))
    createdAt: str = Field(..., validation_alias=AliasChoices("createdAt", "created_at"))
    updatedAt: str = Field(..., validation_alias=AliasChoices("updatedAt", "updated_at"))
    data: Dict[str, Any] = Field(default_factory=dict, description="Schema slot plus free-form entries")


class SessionCreateResponse(BaseModel):
    sessionId: UUID = Field(..., description="Identifier to use in upload and schema requests")
    message: str


class SessionSummary(BaseModel):
    """Short description of the schema slot, for clients that only need to know what is loaded."""

    hasSchema: bool = Field(default=False)
    entityCount: int = Field(default=0)
    parseError: Optional[str] = Field(default=None)
    uploadJobId: Optional[str] = Field(default=None, description="Last upload job of the session")


class SessionDataResponse(BaseModel):
    sessionId: UUID
    data: Dict[str, Any] = Field(..., description="Session data including the schema slot")
    summary: SessionSummary = Field(default_factory=SessionSummary)
    createdAt: str
    updatedAt: str


class SessionUpdateRequest(BaseModel):
    data: Dict[str, Any] = Field(..., description="Entries merged into the session data")


class SessionMessageResponse(BaseModel):
    sessionId: UUID
    message: str
