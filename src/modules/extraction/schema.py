# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExtractionResult(BaseModel):
    """Body posted by the extraction worker once a batch is processed."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(default="finished", description="Worker status, e.g. finished or failed")
    result: Optional[Any] = Field(default=None, description="Extracted schema, a JSON string or object")
    error: Optional[str] = Field(default=None, description="Worker error message")

    @property
    def ready(self) -> bool:
        return bool(self.result)


class ExtractionPollResponse(BaseModel):
    ok: bool = Field(..., description="True when a result is attached")
    result: Optional[Any] = Field(default=None, description="Extracted schema as posted by the worker")
    error: Optional[str] = Field(default=None, description="Worker error message, if the batch failed")
