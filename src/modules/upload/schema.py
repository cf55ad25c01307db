# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...common.enums import UploadKind
from ...common.schema import UploadItem


class UploadResult(BaseModel):
    """Result stored on a finished upload job."""

    model_config = ConfigDict(populate_by_name=True)

    kind: UploadKind = Field(..., description="Processing path the batch took")
    correlationId: Optional[str] = Field(default=None, description="Extraction batch id (extraction path only)")
    entityCount: int = Field(default=0, description="Number of entities in the stored schema")
    parseError: Optional[str] = Field(default=None, description="Set when the result could not be read as a schema")
    items: List[UploadItem] = Field(default_factory=list, description="Final per-file status")
