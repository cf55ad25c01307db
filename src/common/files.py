# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadedFile:
    """A user-selected file held in memory for the duration of one upload batch."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def file_type(self) -> str:
        return self.content_type or DEFAULT_CONTENT_TYPE

    def has_suffix(self, *suffixes: str) -> bool:
        name = self.filename.lower()
        return any(name.endswith(s) for s in suffixes)

    def text(self, limit: Optional[int] = None) -> str:
        """Decode the file (or its first `limit` bytes) as UTF-8, trimmed; undecodable bytes are replaced."""
        data = self.content if limit is None else self.content[:limit]
        return data.decode("utf-8", errors="replace").lstrip("\ufeff").strip()
