# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import logging
from typing import Dict, Optional, Protocol

from .schema import ExtractionResult

logger = logging.getLogger(__name__)


class ResultStore(Protocol):
    """Where extraction results wait between the worker webhook and the next poll."""

    def put(self, request_id: str, result: ExtractionResult) -> None: ...

    def get(self, request_id: str) -> Optional[ExtractionResult]: ...


class InMemoryResultStore:
    """Process-wide dictionary keyed by correlation id. Entries are never evicted."""

    def __init__(self) -> None:
        self._results: Dict[str, ExtractionResult] = {}

    def put(self, request_id: str, result: ExtractionResult) -> None:
        self._results[request_id] = result
        logger.debug("[Extraction] Stored %s result for %s", result.status, request_id)

    def get(self, request_id: str) -> Optional[ExtractionResult]:
        return self._results.get(request_id)

    def clear(self) -> None:
        self._results.clear()


_store: ResultStore = InMemoryResultStore()


def get_result_store() -> ResultStore:
    """FastAPI dependency returning the process-wide result store."""
    return _store
