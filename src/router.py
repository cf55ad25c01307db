#  Copyright (C) 2010-2026 Evolveum and contributors
#
#  Licensed under the EUPL-1.2 or later.

from fastapi import APIRouter

from .common.session.router import router as session_router
from .modules.editor.router import router as editor_router
from .modules.extraction.router import router as extraction_router
from .modules.upload.router import router as upload_router

root_router = APIRouter()

"""
Root API router that aggregates all sub-module routers under their respective prefixes and tags.
"""

# Session management
root_router.include_router(session_router, prefix="/session", tags=["Session"])

# Include each endpoint router with a prefix and optional tags
root_router.include_router(upload_router, prefix="/upload", tags=["Upload"])
root_router.include_router(editor_router, prefix="/schema", tags=["Schema"])
root_router.include_router(extraction_router, prefix="/extraction", tags=["Extraction"])
