#  Copyright (C) 2010-2026 Evolveum and contributors
#
#  Licensed under the EUPL-1.2 or later.

from enum import Enum

# Centralized enums for the micro-service


class JobStatus(str, Enum):
    queued = "queued"
    running = "running"
    finished = "finished"
    failed = "failed"
    not_found = "not_found"


class JobStage(str, Enum):
    """Common stages for job progress. Keep names aligned with existing JSON values."""

    # Queueing / lifecycle
    queue = "queue"
    running = "running"
    failed = "failed"
    finished = "finished"

    # Upload pipeline phases
    classifying = "classifying"
    converting = "converting"
    uploading = "uploading"
    merging = "merging"


class UploadKind(str, Enum):
    """Processing path chosen for an upload batch."""

    scim = "scim"
    soap = "soap"
    generic = "generic"


class ItemStatus(str, Enum):
    pending = "pending"
    uploading = "uploading"
    processing = "processing"
    done = "done"
    error = "error"


class AttributeType(str, Enum):
    """Canonical attribute types of a connector schema."""

    string = "String"
    integer = "Int"
    boolean = "Bool"
    datetime = "Datetime"
