from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles handed over by the upstream authentication layer."""

    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"


class RejectionKind(str, Enum):
    """Why a single record of a bulk submission was not stored."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


class RecordStatus(str, Enum):
    CREATED = "created"
