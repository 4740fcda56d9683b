"""Shared enumerations used across the workspace service."""

from __future__ import annotations

from enum import StrEnum

# -- Workspace files -----------------------------------------------------------


class FileAction(StrEnum):
    """Membership change applied by ``PATCH /workspaces/{id}/files``."""

    ADD = "add"
    REMOVE = "remove"
