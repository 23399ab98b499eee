"""Distinct identifier types so user, project and request ids are never interchanged."""
from __future__ import annotations

from typing import NewType
from uuid import UUID

UserId = NewType("UserId", UUID)
ProjectId = NewType("ProjectId", UUID)
RequestId = NewType("RequestId", UUID)

__all__ = ["UserId", "ProjectId", "RequestId"]
