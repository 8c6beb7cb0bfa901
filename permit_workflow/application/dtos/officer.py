"""DTOs for officers (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from permit_workflow.domain.enums import OfficerRole


@dataclass(frozen=True)
class OfficerCreate:
    """Input for registering an officer."""

    name: str
    email: str
    role: OfficerRole
    is_active: bool = True


@dataclass(frozen=True)
class OfficerResult:
    """Officer read model. Role is immutable after creation."""

    id: int
    name: str
    email: str
    role: OfficerRole
    is_active: bool
    created_at: datetime | None = None


@dataclass(frozen=True)
class OfficerWorkload:
    """Open-application count for one active officer (derived by query)."""

    officer_id: int
    name: str
    role: OfficerRole
    open_applications: int
