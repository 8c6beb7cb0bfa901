"""Officer API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from permit_workflow.domain.enums import OfficerRole


class OfficerCreateRequest(BaseModel):
    """Request body for registering an officer. Role cannot change later."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role: OfficerRole
    is_active: bool = True


class OfficerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: OfficerRole
    is_active: bool
    created_at: datetime | None


class OfficerWorkloadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    officer_id: int
    name: str
    role: OfficerRole
    open_applications: int
