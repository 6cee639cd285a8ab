"""
Pydantic schemas for API request/response contracts.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.repositories import Permission

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# Request schemas
class CreateUserRequest(BaseModel):
    """Request schema for POST /users."""

    username: str = Field(..., min_length=2, max_length=32, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=8, max_length=256)
    email: Optional[str] = Field(None, max_length=254, pattern=EMAIL_PATTERN)
    description: Optional[str] = Field(None, max_length=1024)


class CreateSessionRequest(BaseModel):
    """Request schema for POST /sessions."""

    username: str = Field(..., min_length=1, max_length=32)
    password: str = Field(..., min_length=1, max_length=256)


class CreateOrganisationRequest(BaseModel):
    """Request schema for POST /organisations."""

    name: str = Field(..., min_length=1, max_length=64)
    description: Optional[str] = Field(None, max_length=1024)


class CreateProjectRequest(BaseModel):
    """Request schema for POST /projects."""

    name: str = Field(..., min_length=1, max_length=64)
    description: Optional[str] = Field(None, max_length=1024)
    organisation_id: Optional[str] = Field(
        None,
        description="Organisation to create the project under; the caller must own it.",
    )


class UpdatePermissionsRequest(BaseModel):
    """Request schema for PUT /projects/{id}/permissions/{user_id}."""

    permissions: int = Field(..., ge=0, le=int(Permission.all()))


# Response schemas
class UserResponse(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(BaseModel):
    token: str
    user_id: str
    created_at: datetime
    expires_at: datetime


class OrganisationResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    created_at: datetime
    projects: int = 0

    model_config = ConfigDict(from_attributes=True)


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    organisation_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PermissionsResponse(BaseModel):
    user_id: str
    project_id: str
    permissions: int
    flags: list[str]

    @classmethod
    def from_bits(cls, user_id: str, project_id: str, bits: int) -> "PermissionsResponse":
        granted = Permission(bits)
        return cls(
            user_id=user_id,
            project_id=project_id,
            permissions=int(granted),
            flags=[flag.name.lower() for flag in Permission if flag in granted],
        )


class DatabaseStatsResponse(BaseModel):
    organisations: int
    projects: int
    users: int
    online: bool
    collected_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AnalyticsResponse(BaseModel):
    requests: int
    db_calls: int
    database: Optional[DatabaseStatsResponse] = None


class HealthResponse(BaseModel):
    status: str
    database: bool
    cache: Optional[bool] = None
