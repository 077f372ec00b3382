"""Pydantic models describing API payloads."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


IncidentStatus = Literal["pending", "approved", "rejected"]


# Profile Schemas
class ProfileBase(BaseModel):
    """Fields shared by profile payloads."""

    email: str | None = None
    name: str | None = None
    locality: str | None = None


class ProfileCreate(ProfileBase):
    """Schema for registering a profile alongside a new identity."""

    id: str = Field(min_length=1, max_length=64)
    email: EmailStr
    locality: str = Field(min_length=1, max_length=200)


class ProfileUpdate(BaseModel):
    """Self-service profile edit; omitted fields are left untouched."""

    name: str | None = Field(default=None, max_length=200)
    locality: str | None = Field(default=None, min_length=1, max_length=200)


class AdminFlagUpdate(BaseModel):
    """Schema for toggling a profile's admin flag."""

    is_admin: bool


class ProfileResponse(ProfileBase):
    """Schema for profile API response."""

    id: str
    is_admin: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Incident Schemas
class IncidentCreate(BaseModel):
    """Schema for submitting a new incident report."""

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1, max_length=300)
    image_url: str | None = Field(default=None, max_length=1024)
    user_name: str | None = Field(
        default=None,
        description="Display name to store on the report; resolved from the profile when blank.",
    )

    @field_validator("title", "description", "location")
    @classmethod
    def reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class IncidentStatusUpdate(BaseModel):
    """Schema for the administrator approve/reject action."""

    status: Literal["approved", "rejected"]


class IncidentResponse(BaseModel):
    """Schema for incident API response."""

    id: str
    title: str
    description: str
    location: str
    locality: str
    image_url: str | None = None
    created_at: datetime
    status: IncidentStatus
    user_id: str
    user_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


# Notification Schemas
class NotifyRequest(BaseModel):
    """Body of the notify-locality call."""

    incident_id: str = Field(alias="incidentId", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class FailedRecipient(BaseModel):
    email: str
    error: str


class NotificationResults(BaseModel):
    successful: int
    failed: int
    details: list[FailedRecipient] | None = None


class NotificationSummaryResponse(BaseModel):
    """Schema for the notify-locality response."""

    success: bool
    message: str
    results: NotificationResults
