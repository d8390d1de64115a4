"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field names follow the camelCase JSON the web client already sends and reads.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.domain.models import User


class CamelModel(BaseModel):
    """Base model accepting both camelCase aliases and field names."""

    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(BaseModel):
    """
    Request model for both registration phases.

    Without ``otp`` a code is issued; with ``otp`` the registration is confirmed.
    Fields default to empty so missing values are reported by the domain as 400s.
    """

    name: str = ""
    email: str = ""
    mobile: str = ""
    city: str = ""
    otp: str | None = Field(default=None, description="6-digit code received by email")


class OtpSentResponse(CamelModel):
    """Response model for an issued code."""

    message: str
    email: str
    expires_in_seconds: int = Field(alias="expiresInSeconds")


class UserSummary(BaseModel):
    """Public part of a newly registered user."""

    id: str
    name: str
    email: str


class RegisteredResponse(BaseModel):
    """Response model for a confirmed registration."""

    message: str
    user: UserSummary


class UserResponse(CamelModel):
    """A registered user as listed on the admin surface."""

    id: str
    name: str
    email: str
    mobile: str
    city: str
    registered_at: datetime = Field(alias="registeredAt")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            mobile=user.mobile,
            city=user.city,
            registered_at=user.registered_at,
        )


class AdminAuthRequest(BaseModel):
    """Request body carrying the admin secret."""

    password: str | None = None


class LoginResponse(BaseModel):
    authenticated: bool


class MessageRequest(CamelModel):
    """Request model for a bulk notification."""

    message: str = ""
    user_ids: list[str] = Field(default_factory=list, alias="userIds")


class MessageResponse(CamelModel):
    """Summary of a bulk notification."""

    success: bool
    message: str
    sent_to: list[str] = Field(alias="sentTo")
    failed_emails: list[str] = Field(alias="failedEmails")
    sent_count: int = Field(alias="sentCount")
    failed_count: int = Field(alias="failedCount")


class StatusMessage(BaseModel):
    """Plain acknowledgement."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
    error: str
    kind: str
    field: str | None = None
