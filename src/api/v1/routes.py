"""
API v1 routes.

Defines REST endpoints for registration and the admin surface.
"""

import logging

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_admin_secret, get_admin_service, get_registration_service
from src.api.models import (
    AdminAuthRequest,
    ErrorResponse,
    LoginResponse,
    MessageRequest,
    MessageResponse,
    OtpSentResponse,
    RegisteredResponse,
    RegisterRequest,
    StatusMessage,
    UserResponse,
    UserSummary,
)
from src.domain.admin import AdminService, NotifyStatus
from src.domain.exceptions import InfrastructureError
from src.domain.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])


@router.post(
    "/register",
    response_model=OtpSentResponse | RegisteredResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation, duplicate email or OTP failure"},
        500: {"model": ErrorResponse, "description": "OTP delivery or storage failure"},
    },
    summary="Register a new user",
    description="Submit name, email, mobile and city to receive a 6-digit OTP by email, "
    "then submit the same data with the OTP to complete registration.",
)
async def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> OtpSentResponse | RegisteredResponse:
    """
    Issue an OTP, or confirm a registration with one.

    - **name**, **email**, **mobile**, **city**: registrant data
    - **otp**: code received by email (second phase only)
    """
    if request_data.otp:
        user = service.confirm_registration(request_data.email, request_data.otp)
        return RegisteredResponse(
            message="Registration successful",
            user=UserSummary(id=user.id, name=user.name, email=user.email),
        )

    pending = service.request_registration(
        request_data.name, request_data.email, request_data.mobile, request_data.city
    )
    return OtpSentResponse(
        message="OTP sent",
        email=pending.email,
        expires_in_seconds=service.otp_ttl_seconds,
    )


@router.get(
    "/users",
    response_model=list[UserResponse],
    summary="List registered users",
)
async def list_users(
    city: str | None = None,
    search: str | None = None,
    service: AdminService = Depends(get_admin_service),
) -> list[UserResponse]:
    """
    List registered users, optionally filtered by city or free-text search.

    Storage failures yield an empty list so the admin dashboard keeps working.
    """
    try:
        users = service.list_users(city=city, search=search)
    except InfrastructureError:
        logger.exception("Error fetching users")
        return []
    return [UserResponse.from_user(user) for user in users]


@router.post(
    "/admin/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid admin password"}},
    summary="Check the admin password",
)
async def admin_login(
    payload: AdminAuthRequest,
    service: AdminService = Depends(get_admin_service),
) -> LoginResponse:
    service.authenticate(payload.password)
    return LoginResponse(authenticated=True)


@router.post(
    "/clear-users",
    response_model=StatusMessage,
    responses={401: {"model": ErrorResponse, "description": "Invalid admin password"}},
    summary="Delete all registered users",
)
async def clear_users(
    payload: AdminAuthRequest | None = Body(default=None),
    header_secret: str | None = Depends(get_admin_secret),
    service: AdminService = Depends(get_admin_service),
) -> StatusMessage:
    """
    Empty the user collection.

    The admin password is read from the body, or from the X-Admin-Secret header.
    """
    secret = payload.password if payload and payload.password else header_secret
    service.clear_users(secret)
    return StatusMessage(message="All users cleared successfully")


@router.post(
    "/message",
    response_model=MessageResponse,
    responses={
        207: {"model": MessageResponse, "description": "Some messages failed to send"},
        400: {"model": ErrorResponse, "description": "Missing message or no valid users"},
        500: {"model": MessageResponse, "description": "No message could be sent"},
    },
    summary="Email a message to selected users",
)
async def send_message(
    payload: MessageRequest,
    service: AdminService = Depends(get_admin_service),
) -> JSONResponse:
    """
    Send a message to each selected user.

    - **message**: text inserted into each email
    - **userIds**: ids of the users to notify; unknown ids are ignored
    """
    result = service.notify(payload.user_ids, payload.message)
    outcome = result.status

    messages = {
        NotifyStatus.SENT: ("Messages sent successfully", status.HTTP_200_OK),
        NotifyStatus.PARTIAL: ("Some messages failed to send", status.HTTP_207_MULTI_STATUS),
        NotifyStatus.FAILED: ("Failed to send messages", status.HTTP_500_INTERNAL_SERVER_ERROR),
    }
    text, status_code = messages[outcome]

    body = MessageResponse(
        success=outcome is NotifyStatus.SENT,
        message=text,
        sent_to=[r.email for r in result.sent],
        failed_emails=[r.email for r in result.failed],
        sent_count=len(result.sent),
        failed_count=len(result.failed),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))
