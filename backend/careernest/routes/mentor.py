"""
Mentor Routes — Payments dashboard: sessions, requests, earnings and status polling.
"""
from fastapi import APIRouter, Depends, Header

from careernest.config import get_settings
from careernest.routes.deps import as_http_error, get_payment_service
from careernest.schemas.schemas import (
    MentorshipSessionView, PaymentRequestView, EarningsStatsResponse,
    CreatePaymentRequest, PaymentActionResponse, PaymentStatusResponse,
)
from careernest.services.mentor_payment_service import MentorPaymentService, PaymentServiceError
from careernest.utils.rate_limiter import rate_limit

settings = get_settings()

router = APIRouter(prefix="/api/mentor", tags=["Mentor Payments"])

_payment_throttle = rate_limit(
    "payment-request",
    requests=settings.PAYMENT_REQUEST_RATE_LIMIT,
    window=settings.PAYMENT_REQUEST_RATE_WINDOW,
)


@router.get("/sessions", response_model=list[MentorshipSessionView])
def list_sessions(
    mentor_id: int = Header(..., alias="mentor-id"),
    service: MentorPaymentService = Depends(get_payment_service),
):
    """Mentor's sessions, most recently scheduled first."""
    try:
        return service.get_mentor_sessions(mentor_id)
    except PaymentServiceError as exc:
        raise as_http_error(exc)


@router.get("/payment-requests", response_model=list[PaymentRequestView])
def list_payment_requests(
    mentor_id: int = Header(..., alias="mentor-id"),
    service: MentorPaymentService = Depends(get_payment_service),
):
    try:
        return service.get_payment_requests(mentor_id)
    except PaymentServiceError as exc:
        raise as_http_error(exc)


@router.get("/earnings", response_model=EarningsStatsResponse)
def get_earnings(
    mentor_id: int = Header(..., alias="mentor-id"),
    service: MentorPaymentService = Depends(get_payment_service),
):
    """Lifetime, pending and month-over-month earnings."""
    try:
        stats = service.get_earnings_stats(mentor_id)
    except PaymentServiceError as exc:
        raise as_http_error(exc)
    return EarningsStatsResponse.model_validate(stats)


@router.post("/create-payment-request", response_model=PaymentActionResponse)
def create_payment_request(
    payload: CreatePaymentRequest,
    mentor_id: int = Header(..., alias="mentor-id"),
    service: MentorPaymentService = Depends(get_payment_service),
    _throttle: bool = Depends(_payment_throttle),
):
    """Send a mobile-money collection request to a client."""
    result = service.create_payment_request(
        mentor_id, payload.client_phone, payload.amount, payload.description
    )
    return PaymentActionResponse.model_validate(result)


@router.post("/request-session-payment/{session_id}", response_model=PaymentActionResponse)
def request_session_payment(
    session_id: int,
    mentor_id: int = Header(..., alias="mentor-id"),
    service: MentorPaymentService = Depends(get_payment_service),
    _throttle: bool = Depends(_payment_throttle),
):
    """Request payment for a completed, unpaid session."""
    result = service.request_session_payment(mentor_id, session_id)
    return PaymentActionResponse.model_validate(result)


@router.get("/payment-status/{transaction_id}", response_model=PaymentStatusResponse)
def get_payment_status(
    transaction_id: str,
    mentor_id: int = Header(..., alias="mentor-id"),
    service: MentorPaymentService = Depends(get_payment_service),
):
    """Current status of a request; clients poll this until completed or failed."""
    try:
        check = service.check_payment_status(transaction_id, owner_id=mentor_id)
    except PaymentServiceError as exc:
        raise as_http_error(exc)
    return PaymentStatusResponse(
        status=check.status,
        message=check.message,
        poll_interval_seconds=settings.STATUS_POLL_INTERVAL_SECONDS,
        max_poll_attempts=settings.STATUS_POLL_MAX_ATTEMPTS,
    )
