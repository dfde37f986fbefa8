"""
AI Services Routes — Service catalog and mobile-money checkout.
"""
from fastapi import APIRouter, Depends, Header

from careernest.config import get_settings
from careernest.routes.deps import as_http_error, get_catalog_service, get_payment_service
from careernest.schemas.schemas import (
    AIServiceView, UserServiceView, PurchaseRequest,
    PaymentActionResponse, PaymentStatusResponse,
)
from careernest.services.catalog_service import CatalogService
from careernest.services.mentor_payment_service import MentorPaymentService, PaymentServiceError
from careernest.utils.rate_limiter import rate_limit

settings = get_settings()

router = APIRouter(prefix="/api", tags=["AI Services"])


@router.get("/ai-services", response_model=list[AIServiceView])
def list_ai_services(catalog: CatalogService = Depends(get_catalog_service)):
    try:
        return catalog.list_services()
    except PaymentServiceError as exc:
        raise as_http_error(exc)


@router.get("/user-services", response_model=list[UserServiceView])
def list_user_services(
    user_id: int = Header(..., alias="user-id"),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Services the user has bought or is paying for."""
    try:
        return catalog.list_user_services(user_id)
    except PaymentServiceError as exc:
        raise as_http_error(exc)


@router.post("/ai-services/purchase", response_model=PaymentActionResponse)
def purchase_ai_service(
    payload: PurchaseRequest,
    user_id: int = Header(..., alias="user-id"),
    catalog: CatalogService = Depends(get_catalog_service),
    _throttle: bool = Depends(rate_limit(
        "service-purchase",
        requests=settings.PAYMENT_REQUEST_RATE_LIMIT,
        window=settings.PAYMENT_REQUEST_RATE_WINDOW,
    )),
):
    result = catalog.purchase(user_id, payload.service_id, payload.phone_number)
    return PaymentActionResponse.model_validate(result)


@router.get("/ai-services/payment-status/{transaction_id}", response_model=PaymentStatusResponse)
def get_purchase_status(
    transaction_id: str,
    user_id: int = Header(..., alias="user-id"),
    service: MentorPaymentService = Depends(get_payment_service),
):
    try:
        check = service.check_payment_status(transaction_id, owner_id=user_id)
    except PaymentServiceError as exc:
        raise as_http_error(exc)
    return PaymentStatusResponse(
        status=check.status,
        message=check.message,
        poll_interval_seconds=settings.STATUS_POLL_INTERVAL_SECONDS,
        max_poll_attempts=settings.STATUS_POLL_MAX_ATTEMPTS,
    )
