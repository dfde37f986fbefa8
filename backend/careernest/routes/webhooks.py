"""
Webhook Routes — Inbound MTN MoMo request-to-pay callbacks.

MTN does not sign callbacks. A callback is only a prompt to look the
transaction up: the outcome applied is the one the gateway reports.
"""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from careernest.config import get_settings
from careernest.database import get_db
from careernest.gateway import GatewayError
from careernest.gateway.base import normalize_status
from careernest.models.payment import Transaction
from careernest.routes.deps import as_http_error, get_payment_service
from careernest.schemas.schemas import MomoCallbackPayload, CallbackAck
from careernest.services.mentor_payment_service import MentorPaymentService, PaymentServiceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/momo", tags=["Webhooks"])


def _check_token(token: Optional[str]) -> None:
    settings = get_settings()
    expected = settings.MOMO_CALLBACK_TOKEN
    if not expected:
        if settings.MOMO_MODE != "mock":
            logger.error("Rejecting MoMo callback: MOMO_CALLBACK_TOKEN is not configured")
            raise HTTPException(status_code=401, detail="Callback token not configured")
        return
    if not hmac.compare_digest(token or "", expected):
        raise HTTPException(status_code=401, detail="Invalid callback token")


def _resolve_reference(db: Session, payload: MomoCallbackPayload, header_ref: Optional[str]) -> Optional[str]:
    reference = payload.reference_id or header_ref
    if reference:
        return reference
    if payload.external_id:
        return (
            db.query(Transaction.momo_transaction_id)
            .filter(Transaction.external_id == payload.external_id)
            .scalar()
        )
    return None


@router.api_route("/callback", methods=["POST", "PUT"], response_model=CallbackAck)
def momo_callback(
    payload: MomoCallbackPayload,
    token: Optional[str] = Query(None),
    x_reference_id: Optional[str] = Header(None, alias="X-Reference-Id"),
    x_callback_token: Optional[str] = Header(None, alias="X-Callback-Token"),
    db: Session = Depends(get_db),
    service: MentorPaymentService = Depends(get_payment_service),
):
    """Reconcile a transaction the provider says has changed. Redeliveries are no-ops."""
    _check_token(x_callback_token or token)

    reference = _resolve_reference(db, payload, x_reference_id)
    if not reference:
        raise HTTPException(status_code=404, detail="Transaction not found")

    claimed = normalize_status(payload.status)
    logger.info("MoMo callback ref=%s status=%s", reference, payload.status)
    if claimed == "PENDING":
        return CallbackAck(applied=False, status="pending")

    reason = payload.reason
    if isinstance(reason, dict):
        reason = reason.get("code") or reason.get("message")

    try:
        result = service.reconcile_with_gateway(reference, fallback_reason=reason)
    except PaymentServiceError as exc:
        raise as_http_error(exc)
    except GatewayError as exc:
        logger.warning("Could not confirm callback for %s with the gateway: %s", reference, exc.message)
        raise HTTPException(status_code=503, detail="Could not confirm payment status with provider")

    if result.status == "pending":
        logger.warning("Callback for %s claimed %s but the gateway still reports PENDING", reference, claimed)
    return CallbackAck(applied=result.applied, status=result.status)
