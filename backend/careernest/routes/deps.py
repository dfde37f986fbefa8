"""
Route dependencies — wires request-scoped services to the database and gateway.
"""
from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from careernest.database import get_db
from careernest.gateway import PaymentGateway, get_gateway_client
from careernest.services.catalog_service import CatalogService
from careernest.services.mentor_payment_service import (
    MentorPaymentService,
    PaymentServiceError,
    TransactionNotFoundError,
)


def get_payment_service(
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_gateway_client),
) -> MentorPaymentService:
    return MentorPaymentService(db, gateway)


def get_catalog_service(
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_gateway_client),
) -> CatalogService:
    return CatalogService(db, gateway)


def as_http_error(exc: PaymentServiceError) -> HTTPException:
    """Map service failures onto HTTP errors with a generic message."""
    if isinstance(exc, TransactionNotFoundError):
        return HTTPException(status_code=404, detail="Transaction not found")
    return HTTPException(status_code=500, detail=str(exc))
