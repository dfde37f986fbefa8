"""
Catalog Service — AI career services sold through mobile-money checkout.
"""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careernest.config import Settings, get_settings
from careernest.gateway import GatewayError, PaymentGateway
from careernest.models.catalog import AIService, UserService
from careernest.models.payment import Transaction
from careernest.services.audit_service import AuditService
from careernest.services.mentor_payment_service import (
    PaymentResult,
    PaymentServiceError,
    external_reference,
)
from careernest.utils.dates import utcnow

logger = logging.getLogger(__name__)

DEFAULT_SERVICES = [
    ("CV Review", "AI feedback on structure, keywords and impact of your CV", "cv", Decimal("49.00")),
    ("Interview Coach", "Mock interview with scored answers and follow-up tips", "interview", Decimal("99.00")),
    ("Career Path Planner", "Personalised role roadmap based on your skills", "career", Decimal("149.00")),
    ("Cover Letter Writer", "Tailored cover letter drafts for a job posting", "cv", Decimal("39.00")),
]


class CatalogService:
    """Lists the AI service catalog and checks users out through the gateway."""

    def __init__(self, db: Session, gateway: PaymentGateway, settings: Optional[Settings] = None):
        self.db = db
        self.gateway = gateway
        self.settings = settings or get_settings()

    def list_services(self) -> list[AIService]:
        try:
            return (
                self.db.query(AIService)
                .filter(AIService.is_active.is_(True))
                .order_by(AIService.price.asc(), AIService.id.asc())
                .all()
            )
        except SQLAlchemyError as exc:
            logger.exception("Error fetching AI services")
            raise PaymentServiceError("Failed to fetch services") from exc

    def list_user_services(self, user_id: int) -> list[dict]:
        try:
            rows = (
                self.db.query(UserService, AIService.name)
                .join(AIService, UserService.service_id == AIService.id)
                .filter(UserService.user_id == user_id)
                .order_by(UserService.created_at.desc(), UserService.id.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            logger.exception("Error fetching purchases for user %s", user_id)
            raise PaymentServiceError("Failed to fetch user services") from exc

        return [
            {
                "id": us.id,
                "service_id": us.service_id,
                "service_name": name,
                "status": us.status,
                "transaction_id": us.transaction_id,
                "created_at": us.created_at,
            }
            for us, name in rows
        ]

    def purchase(self, user_id: int, service_id: int, phone_number: str) -> PaymentResult:
        try:
            service = (
                self.db.query(AIService)
                .filter(AIService.id == service_id, AIService.is_active.is_(True))
                .first()
            )
        except SQLAlchemyError:
            logger.exception("Error loading AI service %s", service_id)
            return PaymentResult(success=False, message="Failed to start purchase")

        if service is None:
            return PaymentResult(success=False, message="Service not found")

        currency = service.currency or self.settings.SETTLEMENT_CURRENCY
        description = f"Purchase of {service.name}"
        external_id = external_reference("ai_service", user_id)

        try:
            descriptor = self.gateway.create_transaction(
                service.price, currency, external_id, phone_number, "msisdn", description
            )
            reference_id = self.gateway.request_to_pay(descriptor)
        except GatewayError as exc:
            logger.warning("Gateway rejected purchase user=%s service=%s: %s", user_id, service_id, exc.message)
            return PaymentResult(success=False, message=exc.message)

        now = utcnow()
        try:
            purchase = UserService(
                user_id=user_id,
                service_id=service.id,
                status="pending",
                transaction_id=reference_id,
                created_at=now,
                updated_at=now,
            )
            self.db.add(purchase)
            self.db.flush()

            self.db.add(Transaction(
                user_id=user_id,
                external_id=external_id,
                momo_transaction_id=reference_id,
                type="collection",
                purpose="ai_service",
                amount=service.price,
                currency=currency,
                status="pending",
                payer_party_id=phone_number,
                description=description,
                user_service_id=purchase.id,
            ))
            AuditService.log(
                self.db, user_id, "SERVICE_PURCHASE_INITIATED",
                entity_ref=reference_id,
                payload={"service_id": service.id, "amount": service.price, "currency": currency},
                commit=False,
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Purchase accepted by gateway but not stored: user=%s ref=%s external_id=%s",
                user_id, reference_id, external_id,
            )
            return PaymentResult(success=False, message="Failed to start purchase")

        return PaymentResult(
            success=True,
            message="Payment request sent. Approve it on your phone.",
            transaction_id=reference_id,
        )


def ensure_default_catalog(db: Session) -> int:
    """Insert the default AI services when the catalog is empty. Returns rows added."""
    if db.query(AIService.id).first() is not None:
        return 0
    for name, description, category, price in DEFAULT_SERVICES:
        db.add(AIService(name=name, description=description, category=category, price=price))
    db.commit()
    return len(DEFAULT_SERVICES)
