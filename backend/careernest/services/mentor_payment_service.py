"""
Mentor Payment Service — Earnings figures, payment requests and reconciliation.

Payment requests are pushed to the mobile-money gateway first; the local
PaymentRequest and Transaction rows are then written in a single commit so a
request never exists without its transaction. Session payments first commit a
`pending` request as a claim on the session, released again if the gateway
refuses. Outcomes are confirmed against the gateway (`reconcile_with_gateway`)
and applied through `update_payment_status`, the only place that moves a
payment to a terminal state.
"""
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from careernest.config import Settings, get_settings
from careernest.gateway import GatewayError, PaymentGateway
from careernest.models.catalog import UserService
from careernest.models.mentorship import MentorshipSession
from careernest.models.payment import PaymentRequest, Transaction
from careernest.models.user import User
from careernest.services.audit_service import AuditService
from careernest.utils.dates import month_windows, utcnow
from careernest.utils.validators import normalize_msisdn, to_money, validate_amount, validate_msisdn

logger = logging.getLogger(__name__)

NOT_ELIGIBLE_MESSAGE = "Session not found or not eligible for payment"

_TRANSACTION_STATUS = {"paid": "completed", "failed": "failed"}

_STATUS_MESSAGES = {
    "pending": "Waiting for payment confirmation",
    "completed": "Payment completed successfully",
    "failed": "Payment failed",
}


class PaymentServiceError(Exception):
    """A read or write against stored payment records failed."""


class TransactionNotFoundError(PaymentServiceError):
    pass


@dataclass
class PaymentResult:
    success: bool
    message: str
    transaction_id: Optional[str] = None


@dataclass
class EarningsStats:
    total_earnings: Decimal
    pending_payments: Decimal
    completed_sessions: int
    monthly_growth: float


@dataclass
class ReconciliationResult:
    applied: bool
    status: str


@dataclass
class StatusCheck:
    status: str
    message: str


def external_reference(prefix: str, owner_id: int) -> str:
    """Caller-side reference the gateway uses to deduplicate retries."""
    return f"{prefix}_{owner_id}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


class MentorPaymentService:
    """Business logic behind the mentor payments dashboard."""

    def __init__(self, db: Session, gateway: PaymentGateway, settings: Optional[Settings] = None):
        self.db = db
        self.gateway = gateway
        self.settings = settings or get_settings()

    # ─── Reads ───────────────────────────────────────────────────────

    def get_mentor_sessions(self, mentor_id: int) -> list[dict]:
        try:
            rows = (
                self.db.query(MentorshipSession, User.username, User.phone)
                .outerjoin(User, MentorshipSession.client_id == User.id)
                .filter(MentorshipSession.mentor_id == mentor_id)
                .order_by(MentorshipSession.scheduled_at.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            logger.exception("Error fetching sessions for mentor %s", mentor_id)
            raise PaymentServiceError("Failed to fetch mentor sessions") from exc

        return [
            {
                "id": s.id,
                "mentor_id": s.mentor_id,
                "client_id": s.client_id,
                "session_type": s.session_type,
                "duration": s.duration,
                "rate": to_money(s.rate),
                "scheduled_at": s.scheduled_at,
                "status": s.status,
                "payment_status": s.payment_status,
                "client_name": client_name,
                "client_phone": client_phone,
            }
            for s, client_name, client_phone in rows
        ]

    def get_payment_requests(self, mentor_id: int) -> list[PaymentRequest]:
        try:
            return (
                self.db.query(PaymentRequest)
                .filter(PaymentRequest.mentor_id == mentor_id)
                .order_by(PaymentRequest.created_at.desc(), PaymentRequest.id.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            logger.exception("Error fetching payment requests for mentor %s", mentor_id)
            raise PaymentServiceError("Failed to fetch payment requests") from exc

    def get_earnings_stats(self, mentor_id: int, now: Optional[datetime] = None) -> EarningsStats:
        windows = month_windows(now or utcnow())
        scheduled = MentorshipSession.scheduled_at
        paid = MentorshipSession.payment_status == "paid"
        completed = MentorshipSession.status == "completed"

        try:
            total_earnings = self._sum_rate(mentor_id, paid)
            pending_payments = self._sum_rate(
                mentor_id, completed, MentorshipSession.payment_status == "pending"
            )
            completed_sessions = (
                self.db.query(func.count(MentorshipSession.id))
                .filter(
                    MentorshipSession.mentor_id == mentor_id,
                    completed,
                    scheduled >= windows.current_start,
                    scheduled < windows.next_start,
                )
                .scalar()
            ) or 0
            current_month = self._sum_rate(
                mentor_id, paid, scheduled >= windows.current_start, scheduled < windows.next_start
            )
            previous_month = self._sum_rate(
                mentor_id, paid, scheduled >= windows.previous_start, scheduled < windows.current_start
            )
        except SQLAlchemyError as exc:
            logger.exception("Error computing earnings for mentor %s", mentor_id)
            raise PaymentServiceError("Failed to fetch earnings stats") from exc

        growth = Decimal("0")
        if previous_month > 0:
            growth = ((current_month - previous_month) / previous_month * 100).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )

        return EarningsStats(
            total_earnings=total_earnings,
            pending_payments=pending_payments,
            completed_sessions=int(completed_sessions),
            monthly_growth=float(growth),
        )

    def _sum_rate(self, mentor_id: int, *criteria) -> Decimal:
        total = (
            self.db.query(func.sum(MentorshipSession.rate))
            .filter(MentorshipSession.mentor_id == mentor_id, *criteria)
            .scalar()
        )
        return to_money(total or 0)

    # ─── Payment requests ────────────────────────────────────────────

    def create_payment_request(
        self, mentor_id: int, client_phone: str, amount, description: str
    ) -> PaymentResult:
        return self._submit_payment_request(mentor_id, client_phone, amount, description)

    def request_session_payment(self, mentor_id: int, session_id: int) -> PaymentResult:
        try:
            row = (
                self.db.query(MentorshipSession, User.phone)
                .outerjoin(User, MentorshipSession.client_id == User.id)
                .filter(
                    MentorshipSession.id == session_id,
                    MentorshipSession.mentor_id == mentor_id,
                    MentorshipSession.status == "completed",
                    MentorshipSession.payment_status == "pending",
                )
                .first()
            )
            in_flight = row is not None and (
                self.db.query(PaymentRequest.id)
                .filter(
                    PaymentRequest.session_id == session_id,
                    PaymentRequest.status.in_(("pending", "sent")),
                )
                .first()
                is not None
            )
        except SQLAlchemyError:
            logger.exception("Error loading session %s for mentor %s", session_id, mentor_id)
            return PaymentResult(success=False, message="Failed to request session payment")

        if row is None or in_flight:
            return PaymentResult(success=False, message=NOT_ELIGIBLE_MESSAGE)

        session, client_phone = row
        if not client_phone:
            return PaymentResult(success=False, message="Client has no phone number on file")

        amount = session.rate
        description = f"Payment for {session.session_type} session"
        invalid = self._check_collection(client_phone, amount)
        if invalid:
            return PaymentResult(success=False, message=invalid)

        claim = self._claim_session(mentor_id, session_id, client_phone, amount, description)
        if isinstance(claim, PaymentResult):
            return claim

        return self._submit_payment_request(
            mentor_id, client_phone, amount, description, session=session, claim=claim
        )

    def _claim_session(
        self, mentor_id: int, session_id: int, client_phone: str, amount, description: str
    ):
        """Commit a `pending` request for the session before the gateway is called.

        The partial unique index on in-flight requests lets only one caller win
        when two requests for the same session overlap.
        """
        now = utcnow()
        claim = PaymentRequest(
            mentor_id=mentor_id,
            session_id=session_id,
            client_phone=normalize_msisdn(client_phone),
            amount=to_money(amount),
            description=description,
            status="pending",
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(claim)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("Session %s already has a payment request in flight", session_id)
            return PaymentResult(success=False, message=NOT_ELIGIBLE_MESSAGE)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error claiming session %s for mentor %s", session_id, mentor_id)
            return PaymentResult(success=False, message="Failed to request session payment")
        return claim

    def _release_claim(self, claim: PaymentRequest) -> None:
        claim_id = claim.id
        try:
            self.db.delete(claim)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Could not release payment request %s; session stays blocked", claim_id)

    @staticmethod
    def _check_collection(client_phone: str, amount) -> Optional[str]:
        """Error message for a collection the gateway would refuse, else None."""
        ok, message = validate_amount(amount)
        if not ok:
            return message
        if not validate_msisdn(client_phone):
            return "Invalid client phone number"
        return None

    def _submit_payment_request(
        self,
        mentor_id: int,
        client_phone: str,
        amount,
        description: str,
        session: Optional[MentorshipSession] = None,
        claim: Optional[PaymentRequest] = None,
    ) -> PaymentResult:
        if claim is None:
            invalid = self._check_collection(client_phone, amount)
            if invalid:
                return PaymentResult(success=False, message=invalid)

        client_phone = normalize_msisdn(client_phone)
        amount = to_money(amount)
        currency = self.settings.SETTLEMENT_CURRENCY
        external_id = external_reference("mentor_payment", mentor_id)
        session_id = claim.session_id if claim is not None else None

        try:
            descriptor = self.gateway.create_transaction(
                amount, currency, external_id, client_phone, "msisdn", description
            )
            reference_id = self.gateway.request_to_pay(descriptor)
        except GatewayError as exc:
            logger.warning(
                "Gateway rejected payment request mentor=%s external_id=%s: %s",
                mentor_id, external_id, exc.message,
            )
            if claim is not None:
                self._release_claim(claim)
            return PaymentResult(success=False, message=exc.message)

        now = utcnow()
        try:
            if claim is not None:
                request = claim
                request.status = "sent"
                request.transaction_id = reference_id
                request.updated_at = now
            else:
                request = PaymentRequest(
                    mentor_id=mentor_id,
                    client_phone=client_phone,
                    amount=amount,
                    description=description,
                    status="sent",
                    transaction_id=reference_id,
                    created_at=now,
                    updated_at=now,
                )
                self.db.add(request)
            self.db.flush()

            self.db.add(Transaction(
                user_id=mentor_id,
                external_id=external_id,
                momo_transaction_id=reference_id,
                type="collection",
                purpose="mentor_payment",
                amount=amount,
                currency=currency,
                status="pending",
                payer_party_id=client_phone,
                description=description,
                payment_request_id=request.id,
                session_id=session_id,
            ))

            if session is not None:
                session.payment_status = "pending"
                session.updated_at = now

            AuditService.log(
                self.db, mentor_id,
                "SESSION_PAYMENT_REQUESTED" if session is not None else "PAYMENT_REQUEST_CREATED",
                entity_ref=reference_id,
                payload={"amount": amount, "currency": currency, "client_phone": client_phone},
                metadata={"payment_request_id": request.id, "session_id": session_id},
                commit=False,
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Payment request accepted by gateway but not stored: mentor=%s ref=%s external_id=%s",
                mentor_id, reference_id, external_id,
            )
            if claim is not None:
                self._release_claim(claim)
            return PaymentResult(success=False, message="Failed to create payment request")

        logger.info("Payment request sent mentor=%s ref=%s amount=%s", mentor_id, reference_id, amount)
        return PaymentResult(
            success=True,
            message="Payment request sent successfully",
            transaction_id=reference_id,
        )

    # ─── Reconciliation ──────────────────────────────────────────────

    def update_payment_status(
        self, transaction_id: str, status: str, reason: Optional[str] = None
    ) -> ReconciliationResult:
        if status not in _TRANSACTION_STATUS:
            raise ValueError(f"Unsupported payment status: {status!r}")
        target = _TRANSACTION_STATUS[status]

        try:
            txn = (
                self.db.query(Transaction)
                .filter(Transaction.momo_transaction_id == transaction_id)
                .with_for_update()
                .first()
            )
            if txn is None:
                raise TransactionNotFoundError(f"Unknown transaction {transaction_id}")

            current = txn.status
            if current == target:
                self.db.rollback()
                return ReconciliationResult(applied=False, status=current)
            if current != "pending":
                logger.warning(
                    "Ignoring %s for transaction %s already %s", status, transaction_id, current
                )
                self.db.rollback()
                return ReconciliationResult(applied=False, status=current)

            now = utcnow()
            txn.status = target
            txn.reason = reason[:128] if reason else None
            txn.updated_at = now

            self.db.query(PaymentRequest).filter(
                PaymentRequest.transaction_id == transaction_id,
                PaymentRequest.status.in_(("pending", "sent")),
            ).update({"status": status, "updated_at": now}, synchronize_session=False)

            if txn.session_id is not None:
                self.db.query(MentorshipSession).filter(
                    MentorshipSession.id == txn.session_id,
                    MentorshipSession.status == "completed",
                ).update({"payment_status": status, "updated_at": now}, synchronize_session=False)

            if txn.user_service_id is not None:
                self.db.query(UserService).filter(
                    UserService.id == txn.user_service_id,
                    UserService.status == "pending",
                ).update({"status": target, "updated_at": now}, synchronize_session=False)

            AuditService.log(
                self.db, txn.user_id, "PAYMENT_STATUS_UPDATED",
                entity_ref=transaction_id,
                payload={"status": target, "reason": reason},
                commit=False,
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Error updating payment status for %s", transaction_id)
            raise PaymentServiceError("Failed to update payment status") from exc

        logger.info("Transaction %s reconciled to %s", transaction_id, target)
        return ReconciliationResult(applied=True, status=target)

    def reconcile_with_gateway(
        self, transaction_id: str, fallback_reason: Optional[str] = None
    ) -> ReconciliationResult:
        """Apply the outcome the gateway itself reports for a pending transaction.

        Provider callbacks are unsigned, so their claimed status is never applied
        directly. `fallback_reason` is kept for failures the gateway reports
        without a reason. Raises GatewayError when the lookup fails.
        """
        txn = self._load_transaction(transaction_id)
        if txn.status != "pending":
            return ReconciliationResult(applied=False, status=txn.status)

        remote = self.gateway.get_transaction_status(transaction_id)
        if not remote.is_terminal:
            return ReconciliationResult(applied=False, status="pending")

        if remote.status == "SUCCESSFUL":
            return self.update_payment_status(transaction_id, "paid")
        return self.update_payment_status(
            transaction_id, "failed", reason=remote.reason or fallback_reason
        )

    def check_payment_status(self, transaction_id: str, owner_id: Optional[int] = None) -> StatusCheck:
        """Local status, refreshed from the gateway while still pending."""
        txn = self._load_transaction(transaction_id, owner_id)

        if txn.status == "pending":
            try:
                self.reconcile_with_gateway(transaction_id)
            except GatewayError as exc:
                logger.warning("Status lookup failed for %s: %s", transaction_id, exc.message)
                return StatusCheck(status="pending", message=_STATUS_MESSAGES["pending"])
            self.db.refresh(txn)

        message = _STATUS_MESSAGES.get(txn.status, txn.status)
        if txn.status == "failed" and txn.reason:
            message = f"{message}: {txn.reason}"
        return StatusCheck(status=txn.status, message=message)

    def _load_transaction(self, transaction_id: str, owner_id: Optional[int] = None) -> Transaction:
        try:
            query = self.db.query(Transaction).filter(Transaction.momo_transaction_id == transaction_id)
            if owner_id is not None:
                query = query.filter(Transaction.user_id == owner_id)
            txn = query.first()
        except SQLAlchemyError as exc:
            logger.exception("Error loading transaction %s", transaction_id)
            raise PaymentServiceError("Failed to check payment status") from exc

        if txn is None:
            raise TransactionNotFoundError(f"Unknown transaction {transaction_id}")
        return txn
