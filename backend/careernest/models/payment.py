"""
Payment Models — Mentor payment requests and gateway-facing transactions.
"""
from sqlalchemy import Column, String, Integer, DateTime, Numeric, ForeignKey, Index, text

from careernest.database import Base
from careernest.utils.dates import utcnow


class PaymentRequest(Base):
    __tablename__ = "payment_requests"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("mentorship_sessions.id"), nullable=True, index=True)

    client_phone = Column(String(20), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(String(255), nullable=False)

    status = Column(String(16), default="pending")   # pending → sent → paid | failed
    transaction_id = Column(String(64), index=True)  # Gateway reference

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # At most one in-flight request per session
    __table_args__ = (
        Index(
            "uq_payment_requests_session_in_flight",
            "session_id",
            unique=True,
            sqlite_where=text("status IN ('pending', 'sent')"),
            postgresql_where=text("status IN ('pending', 'sent')"),
        ),
    )


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    external_id = Column(String(96), nullable=False, unique=True)  # Caller-generated, sent to the gateway
    momo_transaction_id = Column(String(64), unique=True, index=True)  # Gateway reference

    type = Column(String(16), nullable=False)      # collection | disbursement
    purpose = Column(String(32), nullable=False)   # mentor_payment | ai_service
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(String(16), default="pending")  # pending | completed | failed
    payer_party_id = Column(String(20))
    description = Column(String(255))
    reason = Column(String(128))                   # Provider failure reason

    # Typed links used by reconciliation
    payment_request_id = Column(Integer, ForeignKey("payment_requests.id"), nullable=True)
    session_id = Column(Integer, ForeignKey("mentorship_sessions.id"), nullable=True)
    user_service_id = Column(Integer, ForeignKey("user_services.id"), nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
