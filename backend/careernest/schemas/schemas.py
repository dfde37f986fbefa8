"""
Pydantic Schemas — Request & Response models for API validation.
JSON bodies use camelCase keys; Python attributes stay snake_case.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, Dict, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from careernest.utils.validators import MSISDN_PATTERN


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ──────────────── Mentor dashboard ────────────────

class MentorshipSessionView(CamelModel):
    id: int
    mentor_id: int
    client_id: int
    session_type: str
    duration: int
    rate: float
    scheduled_at: datetime
    status: str
    payment_status: str
    client_name: Optional[str] = None
    client_phone: Optional[str] = None


class PaymentRequestView(CamelModel):
    id: int
    mentor_id: int
    client_phone: str
    amount: float
    description: str
    status: str
    transaction_id: Optional[str] = None
    session_id: Optional[int] = None
    created_at: datetime


class EarningsStatsResponse(CamelModel):
    total_earnings: float
    pending_payments: float
    completed_sessions: int
    monthly_growth: float


class CreatePaymentRequest(CamelModel):
    client_phone: str = Field(..., pattern=MSISDN_PATTERN, description="Payer MSISDN, e.g. 27821234567")
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Amount in the settlement currency")
    description: str = Field(..., min_length=1, max_length=255)


class PaymentActionResponse(CamelModel):
    success: bool
    message: str
    transaction_id: Optional[str] = None


class PaymentStatusResponse(CamelModel):
    status: str  # pending | completed | failed
    message: str
    poll_interval_seconds: int
    max_poll_attempts: int


# ──────────────── AI services checkout ────────────────

class AIServiceView(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: float
    currency: str


class UserServiceView(CamelModel):
    id: int
    service_id: int
    service_name: str
    status: str
    transaction_id: Optional[str] = None
    created_at: datetime


class PurchaseRequest(CamelModel):
    service_id: int
    phone_number: str = Field(..., pattern=MSISDN_PATTERN)


# ──────────────── Gateway callback ────────────────

class MomoCallbackPayload(CamelModel):
    reference_id: Optional[str] = None
    external_id: Optional[str] = None
    financial_transaction_id: Optional[str] = None
    status: str
    reason: Optional[Union[Dict, str]] = None


class CallbackAck(CamelModel):
    received: bool = True
    applied: bool
    status: str


# ──────────────── Admin / Audit ────────────────

class AuditLogEntry(BaseModel):
    id: int
    actor_id: int
    action: str
    entity_ref: Optional[str] = None
    payload_hash: Optional[str] = None
    timestamp: datetime
    log_metadata: Optional[Dict] = None

    class Config:
        from_attributes = True


class AuditChainReport(BaseModel):
    valid: bool
    total_entries: int
    broken_at: Optional[int] = None
    message: Optional[str] = None


# ──────────────── Generic ────────────────

class HealthResponse(BaseModel):
    status: str
    database: str
    gateway_mode: str
    version: str
    uptime_seconds: float


