"""
Gateway contract shared by the MTN MoMo client and the in-process mock.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Protocol

GatewayStatusValue = Literal["SUCCESSFUL", "FAILED", "PENDING"]


class GatewayError(Exception):
    """The provider rejected the request or could not be reached."""

    def __init__(self, message: str, *, http_status: Optional[int] = None, retryable: bool = False):
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.retryable = retryable


@dataclass(frozen=True)
class CollectionRequest:
    """Descriptor for a request-to-pay, built before it is submitted."""

    amount: str
    currency: str
    external_id: str
    payer_party_id: str
    payer_party_id_type: str
    payer_message: str
    payee_note: str

    def to_body(self) -> dict:
        return {
            "amount": self.amount,
            "currency": self.currency,
            "externalId": self.external_id,
            "payer": {"partyIdType": self.payer_party_id_type, "partyId": self.payer_party_id},
            "payerMessage": self.payer_message,
            "payeeNote": self.payee_note,
        }


@dataclass(frozen=True)
class GatewayStatus:
    status: GatewayStatusValue
    reason: Optional[str] = None
    financial_transaction_id: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in ("SUCCESSFUL", "FAILED")


def normalize_status(raw: Optional[str]) -> GatewayStatusValue:
    st = (raw or "").strip().upper()
    if st in ("SUCCESSFUL", "SUCCESS", "COMPLETED"):
        return "SUCCESSFUL"
    if st in ("FAILED", "REJECTED", "TIMEOUT", "CANCELLED", "EXPIRED"):
        return "FAILED"
    return "PENDING"


def build_collection_request(
    amount,
    currency: str,
    external_reference: str,
    payer_identifier: str,
    identifier_type: str,
    description: str,
) -> CollectionRequest:
    party_type = (identifier_type or "msisdn").strip().upper()
    party_id = (payer_identifier or "").strip()
    if party_type == "MSISDN":
        party_id = party_id.lstrip("+")
    return CollectionRequest(
        amount=f"{float(amount):.2f}",
        currency=(currency or "").strip().upper(),
        external_id=external_reference,
        payer_party_id=party_id,
        payer_party_id_type=party_type,
        payer_message=description[:160],
        payee_note=description[:160],
    )


class PaymentGateway(Protocol):
    def create_transaction(
        self,
        amount,
        currency: str,
        external_reference: str,
        payer_identifier: str,
        identifier_type: str,
        description: str,
    ) -> CollectionRequest: ...

    def request_to_pay(self, request: CollectionRequest) -> str: ...

    def get_transaction_status(self, reference_id: str) -> GatewayStatus: ...
