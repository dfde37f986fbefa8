"""
In-process gateway for development and tests.

Requests are accepted immediately and reported as PENDING until settled with
`settle()`. Payer numbers listed in `reject_payers` are refused the way the
real provider refuses an unknown MSISDN. Only the most recent `max_entries`
requests are remembered; older references answer like unknown ones.
"""
from __future__ import annotations

import uuid
from collections import OrderedDict
from typing import Iterable, Optional

from careernest.gateway.base import (
    CollectionRequest,
    GatewayError,
    GatewayStatus,
    GatewayStatusValue,
    build_collection_request,
)
from careernest.utils.validators import validate_amount


class MockMomoClient:
    def __init__(self, reject_payers: Iterable[str] = (), max_entries: int = 1000):
        self.reject_payers = {p.lstrip("+") for p in reject_payers}
        self.max_entries = max_entries
        self.submitted: OrderedDict[str, CollectionRequest] = OrderedDict()
        self._statuses: dict[str, GatewayStatus] = {}

    def create_transaction(
        self,
        amount,
        currency: str,
        external_reference: str,
        payer_identifier: str,
        identifier_type: str,
        description: str,
    ) -> CollectionRequest:
        return build_collection_request(
            amount, currency, external_reference, payer_identifier, identifier_type, description
        )

    def request_to_pay(self, request: CollectionRequest) -> str:
        if not request.payer_party_id:
            raise GatewayError("Missing payer phone number")
        ok, message = validate_amount(request.amount)
        if not ok:
            raise GatewayError(message, http_status=400)
        if request.payer_party_id in self.reject_payers:
            raise GatewayError("Payer not found", http_status=400)

        reference_id = str(uuid.uuid4())
        self.submitted[reference_id] = request
        self._statuses[reference_id] = GatewayStatus(status="PENDING")
        while len(self.submitted) > self.max_entries:
            oldest, _ = self.submitted.popitem(last=False)
            self._statuses.pop(oldest, None)
        return reference_id

    def get_transaction_status(self, reference_id: str) -> GatewayStatus:
        if reference_id not in self._statuses:
            raise GatewayError("Resource not found", http_status=404)
        return self._statuses[reference_id]

    def settle(self, reference_id: str, status: GatewayStatusValue, reason: Optional[str] = None) -> None:
        if reference_id not in self._statuses:
            raise GatewayError("Resource not found", http_status=404)
        self._statuses[reference_id] = GatewayStatus(status=status, reason=reason)
