"""
MTN MoMo Collections client — request-to-pay and status lookup.
"""
from __future__ import annotations

import logging
import time
import uuid
from typing import Optional

import httpx

from careernest.config import Settings, get_settings
from careernest.gateway.base import (
    CollectionRequest,
    GatewayError,
    GatewayStatus,
    build_collection_request,
    normalize_status,
)
from careernest.gateway.http import HttpClient, is_retryable_http
from careernest.utils.validators import validate_amount

logger = logging.getLogger(__name__)


class MomoCollectionClient:
    def __init__(self, settings: Optional[Settings] = None, http: Optional[HttpClient] = None):
        self.settings = settings or get_settings()
        self.http = http or HttpClient(timeout_s=self.settings.MOMO_HTTP_TIMEOUT_S)
        self._token: Optional[str] = None
        self._token_exp: float = 0.0

    @property
    def base_url(self) -> str:
        return self.settings.MOMO_BASE_URL.rstrip("/")

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
            raise GatewayError(message)

        token = self._get_token()
        reference_id = str(uuid.uuid4())
        headers = {
            "Authorization": f"Bearer {token}",
            "X-Reference-Id": reference_id,
            "X-Target-Environment": self.settings.MOMO_TARGET_ENV,
            "Ocp-Apim-Subscription-Key": self.settings.MOMO_COLLECTIONS_SUBSCRIPTION_KEY,
            "Content-Type": "application/json",
        }
        if self.settings.MOMO_CALLBACK_URL:
            headers["X-Callback-Url"] = self.settings.MOMO_CALLBACK_URL

        url = f"{self.base_url}/collection/v1_0/requesttopay"
        try:
            resp = self.http.post(url, headers=headers, json_body=request.to_body())
        except httpx.TimeoutException as exc:
            raise GatewayError("Payment provider timed out", retryable=True) from exc
        except httpx.HTTPError as exc:
            raise GatewayError(f"Payment provider unreachable: {exc}", retryable=True) from exc

        if resp.status_code in (200, 201, 202):
            logger.info("MoMo request-to-pay accepted ref=%s external_id=%s", reference_id, request.external_id)
            return reference_id

        raise GatewayError(
            _error_message(resp.json, f"Payment provider rejected the request (HTTP {resp.status_code})"),
            http_status=resp.status_code,
            retryable=is_retryable_http(resp.status_code),
        )

    def get_transaction_status(self, reference_id: str) -> GatewayStatus:
        token = self._get_token()
        url = f"{self.base_url}/collection/v1_0/requesttopay/{reference_id}"
        headers = {
            "Authorization": f"Bearer {token}",
            "X-Target-Environment": self.settings.MOMO_TARGET_ENV,
            "Ocp-Apim-Subscription-Key": self.settings.MOMO_COLLECTIONS_SUBSCRIPTION_KEY,
        }
        try:
            resp = self.http.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise GatewayError(f"Payment provider unreachable: {exc}", retryable=True) from exc

        if resp.status_code == 200 and isinstance(resp.json, dict):
            reason = resp.json.get("reason")
            if isinstance(reason, dict):
                reason = reason.get("code") or reason.get("message")
            return GatewayStatus(
                status=normalize_status(resp.json.get("status")),
                reason=reason,
                financial_transaction_id=resp.json.get("financialTransactionId"),
            )

        raise GatewayError(
            _error_message(resp.json, f"Status lookup failed (HTTP {resp.status_code})"),
            http_status=resp.status_code,
            retryable=is_retryable_http(resp.status_code),
        )

    def _get_token(self) -> str:
        now = time.time()
        if self._token and now < (self._token_exp - 30):
            return self._token

        cfg = self.settings
        if not (cfg.MOMO_COLLECTIONS_USER_ID and cfg.MOMO_COLLECTIONS_API_KEY and cfg.MOMO_COLLECTIONS_SUBSCRIPTION_KEY):
            raise GatewayError("MoMo collections credentials are not configured")

        url = f"{self.base_url}/collection/token/"
        headers = {"Ocp-Apim-Subscription-Key": cfg.MOMO_COLLECTIONS_SUBSCRIPTION_KEY}
        try:
            resp = self.http.post(
                url,
                headers=headers,
                auth=(cfg.MOMO_COLLECTIONS_USER_ID, cfg.MOMO_COLLECTIONS_API_KEY),
            )
        except httpx.HTTPError as exc:
            raise GatewayError(f"Payment provider unreachable: {exc}", retryable=True) from exc

        if resp.status_code == 200 and isinstance(resp.json, dict) and resp.json.get("access_token"):
            self._token = resp.json["access_token"]
            self._token_exp = now + int(resp.json.get("expires_in") or 3600)
            return self._token

        raise GatewayError(f"MoMo token request failed (HTTP {resp.status_code})", http_status=resp.status_code)


def _error_message(body: Optional[dict], fallback: str) -> str:
    if isinstance(body, dict):
        msg = body.get("message") or body.get("code")
        if msg:
            return str(msg)
    return fallback
