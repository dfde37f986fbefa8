"""
Thin httpx wrapper used by the mobile-money client.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

_REDACTED_HEADERS = ("Authorization", "Ocp-Apim-Subscription-Key")


@dataclass
class HttpResponse:
    status_code: int
    json: Optional[dict[str, Any]]
    text: str


class HttpClient:
    def __init__(self, timeout_s: float = 20.0):
        self._client = httpx.Client(timeout=timeout_s, follow_redirects=True)

    def post(
        self,
        url: str,
        *,
        headers: dict[str, str],
        json_body: dict[str, Any] | None = None,
        auth: tuple[str, str] | None = None,
    ) -> HttpResponse:
        r = self._client.post(url, headers=headers, json=json_body, auth=auth)
        self._debug_dump("POST", url, headers, r)
        return self._wrap(r)

    def get(self, url: str, *, headers: dict[str, str]) -> HttpResponse:
        r = self._client.get(url, headers=headers)
        self._debug_dump("GET", url, headers, r)
        return self._wrap(r)

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _wrap(r: httpx.Response) -> HttpResponse:
        try:
            payload = r.json()
        except ValueError:
            payload = None
        if payload is not None and not isinstance(payload, dict):
            payload = {"data": payload}
        return HttpResponse(status_code=r.status_code, json=payload, text=r.text)

    @staticmethod
    def _debug_dump(method: str, url: str, headers: dict[str, str], r: httpx.Response) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        # Don't log secrets
        safe_headers = {
            k: ("REDACTED" if k in _REDACTED_HEADERS else v) for k, v in (headers or {}).items()
        }
        logger.debug("%s %s headers=%s -> %s %s", method, url, safe_headers, r.status_code, r.text[:300])


def is_retryable_http(code: int) -> bool:
    # Transient / throttling / gateway issues
    return code in (408, 425, 429, 500, 502, 503, 504)
