"""
Memory-based fixed-window rate limiter for payment-initiating endpoints.
Buckets are per (scope, caller) so one endpoint's traffic never throttles another.
"""
import time
from typing import Dict, Tuple

from fastapi import Request, HTTPException

# {(scope, caller): (window_start, count)}
_rate_limit_store: Dict[Tuple[str, str], Tuple[float, int]] = {}


def _caller_key(request: Request) -> str:
    for header in ("mentor-id", "user-id"):
        value = request.headers.get(header)
        if value:
            return f"{header}:{value}"
    return request.client.host if request.client else "unknown"


def rate_limit(scope: str, requests: int, window: int):
    """
    Dependency factory for rate limiting.
    Example: Depends(rate_limit("payment-request", requests=5, window=60))
    """
    def limiter(request: Request):
        key = (scope, _caller_key(request))
        now = time.time()
        window_start, count = _rate_limit_store.get(key, (now, 0))

        if now - window_start > window:
            window_start, count = now, 0

        if count >= requests:
            raise HTTPException(
                status_code=429,
                detail=f"Too many payment attempts. Try again in {int(window - (now - window_start)) + 1} seconds.",
            )

        _rate_limit_store[key] = (window_start, count + 1)
        return True

    return limiter


def reset_rate_limits() -> None:
    _rate_limit_store.clear()
