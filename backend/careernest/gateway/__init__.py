from functools import lru_cache

from careernest.config import get_settings
from careernest.gateway.base import (
    CollectionRequest,
    GatewayError,
    GatewayStatus,
    PaymentGateway,
)


@lru_cache()
def get_gateway_client() -> PaymentGateway:
    """FastAPI dependency: the configured MoMo collections client (cached)."""
    settings = get_settings()
    if settings.MOMO_MODE == "mock":
        from careernest.gateway.mock import MockMomoClient
        return MockMomoClient()

    from careernest.gateway.momo import MomoCollectionClient
    return MomoCollectionClient(settings)


__all__ = [
    "CollectionRequest", "GatewayError", "GatewayStatus", "PaymentGateway", "get_gateway_client",
]
