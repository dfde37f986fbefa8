from careernest.routes.mentor import router as mentor_router
from careernest.routes.catalog import router as catalog_router
from careernest.routes.webhooks import router as webhook_router
from careernest.routes.admin import router as admin_router

__all__ = ["mentor_router", "catalog_router", "webhook_router", "admin_router"]
