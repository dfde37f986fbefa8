from careernest.services.mentor_payment_service import MentorPaymentService
from careernest.services.catalog_service import CatalogService
from careernest.services.audit_service import AuditService

__all__ = ["MentorPaymentService", "CatalogService", "AuditService"]
