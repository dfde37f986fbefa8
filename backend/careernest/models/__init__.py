from careernest.models.user import User
from careernest.models.mentorship import MentorshipSession
from careernest.models.payment import PaymentRequest, Transaction
from careernest.models.catalog import AIService, UserService
from careernest.models.audit import AuditLog

__all__ = [
    "User", "MentorshipSession", "PaymentRequest", "Transaction",
    "AIService", "UserService", "AuditLog",
]
