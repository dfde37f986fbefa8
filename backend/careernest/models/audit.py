"""
Audit Log Model — Tamper-evident trail of payment events.
Every action is SHA-256 hashed, chained per actor and timestamped.
"""
from sqlalchemy import Column, String, Integer, DateTime, JSON

from careernest.database import Base
from careernest.utils.dates import utcnow


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    actor_id = Column(Integer, nullable=False, index=True)   # Mentor or purchasing user

    action = Column(String(50), nullable=False)
    # Actions: PAYMENT_REQUEST_CREATED, SESSION_PAYMENT_REQUESTED,
    #          PAYMENT_STATUS_UPDATED, SERVICE_PURCHASE_INITIATED
    entity_ref = Column(String(64))          # Gateway reference the action concerns

    payload_hash = Column(String(64))        # Chain hash of the action payload
    previous_hash = Column(String(64))       # Hash chain for tamper detection

    log_metadata = Column(JSON, default=dict)
    timestamp = Column(DateTime, default=utcnow)
