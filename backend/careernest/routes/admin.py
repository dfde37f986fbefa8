"""
Admin Routes — Payment audit trail and transaction overview for operators.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from careernest.database import get_db
from careernest.models.payment import Transaction
from careernest.schemas.schemas import AuditLogEntry, AuditChainReport
from careernest.services.audit_service import AuditService

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/audit/{actor_id}", response_model=list[AuditLogEntry])
def get_audit_trail(actor_id: int, db: Session = Depends(get_db)):
    """Full payment audit trail for a mentor or purchasing user."""
    logs = AuditService.get_trail(db, actor_id)
    if not logs:
        raise HTTPException(status_code=404, detail="No audit logs found for this user")
    return logs


@router.get("/audit/{actor_id}/verify", response_model=AuditChainReport)
def verify_audit_chain(actor_id: int, db: Session = Depends(get_db)):
    """Verify the integrity of the audit hash chain for a user."""
    return AuditService.verify_chain(db, actor_id)


@router.get("/transactions")
def list_transactions(
    status: Optional[str] = None,
    purpose: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    db: Session = Depends(get_db),
):
    """List gateway transactions with optional status/purpose filters."""
    query = db.query(Transaction).order_by(Transaction.created_at.desc(), Transaction.id.desc())
    if status:
        query = query.filter(Transaction.status == status)
    if purpose:
        query = query.filter(Transaction.purpose == purpose)

    total = query.count()
    rows = query.offset(offset).limit(limit).all()

    by_status = dict(
        db.query(Transaction.status, func.count(Transaction.id)).group_by(Transaction.status).all()
    )

    return {
        "total": total,
        "by_status": by_status,
        "transactions": [
            {
                "id": t.id,
                "user_id": t.user_id,
                "external_id": t.external_id,
                "transaction_id": t.momo_transaction_id,
                "purpose": t.purpose,
                "amount": float(t.amount),
                "currency": t.currency,
                "status": t.status,
                "reason": t.reason,
                "created_at": t.created_at.isoformat() if t.created_at else None,
            }
            for t in rows
        ],
    }
