"""
Audit Service — Manages the hash-chained trail of payment events.
"""
from typing import Optional, Dict

from sqlalchemy.orm import Session

from careernest.models.audit import AuditLog
from careernest.utils.dates import utcnow
from careernest.utils.hashing import chain_digest


class AuditService:
    """Creates tamper-evident audit log entries chained per actor."""

    @staticmethod
    def log(
        db: Session,
        actor_id: int,
        action: str,
        entity_ref: Optional[str] = None,
        payload: Optional[Dict] = None,
        metadata: Optional[Dict] = None,
        commit: bool = True,
    ) -> AuditLog:
        """Create an audit log entry linked to the actor's previous entry.

        Args:
            db: Database session.
            actor_id: Mentor or user the action belongs to.
            action: Action identifier (e.g. PAYMENT_REQUEST_CREATED).
            entity_ref: Gateway reference the action concerns.
            payload: Data payload to hash.
            metadata: Additional metadata to store.
            commit: Commit immediately. Pass False to join the caller's unit of work.

        Returns:
            The created AuditLog entry.
        """
        last_entry = (
            db.query(AuditLog)
            .filter(AuditLog.actor_id == actor_id)
            .order_by(AuditLog.id.desc())
            .first()
        )
        previous_hash = last_entry.payload_hash if last_entry else ""

        payload_data = dict(payload or {}, action=action, entity_ref=entity_ref)

        entry = AuditLog(
            actor_id=actor_id,
            action=action,
            entity_ref=entity_ref,
            payload_hash=chain_digest(payload_data, previous_hash),
            previous_hash=previous_hash,
            log_metadata=metadata or {},
            timestamp=utcnow(),
        )
        db.add(entry)

        if commit:
            db.commit()
            db.refresh(entry)
        else:
            db.flush()

        return entry

    @staticmethod
    def get_trail(db: Session, actor_id: int) -> list[AuditLog]:
        """Get the full audit trail for an actor, oldest first."""
        return (
            db.query(AuditLog)
            .filter(AuditLog.actor_id == actor_id)
            .order_by(AuditLog.id.asc())
            .all()
        )

    @staticmethod
    def verify_chain(db: Session, actor_id: int) -> dict:
        """Verify the links of an actor's audit chain.

        Returns:
            dict with 'valid' (bool), 'total_entries', and 'broken_at' (if invalid).
        """
        entries = AuditService.get_trail(db, actor_id)

        for i, entry in enumerate(entries):
            expected_prev = entries[i - 1].payload_hash if i > 0 else ""
            if entry.previous_hash != expected_prev:
                return {
                    "valid": False,
                    "total_entries": len(entries),
                    "broken_at": entry.id,
                    "message": f"Chain broken at entry {entry.id} ({entry.action})",
                }

        return {"valid": True, "total_entries": len(entries), "broken_at": None}
