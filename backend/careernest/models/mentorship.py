"""
Mentorship Session Model — A scheduled interaction between a mentor and a client.
Maps to the 'mentorship_sessions' table.
"""
from sqlalchemy import Column, String, Integer, DateTime, Numeric, ForeignKey

from careernest.database import Base
from careernest.utils.dates import utcnow


class MentorshipSession(Base):
    __tablename__ = "mentorship_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    session_type = Column(String(32), nullable=False)   # career_guidance | cv_review | mock_interview | ...
    duration = Column(Integer, nullable=False)          # Minutes
    rate = Column(Numeric(10, 2), nullable=False)
    scheduled_at = Column(DateTime, nullable=False, index=True)

    status = Column(String(16), default="scheduled")    # scheduled | completed | cancelled
    payment_status = Column(String(16), default="pending")  # pending | paid | failed
    # payment_status only leaves "pending" once status == "completed"

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
