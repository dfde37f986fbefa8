"""
User Model — Mentors and clients of the platform.
Only the fields the payment flows join against are kept here.
"""
from sqlalchemy import Column, String, Integer, DateTime

from careernest.database import Base
from careernest.utils.dates import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    username = Column(String(64), nullable=False, unique=True)
    phone = Column(String(20))              # MSISDN, e.g. 27821234567
    role = Column(String(16), default="client")  # mentor | client

    created_at = Column(DateTime, default=utcnow)
