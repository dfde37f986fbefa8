"""
AI Service Catalog Models — Purchasable services and the purchases made against them.
"""
from sqlalchemy import Column, String, Integer, DateTime, Numeric, Boolean, ForeignKey

from careernest.database import Base
from careernest.utils.dates import utcnow


class AIService(Base):
    __tablename__ = "ai_services"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String(64), nullable=False, unique=True)
    description = Column(String(255))
    category = Column(String(32))       # cv | interview | career | learning
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="ZAR")
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=utcnow)


class UserService(Base):
    __tablename__ = "user_services"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("ai_services.id"), nullable=False)

    status = Column(String(16), default="pending")   # pending | completed | failed
    transaction_id = Column(String(64), index=True)  # Gateway reference

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
