from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String

from buildup.database import Base


def _new_id():
    return uuid4().hex


def _now():
    return datetime.now(timezone.utc)


class OrderStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=True)
    plan = Column(String, nullable=False)                       # STANDARD | ULTIMATE | PROFESSIONAL
    amount = Column(Integer, nullable=False)                    # whole rupees
    currency = Column(String, nullable=False)
    receipt = Column(String, nullable=False)
    provider_order_id = Column(String, unique=True, index=True, nullable=False)   # Razorpay order_...
    provider_payment_id = Column(String, nullable=True)                           # Razorpay pay_...
    status = Column(String, nullable=False, default=OrderStatus.PENDING.value)    # pending | success | failed
    user_id = Column(String, ForeignKey("users.id"), nullable=True)               # set once, when consumed
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    def to_public(self):
        return {
            "id": self.id,
            "plan": self.plan,
            "amount": self.amount,
            "name": self.name,
            "email": self.email,
            "status": self.status,
        }


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    membership_plan = Column(String, nullable=False)
    membership_start = Column(DateTime(timezone=True), nullable=False)
    membership_end = Column(DateTime(timezone=True), nullable=False)
    membership_active = Column(Boolean, nullable=False, default=True)
    profile = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    def to_public(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "plan": self.membership_plan,
        }
