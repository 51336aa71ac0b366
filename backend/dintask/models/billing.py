"""Subscription plans, public pricing cards and Razorpay payments"""
from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Float, Text, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid


class PaymentStatus(str, enum.Enum):
    CREATED = "created"
    PAID = "paid"
    FAILED = "failed"


class Plan(Base):
    """Plan an Admin subscribes to; userLimit caps tenant members"""
    __tablename__ = "plans"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), unique=True, nullable=False)
    price = Column(Float, nullable=False, default=0)
    user_limit = Column(Integer, nullable=False)
    duration = Column(Integer, nullable=False, default=30)  # days
    features = Column(JSON, default=list)
    is_active = Column(Boolean, default=True)
    description = Column(Text, nullable=True)
    color = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_free(self) -> bool:
        return not self.price


class PricingPlan(Base):
    """Marketing card shown on the landing page"""
    __tablename__ = "pricing_plans"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    badge = Column(String(100), nullable=False)
    subtitle = Column(String(255), nullable=False)
    monthly_price = Column(Float, nullable=False)
    annual_price_monthly = Column(Float, nullable=False)
    yearly_fake_price = Column(String(50), default="")
    yearly_save_text = Column(String(100), default="")
    features = Column(JSON, default=list)
    button_text = Column(String(50), default="Get Started")
    button_link = Column(String(255), default="/register")
    is_popular = Column(Boolean, default=False)
    is_best_value = Column(Boolean, default=False)
    highlight_color = Column(String(20), default="yellow")
    order = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Payment(Base):
    """Razorpay order and its verification outcome"""
    __tablename__ = "payments"

    __table_args__ = (
        Index('ix_payments_admin_id', 'admin_id'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    admin_id = Column(GUID, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False)
    plan_id = Column(GUID, ForeignKey("plans.id"), nullable=False)

    razorpay_order_id = Column(String(100), unique=True, nullable=False)
    razorpay_payment_id = Column(String(100), nullable=True)
    razorpay_signature = Column(String(255), nullable=True)

    amount = Column(Float, nullable=False)
    currency = Column(String(10), default="INR")
    status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.CREATED, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    plan = relationship("Plan", lazy="joined")
    admin = relationship("Admin", lazy="joined")
