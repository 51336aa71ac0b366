from pydantic import Field
from typing import Optional, List
from datetime import datetime

from dintask.models.billing import PaymentStatus
from dintask.schemas.base import CamelModel, PartialUpdate


class PlanOut(CamelModel):
    id: str
    name: str
    price: float
    user_limit: int
    duration: int
    features: List[str] = []
    is_active: bool = True
    description: Optional[str] = None
    color: Optional[str] = None
    created_at: Optional[datetime] = None


class PlanCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)
    user_limit: int = Field(..., ge=1)
    duration: int = Field(default=30, ge=1)
    features: List[str] = []
    is_active: bool = True
    description: Optional[str] = None
    color: Optional[str] = None


class PlanUpdate(PartialUpdate):
    clearable = frozenset({"description", "color"})

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    user_limit: Optional[int] = Field(None, ge=1)
    duration: Optional[int] = Field(None, ge=1)
    features: Optional[List[str]] = None
    is_active: Optional[bool] = None
    description: Optional[str] = None
    color: Optional[str] = None


class AssignPlanRequest(CamelModel):
    plan_id: str


class PricingPlanOut(CamelModel):
    id: str
    name: str
    badge: str
    subtitle: str
    monthly_price: float
    annual_price_monthly: float
    yearly_fake_price: Optional[str] = ""
    yearly_save_text: Optional[str] = ""
    features: List[str] = []
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    is_popular: bool = False
    is_best_value: bool = False
    highlight_color: Optional[str] = None
    order: int = 0


class PricingPlanCreate(CamelModel):
    name: str
    badge: str
    subtitle: str
    monthly_price: float = Field(..., ge=0)
    annual_price_monthly: float = Field(..., ge=0)
    yearly_fake_price: str = ""
    yearly_save_text: str = ""
    features: List[str] = []
    button_text: str = "Get Started"
    button_link: str = "/register"
    is_popular: bool = False
    is_best_value: bool = False
    highlight_color: str = "yellow"
    order: int = 0


class PricingPlanUpdate(PartialUpdate):
    name: Optional[str] = None
    badge: Optional[str] = None
    subtitle: Optional[str] = None
    monthly_price: Optional[float] = Field(None, ge=0)
    annual_price_monthly: Optional[float] = Field(None, ge=0)
    yearly_fake_price: Optional[str] = None
    yearly_save_text: Optional[str] = None
    features: Optional[List[str]] = None
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    is_popular: Optional[bool] = None
    is_best_value: Optional[bool] = None
    highlight_color: Optional[str] = None
    order: Optional[int] = None


class CreateOrderRequest(CamelModel):
    plan_id: str


class VerifyPaymentRequest(CamelModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentOut(CamelModel):
    id: str
    admin_id: str
    plan_id: str
    razorpay_order_id: str
    razorpay_payment_id: Optional[str] = None
    amount: float
    currency: str
    status: PaymentStatus
    plan: Optional[PlanOut] = None
    created_at: Optional[datetime] = None


class PaymentAdminOut(CamelModel):
    id: str
    name: str
    email: str
    company_name: str


class TransactionOut(PaymentOut):
    """Payment as listed to the platform operators"""
    admin: Optional[PaymentAdminOut] = None
