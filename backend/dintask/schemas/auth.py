from pydantic import EmailStr, Field
from typing import Optional, Any, Dict
from datetime import datetime

from dintask.schemas.base import CamelModel, PartialUpdate


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: str
    admin_id: Optional[str] = None
    company_name: Optional[str] = None
    phone_number: Optional[str] = None


class AdminRegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    company_name: str = Field(..., min_length=1)
    phone_number: Optional[str] = None


class LoginRequest(CamelModel):
    # Optional so missing fields produce the 400 message rather than a schema error
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UpdateDetailsRequest(PartialUpdate):
    clearable = frozenset({"phone_number"})

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None


class UpdatePasswordRequest(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr
    role: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    password: str = Field(..., min_length=6)


class TokenUser(CamelModel):
    id: str
    name: str
    email: str
    role: str
    subscription_plan: Optional[str] = None
    plan_details: Optional[Dict[str, Any]] = None


class SubscriptionStatusResponse(CamelModel):
    is_expired: bool
    subscription_status: Optional[str] = None
    subscription_expiry: Optional[datetime] = None
    subscription_plan: Optional[str] = None
    days_remaining: Optional[int] = None


class InviteRequest(CamelModel):
    email: Optional[EmailStr] = None
    role: Optional[str] = None
