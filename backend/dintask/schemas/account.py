"""Account read models and the admin's member management bodies"""
from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime

from dintask.schemas.base import CamelModel, PartialUpdate


class AccountOut(CamelModel):
    id: str
    name: str
    email: str
    role: str
    phone_number: Optional[str] = None
    profile_image: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


class MemberOut(AccountOut):
    admin_id: Optional[str] = None
    manager_id: Optional[str] = None
    status: str


class AdminOut(AccountOut):
    company_name: str
    subscription_plan: Optional[str] = None
    subscription_plan_id: Optional[str] = None
    subscription_status: Optional[str] = None
    subscription_expiry: Optional[datetime] = None


class SuperAdminOut(AccountOut):
    status: Optional[str] = None


def serialize_account(user) -> AccountOut:
    """Pick the read model matching the account's table"""
    name = getattr(user, "model_name", "")
    if name == "Admin":
        return AdminOut.model_validate(user)
    if name == "SuperAdmin":
        return SuperAdminOut.model_validate(user)
    return MemberOut.model_validate(user)


class AddMemberRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: str
    manager_id: Optional[str] = None
    phone_number: Optional[str] = None


class JoinRequestAction(CamelModel):
    role: str


class AdminCreateRequest(CamelModel):
    """Superadmin creating a tenant by hand"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    company_name: str
    phone_number: Optional[str] = None
    plan_id: Optional[str] = None


class AdminUpdateRequest(PartialUpdate):
    clearable = frozenset({"phone_number", "subscription_expiry"})

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    company_name: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: Optional[bool] = None
    subscription_status: Optional[str] = None
    subscription_expiry: Optional[datetime] = None


class StaffCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone_number: Optional[str] = None


class StaffUpdateRequest(PartialUpdate):
    clearable = frozenset({"phone_number"})

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    status: Optional[str] = None
    is_active: Optional[bool] = None


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class UpdateProfileRequest(PartialUpdate):
    clearable = frozenset({"phone_number"})

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
