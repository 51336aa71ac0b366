"""
Account workflows shared by the auth, admin and superadmin routers:
registration, credential lookup, token responses, login activity and
password reset.
"""
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.config import settings
from dintask.core.exceptions import (
    AuthenticationError,
    DinTaskError,
    EmailDeliveryError,
    ValidationError,
)
from dintask.core.logging_config import logger
from dintask.core.security import create_access_token, hash_reset_token
from dintask.models.accounts import Admin, LoginActivity, MemberStatus
from dintask.modules.auth.dependencies import ensure_admitted
from dintask.modules.auth.roles import (
    ADMIN,
    LOGIN_SEARCH_ORDER,
    TEAM_ROLES,
    model_for_role,
    normalize_role,
    role_of,
)
from dintask.modules.auth.subscription import activate_plan, get_free_plan, plan_details
from dintask.modules.auth.usage_limits import require_user_slot
from dintask.schemas.auth import RegisterRequest
from dintask.services.email_service import email_service

REGISTRABLE_ROLES = (ADMIN,) + TEAM_ROLES


async def find_by_email(db: AsyncSession, model, email: str):
    result = await db.execute(select(model).where(model.email == email.lower().strip()))
    return result.scalars().first()


async def register_account(db: AsyncSession, data: RegisterRequest):
    """
    Create an admin (on the free plan) or a pending team member.

    Team members need an existing admin with a free seat; they can only
    log in once the admin approves the join request.
    """
    role = normalize_role(data.role)
    if role not in REGISTRABLE_ROLES:
        raise ValidationError("Please provide a valid role")

    model = model_for_role(role)
    email = data.email.lower()
    if await find_by_email(db, model, email):
        raise ValidationError("Email already registered")

    if role == ADMIN:
        user = Admin(
            name=data.name,
            email=email,
            phone_number=data.phone_number,
            company_name=data.company_name or data.name,
        )
        free_plan = await get_free_plan(db)
        user.set_password(data.password)
        db.add(user)
        await db.flush()
        if free_plan:
            activate_plan(user, free_plan)
        logger.log_tenant_event("tenant_registered", user.id, company=user.company_name)
        return user

    if not data.admin_id:
        raise ValidationError("Please provide an Admin ID for this user")

    await require_user_slot(db, data.admin_id)

    user = model(
        name=data.name,
        email=email,
        phone_number=data.phone_number,
        admin_id=data.admin_id,
        status=MemberStatus.PENDING,
    )
    user.set_password(data.password)
    db.add(user)
    await db.flush()
    logger.log_tenant_event("join_requested", data.admin_id, role=role, user_id=user.id)
    return user


async def authenticate(db: AsyncSession, email: Optional[str], password: Optional[str], role: Optional[str] = None):
    """Resolve credentials to an account; 401 for anything that does not match"""
    if not email or not password:
        raise ValidationError("Please provide an email and password")

    candidates = [normalize_role(role)] if role and model_for_role(role) else LOGIN_SEARCH_ORDER
    user = None
    for candidate in candidates:
        user = await find_by_email(db, model_for_role(candidate), email)
        if user:
            break

    if not user or not user.check_password(password):
        logger.log_auth_event("login", False, user_email=email, reason="Invalid credentials")
        raise AuthenticationError("Invalid credentials")

    ensure_admitted(user)
    logger.log_auth_event("login", True, user_email=email, role=role_of(user))
    return user


async def token_response(db: AsyncSession, user) -> Dict[str, Any]:
    role = role_of(user)
    user_data: Dict[str, Any] = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": role,
    }
    if role == ADMIN:
        user_data["subscriptionPlan"] = user.subscription_plan
        user_data["planDetails"] = await plan_details(db, user)

    return {
        "success": True,
        "token": create_access_token(user.id, role),
        "user": user_data,
    }


def client_info(request: Request) -> Tuple[Optional[str], Optional[str]]:
    forwarded = request.headers.get("X-Forwarded-For")
    ip = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    return ip, request.headers.get("User-Agent")


async def record_login(db: AsyncSession, user, request: Request) -> LoginActivity:
    ip, user_agent = client_info(request)
    activity = LoginActivity(
        user_id=user.id,
        role_model=user.model_name,
        role=role_of(user),
        ip_address=ip,
        user_agent=(user_agent or "")[:512],
    )
    db.add(activity)
    return activity


async def close_login_activity(db: AsyncSession, user, now: Optional[datetime] = None) -> Optional[LoginActivity]:
    """Stamp logout time and session length on the latest open login"""
    now = now or datetime.utcnow()
    result = await db.execute(
        select(LoginActivity)
        .where(LoginActivity.user_id == user.id, LoginActivity.logout_at.is_(None))
        .order_by(LoginActivity.login_at.desc())
        .limit(1)
    )
    activity = result.scalars().first()
    if activity:
        activity.logout_at = now
        activity.session_duration = int((now - activity.login_at).total_seconds() // 60)
    return activity


async def send_reset_link(db: AsyncSession, email: str, role: Optional[str] = None, path: str = "reset-password"):
    """Email a 10-minute reset link; roles default to the login search order"""
    candidates = [normalize_role(role)] if role and model_for_role(role) else LOGIN_SEARCH_ORDER
    user = None
    for candidate in candidates:
        user = await find_by_email(db, model_for_role(candidate), email)
        if user:
            break
    if not user:
        raise DinTaskError("There is no user with that email", code="USER_NOT_FOUND", status_code=404)

    raw = user.get_reset_password_token()
    reset_url = f"{settings.FRONTEND_URL}/{path}/{raw}"
    sent = await email_service.send_password_reset(user.email, user.name, reset_url)
    if not sent:
        # Rollback discards the stored token
        raise EmailDeliveryError()
    return user


async def reset_password(db: AsyncSession, token: str, password: str, roles=LOGIN_SEARCH_ORDER):
    digest = hash_reset_token(token)
    now = datetime.utcnow()
    for candidate in roles:
        model = model_for_role(candidate)
        result = await db.execute(
            select(model).where(
                model.reset_password_token == digest,
                model.reset_password_expire > now,
            )
        )
        user = result.scalars().first()
        if user:
            user.set_password(password)
            user.clear_reset_password_token()
            logger.log_auth_event("password_reset", True, user_email=user.email)
            return user
    raise ValidationError("Invalid token")
