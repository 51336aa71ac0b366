from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthenticationError, ValidationError
from dintask.core.logging_config import logger
from dintask.core.rate_limiter import limiter, LOGIN_LIMIT, REGISTER_LIMIT
from dintask.models.accounts import Admin
from dintask.modules.auth.accounts import (
    authenticate,
    close_login_activity,
    find_by_email,
    record_login,
    register_account,
    token_response,
)
from dintask.modules.auth.dependencies import get_current_user
from dintask.modules.auth.roles import ADMIN, role_of
from dintask.modules.auth.subscription import plan_details, subscription_state
from dintask.schemas.account import serialize_account
from dintask.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    SubscriptionStatusResponse,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
)

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
async def register(
    request: Request,
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db)
):
    """Register an admin, or a team member as a pending join request (rate limited: 3/min)"""
    user = await register_account(db, data)
    await db.commit()
    logger.log_auth_event("register", True, user_email=user.email, role=role_of(user))
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder(await token_response(db, user)),
    )


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Login with email and password; role narrows the lookup (rate limited: 5/min)"""
    user = await authenticate(db, data.email, data.password, data.role)
    await record_login(db, user, request)
    await db.commit()
    return await token_response(db, user)


@router.get("/me")
async def get_me(
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    data = jsonable_encoder(serialize_account(current_user))
    if role_of(current_user) == ADMIN:
        data["planDetails"] = await plan_details(db, current_user)
    return {"success": True, "data": data}


@router.put("/updatedetails")
async def update_details(
    data: UpdateDetailsRequest,
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    if data.email and data.email.lower() != current_user.email:
        if await find_by_email(db, type(current_user), data.email):
            raise ValidationError("Email already registered")
        current_user.email = data.email.lower()
    if data.name:
        current_user.name = data.name
    if data.phone_number is not None:
        current_user.phone_number = data.phone_number

    await db.commit()
    return {"success": True, "data": serialize_account(current_user)}


@router.put("/updatepassword")
async def update_password(
    data: UpdatePasswordRequest,
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    if not current_user.check_password(data.current_password):
        raise AuthenticationError("Password is incorrect")

    current_user.set_password(data.new_password)
    await db.commit()
    logger.log_auth_event("password_changed", True, user_email=current_user.email)
    return await token_response(db, current_user)


@router.get("/subscription-status")
async def get_subscription_status(
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Subscription state of the caller's tenant (own state for admins)"""
    admin = current_user if role_of(current_user) == ADMIN else None
    if admin is None and current_user.workspace_id:
        admin = await db.get(Admin, current_user.workspace_id)

    state = SubscriptionStatusResponse(**subscription_state(admin))
    return {"success": True, "data": state}


@router.post("/logout")
async def logout(
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await close_login_activity(db, current_user)
    await db.commit()
    logger.log_auth_event("logout", True, user_email=current_user.email)
    return {"success": True, "data": {}}
