"""
Tenant administration: member directory, join requests, direct member
creation, plan catalogue and the admin dashboard. Also hosts admin
self-registration and the password reset flow for tenant accounts.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from dintask.core.logging_config import logger
from dintask.core.rate_limiter import limiter, REGISTER_LIMIT, PASSWORD_RESET_LIMIT
from dintask.core.types import is_valid_uuid
from dintask.models.accounts import (
    Admin, Employee, Manager, MemberStatus, SalesExecutive, SuperAdmin, MEMBER_MODELS,
)
from dintask.models.billing import Plan
from dintask.models.crm import Lead, LeadStatus
from dintask.models.project import Project
from dintask.models.task import Task
from dintask.modules.auth.accounts import (
    find_by_email,
    register_account,
    reset_password,
    send_reset_link,
    token_response,
)
from dintask.modules.auth.dependencies import WorkspaceScope, authorize, get_workspace
from dintask.modules.auth.roles import (
    ADMIN, EMPLOYEE, MANAGER, SALES, SUPERADMIN, TEAM_ROLES, model_for_role, normalize_role,
)
from dintask.modules.auth.usage_limits import require_user_slot
from dintask.schemas.account import AddMemberRequest, JoinRequestAction, serialize_account
from dintask.schemas.auth import (
    AdminRegisterRequest,
    ForgotPasswordRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from dintask.schemas.billing import PlanOut

router = APIRouter()

admin_only = authorize(ADMIN, SUPERADMIN)


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
async def register_admin(
    request: Request,
    data: AdminRegisterRequest,
    db: AsyncSession = Depends(get_db)
):
    user = await register_account(db, RegisterRequest(**data.model_dump(), role=ADMIN))
    await db.commit()
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder(await token_response(db, user)),
    )


@router.post("/forgotpassword")
@limiter.limit(PASSWORD_RESET_LIMIT)
async def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    await send_reset_link(db, data.email, data.role)
    await db.commit()
    return {"success": True, "data": "Email sent"}


@router.put("/resetpassword/{token}")
async def reset_password_with_token(
    token: str,
    data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    user = await reset_password(db, token, data.password, roles=(ADMIN,) + TEAM_ROLES)
    await db.commit()
    return await token_response(db, user)


@router.get("/users")
async def list_users(
    current_user=Depends(admin_only),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    """Tenant members for an admin; every account for the superadmin"""
    models = MEMBER_MODELS if not scope.is_platform else MEMBER_MODELS + (Admin, SuperAdmin)
    users = []
    for model in models:
        stmt = select(model).order_by(model.created_at.desc())
        if model in MEMBER_MODELS:
            stmt = scope.filter(stmt, model)
        users.extend((await db.execute(stmt)).scalars().all())

    return {
        "success": True,
        "count": len(users),
        "data": [serialize_account(u) for u in users],
    }


@router.get("/plans")
async def list_plans(
    current_user=Depends(admin_only),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    stmt = select(Plan).where(Plan.is_active.is_(True)).order_by(Plan.price)
    if not scope.is_platform:
        stmt = stmt.where(Plan.price > 0)
    plans = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(plans), "data": [PlanOut.model_validate(p) for p in plans]}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    role: Optional[str] = Query(None),
    current_user=Depends(admin_only),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    if not role:
        raise ValidationError("Please provide user role for deletion")
    role = normalize_role(role)
    model = model_for_role(role)
    if model is None:
        raise ValidationError("Please provide a valid role")

    if not scope.is_platform and role not in TEAM_ROLES:
        raise AuthorizationError(f"User role {scope.role} is not authorized to delete {role} accounts")

    if role in TEAM_ROLES:
        user = await scope.get_or_404(db, model, user_id, "User")
    else:
        user = await db.get(model, user_id) if is_valid_uuid(user_id) else None
        if user is None:
            raise ResourceNotFoundError("User")

    await db.delete(user)
    await db.commit()
    logger.log_tenant_event("member_deleted", scope.admin_id, role=role, user_id=user_id)
    return {"success": True, "data": {}}


@router.get("/join-requests")
async def list_join_requests(
    current_user=Depends(authorize(ADMIN)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    pending = []
    for model in MEMBER_MODELS:
        stmt = scope.filter(
            select(model).where(model.status == MemberStatus.PENDING).order_by(model.created_at),
            model,
        )
        pending.extend((await db.execute(stmt)).scalars().all())
    return {"success": True, "count": len(pending), "data": [serialize_account(u) for u in pending]}


async def _pending_member(db: AsyncSession, scope: WorkspaceScope, user_id: str, role: str):
    role = normalize_role(role)
    if role not in TEAM_ROLES:
        raise ValidationError("Please provide a valid role")
    member = await scope.get_or_404(db, model_for_role(role), user_id, "User")
    if member.status != MemberStatus.PENDING:
        raise ValidationError("Join request is not pending")
    return member


@router.put("/join-requests/{user_id}/approve")
async def approve_join_request(
    user_id: str,
    data: JoinRequestAction,
    current_user=Depends(authorize(ADMIN)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    member = await _pending_member(db, scope, user_id, data.role)
    check = await require_user_slot(db, scope.admin_id, exclude_id=member.id)
    member.status = MemberStatus.ACTIVE
    await db.commit()
    logger.log_tenant_event("join_approved", scope.admin_id, user_id=member.id, seats_used=check.current)
    return {"success": True, "data": serialize_account(member)}


@router.put("/join-requests/{user_id}/reject")
async def reject_join_request(
    user_id: str,
    data: JoinRequestAction,
    current_user=Depends(authorize(ADMIN)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    member = await _pending_member(db, scope, user_id, data.role)
    member.status = MemberStatus.REJECTED
    await db.commit()
    logger.log_tenant_event("join_rejected", scope.admin_id, user_id=member.id)
    return {"success": True, "data": serialize_account(member)}


@router.post("/add-member", status_code=status.HTTP_201_CREATED)
async def add_member(
    data: AddMemberRequest,
    current_user=Depends(authorize(ADMIN)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    role = normalize_role(data.role)
    if role not in TEAM_ROLES:
        raise ValidationError("Please provide a valid role")

    model = model_for_role(role)
    if await find_by_email(db, model, data.email):
        raise ValidationError("Email already registered")

    await require_user_slot(db, scope.admin_id)

    member = model(
        name=data.name,
        email=data.email.lower(),
        phone_number=data.phone_number,
        admin_id=scope.admin_id,
        status=MemberStatus.ACTIVE,
    )
    if role == EMPLOYEE and data.manager_id:
        manager = await scope.get_member_or_404(db, Manager, data.manager_id, "Manager")
        member.manager_id = manager.id
    member.set_password(data.password)
    db.add(member)
    await db.commit()
    await db.refresh(member)
    logger.log_tenant_event("member_added", scope.admin_id, role=role, user_id=member.id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": serialize_account(member)}),
    )


async def _grouped_counts(db: AsyncSession, scope: WorkspaceScope, model, column):
    stmt = scope.filter(select(column, func.count()).group_by(column), model)
    rows = (await db.execute(stmt)).all()
    return {getattr(key, "value", key): count for key, count in rows}


@router.get("/dashboard")
async def dashboard(
    current_user=Depends(authorize(ADMIN)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    members = {}
    for key, model in ((MANAGER, Manager), (SALES, SalesExecutive), (EMPLOYEE, Employee)):
        stmt = scope.filter(select(func.count(model.id)), model)
        members[key] = (await db.execute(stmt)).scalar() or 0

    revenue_stmt = scope.filter(
        select(func.coalesce(func.sum(Lead.amount), 0)).where(Lead.status == LeadStatus.WON), Lead
    )
    revenue = (await db.execute(revenue_stmt)).scalar() or 0

    return {
        "success": True,
        "data": {
            "members": members,
            "totalMembers": sum(members.values()),
            "leads": await _grouped_counts(db, scope, Lead, Lead.status),
            "projects": await _grouped_counts(db, scope, Project, Project.status),
            "tasks": await _grouped_counts(db, scope, Task, Task.status),
            "revenue": revenue,
        },
    }
