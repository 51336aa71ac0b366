"""
Platform console for the root superadmin and superadmin staff:
tenants, plans, staff, platform dashboards and billing overview.
"""
import random
from collections import OrderedDict
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from dintask.core.logging_config import logger
from dintask.core.rate_limiter import limiter, LOGIN_LIMIT, PASSWORD_RESET_LIMIT
from dintask.models.accounts import (
    Admin, Employee, Manager, SalesExecutive, SubscriptionStatus, SuperAdmin, SuperAdminRole,
)
from dintask.models.billing import Payment, PaymentStatus, Plan
from dintask.models.support import SupportLead, SupportTicket, TicketStatus
from dintask.modules.auth.accounts import (
    authenticate,
    close_login_activity,
    find_by_email,
    record_login,
    reset_password,
    send_reset_link,
    token_response,
)
from dintask.modules.auth.dependencies import (
    WorkspaceScope,
    authorize,
    bearer_scheme,
    get_user_from_token,
)
from dintask.modules.auth.roles import SUPERADMIN, SUPERADMIN_STAFF
from dintask.modules.auth.subscription import activate_plan, get_free_plan
from dintask.schemas.account import (
    AdminCreateRequest,
    AdminOut,
    AdminUpdateRequest,
    ChangePasswordRequest,
    StaffCreateRequest,
    StaffUpdateRequest,
    SuperAdminOut,
    UpdateProfileRequest,
)
from dintask.schemas.auth import ForgotPasswordRequest, LoginRequest, ResetPasswordRequest
from dintask.schemas.billing import AssignPlanRequest, PlanCreate, PlanOut, PlanUpdate, TransactionOut
from dintask.schemas.support import SupportLeadOut, TicketOut
from dintask.utils.pagination import paginate
from dintask.utils.uploads import discard_upload, store_upload

router = APIRouter()

platform_user = authorize(SUPERADMIN, SUPERADMIN_STAFF)

OPEN_TICKET_STATUSES = (TicketStatus.OPEN, TicketStatus.PENDING, TicketStatus.ESCALATED)

# Platform operators act outside any tenant
_platform_scope = WorkspaceScope(user=None, role=SUPERADMIN, admin_id=None)


def _created(data) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": data}),
    )


def _require_root(current_user):
    if not current_user.is_root:
        raise AuthorizationError("Only the root superadmin can manage staff")


async def _get_or_404(db: AsyncSession, model, record_id: str, label: str):
    return await _platform_scope.get_or_404(db, model, record_id, label)


# ==================== Public auth ====================

@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    user = await authenticate(db, data.email, data.password, SUPERADMIN)
    await record_login(db, user, request)
    await db.commit()
    return await token_response(db, user)


@router.post("/forgotpassword")
@limiter.limit(PASSWORD_RESET_LIMIT)
async def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    await send_reset_link(db, data.email, SUPERADMIN, path="superadmin/reset-password")
    await db.commit()
    return {"success": True, "data": "Email sent"}


@router.put("/resetpassword/{token}")
async def reset_password_with_token(
    token: str,
    data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    user = await reset_password(db, token, data.password, roles=(SUPERADMIN,))
    await db.commit()
    return await token_response(db, user)


@router.get("/logout")
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
):
    """Always succeeds; closes the login record when a valid token is sent"""
    if credentials and credentials.credentials:
        try:
            user = await get_user_from_token(db, credentials.credentials)
        except (AuthenticationError, AuthorizationError):
            user = None
        if user is not None:
            await close_login_activity(db, user)
            await db.commit()
    return {"success": True, "data": {}}


# ==================== Profile ====================

@router.put("/changepassword")
async def change_password(
    data: ChangePasswordRequest,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    if not current_user.check_password(data.current_password):
        raise AuthenticationError("Password is incorrect")
    current_user.set_password(data.new_password)
    await db.commit()
    return await token_response(db, current_user)


@router.get("/me")
async def get_me(current_user=Depends(platform_user)):
    return {"success": True, "data": SuperAdminOut.model_validate(current_user)}


@router.put("/updateprofile")
async def update_profile(
    data: UpdateProfileRequest,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    if data.email and data.email.lower() != current_user.email:
        if await find_by_email(db, SuperAdmin, data.email):
            raise ValidationError("Email already registered")
        current_user.email = data.email.lower()
    if data.name:
        current_user.name = data.name
    if data.phone_number is not None:
        current_user.phone_number = data.phone_number
    await db.commit()
    return {"success": True, "data": SuperAdminOut.model_validate(current_user)}


@router.put("/updateprofileimage")
async def update_profile_image(
    image: UploadFile = File(...),
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    previous = current_user.profile_image
    current_user.profile_image = await store_upload(image, folder="profiles")
    await db.commit()
    if previous:
        await discard_upload(previous)
    return {"success": True, "data": SuperAdminOut.model_validate(current_user)}


@router.get("/stats")
async def get_stats(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    admins = (await db.execute(select(func.count(Admin.id)))).scalar() or 0
    members = 0
    for model in (Manager, SalesExecutive, Employee):
        members += (await db.execute(select(func.count(model.id)))).scalar() or 0
    plans = (await db.execute(select(func.count(Plan.id)))).scalar() or 0
    return {
        "success": True,
        "data": {"totalAdmins": admins, "totalMembers": members, "totalPlans": plans},
    }


# ==================== Tenants ====================

@router.get("/admins")
async def list_admins(
    search: Optional[str] = Query(None),
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    stmt = select(Admin).order_by(Admin.created_at.desc())
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(Admin.name.ilike(pattern), Admin.email.ilike(pattern), Admin.company_name.ilike(pattern)))
    admins = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(admins), "data": [AdminOut.model_validate(a) for a in admins]}


@router.post("/admins", status_code=status.HTTP_201_CREATED)
async def create_admin(
    data: AdminCreateRequest,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    if await find_by_email(db, Admin, data.email):
        raise ValidationError("Email already registered")

    plan = await _get_or_404(db, Plan, data.plan_id, "Plan") if data.plan_id else await get_free_plan(db)

    admin = Admin(
        name=data.name,
        email=data.email.lower(),
        company_name=data.company_name,
        phone_number=data.phone_number,
    )
    admin.set_password(data.password)
    db.add(admin)
    await db.flush()
    if plan:
        activate_plan(admin, plan)
    await db.commit()
    await db.refresh(admin)
    return _created(AdminOut.model_validate(admin))


@router.put("/admins/{admin_id}")
async def update_admin(
    admin_id: str,
    data: AdminUpdateRequest,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    admin = await _get_or_404(db, Admin, admin_id, "Admin")
    updates = data.model_dump(exclude_unset=True)

    if "email" in updates and updates["email"]:
        email = updates.pop("email").lower()
        if email != admin.email and await find_by_email(db, Admin, email):
            raise ValidationError("Email already registered")
        admin.email = email
    if "subscription_status" in updates:
        try:
            admin.subscription_status = SubscriptionStatus(updates.pop("subscription_status"))
        except ValueError:
            raise ValidationError("Invalid subscription status")
    for field, value in updates.items():
        setattr(admin, field, value)

    await db.commit()
    return {"success": True, "data": AdminOut.model_validate(admin)}


@router.delete("/admins/{admin_id}")
async def delete_admin(
    admin_id: str,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    admin = await _get_or_404(db, Admin, admin_id, "Admin")
    await db.delete(admin)
    await db.commit()
    logger.log_tenant_event("tenant_deleted", admin_id, by=current_user.id)
    return {"success": True, "data": {}}


@router.put("/admins/{admin_id}/plan")
async def update_admin_plan(
    admin_id: str,
    data: AssignPlanRequest,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    admin = await _get_or_404(db, Admin, admin_id, "Admin")
    plan = await _get_or_404(db, Plan, data.plan_id, "Plan")
    activate_plan(admin, plan)
    await db.commit()
    return {"success": True, "data": AdminOut.model_validate(admin)}


# ==================== Plans ====================

@router.get("/plans")
async def list_plans(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    plans = (await db.execute(select(Plan).order_by(Plan.price))).scalars().all()
    return {"success": True, "count": len(plans), "data": [PlanOut.model_validate(p) for p in plans]}


@router.get("/plans/{plan_id}")
async def get_plan(
    plan_id: str,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    plan = await _get_or_404(db, Plan, plan_id, "Plan")
    return {"success": True, "data": PlanOut.model_validate(plan)}


async def _ensure_single_free_plan(db: AsyncSession, exclude_id: Optional[str] = None):
    stmt = select(Plan).where(Plan.price == 0)
    if exclude_id:
        stmt = stmt.where(Plan.id != exclude_id)
    if (await db.execute(stmt)).scalars().first():
        raise ValidationError("You can only create one free plan (Amount 0).")


@router.post("/plans", status_code=status.HTTP_201_CREATED)
async def create_plan(
    data: PlanCreate,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    if data.price == 0:
        await _ensure_single_free_plan(db)
    existing = await db.execute(select(Plan).where(Plan.name == data.name))
    if existing.scalars().first():
        raise ValidationError("A plan with that name already exists")

    plan = Plan(**data.model_dump())
    if not plan.color:
        plan.color = "#%06x" % random.randint(0, 0xFFFFFF)
    db.add(plan)
    await db.commit()
    await db.refresh(plan)
    return _created(PlanOut.model_validate(plan))


@router.put("/plans/{plan_id}")
async def update_plan(
    plan_id: str,
    data: PlanUpdate,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    plan = await _get_or_404(db, Plan, plan_id, "Plan")
    updates = data.model_dump(exclude_unset=True)
    if updates.get("price") == 0 and plan.price != 0:
        await _ensure_single_free_plan(db, exclude_id=plan.id)
    for field, value in updates.items():
        setattr(plan, field, value)
    await db.commit()
    return {"success": True, "data": PlanOut.model_validate(plan)}


@router.delete("/plans/{plan_id}")
async def delete_plan(
    plan_id: str,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    plan = await _get_or_404(db, Plan, plan_id, "Plan")
    await db.delete(plan)
    await db.commit()
    return {"success": True, "data": {}}


# ==================== Dashboard ====================

@router.get("/dashboard/summary")
async def dashboard_summary(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    total_admins = (await db.execute(select(func.count(Admin.id)))).scalar() or 0
    active_admins = (await db.execute(
        select(func.count(Admin.id)).where(Admin.subscription_status == SubscriptionStatus.ACTIVE)
    )).scalar() or 0
    total_users = total_admins
    for model in (Manager, SalesExecutive, Employee):
        total_users += (await db.execute(select(func.count(model.id)))).scalar() or 0
    revenue = (await db.execute(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.status == PaymentStatus.PAID)
    )).scalar() or 0
    open_tickets = (await db.execute(
        select(func.count(SupportTicket.id)).where(
            SupportTicket.is_escalated_to_super_admin.is_(True),
            SupportTicket.status.in_(OPEN_TICKET_STATUSES),
        )
    )).scalar() or 0

    return {
        "success": True,
        "data": {
            "totalAdmins": total_admins,
            "activeAdmins": active_admins,
            "totalUsers": total_users,
            "totalRevenue": revenue,
            "openTickets": open_tickets,
        },
    }


@router.get("/dashboard/role-distribution")
async def role_distribution(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    data = []
    for label, model in (("Admins", Admin), ("Managers", Manager), ("Sales", SalesExecutive), ("Employees", Employee)):
        count = (await db.execute(select(func.count(model.id)))).scalar() or 0
        data.append({"role": label, "count": count})
    return {"success": True, "data": data}


def _month_start(now: datetime, months_back: int) -> datetime:
    year, month = now.year, now.month - months_back
    while month <= 0:
        month += 12
        year -= 1
    return datetime(year, month, 1)


@router.get("/dashboard/user-growth")
async def user_growth(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    """New accounts per month over the last six months"""
    now = datetime.utcnow()
    start = _month_start(now, 5)
    buckets = OrderedDict()
    for back in range(5, -1, -1):
        month = _month_start(now, back)
        buckets[(month.year, month.month)] = {"month": month.strftime("%b %Y"), "admins": 0, "members": 0}

    for key, models in (("admins", (Admin,)), ("members", (Manager, SalesExecutive, Employee))):
        for model in models:
            rows = await db.execute(select(model.created_at).where(model.created_at >= start))
            for (created_at,) in rows.all():
                bucket = buckets.get((created_at.year, created_at.month))
                if bucket:
                    bucket[key] += 1

    return {"success": True, "data": list(buckets.values())}


@router.get("/dashboard/plan-distribution")
async def plan_distribution(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    rows = await db.execute(
        select(Admin.subscription_plan, func.count(Admin.id)).group_by(Admin.subscription_plan)
    )
    data = [{"plan": plan or "None", "count": count} for plan, count in rows.all()]
    return {"success": True, "data": data}


@router.get("/dashboard/pending-support")
async def pending_support(
    limit: int = Query(5, ge=1, le=50),
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    stmt = (
        select(SupportTicket)
        .where(
            SupportTicket.is_escalated_to_super_admin.is_(True),
            SupportTicket.status.in_(OPEN_TICKET_STATUSES),
        )
        .order_by(SupportTicket.created_at.desc())
        .limit(limit)
    )
    tickets = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(tickets), "data": [TicketOut.model_validate(t) for t in tickets]}


@router.get("/dashboard/recent-inquiries")
async def recent_inquiries(
    limit: int = Query(5, ge=1, le=50),
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    stmt = select(SupportLead).order_by(SupportLead.created_at.desc()).limit(limit)
    leads = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(leads), "data": [SupportLeadOut.model_validate(l) for l in leads]}


# ==================== Staff ====================

@router.get("/staff")
async def list_staff(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    stmt = select(SuperAdmin).where(SuperAdmin.role == SuperAdminRole.STAFF.value).order_by(SuperAdmin.created_at.desc())
    staff = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(staff), "data": [SuperAdminOut.model_validate(s) for s in staff]}


@router.post("/staff", status_code=status.HTTP_201_CREATED)
async def create_staff(
    data: StaffCreateRequest,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    _require_root(current_user)
    if await find_by_email(db, SuperAdmin, data.email):
        raise ValidationError("Email already registered")

    staff = SuperAdmin(
        name=data.name,
        email=data.email.lower(),
        phone_number=data.phone_number,
        role=SuperAdminRole.STAFF.value,
    )
    staff.set_password(data.password)
    db.add(staff)
    await db.commit()
    await db.refresh(staff)
    return _created(SuperAdminOut.model_validate(staff))


async def _get_staff(db: AsyncSession, staff_id: str) -> SuperAdmin:
    staff = await _get_or_404(db, SuperAdmin, staff_id, "Staff")
    if staff.is_root:
        raise AuthorizationError("The root superadmin cannot be modified here")
    return staff


@router.put("/staff/{staff_id}")
async def update_staff(
    staff_id: str,
    data: StaffUpdateRequest,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    _require_root(current_user)
    staff = await _get_staff(db, staff_id)
    updates = data.model_dump(exclude_unset=True)
    if updates.get("email"):
        email = updates.pop("email").lower()
        if email != staff.email and await find_by_email(db, SuperAdmin, email):
            raise ValidationError("Email already registered")
        staff.email = email
    for field, value in updates.items():
        if value is not None:
            setattr(staff, field, value)
    await db.commit()
    return {"success": True, "data": SuperAdminOut.model_validate(staff)}


@router.delete("/staff/{staff_id}")
async def delete_staff(
    staff_id: str,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    _require_root(current_user)
    staff = await _get_staff(db, staff_id)
    await db.delete(staff)
    await db.commit()
    return {"success": True, "data": {}}


# ==================== Billing ====================

@router.get("/billing/stats")
async def billing_stats(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    rows = await db.execute(
        select(Payment.status, func.count(Payment.id), func.coalesce(func.sum(Payment.amount), 0))
        .group_by(Payment.status)
    )
    by_status = {s.value: {"count": 0, "amount": 0} for s in PaymentStatus}
    for payment_status, count, amount in rows.all():
        by_status[payment_status.value] = {"count": count, "amount": amount}

    month_start = _month_start(datetime.utcnow(), 0)
    this_month = (await db.execute(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.status == PaymentStatus.PAID, Payment.created_at >= month_start
        )
    )).scalar() or 0

    return {
        "success": True,
        "data": {
            "totalRevenue": by_status[PaymentStatus.PAID.value]["amount"],
            "revenueThisMonth": this_month,
            "paidCount": by_status[PaymentStatus.PAID.value]["count"],
            "pendingCount": by_status[PaymentStatus.CREATED.value]["count"],
            "failedCount": by_status[PaymentStatus.FAILED.value]["count"],
        },
    }


@router.get("/billing/transactions")
async def billing_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    stmt = select(Payment).order_by(Payment.created_at.desc())
    count_stmt = select(func.count(Payment.id))
    if status_filter:
        try:
            wanted = PaymentStatus(status_filter)
        except ValueError:
            raise ValidationError("Invalid payment status")
        stmt = stmt.where(Payment.status == wanted)
        count_stmt = count_stmt.where(Payment.status == wanted)

    result = await paginate(db, stmt, page, limit, count_query=count_stmt)
    return {
        "success": True,
        "count": len(result["items"]),
        "pagination": result["pagination"],
        "data": [TransactionOut.model_validate(p) for p in result["items"]],
    }


@router.get("/subscription-history")
async def subscription_history(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    stmt = (
        select(Payment)
        .where(Payment.status == PaymentStatus.PAID)
        .order_by(Payment.created_at.desc())
    )
    payments = (await db.execute(stmt)).unique().scalars().all()
    return {"success": True, "count": len(payments), "data": [TransactionOut.model_validate(p) for p in payments]}
