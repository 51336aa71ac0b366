"""Self-service profile routes for the three team roles"""
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.models.accounts import Employee, MemberStatus
from dintask.modules.auth.dependencies import (
    WorkspaceScope,
    authorize,
    check_admin_subscription,
    get_current_user,
    get_workspace,
)
from dintask.modules.auth.roles import ADMIN, EMPLOYEE, MANAGER, SALES, SUPERADMIN
from dintask.schemas.account import serialize_account
from dintask.schemas.auth import UpdateDetailsRequest

employee_router = APIRouter(
    dependencies=[Depends(authorize(EMPLOYEE)), Depends(check_admin_subscription)]
)
sales_router = APIRouter(
    dependencies=[Depends(authorize(SALES)), Depends(check_admin_subscription)]
)
manager_router = APIRouter(
    dependencies=[Depends(authorize(MANAGER, ADMIN, SUPERADMIN)), Depends(check_admin_subscription)]
)


async def _get_me(current_user=Depends(get_current_user)):
    return {"success": True, "data": serialize_account(current_user)}


async def _update_details(
    data: UpdateDetailsRequest,
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Members may change their display name and phone number only"""
    if data.name:
        current_user.name = data.name
    if data.phone_number is not None:
        current_user.phone_number = data.phone_number
    await db.commit()
    return {"success": True, "data": serialize_account(current_user)}


for _router in (employee_router, sales_router, manager_router):
    _router.add_api_route("/me", _get_me, methods=["GET"])

for _router in (employee_router, sales_router):
    _router.add_api_route("/updatedetails", _update_details, methods=["PUT"])


@manager_router.get("/employees")
async def list_employees(
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    """Active employees of the caller's workspace"""
    stmt = scope.filter(
        select(Employee).where(Employee.status == MemberStatus.ACTIVE).order_by(Employee.name),
        Employee,
    )
    employees = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(employees), "data": [serialize_account(e) for e in employees]}
