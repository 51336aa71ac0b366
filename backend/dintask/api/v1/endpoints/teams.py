from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError, ValidationError
from dintask.models.accounts import Employee, Manager
from dintask.models.team import Team
from dintask.modules.auth.dependencies import (
    WorkspaceScope,
    authorize,
    check_admin_subscription,
    get_workspace,
)
from dintask.modules.auth.directory import find_workspace_account
from dintask.modules.auth.roles import ADMIN, MANAGER
from dintask.schemas.team import TeamCreate, TeamOut, TeamUpdate

router = APIRouter(
    dependencies=[Depends(authorize(MANAGER, ADMIN)), Depends(check_admin_subscription)]
)


async def _employees(db: AsyncSession, admin_id: str, ids: List[str]) -> List[Employee]:
    employees = []
    for employee_id in dict.fromkeys(ids):
        employee = await find_workspace_account(db, admin_id, employee_id, models=(Employee,))
        if employee is None:
            raise ValidationError(f"Employee {employee_id} is not part of this workspace", field="members")
        employees.append(employee)
    return employees


async def _owned_team(db: AsyncSession, scope: WorkspaceScope, team_id: str) -> Team:
    team = await scope.get_or_404(db, Team, team_id, "Team")
    if scope.role == MANAGER and team.manager_id != scope.user.id:
        raise AuthorizationError("Not authorized to manage this team")
    return team


@router.get("/")
async def list_teams(
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    stmt = scope.filter(select(Team), Team).order_by(Team.created_at.desc())
    if scope.role == MANAGER:
        stmt = stmt.where(Team.manager_id == scope.user.id)
    teams = (await db.execute(stmt)).unique().scalars().all()
    return {"success": True, "count": len(teams), "data": [TeamOut.model_validate(t) for t in teams]}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_team(
    data: TeamCreate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    if scope.role == MANAGER:
        manager_id = scope.user.id
    else:
        if not data.manager_id:
            raise ValidationError("Please provide a manager for this team", field="managerId")
        manager_id = (await scope.get_member_or_404(db, Manager, data.manager_id, "Manager")).id

    team = Team(
        name=data.name,
        description=data.description,
        manager_id=manager_id,
        admin_id=scope.admin_id,
        members=await _employees(db, scope.admin_id, data.members),
    )
    db.add(team)
    await db.commit()
    await db.refresh(team)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": TeamOut.model_validate(team)}),
    )


@router.put("/{team_id}")
async def update_team(
    team_id: str,
    data: TeamUpdate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    team = await _owned_team(db, scope, team_id)
    updates = data.model_dump(exclude_unset=True)
    if "members" in updates:
        team.members = await _employees(db, team.admin_id, updates.pop("members") or [])
    for field, value in updates.items():
        setattr(team, field, value)
    await db.commit()
    await db.refresh(team)
    return {"success": True, "data": TeamOut.model_validate(team)}


@router.delete("/{team_id}")
async def delete_team(
    team_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    team = await _owned_team(db, scope, team_id)
    await db.delete(team)
    await db.commit()
    return {"success": True, "data": {}}
