"""
Calendar entries.

Entries are single-day slots ("HH:MM" start and optional end). Two
scheduled entries of the same workspace may not overlap on a date.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError, ScheduleConflictError, ValidationError
from dintask.models.accounts import Admin, Employee, Manager, SalesExecutive
from dintask.models.schedule import Schedule, ScheduleParticipant, ScheduleStatus
from dintask.modules.auth.dependencies import (
    WorkspaceScope,
    authorize,
    check_admin_subscription,
    get_workspace,
)
from dintask.modules.auth.directory import find_workspace_account, workspace_accounts
from dintask.modules.auth.roles import ADMIN, EMPLOYEE, MANAGER, SALES
from dintask.schemas.schedule import ParticipantIn, ScheduleCreate, ScheduleOut, ScheduleUpdate

router = APIRouter(
    dependencies=[Depends(authorize(ADMIN, MANAGER, SALES, EMPLOYEE)), Depends(check_admin_subscription)]
)

# Tables whose accounts each role may invite
PARTICIPANT_MODELS = {
    SALES: (Admin, Manager, SalesExecutive),
    EMPLOYEE: (Admin, Manager, Employee),
}
DEFAULT_PARTICIPANT_MODELS = (Admin, Manager, Employee, SalesExecutive)


def slots_overlap(start: str, end: Optional[str], other_start: str, other_end: Optional[str]) -> bool:
    """Half-open [start, end) comparison; a slot without an end only clashes on the same start"""
    if start == other_start:
        return True
    end = end or start
    other_end = other_end or other_start
    return start < other_end and other_start < end


async def ensure_free_slot(
    db: AsyncSession,
    admin_id: str,
    day: date,
    start: str,
    end: Optional[str],
    exclude_id: Optional[str] = None,
) -> None:
    if end is not None and end <= start:
        raise ValidationError("End time must be after start time", field="endTime")

    stmt = select(Schedule).where(
        Schedule.admin_id == admin_id,
        Schedule.date == day,
        Schedule.status != ScheduleStatus.CANCELLED,
    )
    if exclude_id:
        stmt = stmt.where(Schedule.id != exclude_id)
    for other in (await db.execute(stmt)).scalars().all():
        if slots_overlap(start, end, other.time, other.end_time):
            raise ScheduleConflictError(
                f"Time slot conflict: An event already exists from {other.time} to {other.end_time or other.time}"
            )


async def _participants(db: AsyncSession, admin_id: str, entries: List[ParticipantIn]) -> List[ScheduleParticipant]:
    participants = []
    seen = set()
    for entry in entries:
        if entry.user_id in seen:
            continue
        account = await find_workspace_account(db, admin_id, entry.user_id, model_name=entry.user_type)
        if account is None:
            raise ValidationError(f"Participant {entry.user_id} is not part of this workspace", field="participants")
        seen.add(entry.user_id)
        participants.append(ScheduleParticipant(
            user_id=account.id,
            user_type=account.model_name,
            name=account.name,
            email=account.email,
        ))
    return participants


async def _own_schedule(db: AsyncSession, scope: WorkspaceScope, schedule_id: str) -> Schedule:
    schedule = await scope.get_or_404(db, Schedule, schedule_id, "Schedule")
    if schedule.created_by_id != scope.user.id:
        raise AuthorizationError("Only the creator can modify this schedule")
    return schedule


@router.get("/")
async def list_schedules(
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    user_id = scope.user.id
    participating = select(ScheduleParticipant.schedule_id).where(ScheduleParticipant.user_id == user_id)
    stmt = (
        scope.filter(select(Schedule), Schedule)
        .where(or_(Schedule.created_by_id == user_id, Schedule.id.in_(participating)))
        .order_by(Schedule.date, Schedule.time)
    )
    schedules = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(schedules), "data": [ScheduleOut.model_validate(s) for s in schedules]}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_schedule(
    data: ScheduleCreate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    await ensure_free_slot(db, scope.admin_id, data.date, data.time, data.end_time)

    schedule = Schedule(
        **data.model_dump(exclude={"participants"}),
        created_by_id=scope.user.id,
        created_by_model=scope.user.model_name,
        admin_id=scope.admin_id,
        participants=await _participants(db, scope.admin_id, data.participants),
    )
    db.add(schedule)
    await db.commit()
    await db.refresh(schedule)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": ScheduleOut.model_validate(schedule)}),
    )


@router.get("/participants")
async def list_participants(
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    """Workspace accounts the caller may invite, excluding the caller"""
    models = PARTICIPANT_MODELS.get(scope.role, DEFAULT_PARTICIPANT_MODELS)
    accounts = await workspace_accounts(db, scope.admin_id, models)
    data = [
        {"id": a.id, "name": a.name, "email": a.email, "userType": a.model_name}
        for a in accounts
        if a.id != scope.user.id
    ]
    return {"success": True, "count": len(data), "data": data}


@router.put("/{schedule_id}")
async def update_schedule(
    schedule_id: str,
    data: ScheduleUpdate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    schedule = await _own_schedule(db, scope, schedule_id)
    updates = data.model_dump(exclude_unset=True)

    reviving = schedule.status == ScheduleStatus.CANCELLED and updates.get("status") not in (
        None, ScheduleStatus.CANCELLED
    )
    if reviving or {"date", "time", "end_time"} & set(updates):
        await ensure_free_slot(
            db,
            schedule.admin_id,
            updates.get("date") or schedule.date,
            updates.get("time") or schedule.time,
            updates["end_time"] if "end_time" in updates else schedule.end_time,
            exclude_id=schedule.id,
        )

    if "participants" in updates:
        updates.pop("participants")
        schedule.participants = await _participants(db, schedule.admin_id, data.participants or [])
    for field, value in updates.items():
        setattr(schedule, field, value)

    await db.commit()
    await db.refresh(schedule)
    return {"success": True, "data": ScheduleOut.model_validate(schedule)}


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    schedule = await _own_schedule(db, scope, schedule_id)
    await db.delete(schedule)
    await db.commit()
    return {"success": True, "data": {}}
