"""
Tasks.

Each assignee works on their own subtask; the task's progress and status
are re-aggregated from the subtasks whenever an assignee reports. The
admin and the assigner may edit the task itself. Every change is appended
to the activity log.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError, ValidationError
from dintask.models.accounts import MEMBER_MODELS
from dintask.models.crm import Priority
from dintask.models.notification import NotificationType
from dintask.models.project import Project
from dintask.models.task import SubTask, Task, TaskStatus
from dintask.modules.auth.dependencies import (
    WorkspaceScope,
    authorize,
    check_admin_subscription,
    get_workspace,
)
from dintask.modules.auth.directory import find_workspace_account
from dintask.modules.auth.roles import ADMIN, EMPLOYEE, MANAGER, SALES
from dintask.schemas.task import TaskCreate, TaskOut, TaskUpdate
from dintask.services.notification_service import notify

router = APIRouter(dependencies=[Depends(check_admin_subscription)])

ASSIGNEE_FIELDS = {"status", "progress"}
EDITABLE_FIELDS = ("title", "description", "status", "priority", "deadline", "labels")


def _assigned_to(user_id):
    return select(SubTask.task_id).where(SubTask.assignee_id == str(user_id))


async def _resolve_assignees(db: AsyncSession, admin_id: str, user_ids: List[str]) -> list:
    assignees = []
    for user_id in dict.fromkeys(user_ids):
        member = await find_workspace_account(db, admin_id, user_id, models=MEMBER_MODELS)
        if member is None:
            raise ValidationError(f"Assignee {user_id} is not a member of this workspace", field="assignedTo")
        assignees.append(member)
    return assignees


async def _notify_assignees(db: AsyncSession, task: Task, assignees: list, sender):
    for assignee in assignees:
        await notify(
            db, assignee, sender, NotificationType.TASK_ASSIGNED,
            "New Task Assigned",
            f"You have been assigned a new task: {task.title}",
            link=f"/tasks/{task.id}",
        )


async def get_task(db: AsyncSession, scope: WorkspaceScope, task_id: str) -> Task:
    task = await scope.get_or_404(db, Task, task_id, "Task")
    if scope.role in (EMPLOYEE, SALES) and task.subtask_for(scope.user.id) is None:
        raise AuthorizationError("Not authorized to access this task")
    return task


def can_manage(scope: WorkspaceScope, task: Task) -> bool:
    return scope.role == ADMIN or task.assigned_by_id == scope.user.id


@router.get("/")
async def list_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    project: Optional[str] = Query(None),
    priority: Optional[Priority] = Query(None),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    stmt = scope.filter(select(Task), Task)
    user_id = scope.user.id
    if scope.role == MANAGER:
        stmt = stmt.where(or_(Task.assigned_by_id == user_id, Task.id.in_(_assigned_to(user_id))))
    elif scope.role in (EMPLOYEE, SALES):
        stmt = stmt.where(Task.id.in_(_assigned_to(user_id)))

    if status_filter:
        stmt = stmt.where(Task.status == status_filter)
    if project:
        stmt = stmt.where(Task.project_id == project)
    if priority:
        stmt = stmt.where(Task.priority == priority)

    tasks = (await db.execute(stmt.order_by(Task.created_at.desc()))).scalars().all()
    return {"success": True, "count": len(tasks), "data": [TaskOut.model_validate(t) for t in tasks]}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    current_user=Depends(authorize(ADMIN, MANAGER)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    project = await scope.get_or_404(db, Project, data.project, "Project")
    assignees = await _resolve_assignees(db, project.admin_id, data.assigned_to)

    task = Task(
        title=data.title,
        description=data.description,
        project_id=project.id,
        assigned_by_id=current_user.id,
        assigned_by_model=current_user.model_name,
        admin_id=project.admin_id,
        priority=data.priority,
        deadline=data.deadline,
        labels=data.labels,
        subtasks=[
            SubTask(assignee_id=a.id, assignee_model=a.model_name) for a in assignees
        ],
        activities=[],
    )
    task.log(current_user, "created", f"Task created: {task.title}")
    db.add(task)
    await db.flush()

    await _notify_assignees(db, task, assignees, current_user)
    await db.commit()
    await db.refresh(task)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": TaskOut.model_validate(task)}),
    )


@router.get("/{task_id}")
async def get_task_detail(
    task_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    task = await get_task(db, scope, task_id)
    return {"success": True, "data": TaskOut.model_validate(task)}


def _update_own_subtask(task: Task, user, updates: dict) -> None:
    subtask = task.subtask_for(user.id)
    new_status = updates.get("status")
    if new_status is not None:
        subtask.status = new_status
        if new_status == TaskStatus.COMPLETED and "progress" not in updates:
            subtask.progress = 100
    if updates.get("progress") is not None:
        subtask.progress = updates["progress"]

    task.log(
        user, "subtask_updated",
        f"{user.name} set their part to {subtask.status.value} ({subtask.progress}%)",
    )
    previous = task.status
    task.aggregate()
    if task.status != previous:
        task.log(user, "status_changed", f"Status changed from {previous.value} to {task.status.value}")


async def _update_task_fields(db: AsyncSession, task: Task, scope: WorkspaceScope, updates: dict) -> list:
    """Apply a full edit; returns newly added assignees"""
    user = scope.user
    for field in EDITABLE_FIELDS:
        if field not in updates:
            continue
        old, new = getattr(task, field), updates[field]
        if old == new:
            continue
        setattr(task, field, new)
        if field == "status":
            task.log(user, "status_changed", f"Status changed from {old.value} to {new.value}")
        else:
            task.log(user, "updated", f"{field} updated")

    if updates.get("progress") is not None and updates["progress"] != task.progress:
        task.progress = updates["progress"]
        task.log(user, "updated", f"progress set to {task.progress}%")

    added = []
    if updates.get("assigned_to") is not None:
        wanted = await _resolve_assignees(db, task.admin_id, updates["assigned_to"])
        wanted_ids = {a.id for a in wanted}
        for subtask in list(task.subtasks):
            if subtask.assignee_id not in wanted_ids:
                task.subtasks.remove(subtask)
                task.log(user, "unassigned", f"Removed assignee {subtask.assignee_id}")
        current = set(task.assigned_to)
        for assignee in wanted:
            if assignee.id not in current:
                task.subtasks.append(SubTask(assignee_id=assignee.id, assignee_model=assignee.model_name))
                task.log(user, "assigned", f"Assigned to {assignee.name}")
                added.append(assignee)
    return added


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    data: TaskUpdate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    task = await get_task(db, scope, task_id)
    updates = data.model_dump(exclude_unset=True)

    if can_manage(scope, task):
        added = await _update_task_fields(db, task, scope, updates)
        await _notify_assignees(db, task, added, scope.user)
    elif task.subtask_for(scope.user.id) is not None:
        if set(updates) - ASSIGNEE_FIELDS:
            raise AuthorizationError("Assignees may only update the status and progress of their own part")
        _update_own_subtask(task, scope.user, updates)
    else:
        raise AuthorizationError("Not authorized to update this task")

    await db.commit()
    await db.refresh(task)
    return {"success": True, "data": TaskOut.model_validate(task)}


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    task = await get_task(db, scope, task_id)
    if not can_manage(scope, task):
        raise AuthorizationError("Not authorized to delete this task")
    await db.delete(task)
    await db.commit()
    return {"success": True, "data": {}}
