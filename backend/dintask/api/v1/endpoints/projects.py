"""
Client projects.

Status changes cascade to the project's tasks: putting a project on hold
returns open tasks to pending, cancelling it cancels them. Deleting a
project deletes its tasks in the same transaction.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError
from dintask.models.accounts import Manager, SalesExecutive
from dintask.models.crm import Lead
from dintask.models.project import Project, ProjectStatus
from dintask.models.task import SubTask, Task, TaskStatus
from dintask.modules.auth.dependencies import (
    WorkspaceScope,
    authorize,
    check_admin_subscription,
    get_workspace,
)
from dintask.modules.auth.roles import ADMIN, EMPLOYEE, MANAGER, SALES
from dintask.schemas.project import ProjectCreate, ProjectOut, ProjectUpdate
from dintask.utils.pagination import paginate

router = APIRouter(dependencies=[Depends(check_admin_subscription)])

# Project status -> status pushed to its unfinished tasks
CASCADE_STATUSES = {
    ProjectStatus.ON_HOLD: TaskStatus.PENDING,
    ProjectStatus.CANCELLED: TaskStatus.CANCELLED,
}


def visible_projects(stmt, scope: WorkspaceScope):
    """Restrict a Project select to what the caller's role may see"""
    stmt = scope.filter(stmt, Project)
    user_id = scope.user.id
    if scope.role == MANAGER:
        stmt = stmt.where(Project.manager_id == user_id)
    elif scope.role == SALES:
        stmt = stmt.where(Project.sales_rep_id == user_id)
    elif scope.role == EMPLOYEE:
        assigned = (
            select(Task.project_id)
            .join(SubTask, SubTask.task_id == Task.id)
            .where(SubTask.assignee_id == user_id)
        )
        stmt = stmt.where(Project.id.in_(assigned))
    return stmt


async def get_project(db: AsyncSession, scope: WorkspaceScope, project_id: str) -> Project:
    project = await scope.get_or_404(db, Project, project_id, "Project")
    if scope.role == MANAGER and project.manager_id != scope.user.id:
        raise AuthorizationError("Not authorized to access this project")
    return project


@router.get("/")
async def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    stmt = visible_projects(select(Project), scope)
    if status_filter:
        stmt = stmt.where(Project.status == status_filter)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(Project.name.ilike(pattern), Project.client_company.ilike(pattern)))

    result = await paginate(db, stmt.order_by(Project.created_at.desc()), page, limit)
    return {
        "success": True,
        "count": len(result["items"]),
        "pagination": result["pagination"],
        "data": [ProjectOut.model_validate(p) for p in result["items"]],
    }


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    current_user=Depends(authorize(ADMIN, MANAGER)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    project = Project(
        name=data.name,
        description=data.description,
        client_company=data.client_company,
        status=data.status,
        deadline=data.deadline,
        budget=data.budget,
        assigned_by=current_user.id,
        admin_id=scope.admin_id,
    )
    if data.start_date:
        project.start_date = data.start_date

    if scope.role == MANAGER:
        project.manager_id = current_user.id
    elif data.manager_id:
        project.manager_id = (await scope.get_member_or_404(db, Manager, data.manager_id, "Manager")).id
    if data.client_id:
        client = await scope.get_or_404(db, Lead, data.client_id, "Client")
        project.client_id = client.id
        project.client_company = project.client_company or client.company
    if data.sales_rep_id:
        project.sales_rep_id = (await scope.get_member_or_404(db, SalesExecutive, data.sales_rep_id, "Sales Executive")).id

    db.add(project)
    await db.commit()
    await db.refresh(project)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": ProjectOut.model_validate(project)}),
    )


@router.get("/{project_id}")
async def get_project_detail(
    project_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    project = await get_project(db, scope, project_id)
    return {"success": True, "data": ProjectOut.model_validate(project)}


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    current_user=Depends(authorize(ADMIN, MANAGER)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    project = await get_project(db, scope, project_id)
    updates = data.model_dump(exclude_unset=True)

    manager_id = updates.pop("manager_id", None)
    if manager_id and scope.role == ADMIN:
        project.manager = await scope.get_member_or_404(db, Manager, manager_id, "Manager")

    new_status = updates.get("status")
    for field, value in updates.items():
        setattr(project, field, value)

    cascaded = 0
    if new_status in CASCADE_STATUSES:
        task_status = CASCADE_STATUSES[new_status]
        result = await db.execute(
            select(Task).where(Task.project_id == project.id, Task.status != TaskStatus.COMPLETED)
        )
        for task in result.scalars().all():
            if task.status != task_status:
                previous = task.status
                task.status = task_status
                task.log(current_user, "status_changed", f"Project {new_status.value}: {previous.value} -> {task_status.value}")
                cascaded += 1

    await db.commit()
    await db.refresh(project)
    return {"success": True, "tasksUpdated": cascaded, "data": ProjectOut.model_validate(project)}


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    current_user=Depends(authorize(ADMIN)),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    project = await get_project(db, scope, project_id)

    tasks = (await db.execute(select(Task).where(Task.project_id == project.id))).scalars().all()
    for task in tasks:
        await db.delete(task)
    await db.delete(project)
    await db.commit()
    return {"success": True, "data": {}, "tasksDeleted": len(tasks)}
