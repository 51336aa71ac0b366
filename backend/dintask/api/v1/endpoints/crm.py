"""
Sales pipeline endpoints.

Admins see every lead of their workspace; sales executives only the leads
they own. A Won lead with an amount and deadline can be put forward for
project conversion, which an admin approves by naming a manager.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError, ValidationError
from dintask.core.logging_config import logger
from dintask.models.accounts import Manager, MemberStatus, SalesExecutive
from dintask.models.crm import ApprovalStatus, Lead, LeadStatus, Priority
from dintask.models.notification import NotificationType
from dintask.models.project import Project
from dintask.modules.auth.dependencies import (
    WorkspaceScope,
    authorize,
    check_admin_subscription,
    get_workspace,
)
from dintask.modules.auth.roles import ADMIN, SALES
from dintask.schemas.account import serialize_account
from dintask.schemas.crm import (
    ApproveProjectRequest,
    AssignLeadRequest,
    LeadCreate,
    LeadOut,
    LeadUpdate,
)
from dintask.schemas.project import ProjectOut
from dintask.services.notification_service import notify

router = APIRouter(
    dependencies=[Depends(authorize(ADMIN, SALES)), Depends(check_admin_subscription)]
)

admin_only = authorize(ADMIN)


async def get_lead(db: AsyncSession, scope: WorkspaceScope, lead_id: str) -> Lead:
    """Tenant-checked lead; sales executives may only touch their own"""
    lead = await scope.get_or_404(db, Lead, lead_id, "Lead")
    if scope.role == SALES and lead.owner_id != scope.user.id:
        raise AuthorizationError("Not authorized to access this lead")
    return lead


async def _sales_executive(db: AsyncSession, scope: WorkspaceScope, sales_id: str) -> SalesExecutive:
    return await scope.get_member_or_404(db, SalesExecutive, sales_id, "Sales Executive")


@router.get("/")
async def list_leads(
    status_filter: Optional[LeadStatus] = Query(None, alias="status"),
    priority: Optional[Priority] = Query(None),
    source: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    stmt = scope.filter(select(Lead), Lead)
    if scope.role == SALES:
        stmt = stmt.where(Lead.owner_id == scope.user.id)
    if status_filter:
        stmt = stmt.where(Lead.status == status_filter)
    if priority:
        stmt = stmt.where(Lead.priority == priority)
    if source:
        stmt = stmt.where(Lead.source == source)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(Lead.name.ilike(pattern), Lead.email.ilike(pattern), Lead.company.ilike(pattern)))

    leads = (await db.execute(stmt.order_by(Lead.created_at.desc()))).unique().scalars().all()
    return {"success": True, "count": len(leads), "data": [LeadOut.model_validate(l) for l in leads]}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_lead(
    data: LeadCreate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    values = data.model_dump(exclude={"owner"})
    lead = Lead(**values, admin_id=scope.admin_id)
    if scope.role == SALES:
        lead.owner_id = scope.user.id
    elif data.owner:
        lead.owner_id = (await _sales_executive(db, scope, data.owner)).id

    db.add(lead)
    await db.commit()
    await db.refresh(lead)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": LeadOut.model_validate(lead)}),
    )


@router.get("/sales-executives")
async def list_sales_executives(
    current_user=Depends(admin_only),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    stmt = scope.filter(
        select(SalesExecutive)
        .where(SalesExecutive.status == MemberStatus.ACTIVE)
        .order_by(SalesExecutive.name),
        SalesExecutive,
    )
    executives = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(executives), "data": [serialize_account(e) for e in executives]}


@router.get("/pending-projects")
async def list_pending_projects(
    current_user=Depends(admin_only),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    stmt = scope.filter(
        select(Lead)
        .where(Lead.approval_status == ApprovalStatus.PENDING_PROJECT)
        .order_by(Lead.updated_at.desc()),
        Lead,
    )
    leads = (await db.execute(stmt)).unique().scalars().all()
    return {"success": True, "count": len(leads), "data": [LeadOut.model_validate(l) for l in leads]}


@router.get("/{lead_id}")
async def get_lead_detail(
    lead_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    lead = await get_lead(db, scope, lead_id)
    return {"success": True, "data": LeadOut.model_validate(lead)}


@router.put("/{lead_id}")
async def update_lead(
    lead_id: str,
    data: LeadUpdate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    lead = await get_lead(db, scope, lead_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(lead, field, value)
    await db.commit()
    return {"success": True, "data": LeadOut.model_validate(lead)}


@router.delete("/{lead_id}")
async def delete_lead(
    lead_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    lead = await get_lead(db, scope, lead_id)
    await db.delete(lead)
    await db.commit()
    return {"success": True, "data": {}}


@router.put("/{lead_id}/assign")
async def assign_lead(
    lead_id: str,
    data: AssignLeadRequest,
    current_user=Depends(admin_only),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    lead = await get_lead(db, scope, lead_id)
    owner = await _sales_executive(db, scope, data.owner)
    lead.owner = owner

    await notify(
        db, owner, current_user, NotificationType.LEAD_ASSIGNED,
        "New Lead Assigned",
        f"You have been assigned a new lead: {lead.name}",
        link="/sales/leads",
    )
    await db.commit()
    return {"success": True, "data": LeadOut.model_validate(lead)}


@router.put("/{lead_id}/request-project")
async def request_project_conversion(
    lead_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    """Won lead with a positive amount and a deadline -> pending_project"""
    lead = await get_lead(db, scope, lead_id)

    if lead.status != LeadStatus.WON:
        raise ValidationError("Only Won leads can be converted")
    if not lead.amount or lead.amount <= 0:
        raise ValidationError("Lead amount must be greater than zero")
    if not lead.deadline:
        raise ValidationError("Lead deadline is required")
    if lead.approval_status in (ApprovalStatus.PENDING_PROJECT, ApprovalStatus.APPROVED_PROJECT):
        raise ValidationError("Project conversion already requested for this lead")

    lead.approval_status = ApprovalStatus.PENDING_PROJECT
    await db.commit()
    return {"success": True, "data": LeadOut.model_validate(lead)}


@router.put("/{lead_id}/approve-project")
async def approve_project(
    lead_id: str,
    data: ApproveProjectRequest,
    current_user=Depends(admin_only),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    """
    Create the project for a pending lead.

    Project, lead update and the manager's notification are committed
    together.
    """
    if not data.manager_id:
        raise ValidationError("Manager ID is required")

    lead = await get_lead(db, scope, lead_id)
    if lead.project_ref:
        raise ValidationError("Project already created for this lead")
    if lead.approval_status != ApprovalStatus.PENDING_PROJECT:
        raise ValidationError("Lead is not pending project approval")

    manager = await scope.get_member_or_404(db, Manager, data.manager_id, "Manager")

    project = Project(
        name=f"{lead.company or lead.name} Project",
        description=lead.notes,
        client_id=lead.id,
        client_company=lead.company,
        manager_id=manager.id,
        sales_rep_id=lead.owner_id,
        assigned_by=current_user.id,
        admin_id=lead.admin_id,
        budget=lead.amount,
        deadline=lead.deadline,
    )
    db.add(project)
    await db.flush()

    lead.approval_status = ApprovalStatus.APPROVED_PROJECT
    lead.project_ref = project.id

    await notify(
        db, manager, current_user, NotificationType.PROJECT_APPROVED,
        "New Project Assigned",
        f"You have been assigned as manager for project: {project.name}",
        link=f"/manager/projects/{project.id}",
    )
    await db.commit()
    await db.refresh(project)

    logger.log_tenant_event("project_approved", lead.admin_id, lead_id=lead.id, project_id=project.id)
    return {
        "success": True,
        "data": {"lead": LeadOut.model_validate(lead), "project": ProjectOut.model_validate(project)},
    }


@router.put("/{lead_id}/reject-project")
async def reject_project(
    lead_id: str,
    current_user=Depends(admin_only),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    lead = await get_lead(db, scope, lead_id)
    if lead.approval_status != ApprovalStatus.PENDING_PROJECT:
        raise ValidationError("Lead is not pending project approval")
    lead.approval_status = ApprovalStatus.REJECTED
    await db.commit()
    return {"success": True, "data": LeadOut.model_validate(lead)}
