from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError
from dintask.models.crm import FollowUp, Lead
from dintask.modules.auth.dependencies import (
    WorkspaceScope,
    authorize,
    check_admin_subscription,
    get_workspace,
)
from dintask.modules.auth.roles import ADMIN, SALES
from dintask.schemas.crm import FollowUpCreate, FollowUpOut, FollowUpUpdate

router = APIRouter(
    dependencies=[Depends(authorize(ADMIN, SALES)), Depends(check_admin_subscription)]
)


async def _editable_follow_up(db: AsyncSession, scope: WorkspaceScope, follow_up_id: str) -> FollowUp:
    follow_up = await scope.get_or_404(db, FollowUp, follow_up_id, "Follow-up")
    if scope.role != ADMIN and follow_up.sales_rep_id != scope.user.id:
        raise AuthorizationError("Not authorized")
    return follow_up


@router.get("/")
async def list_follow_ups(
    lead_id: Optional[str] = Query(None, alias="leadId"),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    stmt = scope.filter(select(FollowUp), FollowUp)
    if scope.role == SALES:
        stmt = stmt.where(FollowUp.sales_rep_id == scope.user.id)
    if lead_id:
        stmt = stmt.where(FollowUp.lead_id == lead_id)

    follow_ups = (await db.execute(stmt.order_by(FollowUp.scheduled_at))).unique().scalars().all()
    return {"success": True, "count": len(follow_ups), "data": [FollowUpOut.model_validate(f) for f in follow_ups]}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_follow_up(
    data: FollowUpCreate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    lead = await scope.get_or_404(db, Lead, data.lead_id, "Lead")
    follow_up = FollowUp(
        **data.model_dump(exclude={"lead_id"}),
        lead_id=lead.id,
        sales_rep_id=scope.user.id,
        admin_id=scope.admin_id,
    )
    db.add(follow_up)
    await db.commit()
    await db.refresh(follow_up)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": FollowUpOut.model_validate(follow_up)}),
    )


@router.put("/{follow_up_id}")
async def update_follow_up(
    follow_up_id: str,
    data: FollowUpUpdate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    follow_up = await _editable_follow_up(db, scope, follow_up_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(follow_up, field, value)
    await db.commit()
    return {"success": True, "data": FollowUpOut.model_validate(follow_up)}


@router.delete("/{follow_up_id}")
async def delete_follow_up(
    follow_up_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    follow_up = await _editable_follow_up(db, scope, follow_up_id)
    await db.delete(follow_up)
    await db.commit()
    return {"success": True, "data": {}}
