"""Landing page pricing cards (distinct from the subscription Plan catalogue)"""
from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.db.seed_data import seed_pricing_plans
from dintask.models.billing import PricingPlan
from dintask.modules.auth.dependencies import WorkspaceScope, authorize, get_workspace
from dintask.modules.auth.roles import SUPERADMIN, SUPERADMIN_STAFF
from dintask.schemas.billing import PricingPlanCreate, PricingPlanOut, PricingPlanUpdate

router = APIRouter()

platform_user = authorize(SUPERADMIN, SUPERADMIN_STAFF)


@router.get("/landing-page")
async def get_pricing_plans(db: AsyncSession = Depends(get_db)):
    """Public; the three default tiers are created on first read"""
    stmt = select(PricingPlan).order_by(PricingPlan.order, PricingPlan.created_at)
    plans = (await db.execute(stmt)).scalars().all()
    if not plans:
        await seed_pricing_plans(db)
        await db.commit()
        plans = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(plans), "data": [PricingPlanOut.model_validate(p) for p in plans]}


@router.post("/landing-page", status_code=status.HTTP_201_CREATED)
async def create_pricing_plan(
    data: PricingPlanCreate,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    plan = PricingPlan(**data.model_dump())
    db.add(plan)
    await db.commit()
    await db.refresh(plan)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": PricingPlanOut.model_validate(plan)}),
    )


@router.put("/landing-page/{plan_id}")
async def update_pricing_plan(
    plan_id: str,
    data: PricingPlanUpdate,
    current_user=Depends(platform_user),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    plan = await scope.get_or_404(db, PricingPlan, plan_id, "Plan")
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(plan, field, value)
    await db.commit()
    return {"success": True, "data": PricingPlanOut.model_validate(plan)}


@router.delete("/landing-page/{plan_id}")
async def delete_pricing_plan(
    plan_id: str,
    current_user=Depends(platform_user),
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    plan = await scope.get_or_404(db, PricingPlan, plan_id, "Plan")
    await db.delete(plan)
    await db.commit()
    return {"success": True, "data": {}}
