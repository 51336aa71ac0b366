from datetime import datetime

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import ValidationError
from dintask.db.seed_data import seed_system_intel
from dintask.models.content import SystemIntel
from dintask.modules.auth.dependencies import authorize
from dintask.modules.auth.roles import SUPERADMIN, SUPERADMIN_STAFF
from dintask.schemas.content import SystemIntelOut, SystemIntelUpsert

router = APIRouter()

platform_user = authorize(SUPERADMIN, SUPERADMIN_STAFF)

INTEL_ROLES = ("Admin", "Manager", "Sales", "Employee", "SuperAdmin")


@router.get("/")
async def get_system_intel(db: AsyncSession = Depends(get_db)):
    intel = (await db.execute(select(SystemIntel).order_by(SystemIntel.created_at))).scalars().all()
    return {"success": True, "data": [SystemIntelOut.model_validate(i) for i in intel]}


@router.put("/{role}")
async def upsert_system_intel(
    role: str,
    data: SystemIntelUpsert,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    """Create or replace the card for one role"""
    if role not in INTEL_ROLES:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(INTEL_ROLES)}", field="role")

    intel = (await db.execute(select(SystemIntel).where(SystemIntel.role == role))).scalars().first()
    if intel is None:
        intel = SystemIntel(role=role)
        db.add(intel)
    for field, value in data.model_dump().items():
        setattr(intel, field, value)
    intel.last_updated = datetime.utcnow()

    await db.commit()
    await db.refresh(intel)
    return {"success": True, "data": SystemIntelOut.model_validate(intel)}


@router.post("/seed", status_code=status.HTTP_201_CREATED)
async def seed_intel(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    """Replace every card with the four defaults"""
    await db.execute(delete(SystemIntel))
    await seed_system_intel(db)
    await db.commit()

    intel = (await db.execute(select(SystemIntel).order_by(SystemIntel.created_at))).scalars().all()
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": [SystemIntelOut.model_validate(i) for i in intel]}),
    )
