from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import ResourceNotFoundError
from dintask.core.types import is_valid_uuid
from dintask.db.defaults import TACTICAL_MODULE_ORDER
from dintask.db.seed_data import seed_tactical_modules
from dintask.models.content import TacticalModule
from dintask.modules.auth.dependencies import authorize
from dintask.modules.auth.roles import SUPERADMIN, SUPERADMIN_STAFF
from dintask.schemas.content import TacticalModuleOut, TacticalModuleUpdate

router = APIRouter()


def _display_order(module: TacticalModule) -> int:
    if module.module_id in TACTICAL_MODULE_ORDER:
        return TACTICAL_MODULE_ORDER.index(module.module_id)
    return len(TACTICAL_MODULE_ORDER)


@router.get("/")
async def get_modules(db: AsyncSession = Depends(get_db)):
    """Public; the four role modules are created on first read"""
    stmt = select(TacticalModule).order_by(TacticalModule.created_at)
    modules = (await db.execute(stmt)).scalars().all()
    if not modules:
        await seed_tactical_modules(db)
        await db.commit()
        modules = (await db.execute(stmt)).scalars().all()

    modules = sorted(modules, key=_display_order)
    return {"success": True, "count": len(modules), "data": [TacticalModuleOut.model_validate(m) for m in modules]}


@router.put("/{module_id}")
async def update_module(
    module_id: str,
    data: TacticalModuleUpdate,
    current_user=Depends(authorize(SUPERADMIN, SUPERADMIN_STAFF)),
    db: AsyncSession = Depends(get_db)
):
    """Accepts the module key ("admin", "sales", ...) or the row id"""
    result = await db.execute(select(TacticalModule).where(TacticalModule.module_id == module_id))
    module = result.scalars().first()
    if module is None and is_valid_uuid(module_id):
        module = await db.get(TacticalModule, module_id)
    if module is None:
        raise ResourceNotFoundError("Module")

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(module, field, value)

    await db.commit()
    return {
        "success": True,
        "message": "Module updated successfully",
        "data": TacticalModuleOut.model_validate(module),
    }
