"""Public landing page content, edited section by section by the platform team"""
from typing import get_args

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import ValidationError
from dintask.models.content import LandingPageContent
from dintask.modules.auth.dependencies import authorize
from dintask.modules.auth.roles import SUPERADMIN, SUPERADMIN_STAFF
from dintask.schemas.content import LandingPageOut, LandingPageUpdate, LandingSection

router = APIRouter()

SECTIONS = get_args(LandingSection)


async def get_content(db: AsyncSession) -> LandingPageContent:
    """The singleton row, created with defaults on first read"""
    content = (await db.execute(select(LandingPageContent))).scalars().first()
    if content is None:
        content = LandingPageContent()
        db.add(content)
        await db.commit()
        await db.refresh(content)
    return content


@router.get("/content")
async def get_landing_content(db: AsyncSession = Depends(get_db)):
    content = await get_content(db)
    return {"success": True, "data": LandingPageOut.model_validate(content)}


@router.put("/update")
async def update_landing_content(
    data: LandingPageUpdate,
    current_user=Depends(authorize(SUPERADMIN, SUPERADMIN_STAFF)),
    db: AsyncSession = Depends(get_db)
):
    if data.section not in SECTIONS:
        raise ValidationError(f"Invalid section. Must be one of: {', '.join(SECTIONS)}", field="section")

    content = await get_content(db)
    # JSON columns only persist on reassignment
    merged = dict(getattr(content, data.section) or {})
    merged.update(data.data)
    setattr(content, data.section, merged)
    await db.commit()

    return {
        "success": True,
        "message": f"{data.section} section updated successfully",
        "data": LandingPageOut.model_validate(content),
    }


@router.get("/hero")
async def get_hero(db: AsyncSession = Depends(get_db)):
    content = await get_content(db)
    return {"success": True, "data": content.hero or {}}


@router.get("/platform")
async def get_platform(db: AsyncSession = Depends(get_db)):
    content = await get_content(db)
    return {"success": True, "data": content.platform or {}}


@router.get("/faqs")
async def get_faqs(db: AsyncSession = Depends(get_db)):
    content = await get_content(db)
    return {"success": True, "data": content.faqs or {}}
