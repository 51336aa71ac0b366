from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import ResourceNotFoundError
from dintask.core.types import is_valid_uuid
from dintask.models.content import Testimonial
from dintask.modules.auth.dependencies import authorize
from dintask.modules.auth.roles import SUPERADMIN, SUPERADMIN_STAFF
from dintask.schemas.content import TestimonialCreate, TestimonialOut, TestimonialStatusUpdate

router = APIRouter()

platform_user = authorize(SUPERADMIN, SUPERADMIN_STAFF)


async def _get_testimonial(db: AsyncSession, testimonial_id: str) -> Testimonial:
    testimonial = await db.get(Testimonial, testimonial_id) if is_valid_uuid(testimonial_id) else None
    if testimonial is None:
        raise ResourceNotFoundError("Testimonial")
    return testimonial


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_testimonial(
    data: TestimonialCreate,
    db: AsyncSession = Depends(get_db)
):
    """Public submission; hidden until approved"""
    testimonial = Testimonial(**data.model_dump(), is_approved=False, highlighted=False)
    db.add(testimonial)
    await db.commit()
    await db.refresh(testimonial)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({
            "success": True,
            "message": "Testimonial submitted successfully! It will be reviewed by our team.",
            "data": TestimonialOut.model_validate(testimonial),
        }),
    )


@router.get("/approved")
async def get_approved_testimonials(db: AsyncSession = Depends(get_db)):
    stmt = (
        select(Testimonial)
        .where(Testimonial.is_approved.is_(True))
        .order_by(Testimonial.highlighted.desc(), Testimonial.created_at.desc())
    )
    testimonials = (await db.execute(stmt)).scalars().all()
    return {"success": True, "data": [TestimonialOut.model_validate(t) for t in testimonials]}


@router.get("/")
async def get_all_testimonials(
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    stmt = select(Testimonial).order_by(Testimonial.created_at.desc())
    testimonials = (await db.execute(stmt)).scalars().all()
    return {"success": True, "data": [TestimonialOut.model_validate(t) for t in testimonials]}


@router.put("/{testimonial_id}/status")
async def update_testimonial_status(
    testimonial_id: str,
    data: TestimonialStatusUpdate,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    testimonial = await _get_testimonial(db, testimonial_id)
    testimonial.is_approved = data.is_approved
    await db.commit()
    return {
        "success": True,
        "message": f"Testimonial {'approved' if data.is_approved else 'rejected'}",
        "data": TestimonialOut.model_validate(testimonial),
    }


@router.put("/{testimonial_id}/highlight")
async def toggle_highlight(
    testimonial_id: str,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    testimonial = await _get_testimonial(db, testimonial_id)
    testimonial.highlighted = not testimonial.highlighted
    await db.commit()
    return {
        "success": True,
        "message": f"Testimonial highlight {'enabled' if testimonial.highlighted else 'disabled'}",
        "data": TestimonialOut.model_validate(testimonial),
    }


@router.delete("/{testimonial_id}")
async def delete_testimonial(
    testimonial_id: str,
    current_user=Depends(platform_user),
    db: AsyncSession = Depends(get_db)
):
    testimonial = await _get_testimonial(db, testimonial_id)
    await db.delete(testimonial)
    await db.commit()
    return {"success": True, "message": "Testimonial deleted successfully"}
