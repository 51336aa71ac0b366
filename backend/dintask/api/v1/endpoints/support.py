from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.logging_config import logger
from dintask.models.support import SupportLead
from dintask.modules.auth.dependencies import authorize
from dintask.modules.auth.roles import SUPERADMIN, SUPERADMIN_STAFF
from dintask.schemas.support import SupportLeadCreate, SupportLeadOut
from dintask.utils.pagination import paginate

router = APIRouter()


@router.post("/lead", status_code=status.HTTP_201_CREATED)
async def create_support_lead(
    data: SupportLeadCreate,
    db: AsyncSession = Depends(get_db)
):
    """Public business inquiry from the support page"""
    lead = SupportLead(**data.model_dump())
    lead.business_email = lead.business_email.lower()
    db.add(lead)
    await db.commit()
    await db.refresh(lead)
    logger.info(f"[Support] New inquiry from {lead.company_name}")
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({
            "success": True,
            "message": "Thank you! Our team will contact you shortly.",
            "data": SupportLeadOut.model_validate(lead),
        }),
    )


@router.get("/admin/support-leads")
async def list_support_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user=Depends(authorize(SUPERADMIN, SUPERADMIN_STAFF)),
    db: AsyncSession = Depends(get_db)
):
    stmt = select(SupportLead).order_by(SupportLead.created_at.desc())
    result = await paginate(db, stmt, page, limit)
    return {
        "success": True,
        "count": len(result["items"]),
        "pagination": result["pagination"],
        "data": [SupportLeadOut.model_validate(l) for l in result["items"]],
    }
