"""
Support tickets.

Member tickets are routed to their admin; admin tickets are escalated to
the platform operators. Creation and replies are pushed to the support
WebSocket rooms.
"""
import random
from datetime import datetime

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import ValidationError
from dintask.core.logging_config import logger
from dintask.models.support import SupportTicket, TicketResponse, TicketStatus
from dintask.modules.auth.dependencies import WorkspaceScope, get_workspace
from dintask.modules.auth.roles import ADMIN
from dintask.schemas.support import TicketCreate, TicketOut, TicketUpdate
from dintask.services.support_websocket import support_websocket_manager

router = APIRouter()


def generate_ticket_id() -> str:
    return f"#TKT-{random.randint(100000, 999999)}"


async def _unique_ticket_id(db: AsyncSession) -> str:
    while True:
        ticket_id = generate_ticket_id()
        existing = await db.execute(select(SupportTicket.id).where(SupportTicket.ticket_id == ticket_id))
        if existing.scalar() is None:
            return ticket_id


def _payload(ticket: SupportTicket) -> dict:
    return jsonable_encoder(TicketOut.model_validate(ticket), by_alias=True)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_ticket(
    data: TicketCreate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    if scope.is_platform or not scope.admin_id:
        raise ValidationError("Company configuration error. Cannot route ticket.")

    user = scope.user
    escalated = scope.role == ADMIN
    ticket = SupportTicket(
        ticket_id=await _unique_ticket_id(db),
        title=data.title,
        description=data.description,
        type=data.type,
        priority=data.priority,
        attachments=data.attachments,
        creator_id=user.id,
        creator_model=user.model_name,
        company_id=scope.admin_id,
        is_escalated_to_super_admin=escalated,
        responses=[],
    )
    db.add(ticket)
    await db.commit()
    await db.refresh(ticket)

    payload = _payload(ticket)
    await support_websocket_manager.broadcast_new_ticket(payload, scope.admin_id, escalated)
    logger.log_tenant_event("ticket_created", scope.admin_id, ticket_id=ticket.ticket_id, escalated=escalated)

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": payload}),
    )


@router.get("/")
async def list_tickets(
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    """Platform: escalated tickets. Admin: company tickets. Members: their own"""
    stmt = select(SupportTicket).order_by(SupportTicket.created_at.desc())
    if scope.is_platform:
        stmt = stmt.where(SupportTicket.is_escalated_to_super_admin.is_(True))
    elif scope.role == ADMIN:
        stmt = scope.filter(stmt, SupportTicket, "company_id")
    else:
        stmt = stmt.where(SupportTicket.creator_id == scope.user.id)

    tickets = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(tickets), "data": [TicketOut.model_validate(t) for t in tickets]}


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    ticket = await scope.get_or_404(db, SupportTicket, ticket_id, "Ticket", "company_id")
    return {"success": True, "data": TicketOut.model_validate(ticket)}


@router.put("/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    data: TicketUpdate,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    ticket = await scope.get_or_404(db, SupportTicket, ticket_id, "Ticket", "company_id")

    if data.response:
        ticket.responses.append(TicketResponse(
            responder_id=scope.user.id,
            responder_model=scope.user.model_name,
            message=data.response,
        ))
    if data.status:
        ticket.status = data.status
        if data.status in (TicketStatus.RESOLVED, TicketStatus.CLOSED) and ticket.resolved_at is None:
            ticket.resolved_at = datetime.utcnow()
    if data.priority:
        ticket.priority = data.priority
    if data.is_escalated_to_super_admin is not None:
        ticket.is_escalated_to_super_admin = data.is_escalated_to_super_admin
    if data.rating is not None:
        ticket.rating = data.rating
    if data.feedback is not None:
        ticket.feedback = data.feedback

    await db.commit()
    await db.refresh(ticket)

    payload = _payload(ticket)
    if data.response:
        await support_websocket_manager.broadcast_response(ticket.id, payload)
    return {"success": True, "data": payload}
