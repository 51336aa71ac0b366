from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError, ResourceNotFoundError
from dintask.core.types import is_valid_uuid
from dintask.models.note import Note
from dintask.modules.auth.dependencies import get_current_user
from dintask.modules.auth.roles import role_of
from dintask.schemas.note import NoteCreate, NoteOut, NoteUpdate

router = APIRouter()


async def _own_note(db: AsyncSession, user, note_id: str) -> Note:
    note = await db.get(Note, note_id) if is_valid_uuid(note_id) else None
    if note is None:
        raise ResourceNotFoundError("Note")
    if note.user_id != user.id:
        raise AuthorizationError("Not authorized to access this note")
    return note


@router.get("/")
async def list_notes(
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Caller's notes, pinned first"""
    stmt = (
        select(Note)
        .where(Note.user_id == current_user.id)
        .order_by(Note.is_pinned.desc(), Note.updated_at.desc())
    )
    notes = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(notes), "data": [NoteOut.model_validate(n) for n in notes]}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_note(
    data: NoteCreate,
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    note = Note(**data.model_dump(), user_id=current_user.id, user_role=role_of(current_user))
    db.add(note)
    await db.commit()
    await db.refresh(note)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": NoteOut.model_validate(note)}),
    )


@router.put("/{note_id}")
async def update_note(
    note_id: str,
    data: NoteUpdate,
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    note = await _own_note(db, current_user, note_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(note, field, value)
    await db.commit()
    return {"success": True, "data": NoteOut.model_validate(note)}


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    note = await _own_note(db, current_user, note_id)
    await db.delete(note)
    await db.commit()
    return {"success": True, "data": {}}
