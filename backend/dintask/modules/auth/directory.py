"""Lookup of accounts inside one workspace (the Admin plus its members)"""
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.types import is_valid_uuid
from dintask.models.accounts import Admin, MemberStatus, MEMBER_MODELS
from dintask.modules.auth.roles import model_by_name


def in_workspace(account, admin_id) -> bool:
    if account is None or not admin_id:
        return False
    return str(account.workspace_id) == str(admin_id)


async def find_workspace_account(
    db: AsyncSession,
    admin_id: str,
    user_id: str,
    model_name: Optional[str] = None,
    models: Sequence = (Admin,) + MEMBER_MODELS,
):
    """
    Resolve user_id to an admitted account of the workspace, or None.

    model_name ("Employee", "sales", ...) narrows the search to one table.
    """
    if not is_valid_uuid(user_id):
        return None
    if model_name:
        model = model_by_name(model_name)
        models = (model,) if model is not None else ()
    for model in models:
        account = await db.get(model, str(user_id))
        if not in_workspace(account, admin_id):
            continue
        if getattr(account, "status", MemberStatus.ACTIVE) == MemberStatus.ACTIVE:
            return account
    return None


async def workspace_accounts(
    db: AsyncSession,
    admin_id: str,
    models: Sequence = (Admin,) + MEMBER_MODELS,
    active_only: bool = True,
) -> List:
    """Every account of the workspace in the given tables, admin first"""
    accounts = []
    for model in models:
        if model is Admin:
            admin = await db.get(Admin, admin_id)
            if admin:
                accounts.append(admin)
            continue
        stmt = select(model).where(model.admin_id == admin_id).order_by(model.name)
        if active_only:
            stmt = stmt.where(model.status == MemberStatus.ACTIVE)
        accounts.extend((await db.execute(stmt)).scalars().all())
    return accounts
