from dataclasses import dataclass
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional

from dintask.core.database import get_db
from dintask.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ResourceNotFoundError,
    SubscriptionExpiredError,
    ValidationError,
)
from dintask.core.logging_config import set_user_id, set_workspace_id
from dintask.core.security import decode_token
from dintask.core.types import is_valid_uuid
from dintask.models.accounts import Admin, MemberStatus
from dintask.modules.auth.roles import (
    PLATFORM_ROLES,
    TEAM_ROLES,
    model_for_role,
    normalize_role,
    role_of,
)

bearer_scheme = HTTPBearer(auto_error=False)


def ensure_admitted(user):
    """Only active accounts act; team members also need an approved join request"""
    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    role = role_of(user)
    if role in PLATFORM_ROLES and user.status != "active":
        raise AuthorizationError("Account is not active")
    if role in TEAM_ROLES:
        if user.status == MemberStatus.PENDING:
            raise AuthorizationError("Your join request is pending approval by your admin")
        if user.status == MemberStatus.REJECTED:
            raise AuthorizationError("Your join request was rejected")
        if user.status != MemberStatus.ACTIVE:
            raise AuthorizationError("User account is inactive")
    return user


async def load_user_from_payload(db: AsyncSession, payload: Dict[str, Any]):
    """Role claim picks the table, id claim picks the row"""
    model = model_for_role(payload.get("role"))
    user_id = payload.get("id") or payload.get("sub")
    if model is None or not is_valid_uuid(user_id):
        raise AuthenticationError()

    user = await db.get(model, str(user_id))
    if not user:
        raise AuthenticationError("User not found")
    return ensure_admitted(user)


async def get_user_from_token(db: AsyncSession, token: Optional[str]):
    """Same resolution as get_current_user, for WebSocket handshakes"""
    if not token:
        raise AuthenticationError()
    return await load_user_from_payload(db, decode_token(token))


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
):
    """Get current authenticated account from the bearer token"""
    if not credentials or not credentials.credentials:
        raise AuthenticationError()

    user = await get_user_from_token(db, credentials.credentials)

    request.state.user_id = user.id
    set_user_id(user.id)
    if user.workspace_id:
        set_workspace_id(user.workspace_id)
    return user


def authorize(*roles: str):
    """
    Dependency factory gating a route to an allow-list of roles.

    Aliases are accepted on both sides, so authorize("sales_executive")
    admits a "sales" account.
    """
    allowed = {normalize_role(r) for r in roles}

    async def _authorize(current_user=Depends(get_current_user)):
        role = role_of(current_user)
        if role not in allowed:
            raise AuthorizationError(f"User role {role} is not authorized to access this route")
        return current_user

    return _authorize


async def check_admin_subscription(
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Reject team members once their admin's subscription has lapsed.
    Admins and platform operators always pass.
    """
    if role_of(current_user) not in TEAM_ROLES:
        return current_user

    if not current_user.admin_id:
        raise SubscriptionExpiredError("No associated admin found. Please contact support.")

    admin = await db.get(Admin, current_user.admin_id)
    if not admin:
        raise SubscriptionExpiredError("Associated admin not found. Please contact support.")

    if admin.subscription_expired():
        raise SubscriptionExpiredError(
            "Your organization's subscription has expired. "
            "Please contact your administrator to renew the plan.",
            expiry_date=admin.subscription_expiry,
        )
    return current_user


@dataclass
class WorkspaceScope:
    """
    The tenant a request acts inside.

    Every workspace-scoped query goes through filter() and every single
    record lookup through get_or_404(), so tenant ids are never compared
    by hand in the handlers.
    """
    user: Any
    role: str
    admin_id: Optional[str]

    @property
    def is_platform(self) -> bool:
        return self.role in PLATFORM_ROLES

    def filter(self, stmt, model, column: str = "admin_id"):
        if self.is_platform:
            return stmt
        return stmt.where(getattr(model, column) == self.admin_id)

    def owns(self, record, column: str = "admin_id") -> bool:
        return self.is_platform or getattr(record, column) == self.admin_id

    async def get_or_404(self, db: AsyncSession, model, record_id, label: str, column: str = "admin_id"):
        """404 when the record does not exist, 403 when it belongs to another tenant"""
        if not is_valid_uuid(record_id):
            raise ResourceNotFoundError(label)
        record = await db.get(model, str(record_id))
        if record is None:
            raise ResourceNotFoundError(label)
        if not self.owns(record, column):
            raise AuthorizationError(f"Not authorized to access this {label.lower()}")
        return record

    async def get_member_or_404(self, db: AsyncSession, model, record_id, label: str):
        """get_or_404 for team members that must have been admitted to the workspace"""
        member = await self.get_or_404(db, model, record_id, label)
        if member.status != MemberStatus.ACTIVE:
            raise ValidationError(f"{label} is not an active member of this workspace")
        return member


async def get_workspace(current_user=Depends(get_current_user)) -> WorkspaceScope:
    return WorkspaceScope(
        user=current_user,
        role=role_of(current_user),
        admin_id=current_user.workspace_id,
    )
