"""Account models: one table per role, members linked to their tenant Admin"""
from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, Index
from sqlalchemy.orm import declared_attr
from datetime import datetime, timedelta
import enum

from dintask.core.config import settings
from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid
from dintask.core.security import get_password_hash, verify_password, generate_reset_token


class MemberStatus(str, enum.Enum):
    """Join-request workflow state of a tenant member"""
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECTED = "rejected"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    PENDING = "pending"
    SUSPENDED = "suspended"


class SuperAdminRole(str, enum.Enum):
    SUPERADMIN = "superadmin"
    STAFF = "superadmin_staff"


class AccountMixin:
    """Columns and password helpers shared by every account table"""

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    phone_number = Column(String(20), nullable=True)
    profile_image = Column(Text, nullable=True, default="")
    is_active = Column(Boolean, default=True, nullable=False)

    # Firebase Cloud Messaging device token
    fcm_token = Column(String(512), nullable=True)

    # Password reset fields (sha256 of the emailed token)
    reset_password_token = Column(String(255), nullable=True)
    reset_password_expire = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Class name recorded on polymorphic references (chat, tickets, schedules)
    model_name: str = ""

    def set_password(self, password: str) -> None:
        self.hashed_password = get_password_hash(password)

    def check_password(self, password: str) -> bool:
        return verify_password(password, self.hashed_password)

    def get_reset_password_token(self) -> str:
        """Store a hashed reset token with a short expiry and return the raw one"""
        raw, digest = generate_reset_token()
        self.reset_password_token = digest
        self.reset_password_expire = datetime.utcnow() + timedelta(
            minutes=settings.RESET_TOKEN_EXPIRE_MINUTES
        )
        return raw

    def clear_reset_password_token(self) -> None:
        self.reset_password_token = None
        self.reset_password_expire = None

    @property
    def workspace_id(self):
        """Tenant id the account acts inside (None for platform operators)"""
        return getattr(self, "admin_id", None)


class MemberMixin:
    """Tenant member: belongs to exactly one Admin"""

    @declared_attr
    def admin_id(cls):
        return Column(GUID, ForeignKey("admins.id", ondelete="CASCADE"), nullable=True, index=True)

    status = Column(SQLEnum(MemberStatus), default=MemberStatus.PENDING, nullable=False)


class Admin(AccountMixin, Base):
    """Tenant root. Its id is the workspace id of every member it owns"""
    __tablename__ = "admins"

    role = "admin"
    model_name = "Admin"

    company_name = Column(String(255), nullable=False)

    subscription_plan = Column(String(100), default="Starter")
    subscription_plan_id = Column(GUID, ForeignKey("plans.id", ondelete="SET NULL"), nullable=True)
    subscription_status = Column(SQLEnum(SubscriptionStatus), default=SubscriptionStatus.ACTIVE, nullable=False)
    subscription_expiry = Column(DateTime, nullable=True)

    @property
    def workspace_id(self):
        return self.id

    def subscription_expired(self, now: datetime = None) -> bool:
        if self.subscription_expiry is None:
            return False
        return self.subscription_expiry < (now or datetime.utcnow())


class Manager(AccountMixin, MemberMixin, Base):
    __tablename__ = "managers"

    role = "manager"
    model_name = "Manager"


class Employee(AccountMixin, MemberMixin, Base):
    __tablename__ = "employees"

    role = "employee"
    model_name = "Employee"

    manager_id = Column(GUID, ForeignKey("managers.id", ondelete="SET NULL"), nullable=True)


class SalesExecutive(AccountMixin, MemberMixin, Base):
    __tablename__ = "sales_executives"

    role = "sales"
    model_name = "SalesExecutive"


class SuperAdmin(AccountMixin, Base):
    """Platform operator; role column tells root apart from staff"""
    __tablename__ = "super_admins"

    model_name = "SuperAdmin"

    role = Column(SQLEnum(SuperAdminRole, values_callable=lambda e: [m.value for m in e]),
                  default=SuperAdminRole.SUPERADMIN.value, nullable=False)
    status = Column(String(20), default="active", nullable=False)

    @property
    def is_root(self) -> bool:
        return self.role == SuperAdminRole.SUPERADMIN.value


class LoginActivity(Base):
    """One row per login; closed on logout with the session length"""
    __tablename__ = "login_activities"

    __table_args__ = (
        Index('ix_login_activities_user_id', 'user_id'),
        Index('ix_login_activities_role', 'role'),
        Index('ix_login_activities_login_at', 'login_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, nullable=False)
    role_model = Column(String(50), nullable=False)
    role = Column(String(50), nullable=False)
    login_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    logout_at = Column(DateTime, nullable=True)
    session_duration = Column(Integer, nullable=True)  # minutes
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)


ACCOUNT_MODELS = {
    "Admin": Admin,
    "Manager": Manager,
    "Employee": Employee,
    "SalesExecutive": SalesExecutive,
    "SuperAdmin": SuperAdmin,
}

MEMBER_MODELS = (Manager, SalesExecutive, Employee)
