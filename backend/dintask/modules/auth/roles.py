"""Role names, their aliases and the account table each role lives in"""
from typing import Optional, Type

from dintask.models.accounts import Admin, Manager, Employee, SalesExecutive, SuperAdmin, ACCOUNT_MODELS

SUPERADMIN = "superadmin"
SUPERADMIN_STAFF = "superadmin_staff"
ADMIN = "admin"
MANAGER = "manager"
SALES = "sales"
EMPLOYEE = "employee"

ROLE_ALIASES = {
    "super_admin": SUPERADMIN,
    "sales_executive": SALES,
}

ROLE_MODELS = {
    SUPERADMIN: SuperAdmin,
    SUPERADMIN_STAFF: SuperAdmin,
    ADMIN: Admin,
    MANAGER: Manager,
    SALES: SalesExecutive,
    EMPLOYEE: Employee,
}

PLATFORM_ROLES = (SUPERADMIN, SUPERADMIN_STAFF)
TEAM_ROLES = (MANAGER, SALES, EMPLOYEE)

# Login without an explicit role walks the tables in this order
LOGIN_SEARCH_ORDER = (SUPERADMIN, ADMIN, MANAGER, SALES, EMPLOYEE)


def normalize_role(role: Optional[str]) -> Optional[str]:
    if role is None:
        return None
    role = role.strip().lower()
    return ROLE_ALIASES.get(role, role)


def model_for_role(role: Optional[str]) -> Optional[Type]:
    return ROLE_MODELS.get(normalize_role(role))


def model_by_name(name: Optional[str]) -> Optional[Type]:
    """Resolve a polymorphic reference ("Admin", "SalesExecutive", ...)"""
    if not name:
        return None
    model = ACCOUNT_MODELS.get(name)
    if model is None:
        # Accept role names too ("sales", "employee")
        model = model_for_role(name)
    return model


def role_of(user) -> str:
    """Normalized role string for a loaded account row"""
    role = user.role
    return normalize_role(getattr(role, "value", role))
