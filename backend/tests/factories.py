"""
Builders for accounts used across the test suite
"""
from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.security import create_access_token
from dintask.models.accounts import Admin, MemberStatus
from dintask.models.billing import Plan
from dintask.modules.auth.roles import role_of
from dintask.modules.auth.subscription import activate_plan

fake = Faker()

TEST_PASSWORD = 'password123'


def auth_headers_for(user) -> dict:
    token = create_access_token(user.id, role_of(user))
    return {'Authorization': f'Bearer {token}'}


async def save(db: AsyncSession, obj):
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


async def create_admin(db: AsyncSession, plan: Plan, **kwargs) -> Admin:
    admin = Admin(
        name=kwargs.pop('name', fake.name()),
        email=kwargs.pop('email', fake.unique.email()),
        company_name=kwargs.pop('company_name', fake.company()),
        **kwargs
    )
    admin.set_password(TEST_PASSWORD)
    db.add(admin)
    await db.flush()
    activate_plan(admin, plan)
    return await save(db, admin)


async def create_member(db: AsyncSession, model, admin: Admin, status=MemberStatus.ACTIVE, **kwargs):
    member = model(
        name=kwargs.pop('name', fake.name()),
        email=kwargs.pop('email', fake.unique.email()),
        admin_id=admin.id,
        status=status,
        **kwargs
    )
    member.set_password(TEST_PASSWORD)
    return await save(db, member)


async def reload(db: AsyncSession, model, record_id):
    """Re-read a row written by a request session"""
    return await db.get(model, record_id, populate_existing=True)
