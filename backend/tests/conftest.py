"""
DinTask - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta
from typing import AsyncGenerator, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_dintask.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['RAZORPAY_KEY_ID'] = 'rzp_test_key'
os.environ['RAZORPAY_KEY_SECRET'] = 'rzp_test_secret'
os.environ['SENDGRID_API_KEY'] = ''
os.environ['SMTP_USER'] = ''
os.environ['FIREBASE_SERVICE_ACCOUNT_BASE64'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'

from dintask.main import app
from dintask.core.config import settings
from dintask.core.database import Base, get_db
from dintask.models.accounts import (
    Admin, Employee, Manager, SalesExecutive, SuperAdmin, SuperAdminRole,
)
from dintask.models.billing import Plan
from dintask.models.crm import Lead, LeadStatus
from dintask.models.project import Project
from dintask.models.task import SubTask, Task
from dintask.services.email_service import email_service
from dintask.services.push_service import push_service
from tests.factories import (
    TEST_PASSWORD, auth_headers_for, create_admin, create_member, fake, save,
)

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_dintask.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh schema and a session for fixtures and assertions"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Test client; every request gets its own session, like get_db"""
    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
                if session.new or session.dirty or session.deleted:
                    await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================
# External services
# ============================================

@pytest.fixture(autouse=True)
def mock_email(monkeypatch) -> AsyncMock:
    """Every template goes through send_email; report success by default"""
    sender = AsyncMock(return_value=True)
    monkeypatch.setattr(email_service, 'send_email', sender)
    return sender


@pytest.fixture(autouse=True)
def mock_push(monkeypatch) -> MagicMock:
    sender = MagicMock(return_value={'successCount': 1, 'failureCount': 0})
    monkeypatch.setattr(push_service, 'send', sender)
    return sender


@pytest.fixture
def mock_storage(monkeypatch) -> MagicMock:
    """Storage backend double; uploaded files live under https://files.test/"""
    monkeypatch.setattr(settings, 'STORAGE_PUBLIC_URL', 'https://files.test')
    storage = MagicMock()
    storage.upload_fileobj.side_effect = (
        lambda fileobj, object_name, content_type=None, size=None: f'https://files.test/{object_name}'
    )
    storage.delete_file.return_value = True
    monkeypatch.setattr('dintask.utils.uploads.get_storage_client', lambda: storage)
    return storage


@pytest.fixture
def mock_razorpay(monkeypatch) -> MagicMock:
    razorpay_client = MagicMock()
    razorpay_client.order.create.return_value = {
        'id': 'order_test_123',
        'amount': 99900,
        'currency': 'INR',
        'status': 'created',
    }
    monkeypatch.setattr(
        'dintask.api.v1.endpoints.payments.get_razorpay_client', lambda: razorpay_client
    )
    return razorpay_client


# ============================================
# Accounts
# ============================================

@pytest.fixture
def auth_headers() -> Callable[..., dict]:
    """auth_headers(user) -> bearer header for that account"""
    return auth_headers_for


@pytest.fixture
async def free_plan(db_session: AsyncSession) -> Plan:
    return await save(db_session, Plan(name='Starter', price=0, user_limit=3, duration=30, features=[]))


@pytest.fixture
async def paid_plan(db_session: AsyncSession) -> Plan:
    return await save(db_session, Plan(
        name='Professional', price=999, user_limit=25, duration=30, features=['CRM', 'Tasks']
    ))


@pytest.fixture
async def admin_user(db_session: AsyncSession, paid_plan: Plan) -> Admin:
    return await create_admin(db_session, paid_plan, company_name='Acme Corp')


@pytest.fixture
async def manager_user(db_session: AsyncSession, admin_user: Admin) -> Manager:
    return await create_member(db_session, Manager, admin_user)


@pytest.fixture
async def sales_user(db_session: AsyncSession, admin_user: Admin) -> SalesExecutive:
    return await create_member(db_session, SalesExecutive, admin_user)


@pytest.fixture
async def employee_user(db_session: AsyncSession, admin_user: Admin) -> Employee:
    return await create_member(db_session, Employee, admin_user)


@pytest.fixture
async def other_admin(db_session: AsyncSession, paid_plan: Plan) -> Admin:
    """Admin of a second, unrelated workspace"""
    return await create_admin(db_session, paid_plan, company_name='Globex Inc')


@pytest.fixture
async def other_sales(db_session: AsyncSession, other_admin: Admin) -> SalesExecutive:
    return await create_member(db_session, SalesExecutive, other_admin)


@pytest.fixture
async def superadmin_user(db_session: AsyncSession) -> SuperAdmin:
    root = SuperAdmin(name='Root Operator', email=fake.unique.email(), role=SuperAdminRole.SUPERADMIN.value)
    root.set_password(TEST_PASSWORD)
    return await save(db_session, root)


@pytest.fixture
async def staff_user(db_session: AsyncSession) -> SuperAdmin:
    staff = SuperAdmin(name='Support Staff', email=fake.unique.email(), role=SuperAdminRole.STAFF.value)
    staff.set_password(TEST_PASSWORD)
    return await save(db_session, staff)


# ============================================
# Workspace records
# ============================================

@pytest.fixture
def make_lead(db_session: AsyncSession):
    async def _make(admin: Admin, owner=None, **kwargs) -> Lead:
        lead = Lead(
            name=kwargs.pop('name', fake.name()),
            mobile=kwargs.pop('mobile', '9876543210'),
            company=kwargs.pop('company', fake.company()),
            admin_id=admin.id,
            owner_id=owner.id if owner else None,
            **kwargs
        )
        return await save(db_session, lead)
    return _make


@pytest.fixture
def won_lead_fields() -> dict:
    return {
        'status': LeadStatus.WON,
        'amount': 50000,
        'deadline': datetime.utcnow() + timedelta(days=30),
    }


@pytest.fixture
def make_project(db_session: AsyncSession):
    async def _make(admin: Admin, manager=None, **kwargs) -> Project:
        project = Project(
            name=kwargs.pop('name', f'{fake.company()} Project'),
            admin_id=admin.id,
            manager_id=manager.id if manager else None,
            assigned_by=kwargs.pop('assigned_by', admin.id),
            **kwargs
        )
        return await save(db_session, project)
    return _make


@pytest.fixture
def make_task(db_session: AsyncSession):
    async def _make(project: Project, assigner, assignees=(), **kwargs) -> Task:
        task = Task(
            title=kwargs.pop('title', fake.sentence(nb_words=4)),
            project_id=project.id,
            admin_id=project.admin_id,
            assigned_by_id=assigner.id,
            assigned_by_model=assigner.model_name,
            subtasks=[SubTask(assignee_id=a.id, assignee_model=a.model_name) for a in assignees],
            activities=[],
            labels=[],
            **kwargs
        )
        return await save(db_session, task)
    return _make
