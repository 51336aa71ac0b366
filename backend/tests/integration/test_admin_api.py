"""
Integration tests for tenant administration: members, join requests and
the admin dashboard
"""
import pytest
from httpx import AsyncClient

from dintask.models.accounts import Employee, Manager, MemberStatus, SalesExecutive
from dintask.models.crm import LeadStatus
from tests.factories import create_admin, create_member, reload

API = "/api/v1"


class TestAdminRegister:

    @pytest.mark.asyncio
    async def test_register_admin_directly(self, client: AsyncClient, free_plan):
        response = await client.post(f"{API}/admin/register", json={
            "name": "Meera Iyer",
            "email": "meera@example.com",
            "password": "secret123",
            "companyName": "Iyer Logistics",
        })

        assert response.status_code == 201
        assert response.json()["user"]["role"] == "admin"

    @pytest.mark.asyncio
    async def test_company_name_required(self, client: AsyncClient):
        response = await client.post(f"{API}/admin/register", json={
            "name": "Meera Iyer",
            "email": "meera@example.com",
            "password": "secret123",
        })
        assert response.status_code == 400


class TestJoinRequests:
    """Pending members wait for their admin"""

    @pytest.mark.asyncio
    async def test_list_only_own_pending(self, client: AsyncClient, db_session, admin_user, other_admin, auth_headers):
        mine = await create_member(db_session, SalesExecutive, admin_user, status=MemberStatus.PENDING)
        await create_member(db_session, Employee, admin_user)
        await create_member(db_session, Employee, other_admin, status=MemberStatus.PENDING)

        response = await client.get(f"{API}/admin/join-requests", headers=auth_headers(admin_user))

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["data"][0]["id"] == mine.id

    @pytest.mark.asyncio
    async def test_approve(self, client: AsyncClient, db_session, admin_user, auth_headers):
        pending = await create_member(db_session, Employee, admin_user, status=MemberStatus.PENDING)

        response = await client.put(
            f"{API}/admin/join-requests/{pending.id}/approve",
            json={"role": "employee"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "active"
        assert (await reload(db_session, Employee, pending.id)).status == MemberStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_reject(self, client: AsyncClient, db_session, admin_user, auth_headers):
        pending = await create_member(db_session, Manager, admin_user, status=MemberStatus.PENDING)

        response = await client.put(
            f"{API}/admin/join-requests/{pending.id}/reject",
            json={"role": "manager"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        assert (await reload(db_session, Manager, pending.id)).status == MemberStatus.REJECTED

    @pytest.mark.asyncio
    async def test_approve_twice(self, client: AsyncClient, employee_user, admin_user, auth_headers):
        response = await client.put(
            f"{API}/admin/join-requests/{employee_user.id}/approve",
            json={"role": "employee"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Join request is not pending"

    @pytest.mark.asyncio
    async def test_approve_other_tenant_member(self, client: AsyncClient, db_session, admin_user, other_admin, auth_headers):
        foreign = await create_member(db_session, Employee, other_admin, status=MemberStatus.PENDING)

        response = await client.put(
            f"{API}/admin/join-requests/{foreign.id}/approve",
            json={"role": "employee"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 403
        assert (await reload(db_session, Employee, foreign.id)).status == MemberStatus.PENDING

    @pytest.mark.asyncio
    async def test_approve_fills_last_seat(self, client: AsyncClient, db_session, free_plan, auth_headers):
        admin = await create_admin(db_session, free_plan)
        await create_member(db_session, Manager, admin)
        await create_member(db_session, SalesExecutive, admin)
        pending = await create_member(db_session, Employee, admin, status=MemberStatus.PENDING)

        response = await client.put(
            f"{API}/admin/join-requests/{pending.id}/approve",
            json={"role": "employee"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert (await reload(db_session, Employee, pending.id)).status == MemberStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_registered_join_request_can_take_last_seat(
        self, client: AsyncClient, db_session, free_plan, auth_headers
    ):
        admin = await create_admin(db_session, free_plan)
        await create_member(db_session, Manager, admin)
        await create_member(db_session, SalesExecutive, admin)

        registered = await client.post(f"{API}/auth/register", json={
            "name": "Ravi Kumar",
            "email": "ravi.kumar@example.com",
            "password": "secret123",
            "role": "employee",
            "adminId": admin.id,
        })
        assert registered.status_code == 201

        response = await client.put(
            f"{API}/admin/join-requests/{registered.json()['user']['id']}/approve",
            json={"role": "employee"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_approve_over_plan_limit(self, client: AsyncClient, db_session, free_plan, auth_headers):
        admin = await create_admin(db_session, free_plan)
        await create_member(db_session, Manager, admin)
        await create_member(db_session, SalesExecutive, admin)
        await create_member(db_session, Employee, admin)
        pending = await create_member(db_session, Employee, admin, status=MemberStatus.PENDING)

        response = await client.put(
            f"{API}/admin/join-requests/{pending.id}/approve",
            json={"role": "employee"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 403
        assert response.json()["code"] == "USER_LIMIT_REACHED"

    @pytest.mark.asyncio
    async def test_rejected_request_frees_seat(self, client: AsyncClient, db_session, free_plan, auth_headers):
        admin = await create_admin(db_session, free_plan)
        await create_member(db_session, Manager, admin)
        await create_member(db_session, SalesExecutive, admin)
        await create_member(db_session, Employee, admin, status=MemberStatus.REJECTED)

        response = await client.post(f"{API}/admin/add-member", json={
            "name": "Kiran Rao",
            "email": "kiran.rao@example.com",
            "password": "secret123",
            "role": "employee",
        }, headers=auth_headers(admin))

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_members_cannot_review_requests(self, client: AsyncClient, manager_user, auth_headers):
        response = await client.get(f"{API}/admin/join-requests", headers=auth_headers(manager_user))
        assert response.status_code == 403


class TestAddMember:

    @pytest.mark.asyncio
    async def test_add_active_member(self, client: AsyncClient, db_session, admin_user, manager_user, auth_headers):
        response = await client.post(f"{API}/admin/add-member", json={
            "name": "Kiran Rao",
            "email": "kiran@example.com",
            "password": "secret123",
            "role": "employee",
            "managerId": manager_user.id,
        }, headers=auth_headers(admin_user))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "active"
        assert data["adminId"] == admin_user.id
        assert data["managerId"] == manager_user.id

    @pytest.mark.asyncio
    async def test_add_member_invalid_role(self, client: AsyncClient, admin_user, auth_headers):
        response = await client.post(f"{API}/admin/add-member", json={
            "name": "Kiran Rao",
            "email": "kiran@example.com",
            "password": "secret123",
            "role": "admin",
        }, headers=auth_headers(admin_user))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_add_member_duplicate_email(self, client: AsyncClient, admin_user, sales_user, auth_headers):
        response = await client.post(f"{API}/admin/add-member", json={
            "name": "Copy",
            "email": sales_user.email,
            "password": "secret123",
            "role": "sales",
        }, headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.json()["error"] == "Email already registered"

    @pytest.mark.asyncio
    async def test_add_member_over_limit(self, client: AsyncClient, db_session, free_plan, auth_headers):
        admin = await create_admin(db_session, free_plan)
        for model in (Manager, SalesExecutive, Employee):
            await create_member(db_session, model, admin)

        response = await client.post(f"{API}/admin/add-member", json={
            "name": "One Too Many",
            "email": "extra@example.com",
            "password": "secret123",
            "role": "sales",
        }, headers=auth_headers(admin))

        assert response.status_code == 403
        assert response.json()["details"] == {"limit": 3, "current": 3}

    @pytest.mark.asyncio
    async def test_manager_from_other_tenant(self, client: AsyncClient, db_session, admin_user, other_admin, auth_headers):
        foreign_manager = await create_member(db_session, Manager, other_admin)

        response = await client.post(f"{API}/admin/add-member", json={
            "name": "Kiran Rao",
            "email": "kiran@example.com",
            "password": "secret123",
            "role": "employee",
            "managerId": foreign_manager.id,
        }, headers=auth_headers(admin_user))

        assert response.status_code == 403


class TestUsers:

    @pytest.mark.asyncio
    async def test_admin_sees_own_members(
        self, client: AsyncClient, admin_user, manager_user, sales_user, other_sales, auth_headers
    ):
        response = await client.get(f"{API}/admin/users", headers=auth_headers(admin_user))

        assert response.status_code == 200
        ids = {u["id"] for u in response.json()["data"]}
        assert ids == {manager_user.id, sales_user.id}

    @pytest.mark.asyncio
    async def test_superadmin_sees_everyone(
        self, client: AsyncClient, admin_user, sales_user, other_sales, superadmin_user, auth_headers
    ):
        response = await client.get(f"{API}/admin/users", headers=auth_headers(superadmin_user))

        ids = {u["id"] for u in response.json()["data"]}
        assert {admin_user.id, sales_user.id, other_sales.id, superadmin_user.id} <= ids

    @pytest.mark.asyncio
    async def test_delete_member(self, client: AsyncClient, db_session, admin_user, sales_user, auth_headers):
        response = await client.delete(
            f"{API}/admin/users/{sales_user.id}", params={"role": "sales"}, headers=auth_headers(admin_user)
        )

        assert response.status_code == 200
        db_session.expunge_all()
        assert await db_session.get(SalesExecutive, sales_user.id) is None

    @pytest.mark.asyncio
    async def test_delete_requires_role(self, client: AsyncClient, admin_user, sales_user, auth_headers):
        response = await client.delete(f"{API}/admin/users/{sales_user.id}", headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.json()["error"] == "Please provide user role for deletion"

    @pytest.mark.asyncio
    async def test_delete_other_tenant_member(self, client: AsyncClient, admin_user, other_sales, auth_headers):
        response = await client.delete(
            f"{API}/admin/users/{other_sales.id}", params={"role": "sales"}, headers=auth_headers(admin_user)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_admins(self, client: AsyncClient, admin_user, other_admin, auth_headers):
        response = await client.delete(
            f"{API}/admin/users/{other_admin.id}", params={"role": "admin"}, headers=auth_headers(admin_user)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_unknown_member(self, client: AsyncClient, admin_user, auth_headers):
        response = await client.delete(
            f"{API}/admin/users/not-a-uuid", params={"role": "employee"}, headers=auth_headers(admin_user)
        )
        assert response.status_code == 404


class TestPlansAndDashboard:

    @pytest.mark.asyncio
    async def test_admin_plan_catalogue_hides_free_plan(self, client: AsyncClient, admin_user, free_plan, auth_headers):
        response = await client.get(f"{API}/admin/plans", headers=auth_headers(admin_user))

        names = [p["name"] for p in response.json()["data"]]
        assert names == ["Professional"]

    @pytest.mark.asyncio
    async def test_dashboard(
        self, client: AsyncClient, admin_user, manager_user, sales_user, make_lead, other_admin, auth_headers
    ):
        await make_lead(admin_user, sales_user, status=LeadStatus.WON, amount=1200)
        await make_lead(admin_user, sales_user, status=LeadStatus.NEW, amount=800)
        await make_lead(other_admin, status=LeadStatus.WON, amount=99999)

        response = await client.get(f"{API}/admin/dashboard", headers=auth_headers(admin_user))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["members"] == {"manager": 1, "sales": 1, "employee": 0}
        assert data["totalMembers"] == 2
        assert data["leads"] == {"Won": 1, "New": 1}
        assert data["revenue"] == 1200


class TestMemberProfiles:

    @pytest.mark.asyncio
    async def test_role_scoped_me(self, client: AsyncClient, sales_user, auth_headers):
        response = await client.get(f"{API}/sales/me", headers=auth_headers(sales_user))

        assert response.status_code == 200
        assert response.json()["data"]["id"] == sales_user.id

    @pytest.mark.asyncio
    async def test_wrong_role_prefix(self, client: AsyncClient, sales_user, auth_headers):
        response = await client.get(f"{API}/employee/me", headers=auth_headers(sales_user))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_member_update_details(self, client: AsyncClient, employee_user, auth_headers):
        response = await client.put(
            f"{API}/employee/updatedetails", json={"name": "New Name"}, headers=auth_headers(employee_user)
        )

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "New Name"

    @pytest.mark.asyncio
    async def test_manager_lists_active_employees(
        self, client: AsyncClient, db_session, admin_user, manager_user, employee_user, auth_headers
    ):
        await create_member(db_session, Employee, admin_user, status=MemberStatus.PENDING)

        response = await client.get(f"{API}/manager/employees", headers=auth_headers(manager_user))

        assert response.json()["count"] == 1
        assert response.json()["data"][0]["id"] == employee_user.id
