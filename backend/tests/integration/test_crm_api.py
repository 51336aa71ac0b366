"""
Integration tests for leads, follow-ups and lead-to-project conversion
"""
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from dintask.models.accounts import Manager, SalesExecutive
from dintask.models.crm import ApprovalStatus, Lead, LeadStatus
from dintask.models.notification import Notification
from dintask.models.project import Project
from tests.factories import create_member, reload

API = "/api/v1"


class TestLeads:

    @pytest.mark.asyncio
    async def test_sales_creates_own_lead(self, client: AsyncClient, sales_user, admin_user, auth_headers):
        response = await client.post(f"{API}/crm/", json={
            "name": "Anil Traders",
            "mobile": "9811111111",
            "company": "Anil & Sons",
            "amount": 25000,
        }, headers=auth_headers(sales_user))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["ownerId"] == sales_user.id
        assert data["adminId"] == admin_user.id
        assert data["status"] == "New"
        assert data["approvalStatus"] == "none"

    @pytest.mark.asyncio
    async def test_admin_creates_lead_for_sales(self, client: AsyncClient, admin_user, sales_user, auth_headers):
        response = await client.post(f"{API}/crm/", json={
            "name": "Sharma Motors",
            "mobile": "9822222222",
            "owner": sales_user.id,
        }, headers=auth_headers(admin_user))

        assert response.status_code == 201
        assert response.json()["data"]["owner"]["id"] == sales_user.id

    @pytest.mark.asyncio
    async def test_admin_cannot_assign_foreign_sales(self, client: AsyncClient, admin_user, other_sales, auth_headers):
        response = await client.post(f"{API}/crm/", json={
            "name": "Sharma Motors",
            "mobile": "9822222222",
            "owner": other_sales.id,
        }, headers=auth_headers(admin_user))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_sales_sees_only_own_leads(
        self, client: AsyncClient, db_session, admin_user, sales_user, make_lead, auth_headers
    ):
        own = await make_lead(admin_user, sales_user)
        await make_lead(admin_user)

        response = await client.get(f"{API}/crm/", headers=auth_headers(sales_user))

        assert response.json()["count"] == 1
        assert response.json()["data"][0]["id"] == own.id

    @pytest.mark.asyncio
    async def test_admin_filters(self, client: AsyncClient, admin_user, make_lead, other_admin, auth_headers):
        await make_lead(admin_user, status=LeadStatus.WON, name="Won Deal")
        await make_lead(admin_user, status=LeadStatus.LOST, name="Lost Deal")
        await make_lead(other_admin, status=LeadStatus.WON)

        response = await client.get(f"{API}/crm/", params={"status": "Won"}, headers=auth_headers(admin_user))

        assert response.json()["count"] == 1
        assert response.json()["data"][0]["name"] == "Won Deal"

        search = await client.get(f"{API}/crm/", params={"search": "lost"}, headers=auth_headers(admin_user))
        assert [l["name"] for l in search.json()["data"]] == ["Lost Deal"]

    @pytest.mark.asyncio
    async def test_sales_cannot_read_colleagues_lead(
        self, client: AsyncClient, db_session, admin_user, sales_user, make_lead, auth_headers
    ):
        lead = await make_lead(admin_user)

        response = await client.get(f"{API}/crm/{lead.id}", headers=auth_headers(sales_user))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_cross_tenant_lead(self, client: AsyncClient, admin_user, other_admin, make_lead, auth_headers):
        lead = await make_lead(other_admin)

        response = await client.get(f"{API}/crm/{lead.id}", headers=auth_headers(admin_user))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_lead(self, client: AsyncClient, admin_user, auth_headers):
        response = await client.get(
            f"{API}/crm/6f1c2e1d-1111-4a4a-9b9b-222233334444", headers=auth_headers(admin_user)
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Lead not found"

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client: AsyncClient, db_session, admin_user, sales_user, make_lead, auth_headers):
        lead = await make_lead(admin_user, sales_user)

        update = await client.put(
            f"{API}/crm/{lead.id}", json={"status": "Contacted", "notes": "Called twice"},
            headers=auth_headers(sales_user),
        )
        assert update.status_code == 200
        assert update.json()["data"]["status"] == "Contacted"

        delete = await client.delete(f"{API}/crm/{lead.id}", headers=auth_headers(sales_user))
        assert delete.status_code == 200
        db_session.expunge_all()
        assert await db_session.get(Lead, lead.id) is None

    @pytest.mark.asyncio
    async def test_update_null_handling(self, client: AsyncClient, admin_user, sales_user, make_lead, auth_headers):
        lead = await make_lead(admin_user, sales_user)

        rejected = await client.put(
            f"{API}/crm/{lead.id}", json={"status": None, "mobile": None}, headers=auth_headers(sales_user),
        )
        assert rejected.status_code == 400
        assert rejected.json()["code"] == "VALIDATION_ERROR"
        assert "mobile, status cannot be null" in rejected.json()["error"]

        cleared = await client.put(f"{API}/crm/{lead.id}", json={"notes": None}, headers=auth_headers(sales_user))
        assert cleared.status_code == 200
        assert cleared.json()["data"]["notes"] is None

    @pytest.mark.asyncio
    async def test_employees_have_no_crm_access(self, client: AsyncClient, employee_user, auth_headers):
        response = await client.get(f"{API}/crm/", headers=auth_headers(employee_user))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_assign_notifies_owner(
        self, client: AsyncClient, db_session, admin_user, sales_user, make_lead, auth_headers, mock_push
    ):
        sales_user.fcm_token = "device-token-1"
        await db_session.commit()
        lead = await make_lead(admin_user)

        response = await client.put(
            f"{API}/crm/{lead.id}/assign", json={"owner": sales_user.id}, headers=auth_headers(admin_user)
        )

        assert response.status_code == 200
        assert response.json()["data"]["ownerId"] == sales_user.id
        notifications = (await db_session.execute(
            select(Notification).where(Notification.recipient_id == sales_user.id)
        )).scalars().all()
        assert len(notifications) == 1
        assert notifications[0].title == "New Lead Assigned"
        mock_push.assert_called_once()
        assert mock_push.call_args.args[0] == ["device-token-1"]

    @pytest.mark.asyncio
    async def test_sales_executive_directory(self, client: AsyncClient, admin_user, sales_user, other_sales, auth_headers):
        response = await client.get(f"{API}/crm/sales-executives", headers=auth_headers(admin_user))

        assert [s["id"] for s in response.json()["data"]] == [sales_user.id]


class TestProjectConversion:
    """Won lead -> pending_project -> approved project"""

    @pytest.mark.asyncio
    async def test_full_conversion(
        self, client: AsyncClient, db_session, admin_user, sales_user, manager_user,
        make_lead, won_lead_fields, auth_headers
    ):
        lead = await make_lead(admin_user, sales_user, notes="Website revamp", **won_lead_fields)

        request = await client.put(f"{API}/crm/{lead.id}/request-project", headers=auth_headers(sales_user))
        assert request.status_code == 200
        assert request.json()["data"]["approvalStatus"] == "pending_project"

        pending = await client.get(f"{API}/crm/pending-projects", headers=auth_headers(admin_user))
        assert [l["id"] for l in pending.json()["data"]] == [lead.id]

        approve = await client.put(
            f"{API}/crm/{lead.id}/approve-project",
            json={"managerId": manager_user.id},
            headers=auth_headers(admin_user),
        )
        assert approve.status_code == 200
        project_data = approve.json()["data"]["project"]
        assert project_data["managerId"] == manager_user.id
        assert project_data["salesRepId"] == sales_user.id
        assert project_data["clientId"] == lead.id
        assert project_data["budget"] == 50000
        assert project_data["name"] == f"{lead.company} Project"

        refreshed = await reload(db_session, Lead, lead.id)
        assert refreshed.approval_status == ApprovalStatus.APPROVED_PROJECT
        assert refreshed.project_ref == project_data["id"]

        manager_notes = (await db_session.execute(
            select(Notification).where(Notification.recipient_id == manager_user.id)
        )).scalars().all()
        assert [n.title for n in manager_notes] == ["New Project Assigned"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides,message", [
        ({"status": LeadStatus.PROPOSAL_SENT}, "Only Won leads can be converted"),
        ({"amount": 0}, "Lead amount must be greater than zero"),
        ({"deadline": None}, "Lead deadline is required"),
    ])
    async def test_request_preconditions(
        self, client: AsyncClient, admin_user, sales_user, make_lead, won_lead_fields, auth_headers,
        overrides, message
    ):
        lead = await make_lead(admin_user, sales_user, **{**won_lead_fields, **overrides})

        response = await client.put(f"{API}/crm/{lead.id}/request-project", headers=auth_headers(sales_user))

        assert response.status_code == 400
        assert response.json()["error"] == message

    @pytest.mark.asyncio
    async def test_request_twice(self, client: AsyncClient, admin_user, sales_user, make_lead, won_lead_fields, auth_headers):
        lead = await make_lead(
            admin_user, sales_user, approval_status=ApprovalStatus.PENDING_PROJECT, **won_lead_fields
        )

        response = await client.put(f"{API}/crm/{lead.id}/request-project", headers=auth_headers(sales_user))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_approve_requires_manager(
        self, client: AsyncClient, admin_user, make_lead, won_lead_fields, auth_headers
    ):
        lead = await make_lead(admin_user, approval_status=ApprovalStatus.PENDING_PROJECT, **won_lead_fields)

        response = await client.put(f"{API}/crm/{lead.id}/approve-project", json={}, headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.json()["error"] == "Manager ID is required"

    @pytest.mark.asyncio
    async def test_approve_not_pending(
        self, client: AsyncClient, admin_user, manager_user, make_lead, won_lead_fields, auth_headers
    ):
        lead = await make_lead(admin_user, **won_lead_fields)

        response = await client.put(
            f"{API}/crm/{lead.id}/approve-project", json={"managerId": manager_user.id},
            headers=auth_headers(admin_user),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_approve_with_foreign_manager_creates_nothing(
        self, client: AsyncClient, db_session, admin_user, other_admin, make_lead, won_lead_fields, auth_headers
    ):
        foreign_manager = await create_member(db_session, Manager, other_admin)
        lead = await make_lead(admin_user, approval_status=ApprovalStatus.PENDING_PROJECT, **won_lead_fields)

        response = await client.put(
            f"{API}/crm/{lead.id}/approve-project", json={"managerId": foreign_manager.id},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 403
        projects = (await db_session.execute(select(Project))).scalars().all()
        assert projects == []

    @pytest.mark.asyncio
    async def test_only_admin_approves(
        self, client: AsyncClient, admin_user, sales_user, manager_user, make_lead, won_lead_fields, auth_headers
    ):
        lead = await make_lead(
            admin_user, sales_user, approval_status=ApprovalStatus.PENDING_PROJECT, **won_lead_fields
        )

        response = await client.put(
            f"{API}/crm/{lead.id}/approve-project", json={"managerId": manager_user.id},
            headers=auth_headers(sales_user),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_reject(self, client: AsyncClient, db_session, admin_user, make_lead, won_lead_fields, auth_headers):
        lead = await make_lead(admin_user, approval_status=ApprovalStatus.PENDING_PROJECT, **won_lead_fields)

        response = await client.put(f"{API}/crm/{lead.id}/reject-project", headers=auth_headers(admin_user))

        assert response.status_code == 200
        assert (await reload(db_session, Lead, lead.id)).approval_status == ApprovalStatus.REJECTED


class TestFollowUps:

    @pytest.mark.asyncio
    async def test_create_and_list(self, client: AsyncClient, admin_user, sales_user, make_lead, auth_headers):
        lead = await make_lead(admin_user, sales_user)
        when = (datetime.utcnow() + timedelta(days=2)).replace(microsecond=0)

        created = await client.post(f"{API}/follow-ups/", json={
            "leadId": lead.id,
            "type": "Meeting",
            "scheduledAt": when.isoformat(),
            "notes": "Demo",
        }, headers=auth_headers(sales_user))

        assert created.status_code == 201
        assert created.json()["data"]["salesRepId"] == sales_user.id

        listing = await client.get(f"{API}/follow-ups/", params={"leadId": lead.id}, headers=auth_headers(sales_user))
        assert listing.json()["count"] == 1

    @pytest.mark.asyncio
    async def test_follow_up_on_foreign_lead(self, client: AsyncClient, sales_user, other_admin, make_lead, auth_headers):
        lead = await make_lead(other_admin)

        response = await client.post(f"{API}/follow-ups/", json={
            "leadId": lead.id,
            "scheduledAt": datetime.utcnow().isoformat(),
        }, headers=auth_headers(sales_user))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_only_owner_or_admin_edits(
        self, client: AsyncClient, db_session, admin_user, sales_user, make_lead, auth_headers
    ):
        colleague = await create_member(db_session, SalesExecutive, admin_user)
        lead = await make_lead(admin_user, sales_user)
        created = await client.post(f"{API}/follow-ups/", json={
            "leadId": lead.id,
            "scheduledAt": datetime.utcnow().isoformat(),
        }, headers=auth_headers(sales_user))
        follow_up_id = created.json()["data"]["id"]

        denied = await client.put(
            f"{API}/follow-ups/{follow_up_id}", json={"status": "Completed"}, headers=auth_headers(colleague)
        )
        assert denied.status_code == 403

        allowed = await client.put(
            f"{API}/follow-ups/{follow_up_id}", json={"status": "Completed"}, headers=auth_headers(admin_user)
        )
        assert allowed.status_code == 200
        assert allowed.json()["data"]["status"] == "Completed"
