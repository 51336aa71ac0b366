"""
Integration tests for calendar entries and slot conflicts
"""
import pytest
from httpx import AsyncClient

from dintask.models.accounts import Employee, MemberStatus
from dintask.models.schedule import Schedule, ScheduleStatus
from tests.factories import create_member, reload

API = "/api/v1/schedules"
DAY = "2026-11-02"


def entry(title="Weekly sync", time="10:00", end_time="11:00", **extra):
    return {"title": title, "date": DAY, "time": time, "endTime": end_time, **extra}


class TestCreateSchedule:

    @pytest.mark.asyncio
    async def test_create_with_participants(
        self, client: AsyncClient, admin_user, manager_user, employee_user, auth_headers
    ):
        response = await client.post(f"{API}/", json=entry(participants=[
            {"userId": employee_user.id, "userType": "Employee"},
            {"userId": admin_user.id, "userType": "Admin"},
            {"userId": employee_user.id, "userType": "Employee"},
        ]), headers=auth_headers(manager_user))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["createdById"] == manager_user.id
        assert data["createdByModel"] == "Manager"
        assert data["adminId"] == admin_user.id
        assert data["location"] == "Remote"
        assert data["status"] == "scheduled"
        assert {p["userId"] for p in data["participants"]} == {employee_user.id, admin_user.id}

    @pytest.mark.asyncio
    async def test_overlap_is_rejected(self, client: AsyncClient, admin_user, sales_user, auth_headers):
        first = await client.post(f"{API}/", json=entry(), headers=auth_headers(admin_user))
        assert first.status_code == 201

        response = await client.post(
            f"{API}/", json=entry("Client call", "10:30", "11:30"), headers=auth_headers(sales_user)
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "SCHEDULE_CONFLICT"
        assert body["error"] == "Time slot conflict: An event already exists from 10:00 to 11:00"

    @pytest.mark.asyncio
    async def test_back_to_back_is_allowed(self, client: AsyncClient, admin_user, auth_headers):
        await client.post(f"{API}/", json=entry(), headers=auth_headers(admin_user))

        response = await client.post(f"{API}/", json=entry("Next", "11:00", "12:00"), headers=auth_headers(admin_user))
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_other_workspaces_do_not_conflict(
        self, client: AsyncClient, admin_user, other_admin, auth_headers
    ):
        await client.post(f"{API}/", json=entry(), headers=auth_headers(admin_user))

        response = await client.post(f"{API}/", json=entry(), headers=auth_headers(other_admin))
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_cancelled_slot_is_free(self, client: AsyncClient, db_session, admin_user, auth_headers):
        created = await client.post(f"{API}/", json=entry(), headers=auth_headers(admin_user))
        schedule_id = created.json()["data"]["id"]
        await client.put(f"{API}/{schedule_id}", json={"status": "cancelled"}, headers=auth_headers(admin_user))

        response = await client.post(f"{API}/", json=entry("Rebooked"), headers=auth_headers(admin_user))

        assert response.status_code == 201
        assert (await reload(db_session, Schedule, schedule_id)).status == ScheduleStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_end_before_start(self, client: AsyncClient, admin_user, auth_headers):
        response = await client.post(f"{API}/", json=entry(time="15:00", end_time="14:00"), headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.json()["error"] == "End time must be after start time"

    @pytest.mark.asyncio
    async def test_bad_time_format(self, client: AsyncClient, admin_user, auth_headers):
        response = await client.post(f"{API}/", json=entry(time="9am", end_time=None), headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_participant_from_other_workspace(
        self, client: AsyncClient, admin_user, other_sales, auth_headers
    ):
        response = await client.post(f"{API}/", json=entry(participants=[
            {"userId": other_sales.id, "userType": "SalesExecutive"},
        ]), headers=auth_headers(admin_user))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_pending_member_cannot_be_invited(self, client: AsyncClient, db_session, admin_user, auth_headers):
        pending = await create_member(db_session, Employee, admin_user, status=MemberStatus.PENDING)

        response = await client.post(f"{API}/", json=entry(participants=[
            {"userId": pending.id, "userType": "Employee"},
        ]), headers=auth_headers(admin_user))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_platform_operators_excluded(self, client: AsyncClient, superadmin_user, auth_headers):
        response = await client.post(f"{API}/", json=entry(), headers=auth_headers(superadmin_user))
        assert response.status_code == 403


class TestScheduleAccess:

    @pytest.mark.asyncio
    async def test_list_shows_created_and_invited(
        self, client: AsyncClient, admin_user, manager_user, employee_user, sales_user, auth_headers
    ):
        await client.post(f"{API}/", json=entry("Own", "08:00", "08:30"), headers=auth_headers(employee_user))
        await client.post(f"{API}/", json=entry("Invite", "09:00", "09:30", participants=[
            {"userId": employee_user.id, "userType": "Employee"},
        ]), headers=auth_headers(manager_user))
        await client.post(f"{API}/", json=entry("Unrelated", "13:00", "14:00"), headers=auth_headers(sales_user))

        response = await client.get(f"{API}/", headers=auth_headers(employee_user))

        titles = [s["title"] for s in response.json()["data"]]
        assert titles == ["Own", "Invite"]

    @pytest.mark.asyncio
    async def test_participants_exclude_caller(
        self, client: AsyncClient, admin_user, manager_user, employee_user, sales_user, auth_headers
    ):
        response = await client.get(f"{API}/participants", headers=auth_headers(employee_user))

        ids = {p["id"] for p in response.json()["data"]}
        assert ids == {admin_user.id, manager_user.id}

    @pytest.mark.asyncio
    async def test_only_creator_edits(self, client: AsyncClient, admin_user, manager_user, employee_user, auth_headers):
        created = await client.post(f"{API}/", json=entry(participants=[
            {"userId": employee_user.id, "userType": "Employee"},
        ]), headers=auth_headers(manager_user))
        schedule_id = created.json()["data"]["id"]

        response = await client.put(
            f"{API}/{schedule_id}", json={"title": "Hijacked"}, headers=auth_headers(employee_user)
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Only the creator can modify this schedule"

        deleted = await client.delete(f"{API}/{schedule_id}", headers=auth_headers(admin_user))
        assert deleted.status_code == 403

    @pytest.mark.asyncio
    async def test_reschedule_checks_conflicts(self, client: AsyncClient, admin_user, auth_headers):
        await client.post(f"{API}/", json=entry("Fixed", "14:00", "15:00"), headers=auth_headers(admin_user))
        movable = await client.post(f"{API}/", json=entry(), headers=auth_headers(admin_user))
        schedule_id = movable.json()["data"]["id"]

        clash = await client.put(
            f"{API}/{schedule_id}", json={"time": "14:30", "endTime": "15:30"}, headers=auth_headers(admin_user)
        )
        assert clash.status_code == 400

        moved = await client.put(
            f"{API}/{schedule_id}", json={"time": "10:15", "endTime": "10:45"}, headers=auth_headers(admin_user)
        )
        assert moved.status_code == 200
        assert moved.json()["data"]["time"] == "10:15"

    @pytest.mark.asyncio
    async def test_reviving_cancelled_entry_checks_conflicts(
        self, client: AsyncClient, db_session, admin_user, auth_headers
    ):
        created = await client.post(f"{API}/", json=entry(), headers=auth_headers(admin_user))
        schedule_id = created.json()["data"]["id"]
        await client.put(f"{API}/{schedule_id}", json={"status": "cancelled"}, headers=auth_headers(admin_user))
        rebooked = await client.post(f"{API}/", json=entry("Rebooked"), headers=auth_headers(admin_user))
        assert rebooked.status_code == 201

        response = await client.put(f"{API}/{schedule_id}", json={"status": "scheduled"}, headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.json()["code"] == "SCHEDULE_CONFLICT"
        assert (await reload(db_session, Schedule, schedule_id)).status == ScheduleStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_reviving_into_free_slot(self, client: AsyncClient, admin_user, auth_headers):
        created = await client.post(f"{API}/", json=entry(), headers=auth_headers(admin_user))
        schedule_id = created.json()["data"]["id"]
        await client.put(f"{API}/{schedule_id}", json={"status": "cancelled"}, headers=auth_headers(admin_user))

        response = await client.put(f"{API}/{schedule_id}", json={"status": "scheduled"}, headers=auth_headers(admin_user))

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "scheduled"

    @pytest.mark.asyncio
    async def test_null_date_rejected(self, client: AsyncClient, admin_user, auth_headers):
        created = await client.post(f"{API}/", json=entry(), headers=auth_headers(admin_user))
        schedule_id = created.json()["data"]["id"]

        response = await client.put(f"{API}/{schedule_id}", json={"date": None}, headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_creator_deletes(self, client: AsyncClient, db_session, admin_user, auth_headers):
        created = await client.post(f"{API}/", json=entry(), headers=auth_headers(admin_user))
        schedule_id = created.json()["data"]["id"]

        response = await client.delete(f"{API}/{schedule_id}", headers=auth_headers(admin_user))

        assert response.status_code == 200
        db_session.expunge_all()
        assert await db_session.get(Schedule, schedule_id) is None
