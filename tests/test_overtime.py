"""초과근무 신청/승인 워크플로 테스트.

Overtime workflow tests: submission validations in order, approver
decisions, employee cancellation and listings.
"""

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import auth_header

APP = "/api/v1/app"
OVERTIME = f"{APP}/my/overtime"
APPROVALS = f"{APP}/approvals/overtime"


def overtime_body(work_date: str = "2026-10-19", start: str = "17:00", end: str = "19:00") -> dict:
    return {"work_date": work_date, "start_time": start, "end_time": end, "reason": "Month-end closing"}


@pytest_asyncio.fixture
async def pending_id(client: AsyncClient, staff_token) -> str:
    """직원이 제출한 미결 신청 ID (A pending request submitted by staff)."""
    res = await client.post(OVERTIME, json=overtime_body(), headers=auth_header(staff_token))
    assert res.status_code == 201
    return res.json()["id"]


# ===== Submission =====

class TestSubmitOvertime:
    """초과근무 신청 검증 테스트."""

    async def test_submit(self, client: AsyncClient, staff_token, manager):
        res = await client.post(OVERTIME, json=overtime_body(), headers=auth_header(staff_token))
        assert res.status_code == 201
        data = res.json()
        assert data["status"] == "pending"
        assert data["duration"] == 120
        assert data["duration_formatted"] == "02:00"
        assert data["approved_by"] == str(manager.id)
        assert data["approver_name"] == "Test Manager"
        assert data["employee_name"] == "Test Staff"

    async def test_end_before_start_is_next_day(self, client: AsyncClient, staff_token):
        """23:00-01:00 은 다음날 종료로 120분."""
        res = await client.post(OVERTIME, json=overtime_body(start="23:00", end="01:00"), headers=auth_header(staff_token))
        assert res.status_code == 201
        assert res.json()["duration"] == 120

    async def test_too_short(self, client: AsyncClient, staff_token):
        res = await client.post(OVERTIME, json=overtime_body(end="17:20"), headers=auth_header(staff_token))
        assert res.status_code == 422
        assert res.json()["detail"]["reason"] == "overtime_too_short"

    async def test_too_long(self, client: AsyncClient, staff_token):
        res = await client.post(OVERTIME, json=overtime_body(end="22:00"), headers=auth_header(staff_token))
        assert res.status_code == 422
        assert res.json()["detail"]["reason"] == "overtime_too_long"

    async def test_date_in_past(self, client: AsyncClient, staff_token):
        res = await client.post(OVERTIME, json=overtime_body(work_date="2026-10-18"), headers=auth_header(staff_token))
        assert res.status_code == 422
        assert res.json()["detail"]["reason"] == "overtime_date_in_past"

    async def test_too_far_ahead(self, client: AsyncClient, staff_token):
        ok = await client.post(OVERTIME, json=overtime_body(work_date="2026-10-26"), headers=auth_header(staff_token))
        assert ok.status_code == 201

        res = await client.post(OVERTIME, json=overtime_body(work_date="2026-10-27"), headers=auth_header(staff_token))
        assert res.status_code == 422
        assert res.json()["detail"]["reason"] == "overtime_too_far_ahead"

    async def test_duplicate_for_same_day(self, client: AsyncClient, staff_token, pending_id):
        res = await client.post(
            OVERTIME, json=overtime_body(start="19:00", end="20:00"), headers=auth_header(staff_token),
        )
        assert res.status_code == 400
        assert res.json()["detail"]["reason"] == "overtime_already_requested"

    async def test_overlaps_work_hours(self, client: AsyncClient, staff_token):
        res = await client.post(
            OVERTIME, json=overtime_body(start="16:00", end="18:00"), headers=auth_header(staff_token),
        )
        assert res.status_code == 400
        assert res.json()["detail"]["reason"] == "overtime_overlaps_work_hours"

    async def test_early_morning_start_is_exempt(self, client: AsyncClient, staff_token):
        """새벽 01:00 시작은 전날 밤 연장으로 간주: 근무 시간 중복 검사 제외."""
        res = await client.post(
            OVERTIME, json=overtime_body(start="01:00", end="03:00"), headers=auth_header(staff_token),
        )
        assert res.status_code == 201

    async def test_no_approver_assigned(self, client: AsyncClient, manager_token):
        res = await client.post(OVERTIME, json=overtime_body(), headers=auth_header(manager_token))
        assert res.status_code == 400
        assert res.json()["detail"]["reason"] == "no_approver_assigned"

    async def test_inactive_approver(self, client: AsyncClient, db: AsyncSession, manager, staff_token):
        manager.is_active = False
        await db.commit()
        res = await client.post(OVERTIME, json=overtime_body(), headers=auth_header(staff_token))
        assert res.status_code == 400
        assert res.json()["detail"]["reason"] == "approver_unavailable"

    async def test_reason_is_required(self, client: AsyncClient, staff_token):
        body = overtime_body()
        body["reason"] = ""
        res = await client.post(OVERTIME, json=body, headers=auth_header(staff_token))
        assert res.status_code == 422


# ===== Decisions =====

class TestDecideOvertime:
    """승인권자 결정 테스트."""

    async def test_approve(self, client: AsyncClient, manager_token, pending_id, clock):
        res = await client.post(f"{APPROVALS}/{pending_id}/approve", headers=auth_header(manager_token))
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "approved"
        assert data["approved_at"].startswith("2026-10-19T07:55")

    async def test_reject_with_reason(self, client: AsyncClient, manager_token, pending_id):
        res = await client.post(
            f"{APPROVALS}/{pending_id}/reject",
            json={"rejection_reason": "  Not needed this week  "},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "rejected"
        assert data["rejection_reason"] == "Not needed this week"

    async def test_reject_requires_reason(self, client: AsyncClient, manager_token, pending_id):
        res = await client.post(
            f"{APPROVALS}/{pending_id}/reject", json={"rejection_reason": "   "}, headers=auth_header(manager_token),
        )
        assert res.status_code == 422
        assert res.json()["detail"]["reason"] == "rejection_reason_required"

    async def test_only_addressed_approver_decides(self, client: AsyncClient, outsider_token, pending_id):
        res = await client.post(f"{APPROVALS}/{pending_id}/approve", headers=auth_header(outsider_token))
        assert res.status_code == 403
        assert res.json()["detail"]["reason"] == "not_assigned_approver"

    async def test_already_processed(self, client: AsyncClient, manager_token, pending_id):
        await client.post(f"{APPROVALS}/{pending_id}/approve", headers=auth_header(manager_token))
        res = await client.post(
            f"{APPROVALS}/{pending_id}/reject", json={"rejection_reason": "Changed my mind"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400
        assert res.json()["detail"]["reason"] == "already_processed"

    async def test_unknown_request(self, client: AsyncClient, manager_token):
        res = await client.post(
            f"{APPROVALS}/00000000-0000-0000-0000-000000000000/approve", headers=auth_header(manager_token),
        )
        assert res.status_code == 404

    async def test_rejected_day_can_be_requested_again(
        self, client: AsyncClient, staff_token, manager_token, pending_id,
    ):
        await client.post(
            f"{APPROVALS}/{pending_id}/reject", json={"rejection_reason": "Too long"},
            headers=auth_header(manager_token),
        )
        res = await client.post(
            OVERTIME, json=overtime_body(end="18:00"), headers=auth_header(staff_token),
        )
        assert res.status_code == 201


# ===== Cancellation =====

class TestCancelOvertime:
    """직원 본인 취소 테스트."""

    async def test_cancel_pending(self, client: AsyncClient, staff_token, manager, pending_id):
        res = await client.post(f"{OVERTIME}/{pending_id}/cancel", headers=auth_header(staff_token))
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "rejected"
        assert data["rejection_reason"] == "cancelled by employee"
        assert data["approved_by"] == str(manager.id)

    async def test_cancel_approved_is_refused(self, client: AsyncClient, staff_token, manager_token, pending_id):
        await client.post(f"{APPROVALS}/{pending_id}/approve", headers=auth_header(manager_token))
        res = await client.post(f"{OVERTIME}/{pending_id}/cancel", headers=auth_header(staff_token))
        assert res.status_code == 400
        assert res.json()["detail"]["reason"] == "only_pending_cancellable"

    async def test_cancel_someone_elses(self, client: AsyncClient, outsider_token, pending_id):
        res = await client.post(f"{OVERTIME}/{pending_id}/cancel", headers=auth_header(outsider_token))
        assert res.status_code == 404


# ===== Listing and detail =====

class TestListOvertime:
    """신청 목록/상세 테스트."""

    async def test_my_requests(self, client: AsyncClient, staff_token, pending_id):
        res = await client.get(OVERTIME, headers=auth_header(staff_token))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == pending_id

    async def test_approver_queue(self, client: AsyncClient, manager_token, pending_id):
        res = await client.get(APPROVALS, headers=auth_header(manager_token))
        assert res.json()["total"] == 1

        await client.post(f"{APPROVALS}/{pending_id}/approve", headers=auth_header(manager_token))
        assert (await client.get(APPROVALS, headers=auth_header(manager_token))).json()["total"] == 0

        res = await client.get(APPROVALS, params={"status": "approved"}, headers=auth_header(manager_token))
        assert res.json()["total"] == 1

    async def test_detail_visibility(
        self, client: AsyncClient, staff_token, manager_token, outsider_token, pending_id,
    ):
        assert (await client.get(f"{OVERTIME}/{pending_id}", headers=auth_header(staff_token))).status_code == 200
        assert (await client.get(f"{OVERTIME}/{pending_id}", headers=auth_header(manager_token))).status_code == 200
        assert (await client.get(f"{OVERTIME}/{pending_id}", headers=auth_header(outsider_token))).status_code == 403
