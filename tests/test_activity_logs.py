"""활동 로그 테스트: 커밋 후 기록, 실패 격리, 기간 필터.

Activity log tests. Logs are written after the business transaction
commits; a failing log write never fails the request.
"""

import logging
from datetime import datetime

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_log import ActivityLog
from app.models.attendance import Attendance
from app.repositories.activity_log_repository import activity_log_repository
from tests.conftest import at_office, auth_header

APP = "/api/v1/app"
LOGS = f"{APP}/my/activity-logs"
CLOCK = f"{APP}/my/attendance/clock"


class TestPostCommitLogging:
    """커밋 후 활동 로그 기록 테스트."""

    async def test_clock_in_is_logged(self, client: AsyncClient, staff_token):
        await client.post(CLOCK, json={**at_office(), "address": "Lobby"}, headers=auth_header(staff_token))

        res = await client.get(LOGS, headers=auth_header(staff_token))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 1
        log = data["items"][0]
        assert log["activity_type"] == "clock_in"
        assert log["title"] == "Clocked in"
        assert log["location_address"] == "Lobby"
        assert log["metadata"]["is_late"] is False

    async def test_clock_out_is_logged(self, client: AsyncClient, staff_token, clock):
        await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        clock.set(datetime(2026, 10, 19, 17, 0))
        await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))

        res = await client.get(LOGS, params={"activity_type": "clock_out"}, headers=auth_header(staff_token))
        items = res.json()["items"]
        assert len(items) == 1
        assert items[0]["metadata"]["work_minutes"] == 545

    async def test_failed_log_write_keeps_the_record(
        self, client: AsyncClient, db: AsyncSession, staff_token, monkeypatch, caplog,
    ):
        """로그 기록 실패: 응답은 성공, 근태 기록은 유지."""
        async def broken_create(*args, **kwargs):
            raise RuntimeError("log store down")

        monkeypatch.setattr(activity_log_repository, "create", broken_create)
        with caplog.at_level(logging.ERROR, logger="app.services.activity_log_service"):
            res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))

        assert res.status_code == 200
        assert res.json()["action"] == "clock_in"
        assert "Post-commit hook" in caplog.text
        assert (await db.execute(select(func.count()).select_from(Attendance))).scalar() == 1
        assert (await db.execute(select(func.count()).select_from(ActivityLog))).scalar() == 0


class TestListActivityLogs:
    """활동 로그 기간 필터 테스트."""

    @pytest_asyncio.fixture
    async def logs(self, db: AsyncSession, staff, clock) -> None:
        """수요일 기준: 오늘, 이번 주 월요일, 지난주, 지난달 로그."""
        clock.set(datetime(2026, 10, 21, 12, 0))
        moments = [
            datetime(2026, 10, 21, 8, 0),
            datetime(2026, 10, 19, 8, 0),
            datetime(2026, 10, 14, 8, 0),
            datetime(2026, 9, 30, 8, 0),
        ]
        db.add_all([
            ActivityLog(
                employee_id=staff.id,
                company_id=staff.company_id,
                activity_type="clock_in",
                title="Clocked in",
                activity_time=moment,
            )
            for moment in moments
        ])
        await db.commit()

    async def test_periods(self, client: AsyncClient, staff_token, logs):
        expected = {None: 4, "today": 1, "week": 2, "month": 3}
        for period, total in expected.items():
            params = {"period": period} if period else {}
            res = await client.get(LOGS, params=params, headers=auth_header(staff_token))
            assert res.status_code == 200
            assert res.json()["total"] == total, period

    async def test_newest_first(self, client: AsyncClient, staff_token, logs):
        items = (await client.get(LOGS, headers=auth_header(staff_token))).json()["items"]
        assert items[0]["activity_time"] == "2026-10-21T08:00:00"
        assert items[-1]["activity_time"] == "2026-09-30T08:00:00"

    async def test_unknown_period(self, client: AsyncClient, staff_token):
        res = await client.get(LOGS, params={"period": "decade"}, headers=auth_header(staff_token))
        assert res.status_code == 400
        assert res.json()["detail"]["reason"] == "invalid_input"

    async def test_only_own_logs(self, client: AsyncClient, outsider_token, logs):
        res = await client.get(LOGS, headers=auth_header(outsider_token))
        assert res.json()["total"] == 0
