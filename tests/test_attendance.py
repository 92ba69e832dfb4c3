"""출퇴근 상태 머신 및 근태 조회 API 테스트.

Attendance API tests: clock-in/out transitions, ordered preconditions,
the non-mutating status projection, history and summary.
"""

from datetime import date, datetime, time

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import Attendance, AttendanceStatus
from app.models.organization import Holiday
from app.repositories.attendance_repository import attendance_repository
from app.services.attendance_service import attendance_service
from app.utils.exceptions import ErrorReason, ForbiddenError
from tests.conftest import MONDAY, OFFICE_LAT, OFFICE_LNG, at_office, auth_header

APP = "/api/v1/app"
CLOCK = f"{APP}/my/attendance/clock"
STATUS = f"{APP}/my/attendance/status"

# 사무실에서 북쪽으로 약 150m (About 150 m north of the office)
FAR_LAT = OFFICE_LAT + 0.00135


async def count_records(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Attendance))).scalar()


# ===== Clock in / out =====

class TestClockInOut:
    """출퇴근 기록 테스트."""

    async def test_on_time_clock_in(self, client: AsyncClient, staff_token, clock):
        """07:55 출근: 정상 출근."""
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 200
        data = res.json()
        assert data["action"] == "clock_in"
        assert data["is_late"] is False
        assert data["attendance"]["status"] == "present"
        assert data["attendance"]["clock_in"] == "07:55:00"
        assert data["attendance"]["office_name"] == "Head Office"

    async def test_late_day_with_unapproved_overtime(self, client: AsyncClient, staff_token, clock):
        """08:10 출근(지각), 19:30 퇴근: 680분 근무, 승인 없는 초과근무는 미인정."""
        clock.set(datetime(2026, 10, 19, 8, 10))
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 200
        assert res.json()["is_late"] is True
        assert res.json()["attendance"]["status"] == "late"

        clock.set(datetime(2026, 10, 19, 19, 30))
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 200
        data = res.json()
        assert data["action"] == "clock_out"
        assert data["work_minutes"] == 680
        assert data["overtime_minutes"] == 0
        assert data["attendance"]["uncredited_overtime_duration"] == 150
        assert data["attendance"]["work_duration_formatted"] == "11:20"
        assert data["attendance"]["status"] == "late"

    async def test_approved_overtime_is_credited_up_to_grant(
        self, client: AsyncClient, staff_token, manager_token, clock,
    ):
        """승인된 120분 초과근무: 19:30 퇴근 시 120분만 인정."""
        res = await client.post(f"{APP}/my/overtime", json={
            "work_date": "2026-10-19",
            "start_time": "17:00",
            "end_time": "19:00",
            "reason": "Month-end closing",
        }, headers=auth_header(staff_token))
        assert res.status_code == 201
        overtime_id = res.json()["id"]

        res = await client.post(
            f"{APP}/approvals/overtime/{overtime_id}/approve", headers=auth_header(manager_token),
        )
        assert res.status_code == 200

        await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        clock.set(datetime(2026, 10, 19, 19, 30))
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        data = res.json()
        assert data["overtime_minutes"] == 120
        assert data["attendance"]["uncredited_overtime_duration"] == 30

    async def test_third_clock_is_rejected(self, client: AsyncClient, staff_token, clock):
        """퇴근 후 다시 출퇴근 시도: already_clocked_out."""
        await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        clock.set(datetime(2026, 10, 19, 17, 0))
        await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))

        clock.set(datetime(2026, 10, 19, 17, 5))
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 400
        assert res.json()["detail"]["reason"] == "already_clocked_out"

    async def test_record_without_clock_in_is_filled_by_clock_in(
        self, client: AsyncClient, db: AsyncSession, staff, staff_token, clock,
    ):
        """출근 없는 기존 기록(결근 등록): 새 행 없이 출근으로 채움, 지각 판정 적용."""
        db.add(Attendance(employee_id=staff.id, work_date=date(2026, 10, 19), status=AttendanceStatus.ABSENT))
        await db.commit()

        status = (await client.get(STATUS, headers=auth_header(staff_token))).json()
        assert status["can_clock_in"] is True
        assert status["can_clock_out"] is False

        clock.set(datetime(2026, 10, 19, 8, 10))
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 200
        data = res.json()
        assert data["action"] == "clock_in"
        assert data["is_late"] is True
        assert data["attendance"]["clock_in"] == "08:10:00"
        assert data["attendance"]["clock_out"] is None
        assert data["attendance"]["status"] == "late"
        assert data["attendance"]["office_name"] == "Head Office"
        assert await count_records(db) == 1

        clock.set(datetime(2026, 10, 19, 17, 10))
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.json()["action"] == "clock_out"
        assert res.json()["work_minutes"] == 540

    async def test_outside_radius(self, client: AsyncClient, db: AsyncSession, staff_token):
        """사무실에서 150m 떨어진 위치: outside_radius, 기록 없음."""
        res = await client.post(CLOCK, json={
            "latitude": FAR_LAT,
            "longitude": OFFICE_LNG,
        }, headers=auth_header(staff_token))
        assert res.status_code == 400
        detail = res.json()["detail"]
        assert detail["reason"] == "outside_radius"
        assert "100" in detail["message"]
        assert await count_records(db) == 0

    async def test_invalid_coordinates(self, client: AsyncClient, staff_token):
        res = await client.post(CLOCK, json={"latitude": 91, "longitude": 0}, headers=auth_header(staff_token))
        assert res.status_code == 422

    async def test_requires_authentication(self, client: AsyncClient, staff):
        res = await client.post(CLOCK, json=at_office())
        assert res.status_code == 401

    async def test_inactive_employee_cannot_authenticate(
        self, client: AsyncClient, db: AsyncSession, staff, staff_token,
    ):
        staff.is_active = False
        await db.commit()
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 401

    async def test_lost_clock_in_race_is_a_conflict(
        self, client: AsyncClient, db: AsyncSession, staff, staff_token, monkeypatch,
    ):
        """동시 출근 경합: 유니크 제약으로 409, 기록은 하나만 남음."""
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 200

        async def no_record(*args, **kwargs):
            return None

        # 다른 요청이 먼저 기록한 상황 (another request recorded first)
        monkeypatch.setattr(attendance_repository, "get_employee_day", no_record)
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 409
        assert res.json()["detail"]["reason"] == "conflict"
        assert await count_records(db) == 1


# ===== Ordered preconditions =====

class TestPreconditions:
    """출퇴근 선행 조건 테스트 (각 실패는 고유 사유 코드)."""

    @pytest_asyncio.fixture
    async def holiday(self, db: AsyncSession, company) -> Holiday:
        h = Holiday(company_id=company.id, name="National Day", holiday_date=date(2026, 10, 19))
        db.add(h)
        await db.commit()
        return h

    async def test_holiday(self, client: AsyncClient, db: AsyncSession, staff_token, holiday):
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 400
        assert res.json()["detail"]["reason"] == "holiday"
        assert await count_records(db) == 0

    async def test_holiday_on_weekend_reports_holiday(
        self, client: AsyncClient, db: AsyncSession, company, staff_token, clock,
    ):
        """토요일 휴일: 휴일 검사가 근무일 검사보다 먼저."""
        db.add(Holiday(company_id=company.id, name="Saturday Holiday", holiday_date=date(2026, 10, 24)))
        await db.commit()
        clock.set(datetime(2026, 10, 24, 9, 0))
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.json()["detail"]["reason"] == "holiday"

    async def test_non_working_day(self, client: AsyncClient, staff_token, clock):
        clock.set(datetime(2026, 10, 24, 9, 0))  # 토요일 (Saturday)
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 400
        assert res.json()["detail"]["reason"] == "non_working_day"

    async def test_inactive_schedule(self, client: AsyncClient, db: AsyncSession, schedule, staff_token):
        schedule.is_active = False
        await db.commit()
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.json()["detail"]["reason"] == "schedule_unavailable"

    async def test_inactive_office(self, client: AsyncClient, db: AsyncSession, office, staff_token):
        office.is_active = False
        await db.commit()
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.json()["detail"]["reason"] == "office_unavailable"

    async def test_no_office_assigned(self, client: AsyncClient, db: AsyncSession, staff, staff_token):
        staff.office_id = None
        await db.commit()
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.json()["detail"]["reason"] == "office_unavailable"

    async def test_inactive_employee_at_service_level(self, db: AsyncSession, staff):
        staff.is_active = False
        with pytest.raises(ForbiddenError) as exc_info:
            await attendance_service.check_day(db, staff, MONDAY.date())
        assert exc_info.value.reason == ErrorReason.EMPLOYEE_INACTIVE
        assert exc_info.value.status_code == 403


# ===== Cross-midnight clock-out =====

class TestCrossMidnight:
    """자정을 넘기는 퇴근 (Clock-out after midnight)."""

    async def test_clock_out_after_midnight(self, db: AsyncSession, staff, schedule):
        record = Attendance(
            employee_id=staff.id,
            office_id=staff.office_id,
            work_date=date(2026, 10, 19),
            clock_in=time(23, 50),
            status=AttendanceStatus.LATE,
        )
        db.add(record)
        await db.commit()

        result = await attendance_service.apply_clock_out(
            db, staff, record, schedule, OFFICE_LAT, OFFICE_LNG, None, datetime(2026, 10, 20, 0, 20),
        )
        assert result.work_minutes == 30
        assert record.clock_out == time(0, 20)
        assert record.work_duration == 30
        assert record.overtime_duration == 0

    async def test_office_clock_after_midnight_starts_the_new_day(
        self, client: AsyncClient, db: AsyncSession, staff, staff_token, clock,
    ):
        """00:20 사무실 출퇴근: 오늘 기록만 조회하므로 새 날짜로 출근, 전날 기록은 열린 채 유지."""
        clock.set(datetime(2026, 10, 19, 23, 50))
        await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))

        clock.set(datetime(2026, 10, 20, 0, 20))
        res = await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 200
        assert res.json()["action"] == "clock_in"
        assert res.json()["attendance"]["work_date"] == "2026-10-20"
        assert await count_records(db) == 2

        monday = await attendance_repository.get_employee_day(db, staff.id, date(2026, 10, 19))
        assert monday.clock_in == time(23, 50)
        assert monday.clock_out is None
        assert monday.work_duration is None


# ===== Status projection =====

class TestStatus:
    """출퇴근 가능 여부 조회 (쓰기 없음)."""

    async def test_status_before_clock_in_is_read_only(self, client: AsyncClient, db: AsyncSession, staff_token):
        first = await client.get(STATUS, headers=auth_header(staff_token))
        second = await client.get(STATUS, headers=auth_header(staff_token))
        assert first.status_code == 200
        assert first.json() == second.json()

        data = first.json()
        assert data["can_clock_in"] is True
        assert data["can_clock_out"] is False
        assert data["today_record"] is None
        assert data["office_name"] == "Head Office"
        assert data["overtime_info"]["can_request_overtime"] is True
        assert await count_records(db) == 0

    async def test_status_after_clock_in(self, client: AsyncClient, staff_token):
        await client.post(CLOCK, json=at_office(), headers=auth_header(staff_token))
        data = (await client.get(STATUS, headers=auth_header(staff_token))).json()
        assert data["can_clock_in"] is False
        assert data["can_clock_out"] is True
        assert data["today_record"]["clock_in"] == "07:55:00"

    async def test_status_reports_reason(self, client: AsyncClient, staff_token, clock):
        clock.set(datetime(2026, 10, 25, 9, 0))  # 일요일 (Sunday)
        data = (await client.get(STATUS, headers=auth_header(staff_token))).json()
        assert data["can_clock_in"] is False
        assert data["reason"] == "non_working_day"
        assert data["overtime_info"]["can_request_overtime"] is False

    async def test_no_overtime_request_on_holiday(
        self, client: AsyncClient, db: AsyncSession, company, staff_token,
    ):
        db.add(Holiday(company_id=company.id, name="National Day", holiday_date=date(2026, 10, 19)))
        await db.commit()
        data = (await client.get(STATUS, headers=auth_header(staff_token))).json()
        assert data["reason"] == "holiday"
        assert data["overtime_info"]["can_request_overtime"] is False

    async def test_status_shows_pending_overtime(self, client: AsyncClient, staff_token):
        await client.post(f"{APP}/my/overtime", json={
            "work_date": "2026-10-19",
            "start_time": "17:00",
            "end_time": "18:00",
            "reason": "Inventory count",
        }, headers=auth_header(staff_token))
        info = (await client.get(STATUS, headers=auth_header(staff_token))).json()["overtime_info"]
        assert info["has_pending_overtime"] is True
        assert info["pending_overtime"]["duration"] == 60
        assert info["can_request_overtime"] is False

    async def test_today(self, client: AsyncClient, staff_token):
        res = await client.get(f"{APP}/my/attendance/today", headers=auth_header(staff_token))
        assert res.status_code == 200
        assert res.json() is None


# ===== History and summary =====

class TestHistory:
    """근태 이력 및 요약 테스트."""

    @pytest_asyncio.fixture
    async def october(self, db: AsyncSession, staff) -> list[Attendance]:
        """10월 근태 4건과 9월 1건 (Four October records, one in September)."""
        rows = [
            Attendance(employee_id=staff.id, work_date=date(2026, 10, 1), clock_in=time(8, 0), clock_out=time(17, 0),
                       work_duration=540, overtime_duration=0, status=AttendanceStatus.PRESENT),
            Attendance(employee_id=staff.id, work_date=date(2026, 10, 2), clock_in=time(7, 50), clock_out=time(19, 0),
                       work_duration=670, overtime_duration=120, status=AttendanceStatus.PRESENT),
            Attendance(employee_id=staff.id, work_date=date(2026, 10, 5), clock_in=time(8, 20), clock_out=time(17, 0),
                       work_duration=520, overtime_duration=0, status=AttendanceStatus.LATE),
            Attendance(employee_id=staff.id, work_date=date(2026, 10, 6), status=AttendanceStatus.ABSENT),
            Attendance(employee_id=staff.id, work_date=date(2026, 9, 30), clock_in=time(8, 0), clock_out=time(17, 0),
                       work_duration=540, overtime_duration=0, status=AttendanceStatus.PRESENT),
        ]
        db.add_all(rows)
        await db.commit()
        return rows

    async def test_history_for_month(self, client: AsyncClient, staff_token, october):
        res = await client.get(
            f"{APP}/my/attendance/history", params={"month": 10, "year": 2026}, headers=auth_header(staff_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 4
        assert [item["work_date"] for item in data["items"]] == [
            "2026-10-06", "2026-10-05", "2026-10-02", "2026-10-01",
        ]

    async def test_history_status_filter(self, client: AsyncClient, staff_token, october):
        res = await client.get(
            f"{APP}/my/attendance/history", params={"status": "late"}, headers=auth_header(staff_token),
        )
        assert res.json()["total"] == 1

    async def test_history_rejects_inverted_range(self, client: AsyncClient, staff_token):
        res = await client.get(f"{APP}/my/attendance/history", params={
            "start_date": "2026-10-10", "end_date": "2026-10-01",
        }, headers=auth_header(staff_token))
        assert res.status_code == 400

    async def test_summary(self, client: AsyncClient, staff_token, october):
        res = await client.get(
            f"{APP}/my/attendance/history/summary", params={"month": 10, "year": 2026},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["total_days"] == 4
        assert data["present_days"] == 2
        assert data["late_days"] == 1
        assert data["absent_days"] == 1
        assert data["attendance_rate"] == 75.0
        assert data["total_work_minutes"] == 1730
        assert data["total_overtime_minutes"] == 120
        assert data["total_overtime_hours"] == 2.0

    async def test_record_detail_is_owner_only(
        self, client: AsyncClient, staff_token, outsider_token, october,
    ):
        record_id = str(october[0].id)
        res = await client.get(f"{APP}/my/attendance/history/{record_id}", headers=auth_header(staff_token))
        assert res.status_code == 200
        assert res.json()["work_duration_formatted"] == "09:00"

        res = await client.get(f"{APP}/my/attendance/history/{record_id}", headers=auth_header(outsider_token))
        assert res.status_code == 404
        assert res.json()["detail"]["reason"] == "attendance_not_found"


# ===== Office location preview =====

class TestOfficeLocation:
    """사무실 거리 확인 테스트."""

    async def test_at_office(self, client: AsyncClient, staff_token):
        res = await client.post(f"{APP}/my/office/location", json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 200
        data = res.json()
        assert data["distance"] == 0
        assert data["allowed_radius"] == 100
        assert data["can_attendance"] is True

    async def test_far_from_office(self, client: AsyncClient, db: AsyncSession, staff_token):
        res = await client.post(f"{APP}/my/office/location", json={
            "latitude": FAR_LAT,
            "longitude": OFFICE_LNG,
        }, headers=auth_header(staff_token))
        data = res.json()
        assert data["can_attendance"] is False
        assert 140 < data["distance"] < 160
        assert await count_records(db) == 0
