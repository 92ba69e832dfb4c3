"""근태 관리 서비스 (출퇴근 상태 머신, 상태 조회, 이력).

Attendance Service. Business logic for the daily attendance state machine:

    (no record) --clock in--> clocked in --clock out--> clocked out

Clock-in and clock-out share one entry point (``clock_in_out``) that picks
the transition from today's record. Both run the same ordered
preconditions; ``get_status`` evaluates them without writing anything.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import AttendancePolicy, policy as default_policy
from app.models.attendance import Attendance, AttendanceStatus
from app.models.organization import OfficeLocation, WorkSchedule
from app.models.user import Employee
from app.repositories.attendance_repository import attendance_repository
from app.repositories.organization_repository import office_repository, work_schedule_repository
from app.services import duration_calculator, geofence, work_calendar
from app.services.activity_log_service import PostCommitHooks, activity_log_service
from app.services.duration_calculator import DurationResult, format_minutes
from app.services.overtime_service import overtime_service
from app.utils.exceptions import (
    BadRequestError,
    DuplicateError,
    ErrorReason,
    ForbiddenError,
    NotFoundError,
    PreconditionError,
)


CLOCK_IN: str = "clock_in"
CLOCK_OUT: str = "clock_out"


def _wall_time(now: datetime) -> time:
    return now.time().replace(microsecond=0)


def late_threshold(schedule: WorkSchedule) -> time:
    """지각 기준 시각 (유연 근무면 허용 시간 가산).

    Time of day after which a clock-in is late. Flexible schedules add
    ``flexible_minutes`` of tolerance to the start time.
    """
    if not schedule.is_flexible or not schedule.flexible_minutes:
        return schedule.start_time
    shifted = datetime.combine(date(2000, 1, 1), schedule.start_time) + timedelta(minutes=schedule.flexible_minutes)
    if shifted.date() != date(2000, 1, 1):
        return time.max
    return shifted.time()


def resolve_period(
    month: int | None = None,
    year: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[date | None, date | None]:
    """조회 기간을 계산합니다.

    Explicit start/end dates win; otherwise month+year selects that month
    and a bare year selects the whole year.

    Raises:
        BadRequestError: 시작일이 종료일보다 늦음 (start after end), 월만 지정
    """
    if start_date is not None or end_date is not None:
        if start_date is not None and end_date is not None and start_date > end_date:
            raise BadRequestError("start_date must not be after end_date")
        return start_date, end_date
    if month is not None:
        if year is None:
            raise BadRequestError("month filter requires year")
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last_day)
    if year is not None:
        return date(year, 1, 1), date(year, 12, 31)
    return None, None


class AttendanceService:
    """근태 관리 서비스.

    Attendance service: clock-in/out transitions, non-mutating status
    projection, history, summary and the office distance preview.
    """

    # === 선행 조건 (Preconditions) ===

    async def load_schedule(self, db: AsyncSession, employee: Employee) -> WorkSchedule | None:
        if employee.work_schedule_id is None:
            return None
        return await work_schedule_repository.get_by_id(db, employee.work_schedule_id)

    async def load_office(self, db: AsyncSession, employee: Employee) -> OfficeLocation | None:
        if employee.office_id is None:
            return None
        return await office_repository.get_by_id(db, employee.office_id)

    async def check_day(
        self,
        db: AsyncSession,
        employee: Employee,
        today: date,
    ) -> tuple[WorkSchedule, OfficeLocation]:
        """출퇴근 가능 여부의 선행 조건을 순서대로 확인합니다 (지오펜스 제외).

        Run the ordered day-level preconditions, each a distinct outcome:
        active employee, not a holiday, active schedule, work day, active
        office. The geofence check is left to the caller.

        Returns:
            tuple: (근무 스케줄, 사무실) (Schedule and office)

        Raises:
            ForbiddenError: 비활성 직원 (employee_inactive)
            PreconditionError: holiday / schedule_unavailable / non_working_day / office_unavailable
        """
        if not employee.is_active:
            raise ForbiddenError("Employee account is inactive", ErrorReason.EMPLOYEE_INACTIVE)

        if await work_calendar.is_holiday(db, today, employee.company_id):
            raise PreconditionError(ErrorReason.HOLIDAY, "Today is a holiday")

        schedule = await self.load_schedule(db, employee)
        if schedule is None or not schedule.is_active:
            raise PreconditionError(ErrorReason.SCHEDULE_UNAVAILABLE, "No active work schedule is assigned")

        if not work_calendar.is_work_day(schedule, work_calendar.iso_weekday(today)):
            raise PreconditionError(ErrorReason.NON_WORKING_DAY, "Today is not a working day")

        office = await self.load_office(db, employee)
        if office is None or not office.is_active:
            raise PreconditionError(ErrorReason.OFFICE_UNAVAILABLE, "No active office is assigned")

        return schedule, office

    # === 출퇴근 (Clock in / out) ===

    async def clock_in_out(
        self,
        db: AsyncSession,
        employee: Employee,
        latitude: float,
        longitude: float,
        address: str | None,
        now: datetime,
        policy: AttendancePolicy = default_policy,
        hooks: PostCommitHooks | None = None,
    ) -> dict[str, Any]:
        """출근 또는 퇴근을 기록합니다 (오늘 기록 상태로 자동 결정).

        Record a clock-in or a clock-out, chosen by today's record:
        no record (or one without clock-in) clocks in, an open record
        clocks out, a closed record is rejected.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            employee: 현재 직원 (Current employee)
            latitude: 위도 (Latitude)
            longitude: 경도 (Longitude)
            address: 주소, 선택 (Optional address)
            now: 현재 시각 (Current local time)
            policy: 근태 정책 (Attendance policy)
            hooks: 커밋 후 훅 목록 (Post-commit hooks)

        Returns:
            dict: {"action", "record", "is_late"} 또는 {"action", "record", "work_minutes", "overtime_minutes"}

        Raises:
            PreconditionError: outside_radius / already_clocked_out 외 선행 조건
            DuplicateError: 동시 출근 경합 (Concurrent clock-in lost the race)
        """
        today: date = now.date()
        schedule, office = await self.check_day(db, employee, today)

        if not geofence.is_within_radius(office, latitude, longitude):
            distance = geofence.distance_to_office(office, latitude, longitude)
            raise PreconditionError(
                ErrorReason.OUTSIDE_RADIUS,
                f"You are {distance:.0f} m from the office; clock-in is allowed within {office.radius} m",
            )

        record: Attendance | None = await attendance_repository.get_employee_day(db, employee.id, today)
        if record is None or record.clock_in is None:
            return await self.clock_in(
                db, employee, schedule, office, latitude, longitude, address, now, hooks, record=record,
            )
        if record.is_clocked_in:
            return await self.clock_out(db, employee, record, schedule, latitude, longitude, address, now, policy, hooks)
        raise PreconditionError(ErrorReason.ALREADY_CLOCKED_OUT, "You have already clocked out today")

    async def clock_in(
        self,
        db: AsyncSession,
        employee: Employee,
        schedule: WorkSchedule,
        office: OfficeLocation,
        latitude: float,
        longitude: float,
        address: str | None,
        now: datetime,
        hooks: PostCommitHooks | None = None,
        record: Attendance | None = None,
    ) -> dict[str, Any]:
        """출근 기록을 생성합니다. 지각 여부는 시각(time-of-day)만 비교.

        Create today's record, or fill in ``record`` when it exists
        without a clock-in. Lateness compares time of day only.
        """
        clock_in_at: time = _wall_time(now)
        is_late: bool = clock_in_at > late_threshold(schedule)
        fields: dict[str, Any] = {
            "office_id": office.id,
            "clock_in": clock_in_at,
            "clock_in_lat": latitude,
            "clock_in_lng": longitude,
            "clock_in_address": address,
            "status": AttendanceStatus.LATE if is_late else AttendanceStatus.PRESENT,
        }

        if record is not None:
            for field, value in fields.items():
                setattr(record, field, value)
            record = await attendance_repository.save(db, record)
        else:
            try:
                record = await attendance_repository.create(
                    db, {"employee_id": employee.id, "work_date": now.date(), **fields},
                )
            except IntegrityError as exc:
                await db.rollback()
                raise DuplicateError("Attendance for today was recorded by another request") from exc

        if hooks is not None:
            hooks.add(activity_log_service.log_hook(
                employee,
                CLOCK_IN,
                "Clocked in (late)" if is_late else "Clocked in",
                now,
                description=f"Clocked in at {office.name}",
                latitude=latitude,
                longitude=longitude,
                location_address=address,
                details={"attendance_id": str(record.id), "is_late": is_late},
            ))
        return {"action": CLOCK_IN, "record": record, "is_late": is_late}

    async def apply_clock_out(
        self,
        db: AsyncSession,
        employee: Employee,
        record: Attendance,
        schedule: WorkSchedule | None,
        latitude: float | None,
        longitude: float | None,
        address: str | None,
        now: datetime,
        policy: AttendancePolicy = default_policy,
    ) -> DurationResult:
        """퇴근 시각을 기록하고 근무/초과근무 시간을 계산해 저장합니다.

        Set clock-out and persist the computed durations. Shared by office
        clock-out and visit end. The calculator never raises; a failed
        computation is stored as zeros so the record always ends in a
        defined state.

        Raises:
            PreconditionError: 이미 퇴근함 (already_clocked_out)
        """
        if record.is_clocked_out:
            raise PreconditionError(ErrorReason.ALREADY_CLOCKED_OUT, "You have already clocked out today")

        record.clock_out = _wall_time(now)
        record.clock_out_lat = latitude
        record.clock_out_lng = longitude
        record.clock_out_address = address

        grant = await overtime_service.find_approved(db, employee.id, record.work_date)
        result: DurationResult = duration_calculator.compute(
            record.work_date,
            record.clock_in,
            record.clock_out,
            schedule,
            grant,
            grace_minutes=policy.grace_minutes,
        )
        record.work_duration = result.work_minutes
        record.overtime_duration = result.overtime_minutes
        record.uncredited_overtime_duration = result.uncredited_overtime_minutes
        await attendance_repository.save(db, record)
        return result

    async def clock_out(
        self,
        db: AsyncSession,
        employee: Employee,
        record: Attendance,
        schedule: WorkSchedule,
        latitude: float,
        longitude: float,
        address: str | None,
        now: datetime,
        policy: AttendancePolicy = default_policy,
        hooks: PostCommitHooks | None = None,
    ) -> dict[str, Any]:
        """퇴근을 기록합니다 (Clock out of an open record)."""
        result = await self.apply_clock_out(db, employee, record, schedule, latitude, longitude, address, now, policy)

        if hooks is not None:
            hooks.add(activity_log_service.log_hook(
                employee,
                CLOCK_OUT,
                "Clocked out",
                now,
                description=f"Worked {format_minutes(result.work_minutes)}, overtime {format_minutes(result.overtime_minutes)}",
                latitude=latitude,
                longitude=longitude,
                location_address=address,
                details={
                    "attendance_id": str(record.id),
                    "work_minutes": result.work_minutes,
                    "overtime_minutes": result.overtime_minutes,
                },
            ))
        return {
            "action": CLOCK_OUT,
            "record": record,
            "work_minutes": result.work_minutes,
            "overtime_minutes": result.overtime_minutes,
        }

    async def clock_in_for_visit(
        self,
        db: AsyncSession,
        employee: Employee,
        latitude: float | None,
        longitude: float | None,
        address: str | None,
        now: datetime,
    ) -> Attendance:
        """외근 시작에 따른 출근 처리 (지오펜스, 휴일, 지각 검사 없음).

        Visit-triggered clock-in. The employee is off-site, so geofence,
        holiday and lateness checks do not apply: a new record is always
        ``present``. An existing record without clock-in is filled in.

        Raises:
            PreconditionError: 이미 출근함 (already_clocked_in)
            DuplicateError: 동시 출근 경합 (Concurrent clock-in lost the race)
        """
        today: date = now.date()
        record: Attendance | None = await attendance_repository.get_employee_day(db, employee.id, today)
        if record is not None and record.clock_in is not None:
            raise PreconditionError(ErrorReason.ALREADY_CLOCKED_IN, "You have already clocked in today")

        if record is not None:
            record.clock_in = _wall_time(now)
            record.clock_in_lat = latitude
            record.clock_in_lng = longitude
            record.clock_in_address = address
            return await attendance_repository.save(db, record)

        try:
            return await attendance_repository.create(
                db,
                {
                    "employee_id": employee.id,
                    "office_id": None,
                    "work_date": today,
                    "clock_in": _wall_time(now),
                    "clock_in_lat": latitude,
                    "clock_in_lng": longitude,
                    "clock_in_address": address,
                    "status": AttendanceStatus.PRESENT,
                },
            )
        except IntegrityError as exc:
            await db.rollback()
            raise DuplicateError("Attendance for today was recorded by another request") from exc

    # === 상태 조회 (Status projection) ===

    async def get_status(
        self,
        db: AsyncSession,
        employee: Employee,
        now: datetime,
    ) -> dict[str, Any]:
        """오늘의 출퇴근 가능 여부를 조회합니다 (쓰기 없음).

        Non-mutating projection of what the employee may do right now.
        Mirrors the clock-in/out preconditions except the geofence, which
        needs coordinates.

        Returns:
            dict: can_clock_in, can_clock_out, message, reason, today_record, overtime_info 등
        """
        today: date = now.date()
        record: Attendance | None = await attendance_repository.get_employee_day(db, employee.id, today)
        office = await self.load_office(db, employee)

        can_clock_in = False
        can_clock_out = False
        is_work_day = False
        reason: str | None = None
        try:
            await self.check_day(db, employee, today)
        except (ForbiddenError, PreconditionError) as exc:
            reason = exc.reason.value
            message = exc.detail["message"]
        else:
            is_work_day = True
            if record is None or record.clock_in is None:
                can_clock_in = True
                message = "You can clock in"
            elif record.is_clocked_in:
                can_clock_out = True
                message = "You can clock out"
            else:
                reason = ErrorReason.ALREADY_CLOCKED_OUT.value
                message = "You have already clocked out today"

        return {
            "can_clock_in": can_clock_in,
            "can_clock_out": can_clock_out,
            "message": message,
            "reason": reason,
            "employee_name": employee.name,
            "office_name": office.name if office is not None else None,
            "today_record": await self.build_response(db, record) if record is not None else None,
            "overtime_info": await self._overtime_info(db, employee, today, is_work_day),
        }

    async def _overtime_info(
        self, db: AsyncSession, employee: Employee, today: date, is_work_day: bool,
    ) -> dict[str, Any]:
        # 근무일이 아니거나 스케줄이 없으면 신청 불가 (Requests need a scheduled work day)
        approved = await overtime_service.find_approved(db, employee.id, today)
        pending = await overtime_service.find_pending(db, employee.id, today)
        return {
            "has_approved_overtime": approved is not None,
            "approved_overtime": await overtime_service.build_response(db, approved) if approved else None,
            "has_pending_overtime": pending is not None,
            "pending_overtime": await overtime_service.build_response(db, pending) if pending else None,
            "can_request_overtime": (
                is_work_day
                and employee.is_active
                and employee.approver_id is not None
                and approved is None
                and pending is None
            ),
        }

    # === 이력 및 요약 (History and summary) ===

    async def get_history(
        self,
        db: AsyncSession,
        employee_id: UUID,
        month: int | None = None,
        year: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        status: AttendanceStatus | None = None,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[Sequence[Attendance], int]:
        """근태 이력을 조회합니다 (Paginated history for a period)."""
        date_from, date_to = resolve_period(month, year, start_date, end_date)
        return await attendance_repository.get_history(
            db, employee_id, date_from=date_from, date_to=date_to, status=status, page=page, per_page=per_page,
        )

    async def get_summary(
        self,
        db: AsyncSession,
        employee_id: UUID,
        month: int | None = None,
        year: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> dict[str, Any]:
        """기간별 근태 요약 (상태별 일수, 출근율, 총 근무/초과근무 시간).

        Period summary: days per status, attendance rate
        ((present + late) / total * 100) and total work/overtime hours.
        """
        date_from, date_to = resolve_period(month, year, start_date, end_date)
        counts, total_work, total_overtime = await attendance_repository.get_summary_rows(
            db, employee_id, date_from, date_to,
        )
        total_days = sum(counts.values())
        present = counts.get(AttendanceStatus.PRESENT.value, 0)
        late = counts.get(AttendanceStatus.LATE.value, 0)
        return {
            "start_date": date_from,
            "end_date": date_to,
            "total_days": total_days,
            "present_days": present,
            "late_days": late,
            "absent_days": counts.get(AttendanceStatus.ABSENT.value, 0),
            "holiday_days": counts.get(AttendanceStatus.HOLIDAY.value, 0),
            "leave_days": counts.get(AttendanceStatus.LEAVE.value, 0),
            "attendance_rate": round((present + late) / total_days * 100, 2) if total_days else 0.0,
            "total_work_minutes": total_work,
            "total_overtime_minutes": total_overtime,
            "total_work_hours": round(total_work / 60, 2),
            "total_overtime_hours": round(total_overtime / 60, 2),
        }

    async def get_record(self, db: AsyncSession, record_id: UUID, employee_id: UUID) -> Attendance:
        """본인 근태 기록 단건 (Single own record)."""
        record = await attendance_repository.get_by_id(db, record_id, employee_id)
        if record is None:
            raise NotFoundError("Attendance record not found", ErrorReason.ATTENDANCE_NOT_FOUND)
        return record

    async def get_today(self, db: AsyncSession, employee_id: UUID, now: datetime) -> Attendance | None:
        return await attendance_repository.get_employee_day(db, employee_id, now.date())

    # === 사무실 위치 확인 (Office distance preview) ===

    async def check_office_location(
        self,
        db: AsyncSession,
        employee: Employee,
        latitude: float,
        longitude: float,
    ) -> dict[str, Any]:
        """현재 위치와 사무실 간 거리를 확인합니다 (쓰기 없음).

        Preview the distance to the assigned office and whether a clock-in
        from here would pass the geofence.

        Raises:
            PreconditionError: 사무실 미배정 또는 비활성 (office_unavailable)
        """
        office = await self.load_office(db, employee)
        if office is None or not office.is_active:
            raise PreconditionError(ErrorReason.OFFICE_UNAVAILABLE, "No active office is assigned")

        distance = geofence.distance_to_office(office, latitude, longitude)
        return {
            "office_id": str(office.id),
            "office_name": office.name,
            "office_address": office.address,
            "office_latitude": office.latitude,
            "office_longitude": office.longitude,
            "allowed_radius": office.radius,
            "distance": round(distance, 2),
            "can_attendance": distance <= office.radius,
        }

    # === 응답 구성 (Response building) ===

    async def build_response(
        self,
        db: AsyncSession,
        record: Attendance,
    ) -> dict:
        """근태 응답 딕셔너리를 구성합니다 (사무실 이름 포함).

        Build attendance response dict with the resolved office name and
        HH:MM formatted durations.
        """
        office_name: str | None = None
        if record.office_id is not None:
            office_result = await db.execute(select(OfficeLocation.name).where(OfficeLocation.id == record.office_id))
            office_name = office_result.scalar()

        return {
            "id": str(record.id),
            "employee_id": str(record.employee_id),
            "office_id": str(record.office_id) if record.office_id else None,
            "office_name": office_name,
            "work_date": record.work_date,
            "clock_in": record.clock_in,
            "clock_in_lat": record.clock_in_lat,
            "clock_in_lng": record.clock_in_lng,
            "clock_in_address": record.clock_in_address,
            "clock_out": record.clock_out,
            "clock_out_lat": record.clock_out_lat,
            "clock_out_lng": record.clock_out_lng,
            "clock_out_address": record.clock_out_address,
            "work_duration": record.work_duration,
            "overtime_duration": record.overtime_duration,
            "uncredited_overtime_duration": record.uncredited_overtime_duration,
            "work_duration_formatted": format_minutes(record.work_duration),
            "overtime_duration_formatted": format_minutes(record.overtime_duration),
            "status": record.status,
            "notes": record.notes,
        }


# 싱글턴 인스턴스 (Singleton instance)
attendance_service: AttendanceService = AttendanceService()
