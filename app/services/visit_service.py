"""외근 방문 서비스 (신청, 승인, 시작, 종료 및 조회).

Visit Service. Field visits are an alternate path into attendance:

    pending --approve--> approved --start--> in_progress --end--> completed
    pending --reject---> rejected

Starting a visit clocks the employee in without the office checks;
ending it clocks them out with the same duration rules as the office
clock-out.
"""

from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import AttendancePolicy, policy as default_policy
from app.models.attendance import Attendance
from app.models.user import Employee
from app.models.visit import Visit, VisitStatus, VisitType
from app.repositories.attendance_repository import attendance_repository
from app.repositories.user_repository import employee_repository
from app.repositories.visit_repository import visit_repository
from app.services import approval
from app.services.activity_log_service import PostCommitHooks, activity_log_service
from app.services.attendance_service import attendance_service
from app.services.duration_calculator import DurationResult
from app.utils.exceptions import (
    ErrorReason,
    ForbiddenError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)


def append_end_notes(notes: str | None, end_notes: str | None) -> str | None:
    """종료 메모를 기존 메모 뒤에 덧붙입니다 (Append end notes, never overwrite)."""
    if not end_notes:
        return notes
    if not notes:
        return f"End Notes: {end_notes}"
    return f"{notes}\n\nEnd Notes: {end_notes}"


class VisitService:
    """외근 방문 서비스.

    Visit service bridging the visit lifecycle into attendance records.
    """

    async def _get_or_404(self, db: AsyncSession, visit_id: UUID, employee_id: UUID | None = None) -> Visit:
        visit: Visit | None = await visit_repository.get_by_id(db, visit_id, employee_id)
        if visit is None:
            raise NotFoundError("Visit not found")
        return visit

    # === 신청 (Request) ===

    async def request_visit(
        self,
        db: AsyncSession,
        employee: Employee,
        visit_type: VisitType,
        purpose: str,
        location_name: str,
        planned_start: datetime,
        planned_end: datetime,
        now: datetime,
        location_address: str | None = None,
        client_name: str | None = None,
        notes: str | None = None,
        hooks: PostCommitHooks | None = None,
    ) -> Visit:
        """외근 방문을 신청합니다.

        Request a visit. The employee needs an approver; the planned window
        must start today or later and end after it starts.

        Raises:
            ForbiddenError: 비활성 직원 (employee_inactive)
            PreconditionError: 승인권자 미지정 (no_approver_assigned)
            ValidationError: 계획 일시 오류 (invalid_input)
        """
        if not employee.is_active:
            raise ForbiddenError("Employee account is inactive", ErrorReason.EMPLOYEE_INACTIVE)
        if employee.approver_id is None:
            raise PreconditionError(ErrorReason.NO_APPROVER_ASSIGNED, "No approver is assigned to you")

        if planned_start.date() < now.date():
            raise ValidationError(ErrorReason.INVALID_INPUT, "Planned start cannot be in the past")
        if planned_end <= planned_start:
            raise ValidationError(ErrorReason.INVALID_INPUT, "Planned end must be after planned start")

        visit: Visit = await visit_repository.create(
            db,
            {
                "employee_id": employee.id,
                "visit_type": visit_type,
                "purpose": purpose.strip(),
                "location_name": location_name.strip(),
                "location_address": location_address,
                "client_name": client_name,
                "planned_start": planned_start,
                "planned_end": planned_end,
                "status": VisitStatus.PENDING,
                "notes": notes,
            },
        )

        if hooks is not None:
            hooks.add(activity_log_service.log_hook(
                employee, "visit_request", "Visit requested", now,
                description=f"{visit.location_name} ({visit.visit_type.value})",
                details={"visit_id": str(visit.id)},
            ))
        return visit

    # === 결정 (Decision) ===

    async def decide_visit(
        self,
        db: AsyncSession,
        visit_id: UUID,
        approver: Employee,
        approve: bool,
        now: datetime,
        reason: str | None = None,
        hooks: PostCommitHooks | None = None,
    ) -> Visit:
        """외근 방문을 승인 또는 반려합니다.

        Approve or reject a pending visit. Only the visiting employee's
        assigned approver may decide; a rejection needs a reason.

        Raises:
            ValidationError: 반려 사유 누락 (rejection_reason_required)
            NotFoundError: 방문 없음 (Visit not found)
            ForbiddenError: 지정된 승인권자 아님 (not_assigned_approver)
            PreconditionError: 이미 처리됨 (already_processed)
        """
        cleaned: str | None = None if approve else approval.require_reason(reason)
        visit = await self._get_or_404(db, visit_id)

        visitor: Employee | None = await employee_repository.get_by_id(db, visit.employee_id)
        if visitor is None or not approver.can_approve(visitor):
            raise ForbiddenError("You are not the approver of this visit", ErrorReason.NOT_ASSIGNED_APPROVER)
        approval.ensure_pending(visit, "Visit")

        if approve:
            approval.approve(visit, VisitStatus.APPROVED, approver.id, now)
        else:
            approval.reject(visit, VisitStatus.REJECTED, approver.id, now, cleaned)
        visit = await visit_repository.save(db, visit)

        if hooks is not None:
            hooks.add(activity_log_service.log_hook(
                approver,
                "visit_approved" if approve else "visit_rejected",
                "Visit approved" if approve else "Visit rejected",
                now,
                description=cleaned,
                details={"visit_id": str(visit.id), "employee_id": str(visit.employee_id)},
            ))
        return visit

    # === 시작 / 종료 (Start / end) ===

    async def start_visit(
        self,
        db: AsyncSession,
        visit_id: UUID,
        employee: Employee,
        latitude: float | None,
        longitude: float | None,
        address: str | None,
        now: datetime,
        hooks: PostCommitHooks | None = None,
    ) -> tuple[Visit, Attendance]:
        """승인된 방문을 시작하고 출근 처리합니다.

        Start an approved visit. Clocks the employee in for today (no
        geofence, holiday or lateness checks) and links the record.

        Raises:
            NotFoundError: 본인 방문이 아님 (Not found among own visits)
            PreconditionError: visit_not_startable / already_clocked_in
        """
        visit = await self._get_or_404(db, visit_id, employee.id)
        if visit.status != VisitStatus.APPROVED or visit.actual_start is not None:
            raise PreconditionError(ErrorReason.VISIT_NOT_STARTABLE, "Only approved visits that have not started can be started")

        record: Attendance = await attendance_service.clock_in_for_visit(db, employee, latitude, longitude, address, now)

        visit.status = VisitStatus.IN_PROGRESS
        visit.actual_start = now
        visit.start_lat = latitude
        visit.start_lng = longitude
        visit.start_address = address
        visit.attendance_id = record.id
        visit = await visit_repository.save(db, visit)

        if hooks is not None:
            hooks.add(activity_log_service.log_hook(
                employee, "visit_start", "Visit started", now,
                description=f"Started visit at {visit.location_name}",
                latitude=latitude,
                longitude=longitude,
                location_address=address,
                details={"visit_id": str(visit.id), "attendance_id": str(record.id)},
            ))
        return visit, record

    async def end_visit(
        self,
        db: AsyncSession,
        visit_id: UUID,
        employee: Employee,
        latitude: float | None,
        longitude: float | None,
        address: str | None,
        now: datetime,
        notes: str | None = None,
        policy: AttendancePolicy = default_policy,
        hooks: PostCommitHooks | None = None,
    ) -> tuple[Visit, Attendance, DurationResult]:
        """진행 중인 방문을 종료하고 퇴근 처리합니다.

        End an in-progress visit. Clocks the linked record out through the
        same duration rules as an office clock-out. A record already
        closed at the office is left as stored and only the visit ends.

        Raises:
            NotFoundError: 방문 없음 / 연결된 근태 기록 없음 (attendance_not_found)
            PreconditionError: visit_not_endable
        """
        visit = await self._get_or_404(db, visit_id, employee.id)
        if visit.status != VisitStatus.IN_PROGRESS or visit.actual_start is None or visit.actual_end is not None:
            raise PreconditionError(ErrorReason.VISIT_NOT_ENDABLE, "Only visits in progress can be ended")

        record: Attendance | None = None
        if visit.attendance_id is not None:
            record = await attendance_repository.get_by_id(db, visit.attendance_id)
        if record is None:
            raise NotFoundError("Attendance record for this visit not found", ErrorReason.ATTENDANCE_NOT_FOUND)

        result: DurationResult
        if record.is_clocked_out:
            # 사무실에서 이미 퇴근: 기록은 그대로 두고 방문만 종료 (Keep the closed record as stored)
            result = DurationResult(
                work_minutes=record.work_duration or 0,
                overtime_minutes=record.overtime_duration or 0,
                uncredited_overtime_minutes=record.uncredited_overtime_duration or 0,
            )
        else:
            schedule = await attendance_service.load_schedule(db, employee)
            result = await attendance_service.apply_clock_out(
                db, employee, record, schedule, latitude, longitude, address, now, policy,
            )

        visit.status = VisitStatus.COMPLETED
        visit.actual_end = now
        visit.end_lat = latitude
        visit.end_lng = longitude
        visit.end_address = address
        visit.notes = append_end_notes(visit.notes, notes)
        visit = await visit_repository.save(db, visit)

        if hooks is not None:
            hooks.add(activity_log_service.log_hook(
                employee, "visit_end", "Visit completed", now,
                description=f"Ended visit at {visit.location_name}",
                latitude=latitude,
                longitude=longitude,
                location_address=address,
                details={
                    "visit_id": str(visit.id),
                    "attendance_id": str(record.id),
                    "work_minutes": result.work_minutes,
                    "overtime_minutes": result.overtime_minutes,
                },
            ))
        return visit, record, result

    # === 목록 및 상세 (Listing and detail) ===

    async def list_mine(
        self,
        db: AsyncSession,
        employee_id: UUID,
        status: VisitStatus | None = None,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[Sequence[Visit], int]:
        return await visit_repository.get_employee_visits(db, employee_id, status=status, page=page, per_page=per_page)

    async def list_for_approver(
        self,
        db: AsyncSession,
        approver_id: UUID,
        status: VisitStatus | None = VisitStatus.PENDING,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[Sequence[Visit], int]:
        return await visit_repository.get_for_approver(db, approver_id, status=status, page=page, per_page=per_page)

    async def statistics(self, db: AsyncSession, approver_id: UUID) -> dict[str, int]:
        """승인 대상 방문의 상태별 건수 (Status counts across the approver's team)."""
        counts = await visit_repository.count_by_status(db, approver_id)
        counts["total"] = sum(counts.values())
        return counts

    async def get_detail(self, db: AsyncSession, visit_id: UUID, viewer: Employee) -> Visit:
        """방문 상세 (방문자 본인 또는 승인권자만 조회)."""
        visit = await self._get_or_404(db, visit_id)
        if visit.employee_id == viewer.id:
            return visit
        visitor: Employee | None = await employee_repository.get_by_id(db, visit.employee_id)
        if visitor is None or not viewer.can_approve(visitor):
            raise ForbiddenError("You cannot view this visit")
        return visit

    async def build_response(self, db: AsyncSession, visit: Visit) -> dict[str, Any]:
        """방문 응답 딕셔너리를 구성합니다 (직원/결정자 이름 포함)."""
        return {
            "id": str(visit.id),
            "employee_id": str(visit.employee_id),
            "employee_name": await employee_repository.get_name(db, visit.employee_id),
            "attendance_id": str(visit.attendance_id) if visit.attendance_id else None,
            "visit_type": visit.visit_type,
            "purpose": visit.purpose,
            "location_name": visit.location_name,
            "location_address": visit.location_address,
            "client_name": visit.client_name,
            "planned_start": visit.planned_start,
            "planned_end": visit.planned_end,
            "actual_start": visit.actual_start,
            "actual_end": visit.actual_end,
            "start_lat": visit.start_lat,
            "start_lng": visit.start_lng,
            "start_address": visit.start_address,
            "end_lat": visit.end_lat,
            "end_lng": visit.end_lng,
            "end_address": visit.end_address,
            "status": visit.status,
            "approved_by": str(visit.approved_by) if visit.approved_by else None,
            "approver_name": await employee_repository.get_name(db, visit.approved_by),
            "approved_at": visit.approved_at,
            "rejection_reason": visit.rejection_reason,
            "notes": visit.notes,
            "created_at": visit.created_at,
        }


# 싱글턴 인스턴스 (Singleton instance)
visit_service: VisitService = VisitService()
