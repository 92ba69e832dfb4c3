"""초과근무 서비스 (신청, 승인, 반려, 취소 및 조회).

Overtime Service. Business logic for overtime requests: submission with
its ordered validations, the approver's decision, employee cancellation,
and the grant lookups used by clock-out.
"""

from datetime import date, datetime, time, timedelta
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import AttendancePolicy, policy as default_policy
from app.models.organization import WorkSchedule
from app.models.overtime import OvertimeRequest, OvertimeStatus
from app.models.user import Employee
from app.repositories.organization_repository import work_schedule_repository
from app.repositories.overtime_repository import overtime_repository
from app.repositories.user_repository import employee_repository
from app.services import approval
from app.services.activity_log_service import PostCommitHooks, activity_log_service
from app.services.duration_calculator import format_minutes
from app.utils.exceptions import (
    DuplicateError,
    ErrorReason,
    ForbiddenError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)

CANCELLED_BY_EMPLOYEE: str = "cancelled by employee"

_OPEN_STATUSES: tuple[OvertimeStatus, ...] = (OvertimeStatus.PENDING, OvertimeStatus.APPROVED)


def overtime_minutes(start: time, end: time) -> int:
    """신청 시간(분)을 계산합니다. 종료가 시작 이하이면 다음날로 간주.

    Requested minutes between ``start`` and ``end``; an end at or before
    the start is on the next day.
    """
    day = date(2000, 1, 1)
    start_dt = datetime.combine(day, start)
    end_dt = datetime.combine(day, end)
    if end_dt <= start_dt:
        end_dt += timedelta(days=1)
    return int((end_dt - start_dt).total_seconds() // 60)


class OvertimeService:
    """초과근무 서비스.

    Overtime service handling the request/approval workflow.
    """

    # === 조회 (Grant lookups) ===

    async def find_approved(self, db: AsyncSession, employee_id: UUID, day: date) -> OvertimeRequest | None:
        """해당 날짜의 승인된 초과근무 (Approved grant for the date, if any)."""
        return await overtime_repository.get_for_day(db, employee_id, day, (OvertimeStatus.APPROVED,))

    async def find_pending(self, db: AsyncSession, employee_id: UUID, day: date) -> OvertimeRequest | None:
        """해당 날짜의 미결 초과근무 신청 (Pending request for the date, if any)."""
        return await overtime_repository.get_for_day(db, employee_id, day, (OvertimeStatus.PENDING,))

    async def has_open_request(self, db: AsyncSession, employee_id: UUID, day: date) -> bool:
        """해당 날짜에 미결 또는 승인된 신청이 있는지 (Pending or approved request exists)."""
        return await overtime_repository.get_for_day(db, employee_id, day, _OPEN_STATUSES) is not None

    # === 신청 (Submission) ===

    async def submit(
        self,
        db: AsyncSession,
        employee: Employee,
        work_date: date,
        start_time: time,
        end_time: time,
        reason: str,
        now: datetime,
        policy: AttendancePolicy = default_policy,
        hooks: PostCommitHooks | None = None,
    ) -> OvertimeRequest:
        """초과근무를 신청합니다.

        Submit an overtime request. Validations run in a fixed order and
        each failure carries its own reason code:

            1. 직원 활성 (employee_inactive)
            2. 날짜 범위: 오늘 ~ 오늘+N일 (overtime_date_in_past / overtime_too_far_ahead)
            3. 종료 <= 시작이면 다음날 종료
            4. 길이 범위 (overtime_too_short / overtime_too_long)
            5. 같은 날 미결/승인 신청 없음 (overtime_already_requested)
            6. 근무 종료 이후 시작, 새벽 기준 시각 이전 시작은 예외
               (overtime_overlaps_work_hours)
            7. 승인권자 지정 및 활성 (no_approver_assigned / approver_unavailable)

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            employee: 신청 직원 (Requesting employee)
            work_date: 초과근무 날짜 (Overtime date)
            start_time: 시작 시각 (Start time)
            end_time: 종료 시각 (End time, next day when <= start)
            reason: 신청 사유 (Reason)
            now: 현재 시각 (Current local time)
            policy: 근태 정책 (Attendance policy)
            hooks: 커밋 후 훅 목록 (Post-commit hooks)

        Returns:
            OvertimeRequest: 생성된 미결 신청 (Created pending request)
        """
        if not employee.is_active:
            raise ForbiddenError("Employee account is inactive", ErrorReason.EMPLOYEE_INACTIVE)

        today: date = now.date()
        if work_date < today:
            raise ValidationError(ErrorReason.OVERTIME_DATE_IN_PAST, "Overtime date cannot be in the past")
        if work_date > today + timedelta(days=policy.max_advance_days):
            raise ValidationError(
                ErrorReason.OVERTIME_TOO_FAR_AHEAD,
                f"Overtime can be requested at most {policy.max_advance_days} days ahead",
            )

        duration: int = overtime_minutes(start_time, end_time)
        if duration < policy.min_overtime_minutes:
            raise ValidationError(
                ErrorReason.OVERTIME_TOO_SHORT,
                f"Overtime must be at least {policy.min_overtime_minutes} minutes",
            )
        if duration > policy.max_overtime_minutes:
            raise ValidationError(
                ErrorReason.OVERTIME_TOO_LONG,
                f"Overtime cannot exceed {policy.max_overtime_minutes} minutes",
            )

        if await self.has_open_request(db, employee.id, work_date):
            raise PreconditionError(
                ErrorReason.OVERTIME_ALREADY_REQUESTED,
                "An overtime request already exists for this date",
            )

        schedule: WorkSchedule | None = None
        if employee.work_schedule_id is not None:
            schedule = await work_schedule_repository.get_by_id(db, employee.work_schedule_id)
        if schedule is not None:
            # 새벽 기준 시각 이전 시작은 전날 밤 연장으로 간주 (cross-day overtime is exempt)
            if start_time < schedule.end_time and not start_time < policy.cross_day_cutoff:
                raise PreconditionError(
                    ErrorReason.OVERTIME_OVERLAPS_WORK_HOURS,
                    f"Overtime must start at or after the end of work ({schedule.end_time.strftime('%H:%M')})",
                )

        if employee.approver_id is None:
            raise PreconditionError(ErrorReason.NO_APPROVER_ASSIGNED, "No approver is assigned to you")
        approver: Employee | None = await employee_repository.get_by_id(db, employee.approver_id)
        if approver is None or not approver.is_active:
            raise PreconditionError(ErrorReason.APPROVER_UNAVAILABLE, "Your approver is not available")

        try:
            grant: OvertimeRequest = await overtime_repository.create(
                db,
                {
                    "employee_id": employee.id,
                    "work_date": work_date,
                    "start_time": start_time,
                    "end_time": end_time,
                    "duration": duration,
                    "reason": reason.strip(),
                    "status": OvertimeStatus.PENDING,
                    "approved_by": approver.id,
                },
            )
        except IntegrityError as exc:
            await db.rollback()
            raise DuplicateError("An overtime request already exists for this date") from exc

        if hooks is not None:
            hooks.add(activity_log_service.log_hook(
                employee,
                "overtime_request",
                "Overtime requested",
                now,
                description=f"{work_date} {start_time.strftime('%H:%M')}-{end_time.strftime('%H:%M')} ({format_minutes(duration)})",
                details={"overtime_request_id": str(grant.id), "duration": duration},
            ))
        return grant

    # === 결정 (Decisions) ===

    async def _get_or_404(self, db: AsyncSession, grant_id: UUID, employee_id: UUID | None = None) -> OvertimeRequest:
        grant: OvertimeRequest | None = await overtime_repository.get_by_id(db, grant_id, employee_id)
        if grant is None:
            raise NotFoundError("Overtime request not found")
        return grant

    def _ensure_addressed(self, grant: OvertimeRequest, approver: Employee) -> None:
        if grant.approved_by != approver.id:
            raise ForbiddenError(
                "You are not the approver of this overtime request",
                ErrorReason.NOT_ASSIGNED_APPROVER,
            )

    async def approve(
        self,
        db: AsyncSession,
        grant_id: UUID,
        approver: Employee,
        now: datetime,
        hooks: PostCommitHooks | None = None,
    ) -> OvertimeRequest:
        """초과근무 신청을 승인합니다.

        Approve a pending request. Only the approver it was addressed to
        may decide.

        Raises:
            NotFoundError: 신청 없음 (Request not found)
            PreconditionError: 이미 처리됨 (already_processed)
            ForbiddenError: 지정된 승인권자 아님 (not_assigned_approver)
        """
        grant = await self._get_or_404(db, grant_id)
        approval.ensure_pending(grant, "Overtime request")
        self._ensure_addressed(grant, approver)

        approval.approve(grant, OvertimeStatus.APPROVED, approver.id, now)
        grant = await overtime_repository.save(db, grant)

        if hooks is not None:
            hooks.add(activity_log_service.log_hook(
                approver, "overtime_approved", "Overtime approved", now,
                details={"overtime_request_id": str(grant.id), "employee_id": str(grant.employee_id)},
            ))
        return grant

    async def reject(
        self,
        db: AsyncSession,
        grant_id: UUID,
        approver: Employee,
        reason: str | None,
        now: datetime,
        hooks: PostCommitHooks | None = None,
    ) -> OvertimeRequest:
        """초과근무 신청을 반려합니다 (사유 필수).

        Reject a pending request with a non-blank reason.
        """
        cleaned: str = approval.require_reason(reason)
        grant = await self._get_or_404(db, grant_id)
        approval.ensure_pending(grant, "Overtime request")
        self._ensure_addressed(grant, approver)

        approval.reject(grant, OvertimeStatus.REJECTED, approver.id, now, cleaned)
        grant = await overtime_repository.save(db, grant)

        if hooks is not None:
            hooks.add(activity_log_service.log_hook(
                approver, "overtime_rejected", "Overtime rejected", now,
                description=cleaned,
                details={"overtime_request_id": str(grant.id), "employee_id": str(grant.employee_id)},
            ))
        return grant

    async def cancel(
        self,
        db: AsyncSession,
        grant_id: UUID,
        employee: Employee,
        now: datetime,
        hooks: PostCommitHooks | None = None,
    ) -> OvertimeRequest:
        """본인의 미결 신청을 취소합니다.

        Cancel one's own pending request. Cancellation is recorded as a
        rejection with the reason "cancelled by employee".

        Raises:
            NotFoundError: 본인 신청이 아님 (Not found among own requests)
            PreconditionError: 미결 상태가 아님 (only_pending_cancellable)
        """
        grant = await self._get_or_404(db, grant_id, employee.id)
        if not grant.is_pending:
            raise PreconditionError(
                ErrorReason.ONLY_PENDING_CANCELLABLE,
                "Only pending overtime requests can be cancelled",
            )

        approval.reject(grant, OvertimeStatus.REJECTED, grant.approved_by, now, CANCELLED_BY_EMPLOYEE)
        grant = await overtime_repository.save(db, grant)

        if hooks is not None:
            hooks.add(activity_log_service.log_hook(
                employee, "overtime_cancelled", "Overtime request cancelled", now,
                details={"overtime_request_id": str(grant.id)},
            ))
        return grant

    # === 목록 및 상세 (Listing and detail) ===

    async def list_mine(
        self,
        db: AsyncSession,
        employee_id: UUID,
        status: OvertimeStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[Sequence[OvertimeRequest], int]:
        return await overtime_repository.get_employee_requests(
            db, employee_id, status=status, date_from=date_from, date_to=date_to, page=page, per_page=per_page,
        )

    async def list_for_approver(
        self,
        db: AsyncSession,
        approver_id: UUID,
        status: OvertimeStatus | None = OvertimeStatus.PENDING,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[Sequence[OvertimeRequest], int]:
        return await overtime_repository.get_addressed_to(db, approver_id, status=status, page=page, per_page=per_page)

    async def get_detail(self, db: AsyncSession, grant_id: UUID, viewer: Employee) -> OvertimeRequest:
        """신청 상세 (신청자 본인 또는 지정 승인권자만 조회).

        Detail of a request, visible to its owner and its addressed approver.
        """
        grant = await self._get_or_404(db, grant_id)
        if grant.employee_id != viewer.id and grant.approved_by != viewer.id:
            raise ForbiddenError("You cannot view this overtime request")
        return grant

    async def build_response(self, db: AsyncSession, grant: OvertimeRequest) -> dict:
        """신청 응답 딕셔너리를 구성합니다 (직원/승인권자 이름 포함).

        Build the overtime response dict with resolved employee and approver names.
        """
        return {
            "id": str(grant.id),
            "employee_id": str(grant.employee_id),
            "employee_name": await employee_repository.get_name(db, grant.employee_id),
            "work_date": grant.work_date,
            "start_time": grant.start_time,
            "end_time": grant.end_time,
            "duration": grant.duration,
            "duration_formatted": format_minutes(grant.duration),
            "reason": grant.reason,
            "status": grant.status,
            "approved_by": str(grant.approved_by) if grant.approved_by else None,
            "approver_name": await employee_repository.get_name(db, grant.approved_by),
            "approved_at": grant.approved_at,
            "rejection_reason": grant.rejection_reason,
            "created_at": grant.created_at,
        }


# 싱글턴 인스턴스 (Singleton instance)
overtime_service: OvertimeService = OvertimeService()
