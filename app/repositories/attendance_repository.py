"""근태 관리 레포지토리 (근태 기록 관련 DB 쿼리 담당).

Attendance Repository. Handles attendance record queries: today's record,
history filtering and the per-period summary aggregation.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import Attendance, AttendanceStatus
from app.repositories.base import BaseRepository


class AttendanceRepository(BaseRepository[Attendance]):
    """근태 기록 레포지토리.

    Attendance record repository with employee-specific queries.

    Extends:
        BaseRepository[Attendance]
    """

    def __init__(self) -> None:
        super().__init__(Attendance)

    async def get_employee_day(
        self,
        db: AsyncSession,
        employee_id: UUID,
        work_date: date,
    ) -> Attendance | None:
        """특정 직원의 해당 날짜 근태 기록을 조회합니다.

        Retrieve the attendance record of an employee for a date.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            employee_id: 직원 UUID (Employee UUID)
            work_date: 근무 날짜 (Work date)

        Returns:
            Attendance | None: 근태 기록 또는 None (Attendance record or None)
        """
        query: Select = select(Attendance).where(
            Attendance.employee_id == employee_id,
            Attendance.work_date == work_date,
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    def _history_query(
        self,
        employee_id: UUID,
        date_from: date | None,
        date_to: date | None,
        status: AttendanceStatus | None = None,
    ) -> Select:
        query: Select = select(Attendance).where(Attendance.employee_id == employee_id)
        if date_from is not None:
            query = query.where(Attendance.work_date >= date_from)
        if date_to is not None:
            query = query.where(Attendance.work_date <= date_to)
        if status is not None:
            query = query.where(Attendance.status == status)
        return query

    async def get_history(
        self,
        db: AsyncSession,
        employee_id: UUID,
        date_from: date | None = None,
        date_to: date | None = None,
        status: AttendanceStatus | None = None,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[Sequence[Attendance], int]:
        """직원 근태 이력을 페이지네이션하여 조회합니다 (최신 날짜 순).

        Paginated attendance history of one employee, newest first.
        """
        query: Select = self._history_query(employee_id, date_from, date_to, status)
        query = query.order_by(Attendance.work_date.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_summary_rows(
        self,
        db: AsyncSession,
        employee_id: UUID,
        date_from: date | None,
        date_to: date | None,
    ) -> tuple[dict[str, int], int, int]:
        """기간 내 상태별 일수와 근무/초과근무 합계를 집계합니다.

        Aggregate day counts per status and the summed work and overtime
        minutes for a period.

        Returns:
            tuple: (상태별 일수, 총 근무 분, 총 초과근무 분)
                   (counts per status value, total work minutes, total overtime minutes)
        """
        base = self._history_query(employee_id, date_from, date_to).subquery()

        count_query = select(base.c.status, func.count()).group_by(base.c.status)
        counts: dict[str, int] = {}
        for status_value, count in (await db.execute(count_query)).all():
            key = status_value.value if isinstance(status_value, AttendanceStatus) else str(status_value)
            counts[key] = count

        totals_query = select(
            func.coalesce(func.sum(base.c.work_duration), 0),
            func.coalesce(func.sum(base.c.overtime_duration), 0),
        )
        total_work, total_overtime = (await db.execute(totals_query)).one()
        return counts, int(total_work), int(total_overtime)


# 싱글턴 인스턴스 (Singleton instance)
attendance_repository: AttendanceRepository = AttendanceRepository()
