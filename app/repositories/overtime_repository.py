"""초과근무 신청 레포지토리 (OvertimeRequest DB 쿼리 담당).

Overtime Repository. Grant lookups used by the attendance engine and the
listing queries of the request/approval workflow.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.overtime import OvertimeRequest, OvertimeStatus
from app.repositories.base import BaseRepository


class OvertimeRepository(BaseRepository[OvertimeRequest]):
    """초과근무 신청 레포지토리.

    Overtime request repository.
    """

    def __init__(self) -> None:
        super().__init__(OvertimeRequest)

    async def get_for_day(
        self,
        db: AsyncSession,
        employee_id: UUID,
        work_date: date,
        statuses: Sequence[OvertimeStatus],
    ) -> OvertimeRequest | None:
        """직원+날짜의 주어진 상태 신청을 조회합니다.

        Most recent request of an employee for a date among ``statuses``.
        The partial unique index keeps at most one open request per day.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            employee_id: 직원 UUID (Employee UUID)
            work_date: 초과근무 날짜 (Overtime date)
            statuses: 허용 상태 목록 (Accepted statuses)

        Returns:
            OvertimeRequest | None: 신청 또는 None (Request or None)
        """
        query: Select = (
            select(OvertimeRequest)
            .where(
                OvertimeRequest.employee_id == employee_id,
                OvertimeRequest.work_date == work_date,
                OvertimeRequest.status.in_(list(statuses)),
            )
            .order_by(OvertimeRequest.created_at.desc())
            .limit(1)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_employee_requests(
        self,
        db: AsyncSession,
        employee_id: UUID,
        status: OvertimeStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[Sequence[OvertimeRequest], int]:
        """직원 본인의 신청 목록 (Own requests, newest date first)."""
        query: Select = select(OvertimeRequest).where(OvertimeRequest.employee_id == employee_id)
        if status is not None:
            query = query.where(OvertimeRequest.status == status)
        if date_from is not None:
            query = query.where(OvertimeRequest.work_date >= date_from)
        if date_to is not None:
            query = query.where(OvertimeRequest.work_date <= date_to)
        query = query.order_by(OvertimeRequest.work_date.desc(), OvertimeRequest.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_addressed_to(
        self,
        db: AsyncSession,
        approver_id: UUID,
        status: OvertimeStatus | None = OvertimeStatus.PENDING,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[Sequence[OvertimeRequest], int]:
        """승인권자에게 지정된 신청 목록 (Requests addressed to an approver)."""
        query: Select = select(OvertimeRequest).where(OvertimeRequest.approved_by == approver_id)
        if status is not None:
            query = query.where(OvertimeRequest.status == status)
        query = query.order_by(OvertimeRequest.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)


# 싱글턴 인스턴스 (Singleton instance)
overtime_repository: OvertimeRepository = OvertimeRepository()
