"""외근 방문 레포지토리 (Visit DB 쿼리 담당).

Visit Repository. Own-visit listing, approver queue and status counts.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Employee
from app.models.visit import Visit, VisitStatus
from app.repositories.base import BaseRepository


class VisitRepository(BaseRepository[Visit]):
    """외근 방문 레포지토리.

    Visit repository.
    """

    def __init__(self) -> None:
        super().__init__(Visit)

    async def get_employee_visits(
        self,
        db: AsyncSession,
        employee_id: UUID,
        status: VisitStatus | None = None,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[Sequence[Visit], int]:
        """직원 본인의 방문 목록 (Own visits, newest planned start first)."""
        query: Select = select(Visit).where(Visit.employee_id == employee_id)
        if status is not None:
            query = query.where(Visit.status == status)
        query = query.order_by(Visit.planned_start.desc())
        return await self.get_paginated(db, query, page, per_page)

    def _subordinate_visits(self, approver_id: UUID) -> Select:
        # 승인권자의 하위 직원 방문 (Visits of employees whose approver is approver_id)
        return (
            select(Visit)
            .join(Employee, Employee.id == Visit.employee_id)
            .where(Employee.approver_id == approver_id)
        )

    async def get_for_approver(
        self,
        db: AsyncSession,
        approver_id: UUID,
        status: VisitStatus | None = VisitStatus.PENDING,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[Sequence[Visit], int]:
        """승인권자가 결정할 방문 목록.

        Visits of the approver's subordinates, oldest planned start first.
        """
        query: Select = self._subordinate_visits(approver_id)
        if status is not None:
            query = query.where(Visit.status == status)
        query = query.order_by(Visit.planned_start.asc())
        return await self.get_paginated(db, query, page, per_page)

    async def count_by_status(
        self,
        db: AsyncSession,
        approver_id: UUID,
    ) -> dict[str, int]:
        """하위 직원 방문의 상태별 건수 (Counts per status for the approver's team)."""
        base = self._subordinate_visits(approver_id).subquery()
        query = select(base.c.status, func.count()).group_by(base.c.status)
        counts: dict[str, int] = {member.value: 0 for member in VisitStatus}
        for status_value, count in (await db.execute(query)).all():
            key = status_value.value if isinstance(status_value, VisitStatus) else str(status_value)
            counts[key] = count
        return counts


# 싱글턴 인스턴스 (Singleton instance)
visit_repository: VisitRepository = VisitRepository()
