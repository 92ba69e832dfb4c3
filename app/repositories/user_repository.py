"""직원 레포지토리 (직원 조회 및 이름 해석).

Employee Repository. Lookups of employees, their subordinates and
display names used when building responses.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Employee
from app.repositories.base import BaseRepository


class EmployeeRepository(BaseRepository[Employee]):
    """직원 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the employees table.
    """

    def __init__(self) -> None:
        super().__init__(Employee)

    async def get_subordinate_ids(
        self,
        db: AsyncSession,
        approver_id: UUID,
    ) -> Sequence[UUID]:
        """해당 직원이 승인권자로 지정된 직원 ID 목록을 조회합니다.

        IDs of the employees whose approver is ``approver_id``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            approver_id: 승인권자 UUID (Approver UUID)

        Returns:
            Sequence[UUID]: 하위 직원 ID 목록 (Subordinate employee IDs)
        """
        query: Select = select(Employee.id).where(Employee.approver_id == approver_id)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_name(self, db: AsyncSession, employee_id: UUID | None) -> str | None:
        """직원 이름을 조회합니다 (Resolve an employee display name)."""
        if employee_id is None:
            return None
        result = await db.execute(select(Employee.name).where(Employee.id == employee_id))
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 (Singleton instance)
employee_repository: EmployeeRepository = EmployeeRepository()
