"""근무 환경 레포지토리 (사무실, 근무 스케줄, 휴일 조회).

Workplace repositories. Read-only lookups of offices, work schedules and
company holidays used by the attendance engine.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.organization import Holiday, OfficeLocation, WorkSchedule
from app.repositories.base import BaseRepository


class OfficeRepository(BaseRepository[OfficeLocation]):
    """사무실 레포지토리 (Office location repository)."""

    def __init__(self) -> None:
        super().__init__(OfficeLocation)


class WorkScheduleRepository(BaseRepository[WorkSchedule]):
    """근무 스케줄 레포지토리 (Work schedule repository)."""

    def __init__(self) -> None:
        super().__init__(WorkSchedule)


class HolidayRepository(BaseRepository[Holiday]):
    """휴일 레포지토리.

    Holiday repository.
    """

    def __init__(self) -> None:
        super().__init__(Holiday)

    async def is_active_holiday(
        self,
        db: AsyncSession,
        company_id: UUID,
        day: date,
    ) -> bool:
        """해당 날짜가 회사의 활성 휴일인지 확인합니다.

        Whether an active holiday row exists for exactly this company and date.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            company_id: 회사 UUID (Company UUID)
            day: 확인할 날짜 (Date to check)

        Returns:
            bool: 휴일 여부 (True when the date is a holiday)
        """
        query: Select = (
            select(func.count())
            .select_from(Holiday)
            .where(
                Holiday.company_id == company_id,
                Holiday.holiday_date == day,
                Holiday.is_active.is_(True),
            )
        )
        count: int = (await db.execute(query)).scalar() or 0
        return count > 0


# 싱글턴 인스턴스 (Singleton instances)
office_repository: OfficeRepository = OfficeRepository()
work_schedule_repository: WorkScheduleRepository = WorkScheduleRepository()
holiday_repository: HolidayRepository = HolidayRepository()
