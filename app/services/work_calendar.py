"""근무 달력 (Work calendar).

Holiday lookup and work-day membership. Weekdays use the ISO numbering
1=Monday .. 7=Sunday; ``date.isoweekday`` already maps Sunday to 7, and
schedule data that stores Sunday as 0 is normalized the same way.
"""

import logging
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.organization import WorkSchedule
from app.repositories.organization_repository import holiday_repository

logger = logging.getLogger(__name__)


def iso_weekday(day: date) -> int:
    """ISO 요일 번호 (1=월 ~ 7=일) (ISO weekday, Sunday is 7)."""
    return day.isoweekday()


def _normalize_work_days(raw: Any) -> set[int] | None:
    """스케줄 근무 요일을 정규화합니다. 형식 오류면 None.

    Normalize stored work days into a set of ISO weekdays. Sunday stored
    as 0 becomes 7. Returns None when the value is malformed.
    """
    if not isinstance(raw, (list, tuple)):
        return None
    days: set[int] = set()
    for value in raw:
        if isinstance(value, bool):
            return None
        try:
            number = int(value)
        except (TypeError, ValueError):
            return None
        if number == 0:
            number = 7
        if not 1 <= number <= 7:
            return None
        days.add(number)
    return days


def is_work_day(schedule: WorkSchedule | None, weekday: int) -> bool:
    """해당 요일이 스케줄의 근무일인지 확인합니다.

    Whether ``weekday`` (1..7, Sunday also accepted as 0) is a work day of
    ``schedule``. A missing schedule or malformed/empty work_days yields
    False, never an error.
    """
    if schedule is None:
        return False
    if weekday == 0:
        weekday = 7
    days = _normalize_work_days(schedule.work_days)
    if days is None:
        logger.warning("Malformed work_days on schedule %s: %r", schedule.id, schedule.work_days)
        return False
    return weekday in days


async def is_holiday(db: AsyncSession, day: date, company_id: UUID) -> bool:
    """해당 날짜가 회사 휴일인지 확인합니다 (Active company holiday on that exact date)."""
    return await holiday_repository.is_active_holiday(db, company_id, day)
