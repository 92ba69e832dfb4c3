"""근무 달력 테스트 (Work calendar tests)."""

from datetime import date
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.organization import Holiday
from app.services.work_calendar import is_holiday, is_work_day, iso_weekday


def _schedule(work_days) -> SimpleNamespace:
    return SimpleNamespace(id="sched", work_days=work_days)


class TestIsWorkDay:
    """근무 요일 판정."""

    def test_iso_weekday_sunday_is_seven(self):
        assert iso_weekday(date(2026, 10, 25)) == 7
        assert iso_weekday(date(2026, 10, 19)) == 1

    def test_weekday_in_schedule(self):
        assert is_work_day(_schedule([1, 2, 3, 4, 5]), 3)

    def test_weekend_not_in_schedule(self):
        assert not is_work_day(_schedule([1, 2, 3, 4, 5]), 6)

    def test_sunday_as_zero_matches_seven(self):
        assert is_work_day(_schedule([0, 6]), 7)
        assert is_work_day(_schedule([6, 7]), 0)

    @pytest.mark.parametrize("work_days", [None, [], "1,2,3", {"mon": True}, [1, "x"], [True, 2], [9]])
    def test_malformed_or_empty_is_false(self, work_days):
        assert not is_work_day(_schedule(work_days), 1)

    def test_missing_schedule(self):
        assert not is_work_day(None, 1)


class TestIsHoliday:
    """회사 휴일 조회."""

    async def test_active_holiday_matches_exact_date(self, db: AsyncSession, company):
        db.add(Holiday(company_id=company.id, name="Founding Day", holiday_date=date(2026, 10, 20)))
        await db.commit()

        assert await is_holiday(db, date(2026, 10, 20), company.id)
        assert not await is_holiday(db, date(2026, 10, 21), company.id)

    async def test_inactive_holiday_ignored(self, db: AsyncSession, company):
        db.add(Holiday(company_id=company.id, name="Cancelled", holiday_date=date(2026, 10, 20), is_active=False))
        await db.commit()

        assert not await is_holiday(db, date(2026, 10, 20), company.id)

    async def test_other_company_holiday_ignored(self, db: AsyncSession, company):
        from app.models.organization import Company

        other = Company(name="Other", code="OTHER")
        db.add(other)
        await db.flush()
        db.add(Holiday(company_id=other.id, name="Theirs", holiday_date=date(2026, 10, 20)))
        await db.commit()

        assert not await is_holiday(db, date(2026, 10, 20), company.id)
