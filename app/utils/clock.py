"""시계 추상화 모듈.

Clock abstraction. Services never read the system time themselves; they
receive ``now`` from a Clock injected through the ``get_clock`` dependency,
which tests override with a FixedClock.

All values are naive wall-clock datetimes in the company timezone
(``settings.TIMEZONE``), matching the naive ``date``/``time`` columns of the
attendance tables.
"""

from datetime import date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from app.config import settings


class Clock(Protocol):
    """현재 시각 공급자 (Current time provider)."""

    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """시스템 시계 (회사 타임존 기준 벽시계 시각).

    System clock returning naive local wall-clock time in the configured zone.
    """

    def __init__(self, tz_name: str) -> None:
        self._tz: ZoneInfo = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(self._tz).replace(tzinfo=None, microsecond=0)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """고정 시계 (테스트용, 수동으로 이동 가능).

    Deterministic clock for tests. ``advance`` and ``set`` move it.
    """

    def __init__(self, moment: datetime) -> None:
        self._moment: datetime = moment

    def now(self) -> datetime:
        return self._moment

    def today(self) -> date:
        return self._moment.date()

    def set(self, moment: datetime) -> None:
        self._moment = moment

    def advance(self, **kwargs: float) -> None:
        self._moment = self._moment + timedelta(**kwargs)


_system_clock: SystemClock = SystemClock(settings.TIMEZONE)


def get_clock() -> Clock:
    """FastAPI 의존성: 현재 시계를 반환합니다 (Dependency returning the active clock)."""
    return _system_clock
