"""근무 시간 계산기 (Duration calculator).

Computes worked minutes and credited overtime for one attendance day.

Rules:
    1. 출근 또는 퇴근 시각이 없으면 (0, 0).
       (Missing clock-in or clock-out yields zero.)
    2. 퇴근 시각이 출근 시각 이하이면 다음날 퇴근으로 간주.
       (A clock-out at or before the clock-in is on the next day.)
    3. 근무 시간 = 퇴근 - 출근 (분).
    4. 스케줄 종료 이후 근무는 승인된 초과근무 시간까지만 인정.
       (Work past the scheduled end is credited only up to the approved
       overtime duration; the rest is reported as uncredited.)
    5. 승인 없는 초과근무는 0분 인정. 유예 시간을 넘으면 미인정 시간으로 기록.
       (Without approval nothing is credited; beyond the grace period the
       extra minutes are reported as uncredited.)
    6. 어떤 오류든 (0, 0)으로 처리하고 로그를 남김.
       (Any failure yields zero and is logged.)

The calculator never reads the clock and performs no I/O besides logging.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Protocol

from app.utils.exceptions import ComputationError

logger = logging.getLogger(__name__)

DEFAULT_GRACE_MINUTES: int = 15


class ScheduleLike(Protocol):
    end_time: time | None


class OvertimeGrantLike(Protocol):
    duration: int


@dataclass(frozen=True)
class DurationResult:
    """계산 결과 (Computation result, all values in minutes)."""

    work_minutes: int = 0
    overtime_minutes: int = 0
    uncredited_overtime_minutes: int = 0


ZERO_RESULT: DurationResult = DurationResult()


def _as_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise ComputationError(f"invalid work date {value!r}") from exc
    raise ComputationError(f"unsupported work date type {type(value).__name__}")


def _as_time(value: time | str) -> time:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        try:
            return time.fromisoformat(value.strip())
        except ValueError as exc:
            raise ComputationError(f"invalid time {value!r}") from exc
    raise ComputationError(f"unsupported time type {type(value).__name__}")


def _minutes(delta: timedelta) -> int:
    return int(delta.total_seconds() // 60)


def _compute(
    work_date: date | str,
    clock_in: time | str,
    clock_out: time | str,
    schedule: ScheduleLike | None,
    overtime: OvertimeGrantLike | None,
    grace_minutes: int,
) -> DurationResult:
    day = _as_date(work_date)
    start = datetime.combine(day, _as_time(clock_in))
    end = datetime.combine(day, _as_time(clock_out))
    if end <= start:
        end += timedelta(days=1)

    work_minutes = abs(_minutes(end - start))
    overtime_minutes = 0
    uncredited = 0

    end_time = getattr(schedule, "end_time", None) if schedule is not None else None
    if end_time is not None:
        scheduled_end = datetime.combine(day, _as_time(end_time))
        if end > scheduled_end:
            raw = _minutes(end - scheduled_end)
            if overtime is not None:
                granted = int(overtime.duration)
                if granted < 0:
                    raise ComputationError(f"negative overtime grant {granted}")
                overtime_minutes = min(raw, granted)
                if raw > granted:
                    uncredited = raw - granted
                    logger.warning(
                        "Overtime beyond approved grant: worked %d min past end, approved %d min",
                        raw, granted,
                    )
            elif raw > grace_minutes:
                uncredited = raw
                logger.warning(
                    "Unapproved overtime on %s: %d min past scheduled end (grace %d min)",
                    day, raw, grace_minutes,
                )

    return DurationResult(
        work_minutes=work_minutes,
        overtime_minutes=overtime_minutes,
        uncredited_overtime_minutes=uncredited,
    )


def compute(
    work_date: date | str,
    clock_in: time | str | None,
    clock_out: time | str | None,
    schedule: ScheduleLike | None = None,
    overtime: OvertimeGrantLike | None = None,
    *,
    grace_minutes: int = DEFAULT_GRACE_MINUTES,
) -> DurationResult:
    """근무 시간과 인정 초과근무 시간을 계산합니다.

    Compute worked minutes and credited overtime for one day.

    Args:
        work_date: 근무 날짜 (Work date, ``date`` or ISO string)
        clock_in: 출근 시각 (Clock-in, ``time`` or "HH:MM[:SS]")
        clock_out: 퇴근 시각 (Clock-out, ``time`` or "HH:MM[:SS]")
        schedule: 근무 스케줄, end_time만 사용 (Schedule; only end_time is read)
        overtime: 해당 날짜의 승인된 초과근무, 없으면 None
                  (Approved overtime grant for that date, or None)
        grace_minutes: 미승인 초과근무 유예(분) (Grace for unapproved overtime)

    Returns:
        DurationResult: 계산 결과, 실패 시 0 (Result; zeros on any failure)
    """
    if clock_in is None or clock_out is None:
        return ZERO_RESULT
    try:
        return _compute(work_date, clock_in, clock_out, schedule, overtime, grace_minutes)
    except (ComputationError, TypeError, ValueError, AttributeError, OverflowError) as exc:
        logger.error("Duration computation failed for %r (%r -> %r): %s", work_date, clock_in, clock_out, exc)
        return ZERO_RESULT


def format_minutes(minutes: int | None) -> str:
    """분을 "HH:MM" 형식으로 변환합니다 (Format minutes as HH:MM)."""
    if not minutes or minutes <= 0:
        return "00:00"
    hours, rest = divmod(int(minutes), 60)
    return f"{hours:02d}:{rest:02d}"
