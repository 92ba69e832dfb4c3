"""근태 관리 관련 SQLAlchemy ORM 모델 정의.

Attendance management SQLAlchemy ORM model definitions.

Tables:
    - attendances: 근태 기록 (Daily attendance records per employee)
"""

import enum
import uuid
from datetime import date, datetime, time, timezone

from sqlalchemy import DateTime, Date, Enum, Float, ForeignKey, Integer, Text, Time, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """DB에는 enum 값(value)을 저장합니다 (Persist enum values, not member names)."""
    return [member.value for member in enum_cls]


class AttendanceStatus(str, enum.Enum):
    """근태 상태 (Attendance status)."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    HOLIDAY = "holiday"
    LEAVE = "leave"


class Attendance(Base):
    """근태 기록 모델 (일별 직원 출퇴근 기록).

    Attendance record model. One record per employee per work date.
    Created on the first clock-in, completed once on clock-out.

    State flow: (no record) -> clocked in -> clocked out

    The three duration columns are either all NULL (not clocked out yet)
    or all set to non-negative minute counts.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        employee_id: 직원 FK (Employee)
        office_id: 사무실 FK, 방문 출근 시 NULL 가능 (Office; NULL for visit clock-ins)
        work_date: 근무 날짜 (Work date, company local)
        clock_in: 출근 시각 (Clock-in wall-clock time)
        clock_out: 퇴근 시각 (Clock-out wall-clock time)
        work_duration: 근무 시간(분) (Worked minutes)
        overtime_duration: 인정 초과근무(분) (Credited overtime minutes)
        uncredited_overtime_duration: 미인정 초과근무(분) (Worked past end but not credited)
        status: 상태 (present, late, absent, holiday, leave)
        notes: 메모 (Optional notes)

    Constraints:
        uq_attendance_employee_date: 동일 직원+날짜 중복 불가
            (One attendance record per employee per day)
    """

    __tablename__ = "attendances"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    office_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("offices.id", ondelete="SET NULL"), nullable=True)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)

    # 출근 (Clock-in)
    clock_in: Mapped[time | None] = mapped_column(Time, nullable=True)
    clock_in_lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    clock_in_lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    clock_in_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 퇴근 (Clock-out)
    clock_out: Mapped[time | None] = mapped_column(Time, nullable=True)
    clock_out_lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    clock_out_lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    clock_out_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 근무 시간(분): 퇴근 시 계산 (Computed on clock-out)
    work_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    overtime_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    uncredited_overtime_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[AttendanceStatus] = mapped_column(
        Enum(AttendanceStatus, native_enum=False, length=20, values_callable=enum_values),
        default=AttendanceStatus.PRESENT,
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("employee_id", "work_date", name="uq_attendance_employee_date"),
    )

    @property
    def is_clocked_in(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    @property
    def is_clocked_out(self) -> bool:
        return self.clock_out is not None
