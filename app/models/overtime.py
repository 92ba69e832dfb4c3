"""초과근무 신청 관련 SQLAlchemy ORM 모델 정의.

Overtime request SQLAlchemy ORM model definitions.
An approved request is the grant consulted by the duration calculator
when an employee clocks out after the scheduled end.

Tables:
    - overtime_requests: 초과근무 신청 (Overtime requests / grants)
"""

import enum
import uuid
from datetime import date, datetime, time, timezone
from sqlalchemy import DateTime, Date, Enum, Integer, Time, Text, ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.attendance import enum_values


class OvertimeStatus(str, enum.Enum):
    """초과근무 신청 상태 (Overtime request status)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# 미결/승인 상태 조건 (pending or approved rows count as "open")
_OPEN_STATUS_CLAUSE = text("status IN ('pending', 'approved')")


class OvertimeRequest(Base):
    """초과근무 신청 모델 (직원이 신청하고 승인권자가 결정).

    Overtime request model. Submitted by an employee for one date and
    addressed to the employee's approver.

    Status Flow:
        pending -> approved
        pending -> rejected   (also used for employee cancellation)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        employee_id: 신청 직원 FK (Requesting employee)
        work_date: 초과근무 날짜 (Overtime date)
        start_time: 시작 시각 (Start, wall clock)
        end_time: 종료 시각, 시작 이하이면 다음날 (End; next day when <= start)
        duration: 신청 시간(분) (Requested minutes, cross-midnight adjusted)
        reason: 신청 사유 (Reason)
        status: 상태 (pending/approved/rejected)
        approved_by: 승인권자 FK (Approver the request is addressed to)
        approved_at: 결정 일시 (Decision timestamp, approval or rejection)
        rejection_reason: 반려 사유 (Rejection reason)

    Constraints:
        uq_overtime_open_per_day: 직원+날짜별 미결/승인 신청은 하나만 허용
            (At most one pending or approved request per employee per day)
    """

    __tablename__ = "overtime_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[OvertimeStatus] = mapped_column(
        Enum(OvertimeStatus, native_enum=False, length=20, values_callable=enum_values),
        default=OvertimeStatus.PENDING,
        nullable=False,
    )
    # 승인권자 FK (Addressed approver; decision is restricted to this employee)
    approved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index(
            "uq_overtime_open_per_day",
            "employee_id",
            "work_date",
            unique=True,
            postgresql_where=_OPEN_STATUS_CLAUSE,
            sqlite_where=_OPEN_STATUS_CLAUSE,
        ),
    )

    @property
    def is_pending(self) -> bool:
        return self.status == OvertimeStatus.PENDING
