"""외근(방문) 관련 SQLAlchemy ORM 모델 정의.

Field visit SQLAlchemy ORM model definitions.
Starting an approved visit clocks the employee in; ending it clocks them
out through the same duration rules as an office clock-out.

Tables:
    - visits: 외근 방문 기록 (Field visit records)
"""

import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import DateTime, Enum, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.attendance import enum_values


class VisitType(str, enum.Enum):
    """방문 유형 (Visit type)."""

    CLIENT_VISIT = "client_visit"
    SITE_INSPECTION = "site_inspection"
    MEETING = "meeting"
    DELIVERY = "delivery"
    OTHER = "other"


class VisitStatus(str, enum.Enum):
    """방문 상태 (Visit status)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Visit(Base):
    """외근 방문 모델.

    Field visit model.

    Status Flow:
        pending -> approved -> in_progress -> completed
        pending -> rejected

    ``actual_start`` is set only when leaving approved, ``actual_end`` only
    when leaving in_progress.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        employee_id: 직원 FK (Visiting employee)
        attendance_id: 연결된 근태 기록 FK (Linked attendance record, weak reference)
        visit_type: 방문 유형 (Visit type)
        purpose: 방문 목적 (Purpose)
        location_name: 방문지 이름 (Location name)
        client_name: 고객사 이름 (Client name)
        planned_start / planned_end: 계획 일시 (Planned window)
        actual_start / actual_end: 실제 일시 (Actual window)
        status: 상태 (pending/approved/rejected/in_progress/completed)
        approved_by / approved_at: 결정자 및 결정 일시 (Decision maker and time)
        rejection_reason: 반려 사유 (Rejection reason)
        notes: 메모 (Notes, end notes are appended)
    """

    __tablename__ = "visits"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    # 근태 기록 약한 참조 (SET NULL: 근태 삭제 시 방문 기록은 유지)
    attendance_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("attendances.id", ondelete="SET NULL"), nullable=True)
    visit_type: Mapped[VisitType] = mapped_column(
        Enum(VisitType, native_enum=False, length=30, values_callable=enum_values), nullable=False
    )
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    location_name: Mapped[str] = mapped_column(String(255), nullable=False)
    location_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    planned_start: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    planned_end: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    actual_start: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    actual_end: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    start_lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    start_lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    start_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    end_lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    end_lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    end_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[VisitStatus] = mapped_column(
        Enum(VisitStatus, native_enum=False, length=20, values_callable=enum_values),
        default=VisitStatus.PENDING,
        nullable=False,
    )
    approved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    @property
    def is_pending(self) -> bool:
        return self.status == VisitStatus.PENDING
