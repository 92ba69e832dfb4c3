"""활동 로그 관련 SQLAlchemy ORM 모델 정의.

Activity log SQLAlchemy ORM model definitions.
Business audit trail of what employees did (clock-in, overtime request,
visit start, ...). Rows are written after the business transaction has
committed, so a failed log write never undoes the action it describes.

Tables:
    - activity_logs: 직원 활동 로그 (Employee activity log)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import JSON, String, DateTime, Float, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class ActivityLog(Base):
    """활동 로그 모델.

    Activity Types (activity_type 필드 값):
        - "clock_in" / "clock_out": 출퇴근 (Office clock-in/out)
        - "overtime_request" / "overtime_cancelled": 초과근무 신청/취소
        - "overtime_approved" / "overtime_rejected": 초과근무 결정
        - "visit_request" / "visit_approved" / "visit_rejected": 외근 신청/결정
        - "visit_start" / "visit_end": 외근 시작/종료

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        employee_id: 직원 FK (Acting employee)
        company_id: 회사 FK (Company scope)
        activity_type: 활동 유형 (Activity type, see above)
        title: 제목 (Short title)
        description: 설명 (Description)
        activity_time: 활동 일시 (When the activity happened, company local)
        latitude / longitude / location_address: 위치 (Where, optional)
        details: 부가 정보 JSON, DB 컬럼명 "metadata" (Extra data)
    """

    __tablename__ = "activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    activity_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    location_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "metadata"는 Declarative 예약어이므로 속성명은 details (attribute name differs from column)
    details: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_activity_logs_employee_time", "employee_id", "activity_time"),
    )
