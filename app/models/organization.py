"""회사 및 근무 환경 관련 SQLAlchemy ORM 모델 정의.

Company and workplace SQLAlchemy ORM model definitions.
These tables are reference data read by the attendance engine; they are
maintained by the administration tooling, not by this API.

Tables:
    - companies: 회사 (Tenant companies)
    - offices: 사무실 위치 및 지오펜스 반경 (Office locations with geofence radius)
    - holidays: 회사 휴일 (Company holidays)
    - work_schedules: 근무 스케줄 (Work schedules with weekly work days)
"""

import uuid
from datetime import date, datetime, time, timezone

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text, Time, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Company(Base):
    """회사 모델 (Tenant company).

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 회사 이름 (Company name)
        code: 회사 코드, 고유 (Unique company code)
        is_active: 활성 상태 (Active flag)
    """

    __tablename__ = "companies"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))


class OfficeLocation(Base):
    """사무실 위치 모델 (지오펜스 중심과 허용 반경).

    Office location model. The office coordinates are the geofence center
    and ``radius`` is the allowed clock-in distance in meters.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        company_id: 소속 회사 FK (Owning company)
        name: 사무실 이름 (Office name)
        code: 사무실 코드 (Office code)
        address: 주소 (Street address)
        latitude: 위도 (Latitude, degrees)
        longitude: 경도 (Longitude, degrees)
        radius: 허용 반경(미터) (Allowed radius in meters)
        is_active: 활성 상태 (Active flag)
    """

    __tablename__ = "offices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 회사 FK (CASCADE: 회사 삭제 시 사무실도 삭제)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    # 허용 반경(미터) (Allowed clock-in radius in meters)
    radius: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))


class Holiday(Base):
    """회사 휴일 모델.

    Company holiday. Only active rows count as holidays.
    """

    __tablename__ = "holidays"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    holiday_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_holidays_company_date", "company_id", "holiday_date"),
    )


class WorkSchedule(Base):
    """근무 스케줄 모델 (요일별 근무 여부와 근무 시간대).

    Work schedule model. ``work_days`` holds ISO weekday numbers
    (1=Monday .. 7=Sunday). Schedules are same-day: end_time is after
    start_time.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 스케줄 이름 (Schedule name)
        start_time: 근무 시작 시각 (Scheduled start, wall clock)
        end_time: 근무 종료 시각 (Scheduled end, wall clock)
        work_days: 근무 요일 목록 (ISO weekday list, e.g. [1, 2, 3, 4, 5])
        total_hours: 일 근무 시간 (Nominal hours per day)
        break_minutes: 휴게 시간(분) (Break length in minutes)
        is_flexible: 유연 근무 여부 (Flexible start allowed)
        flexible_minutes: 유연 근무 허용 시간(분) (Late tolerance when flexible)
        is_active: 활성 상태 (Active flag)
    """

    __tablename__ = "work_schedules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    # 근무 요일 (JSON 배열, 1=월 ~ 7=일)
    work_days: Mapped[list | None] = mapped_column(JSON, nullable=True)
    total_hours: Mapped[float] = mapped_column(Float, default=8.0)
    break_minutes: Mapped[int] = mapped_column(Integer, default=60)
    is_flexible: Mapped[bool] = mapped_column(Boolean, default=False)
    flexible_minutes: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
