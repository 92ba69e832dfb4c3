"""직원 관련 SQLAlchemy ORM 모델 정의.

Employee SQLAlchemy ORM model definition.
The employee is the authenticated principal of every request: the JWT
``sub`` claim holds the employee UUID.

Tables:
    - employees: 직원 (Employees with office, schedule and approver links)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Employee(Base):
    """직원 모델 (근무지, 스케줄, 승인권자 정보 포함).

    Employee model. Each employee belongs to one company, may be assigned
    an office (geofence) and a work schedule, and may point at another
    employee as the approver of their overtime and visit requests.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        company_id: 소속 회사 FK (Owning company)
        office_id: 근무 사무실 FK (Assigned office, nullable)
        work_schedule_id: 근무 스케줄 FK (Assigned schedule, nullable)
        approver_id: 승인권자 FK (Approving employee, nullable)
        employee_code: 사번 (Employee code, unique per company)
        name: 이름 (Full name)
        position: 직위 (Position title)
        department: 부서 (Department)
        is_active: 재직 상태 (Active flag)
    """

    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    # 근무 사무실 FK (SET NULL: 사무실 삭제 시 미배정 상태)
    office_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("offices.id", ondelete="SET NULL"), nullable=True)
    work_schedule_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("work_schedules.id", ondelete="SET NULL"), nullable=True)
    # 승인권자 FK (self-reference)
    approver_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    employee_code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("company_id", "employee_code", name="uq_employee_company_code"),
    )

    def can_approve(self, subordinate: "Employee") -> bool:
        """이 직원이 해당 직원의 승인권자인지 확인합니다.

        True when this employee is the approver assigned to ``subordinate``.
        """
        return subordinate.approver_id == self.id
