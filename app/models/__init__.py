"""SQLAlchemy ORM 모델 패키지 (모든 도메인 모델의 중앙 임포트 지점).

SQLAlchemy ORM models package. Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
``Base.metadata.create_all``.

Modules:
    organization: 회사, 사무실, 휴일, 근무 스케줄 (Company, OfficeLocation, Holiday, WorkSchedule)
    user: 직원 (Employee)
    attendance: 근태 기록 (Attendance records)
    overtime: 초과근무 신청 (Overtime requests)
    visit: 외근 방문 (Field visits)
    activity_log: 활동 로그 (Activity audit trail)
"""

from app.models.organization import Company, OfficeLocation, Holiday, WorkSchedule
from app.models.user import Employee
from app.models.attendance import Attendance, AttendanceStatus
from app.models.overtime import OvertimeRequest, OvertimeStatus
from app.models.visit import Visit, VisitStatus, VisitType
from app.models.activity_log import ActivityLog

__all__ = [
    "Company", "OfficeLocation", "Holiday", "WorkSchedule",
    "Employee",
    "Attendance", "AttendanceStatus",
    "OvertimeRequest", "OvertimeStatus",
    "Visit", "VisitStatus", "VisitType",
    "ActivityLog",
]
