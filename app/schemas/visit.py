"""외근 방문 관련 Pydantic 요청/응답 스키마 정의.

Field visit Pydantic request/response schema definitions.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from app.models.visit import VisitStatus, VisitType
from app.schemas.attendance import AttendanceResponse


class VisitCreate(BaseModel):
    """외근 방문 신청 요청 스키마.

    Visit request schema. Planned times are local wall-clock times.

    Attributes:
        visit_type: 방문 유형 (Visit type)
        purpose: 방문 목적 (Purpose)
        location_name: 방문지 이름 (Location name)
        planned_start / planned_end: 계획 일시 (Planned window)
    """

    visit_type: VisitType
    purpose: str = Field(..., min_length=1)
    location_name: str = Field(..., min_length=1, max_length=255)
    location_address: str | None = None
    client_name: str | None = Field(None, max_length=255)
    planned_start: datetime
    planned_end: datetime
    notes: str | None = None


class VisitStart(BaseModel):
    """방문 시작 요청 (Start position)."""

    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    address: str | None = None


class VisitEnd(VisitStart):
    """방문 종료 요청 (End position and end notes)."""

    notes: str | None = None  # 종료 메모, 기존 메모 뒤에 추가 (Appended to existing notes)


class VisitDecision(BaseModel):
    """방문 승인/반려 요청 스키마.

    Approver decision. ``rejection_reason`` is required when rejecting.
    """

    action: str = Field(..., pattern=r"^(approve|reject)$")
    rejection_reason: str | None = None


class VisitResponse(BaseModel):
    """외근 방문 응답 스키마 (Visit response with resolved names)."""

    id: str
    employee_id: str
    employee_name: str | None
    attendance_id: str | None  # 연결된 근태 UUID (Linked attendance)
    visit_type: VisitType
    purpose: str
    location_name: str
    location_address: str | None
    client_name: str | None
    planned_start: datetime
    planned_end: datetime
    actual_start: datetime | None
    actual_end: datetime | None
    start_lat: float | None
    start_lng: float | None
    start_address: str | None
    end_lat: float | None
    end_lng: float | None
    end_address: str | None
    status: VisitStatus
    approved_by: str | None
    approver_name: str | None
    approved_at: datetime | None
    rejection_reason: str | None
    notes: str | None
    created_at: datetime


class VisitStatisticsResponse(BaseModel):
    """승인 대상 방문 상태별 건수 (Status counts across the approver's team)."""

    pending: int
    approved: int
    rejected: int
    in_progress: int
    completed: int
    total: int


class VisitActionResponse(BaseModel):
    """방문 시작/종료 결과 (Visit start/end result with the linked attendance).

    ``work_minutes`` and ``overtime_minutes`` are set when the visit ends.
    """

    message: str
    visit: VisitResponse
    attendance: AttendanceResponse
    work_minutes: int | None = None
    overtime_minutes: int | None = None
