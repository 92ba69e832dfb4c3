"""초과근무 관련 Pydantic 요청/응답 스키마 정의.

Overtime request Pydantic request/response schema definitions.
"""

from datetime import date, datetime, time

from pydantic import BaseModel, Field

from app.models.overtime import OvertimeStatus


class OvertimeCreate(BaseModel):
    """초과근무 신청 요청 스키마.

    Overtime request creation schema. An ``end_time`` at or before
    ``start_time`` ends on the next day.

    Attributes:
        work_date: 초과근무 날짜 (Overtime date)
        start_time: 시작 시각 (Start time)
        end_time: 종료 시각 (End time)
        reason: 신청 사유 (Reason)
    """

    work_date: date  # 초과근무 날짜 (Overtime date)
    start_time: time  # 시작 시각 (Start time)
    end_time: time  # 종료 시각, 시작 이하이면 다음날 (Next day when <= start)
    reason: str = Field(..., min_length=1, max_length=500)  # 신청 사유 (Reason)


class OvertimeReject(BaseModel):
    """초과근무 반려 요청 스키마 (Rejection with a reason)."""

    rejection_reason: str | None = None  # 반려 사유, 서비스에서 필수 검사 (Required, checked by the service)


class OvertimeResponse(BaseModel):
    """초과근무 신청 응답 스키마.

    Overtime request response with resolved employee and approver names.
    ``approved_by`` is the addressed approver.
    """

    id: str
    employee_id: str
    employee_name: str | None
    work_date: date
    start_time: time
    end_time: time
    duration: int  # 신청 시간(분) (Requested minutes)
    duration_formatted: str  # "HH:MM"
    reason: str
    status: OvertimeStatus  # pending / approved / rejected
    approved_by: str | None
    approver_name: str | None
    approved_at: datetime | None
    rejection_reason: str | None
    created_at: datetime
