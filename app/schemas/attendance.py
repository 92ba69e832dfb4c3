"""근태(출퇴근) 관련 Pydantic 요청/응답 스키마 정의.

Attendance Pydantic request/response schema definitions.
Covers clock-in/out, today's status, history, summary and the office
distance preview.
"""

from datetime import date, time
from typing import Any

from pydantic import BaseModel, Field

from app.models.attendance import AttendanceStatus


# === 출퇴근 (Clock) 스키마 ===

class ClockRequest(BaseModel):
    """출퇴근 요청 스키마.

    Clock-in/out request schema. The server decides whether this is a
    clock-in or a clock-out from today's record.

    Attributes:
        latitude: 위도 (Latitude, -90..90)
        longitude: 경도 (Longitude, -180..180)
        address: 주소 (Reverse-geocoded address, optional)
    """

    latitude: float = Field(..., ge=-90, le=90)  # 현재 위도 (Current latitude)
    longitude: float = Field(..., ge=-180, le=180)  # 현재 경도 (Current longitude)
    address: str | None = None  # 주소, 선택 (Optional address)


class AttendanceResponse(BaseModel):
    """근태 기록 응답 스키마.

    Attendance record response schema with HH:MM formatted durations.
    """

    id: str  # 근태 UUID 문자열 (Attendance UUID as string)
    employee_id: str  # 직원 UUID 문자열 (Employee UUID as string)
    office_id: str | None  # 사무실 UUID, 외근 출근이면 None (Null for visit clock-in)
    office_name: str | None  # 사무실 이름, 조인된 값 (Office name, resolved)
    work_date: date  # 근무일 (Work date)
    clock_in: time | None
    clock_in_lat: float | None
    clock_in_lng: float | None
    clock_in_address: str | None
    clock_out: time | None
    clock_out_lat: float | None
    clock_out_lng: float | None
    clock_out_address: str | None
    work_duration: int | None  # 근무 시간(분), 퇴근 전 None (Work minutes, None before clock-out)
    overtime_duration: int | None  # 인정 초과근무(분) (Credited overtime minutes)
    uncredited_overtime_duration: int | None  # 미인정 초과근무(분) (Uncredited overtime minutes)
    work_duration_formatted: str  # "HH:MM"
    overtime_duration_formatted: str  # "HH:MM"
    status: AttendanceStatus  # 근태 상태 (present/late/absent/holiday/leave)
    notes: str | None


class ClockResponse(BaseModel):
    """출퇴근 결과 응답 스키마.

    Clock result. ``is_late`` is set on clock-in; the minute totals are
    set on clock-out.
    """

    action: str  # "clock_in" | "clock_out"
    message: str
    attendance: AttendanceResponse
    is_late: bool | None = None
    work_minutes: int | None = None
    overtime_minutes: int | None = None


class OvertimeInfo(BaseModel):
    """오늘의 초과근무 정보 (Today's overtime situation)."""

    has_approved_overtime: bool
    approved_overtime: dict[str, Any] | None = None
    has_pending_overtime: bool
    pending_overtime: dict[str, Any] | None = None
    can_request_overtime: bool


class AttendanceStatusResponse(BaseModel):
    """출퇴근 가능 상태 응답 스키마.

    Non-mutating status projection. ``reason`` carries the machine
    readable code of the first failed precondition.
    """

    can_clock_in: bool
    can_clock_out: bool
    message: str
    reason: str | None = None  # 실패 사유 코드 (Failure reason code)
    employee_name: str
    office_name: str | None = None
    today_record: AttendanceResponse | None = None
    overtime_info: OvertimeInfo


class AttendanceSummaryResponse(BaseModel):
    """기간별 근태 요약 응답 스키마 (Period summary)."""

    start_date: date | None
    end_date: date | None
    total_days: int
    present_days: int
    late_days: int
    absent_days: int
    holiday_days: int
    leave_days: int
    attendance_rate: float  # (출근+지각)/전체*100 ((present + late) / total * 100)
    total_work_minutes: int
    total_overtime_minutes: int
    total_work_hours: float
    total_overtime_hours: float


# === 사무실 위치 (Office location) 스키마 ===

class OfficeLocationRequest(BaseModel):
    """사무실 거리 확인 요청 (Office distance preview request)."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class OfficeLocationResponse(BaseModel):
    """사무실 거리 확인 응답.

    Office distance preview. ``distance`` is in meters rounded to 2
    decimals; ``can_attendance`` is true within ``allowed_radius``.
    """

    office_id: str
    office_name: str
    office_address: str | None
    office_latitude: float
    office_longitude: float
    allowed_radius: int  # 허용 반경(m) (Allowed radius in meters)
    distance: float  # 사무실까지 거리(m) (Distance to the office in meters)
    can_attendance: bool
