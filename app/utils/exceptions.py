"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Every error raised by the services carries a machine-readable reason code
next to its human message, so clients can branch on ``detail["reason"]``:

    {"detail": {"reason": "outside_radius", "message": "..."}}

Usage:
    from app.utils.exceptions import ErrorReason, PreconditionError
    raise PreconditionError(ErrorReason.HOLIDAY, "Today is a holiday")
"""

import enum

from fastapi import HTTPException, status


class ErrorReason(str, enum.Enum):
    """오류 사유 코드 (Discriminable error reason codes)."""

    # 입력 검증 (Input validation)
    INVALID_INPUT = "invalid_input"
    OVERTIME_DATE_IN_PAST = "overtime_date_in_past"
    OVERTIME_TOO_FAR_AHEAD = "overtime_too_far_ahead"
    OVERTIME_TOO_SHORT = "overtime_too_short"
    OVERTIME_TOO_LONG = "overtime_too_long"
    REJECTION_REASON_REQUIRED = "rejection_reason_required"

    # 선행 조건 (Business preconditions)
    EMPLOYEE_INACTIVE = "employee_inactive"
    HOLIDAY = "holiday"
    SCHEDULE_UNAVAILABLE = "schedule_unavailable"
    NON_WORKING_DAY = "non_working_day"
    OFFICE_UNAVAILABLE = "office_unavailable"
    OUTSIDE_RADIUS = "outside_radius"
    ALREADY_CLOCKED_IN = "already_clocked_in"
    ALREADY_CLOCKED_OUT = "already_clocked_out"
    OVERTIME_ALREADY_REQUESTED = "overtime_already_requested"
    OVERTIME_OVERLAPS_WORK_HOURS = "overtime_overlaps_work_hours"
    NO_APPROVER_ASSIGNED = "no_approver_assigned"
    APPROVER_UNAVAILABLE = "approver_unavailable"
    ALREADY_PROCESSED = "already_processed"
    ONLY_PENDING_CANCELLABLE = "only_pending_cancellable"
    VISIT_NOT_STARTABLE = "visit_not_startable"
    VISIT_NOT_ENDABLE = "visit_not_endable"

    # 권한 / 조회 / 충돌 (Authorization, lookup, conflict)
    NOT_ASSIGNED_APPROVER = "not_assigned_approver"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    ATTENDANCE_NOT_FOUND = "attendance_not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    PERSISTENCE_FAULT = "persistence_fault"


def _detail(reason: ErrorReason, message: str) -> dict[str, str]:
    return {"reason": reason.value, "message": message}


class ValidationError(HTTPException):
    """422 Unprocessable Entity 예외 (입력값 범위/형식 오류).

    Raised for malformed or out-of-range input that Pydantic cannot catch
    on its own (e.g. overtime date in the past, duration out of bounds).

    Args:
        reason: 오류 사유 코드 (Reason code)
        message: 오류 메시지 (Human readable message)
    """

    def __init__(self, reason: ErrorReason = ErrorReason.INVALID_INPUT, message: str = "Invalid input") -> None:
        super().__init__(status_code=422, detail=_detail(reason, message))
        self.reason: ErrorReason = reason


class PreconditionError(HTTPException):
    """400 Bad Request 예외 (비즈니스 선행 조건 실패).

    Raised when a business precondition fails: holiday, outside radius,
    already clocked out, request already processed and so on.

    Args:
        reason: 오류 사유 코드 (Reason code)
        message: 오류 메시지 (Human readable message)
    """

    def __init__(self, reason: ErrorReason, message: str) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=_detail(reason, message))
        self.reason: ErrorReason = reason


class BadRequestError(PreconditionError):
    """400 Bad Request 예외 (일반 잘못된 요청).

    Generic 400 without a specific precondition behind it.
    """

    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(ErrorReason.INVALID_INPUT, message)


class NotFoundError(HTTPException):
    """404 Not Found 예외 (요청한 리소스 없음).

    Args:
        message: 오류 메시지 (Error message, default: "Resource not found")
        reason: 오류 사유 코드 (Reason code, default: not_found)
    """

    def __init__(self, message: str = "Resource not found", reason: ErrorReason = ErrorReason.NOT_FOUND) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=_detail(reason, message))
        self.reason: ErrorReason = reason


class DuplicateError(HTTPException):
    """409 Conflict 예외 (고유 제약 위반, 동시 요청 경합).

    Raised when a uniqueness constraint rejects the write, e.g. two
    concurrent clock-ins for the same employee and date.
    """

    def __init__(self, message: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=_detail(ErrorReason.CONFLICT, message))
        self.reason: ErrorReason = ErrorReason.CONFLICT


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 (권한 부족).

    Args:
        message: 오류 메시지 (Error message)
        reason: 오류 사유 코드 (Reason code, default: forbidden)
    """

    def __init__(self, message: str = "Insufficient permissions", reason: ErrorReason = ErrorReason.FORBIDDEN) -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=_detail(reason, message))
        self.reason: ErrorReason = reason


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 (인증 실패: 토큰 없음, 만료, 위조)."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=_detail(ErrorReason.UNAUTHORIZED, message))
        self.reason: ErrorReason = ErrorReason.UNAUTHORIZED


class ComputationError(Exception):
    """근무 시간 계산 실패 (Duration computation failure).

    Never leaves the duration calculator: it is caught there and turned
    into a zero result.
    """
