"""앱 근태 라우터: 내 출퇴근 및 근태 기록 API.

App Attendance Router. Clock-in/out, today's status and the employee's
own attendance history.
"""

from datetime import date, datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_employee, get_policy
from app.config import AttendancePolicy
from app.database import get_db
from app.models.attendance import AttendanceStatus
from app.models.user import Employee
from app.schemas.attendance import (
    AttendanceResponse,
    AttendanceStatusResponse,
    AttendanceSummaryResponse,
    ClockRequest,
    ClockResponse,
)
from app.schemas.common import PaginatedResponse
from app.services.activity_log_service import PostCommitHooks, get_post_commit_hooks
from app.services.attendance_service import CLOCK_IN, attendance_service
from app.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.post("/clock", response_model=ClockResponse)
async def clock_in_out(
    data: ClockRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
    policy: Annotated[AttendancePolicy, Depends(get_policy)],
    hooks: Annotated[PostCommitHooks, Depends(get_post_commit_hooks)],
) -> dict:
    """출근 또는 퇴근을 기록합니다.

    Clock in or out. The action is chosen from today's record.

    Args:
        data: 현재 위치 (Current position)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_employee: 인증된 직원 (Authenticated employee)
        clock: 시계 (Clock)
        policy: 근태 정책 (Attendance policy)
        hooks: 커밋 후 훅 목록 (Post-commit hooks)

    Returns:
        dict: 처리 결과와 근태 기록 (Action result with the record)
    """
    now: datetime = clock.now()
    result: dict = await attendance_service.clock_in_out(
        db,
        current_employee,
        latitude=data.latitude,
        longitude=data.longitude,
        address=data.address,
        now=now,
        policy=policy,
        hooks=hooks,
    )
    await db.commit()

    if result["action"] == CLOCK_IN:
        message = "Clocked in late" if result["is_late"] else "Clocked in successfully"
    else:
        message = "Clocked out successfully"
    response: dict = {
        "action": result["action"],
        "message": message,
        "attendance": await attendance_service.build_response(db, result["record"]),
        "is_late": result.get("is_late"),
        "work_minutes": result.get("work_minutes"),
        "overtime_minutes": result.get("overtime_minutes"),
    }
    await hooks.run(db)
    return response


@router.get("/status", response_model=AttendanceStatusResponse)
async def get_my_status(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> dict:
    """오늘의 출퇴근 가능 여부를 조회합니다 (Today's clock status, read only)."""
    return await attendance_service.get_status(db, current_employee, clock.now())


@router.get("/today", response_model=AttendanceResponse | None)
async def get_my_today_attendance(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> dict | None:
    """오늘 내 근태 기록을 조회합니다.

    Get today's attendance record for the current employee.

    Returns:
        dict | None: 오늘 근태 기록 또는 None (Today's attendance or None)
    """
    record = await attendance_service.get_today(db, current_employee.id, clock.now())
    if record is None:
        return None
    return await attendance_service.build_response(db, record)


@router.get("/history", response_model=PaginatedResponse)
async def list_my_history(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
    year: Annotated[int | None, Query(ge=2000, le=2100)] = None,
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
    status: Annotated[AttendanceStatus | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 15,
) -> dict:
    """내 근태 이력을 조회합니다.

    List my attendance history, newest first.

    Args:
        month: 월 필터, year 필요 (Month filter, requires year)
        year: 연도 필터 (Year filter)
        start_date: 시작일 (Start date, overrides month/year)
        end_date: 종료일 (End date)
        status: 상태 필터 (Status filter)
        page: 페이지 번호 (Page number)
        per_page: 페이지당 항목 수 (Items per page)

    Returns:
        dict: 페이지네이션된 근태 목록 (Paginated attendance list)
    """
    records, total = await attendance_service.get_history(
        db,
        current_employee.id,
        month=month,
        year=year,
        start_date=start_date,
        end_date=end_date,
        status=status,
        page=page,
        per_page=per_page,
    )

    items: list[dict] = []
    for record in records:
        items.append(await attendance_service.build_response(db, record))

    return {"items": items, "total": total, "page": page, "per_page": per_page}


@router.get("/history/summary", response_model=AttendanceSummaryResponse)
async def get_my_summary(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
    year: Annotated[int | None, Query(ge=2000, le=2100)] = None,
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
) -> dict:
    """기간별 근태 요약 (Summary of my attendance for a period)."""
    return await attendance_service.get_summary(
        db, current_employee.id, month=month, year=year, start_date=start_date, end_date=end_date,
    )


@router.get("/history/{attendance_id}", response_model=AttendanceResponse)
async def get_my_record(
    attendance_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
) -> dict:
    """내 근태 기록 단건 조회 (Single own attendance record)."""
    record = await attendance_service.get_record(db, attendance_id, current_employee.id)
    return await attendance_service.build_response(db, record)
