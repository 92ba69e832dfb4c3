"""앱 외근 방문 라우터: 내 방문 신청/시작/종료 API.

App Visit Router. Request visits and run approved ones; starting and
ending a visit clocks the employee in and out.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_employee, get_policy
from app.config import AttendancePolicy
from app.database import get_db
from app.models.user import Employee
from app.models.visit import VisitStatus
from app.schemas.common import PaginatedResponse
from app.schemas.visit import VisitActionResponse, VisitCreate, VisitEnd, VisitResponse, VisitStart
from app.services.activity_log_service import PostCommitHooks, get_post_commit_hooks
from app.services.attendance_service import attendance_service
from app.services.visit_service import visit_service
from app.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_my_visits(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    status: Annotated[VisitStatus | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 15,
) -> dict:
    """내 방문 목록 (My visits, latest planned start first)."""
    visits, total = await visit_service.list_mine(db, current_employee.id, status=status, page=page, per_page=per_page)
    items: list[dict] = [await visit_service.build_response(db, v) for v in visits]
    return {"items": items, "total": total, "page": page, "per_page": per_page}


@router.post("", response_model=VisitResponse, status_code=201)
async def request_visit(
    data: VisitCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
    hooks: Annotated[PostCommitHooks, Depends(get_post_commit_hooks)],
) -> dict:
    """외근 방문을 신청합니다 (Request a visit for approval)."""
    visit = await visit_service.request_visit(
        db,
        current_employee,
        visit_type=data.visit_type,
        purpose=data.purpose,
        location_name=data.location_name,
        planned_start=data.planned_start,
        planned_end=data.planned_end,
        now=clock.now(),
        location_address=data.location_address,
        client_name=data.client_name,
        notes=data.notes,
        hooks=hooks,
    )
    await db.commit()
    response: dict = await visit_service.build_response(db, visit)
    await hooks.run(db)
    return response


@router.post("/{visit_id}/start", response_model=VisitActionResponse)
async def start_visit(
    visit_id: UUID,
    data: VisitStart,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
    hooks: Annotated[PostCommitHooks, Depends(get_post_commit_hooks)],
) -> dict:
    """승인된 방문을 시작합니다.

    Start an approved visit. Clocks me in for today without the office
    geofence.

    Returns:
        dict: 방문과 연결된 근태 기록 (Visit and its linked attendance)
    """
    visit, record = await visit_service.start_visit(
        db, visit_id, current_employee, data.latitude, data.longitude, data.address, clock.now(), hooks,
    )
    await db.commit()
    response: dict = {
        "message": "Visit started",
        "visit": await visit_service.build_response(db, visit),
        "attendance": await attendance_service.build_response(db, record),
    }
    await hooks.run(db)
    return response


@router.post("/{visit_id}/end", response_model=VisitActionResponse)
async def end_visit(
    visit_id: UUID,
    data: VisitEnd,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
    policy: Annotated[AttendancePolicy, Depends(get_policy)],
    hooks: Annotated[PostCommitHooks, Depends(get_post_commit_hooks)],
) -> dict:
    """진행 중인 방문을 종료합니다.

    End a visit in progress. Clocks me out and computes work and overtime
    minutes the same way as an office clock-out.
    """
    visit, record, result = await visit_service.end_visit(
        db,
        visit_id,
        current_employee,
        data.latitude,
        data.longitude,
        data.address,
        clock.now(),
        notes=data.notes,
        policy=policy,
        hooks=hooks,
    )
    await db.commit()
    response: dict = {
        "message": "Visit completed",
        "visit": await visit_service.build_response(db, visit),
        "attendance": await attendance_service.build_response(db, record),
        "work_minutes": result.work_minutes,
        "overtime_minutes": result.overtime_minutes,
    }
    await hooks.run(db)
    return response
