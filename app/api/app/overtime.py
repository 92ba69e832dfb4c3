"""앱 초과근무 라우터: 내 초과근무 신청 API.

App Overtime Router. Submit, list, view and cancel my overtime requests.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_employee, get_policy
from app.config import AttendancePolicy
from app.database import get_db
from app.models.overtime import OvertimeStatus
from app.models.user import Employee
from app.schemas.common import PaginatedResponse
from app.schemas.overtime import OvertimeCreate, OvertimeResponse
from app.services.activity_log_service import PostCommitHooks, get_post_commit_hooks
from app.services.overtime_service import overtime_service
from app.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_my_overtime(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    status: Annotated[OvertimeStatus | None, Query()] = None,
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 15,
) -> dict:
    """내 초과근무 신청 목록 (My overtime requests, newest date first)."""
    grants, total = await overtime_service.list_mine(
        db,
        current_employee.id,
        status=status,
        date_from=start_date,
        date_to=end_date,
        page=page,
        per_page=per_page,
    )
    items: list[dict] = [await overtime_service.build_response(db, g) for g in grants]
    return {"items": items, "total": total, "page": page, "per_page": per_page}


@router.post("", response_model=OvertimeResponse, status_code=201)
async def submit_overtime(
    data: OvertimeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
    policy: Annotated[AttendancePolicy, Depends(get_policy)],
    hooks: Annotated[PostCommitHooks, Depends(get_post_commit_hooks)],
) -> dict:
    """초과근무를 신청합니다.

    Submit an overtime request addressed to my approver.

    Args:
        data: 신청 내용 (Request body)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_employee: 인증된 직원 (Authenticated employee)
        clock: 시계 (Clock)
        policy: 근태 정책 (Attendance policy)
        hooks: 커밋 후 훅 목록 (Post-commit hooks)

    Returns:
        dict: 생성된 미결 신청 (Created pending request)
    """
    grant = await overtime_service.submit(
        db,
        current_employee,
        work_date=data.work_date,
        start_time=data.start_time,
        end_time=data.end_time,
        reason=data.reason,
        now=clock.now(),
        policy=policy,
        hooks=hooks,
    )
    await db.commit()
    response: dict = await overtime_service.build_response(db, grant)
    await hooks.run(db)
    return response


@router.get("/{overtime_id}", response_model=OvertimeResponse)
async def get_overtime(
    overtime_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
) -> dict:
    """초과근무 신청 상세 (Request detail, owner or addressed approver)."""
    grant = await overtime_service.get_detail(db, overtime_id, current_employee)
    return await overtime_service.build_response(db, grant)


@router.post("/{overtime_id}/cancel", response_model=OvertimeResponse)
async def cancel_overtime(
    overtime_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
    hooks: Annotated[PostCommitHooks, Depends(get_post_commit_hooks)],
) -> dict:
    """내 미결 신청을 취소합니다 (Cancel my pending request)."""
    grant = await overtime_service.cancel(db, overtime_id, current_employee, clock.now(), hooks)
    await db.commit()
    response: dict = await overtime_service.build_response(db, grant)
    await hooks.run(db)
    return response
