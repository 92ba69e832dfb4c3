"""앱 승인 라우터: 승인권자용 초과근무/방문 결정 API.

App Approvals Router. Endpoints for approvers: the overtime requests
addressed to me and the visits of the employees I approve for.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_employee
from app.database import get_db
from app.models.overtime import OvertimeStatus
from app.models.user import Employee
from app.models.visit import VisitStatus
from app.schemas.common import PaginatedResponse
from app.schemas.overtime import OvertimeReject, OvertimeResponse
from app.schemas.visit import VisitDecision, VisitResponse, VisitStatisticsResponse
from app.services.activity_log_service import PostCommitHooks, get_post_commit_hooks
from app.services.overtime_service import overtime_service
from app.services.visit_service import visit_service
from app.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


# === 초과근무 (Overtime) ===

@router.get("/overtime", response_model=PaginatedResponse)
async def list_overtime_to_approve(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    status: Annotated[OvertimeStatus | None, Query()] = OvertimeStatus.PENDING,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 15,
) -> dict:
    """나에게 온 초과근무 신청 목록 (Requests addressed to me, pending by default)."""
    grants, total = await overtime_service.list_for_approver(
        db, current_employee.id, status=status, page=page, per_page=per_page,
    )
    items: list[dict] = [await overtime_service.build_response(db, g) for g in grants]
    return {"items": items, "total": total, "page": page, "per_page": per_page}


@router.post("/overtime/{overtime_id}/approve", response_model=OvertimeResponse)
async def approve_overtime(
    overtime_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
    hooks: Annotated[PostCommitHooks, Depends(get_post_commit_hooks)],
) -> dict:
    """초과근무 신청을 승인합니다 (Approve a pending request addressed to me)."""
    grant = await overtime_service.approve(db, overtime_id, current_employee, clock.now(), hooks)
    await db.commit()
    response: dict = await overtime_service.build_response(db, grant)
    await hooks.run(db)
    return response


@router.post("/overtime/{overtime_id}/reject", response_model=OvertimeResponse)
async def reject_overtime(
    overtime_id: UUID,
    data: OvertimeReject,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
    hooks: Annotated[PostCommitHooks, Depends(get_post_commit_hooks)],
) -> dict:
    """초과근무 신청을 반려합니다 (사유 필수).

    Reject a pending request addressed to me. A reason is required.
    """
    grant = await overtime_service.reject(
        db, overtime_id, current_employee, data.rejection_reason, clock.now(), hooks,
    )
    await db.commit()
    response: dict = await overtime_service.build_response(db, grant)
    await hooks.run(db)
    return response


# === 외근 방문 (Visits) ===

@router.get("/visits", response_model=PaginatedResponse)
async def list_visits_to_approve(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    status: Annotated[VisitStatus | None, Query()] = VisitStatus.PENDING,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 15,
) -> dict:
    """내 하위 직원의 방문 목록 (Visits of the employees I approve for)."""
    visits, total = await visit_service.list_for_approver(
        db, current_employee.id, status=status, page=page, per_page=per_page,
    )
    items: list[dict] = [await visit_service.build_response(db, v) for v in visits]
    return {"items": items, "total": total, "page": page, "per_page": per_page}


@router.get("/visits/statistics", response_model=VisitStatisticsResponse)
async def get_visit_statistics(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
) -> dict:
    """방문 상태별 건수 (Visit counts per status across my team)."""
    return await visit_service.statistics(db, current_employee.id)


@router.get("/visits/{visit_id}", response_model=VisitResponse)
async def get_visit(
    visit_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
) -> dict:
    """방문 상세 (Visit detail, visitor or their approver)."""
    visit = await visit_service.get_detail(db, visit_id, current_employee)
    return await visit_service.build_response(db, visit)


@router.post("/visits/{visit_id}/decision", response_model=VisitResponse)
async def decide_visit(
    visit_id: UUID,
    data: VisitDecision,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
    hooks: Annotated[PostCommitHooks, Depends(get_post_commit_hooks)],
) -> dict:
    """방문을 승인 또는 반려합니다.

    Approve or reject a pending visit of an employee I approve for.

    Args:
        visit_id: 방문 UUID (Visit UUID)
        data: 결정 내용, 반려 시 사유 필수 (Decision; reason required to reject)
    """
    visit = await visit_service.decide_visit(
        db,
        visit_id,
        current_employee,
        approve=data.action == "approve",
        now=clock.now(),
        reason=data.rejection_reason,
        hooks=hooks,
    )
    await db.commit()
    response: dict = await visit_service.build_response(db, visit)
    await hooks.run(db)
    return response
