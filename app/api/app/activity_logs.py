"""앱 활동 로그 라우터 (My activity log)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_employee
from app.database import get_db
from app.models.user import Employee
from app.schemas.activity_log import ActivityLogResponse
from app.schemas.common import PaginatedResponse
from app.services.activity_log_service import activity_log_service
from app.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_my_activity_logs(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
    clock: Annotated[Clock, Depends(get_clock)],
    period: Annotated[str | None, Query()] = None,
    activity_type: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    """내 활동 로그를 조회합니다.

    List my activity logs, newest first.

    Args:
        period: 기간 필터 (today, week, month)
        activity_type: 활동 유형 필터 (Activity type filter)
    """
    logs, total = await activity_log_service.list_logs(
        db,
        current_employee.id,
        clock.now(),
        period=period,
        activity_type=activity_type,
        page=page,
        per_page=per_page,
    )
    items: list[ActivityLogResponse] = [
        ActivityLogResponse.model_validate(activity_log_service.build_response(log)) for log in logs
    ]
    return {"items": items, "total": total, "page": page, "per_page": per_page}
