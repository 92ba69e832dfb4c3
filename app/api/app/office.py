"""앱 사무실 위치 라우터 (Office distance preview)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_employee
from app.database import get_db
from app.models.user import Employee
from app.schemas.attendance import OfficeLocationRequest, OfficeLocationResponse
from app.services.attendance_service import attendance_service

router: APIRouter = APIRouter()


@router.post("/location", response_model=OfficeLocationResponse)
async def check_office_location(
    data: OfficeLocationRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_employee: Annotated[Employee, Depends(get_current_employee)],
) -> dict:
    """현재 위치에서 사무실까지의 거리와 출근 가능 여부를 확인합니다.

    Preview the distance to my office and whether clock-in would pass the
    geofence. Nothing is written.
    """
    return await attendance_service.check_office_location(db, current_employee, data.latitude, data.longitude)
