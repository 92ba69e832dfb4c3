"""활동 로그 레포지토리 (ActivityLog DB 쿼리 담당).

Activity Log Repository.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_log import ActivityLog
from app.repositories.base import BaseRepository


class ActivityLogRepository(BaseRepository[ActivityLog]):
    """활동 로그 레포지토리 (Activity log repository)."""

    def __init__(self) -> None:
        super().__init__(ActivityLog)

    async def get_employee_logs(
        self,
        db: AsyncSession,
        employee_id: UUID,
        since: datetime | None = None,
        activity_type: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ActivityLog], int]:
        """직원 활동 로그를 최신순으로 조회합니다.

        Activity logs of one employee, newest first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            employee_id: 직원 UUID (Employee UUID)
            since: 이 시각 이후만 조회, 선택 (Lower bound on activity_time)
            activity_type: 활동 유형 필터, 선택 (Optional type filter)
            page: 페이지 번호 (Page number)
            per_page: 페이지당 항목 수 (Items per page)
        """
        query: Select = select(ActivityLog).where(ActivityLog.employee_id == employee_id)
        if since is not None:
            query = query.where(ActivityLog.activity_time >= since)
        if activity_type is not None:
            query = query.where(ActivityLog.activity_type == activity_type)
        query = query.order_by(ActivityLog.activity_time.desc())
        return await self.get_paginated(db, query, page, per_page)


# 싱글턴 인스턴스 (Singleton instance)
activity_log_repository: ActivityLogRepository = ActivityLogRepository()
