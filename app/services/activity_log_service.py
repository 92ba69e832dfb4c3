"""활동 로그 서비스 (Activity log service).

Activity logs are written after the business transaction commits. A
request queues hooks on a ``PostCommitHooks`` list; the router drains the
list after ``db.commit()``. Each hook runs in its own short transaction,
and a failing hook is rolled back and logged without touching the
response or the already committed business change.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_log import ActivityLog
from app.models.user import Employee
from app.repositories.activity_log_repository import activity_log_repository
from app.utils.exceptions import BadRequestError

logger = logging.getLogger(__name__)

PostCommitHook = Callable[[AsyncSession], Awaitable[None]]


class PostCommitHooks:
    """커밋 후 실행할 훅 목록 (Hooks to run once the request has committed)."""

    def __init__(self) -> None:
        self._hooks: list[PostCommitHook] = []

    def add(self, hook: PostCommitHook) -> None:
        self._hooks.append(hook)

    def __len__(self) -> int:
        return len(self._hooks)

    async def run(self, db: AsyncSession) -> None:
        """등록된 훅을 순서대로 실행합니다.

        Run and clear the queued hooks. Failures are logged and rolled
        back; they never propagate. A rollback expires loaded objects, so
        callers build their response before running the hooks.
        """
        hooks, self._hooks = self._hooks, []
        for hook in hooks:
            try:
                await hook(db)
                await db.commit()
            except Exception:
                # 로그 기록 실패가 요청 결과에 영향주지 않도록 (log failures never fail the request)
                logger.exception("Post-commit hook %s failed", getattr(hook, "__name__", hook))
                await db.rollback()


def get_post_commit_hooks() -> PostCommitHooks:
    """FastAPI 의존성: 요청 단위 훅 목록 (Per-request hook list dependency)."""
    return PostCommitHooks()


class ActivityLogService:
    """활동 로그 서비스.

    Builds post-commit hooks that persist ActivityLog rows, and lists the
    current employee's logs.
    """

    def log_hook(
        self,
        employee: Employee,
        activity_type: str,
        title: str,
        activity_time: datetime,
        description: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        location_address: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> PostCommitHook:
        """활동 로그 기록 훅을 생성합니다.

        Build a hook that inserts one activity log row. Values are captured
        now, so the hook does not depend on objects mutated later.
        """
        data: dict[str, Any] = {
            "employee_id": employee.id,
            "company_id": employee.company_id,
            "activity_type": activity_type,
            "title": title,
            "description": description,
            "activity_time": activity_time,
            "latitude": latitude,
            "longitude": longitude,
            "location_address": location_address,
            "details": details,
        }

        async def write_activity_log(db: AsyncSession) -> None:
            await activity_log_repository.create(db, data)

        return write_activity_log

    async def list_logs(
        self,
        db: AsyncSession,
        employee_id: UUID,
        now: datetime,
        period: str | None = None,
        activity_type: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ActivityLog], int]:
        """기간 필터로 내 활동 로그를 조회합니다.

        List the employee's logs. ``period`` is one of today, week, month.

        Raises:
            BadRequestError: 알 수 없는 기간 (Unknown period)
        """
        since: datetime | None = None
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if period == "today":
            since = midnight
        elif period == "week":
            since = midnight - timedelta(days=midnight.weekday())
        elif period == "month":
            since = midnight.replace(day=1)
        elif period is not None:
            raise BadRequestError(f"Unknown period: {period} (use today, week or month)")

        return await activity_log_repository.get_employee_logs(
            db, employee_id, since=since, activity_type=activity_type, page=page, per_page=per_page,
        )

    def build_response(self, log: ActivityLog) -> dict:
        return {
            "id": str(log.id),
            "activity_type": log.activity_type,
            "title": log.title,
            "description": log.description,
            "activity_time": log.activity_time,
            "latitude": log.latitude,
            "longitude": log.longitude,
            "location_address": log.location_address,
            "metadata": log.details,
        }


# 싱글턴 인스턴스 (Singleton instance)
activity_log_service: ActivityLogService = ActivityLogService()
