"""기본 CRUD 레포지토리 (모든 레포지토리의 부모 클래스).

Base CRUD Repository. Parent class for all domain repositories.
Provides generic read, create and pagination helpers. Repositories only
flush; committing is the caller's job.

Usage:
    class VisitRepository(BaseRepository[Visit]):
        def __init__(self) -> None:
            super().__init__(Visit)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

# 제네릭 타입 변수 (Generic type variable representing a SQLAlchemy model)
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """제네릭 CRUD 레포지토리.

    Generic repository providing common database operations.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
        employee_id: UUID | None = None,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Retrieve a single record by its UUID.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 조회할 레코드의 UUID (UUID of the record to retrieve)
            employee_id: 소유 직원 필터, None이면 미적용
                         (Owner filter; only applied when the model has employee_id)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = select(self.model).where(self.model.id == record_id)

        # 소유자 범위 적용 (Restrict to the owning employee when requested)
        if employee_id is not None and hasattr(self.model, "employee_id"):
            query = query.where(self.model.employee_id == employee_id)

        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """정렬된 쿼리의 한 페이지와 전체 건수를 반환합니다.

        Run one page of an already ordered query. The total counts every
        row the query matches, ignoring the page window.

        Returns:
            tuple: (현재 페이지 레코드, 전체 건수) (Page rows, total matches)
        """
        total: int = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
        page_query: Select = query.offset((page - 1) * per_page).limit(per_page)
        return (await db.execute(page_query)).scalars().all(), total

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ModelType:
        """새 레코드를 생성합니다 (flush까지만 수행).

        Create a new record and flush it so database defaults and
        constraints apply immediately.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            obj_data: 생성할 레코드의 데이터 딕셔너리
                      (Dictionary of data for the new record)

        Returns:
            ModelType: 생성된 레코드 (The created record)
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def save(self, db: AsyncSession, db_obj: ModelType) -> ModelType:
        """변경된 레코드를 flush 합니다 (Flush pending changes of a loaded record)."""
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

