"""테스트 인프라: 인메모리 SQLite DB, 세션, 시계, httpx 클라이언트 픽스처.

Test infrastructure. Each test gets a fresh in-memory SQLite schema
(aiosqlite), a session shared with the app through ``get_db``, and a
FixedClock shared through ``get_clock``.

Seed data is committed: services roll back on IntegrityError, which would
otherwise discard uncommitted fixtures.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, time

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import *  # noqa: F401,F403  (register all models with metadata)
from app.models.organization import Company, OfficeLocation, WorkSchedule
from app.models.user import Employee
from app.utils.clock import FixedClock, get_clock
from app.utils.jwt import create_access_token

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# 사무실 좌표 (Office coordinate used by the fixtures)
OFFICE_LAT = -6.2088
OFFICE_LNG = 106.8456

# 2026-10-19 는 월요일 (a Monday)
MONDAY = datetime(2026, 10, 19, 7, 55)


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 시계, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 테스트마다 새 스키마를 생성합니다."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    """고정 시계: 기본값은 월요일 07:55 (Fixed clock, Monday 07:55)."""
    return FixedClock(MONDAY)


@pytest_asyncio.fixture
async def client(db: AsyncSession, clock: FixedClock) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트: DB 세션과 시계를 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def company(db: AsyncSession) -> Company:
    """테스트 회사를 생성합니다."""
    c = Company(name="Test Corp", code="TEST01")
    db.add(c)
    await db.commit()
    return c


@pytest_asyncio.fixture
async def office(db: AsyncSession, company: Company) -> OfficeLocation:
    """반경 100m 사무실을 생성합니다."""
    o = OfficeLocation(
        company_id=company.id,
        name="Head Office",
        code="HQ",
        address="Jl. Sudirman",
        latitude=OFFICE_LAT,
        longitude=OFFICE_LNG,
        radius=100,
    )
    db.add(o)
    await db.commit()
    return o


@pytest_asyncio.fixture
async def schedule(db: AsyncSession) -> WorkSchedule:
    """월~금 08:00-17:00 근무 스케줄을 생성합니다."""
    s = WorkSchedule(
        name="Regular",
        start_time=time(8, 0),
        end_time=time(17, 0),
        work_days=[1, 2, 3, 4, 5],
    )
    db.add(s)
    await db.commit()
    return s


@pytest_asyncio.fixture
async def manager(db: AsyncSession, company, office, schedule) -> Employee:
    """승인권자(매니저)를 생성합니다."""
    e = Employee(
        company_id=company.id,
        office_id=office.id,
        work_schedule_id=schedule.id,
        employee_code="M001",
        name="Test Manager",
        position="Manager",
    )
    db.add(e)
    await db.commit()
    return e


@pytest_asyncio.fixture
async def staff(db: AsyncSession, company, office, schedule, manager) -> Employee:
    """매니저에게 보고하는 직원을 생성합니다."""
    e = Employee(
        company_id=company.id,
        office_id=office.id,
        work_schedule_id=schedule.id,
        approver_id=manager.id,
        employee_code="S001",
        name="Test Staff",
        position="Staff",
    )
    db.add(e)
    await db.commit()
    return e


@pytest_asyncio.fixture
async def outsider(db: AsyncSession, company, office, schedule) -> Employee:
    """승인 관계가 없는 다른 직원을 생성합니다."""
    e = Employee(
        company_id=company.id,
        office_id=office.id,
        work_schedule_id=schedule.id,
        employee_code="S999",
        name="Other Staff",
    )
    db.add(e)
    await db.commit()
    return e


def make_token(employee: Employee) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(employee.id)})


@pytest.fixture
def manager_token(manager) -> str:
    return make_token(manager)


@pytest.fixture
def staff_token(staff) -> str:
    return make_token(staff)


@pytest.fixture
def outsider_token(outsider) -> str:
    return make_token(outsider)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def at_office() -> dict[str, float]:
    """사무실 좌표의 출퇴근 요청 본문 (Clock body at the office)."""
    return {"latitude": OFFICE_LAT, "longitude": OFFICE_LNG}
