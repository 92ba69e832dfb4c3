"""초기 데이터 시드 스크립트: 회사, 사무실, 근무 스케줄, 직원 생성.

Seed script. Creates a demo company with one office, a weekday schedule,
a manager and two staff members reporting to the manager, and prints an
access token for each employee.

Usage:
    python -m app.seed

Creates:
    - 1개 회사: "Demo Company" (1 company)
    - 1개 사무실: 반경 100m (1 office with a 100 m radius)
    - 1개 근무 스케줄: 월~금 08:00-17:00 (Mon-Fri 08:00-17:00 schedule)
    - 3명 직원: 매니저 1, 직원 2 (1 manager approving for 2 staff)
"""

import asyncio
from datetime import time

from sqlalchemy import select

from app.database import async_session, engine, Base
from app.models import Company, Employee, OfficeLocation, WorkSchedule
from app.utils.jwt import create_access_token


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with demo data.

    Idempotent: 이미 시드된 경우 건너뜁니다 (Skips if already seeded).
    """
    # 테이블 생성 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        result = await db.execute(select(Company).limit(1))
        if result.scalar_one_or_none():
            print("Already seeded. Skipping.")
            return

        company: Company = Company(name="Demo Company", code="DEMO")
        db.add(company)
        await db.flush()  # flush로 company.id 생성 (Flush to generate company.id)

        office: OfficeLocation = OfficeLocation(
            company_id=company.id,
            name="Head Office",
            code="HQ",
            address="Jl. Jend. Sudirman, Jakarta",
            latitude=-6.2088,
            longitude=106.8456,
            radius=100,
        )
        schedule: WorkSchedule = WorkSchedule(
            name="Regular 08-17",
            start_time=time(8, 0),
            end_time=time(17, 0),
            work_days=[1, 2, 3, 4, 5],
            total_hours=8.0,
            break_minutes=60,
        )
        db.add_all([office, schedule])
        await db.flush()

        manager: Employee = Employee(
            company_id=company.id,
            office_id=office.id,
            work_schedule_id=schedule.id,
            employee_code="M001",
            name="Demo Manager",
            position="Manager",
            department="Operations",
        )
        db.add(manager)
        await db.flush()

        staff: list[Employee] = [
            Employee(
                company_id=company.id,
                office_id=office.id,
                work_schedule_id=schedule.id,
                approver_id=manager.id,
                employee_code=f"S00{n}",
                name=f"Demo Staff {n}",
                position="Staff",
                department="Operations",
            )
            for n in (1, 2)
        ]
        db.add_all(staff)
        await db.commit()

        print(f"Seeded: company={company.id}, office={office.id}")
        for employee in [manager, *staff]:
            token = create_access_token({"sub": str(employee.id)})
            print(f"  {employee.employee_code} {employee.name}: {token}")


if __name__ == "__main__":
    asyncio.run(seed())
