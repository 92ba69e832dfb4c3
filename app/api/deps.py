"""FastAPI 의존성 주입 모듈 (인증, 정책).

FastAPI dependency injection module. Resolves the authenticated employee
from the JWT and exposes the attendance policy so tests can override it.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    3. 페이로드의 "sub" 필드로 DB에서 직원을 조회
       (Employee is fetched from DB using payload "sub" field)
    4. 직원 활성 상태를 확인 (Employee active status is verified)
"""

from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import AttendancePolicy, policy
from app.database import get_db
from app.models.user import Employee
from app.repositories.user_repository import employee_repository
from app.utils.exceptions import UnauthorizedError
from app.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 (Extracts JWT token from Authorization: Bearer <token> header)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_employee(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Employee:
    """JWT 토큰에서 현재 인증된 직원을 추출합니다.

    Decode JWT from the Authorization header and return the authenticated
    employee. Validates signature, expiration, token type and that the
    employee exists and is active.

    Raises:
        UnauthorizedError: 토큰 누락/무효/만료 또는 직원 없음/비활성
                           (Missing, invalid or expired token; unknown or inactive employee)
    """
    if credentials is None:
        raise UnauthorizedError()
    try:
        payload: dict = decode_token(credentials.credentials)
        if payload.get("type") != "access":
            raise UnauthorizedError("Invalid token type")
        employee_id = UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid or expired token")

    employee: Employee | None = await employee_repository.get_by_id(db, employee_id)
    if employee is None or not employee.is_active:
        raise UnauthorizedError("Employee not found or inactive")
    return employee


def get_policy() -> AttendancePolicy:
    """FastAPI 의존성: 근태 정책 (Dependency returning the attendance policy)."""
    return policy
