"""애플리케이션 수준 테스트: 헬스 체크, 인증, 저장소 오류, 로깅 헬퍼.

Application-level tests: health check, token handling, the persistence
fault handler and the Axiom logging helpers.
"""

import json

from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from app.middleware.axiom_logging import _error_fields, _mask
from app.repositories.attendance_repository import attendance_repository
from app.utils.jwt import create_access_token
from tests.conftest import at_office, auth_header

APP = "/api/v1/app"


class TestHealth:

    async def test_health(self, client: AsyncClient):
        res = await client.get("/health")
        assert res.status_code == 200
        assert res.json() == {"status": "ok"}


class TestAuthentication:
    """JWT 인증 테스트."""

    async def test_garbage_token(self, client: AsyncClient, staff):
        res = await client.get(f"{APP}/my/attendance/status", headers=auth_header("not-a-jwt"))
        assert res.status_code == 401
        assert res.json()["detail"]["reason"] == "unauthorized"

    async def test_expired_token(self, client: AsyncClient, staff):
        token = create_access_token({"sub": str(staff.id)}, expires_minutes=-1)
        res = await client.get(f"{APP}/my/attendance/status", headers=auth_header(token))
        assert res.status_code == 401

    async def test_unknown_employee(self, client: AsyncClient, staff):
        token = create_access_token({"sub": "00000000-0000-0000-0000-000000000000"})
        res = await client.get(f"{APP}/my/attendance/status", headers=auth_header(token))
        assert res.status_code == 401


class TestPersistenceFault:
    """저장소 장애 시 503 응답."""

    async def test_store_failure_is_503(self, client: AsyncClient, staff_token, monkeypatch):
        async def unavailable(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, ConnectionError("connection refused"))

        monkeypatch.setattr(attendance_repository, "get_employee_day", unavailable)
        res = await client.post(f"{APP}/my/attendance/clock", json=at_office(), headers=auth_header(staff_token))
        assert res.status_code == 503
        assert res.json()["detail"]["reason"] == "persistence_fault"


class TestAxiomHelpers:
    """Axiom 로깅 헬퍼 테스트."""

    def test_mask_nested_secrets(self):
        masked = _mask({"latitude": -6.2, "auth": {"access_token": "abc", "user": "s001"}})
        assert masked == {"latitude": -6.2, "auth": {"access_token": "***", "user": "s001"}}

    def test_error_fields_from_reason_detail(self):
        body = json.dumps({"detail": {"reason": "outside_radius", "message": "Too far"}}).encode()
        assert _error_fields(body) == {"error_reason": "outside_radius", "error": "Too far"}

    def test_error_fields_from_validation_detail(self):
        body = json.dumps({"detail": [{"loc": ["body", "latitude"], "msg": "too large"}]}).encode()
        assert _error_fields(body)["error_reason"] == "request_validation"

    def test_error_fields_from_plain_text(self):
        assert _error_fields(b"Internal Server Error") == {"error": "Internal Server Error"}
