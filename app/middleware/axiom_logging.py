"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per API call to Axiom: endpoint, method,
masked request data, status code and, for error responses, the
``reason`` code and message from the ``{"reason", "message"}`` detail.
Coordinates are kept; credentials and tokens are masked.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings

logger = logging.getLogger(__name__)

# 마스킹 대상 필드 패턴 (Fields to mask in request bodies and query strings)
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 (Paths excluded from logging)
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

_MAX_DEPTH = 5
_MAX_ITEMS = 20
_MAX_MESSAGE = 500


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 재귀 마스킹 (Recursively mask sensitive fields)."""
    if depth > _MAX_DEPTH:
        return "..."
    if isinstance(data, dict):
        return {
            key: "***" if _SENSITIVE_KEYS.search(str(key)) else _mask(value, depth + 1)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:_MAX_ITEMS]]
    return data


def _error_fields(body: bytes) -> dict[str, Any]:
    """에러 응답 본문에서 사유 코드와 메시지를 추출합니다.

    Pull ``reason`` and ``message`` out of an error body. Request
    validation errors carry a list detail and are summarized.
    """
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {"error": body.decode("utf-8", errors="replace")[:_MAX_MESSAGE]}

    detail = payload.get("detail", payload) if isinstance(payload, dict) else payload
    if isinstance(detail, dict):
        return {
            "error_reason": detail.get("reason"),
            "error": str(detail.get("message", ""))[:_MAX_MESSAGE],
        }
    if isinstance(detail, list):
        return {"error_reason": "request_validation", "error": json.dumps(_mask(detail))[:_MAX_MESSAGE]}
    return {"error": str(detail)[:_MAX_MESSAGE]}


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Middleware that logs API calls to Axiom. Pass-through when Axiom is not
    configured.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def _read_body(self, request: Request) -> Any:
        if request.method not in ("POST", "PUT", "PATCH"):
            return None
        raw = await request.body()
        if not raw:
            return None
        try:
            return _mask(json.loads(raw))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "(non-json body)"

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _SKIP_PATHS or self._client is None:
            return await call_next(request)

        started = time.perf_counter()
        event: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "status_code": 500,
        }
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))
        request_body = await self._read_body(request)
        if request_body is not None:
            event["request_body"] = request_body

        try:
            response = await call_next(request)
            event["status_code"] = response.status_code

            if response.status_code >= 400:
                body = b""
                async for chunk in response.body_iterator:
                    body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                event.update(_error_fields(body))
                # 소비한 본문으로 응답 재구성 (Rebuild the response from the consumed body)
                response = Response(
                    content=body,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            try:
                self._client.ingest_events(self._dataset, [event])
            except Exception:
                # 로깅 실패가 요청 처리에 영향주지 않도록 (never fail the request on log failure)
                logger.warning("Axiom ingest failed for %s %s", event["method"], event["path"], exc_info=True)

        return response
