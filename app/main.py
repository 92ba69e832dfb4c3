"""FastAPI 애플리케이션 엔트리포인트: 미들웨어 및 라우터 등록.

FastAPI application entry point. Configures logging, middleware, the
persistence-fault handler, health check and the app router.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.utils.exceptions import ErrorReason

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom API 로깅 미들웨어 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 (Cross-Origin Resource Sharing middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def persistence_fault_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """저장소 오류 처리 (커밋되지 않은 트랜잭션은 세션 종료 시 롤백).

    Answer storage failures with 503. The request's transaction was never
    committed and is rolled back when the session closes.
    """
    logger.error("Persistence fault on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=503,
        content={
            "detail": {
                "reason": ErrorReason.PERSISTENCE_FAULT.value,
                "message": "The attendance store is unavailable, please retry",
            }
        },
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# 라우터 등록 (Router registration)
from app.api.app import app_router  # noqa: E402

app.include_router(app_router, prefix="/api/v1/app")
