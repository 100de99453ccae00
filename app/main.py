"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 예외 핸들러, 라우터 등록.

FastAPI application entry point — Middleware, exception handlers and router
registration. All routes live under ``/api``; only ``/api/health`` and
``/api/login`` are public.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.services.auth_service import auth_service
from app.utils.exceptions import StorageError
from app.utils.logging_config import setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # 자격 증명 미설정 경고 — Login always fails without a configured pair
    if not auth_service.credentials_configured():
        logger.warning("APP_USERNAME or APP_PASSWORD not set; login will always fail")
    else:
        logger.info("Auth credentials loaded for user: %s", settings.APP_USERNAME)
    yield


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# API 로깅 미들웨어 — CORS보다 먼저 등록하여 모든 요청을 캡처
# (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Reference-Preserved"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 형식 오류를 400으로 반환합니다 (Malformed requests are 400, not 422)."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    detail = f"{location}: {message}" if location else message
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """저장소 오류 — 로그 후 500, 재시도 없음 (Logged, surfaced as 500, no retry)."""
    logger.exception("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    error = StorageError()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


@app.get("/api/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
from app.api.auth import router as auth_router  # noqa: E402
from app.api.bugs import router as bugs_router  # noqa: E402

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(bugs_router, prefix="/api/bugs", tags=["Bugs"])
