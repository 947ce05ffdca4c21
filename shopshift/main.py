"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 예외 처리기, 라우터 등록.

FastAPI application entry point. Configures logging, CORS, error handlers
and the health check, and includes the shop and cron routers.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from shopshift.config import settings
from shopshift.middleware.axiom_logging import AxiomLoggingMiddleware
from shopshift.utils.exceptions import StoreError

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom API 로깅 미들웨어 — CORS보다 먼저 등록하여 모든 요청을 캡처
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# 예외 처리기 — 모든 오류를 {"error": message} 형태로 응답
# Exception handlers — every failure is rendered as {"error": message}
# ---------------------------------------------------------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 검증 실패를 422로 응답합니다 (First validation error only)."""
    errors = exc.errors()
    message: str = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse(status_code=422, content={"error": message})


@app.exception_handler(SQLAlchemyError)
async def store_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """저장소 오류를 502로 응답합니다 (Driver message surfaced verbatim)."""
    error = StoreError(str(getattr(exc, "orig", None) or exc))
    logger.error("Data store error on %s %s: %s", request.method, request.url.path, error.detail)
    return JSONResponse(status_code=error.status_code, content={"error": error.detail})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
from shopshift.api.shops import shops_router  # noqa: E402
from shopshift.api.cron import router as cron_router  # noqa: E402

app.include_router(shops_router, prefix="/api/v1")
app.include_router(cron_router, prefix="/api/v1", tags=["Cron"])
