# relgraph/main.py

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from relgraph.core.config import get_settings
from relgraph.core.exceptions import GraphServiceError
from relgraph.core.logging import configure_logging
from relgraph.core.rate_limit import get_rate_limit_store
from relgraph.core.validation import describe_error
from relgraph.api.endpoints import api_router, images, system
from relgraph.database import Base, check_connection, engine
from relgraph.services.admin_service import AdminService, get_session_store
from relgraph.services.scheduler_service import SchedulerService
from relgraph import models  # noqa: F401  테이블 등록

# 설정 로드
settings = get_settings()

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# 스케줄러 전역 변수
scheduler_task = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 시작 시
    global scheduler_task
    try:
        check_connection()
        Base.metadata.create_all(bind=engine)
    except Exception:
        # DB 없이 기동하지 않음
        logger.critical("서버 시작 실패: 데이터베이스에 연결할 수 없습니다", exc_info=True)
        raise

    scheduler_service = SchedulerService(
        AdminService(settings, get_session_store()),
        get_rate_limit_store(),
        interval_seconds=settings.session_sweep_interval_seconds,
    )
    scheduler_task = asyncio.create_task(scheduler_service.run_scheduler())
    logger.info("%s 시작됨", settings.app_name)

    yield

    # 종료 시
    if scheduler_task:
        scheduler_task.cancel()
        try:
            await scheduler_task
        except asyncio.CancelledError:
            pass
    engine.dispose()
    logger.info("%s 종료됨", settings.app_name)


# FastAPI 앱 생성
app = FastAPI(
    title=settings.app_name,
    description="Relationship Graph Service",
    version="1.0.0",
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# CORS 미들웨어
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, payload: dict, headers: dict = None) -> JSONResponse:
    """공통 오류 응답 {error, message, timestamp, details?}"""
    payload = dict(payload)
    payload["timestamp"] = datetime.now(timezone.utc).isoformat()
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    client = request.client.host if request.client else "unknown"
    logger.info("%s %s - IP: %s", request.method, request.url.path, client)
    return await call_next(request)


@app.exception_handler(GraphServiceError)
async def graph_service_error_handler(request: Request, exc: GraphServiceError):
    if exc.status_code >= 500:
        # 내부 사유는 로그에만 남김
        logger.error("%s %s 실패: %s", request.method, request.url.path, exc.message)
        payload = {"error": exc.error, "message": type(exc).default_message}
    else:
        payload = exc.to_payload()
    return error_response(exc.status_code, payload, headers=exc.headers())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = [message for error in exc.errors() for message in describe_error(error)]
    return error_response(
        400,
        {"error": "validation_failed", "message": "입력값 검증에 실패했습니다", "details": details},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        payload = {"error": "not_found", "message": f"경로 {request.url.path}을(를) 찾을 수 없습니다"}
    elif exc.status_code == 405:
        payload = {"error": "method_not_allowed", "message": "허용되지 않은 메서드입니다"}
    else:
        payload = {"error": "http_error", "message": str(exc.detail)}
    return error_response(exc.status_code, payload, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("처리되지 않은 오류: %s %s", request.method, request.url.path)
    return error_response(
        500,
        {"error": "internal_error", "message": GraphServiceError.default_message},
    )


# 라우터 등록
app.include_router(api_router, prefix="/api")
app.include_router(images.router, tags=["이미지"])
app.include_router(system.router, tags=["시스템"])


@app.get("/")
def read_root():
    """서비스 루트"""
    return {
        "service": "relgraph",
        "description": "Relationship Graph Service",
        "version": "1.0.0",
        "docs": "/docs",
        "graph": "/api/graph",
        "image": "/custom.png",
        "share": "/graph",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("relgraph.main:app", host="0.0.0.0", port=3000)
