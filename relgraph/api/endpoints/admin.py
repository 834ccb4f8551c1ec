# relgraph/api/endpoints/admin.py

from fastapi import APIRouter, Depends
from relgraph.schemas.admin import LoginRequest, LoginResponse, LogoutResponse, SessionStatus
from relgraph.services.admin_service import AdminService, AdminSession
from relgraph.core.rate_limit import RateLimiter
from relgraph.core.security import get_admin_service, require_session
from relgraph.core.validation import json_body

router = APIRouter()

login_limit = RateLimiter("adminLogin", window_seconds=15 * 60, max_requests=10)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="관리자 로그인",
    description="관리자 계정으로 로그인하고 24시간 유효한 세션 토큰을 발급받습니다.",
    dependencies=[Depends(login_limit)],
)
async def login(
    login_data: LoginRequest = Depends(json_body(LoginRequest)),
    admin_service: AdminService = Depends(get_admin_service),
):
    session = await admin_service.login(login_data.username, login_data.password)
    return LoginResponse(
        token=session.token,
        username=session.username,
        expires_at=session.expires_at(admin_service.ttl),
    )


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="관리자 로그아웃",
    description="현재 세션 토큰을 무효화합니다.",
)
async def logout(
    session: AdminSession = Depends(require_session),
    admin_service: AdminService = Depends(get_admin_service),
):
    admin_service.logout(session.token)
    return LogoutResponse()


@router.get(
    "/verify",
    response_model=SessionStatus,
    summary="세션 확인",
    description="세션 토큰이 유효한지 확인합니다.",
)
async def verify(
    session: AdminSession = Depends(require_session),
    admin_service: AdminService = Depends(get_admin_service),
):
    return SessionStatus(
        username=session.username,
        created_at=session.created_at,
        expires_at=session.expires_at(admin_service.ttl),
    )
