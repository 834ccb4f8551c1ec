# relgraph/core/security.py

import logging
from typing import Optional
from fastapi import Depends, Request
from relgraph.core.config import Settings, get_settings
from relgraph.core.exceptions import (
    AuthenticationRequired,
    PermissionDenied,
    ServerMisconfigured,
)
from relgraph.services.admin_service import (
    AdminService,
    AdminSession,
    SessionStore,
    get_session_store,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
API_KEY_QUERY = "key"
SESSION_HEADER = "x-session-token"


def get_admin_service(
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
) -> AdminService:
    return AdminService(settings, store)


def provided_api_key(request: Request) -> Optional[str]:
    return request.headers.get(API_KEY_HEADER) or request.query_params.get(API_KEY_QUERY)


def check_api_key(request: Request, settings: Settings) -> None:
    """공유 API 키 검증"""
    if not settings.api_key:
        logger.error("서버 설정 오류: API 키가 설정되지 않았습니다")
        raise ServerMisconfigured()

    provided = provided_api_key(request)
    if not provided:
        raise AuthenticationRequired(
            "x-api-key 헤더 또는 key 쿼리 파라미터로 API 키를 전달해주세요"
        )

    if provided != settings.api_key:
        logger.warning(
            "API 키 검증 실패: key=%s... ip=%s user_agent=%s url=%s",
            provided[:8],
            request.client.host if request.client else "unknown",
            request.headers.get("user-agent"),
            request.url.path,
        )
        raise PermissionDenied("제공된 API 키가 올바르지 않습니다")


async def require_api_key(request: Request, settings: Settings = Depends(get_settings)):
    check_api_key(request, settings)


async def require_session(
    request: Request, admin_service: AdminService = Depends(get_admin_service)
) -> AdminSession:
    """관리자 세션 토큰 필수"""
    token = request.headers.get(SESSION_HEADER)
    if not token:
        raise AuthenticationRequired("x-session-token 헤더로 세션 토큰을 전달해주세요")

    session = admin_service.verify(token)
    if session is None:
        raise AuthenticationRequired("세션이 만료되었거나 유효하지 않습니다")
    return session


async def require_session_or_api_key(
    request: Request,
    settings: Settings = Depends(get_settings),
    admin_service: AdminService = Depends(get_admin_service),
) -> Optional[AdminSession]:
    """세션 토큰 우선, 없으면 API 키"""
    token = request.headers.get(SESSION_HEADER)
    session = admin_service.verify(token)
    if session is not None:
        return session

    if token and not provided_api_key(request):
        raise AuthenticationRequired("세션이 만료되었거나 유효하지 않습니다")

    check_api_key(request, settings)
    return None
