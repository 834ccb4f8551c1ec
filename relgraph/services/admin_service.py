# relgraph/services/admin_service.py

import asyncio
import logging
import random
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Dict, Optional, Protocol
from relgraph.core.config import Settings
from relgraph.core.exceptions import PermissionDenied, ServerMisconfigured

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AdminSession:
    token: str
    username: str
    created_at: datetime

    def expires_at(self, ttl: timedelta) -> datetime:
        return self.created_at + ttl

    def is_expired(self, ttl: timedelta, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at(ttl)


class SessionStore(Protocol):
    """세션 토큰 저장소"""

    def get(self, token: str) -> Optional[AdminSession]: ...

    def set(self, token: str, session: AdminSession) -> None: ...

    def delete(self, token: str) -> bool: ...

    def sweep(self, ttl: timedelta, now: datetime) -> int: ...


class InMemorySessionStore:

    def __init__(self):
        self._sessions: Dict[str, AdminSession] = {}

    def get(self, token: str) -> Optional[AdminSession]:
        return self._sessions.get(token)

    def set(self, token: str, session: AdminSession) -> None:
        self._sessions[token] = session

    def delete(self, token: str) -> bool:
        return self._sessions.pop(token, None) is not None

    def sweep(self, ttl: timedelta, now: datetime) -> int:
        expired = [
            token for token, session in self._sessions.items() if session.is_expired(ttl, now)
        ]
        for token in expired:
            del self._sessions[token]
        return len(expired)


@lru_cache()
def get_session_store() -> SessionStore:
    return InMemorySessionStore()


class AdminService:

    def __init__(self, settings: Settings, store: SessionStore):
        self.settings = settings
        self.store = store
        self.ttl = timedelta(hours=settings.session_ttl_hours)

    async def login(self, username: str, password: str) -> AdminSession:
        """관리자 로그인, 성공 시 세션 토큰 발급"""
        if not self.settings.admin_password:
            logger.error("서버 설정 오류: 관리자 비밀번호가 설정되지 않았습니다")
            raise ServerMisconfigured()

        username_ok = secrets.compare_digest(
            username.encode("utf-8"), self.settings.admin_username.encode("utf-8")
        )
        password_ok = secrets.compare_digest(
            password.encode("utf-8"), self.settings.admin_password.encode("utf-8")
        )

        if not (username_ok and password_ok):
            # 실패 응답 시간을 흩뜨려 타이밍 분석 방지
            await asyncio.sleep(random.uniform(0.1, 0.3))
            logger.warning("관리자 로그인 실패: username=%s", username[:32])
            raise PermissionDenied("아이디 또는 비밀번호가 올바르지 않습니다")

        token = secrets.token_hex(32)
        session = AdminSession(token=token, username=username, created_at=utcnow())
        self.store.set(token, session)
        logger.info("관리자 로그인 성공: username=%s", username)
        return session

    def verify(self, token: Optional[str]) -> Optional[AdminSession]:
        """세션 토큰 검증 (만료 시 즉시 삭제)"""
        if not token:
            return None

        session = self.store.get(token)
        if session is None:
            return None

        if session.is_expired(self.ttl):
            self.store.delete(token)
            logger.info("만료된 세션 제거: username=%s", session.username)
            return None

        return session

    def logout(self, token: str) -> bool:
        return self.store.delete(token)

    def sweep_expired(self) -> int:
        """만료 세션 일괄 정리"""
        return self.store.sweep(self.ttl, utcnow())
