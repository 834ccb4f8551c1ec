# relgraph/services/scheduler_service.py

import asyncio
import logging
from datetime import datetime
from time import monotonic
from relgraph.core.rate_limit import RateLimitStore
from relgraph.services.admin_service import AdminService

logger = logging.getLogger(__name__)

# 가장 긴 요청 제한 윈도우보다 길게 잡음
RATE_LIMIT_RETENTION_SECONDS = 3600


class SchedulerService:
    """만료 세션 / 오래된 요청 제한 기록 정리"""

    def __init__(
        self,
        admin_service: AdminService,
        rate_limit_store: RateLimitStore,
        interval_seconds: int = 3600,
    ):
        self.admin_service = admin_service
        self.rate_limit_store = rate_limit_store
        self.interval_seconds = interval_seconds

    def sweep(self) -> dict:
        """한 번 정리 실행"""
        expired_sessions = self.admin_service.sweep_expired()
        stale_clients = self.rate_limit_store.sweep(monotonic() - RATE_LIMIT_RETENTION_SECONDS)

        logger.info(
            "정리 완료 (%s): 만료 세션 %s개, 요청 기록 %s개",
            datetime.now().isoformat(timespec="seconds"),
            expired_sessions,
            stale_clients,
        )
        return {"expired_sessions": expired_sessions, "stale_clients": stale_clients}

    async def run_scheduler(self):
        """스케줄러 실행"""
        logger.info("세션 정리 스케줄러 시작 (주기 %s초)", self.interval_seconds)
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.sweep()
            except Exception:
                # 정리 실패는 다음 주기에 다시 시도
                logger.exception("세션 정리 스케줄러 오류")
