# relgraph/core/rate_limit.py

import logging
import math
from collections import defaultdict
from functools import lru_cache
from time import monotonic
from typing import Dict, List, Protocol
from fastapi import Depends, Request
from relgraph.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)


class RateLimitStore(Protocol):
    """클라이언트별 요청 시각 저장소"""

    def get(self, key: str) -> List[float]: ...

    def set(self, key: str, timestamps: List[float]) -> None: ...

    def sweep(self, older_than: float) -> int: ...


class InMemoryRateLimitStore:
    """프로세스 내 저장소 (재시작 시 초기화)"""

    def __init__(self):
        self._requests: Dict[str, List[float]] = defaultdict(list)

    def get(self, key: str) -> List[float]:
        return list(self._requests.get(key, ()))

    def set(self, key: str, timestamps: List[float]) -> None:
        if timestamps:
            self._requests[key] = list(timestamps)
        else:
            self._requests.pop(key, None)

    def sweep(self, older_than: float) -> int:
        """older_than 이전 기록만 남은 키 정리"""
        stale = [
            key for key, stamps in self._requests.items() if not stamps or stamps[-1] < older_than
        ]
        for key in stale:
            del self._requests[key]
        return len(stale)


@lru_cache()
def get_rate_limit_store() -> RateLimitStore:
    return InMemoryRateLimitStore()


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """슬라이딩 윈도우 요청 제한 의존성

    라우트마다 이름, 윈도우 길이(초), 최대 요청 수를 따로 선언한다.
    """

    def __init__(self, name: str, window_seconds: float, max_requests: int):
        self.name = name
        self.window_seconds = window_seconds
        self.max_requests = max_requests

    def hit(self, store: RateLimitStore, client_id: str) -> None:
        key = f"{self.name}:{client_id}"
        now = monotonic()

        # 윈도우 밖의 기록 정리
        recent = [stamp for stamp in store.get(key) if now - stamp < self.window_seconds]

        if len(recent) >= self.max_requests:
            store.set(key, recent)
            retry_after = max(1, math.ceil(recent[0] + self.window_seconds - now))
            logger.warning(
                "요청 제한 초과: route=%s client=%s retry_after=%ss",
                self.name,
                client_id,
                retry_after,
            )
            raise RateLimitExceeded(retry_after, self.window_seconds, self.max_requests)

        recent.append(now)
        store.set(key, recent)

    async def __call__(
        self, request: Request, store: RateLimitStore = Depends(get_rate_limit_store)
    ):
        self.hit(store, client_address(request))
