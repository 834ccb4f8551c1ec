# relgraph/core/logging.py

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """애플리케이션 로깅 설정"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("relgraph").setLevel(level.upper())


def truncate(value, limit: int = 50):
    """로그용 문자열 자르기"""
    if isinstance(value, str) and len(value) > limit:
        return value[:limit] + "..."
    return value
