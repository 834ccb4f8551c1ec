# relgraph/database.py

import logging
import time
from typing import Any, Mapping, Optional
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv
from relgraph.core.config import get_settings
from relgraph.core.exceptions import QueryParameterError
from relgraph.core.logging import truncate

# .env 파일 로드
load_dotenv()

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # 인메모리 DB는 커넥션 하나를 공유해야 테이블이 유지됨
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": 0,  # 풀 크기를 상한으로 고정
        "pool_pre_ping": True,  # 연결 상태 확인
        "pool_recycle": 300,  # 5분마다 연결 재사용
    }


# 엔진 생성
engine = create_engine(
    settings.database_url,
    echo=settings.debug,  # SQL 로그 출력
    **_engine_options(settings.database_url),
)

# 세션 팩토리 생성
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Base 클래스 생성
Base = declarative_base()


# 의존성 주입용 함수
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_query(db: Session, sql: str, params: Optional[Mapping[str, Any]] = None):
    """파라미터 바인딩 SQL 실행 (플레이스홀더 수 검증 포함)"""
    if not isinstance(sql, str):
        raise QueryParameterError("SQL 쿼리는 문자열이어야 합니다")

    params = dict(params or {})
    statement = text(sql)
    placeholders = set(statement.compile().params)
    if len(placeholders) != len(params) or placeholders != set(params):
        raise QueryParameterError(
            f"SQL 파라미터 수 불일치: 필요 {len(placeholders)}개, 전달 {len(params)}개"
        )

    started = time.perf_counter()
    try:
        result = db.execute(statement, params)
    except SQLAlchemyError as e:
        duration = (time.perf_counter() - started) * 1000
        logger.error(
            "쿼리 실패 (%.1fms): sql=%s params=%s error=%s",
            duration,
            truncate(sql, 100),
            {key: truncate(value) for key, value in params.items()},
            e,
        )
        raise

    duration = (time.perf_counter() - started) * 1000
    logger.debug("쿼리 성공 (%.1fms): sql=%s", duration, truncate(sql))
    return result


def check_connection() -> None:
    """데이터베이스 연결 테스트"""
    with SessionLocal() as db:
        value = run_query(db, "SELECT 1").scalar()
    logger.info("데이터베이스 연결 성공 (SELECT 1 -> %s)", value)
