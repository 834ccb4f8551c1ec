# relgraph/api/endpoints/system.py

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from relgraph.database import get_db, run_query

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """서비스 헬스체크"""
    try:
        run_query(db, "SELECT 1").scalar()
    except SQLAlchemyError as e:
        logger.error("헬스체크 DB 연결 실패: %s", e)
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "service": "relgraph", "database": "unreachable"},
        )
    return {"status": "healthy", "service": "relgraph", "database": "ok"}
