# relgraph/api/endpoints/__init__.py

from fastapi import APIRouter
from . import persons, relations, admin, system, images

api_router = APIRouter()

api_router.include_router(relations.router, tags=["관계 그래프"])
api_router.include_router(persons.router, tags=["인물"])
api_router.include_router(admin.router, prefix="/admin", tags=["관리자"])
