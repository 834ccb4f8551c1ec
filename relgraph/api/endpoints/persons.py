# relgraph/api/endpoints/persons.py

from typing import Optional
from fastapi import APIRouter, Depends, Query
from relgraph.schemas.person import PersonCreate, PersonCreateResponse, PersonListResponse
from relgraph.schemas.background import (
    BackgroundResponse,
    BackgroundUpsert,
    BackgroundUpsertResponse,
)
from relgraph.services.person_service import PersonService
from relgraph.core.rate_limit import RateLimiter
from relgraph.core.security import require_api_key, require_session_or_api_key
from relgraph.core.validation import json_body

router = APIRouter()

persons_limit = RateLimiter("persons", window_seconds=60, max_requests=100)
add_node_limit = RateLimiter("addNode", window_seconds=60, max_requests=30)
background_write_limit = RateLimiter("background", window_seconds=60, max_requests=30)


def get_person_service() -> PersonService:
    return PersonService()


@router.get(
    "/persons",
    response_model=PersonListResponse,
    summary="전체 인물 조회",
    description="관계가 없는 인물을 포함한 전체 인물 목록을 이름순으로 조회합니다.",
    dependencies=[Depends(persons_limit)],
)
async def get_all_persons(person_service: PersonService = Depends(get_person_service)):
    persons = await person_service.get_all_persons()
    return PersonListResponse(persons=persons, count=len(persons))


@router.post(
    "/addNode",
    response_model=PersonCreateResponse,
    summary="인물 추가",
    description="새 인물을 추가합니다. 같은 이름이 있으면 409를 반환합니다.",
    dependencies=[Depends(add_node_limit), Depends(require_api_key)],
)
async def add_node(
    person_data: PersonCreate = Depends(json_body(PersonCreate)),
    person_service: PersonService = Depends(get_person_service),
):
    return await person_service.add_person(person_data)


@router.get(
    "/background",
    response_model=BackgroundResponse,
    summary="인물 배경 정보",
    description="인물의 출생 연도와 배경 설명을 조회합니다.",
)
async def get_background(
    id: Optional[str] = Query(default=None, description="인물 ID"),
    person_service: PersonService = Depends(get_person_service),
):
    background = await person_service.get_background(id)
    return BackgroundResponse(background=background)


@router.put(
    "/background",
    response_model=BackgroundUpsertResponse,
    summary="인물 배경 정보 저장",
    description="배경 정보가 없으면 생성하고, 있으면 수정합니다.",
    dependencies=[Depends(background_write_limit), Depends(require_session_or_api_key)],
)
async def upsert_background(
    background_data: BackgroundUpsert = Depends(json_body(BackgroundUpsert)),
    person_service: PersonService = Depends(get_person_service),
):
    return await person_service.upsert_background(background_data)
