# relgraph/api/endpoints/relations.py

from typing import Optional
from fastapi import APIRouter, Depends, Path, Query
from relgraph.schemas.graph import GraphCounts, GraphResponse
from relgraph.schemas.relation import (
    EdgeCreate,
    EdgeDelete,
    EdgeDeleteResponse,
    EdgeMutationResponse,
    PersonRelationsResponse,
)
from relgraph.services.relation_service import RelationService
from relgraph.core.config import Settings, get_settings
from relgraph.core.rate_limit import RateLimiter
from relgraph.core.security import require_api_key, require_session
from relgraph.core.validation import json_body

router = APIRouter()

graph_limit = RateLimiter("graph", window_seconds=60, max_requests=200)
add_edge_limit = RateLimiter("addEdge", window_seconds=60, max_requests=50)
update_edge_limit = RateLimiter("updateEdge", window_seconds=60, max_requests=50)
delete_edge_limit = RateLimiter("deleteEdge", window_seconds=60, max_requests=20)


def get_relation_service(settings: Settings = Depends(get_settings)) -> RelationService:
    return RelationService(conflict_mode=settings.edge_conflict_mode)


@router.get(
    "/graph",
    response_model=GraphResponse,
    response_model_exclude_none=True,
    summary="관계 그래프 조회",
    description="관계가 하나 이상 있는 인물만 노드로 포함한 그래프를 조회합니다.",
    dependencies=[Depends(graph_limit)],
)
async def get_graph(relation_service: RelationService = Depends(get_relation_service)):
    graph = await relation_service.get_graph()
    return GraphResponse(
        nodes=graph.nodes,
        edges=graph.edges,
        counts=GraphCounts(
            total_persons=graph.total_persons,
            connected_persons=len(graph.nodes),
            relations=len(graph.edges),
        ),
    )


@router.get(
    "/person/{person_id}/relations",
    response_model=PersonRelationsResponse,
    summary="인물 관계 조회",
    description="인물의 관계 목록, 이웃 인물, 연결 수를 조회합니다.",
)
async def get_person_relations(
    person_id: str = Path(description="인물 ID"),
    relation_service: RelationService = Depends(get_relation_service),
):
    return await relation_service.get_person_relations(person_id)


@router.get(
    "/relations",
    response_model=PersonRelationsResponse,
    summary="인물 관계 조회 (쿼리)",
    description="/person/{id}/relations 와 같은 결과를 id 쿼리 파라미터로 조회합니다.",
)
async def get_relations_by_query(
    id: Optional[str] = Query(default=None, description="인물 ID"),
    relation_service: RelationService = Depends(get_relation_service),
):
    return await relation_service.get_person_relations(id)


@router.post(
    "/addEdge",
    response_model=EdgeMutationResponse,
    summary="관계 추가",
    description="두 인물 사이에 관계를 추가합니다. 이미 있으면 출처를 갱신합니다.",
    dependencies=[Depends(add_edge_limit), Depends(require_api_key)],
)
async def add_edge(
    edge_data: EdgeCreate = Depends(json_body(EdgeCreate)),
    relation_service: RelationService = Depends(get_relation_service),
):
    return await relation_service.add_edge(edge_data)


@router.put(
    "/updateEdge",
    response_model=EdgeMutationResponse,
    summary="관계 출처 수정",
    description="관리자 세션으로 기존 관계의 출처를 수정합니다. 관계가 없으면 404를 반환합니다.",
    dependencies=[Depends(update_edge_limit), Depends(require_session)],
)
async def update_edge(
    edge_data: EdgeCreate = Depends(json_body(EdgeCreate)),
    relation_service: RelationService = Depends(get_relation_service),
):
    return await relation_service.update_edge(edge_data)


@router.delete(
    "/deleteEdge",
    response_model=EdgeDeleteResponse,
    summary="관계 삭제",
    description="두 인물 사이의 관계를 방향과 무관하게 삭제합니다.",
    dependencies=[Depends(delete_edge_limit), Depends(require_api_key)],
)
async def delete_edge(
    edge_data: EdgeDelete = Depends(json_body(EdgeDelete)),
    relation_service: RelationService = Depends(get_relation_service),
):
    return await relation_service.delete_edge(edge_data)
