# relgraph/schemas/__init__.py

from .person import Gender, Person, PersonCreate, PersonCreateResponse, PersonListResponse
from .relation import (
    Edge,
    EdgeCreate,
    EdgeDelete,
    EdgeDeleteResponse,
    EdgeMutationResponse,
    PersonRelationsResponse,
    RelationDetail,
)
from .graph import GraphCounts, GraphData, GraphNode, GraphResponse
from .background import (
    BackgroundResponse,
    BackgroundUpsert,
    BackgroundUpsertResponse,
    PersonBackground,
)
from .admin import LoginRequest, LoginResponse, LogoutResponse, SessionStatus

__all__ = [
    "Gender",
    "Person",
    "PersonCreate",
    "PersonCreateResponse",
    "PersonListResponse",
    "Edge",
    "EdgeCreate",
    "EdgeDelete",
    "EdgeDeleteResponse",
    "EdgeMutationResponse",
    "PersonRelationsResponse",
    "RelationDetail",
    "GraphCounts",
    "GraphData",
    "GraphNode",
    "GraphResponse",
    "BackgroundResponse",
    "BackgroundUpsert",
    "BackgroundUpsertResponse",
    "PersonBackground",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "SessionStatus",
]
