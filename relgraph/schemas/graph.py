# relgraph/schemas/graph.py

from typing import List
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from relgraph.schemas.common import utcnow
from relgraph.schemas.relation import Edge


class GraphNode(BaseModel):
    id: str = Field(description="인물 ID")
    label: str = Field(description="표시 이름")


class GraphCounts(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_persons: int = Field(alias="totalPersons", description="전체 인물 수")
    connected_persons: int = Field(alias="connectedPersons", description="연결된 인물 수")
    relations: int = Field(description="관계 수")


class GraphData(BaseModel):
    """화면 표시용 그래프 (연결된 인물만)"""

    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    total_persons: int = 0


class GraphResponse(BaseModel):
    success: bool = True
    nodes: List[GraphNode] = Field(description="노드 목록")
    edges: List[Edge] = Field(description="엣지 목록")
    counts: GraphCounts = Field(description="집계")
    timestamp: datetime = Field(default_factory=utcnow)
