# relgraph/schemas/relation.py

from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictStr
from datetime import datetime
from relgraph.schemas.common import IdString, utcnow
from relgraph.schemas.person import Person


class EdgeCreate(BaseModel):
    """관계 추가/수정 요청 (from, to 순서는 의미 없음)"""

    model_config = ConfigDict(populate_by_name=True)

    from_: IdString = Field(alias="from", description="인물 ID")
    to: IdString = Field(description="인물 ID")
    source: Optional[StrictStr] = Field(default=None, max_length=500, description="관계 출처")


class EdgeDelete(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: IdString = Field(alias="from", description="인물 ID")
    to: IdString = Field(description="인물 ID")


class Edge(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="관계 ID")
    from_: str = Field(alias="from", description="시작 인물 ID")
    to: str = Field(description="끝 인물 ID")
    source: Optional[str] = Field(default=None, description="관계 출처")


class EdgeMutationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    action: Literal["created", "updated"] = Field(description="처리 결과")
    id: int = Field(description="관계 ID")
    from_: int = Field(alias="from", description="시작 인물 ID")
    to: int = Field(description="끝 인물 ID")
    source: Optional[str] = Field(default=None, description="관계 출처")
    message: str = Field(description="결과 메시지")
    timestamp: datetime = Field(default_factory=utcnow)


class EdgeDeleteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    deleted_rows: int = Field(alias="deletedRows", description="삭제된 행 수")
    message: str = "관계가 삭제되었습니다"
    timestamp: datetime = Field(default_factory=utcnow)


class RelationDetail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="관계 ID")
    from_: int = Field(alias="from", description="저장된 시작 인물 ID")
    to: int = Field(description="저장된 끝 인물 ID")
    neighbor_id: int = Field(description="상대 인물 ID")
    source: Optional[str] = Field(default=None, description="관계 출처")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PersonRelationsResponse(BaseModel):
    success: bool = True
    person: Person = Field(description="대상 인물")
    relations: List[RelationDetail] = Field(description="연결된 관계 목록")
    neighbors: List[Person] = Field(description="이웃 인물 목록")
    degree: int = Field(description="연결된 관계 수")
    timestamp: datetime = Field(default_factory=utcnow)
