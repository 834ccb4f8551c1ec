# relgraph/schemas/person.py

from typing import Any, List, Optional
from pydantic import BaseModel, Field, StrictStr, field_validator
from datetime import datetime
from enum import Enum
from relgraph.schemas.common import utcnow


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    FEMBOY = "femboy"
    UNKNOWN = "unknown"


def normalize_gender(value: Any) -> str:
    """허용되지 않은 값은 unknown 처리"""
    if isinstance(value, str) and value.strip().lower() in Gender._value2member_map_:
        return value.strip().lower()
    return Gender.UNKNOWN.value


class PersonCreate(BaseModel):
    name: StrictStr = Field(min_length=1, max_length=100, description="이름")
    description: Optional[StrictStr] = Field(default=None, max_length=500, description="설명")
    gender: str = Field(default=Gender.UNKNOWN.value, description="성별")

    @field_validator("gender", mode="before")
    @classmethod
    def _normalize_gender(cls, value):
        return normalize_gender(value)


class Person(BaseModel):
    id: int = Field(description="인물 ID")
    name: str = Field(description="이름")
    description: Optional[str] = Field(default=None, description="설명")
    gender: Gender = Field(default=Gender.UNKNOWN, description="성별")
    created_at: Optional[datetime] = Field(default=None, description="생성일시")

    class Config:
        from_attributes = True


class PersonCreateResponse(BaseModel):
    success: bool = True
    id: int = Field(description="새 인물 ID")
    name: str = Field(description="저장된 이름")
    description: str = Field(description="저장된 설명")
    gender: Gender = Field(description="성별")
    message: str = "인물이 추가되었습니다"
    timestamp: datetime = Field(default_factory=utcnow)


class PersonListResponse(BaseModel):
    success: bool = True
    persons: List[Person] = Field(description="인물 목록")
    count: int = Field(description="인물 수")
    timestamp: datetime = Field(default_factory=utcnow)
