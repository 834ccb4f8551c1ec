# relgraph/schemas/background.py

from typing import Annotated, Literal, Optional
from pydantic import BaseModel, Field, StrictInt, StrictStr
from datetime import datetime
from relgraph.core.validation import number_range
from relgraph.schemas.common import IdString, utcnow

MIN_BIRTH_YEAR = 1900
MAX_BIRTH_YEAR = 2100


class BackgroundUpsert(BaseModel):
    person_id: IdString = Field(description="인물 ID")
    birth_year: Optional[
        Annotated[StrictInt, number_range(MIN_BIRTH_YEAR, MAX_BIRTH_YEAR)]
    ] = Field(default=None, description="출생 연도")
    body: Optional[StrictStr] = Field(default=None, max_length=5000, description="배경 설명")


class PersonBackground(BaseModel):
    person_id: int = Field(description="인물 ID")
    birth_year: Optional[int] = Field(default=None, description="출생 연도")
    body: Optional[str] = Field(default=None, description="배경 설명")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BackgroundResponse(BaseModel):
    success: bool = True
    background: PersonBackground
    timestamp: datetime = Field(default_factory=utcnow)


class BackgroundUpsertResponse(BaseModel):
    success: bool = True
    action: Literal["created", "updated"]
    background: PersonBackground
    timestamp: datetime = Field(default_factory=utcnow)
