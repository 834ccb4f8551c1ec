# relgraph/schemas/admin.py

from pydantic import BaseModel, Field, StrictStr
from datetime import datetime
from relgraph.schemas.common import utcnow


class LoginRequest(BaseModel):
    username: StrictStr = Field(min_length=1, max_length=100, description="관리자 아이디")
    password: StrictStr = Field(min_length=1, max_length=200, description="관리자 비밀번호")


class LoginResponse(BaseModel):
    success: bool = True
    token: str = Field(description="세션 토큰")
    username: str
    expires_at: datetime = Field(description="만료 시각")
    message: str = "로그인되었습니다"
    timestamp: datetime = Field(default_factory=utcnow)


class SessionStatus(BaseModel):
    success: bool = True
    username: str
    created_at: datetime
    expires_at: datetime
    timestamp: datetime = Field(default_factory=utcnow)


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "로그아웃되었습니다"
    timestamp: datetime = Field(default_factory=utcnow)
