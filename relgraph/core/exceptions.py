# relgraph/core/exceptions.py

from typing import List, Optional


class GraphServiceError(Exception):
    """API 오류 기본 클래스 (error 코드 + 사용자 메시지)"""

    status_code = 500
    error = "internal_error"
    default_message = "서버 내부 오류가 발생했습니다. 잠시 후 다시 시도해주세요"

    def __init__(self, message: Optional[str] = None, details: Optional[List[str]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def headers(self) -> Optional[dict]:
        return None

    def to_payload(self) -> dict:
        payload = {"error": self.error, "message": self.message}
        if self.details:
            payload["details"] = list(self.details)
        return payload


# 400
class MalformedRequest(GraphServiceError):
    status_code = 400
    error = "malformed_json"
    default_message = "요청 본문이 올바른 JSON 형식이 아닙니다"


class PayloadTooLarge(GraphServiceError):
    status_code = 413
    error = "payload_too_large"
    default_message = "요청 본문이 허용된 크기를 초과했습니다"


class RequestValidationFailed(GraphServiceError):
    status_code = 400
    error = "validation_failed"
    default_message = "입력값 검증에 실패했습니다"


class InvalidIdError(GraphServiceError):
    status_code = 400
    error = "invalid_id"

    def __init__(self, value):
        super().__init__(f"유효하지 않은 ID입니다: {value}")


class SelfLoopError(GraphServiceError):
    status_code = 400
    error = "self_loop"
    default_message = "자기 자신과의 관계는 만들 수 없습니다"


# 401 / 403
class AuthenticationRequired(GraphServiceError):
    status_code = 401
    error = "unauthorized"
    default_message = "인증 정보가 필요합니다"


class PermissionDenied(GraphServiceError):
    status_code = 403
    error = "forbidden"
    default_message = "제공된 인증 정보가 올바르지 않습니다"


# 404
class PersonNotFoundError(GraphServiceError):
    status_code = 404
    error = "person_not_found"

    def __init__(self, person_id: int):
        self.person_id = person_id
        super().__init__(f"ID가 {person_id}인 인물을 찾을 수 없습니다")


class EdgeNotFoundError(GraphServiceError):
    status_code = 404
    error = "edge_not_found"

    def __init__(self, first_id: int, second_id: int):
        super().__init__(f"인물 {first_id}와(과) {second_id} 사이에 관계가 없습니다")


class BackgroundNotFoundError(GraphServiceError):
    status_code = 404
    error = "background_not_found"

    def __init__(self, person_id: int):
        super().__init__(f"ID가 {person_id}인 인물의 배경 정보가 없습니다")


# 409
class PersonExistsError(GraphServiceError):
    status_code = 409
    error = "person_exists"

    def __init__(self, name: str):
        super().__init__(f"이름 '{name}'은(는) 이미 사용 중입니다")


class EdgeExistsError(GraphServiceError):
    status_code = 409
    error = "edge_exists"

    def __init__(self, first_id: int, second_id: int):
        super().__init__(f"인물 {first_id}와(과) {second_id} 사이에 이미 관계가 있습니다")


# 429
class RateLimitExceeded(GraphServiceError):
    status_code = 429
    error = "rate_limited"

    def __init__(self, retry_after: int, window_seconds: float, max_requests: int):
        self.retry_after = retry_after
        super().__init__(
            f"{int(window_seconds)}초 동안 최대 {max_requests}개의 요청만 보낼 수 있습니다"
        )

    def headers(self) -> Optional[dict]:
        return {"Retry-After": str(self.retry_after)}

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["retryAfter"] = self.retry_after
        return payload


# 500
class ServerMisconfigured(GraphServiceError):
    status_code = 500
    error = "server_misconfigured"
    default_message = "서버 설정 오류입니다. 관리자에게 문의해주세요"


class QueryParameterError(GraphServiceError):
    """SQL 플레이스홀더 수와 파라미터 수 불일치"""

    status_code = 500
    error = "internal_error"


class RenderError(GraphServiceError):
    status_code = 500
    error = "render_failed"
    default_message = "그래프 이미지를 생성하지 못했습니다"
