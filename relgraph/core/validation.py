# relgraph/core/validation.py
"""요청 검증 및 입력 정리

각 라우트가 받는 본문은 pydantic 모델로 선언하고, ``validate_payload`` 하나로
검증한다. 첫 번째 오류에서 멈추지 않고 모든 위반 사항을 모아서 돌려준다.
"""

import json
import re
from typing import Any, List, Optional, Type, TypeVar
from fastapi import Depends, Request
from pydantic import AfterValidator, BaseModel, ValidationError, WrapValidator
from pydantic_core import PydanticCustomError
from relgraph.core.config import Settings, get_settings
from relgraph.core.exceptions import (
    InvalidIdError,
    MalformedRequest,
    PayloadTooLarge,
    RequestValidationFailed,
)

# persons.id / relations.id 컬럼(INT)의 최대값
MAX_ID = 2147483647

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)", re.ASCII)
_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII)

_EXPECTED_TYPES = {
    "string_type": "string",
    "int_type": "integer",
    "float_type": "number",
    "bool_type": "boolean",
    "list_type": "array",
    "dict_type": "object",
}


def json_type_name(value: Any) -> str:
    """JSON 관점의 값 타입 이름"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def parse_number(value: Any) -> Optional[float]:
    """앞부분의 숫자만 읽음 ("12abc" -> 12.0), 실패 시 None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _LEADING_NUMBER_RE.match(value)
        if match:
            return float(match.group(1))
    return None


def _range_problem(value: Any, minimum: float, maximum: float) -> Optional[str]:
    number = parse_number(value)
    if number is None or number != number:
        return "number_parse"
    if number < minimum or number > maximum:
        return "number_range"
    return None


def number_range(minimum: float, maximum: float) -> AfterValidator:
    """숫자 범위 검증기 (문자열 숫자 포함)"""

    def check(value):
        if value is None:
            return value
        problem = _range_problem(value, minimum, maximum)
        if problem == "number_parse":
            raise PydanticCustomError("number_parse", "value is not a valid number")
        if problem == "number_range":
            raise PydanticCustomError(
                "number_range",
                "value must be between {min} and {max}",
                {"min": minimum, "max": maximum},
            )
        return value

    return AfterValidator(check)


def numeric_string(minimum: float, maximum: float) -> WrapValidator:
    """숫자 문자열 검증기, 타입이 틀려도 숫자 범위는 함께 검사"""

    def check(value, handler):
        if value is None or isinstance(value, str):
            return handler(value)
        raise PydanticCustomError(
            "numeric_string_type",
            "value is not a string",
            {
                "actual": json_type_name(value),
                "problem": _range_problem(value, minimum, maximum),
                "min": minimum,
                "max": maximum,
            },
        )

    return WrapValidator(check)


def _field_name(error: dict) -> str:
    return ".".join(str(part) for part in error.get("loc", ())) or "body"


def describe_error(error: dict) -> List[str]:
    """pydantic 오류 하나를 사용자 메시지로 변환 (타입+범위 오류는 두 개)"""
    field = _field_name(error)
    kind = error["type"]
    ctx = error.get("ctx") or {}
    value = error.get("input")

    if kind == "missing":
        return [f"필수 필드 누락: {field}"]
    if kind == "string_too_short" and ctx.get("min_length") == 1:
        return [f"필수 필드 누락: {field}"]
    if kind == "numeric_string_type":
        messages = [f"필드 {field} 타입 오류: 기대 string, 실제 {ctx.get('actual')}"]
        if ctx.get("problem"):
            range_error = {"loc": error.get("loc"), "type": ctx["problem"], "ctx": ctx}
            messages.extend(describe_error(range_error))
        return messages
    if kind in _EXPECTED_TYPES:
        if value is None:
            return [f"필수 필드 누락: {field}"]
        return [
            f"필드 {field} 타입 오류: 기대 {_EXPECTED_TYPES[kind]}, "
            f"실제 {json_type_name(value)}"
        ]
    if kind == "string_too_long":
        return [f"필드 {field} 길이 초과: 최대 {ctx.get('max_length')}자"]
    if kind == "number_parse":
        return [f"필드 {field}는 유효한 숫자여야 합니다"]
    if kind == "number_range":
        return [f"필드 {field} 범위 초과: {ctx.get('min')} ~ {ctx.get('max')}"]
    return [f"필드 {field}: {error.get('msg')}"]


def validate_payload(schema: Type[SchemaT], payload: Any) -> SchemaT:
    """스키마 기반 요청 검증, 모든 위반 사항을 한 번에 반환"""
    if not isinstance(payload, dict):
        raise RequestValidationFailed(
            details=[f"요청 본문은 JSON 객체여야 합니다 (실제 {json_type_name(payload)})"]
        )

    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        details: List[str] = []
        for error in e.errors():
            for message in describe_error(error):
                if message not in details:
                    details.append(message)
        raise RequestValidationFailed(details=details) from None


def json_body(schema: Type[SchemaT]):
    """JSON 본문을 읽어 스키마로 검증하는 의존성 생성"""

    async def dependency(request: Request, settings: Settings = Depends(get_settings)):
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > settings.max_body_bytes:
            raise PayloadTooLarge()

        raw = await request.body()
        if len(raw) > settings.max_body_bytes:
            raise PayloadTooLarge()

        if not raw.strip():
            payload = {}
        else:
            try:
                payload = json.loads(raw)
            except (UnicodeDecodeError, json.JSONDecodeError, RecursionError):
                raise MalformedRequest() from None

        return validate_payload(schema, payload)

    return dependency


def sanitize_input(value):
    """script 블록과 HTML 태그 제거 후 공백 정리"""
    if not isinstance(value, str):
        return value
    value = _SCRIPT_RE.sub("", value)
    value = _TAG_RE.sub("", value)
    return value.strip()


def validate_id(value) -> int:
    """양의 정수 ID 검증 (INT 컬럼 범위)"""
    if isinstance(value, bool):
        raise InvalidIdError(value)
    if isinstance(value, int):
        number = value
    else:
        match = _LEADING_INT_RE.match(str(value)) if value is not None else None
        if not match:
            raise InvalidIdError(value)
        number = int(match.group(1))

    if number <= 0 or number > MAX_ID:
        raise InvalidIdError(value)
    return number
