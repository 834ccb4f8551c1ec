# relgraph/schemas/common.py

from datetime import datetime, timezone
from typing import Annotated
from pydantic import Field, StrictStr
from relgraph.core.validation import MAX_ID, number_range, numeric_string


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# 문자열로 전달되는 인물 ID ("12")
IdString = Annotated[
    StrictStr, Field(min_length=1), number_range(1, MAX_ID), numeric_string(1, MAX_ID)
]
