"""공통 Pydantic 응답 스키마 정의.

Common Pydantic response schema definitions shared across API domains.
"""

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """성공 응답 스키마 ({"success": true})."""

    success: bool = True


class CountResponse(BaseModel):
    """생성/처리 개수 응답 스키마 (Number of rows created or affected)."""

    count: int
