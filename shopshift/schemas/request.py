"""요청 관련 Pydantic 스키마 정의.

Pydantic schemas for open-shift claims, swap requests, time-off requests
and PTO adjustments.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


# === 오픈 시프트 신청 (Open shift claims) ===

class ClaimCreate(BaseModel):
    shift_id: UUID


class ClaimResponse(BaseModel):
    id: str
    shop_id: str
    shift_id: str
    user_id: str
    user_name: str | None = None
    status: str
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime | None = None


# === 시프트 교환 (Swap requests) ===

class SwapCreate(BaseModel):
    """교환 요청 생성 스키마.

    Both ``target_shift_id`` and ``target_id`` make a bilateral swap; leaving
    them out makes a one-sided offer.
    """

    requester_shift_id: UUID
    target_shift_id: UUID | None = None
    target_id: UUID | None = None
    reason: str | None = Field(default=None, max_length=500)


class SwapResponse(BaseModel):
    id: str
    shop_id: str
    requester_shift_id: str | None = None
    target_shift_id: str | None = None
    requester_id: str
    target_id: str | None = None
    status: str
    reason: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime | None = None


# === 휴가 (Time off) ===

class TimeOffCreate(BaseModel):
    """휴가 요청 생성 스키마.

    Attributes:
        start_date / end_date: 휴가 기간, 포함 (Inclusive date range)
        hours_requested: 요청 시간, 양수 (Requested hours, positive)
        reason: 사유, 선택 (Optional reason)
    """

    start_date: date
    end_date: date
    hours_requested: float = Field(gt=0)
    reason: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _check_range(self) -> "TimeOffCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TimeOffApprove(BaseModel):
    is_paid: bool = True


class TimeOffDeny(BaseModel):
    reviewer_notes: str | None = Field(default=None, max_length=1000)


class TimeOffResponse(BaseModel):
    id: str
    shop_id: str
    user_id: str
    start_date: date
    end_date: date
    hours_requested: float
    reason: str | None = None
    is_paid: bool | None = None
    status: str
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    reviewer_notes: str | None = None
    created_at: datetime | None = None


class PtoAdjustmentCreate(BaseModel):
    """PTO 잔액 조정 스키마 (Signed hours, non-zero)."""

    user_id: UUID
    hours: float
    reason: str = Field(min_length=1, max_length=500)

    @model_validator(mode="after")
    def _non_zero(self) -> "PtoAdjustmentCreate":
        if self.hours == 0:
            raise ValueError("hours must not be zero")
        return self


class PtoAdjustmentResponse(BaseModel):
    id: str
    shop_id: str
    user_id: str
    hours: float
    reason: str
    created_by: str | None = None
    created_at: datetime | None = None
