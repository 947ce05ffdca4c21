"""근태 기록 Pydantic 스키마 정의.

Pydantic schemas for the time clock and notifications.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class ClockInRequest(BaseModel):
    shift_id: UUID | None = None
    notes: str | None = Field(default=None, max_length=500)


class ManualEntryCreate(BaseModel):
    """수동 근태 입력 스키마 (Manager-entered record, clock_in < clock_out)."""

    user_id: UUID
    clock_in: datetime
    clock_out: datetime
    shift_id: UUID | None = None
    notes: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _check_aware(self) -> "ManualEntryCreate":
        if self.clock_in.tzinfo is None or self.clock_out.tzinfo is None:
            raise ValueError("clock_in and clock_out must include a UTC offset")
        return self


class ClockBreakResponse(BaseModel):
    id: str
    start_time: datetime
    end_time: datetime | None = None
    is_paid: bool


class TimeRecordResponse(BaseModel):
    id: str
    shop_id: str
    user_id: str
    shift_id: str | None = None
    clock_in: datetime
    clock_out: datetime | None = None
    status: str
    notes: str | None = None
    is_manual: bool
    breaks: list[ClockBreakResponse] = []


class NotificationResponse(BaseModel):
    id: str
    shop_id: str
    type: str
    title: str
    body: str | None = None
    data: dict[str, Any] = {}
    is_read: bool
    created_at: datetime


class UnreadCountResponse(BaseModel):
    unread_count: int
