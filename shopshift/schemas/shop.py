"""매장 관련 Pydantic 스키마 정의.

Pydantic schemas for shop members, departments, positions, shift tags,
schedules and templates.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field


# === 구성원 (Members) ===

class MemberResponse(BaseModel):
    id: str
    shop_id: str
    user_id: str
    full_name: str | None = None
    role: str
    department_id: str | None = None
    hourly_rate: float | None = None
    max_hours_per_week: int | None = None
    is_active: bool


class MemberDepartmentUpdate(BaseModel):
    department_id: UUID | None = None


# === 부서 (Departments) ===

class DepartmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    pto_accrual_rate: float = Field(default=0, ge=0)
    sort_order: int = 0


class DepartmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    pto_accrual_rate: float | None = Field(default=None, ge=0)
    sort_order: int | None = None


class DepartmentResponse(BaseModel):
    id: str
    shop_id: str
    name: str
    pto_accrual_rate: float
    sort_order: int


# === 포지션 (Positions) ===

class PositionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(default="#6b7280", max_length=20)
    sort_order: int = 0


class PositionUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    color: str | None = Field(default=None, max_length=20)
    sort_order: int | None = None


class PositionResponse(BaseModel):
    id: str
    shop_id: str
    name: str
    color: str
    sort_order: int


# === 태그, 스케줄 (Shift tags, schedules) ===

class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)


class TagResponse(BaseModel):
    id: str
    shop_id: str
    name: str


class ScheduleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(default="#3b82f6", max_length=20)


class ScheduleResponse(BaseModel):
    id: str
    shop_id: str
    name: str
    color: str


# === 템플릿 (Templates) ===

class ShiftTemplateCreate(BaseModel):
    """시프트 템플릿 생성 스키마 (Local time of day "HH:MM")."""

    name: str = Field(min_length=1, max_length=100)
    position_id: UUID | None = None
    start_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    end_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    break_minutes: int = Field(default=0, ge=0)


class ShiftTemplateUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    position_id: UUID | None = None
    start_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    end_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    break_minutes: int | None = Field(default=None, ge=0)


class ShiftTemplateResponse(BaseModel):
    id: str
    shop_id: str
    name: str
    position_id: str | None = None
    start_time: str
    end_time: str
    break_minutes: int


class ScheduleTemplateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class TemplateEntryCreate(BaseModel):
    """주간 템플릿 항목 생성 스키마 (day_of_week 0=Sunday)."""

    day_of_week: int = Field(ge=0, le=6)
    position_id: UUID | None = None
    user_id: UUID | None = None
    start_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    end_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    break_minutes: int = Field(default=0, ge=0)


class TemplateEntryResponse(BaseModel):
    id: str
    day_of_week: int
    position_id: str | None = None
    user_id: str | None = None
    start_time: str
    end_time: str
    break_minutes: int


class ScheduleTemplateResponse(BaseModel):
    id: str
    shop_id: str
    name: str
    entries: list[TemplateEntryResponse] = []
    created_at: datetime | None = None


class ApplyTemplateRequest(BaseModel):
    """주간 템플릿 적용 요청 (Any date of the target week)."""

    week_start: date
