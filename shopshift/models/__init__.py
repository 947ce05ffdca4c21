"""SQLAlchemy ORM 모델 패키지 (모든 도메인 모델의 중앙 임포트 지점).

SQLAlchemy ORM models package. Importing from this package ensures all
models are registered with the SQLAlchemy metadata, which is required for
Alembic migrations and ``create_all`` in tests.

Modules:
    shop: 매장, 프로필, 구성원, 부서, 포지션 (Shop, Profile, ShopMember, Department, Position)
    shift: 스케줄, 시프트, 휴식, 태그, 이력 (Schedule, Shift, ShiftBreak, ShiftTag, ShiftTagAssignment, ShiftHistory)
    template: 시프트/주간 템플릿 (ShiftTemplate, ScheduleTemplate, ScheduleTemplateEntry)
    request: 신청/교환/휴가 요청 (OpenShiftClaim, SwapRequest, TimeOffRequest, PtoBalanceAdjustment)
    time_record: 근태 기록 (TimeRecord, ClockBreak)
    notification: 알림 (Notification)
"""

from shopshift.models.shop import Shop, Profile, ShopMember, Department, Position
from shopshift.models.shift import Schedule, Shift, ShiftBreak, ShiftTag, ShiftTagAssignment, ShiftHistory
from shopshift.models.template import ShiftTemplate, ScheduleTemplate, ScheduleTemplateEntry
from shopshift.models.request import OpenShiftClaim, SwapRequest, TimeOffRequest, PtoBalanceAdjustment
from shopshift.models.time_record import TimeRecord, ClockBreak
from shopshift.models.notification import Notification

__all__ = [
    "Shop", "Profile", "ShopMember", "Department", "Position",
    "Schedule", "Shift", "ShiftBreak", "ShiftTag", "ShiftTagAssignment", "ShiftHistory",
    "ShiftTemplate", "ScheduleTemplate", "ScheduleTemplateEntry",
    "OpenShiftClaim", "SwapRequest", "TimeOffRequest", "PtoBalanceAdjustment",
    "TimeRecord", "ClockBreak",
    "Notification",
]
