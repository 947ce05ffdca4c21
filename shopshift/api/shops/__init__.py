"""매장 API 라우터 패키지 — 모든 매장 단위 엔드포인트 통합.

Shop API Router package. Aggregates every endpoint scoped to
/shops/{shop_id} into a single router for inclusion in the application.

Included routers:
    - shifts: 시프트 CRUD, 게시, 배정, 이동, 주 복사 (Shift management)
    - bulk: 시프트 일괄 작업 (Per-item bulk actions)
    - claims: 오픈 시프트 신청 (Open-shift claims)
    - swaps: 시프트 교환 요청 (Swap requests)
    - members: 구성원 부서 지정, 보관, 복원 (Member management)
    - catalog: 부서, 포지션, 태그, 스케줄 (Shop catalog)
    - templates: 시프트/주간 템플릿 (Shift and schedule templates)
    - time_off: 휴가 요청 및 PTO (Time off and PTO)
    - time_clock: 출퇴근 및 휴식 (Time clock)
    - notifications: 알림 (Notifications)
    - reports: 근무 지표 (Workforce reports)
    - events: 무효화 이벤트 스트림 (Invalidation event stream)
"""

from fastapi import APIRouter

from shopshift.api.shops.bulk import router as bulk_router
from shopshift.api.shops.catalog import router as catalog_router
from shopshift.api.shops.claims import router as claims_router
from shopshift.api.shops.events import router as events_router
from shopshift.api.shops.members import router as members_router
from shopshift.api.shops.notifications import router as notifications_router
from shopshift.api.shops.reports import router as reports_router
from shopshift.api.shops.shifts import router as shifts_router
from shopshift.api.shops.swaps import router as swaps_router
from shopshift.api.shops.templates import router as templates_router
from shopshift.api.shops.time_clock import router as time_clock_router
from shopshift.api.shops.time_off import router as time_off_router

shops_router: APIRouter = APIRouter()

# ---------------------------------------------------------------------------
# 스케줄링 라우터 등록 — Register scheduling routers
# ---------------------------------------------------------------------------
# 일괄 작업은 /shifts/{shift_id} 보다 먼저 등록 (literal path before the id route)
shops_router.include_router(bulk_router, tags=["Shifts"])
shops_router.include_router(shifts_router, tags=["Shifts"])
shops_router.include_router(claims_router, tags=["Claims"])
shops_router.include_router(swaps_router, tags=["Swaps"])
shops_router.include_router(templates_router, tags=["Templates"])

# ---------------------------------------------------------------------------
# 인력 라우터 등록 — Register workforce routers
# ---------------------------------------------------------------------------
shops_router.include_router(members_router, tags=["Members"])
shops_router.include_router(catalog_router, tags=["Catalog"])
shops_router.include_router(time_off_router, tags=["Time Off"])
shops_router.include_router(time_clock_router, tags=["Time Clock"])
shops_router.include_router(reports_router, tags=["Reports"])

# ---------------------------------------------------------------------------
# 알림/실시간 라우터 등록 — Register notification and realtime routers
# ---------------------------------------------------------------------------
shops_router.include_router(notifications_router, tags=["Notifications"])
shops_router.include_router(events_router, tags=["Events"])
