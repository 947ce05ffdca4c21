"""예약 작업 API 테스트.

Cron API tests: bearer-secret check, shift history retention cleanup and
de-duplicated clock-out reminders.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.config import settings
from shopshift.models.shift import ShiftHistory
from shopshift.models.time_record import TimeRecord
from tests.conftest import auth_header, shop_url

CRON_SECRET = "cron-test-secret"


@pytest.fixture(autouse=True)
def cron_secret(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr(settings, "CRON_SECRET", CRON_SECRET)
    return CRON_SECRET


class TestCronAuth:
    """예약 작업 인증 테스트."""

    async def test_missing_secret(self, client: AsyncClient):
        res = await client.post("/api/v1/cron/cleanup-shift-history")
        assert res.status_code == 401

    async def test_wrong_secret(self, client: AsyncClient):
        res = await client.post("/api/v1/cron/clock-reminders", headers=auth_header("nope"))
        assert res.status_code == 401
        assert res.json() == {"error": "Unauthorized"}

    async def test_disabled_when_unset(self, client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(settings, "CRON_SECRET", "")
        res = await client.post("/api/v1/cron/clock-reminders", headers=auth_header(""))
        assert res.status_code == 401


class TestCronJobs:
    """예약 작업 동작 테스트."""

    async def test_cleanup_shift_history(self, client: AsyncClient, db: AsyncSession, shop):
        now = datetime.now(timezone.utc)
        shift_id = uuid.uuid4()
        db.add_all([
            ShiftHistory(shift_id=shift_id, shop_id=shop.id, action="create", changed_at=now - timedelta(days=120)),
            ShiftHistory(shift_id=shift_id, shop_id=shop.id, action="update", changed_at=now - timedelta(days=1)),
        ])
        await db.commit()

        res = await client.post("/api/v1/cron/cleanup-shift-history", headers=auth_header(CRON_SECRET))
        assert res.status_code == 200
        assert res.json() == {"deleted": 1}

    async def test_clock_reminders_once(self, client: AsyncClient, db: AsyncSession, shop, tech_user, tech_token, other_tech):
        now = datetime.now(timezone.utc)
        db.add_all([
            TimeRecord(shop_id=shop.id, user_id=tech_user.id, clock_in=now - timedelta(hours=12), status="clocked_in"),
            TimeRecord(shop_id=shop.id, user_id=other_tech.id, clock_in=now - timedelta(hours=2), status="clocked_in"),
        ])
        await db.commit()

        res = await client.post("/api/v1/cron/clock-reminders", headers=auth_header(CRON_SECRET))
        assert res.json() == {"reminded": 1}

        notes = (await client.get(shop_url(shop, "/notifications"), headers=auth_header(tech_token))).json()
        assert [n["type"] for n in notes] == ["clock_reminder"]
        assert notes[0]["body"].startswith("You have been clocked in for 12.0 hours")

        res = await client.post("/api/v1/cron/clock-reminders", headers=auth_header(CRON_SECRET))
        assert res.json() == {"reminded": 0}
