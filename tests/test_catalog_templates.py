"""카탈로그(부서, 포지션, 태그, 스케줄) 및 템플릿 API 테스트.

Catalog and template API tests: department/position/tag/schedule CRUD,
shift templates and applying a weekly schedule template to a week.
"""

import uuid
from datetime import datetime, timezone

from httpx import AsyncClient

from tests.conftest import auth_header, shop_url


class TestDepartments:
    """부서 CRUD 테스트."""

    async def test_crud(self, client: AsyncClient, shop, manager_token, tech_token):
        res = await client.post(
            shop_url(shop, "/departments"),
            json={"name": "Service", "pto_accrual_rate": 0.05},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201
        department = res.json()
        assert department["pto_accrual_rate"] == 0.05

        res = await client.put(
            shop_url(shop, f"/departments/{department['id']}"), json={"name": "Front Desk"}, headers=auth_header(manager_token)
        )
        assert res.json()["name"] == "Front Desk"
        assert res.json()["pto_accrual_rate"] == 0.05

        listed = (await client.get(shop_url(shop, "/departments"), headers=auth_header(tech_token))).json()
        assert [d["name"] for d in listed] == ["Front Desk"]

        res = await client.delete(shop_url(shop, f"/departments/{department['id']}"), headers=auth_header(manager_token))
        assert res.json() == {"success": True}
        res = await client.delete(shop_url(shop, f"/departments/{department['id']}"), headers=auth_header(manager_token))
        assert res.status_code == 404
        assert res.json() == {"error": "Department not found"}

    async def test_accrual_rate_defaults_to_zero(self, client: AsyncClient, shop, manager_token):
        res = await client.post(shop_url(shop, "/departments"), json={"name": "Parts"}, headers=auth_header(manager_token))
        assert res.json()["pto_accrual_rate"] == 0

    async def test_technician_cannot_create(self, client: AsyncClient, shop, tech_token):
        res = await client.post(shop_url(shop, "/departments"), json={"name": "Parts"}, headers=auth_header(tech_token))
        assert res.status_code == 403


class TestPositionsTagsSchedules:
    """포지션, 태그, 스케줄 테스트."""

    async def test_duplicate_position(self, client: AsyncClient, shop, manager_token):
        await client.post(shop_url(shop, "/positions"), json={"name": "Lube Tech"}, headers=auth_header(manager_token))
        res = await client.post(shop_url(shop, "/positions"), json={"name": "Lube Tech"}, headers=auth_header(manager_token))
        assert res.status_code == 409
        assert res.json() == {"error": "Position name already exists"}

    async def test_rename_position_to_existing(self, client: AsyncClient, shop, manager_token):
        await client.post(shop_url(shop, "/positions"), json={"name": "Lube Tech"}, headers=auth_header(manager_token))
        other = (await client.post(
            shop_url(shop, "/positions"), json={"name": "Advisor", "color": "#123456"}, headers=auth_header(manager_token)
        )).json()
        res = await client.put(
            shop_url(shop, f"/positions/{other['id']}"), json={"name": "Lube Tech"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 409

    async def test_delete_tag_removes_assignments(self, client: AsyncClient, shop, manager_token):
        tag = (await client.post(shop_url(shop, "/tags"), json={"name": "Inventory"}, headers=auth_header(manager_token))).json()
        shift = (await client.post(
            shop_url(shop, "/shifts"),
            json={
                "start_time": "2025-01-06T14:00:00+00:00",
                "end_time": "2025-01-06T22:00:00+00:00",
                "tag_ids": [tag["id"]],
            },
            headers=auth_header(manager_token),
        )).json()["shift"]

        res = await client.delete(shop_url(shop, f"/tags/{tag['id']}"), headers=auth_header(manager_token))
        assert res.json() == {"success": True}
        got = (await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))).json()
        assert got["tag_ids"] == []

    async def test_schedules(self, client: AsyncClient, shop, manager_token):
        res = await client.post(shop_url(shop, "/schedules"), json={"name": "Main"}, headers=auth_header(manager_token))
        assert res.status_code == 201
        assert res.json()["color"] == "#3b82f6"

        res = await client.delete(shop_url(shop, f"/schedules/{uuid.uuid4()}"), headers=auth_header(manager_token))
        assert res.status_code == 404
        assert res.json() == {"error": "Schedule not found"}


class TestShiftTemplates:
    """시프트 템플릿 테스트."""

    async def test_crud(self, client: AsyncClient, shop, manager_token):
        res = await client.post(
            shop_url(shop, "/shift-templates"),
            json={"name": "Opening", "start_time": "07:30", "end_time": "15:30", "break_minutes": 30},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201
        template = res.json()
        assert template["start_time"] == "07:30"

        res = await client.put(
            shop_url(shop, f"/shift-templates/{template['id']}"), json={"end_time": "16:00"}, headers=auth_header(manager_token)
        )
        assert res.json()["end_time"] == "16:00"
        assert res.json()["name"] == "Opening"

        res = await client.delete(shop_url(shop, f"/shift-templates/{template['id']}"), headers=auth_header(manager_token))
        assert res.json() == {"success": True}
        assert (await client.get(shop_url(shop, "/shift-templates"), headers=auth_header(manager_token))).json() == []

    async def test_invalid_time(self, client: AsyncClient, shop, manager_token):
        res = await client.post(
            shop_url(shop, "/shift-templates"),
            json={"name": "Bad", "start_time": "7am", "end_time": "15:30"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 422
        assert res.json()["error"].startswith("start_time")


class TestScheduleTemplates:
    """주간 스케줄 템플릿 테스트."""

    async def test_apply_to_week(self, client: AsyncClient, shop, manager_token, tech_user):
        template = (await client.post(
            shop_url(shop, "/schedule-templates"), json={"name": "Standard week"}, headers=auth_header(manager_token)
        )).json()
        url = shop_url(shop, f"/schedule-templates/{template['id']}")

        await client.post(
            f"{url}/entries",
            json={"day_of_week": 1, "user_id": str(tech_user.id), "start_time": "09:00", "end_time": "17:00"},
            headers=auth_header(manager_token),
        )
        res = await client.post(
            f"{url}/entries",
            json={"day_of_week": 6, "start_time": "22:00", "end_time": "06:00", "break_minutes": 15},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201
        assert len(res.json()["entries"]) == 2

        res = await client.post(f"{url}/apply", json={"week_start": "2025-01-08"}, headers=auth_header(manager_token))
        assert res.status_code == 201
        assert res.json() == {"count": 2}

        shifts = (await client.get(
            shop_url(shop, "/shifts"),
            params={"start": "2025-01-05T00:00:00+00:00", "end": "2025-01-13T00:00:00+00:00"},
            headers=auth_header(manager_token),
        )).json()
        assert len(shifts) == 2
        monday, saturday = shifts
        assert monday["user_id"] == str(tech_user.id)
        assert monday["status"] == "draft"
        assert datetime.fromisoformat(monday["start_time"]) == datetime(2025, 1, 6, 14, tzinfo=timezone.utc)
        assert saturday["is_open"] is True
        assert datetime.fromisoformat(saturday["start_time"]) == datetime(2025, 1, 12, 3, tzinfo=timezone.utc)
        assert datetime.fromisoformat(saturday["end_time"]) == datetime(2025, 1, 12, 11, tzinfo=timezone.utc)

    async def test_unknown_template(self, client: AsyncClient, shop, manager_token):
        res = await client.post(
            shop_url(shop, f"/schedule-templates/{uuid.uuid4()}/apply"),
            json={"week_start": "2025-01-08"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 404
        assert res.json() == {"error": "Schedule template not found"}
