"""시프트 API 테스트.

Shift API tests — create (breaks, recurrence, template), list by range,
update, publish, assign, drag-and-drop move, bulk update, week copy, delete
and the per-item bulk-action endpoint.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.shop import Position, Shop
from tests.conftest import auth_header, iso, shop_url


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# 2025-01-06 (월) 뉴욕 09:00-17:00 (Monday 09:00-17:00 New York)
MONDAY_START = utc(2025, 1, 6, 14)
MONDAY_END = utc(2025, 1, 6, 22)


async def create_shift(client: AsyncClient, shop, token: str, **overrides) -> dict:
    body = {"start_time": iso(MONDAY_START), "end_time": iso(MONDAY_END)}
    body.update(overrides)
    res = await client.post(shop_url(shop, "/shifts"), json=body, headers=auth_header(token))
    assert res.status_code == 201, res.text
    return res.json()


async def list_shifts(client: AsyncClient, shop, token: str, start: datetime, end: datetime) -> list[dict]:
    res = await client.get(
        shop_url(shop, "/shifts"),
        params={"start": iso(start), "end": iso(end)},
        headers=auth_header(token),
    )
    assert res.status_code == 200, res.text
    return res.json()


# ===== Auth =====

class TestShiftAuth:
    """인증 및 권한 테스트."""

    async def test_missing_token(self, client: AsyncClient, shop):
        res = await client.get(shop_url(shop, "/shifts"), params={"start": iso(MONDAY_START), "end": iso(MONDAY_END)})
        assert res.status_code == 401
        assert res.json() == {"error": "Unauthorized"}

    async def test_non_member_forbidden(self, client: AsyncClient, shop, outsider):
        from tests.conftest import make_token
        res = await client.post(
            shop_url(shop, "/shifts"),
            json={"start_time": iso(MONDAY_START), "end_time": iso(MONDAY_END)},
            headers=auth_header(make_token(outsider)),
        )
        assert res.status_code == 403
        assert res.json() == {"error": "You are not a member of this shop"}

    async def test_technician_cannot_create(self, client: AsyncClient, shop, tech_token):
        res = await client.post(
            shop_url(shop, "/shifts"),
            json={"start_time": iso(MONDAY_START), "end_time": iso(MONDAY_END)},
            headers=auth_header(tech_token),
        )
        assert res.status_code == 403
        assert res.json() == {"error": "Manager or owner role required"}

    async def test_unknown_shop(self, client: AsyncClient, manager_token):
        res = await client.get(
            f"/api/v1/shops/{uuid.uuid4()}/shifts",
            params={"start": iso(MONDAY_START), "end": iso(MONDAY_END)},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 404
        assert res.json() == {"error": "Shop not found"}


# ===== Create / list =====

class TestShiftCreate:
    """시프트 생성 테스트."""

    async def test_create_open_draft(self, client: AsyncClient, shop, manager_token):
        data = await create_shift(client, shop, manager_token)
        shift = data["shift"]
        assert data["recurring_count"] == 0
        assert shift["status"] == "draft"
        assert shift["is_open"] is True
        assert shift["user_id"] is None

    async def test_create_assigned(self, client: AsyncClient, shop, manager_token, tech_user):
        shift = (await create_shift(client, shop, manager_token, user_id=str(tech_user.id)))["shift"]
        assert shift["is_open"] is False
        assert shift["user_name"] == "Terry Tech"

    async def test_end_before_start(self, client: AsyncClient, shop, manager_token):
        res = await client.post(
            shop_url(shop, "/shifts"),
            json={"start_time": iso(MONDAY_END), "end_time": iso(MONDAY_START)},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 422
        assert "end_time must be after start_time" in res.json()["error"]

    async def test_breaks_set_break_minutes(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token, breaks=[
            {"label": "Lunch", "duration_minutes": 30},
            {"duration_minutes": 15, "is_paid": True},
        ]))["shift"]
        assert shift["break_minutes"] == 45
        assert [b["label"] for b in shift["breaks"]] == ["Lunch", "Break"]

    async def test_tags(self, client: AsyncClient, shop, manager_token):
        tag = (await client.post(shop_url(shop, "/tags"), json={"name": "Inventory"}, headers=auth_header(manager_token))).json()
        shift = (await create_shift(client, shop, manager_token, tag_ids=[tag["id"]]))["shift"]
        assert shift["tag_ids"] == [tag["id"]]

    async def test_recurrence_copies_breaks(self, client: AsyncClient, shop, manager_token):
        """반복 인스턴스는 앵커의 휴식과 반복 그룹을 공유."""
        data = await create_shift(
            client, shop, manager_token,
            breaks=[{"duration_minutes": 30}],
            recurrence={"frequency": "weekly", "days": [1, 3], "end_type": "on_date", "end_date": "2025-01-22"},
        )
        assert data["recurring_count"] == 5

        shifts = await list_shifts(client, shop, manager_token, MONDAY_START, utc(2025, 1, 31))
        assert len(shifts) == 6
        group = data["shift"]["recurrence_group_id"]
        assert group is not None
        assert all(s["recurrence_group_id"] == group for s in shifts)
        assert all(s["status"] == "draft" for s in shifts)
        assert all(len(s["breaks"]) == 1 and s["break_minutes"] == 30 for s in shifts)

    async def test_save_as_template(self, client: AsyncClient, shop, manager_token):
        await create_shift(client, shop, manager_token, save_as_template=True, template_name="Opening")
        res = await client.get(shop_url(shop, "/shift-templates"), headers=auth_header(manager_token))
        assert res.status_code == 200
        templates = res.json()
        assert len(templates) == 1
        assert templates[0]["name"] == "Opening"
        assert templates[0]["start_time"] == "09:00"
        assert templates[0]["end_time"] == "17:00"

    async def test_list_range_is_inclusive(self, client: AsyncClient, shop, manager_token, tech_token):
        await create_shift(client, shop, manager_token)
        shifts = await list_shifts(client, shop, tech_token, MONDAY_START - timedelta(days=1), MONDAY_START)
        assert len(shifts) == 1
        assert await list_shifts(client, shop, tech_token, MONDAY_END, MONDAY_END + timedelta(days=1)) == []


# ===== Update / delete =====

class TestShiftUpdate:
    """시프트 수정/삭제 테스트."""

    async def test_update_notes(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.patch(
            shop_url(shop, f"/shifts/{shift['id']}"), json={"notes": "Open the bays"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 200
        assert res.json()["notes"] == "Open the bays"
        assert datetime.fromisoformat(res.json()["start_time"]) == MONDAY_START

    async def test_update_rejects_inverted_times(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.patch(
            shop_url(shop, f"/shifts/{shift['id']}"),
            json={"end_time": iso(MONDAY_START - timedelta(hours=1))},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400
        assert res.json() == {"error": "end_time must be after start_time"}

    async def test_save_and_unpublish(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        await client.post(shop_url(shop, "/shifts/publish"), json={"shift_ids": [shift["id"]]}, headers=auth_header(manager_token))

        res = await client.patch(
            shop_url(shop, f"/shifts/{shift['id']}"),
            params={"unpublish": "true"},
            json={"color": "#ff0000"},
            headers=auth_header(manager_token),
        )
        assert res.json()["status"] == "draft"
        assert res.json()["color"] == "#ff0000"

    async def test_replace_breaks(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token, breaks=[{"duration_minutes": 30}]))["shift"]
        res = await client.patch(
            shop_url(shop, f"/shifts/{shift['id']}"), json={"breaks": []}, headers=auth_header(manager_token)
        )
        assert res.json()["breaks"] == []
        assert res.json()["break_minutes"] == 0

    async def test_delete_keeps_history(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.delete(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))
        assert res.json() == {"success": True}

        res = await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))
        assert res.status_code == 404
        assert res.json() == {"error": "Shift not found"}

        history = (await client.get(shop_url(shop, f"/shifts/{shift['id']}/history"), headers=auth_header(manager_token))).json()
        assert {h["action"] for h in history} == {"create", "delete"}

    async def test_bulk_delete(self, client: AsyncClient, shop, manager_token):
        first = (await create_shift(client, shop, manager_token))["shift"]
        second = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.post(
            shop_url(shop, "/shifts/bulk-delete"),
            json={"shift_ids": [first["id"], second["id"], str(uuid.uuid4())]},
            headers=auth_header(manager_token),
        )
        assert res.json() == {"count": 2}


# ===== Publish / assign / move =====

class TestShiftPublishAssign:
    """게시, 배정, 이동 테스트."""

    async def test_publish_notifies_assignee(self, client: AsyncClient, shop, manager_token, tech_user, tech_token):
        shift = (await create_shift(client, shop, manager_token, user_id=str(tech_user.id)))["shift"]
        res = await client.post(shop_url(shop, "/shifts/publish"), json={"shift_ids": [shift["id"]]}, headers=auth_header(manager_token))
        assert res.json() == {"count": 1}

        published = await list_shifts(client, shop, tech_token, MONDAY_START, MONDAY_START)
        assert published[0]["status"] == "published"

        notifications = (await client.get(shop_url(shop, "/notifications"), headers=auth_header(tech_token))).json()
        assert [n["type"] for n in notifications] == ["shift_published"]

    async def test_publish_open_shift_notifies_members(
        self, client: AsyncClient, shop, manager_token, tech_token, other_token
    ):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        await client.post(shop_url(shop, "/shifts/publish"), json={"shift_ids": [shift["id"]]}, headers=auth_header(manager_token))

        for token in (tech_token, other_token):
            notifications = (await client.get(shop_url(shop, "/notifications"), headers=auth_header(token))).json()
            assert [n["type"] for n in notifications] == ["open_shift_available"]
        mine = (await client.get(shop_url(shop, "/notifications"), headers=auth_header(manager_token))).json()
        assert mine == []

    async def test_unpublish(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        ids = {"shift_ids": [shift["id"]]}
        await client.post(shop_url(shop, "/shifts/publish"), json=ids, headers=auth_header(manager_token))
        res = await client.post(shop_url(shop, "/shifts/unpublish"), json=ids, headers=auth_header(manager_token))
        assert res.json() == {"count": 1}
        got = (await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))).json()
        assert got["status"] == "draft"

    async def test_assign_and_unassign(self, client: AsyncClient, shop, manager_token, tech_user, tech_token):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.post(
            shop_url(shop, f"/shifts/{shift['id']}/assign"), json={"user_id": str(tech_user.id)}, headers=auth_header(manager_token)
        )
        assert res.json()["is_open"] is False
        assert res.json()["user_id"] == str(tech_user.id)

        notifications = (await client.get(shop_url(shop, "/notifications"), headers=auth_header(tech_token))).json()
        assert notifications[0]["type"] == "shift_assigned"

        res = await client.post(shop_url(shop, f"/shifts/{shift['id']}/unassign"), headers=auth_header(manager_token))
        assert res.json()["is_open"] is True
        assert res.json()["user_id"] is None

    async def test_assign_non_member(self, client: AsyncClient, shop, manager_token, outsider):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.post(
            shop_url(shop, f"/shifts/{shift['id']}/assign"), json={"user_id": str(outsider.id)}, headers=auth_header(manager_token)
        )
        assert res.status_code == 400
        assert res.json() == {"error": "User is not an active member of this shop"}

    async def test_move_noop(self, client: AsyncClient, shop, manager_token, tech_user):
        shift = (await create_shift(client, shop, manager_token, user_id=str(tech_user.id)))["shift"]
        res = await client.post(
            shop_url(shop, f"/shifts/{shift['id']}/move"),
            json={"target": {"kind": "assignee", "assignee_id": str(tech_user.id), "date": "2025-01-06"}},
            headers=auth_header(manager_token),
        )
        assert res.json()["changed"] is False

        history = (await client.get(shop_url(shop, f"/shifts/{shift['id']}/history"), headers=auth_header(manager_token))).json()
        assert [h["action"] for h in history] == ["create"]

    async def test_move_to_open_row_on_other_day(self, client: AsyncClient, shop, manager_token, tech_user):
        shift = (await create_shift(client, shop, manager_token, user_id=str(tech_user.id)))["shift"]
        res = await client.post(
            shop_url(shop, f"/shifts/{shift['id']}/move"),
            json={"target": {"kind": "open", "date": "2025-01-08"}},
            headers=auth_header(manager_token),
        )
        body = res.json()
        assert body["changed"] is True
        assert body["shift"]["is_open"] is True
        assert body["shift"]["user_id"] is None
        assert datetime.fromisoformat(body["shift"]["start_time"]) == utc(2025, 1, 8, 14)


# ===== Shop-scoped references =====

@pytest_asyncio.fixture
async def foreign_position(db: AsyncSession):
    """다른 매장의 포지션을 생성합니다."""
    other = Shop(name="Other Shop", timezone="America/Chicago")
    db.add(other)
    await db.flush()
    position = Position(shop_id=other.id, name="Foreign")
    db.add(position)
    await db.commit()
    return position


class TestShiftReferences:
    """다른 매장 또는 비구성원 참조 거부 테스트."""

    async def test_create_with_non_member(self, client: AsyncClient, shop, manager_token, outsider):
        res = await client.post(
            shop_url(shop, "/shifts"),
            json={"start_time": iso(MONDAY_START), "end_time": iso(MONDAY_END), "user_id": str(outsider.id)},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400
        assert res.json() == {"error": "User is not an active member of this shop"}

    async def test_create_with_other_shops_position(self, client: AsyncClient, shop, manager_token, foreign_position):
        res = await client.post(
            shop_url(shop, "/shifts"),
            json={"start_time": iso(MONDAY_START), "end_time": iso(MONDAY_END), "position_id": str(foreign_position.id)},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 404
        assert res.json() == {"error": "Position not found"}

    async def test_update_with_unknown_schedule_and_tag(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        url = shop_url(shop, f"/shifts/{shift['id']}")

        res = await client.patch(url, json={"schedule_id": str(uuid.uuid4())}, headers=auth_header(manager_token))
        assert res.status_code == 404
        assert res.json() == {"error": "Schedule not found"}

        res = await client.patch(url, json={"tag_ids": [str(uuid.uuid4())]}, headers=auth_header(manager_token))
        assert res.status_code == 404
        assert res.json() == {"error": "Tag not found"}

    async def test_update_with_non_member(self, client: AsyncClient, shop, manager_token, outsider):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.patch(
            shop_url(shop, f"/shifts/{shift['id']}"), json={"user_id": str(outsider.id)}, headers=auth_header(manager_token)
        )
        assert res.status_code == 400

        got = (await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))).json()
        assert got["user_id"] is None

    async def test_move_onto_non_member(self, client: AsyncClient, shop, manager_token, outsider):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.post(
            shop_url(shop, f"/shifts/{shift['id']}/move"),
            json={"target": {"kind": "assignee", "assignee_id": str(outsider.id), "date": "2025-01-06"}},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400
        assert res.json() == {"error": "User is not an active member of this shop"}

        got = (await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))).json()
        assert got["is_open"] is True

    async def test_bulk_update_with_other_shops_position(
        self, client: AsyncClient, shop, manager_token, foreign_position
    ):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.post(
            shop_url(shop, "/shifts/bulk-update"),
            json={"shift_ids": [shift["id"]], "patch": {"position_id": str(foreign_position.id)}},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 404
        assert res.json() == {"error": "Position not found"}


# ===== Bulk update / copy week =====

class TestBulkUpdateAndCopy:
    """벌크 수정 및 주간 복사 테스트."""

    async def test_bulk_update_clears_position(self, client: AsyncClient, shop, manager_token):
        position = (await client.post(shop_url(shop, "/positions"), json={"name": "Lube Tech"}, headers=auth_header(manager_token))).json()
        shift = (await create_shift(client, shop, manager_token, position_id=position["id"], color="#00ff00"))["shift"]

        res = await client.post(
            shop_url(shop, "/shifts/bulk-update"),
            json={"shift_ids": [shift["id"]], "patch": {"position_id": None}},
            headers=auth_header(manager_token),
        )
        assert res.json() == {"count": 1}
        got = (await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))).json()
        assert got["position_id"] is None
        assert got["color"] == "#00ff00"

    async def test_bulk_update_local_time(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        await client.post(
            shop_url(shop, "/shifts/bulk-update"),
            json={"shift_ids": [shift["id"]], "patch": {"start_time": "07:00"}},
            headers=auth_header(manager_token),
        )
        got = (await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))).json()
        assert datetime.fromisoformat(got["start_time"]) == utc(2025, 1, 6, 12)
        assert datetime.fromisoformat(got["end_time"]) == MONDAY_END

    async def test_bulk_update_cannot_clear_time(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.post(
            shop_url(shop, "/shifts/bulk-update"),
            json={"shift_ids": [shift["id"]], "patch": {"start_time": None}},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400
        assert res.json() == {"error": "start_time cannot be cleared"}

    async def test_copy_week(self, client: AsyncClient, shop, manager_token, tech_user):
        await create_shift(client, shop, manager_token, user_id=str(tech_user.id), breaks=[{"duration_minutes": 20}])
        await create_shift(
            client, shop, manager_token,
            start_time=iso(utc(2025, 1, 9, 14)), end_time=iso(utc(2025, 1, 9, 18)),
        )
        res = await client.post(
            shop_url(shop, "/shifts/copy-week"),
            json={"source_week_start": "2025-01-07", "weeks_count": 2},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201
        assert res.json() == {"count": 4}

        copies = await list_shifts(client, shop, manager_token, utc(2025, 1, 12), utc(2025, 1, 26))
        assert len(copies) == 4
        assert all(c["status"] == "draft" and c["recurrence_group_id"] is None for c in copies)
        monday_copy = next(c for c in copies if c["user_id"] == str(tech_user.id))
        assert datetime.fromisoformat(monday_copy["start_time"]) == MONDAY_START + timedelta(days=7)
        assert monday_copy["break_minutes"] == 20
        assert len(monday_copy["breaks"]) == 1

    async def test_copy_week_bounds(self, client: AsyncClient, shop, manager_token):
        await create_shift(client, shop, manager_token)
        res = await client.post(
            shop_url(shop, "/shifts/copy-week"),
            json={"source_week_start": "2025-01-05", "weeks_count": 13},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400
        assert res.json() == {"error": "Weeks count must be between 1 and 12"}

    async def test_copy_empty_week(self, client: AsyncClient, shop, manager_token):
        res = await client.post(
            shop_url(shop, "/shifts/copy-week"),
            json={"source_week_start": "2025-02-02", "weeks_count": 1},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400
        assert res.json() == {"error": "No shifts found in the source week"}


# ===== Bulk actions =====

class TestBulkActions:
    """항목별 부분 성공 벌크 액션 테스트."""

    async def test_mixed_results(self, client: AsyncClient, shop, manager_token):
        missing = str(uuid.uuid4())
        res = await client.post(
            shop_url(shop, "/shifts/bulk"),
            json={"actions": [
                {"action": "create", "data": {"start_time": iso(MONDAY_START), "end_time": iso(MONDAY_END)}},
                {"action": "update", "data": {"notes": "x"}},
                {"action": "delete", "id": missing},
                {"action": "publish", "id": missing},
            ]},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        results = res.json()["results"]
        assert results[0] == {"action": "create", "success": True, "error": None}
        assert results[1] == {"action": "update", "success": False, "error": "Missing id"}
        assert results[2] == {"action": "delete", "success": False, "error": "Shift not found"}
        assert results[3] == {"action": "publish", "success": False, "error": "Shift not found"}

        shifts = await list_shifts(client, shop, manager_token, MONDAY_START, MONDAY_START)
        assert len(shifts) == 1

    async def test_failed_item_is_rolled_back_alone(self, client: AsyncClient, shop, manager_token):
        shift = (await create_shift(client, shop, manager_token))["shift"]
        res = await client.post(
            shop_url(shop, "/shifts/bulk"),
            json={"actions": [
                {"action": "update", "id": shift["id"], "data": {"end_time": iso(MONDAY_START - timedelta(hours=2))}},
                {"action": "publish", "id": shift["id"]},
                {"action": "create", "data": {"start_time": iso(MONDAY_END), "end_time": iso(MONDAY_START)}},
            ]},
            headers=auth_header(manager_token),
        )
        results = res.json()["results"]
        assert results[0]["error"] == "end_time must be after start_time"
        assert results[1]["success"] is True
        assert results[2]["success"] is False
        assert "end_time must be after start_time" in results[2]["error"]

        got = (await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))).json()
        assert got["status"] == "published"
        assert datetime.fromisoformat(got["end_time"]) == MONDAY_END
