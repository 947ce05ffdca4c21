"""매장 구성원 API 테스트.

Member API tests: listing, department assignment, and the archive cascade
(future shifts deleted, pending swaps cancelled, pending claims denied).
"""

import uuid
from datetime import datetime, timedelta, timezone

from httpx import AsyncClient

from tests.conftest import auth_header, iso, shop_url


async def member_id(client: AsyncClient, shop, token: str, user) -> str:
    members = (await client.get(
        shop_url(shop, "/members"), params={"include_archived": "true"}, headers=auth_header(token)
    )).json()
    return next(m["id"] for m in members if m["user_id"] == str(user.id))


async def make_shift(client: AsyncClient, shop, token: str, start: datetime, user=None) -> dict:
    body = {"start_time": iso(start), "end_time": iso(start + timedelta(hours=6))}
    if user is not None:
        body["user_id"] = str(user.id)
    res = await client.post(shop_url(shop, "/shifts"), json=body, headers=auth_header(token))
    assert res.status_code == 201, res.text
    return res.json()["shift"]


class TestMembers:
    """구성원 조회 및 부서 배정 테스트."""

    async def test_list_members(self, client: AsyncClient, shop, manager_token, tech_user):
        res = await client.get(shop_url(shop, "/members"), headers=auth_header(manager_token))
        assert res.status_code == 200
        names = {m["full_name"]: m["role"] for m in res.json()}
        assert names == {"Max Manager": "manager", "Terry Tech": "technician"}

    async def test_assign_department(self, client: AsyncClient, shop, manager_token, tech_user):
        department = (await client.post(
            shop_url(shop, "/departments"), json={"name": "Service"}, headers=auth_header(manager_token)
        )).json()
        target = await member_id(client, shop, manager_token, tech_user)

        res = await client.put(
            shop_url(shop, f"/members/{target}/department"),
            json={"department_id": department["id"]},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert res.json()["department_id"] == department["id"]

        res = await client.put(
            shop_url(shop, f"/members/{target}/department"), json={"department_id": None}, headers=auth_header(manager_token)
        )
        assert res.json()["department_id"] is None

    async def test_assign_unknown_department(self, client: AsyncClient, shop, manager_token, tech_user):
        target = await member_id(client, shop, manager_token, tech_user)
        res = await client.put(
            shop_url(shop, f"/members/{target}/department"),
            json={"department_id": str(uuid.uuid4())},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 404
        assert res.json() == {"error": "Department not found"}


class TestArchive:
    """구성원 보관/복원 테스트."""

    async def test_archive_cascade(self, client: AsyncClient, shop, manager_token, tech_user, tech_token):
        now = datetime.now(timezone.utc).replace(microsecond=0)
        past = await make_shift(client, shop, manager_token, datetime(2025, 1, 6, 14, tzinfo=timezone.utc), tech_user)
        future = await make_shift(client, shop, manager_token, now + timedelta(days=3), tech_user)
        open_shift = await make_shift(client, shop, manager_token, now + timedelta(days=4))

        await client.post(shop_url(shop, "/claims"), json={"shift_id": open_shift["id"]}, headers=auth_header(tech_token))
        swap = (await client.post(
            shop_url(shop, "/swaps"), json={"requester_shift_id": future["id"]}, headers=auth_header(tech_token)
        )).json()

        target = await member_id(client, shop, manager_token, tech_user)
        res = await client.post(shop_url(shop, f"/members/{target}/archive"), headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json() == {"success": True, "deleted_shifts": 1, "cancelled_swaps": 1, "denied_claims": 1}

        res = await client.get(shop_url(shop, f"/shifts/{future['id']}"), headers=auth_header(manager_token))
        assert res.status_code == 404
        res = await client.get(shop_url(shop, f"/shifts/{past['id']}"), headers=auth_header(manager_token))
        assert res.json()["user_id"] == str(tech_user.id)

        swaps = (await client.get(shop_url(shop, "/swaps"), headers=auth_header(manager_token))).json()
        assert [s["status"] for s in swaps if s["id"] == swap["id"]] == ["cancelled"]
        claims = (await client.get(shop_url(shop, "/claims"), headers=auth_header(manager_token))).json()
        assert [c["status"] for c in claims] == ["denied"]

        active = (await client.get(shop_url(shop, "/members"), headers=auth_header(manager_token))).json()
        assert [m["full_name"] for m in active] == ["Max Manager"]

        res = await client.get(shop_url(shop, "/members"), headers=auth_header(tech_token))
        assert res.status_code == 403

    async def test_archive_cancels_swap_targeting_future_shift(
        self, client: AsyncClient, shop, manager_token, tech_user, other_tech, other_token
    ):
        """다른 직원이 보관 대상의 미래 시프트를 노린 교환도 취소되고 행은 남음."""
        now = datetime.now(timezone.utc).replace(microsecond=0)
        mine = await make_shift(client, shop, manager_token, now + timedelta(days=2), tech_user)
        theirs = await make_shift(client, shop, manager_token, now + timedelta(days=5), other_tech)
        swap = (await client.post(
            shop_url(shop, "/swaps"),
            json={"requester_shift_id": theirs["id"], "target_shift_id": mine["id"]},
            headers=auth_header(other_token),
        )).json()
        assert swap["target_id"] == str(tech_user.id)

        target = await member_id(client, shop, manager_token, tech_user)
        res = await client.post(shop_url(shop, f"/members/{target}/archive"), headers=auth_header(manager_token))
        assert res.json()["cancelled_swaps"] == 1
        assert res.json()["deleted_shifts"] == 1

        swaps = (await client.get(shop_url(shop, "/swaps"), headers=auth_header(other_token))).json()
        assert [(s["id"], s["status"]) for s in swaps] == [(swap["id"], "cancelled")]

    async def test_cannot_archive_owner(self, client: AsyncClient, shop, owner_user, manager_token):
        target = await member_id(client, shop, manager_token, owner_user)
        res = await client.post(shop_url(shop, f"/members/{target}/archive"), headers=auth_header(manager_token))
        assert res.status_code == 400
        assert res.json() == {"error": "Cannot archive a shop owner"}

    async def test_archive_twice_and_restore(self, client: AsyncClient, shop, manager_token, tech_user):
        target = await member_id(client, shop, manager_token, tech_user)
        await client.post(shop_url(shop, f"/members/{target}/archive"), headers=auth_header(manager_token))

        res = await client.post(shop_url(shop, f"/members/{target}/archive"), headers=auth_header(manager_token))
        assert res.status_code == 400
        assert res.json() == {"error": "Member is already archived"}

        res = await client.post(shop_url(shop, f"/members/{target}/restore"), headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json()["is_active"] is True

        res = await client.post(shop_url(shop, f"/members/{target}/restore"), headers=auth_header(manager_token))
        assert res.status_code == 400
        assert res.json() == {"error": "Member is already active"}

    async def test_technician_cannot_archive(self, client: AsyncClient, shop, manager_user, tech_token, other_tech):
        target_res = await client.get(shop_url(shop, "/members"), headers=auth_header(tech_token))
        target = next(m["id"] for m in target_res.json() if m["user_id"] == str(other_tech.id))
        res = await client.post(shop_url(shop, f"/members/{target}/archive"), headers=auth_header(tech_token))
        assert res.status_code == 403
