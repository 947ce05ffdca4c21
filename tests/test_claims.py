"""오픈 시프트 신청 API 테스트.

Open-shift claim API tests: claiming, duplicate/closed guards and the
approval cascade (assign claimant, deny sibling claims, notify).
"""

import uuid
from datetime import datetime, timezone

from httpx import AsyncClient

from tests.conftest import auth_header, iso, shop_url

START = datetime(2025, 2, 3, 14, tzinfo=timezone.utc)
END = datetime(2025, 2, 3, 22, tzinfo=timezone.utc)


async def open_shift(client: AsyncClient, shop, token: str, **extra) -> dict:
    body = {"start_time": iso(START), "end_time": iso(END), **extra}
    res = await client.post(shop_url(shop, "/shifts"), json=body, headers=auth_header(token))
    assert res.status_code == 201, res.text
    return res.json()["shift"]


async def claim(client: AsyncClient, shop, token: str, shift_id: str):
    return await client.post(shop_url(shop, "/claims"), json={"shift_id": shift_id}, headers=auth_header(token))


async def notification_types(client: AsyncClient, shop, token: str) -> list[str]:
    res = await client.get(shop_url(shop, "/notifications"), headers=auth_header(token))
    return [n["type"] for n in res.json()]


class TestClaimShift:
    """신청 생성 테스트."""

    async def test_claim_open_shift(self, client: AsyncClient, shop, manager_token, tech_token):
        shift = await open_shift(client, shop, manager_token)
        res = await claim(client, shop, tech_token, shift["id"])
        assert res.status_code == 201
        body = res.json()
        assert body["status"] == "pending"
        assert body["user_name"] == "Terry Tech"

        assert await notification_types(client, shop, manager_token) == ["claim_requested"]

    async def test_claim_assigned_shift(self, client: AsyncClient, shop, manager_token, tech_token, other_tech):
        shift = await open_shift(client, shop, manager_token, user_id=str(other_tech.id))
        res = await claim(client, shop, tech_token, shift["id"])
        assert res.status_code == 400
        assert res.json() == {"error": "Shift is not open"}

    async def test_duplicate_claim(self, client: AsyncClient, shop, manager_token, tech_token):
        shift = await open_shift(client, shop, manager_token)
        await claim(client, shop, tech_token, shift["id"])
        res = await claim(client, shop, tech_token, shift["id"])
        assert res.status_code == 409
        assert res.json() == {"error": "You have already claimed this shift"}

    async def test_claim_missing_shift(self, client: AsyncClient, shop, tech_token):
        res = await claim(client, shop, tech_token, str(uuid.uuid4()))
        assert res.status_code == 404
        assert res.json() == {"error": "Shift not found"}

    async def test_technician_sees_own_claims(self, client: AsyncClient, shop, manager_token, tech_token, other_token):
        shift = await open_shift(client, shop, manager_token)
        await claim(client, shop, tech_token, shift["id"])
        await claim(client, shop, other_token, shift["id"])

        mine = (await client.get(shop_url(shop, "/claims"), headers=auth_header(tech_token))).json()
        assert [c["user_name"] for c in mine] == ["Terry Tech"]

        every = (await client.get(shop_url(shop, "/claims"), headers=auth_header(manager_token))).json()
        assert len(every) == 2


class TestReviewClaim:
    """신청 승인/거절 테스트."""

    async def test_approve_assigns_and_denies_siblings(
        self, client: AsyncClient, shop, manager_token, tech_user, tech_token, other_token
    ):
        shift = await open_shift(client, shop, manager_token)
        winner = (await claim(client, shop, tech_token, shift["id"])).json()
        await claim(client, shop, other_token, shift["id"])

        res = await client.post(shop_url(shop, f"/claims/{winner['id']}/approve"), headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json()["status"] == "approved"
        assert res.json()["reviewed_at"] is not None

        got = (await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))).json()
        assert got["user_id"] == str(tech_user.id)
        assert got["is_open"] is False

        claims = (await client.get(
            shop_url(shop, "/claims"), params={"shift_id": shift["id"]}, headers=auth_header(manager_token)
        )).json()
        assert sorted(c["status"] for c in claims) == ["approved", "denied"]
        assert [c for c in claims if c["status"] == "pending"] == []

        assert await notification_types(client, shop, tech_token) == ["claim_approved"]
        assert await notification_types(client, shop, other_token) == ["claim_denied"]

    async def test_approve_after_direct_assignment(
        self, client: AsyncClient, shop, manager_token, tech_token, other_tech
    ):
        """직접 배정된 시프트의 신청은 승인할 수 없고 대기 상태로 남음."""
        shift = await open_shift(client, shop, manager_token)
        created = (await claim(client, shop, tech_token, shift["id"])).json()
        await client.post(
            shop_url(shop, f"/shifts/{shift['id']}/assign"),
            json={"user_id": str(other_tech.id)},
            headers=auth_header(manager_token),
        )

        res = await client.post(shop_url(shop, f"/claims/{created['id']}/approve"), headers=auth_header(manager_token))
        assert res.status_code == 400
        assert res.json() == {"error": "Shift is no longer open"}

        got = (await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))).json()
        assert got["user_id"] == str(other_tech.id)
        claims = (await client.get(shop_url(shop, "/claims"), headers=auth_header(manager_token))).json()
        assert [c["status"] for c in claims] == ["pending"]

    async def test_approve_twice(self, client: AsyncClient, shop, manager_token, tech_token):
        shift = await open_shift(client, shop, manager_token)
        created = (await claim(client, shop, tech_token, shift["id"])).json()
        await client.post(shop_url(shop, f"/claims/{created['id']}/approve"), headers=auth_header(manager_token))

        res = await client.post(shop_url(shop, f"/claims/{created['id']}/deny"), headers=auth_header(manager_token))
        assert res.status_code == 400
        assert res.json() == {"error": "Claim has already been reviewed"}

    async def test_deny(self, client: AsyncClient, shop, manager_token, tech_token):
        shift = await open_shift(client, shop, manager_token)
        created = (await claim(client, shop, tech_token, shift["id"])).json()
        res = await client.post(shop_url(shop, f"/claims/{created['id']}/deny"), headers=auth_header(manager_token))
        assert res.json()["status"] == "denied"

        got = (await client.get(shop_url(shop, f"/shifts/{shift['id']}"), headers=auth_header(manager_token))).json()
        assert got["is_open"] is True
        assert await notification_types(client, shop, tech_token) == ["claim_denied"]

    async def test_technician_cannot_approve(self, client: AsyncClient, shop, manager_token, tech_token):
        shift = await open_shift(client, shop, manager_token)
        created = (await claim(client, shop, tech_token, shift["id"])).json()
        res = await client.post(shop_url(shop, f"/claims/{created['id']}/approve"), headers=auth_header(tech_token))
        assert res.status_code == 403

    async def test_unknown_claim(self, client: AsyncClient, shop, manager_token):
        res = await client.post(shop_url(shop, f"/claims/{uuid.uuid4()}/approve"), headers=auth_header(manager_token))
        assert res.status_code == 404
        assert res.json() == {"error": "Claim not found"}
