"""애플리케이션 수준 테스트.

App-level tests: health check and the ``{"error": message}`` shape for
routing failures raised by the framework itself.
"""

from httpx import AsyncClient


class TestErrorShape:
    """라우팅 오류 응답 형태 테스트."""

    async def test_health(self, client: AsyncClient):
        res = await client.get("/health")
        assert res.status_code == 200

    async def test_unknown_route(self, client: AsyncClient):
        res = await client.get("/api/v1/nowhere")
        assert res.status_code == 404
        assert res.json() == {"error": "Not Found"}

    async def test_wrong_method(self, client: AsyncClient):
        res = await client.get("/api/v1/cron/clock-reminders")
        assert res.status_code == 405
        assert res.json() == {"error": "Method Not Allowed"}
