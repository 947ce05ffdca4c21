"""리포트 레포지토리 (원격 집계 함수 호출 담당).

Report Repository. Calls the database-side aggregation functions that
compute workforce metrics and the PTO ledger/balance. The computations are
owned by the database; this module only shapes arguments and decodes the
JSON each function returns.
"""

import json
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


def _decode(value: Any) -> Any:
    # asyncpg는 json 반환값을 문자열로 전달 (asyncpg hands json results back as text)
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


class ReportRepository:
    """원격 집계 함수 레포지토리 (Opaque RPC wrappers)."""

    async def _call(self, db: AsyncSession, sql: str, params: dict[str, Any]) -> Any:
        result = await db.execute(text(sql), params)
        return _decode(result.scalar())

    async def get_workforce_metrics(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
        start_date: date,
        end_date: date,
    ) -> Any:
        return await self._call(
            db,
            "SELECT get_workforce_metrics(:p_shop_id, :p_user_id, :p_start_date, :p_end_date)",
            {"p_shop_id": shop_id, "p_user_id": user_id, "p_start_date": start_date, "p_end_date": end_date},
        )

    async def get_team_workforce_summary(
        self,
        db: AsyncSession,
        shop_id: UUID,
        start_date: date,
        end_date: date,
    ) -> Any:
        return await self._call(
            db,
            "SELECT get_team_workforce_summary(:p_shop_id, :p_start_date, :p_end_date)",
            {"p_shop_id": shop_id, "p_start_date": start_date, "p_end_date": end_date},
        )

    async def get_pto_ledger(self, db: AsyncSession, shop_id: UUID, user_id: UUID) -> Any:
        return await self._call(
            db,
            "SELECT get_pto_ledger(:p_shop_id, :p_user_id)",
            {"p_shop_id": shop_id, "p_user_id": user_id},
        )

    async def get_pto_balance(self, db: AsyncSession, shop_id: UUID, user_id: UUID) -> Any:
        return await self._call(
            db,
            "SELECT get_pto_balance(:p_shop_id, :p_user_id)",
            {"p_shop_id": shop_id, "p_user_id": user_id},
        )


# 싱글턴 인스턴스 (Singleton instance)
report_repository: ReportRepository = ReportRepository()
