"""리포트 서비스 (근무 지표 조회).

Report Service. Shapes inputs for the database-side workforce aggregation
functions and returns their JSON output unchanged.
"""

from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.repositories.report_repository import report_repository
from shopshift.utils.exceptions import BadRequestError


class ReportService:
    """리포트 서비스 (Opaque aggregation wrappers)."""

    @staticmethod
    def _check_range(start_date: date, end_date: date) -> None:
        if end_date < start_date:
            raise BadRequestError("end_date must not be before start_date")

    async def get_workforce_metrics(
        self,
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
        start_date: date,
        end_date: date,
    ) -> Any:
        """직원 한 명의 근무 지표를 조회합니다 (Per-member workforce metrics)."""
        self._check_range(start_date, end_date)
        return await report_repository.get_workforce_metrics(db, shop_id, user_id, start_date, end_date)

    async def get_team_summary(self, db: AsyncSession, shop_id: UUID, start_date: date, end_date: date) -> Any:
        self._check_range(start_date, end_date)
        return await report_repository.get_team_workforce_summary(db, shop_id, start_date, end_date)


# 싱글턴 인스턴스 (Singleton instance)
report_service: ReportService = ReportService()
