"""매장 카탈로그 서비스 (부서, 포지션, 시프트 태그, 스케줄).

Catalog Service. CRUD business logic for the small shop-scoped lookup
entities a shift refers to: departments, positions, shift tags and named
schedules.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.shift import Schedule, ShiftTag
from shopshift.models.shop import Department, Position
from shopshift.repositories.shift_repository import schedule_repository, shift_tag_repository
from shopshift.repositories.shop_repository import department_repository, position_repository
from shopshift.schemas.shop import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    PositionCreate,
    PositionResponse,
    PositionUpdate,
    ScheduleCreate,
    ScheduleResponse,
    TagCreate,
    TagResponse,
)
from shopshift.utils.exceptions import DuplicateError, NotFoundError


class DepartmentService:
    """부서 서비스 (Departments with a PTO accrual rate)."""

    def _to_response(self, department: Department) -> DepartmentResponse:
        return DepartmentResponse(
            id=str(department.id),
            shop_id=str(department.shop_id),
            name=department.name,
            pto_accrual_rate=department.pto_accrual_rate,
            sort_order=department.sort_order,
        )

    async def list_departments(self, db: AsyncSession, shop_id: UUID) -> list[DepartmentResponse]:
        departments = await department_repository.get_all(db, shop_id, order_by=Department.sort_order)
        return [self._to_response(d) for d in departments]

    async def create_department(self, db: AsyncSession, shop_id: UUID, data: DepartmentCreate) -> DepartmentResponse:
        """새 부서를 생성합니다 (적립률 기본값 0).

        Create a department; the accrual rate defaults to 0.
        """
        department: Department = await department_repository.create(
            db, {"shop_id": shop_id, **data.model_dump()}
        )
        return self._to_response(department)

    async def update_department(
        self,
        db: AsyncSession,
        shop_id: UUID,
        department_id: UUID,
        data: DepartmentUpdate,
    ) -> DepartmentResponse:
        department: Department | None = await department_repository.update(
            db, department_id, data.model_dump(exclude_unset=True, exclude_none=True), shop_id
        )
        if department is None:
            raise NotFoundError("Department not found")
        return self._to_response(department)

    async def delete_department(self, db: AsyncSession, shop_id: UUID, department_id: UUID) -> None:
        if not await department_repository.delete(db, department_id, shop_id):
            raise NotFoundError("Department not found")


class PositionService:
    """포지션 서비스.

    Position service. Position names are unique within a shop.
    """

    def _to_response(self, position: Position) -> PositionResponse:
        return PositionResponse(
            id=str(position.id),
            shop_id=str(position.shop_id),
            name=position.name,
            color=position.color,
            sort_order=position.sort_order,
        )

    async def list_positions(self, db: AsyncSession, shop_id: UUID) -> list[PositionResponse]:
        positions = await position_repository.get_all(db, shop_id, order_by=Position.sort_order)
        return [self._to_response(p) for p in positions]

    async def create_position(self, db: AsyncSession, shop_id: UUID, data: PositionCreate) -> PositionResponse:
        """새 포지션을 생성합니다.

        Raises:
            DuplicateError: 같은 이름의 포지션이 있을 때 (Duplicate name in shop)
        """
        if await position_repository.exists(db, {"shop_id": shop_id, "name": data.name}):
            raise DuplicateError("Position name already exists")
        position: Position = await position_repository.create(db, {"shop_id": shop_id, **data.model_dump()})
        return self._to_response(position)

    async def update_position(
        self,
        db: AsyncSession,
        shop_id: UUID,
        position_id: UUID,
        data: PositionUpdate,
    ) -> PositionResponse:
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        position: Position | None = await position_repository.get_by_id(db, position_id, shop_id)
        if position is None:
            raise NotFoundError("Position not found")
        if "name" in update_data and update_data["name"] != position.name:
            if await position_repository.exists(db, {"shop_id": shop_id, "name": update_data["name"]}):
                raise DuplicateError("Position name already exists")
        updated: Position | None = await position_repository.update(db, position_id, update_data, shop_id)
        return self._to_response(updated)

    async def delete_position(self, db: AsyncSession, shop_id: UUID, position_id: UUID) -> None:
        if not await position_repository.delete(db, position_id, shop_id):
            raise NotFoundError("Position not found")


class TagService:
    """시프트 태그 서비스 (Shift labels)."""

    def _to_response(self, tag: ShiftTag) -> TagResponse:
        return TagResponse(id=str(tag.id), shop_id=str(tag.shop_id), name=tag.name)

    async def list_tags(self, db: AsyncSession, shop_id: UUID) -> list[TagResponse]:
        tags = await shift_tag_repository.get_all(db, shop_id, order_by=ShiftTag.name)
        return [self._to_response(t) for t in tags]

    async def create_tag(self, db: AsyncSession, shop_id: UUID, data: TagCreate) -> TagResponse:
        tag: ShiftTag = await shift_tag_repository.create(db, {"shop_id": shop_id, "name": data.name})
        return self._to_response(tag)

    async def delete_tag(self, db: AsyncSession, shop_id: UUID, tag_id: UUID) -> None:
        """태그를 삭제합니다 (시프트 매핑도 함께 제거)."""
        if not await shift_tag_repository.delete_tag(db, shop_id, tag_id):
            raise NotFoundError("Tag not found")


class ScheduleService:
    """스케줄 서비스 (Named schedule groupings)."""

    def _to_response(self, schedule: Schedule) -> ScheduleResponse:
        return ScheduleResponse(
            id=str(schedule.id), shop_id=str(schedule.shop_id), name=schedule.name, color=schedule.color
        )

    async def list_schedules(self, db: AsyncSession, shop_id: UUID) -> list[ScheduleResponse]:
        schedules = await schedule_repository.get_all(db, shop_id, order_by=Schedule.name)
        return [self._to_response(s) for s in schedules]

    async def create_schedule(self, db: AsyncSession, shop_id: UUID, data: ScheduleCreate) -> ScheduleResponse:
        schedule: Schedule = await schedule_repository.create(db, {"shop_id": shop_id, **data.model_dump()})
        return self._to_response(schedule)

    async def delete_schedule(self, db: AsyncSession, shop_id: UUID, schedule_id: UUID) -> None:
        if not await schedule_repository.delete(db, schedule_id, shop_id):
            raise NotFoundError("Schedule not found")


# 싱글턴 인스턴스 (Singleton instances)
department_service: DepartmentService = DepartmentService()
position_service: PositionService = PositionService()
tag_service: TagService = TagService()
schedule_service: ScheduleService = ScheduleService()
