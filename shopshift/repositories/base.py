"""기본 CRUD 레포지토리 (모든 레포지토리의 부모 클래스).

Base CRUD Repository, parent class for all domain repositories.
Provides generic Create, Read, Update, Delete operations with shop scoping.

Usage:
    class PositionRepository(BaseRepository[Position]):
        def __init__(self) -> None:
            super().__init__(Position)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.database import Base

# 제네릭 타입 변수 (Generic type variable representing a SQLAlchemy model)
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """제네릭 CRUD 레포지토리.

    Generic CRUD repository providing common database operations.
    All queries are scoped by shop_id when the model supports it.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    def _scoped(self, query: Select, shop_id: UUID | None) -> Select:
        # 모델에 shop_id 컬럼이 있고 필터가 제공된 경우에만 매장 범위 적용
        # (Apply shop scope only when the model has shop_id and a filter is given)
        if shop_id is not None and hasattr(self.model, "shop_id"):
            query = query.where(self.model.shop_id == shop_id)
        return query

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
        shop_id: UUID | None = None,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Retrieve a single record by its UUID.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 조회할 레코드의 UUID (UUID of the record to retrieve)
            shop_id: 매장 범위 필터, None이면 미적용
                     (Shop scope filter; None skips shop filtering)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = self._scoped(select(self.model).where(self.model.id == record_id), shop_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_many(
        self,
        db: AsyncSession,
        record_ids: Sequence[UUID],
        shop_id: UUID | None = None,
    ) -> Sequence[ModelType]:
        """여러 ID의 레코드를 한 번에 조회합니다 (Fetch several records by id)."""
        if not record_ids:
            return []
        query: Select = self._scoped(select(self.model).where(self.model.id.in_(list(record_ids))), shop_id)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_all(
        self,
        db: AsyncSession,
        shop_id: UUID | None = None,
        filters: dict[str, Any] | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelType]:
        """조건에 맞는 모든 레코드를 조회합니다.

        Retrieve all records matching the given filters.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shop_id: 매장 범위 필터 (Shop scope filter)
            filters: 추가 필터 딕셔너리 {'컬럼명': 값}
                     (Additional filter dict {'column_name': value})
            order_by: 정렬 기준 컬럼 (Column to order by)

        Returns:
            Sequence[ModelType]: 조회된 레코드 목록 (List of matching records)
        """
        query: Select = self._scoped(select(self.model), shop_id)

        # 동적 필터 적용 (Dynamic filter application)
        if filters:
            for column_name, value in filters.items():
                if hasattr(self.model, column_name) and value is not None:
                    query = query.where(getattr(self.model, column_name) == value)

        if order_by is not None:
            query = query.order_by(order_by)

        result = await db.execute(query)
        return result.scalars().all()

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ModelType:
        """새 레코드를 생성합니다.

        Create a new record in the database.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            obj_data: 생성할 레코드의 데이터 딕셔너리
                      (Dictionary of data for the new record)

        Returns:
            ModelType: 생성된 레코드 (The created record)
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def create_many(
        self,
        db: AsyncSession,
        rows: Sequence[dict[str, Any]],
    ) -> list[ModelType]:
        """여러 레코드를 한 번에 생성합니다 (Insert a batch in one flush)."""
        objs: list[ModelType] = [self.model(**row) for row in rows]
        if not objs:
            return objs
        db.add_all(objs)
        await db.flush()
        return objs

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
        shop_id: UUID | None = None,
    ) -> ModelType | None:
        """기존 레코드를 업데이트합니다.

        Update an existing record by its UUID.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 업데이트할 레코드의 UUID (UUID of the record to update)
            update_data: 업데이트할 필드와 값의 딕셔너리
                         (Dictionary of fields and values to update)
            shop_id: 매장 범위 필터 (Shop scope filter)

        Returns:
            ModelType | None: 업데이트된 레코드 또는 None (Updated record or None)
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id, shop_id)
        if db_obj is None:
            return None

        # exclude_unset으로 전달된 필드만 업데이트 (None 값도 허용)
        # (Update only fields passed via exclude_unset, None allowed)
        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(
        self,
        db: AsyncSession,
        record_id: UUID,
        shop_id: UUID | None = None,
    ) -> bool:
        """레코드를 삭제합니다.

        Delete a record by its UUID.

        Returns:
            bool: 삭제 성공 여부 (Whether the deletion was successful)
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id, shop_id)
        if db_obj is None:
            return False

        await db.delete(db_obj)
        await db.flush()
        return True

    async def delete_many(
        self,
        db: AsyncSession,
        record_ids: Sequence[UUID],
        shop_id: UUID | None = None,
    ) -> int:
        """여러 레코드를 삭제하고 삭제된 수를 반환합니다 (Bulk delete, returns rowcount)."""
        if not record_ids:
            return 0
        stmt = delete(self.model).where(self.model.id.in_(list(record_ids)))
        if shop_id is not None and hasattr(self.model, "shop_id"):
            stmt = stmt.where(self.model.shop_id == shop_id)
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount or 0

    async def exists(
        self,
        db: AsyncSession,
        filters: dict[str, Any],
    ) -> bool:
        """주어진 조건에 일치하는 레코드가 존재하는지 확인합니다.

        Check if a record matching the given filters exists.
        """
        query: Select = select(func.count()).select_from(self.model)
        for column_name, value in filters.items():
            if hasattr(self.model, column_name):
                query = query.where(getattr(self.model, column_name) == value)

        count: int = (await db.execute(query)).scalar() or 0
        return count > 0
