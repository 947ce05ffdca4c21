"""데이터베이스 엔진 및 세션 설정 모듈.

Database engine and session configuration module.
Sets up the async SQLAlchemy engine, session factory, and ORM base class
for the PostgreSQL database connection via asyncpg.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from shopshift.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    """드라이버별 엔진 옵션을 구성합니다.

    Build engine keyword arguments for the configured driver.
    Pool sizing and the statement cache switch only apply to asyncpg.
    """
    if url.startswith("sqlite"):
        return {"echo": settings.DEBUG}
    return {
        "echo": settings.DEBUG,
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        # 트랜잭션 모드 풀러에서 prepared statement 비활성화
        # (Disable prepared statement caches for transaction-mode pooling)
        "connect_args": {"statement_cache_size": 0},
    }


# 비동기 데이터베이스 엔진 (Async database engine)
engine: AsyncEngine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# 비동기 세션 팩토리 (expire_on_commit=False: 커밋 후에도 속성 접근 가능)
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """SQLAlchemy 선언적 베이스 클래스.

    Declarative base class for all ORM models.
    All models inherit from this class to register with the metadata.
    """

    pass


class UTCDateTime(TypeDecorator):
    """항상 UTC aware datetime을 반환하는 타임스탬프 컬럼 타입.

    Timestamp column type that stores instants in UTC and always returns
    timezone-aware UTC datetimes, including on backends (SQLite) that drop
    the offset.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    """현재 UTC 시각 (Current UTC instant)."""
    return datetime.now(timezone.utc)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """비동기 데이터베이스 세션을 생성하고 요청 종료 시 닫습니다.

    FastAPI dependency that yields an async database session.
    The session is automatically closed after the request completes,
    ensuring no connection leaks.

    Yields:
        AsyncSession: SQLAlchemy 비동기 세션 인스턴스 (Async session instance)
    """
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
