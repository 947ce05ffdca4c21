"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, and httpx client fixtures.
Each test gets a fresh schema on an aiosqlite engine (StaticPool keeps the
single in-memory connection alive for the whole test).
"""

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from shopshift.config import settings
from shopshift.database import Base, get_db
from shopshift.main import app
from shopshift.models import *  # noqa: F401,F403 — register all models with metadata

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite+aiosqlite://"

# 테스트 매장 시간대 (Shop timezone used by the fixtures)
SHOP_TIMEZONE = "America/New_York"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 매 테스트마다 스키마를 새로 생성합니다."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # SAVEPOINT 사용을 위해 드라이버의 자동 BEGIN을 끄고 직접 BEGIN 발행,
    # 외래 키 CASCADE / SET NULL을 PostgreSQL처럼 적용
    # (Let SQLAlchemy own BEGIN so nested transactions work on SQLite, and
    # enforce foreign keys so ON DELETE rules behave as on PostgreSQL)
    @event.listens_for(eng.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(eng.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def shop(db: AsyncSession):
    """테스트 매장을 생성합니다."""
    from shopshift.models.shop import Shop
    s = Shop(name="Test Auto Shop", address="123 Test St", timezone=SHOP_TIMEZONE)
    db.add(s)
    await db.commit()
    return s


async def _make_member(db: AsyncSession, shop, email: str, full_name: str, role: str):
    from shopshift.models.shop import Profile, ShopMember
    profile = Profile(id=uuid.uuid4(), email=email, full_name=full_name)
    db.add(profile)
    await db.flush()
    db.add(ShopMember(shop_id=shop.id, user_id=profile.id, role=role))
    await db.commit()
    return profile


@pytest_asyncio.fixture
async def owner_user(db: AsyncSession, shop):
    """매장 소유자를 생성합니다."""
    return await _make_member(db, shop, "owner@test.com", "Olivia Owner", "owner")


@pytest_asyncio.fixture
async def manager_user(db: AsyncSession, shop):
    """매니저를 생성합니다."""
    return await _make_member(db, shop, "manager@test.com", "Max Manager", "manager")


@pytest_asyncio.fixture
async def tech_user(db: AsyncSession, shop):
    """테크니션을 생성합니다."""
    return await _make_member(db, shop, "tech@test.com", "Terry Tech", "technician")


@pytest_asyncio.fixture
async def other_tech(db: AsyncSession, shop):
    """두 번째 테크니션을 생성합니다."""
    return await _make_member(db, shop, "tech2@test.com", "Sam Second", "technician")


@pytest_asyncio.fixture
async def outsider(db: AsyncSession):
    """매장 구성원이 아닌 사용자를 생성합니다."""
    from shopshift.models.shop import Profile
    profile = Profile(id=uuid.uuid4(), email="outsider@test.com", full_name="Out Sider")
    db.add(profile)
    await db.commit()
    return profile


def make_token(user) -> str:
    """테스트용 인증 서비스 JWT 토큰을 생성합니다."""
    return jwt.encode(
        {
            "sub": str(user.id),
            "email": user.email,
            "aud": settings.AUTH_JWT_AUDIENCE,
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        },
        settings.AUTH_JWT_SECRET,
        algorithm=settings.AUTH_JWT_ALGORITHM,
    )


@pytest.fixture
def owner_token(owner_user) -> str:
    return make_token(owner_user)


@pytest.fixture
def manager_token(manager_user) -> str:
    return make_token(manager_user)


@pytest.fixture
def tech_token(tech_user) -> str:
    return make_token(tech_user)


@pytest.fixture
def other_token(other_tech) -> str:
    return make_token(other_tech)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def shop_url(shop, path: str = "") -> str:
    return f"/api/v1/shops/{shop.id}{path}"


def iso(value: datetime) -> str:
    """UTC ISO 문자열 (UTC ISO-8601 string for request bodies)."""
    return value.astimezone(timezone.utc).isoformat()
