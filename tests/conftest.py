"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB (aiosqlite), session, and httpx
client fixtures. Each test gets a fresh database, so no cleanup is needed.
Environment variables are set before the app is imported so the settings
singleton picks them up.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["APP_USERNAME"] = "tester"
os.environ["APP_PASSWORD"] = "s3cret!"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["AXIOM_API_TOKEN"] = ""
os.environ["AXIOM_DATASET"] = ""

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import timedelta  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Bug  # noqa: E402
from app.utils.jwt import create_session_token  # noqa: E402
from app.utils.validation import now_ms  # noqa: E402

TEST_USERNAME = "tester"
TEST_PASSWORD = "s3cret!"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 — 테스트마다 새 인메모리 DB."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
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


@pytest.fixture
def app_transport(db: AsyncSession) -> Any:
    """DB 세션을 오버라이드한 ASGI 전송 계층."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    yield ASGITransport(app=app)
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app_transport: ASGITransport) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트."""
    async with AsyncClient(transport=app_transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# 헬퍼: 토큰과 테스트 데이터
# ---------------------------------------------------------------------------
def make_token(expires_delta: timedelta | None = None, **extra: Any) -> str:
    """테스트용 세션 토큰을 생성합니다."""
    return create_session_token({"sub": TEST_USERNAME, **extra}, expires_delta=expires_delta)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    return make_token()


async def make_bug(db: AsyncSession, **overrides: Any) -> Bug:
    """버그 레코드를 직접 삽입합니다."""
    values: dict[str, Any] = {
        "description": "Existing bug",
        "impact": 3,
        "likelihood": 3,
        "created_at": now_ms(),
        "reference": False,
    }
    values.update(overrides)
    bug = Bug(**values)
    db.add(bug)
    await db.flush()
    await db.refresh(bug)
    return bug
