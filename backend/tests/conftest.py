import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from auth.application.services import create_access_token
from auth.domain.entities import Principal, Role
from main import app
from shared.dependencies import get_db
from shared.infrastructure.database import Base
from shared.infrastructure.unit_of_work import DbUnitOfWork

import articles.infrastructure.models  # noqa: F401
import categories.infrastructure.models  # noqa: F401
import comments.infrastructure.models  # noqa: F401
import locks.infrastructure.models  # noqa: F401
import versions.infrastructure.models  # noqa: F401


def make_principal(role: Role, suffix: str = "1", name: str | None = None) -> Principal:
    return Principal(
        id=f"{role.value}-{suffix}",
        display_name=name or f"{role.value.title()} {suffix}",
        role=role,
    )


def auth_headers_for(principal: Principal) -> dict:
    return {"Authorization": f"Bearer {create_access_token(principal)}"}


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def uow(db):
    return DbUnitOfWork(db)


@pytest.fixture(autouse=True)
async def override_db(session_factory):
    async def _override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def reader():
    return make_principal(Role.READER)


@pytest.fixture
def actor():
    return make_principal(Role.ACTOR)


@pytest.fixture
def author():
    return make_principal(Role.AUTHOR, name="Alice Author")


@pytest.fixture
def other_author():
    return make_principal(Role.AUTHOR, suffix="2", name="Bob Author")


@pytest.fixture
def editor():
    return make_principal(Role.EDITOR, name="Eve Editor")


ARTICLE_FIELDS = {
    "title": "Resetting a VPN token",
    "body": "Open the self-service portal and choose reset token.",
    "category": "Network",
    "tags": ["vpn", "token"],
}
