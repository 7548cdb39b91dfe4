import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from statuspage.core.database import Base
from statuspage.core.enums import Role
from statuspage.schemas.organizations import OrganizationCreate
from statuspage.services.organizations import OrganizationService
from statuspage.services.realtime.fanout import Broadcaster
from statuspage.services.realtime.hub import ChannelHub
from tests.mocks.fake_transport import RecordingTransport
from tests.mocks.identities import ADMIN, EDITOR, VIEWER, token_for
from tests.mocks.seed import add_member


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine for tests."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Async session bound to the in-memory engine."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def transport():
    return RecordingTransport()


@pytest_asyncio.fixture
async def broadcaster(transport):
    """Running broadcaster over the recording transport."""
    broadcaster = Broadcaster(transport)
    await broadcaster.start()
    yield broadcaster
    await broadcaster.stop()


@pytest_asyncio.fixture
async def org(session_factory):
    """Organization "acme" with ADMIN (creator), EDITOR and VIEWER as accepted members."""
    service = OrganizationService(session_factory=session_factory)
    created = await service.create_organization(ADMIN, OrganizationCreate(name="Acme Corp", domain="acme"))
    await add_member(session_factory, created.id, EDITOR, Role.EDITOR)
    await add_member(session_factory, created.id, VIEWER, Role.VIEWER)
    return created


@pytest_asyncio.fixture
async def app_with_db(db_engine, session_factory, transport):
    """FastAPI app wired to the in-memory test database and a recording transport."""
    import statuspage.core.database as db_module

    # Patch the module-level engine and session factory
    original_engine = db_module.engine
    original_session = db_module.async_session
    db_module.engine = db_engine
    db_module.async_session = session_factory

    from statuspage.main import app

    broadcaster = Broadcaster(transport)
    await broadcaster.start()
    app.state.hub = ChannelHub()
    app.state.broadcaster = broadcaster

    yield app

    await broadcaster.stop()
    db_module.engine = original_engine
    db_module.async_session = original_session


@pytest_asyncio.fixture
async def client_for(app_with_db):
    """Factory for HTTP clients authenticated as a given actor (None for anonymous)."""
    clients = []

    def _make(actor=None) -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app_with_db), base_url="http://test")
        if actor is not None:
            client.headers["Authorization"] = f"Bearer {token_for(actor)}"
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def admin_client(client_for):
    return client_for(ADMIN)


@pytest_asyncio.fixture
async def editor_client(client_for):
    return client_for(EDITOR)


@pytest_asyncio.fixture
async def viewer_client(client_for):
    return client_for(VIEWER)


@pytest_asyncio.fixture
async def anon_client(client_for):
    return client_for(None)
