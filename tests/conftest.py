import httpx
import pytest
import pytest_asyncio

from minigram.ai.client import get_ai_client
from minigram.db.session import Database
from minigram.main import create_app
from tests.helpers import FakeAIClient


@pytest_asyncio.fixture
async def database():
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.sessionmaker() as s:
        yield s


@pytest.fixture
def fake_ai():
    return FakeAIClient()


@pytest.fixture
def app(database, fake_ai):
    # ASGITransport no corre el lifespan: el handle llega ya creado
    application = create_app(database=database)
    application.dependency_overrides[get_ai_client] = lambda: fake_ai
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
