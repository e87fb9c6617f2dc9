"""
Test Suite Configuration
"""
import itertools
from typing import AsyncGenerator, Callable, Generator

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from marketplace.config import Settings
from marketplace.config.settings import DatabaseSettings, MonitoringSettings
from marketplace.database.models import Base
from marketplace.serving.api import create_api_app


SAMPLE_GAMES = [
    {
        "id": 452,
        "title": "Call Of Duty: Warzone",
        "short_description": "A standalone free-to-play battle royale and modes accessible via Call of Duty: Modern Warfare.",
        "genre": "Shooter",
        "platform": "PC (Windows)",
        "game_url": "https://www.freetogame.com/open/call-of-duty-warzone",
        "thumbnail": "https://www.freetogame.com/g/452/thumbnail.jpg",
        "publisher": "Activision",
        "developer": "Infinity Ward",
        "release_date": "2020-03-10",
    },
    {
        "id": 540,
        "title": "Overwatch 2",
        "short_description": "A hero-focused first-person team shooter from Blizzard Entertainment.",
        "genre": "Shooter",
        "platform": "PC (Windows)",
        "game_url": "https://www.freetogame.com/open/overwatch-2",
        "thumbnail": "https://www.freetogame.com/g/540/thumbnail.jpg",
        "publisher": "Activision Blizzard",
        "developer": "Blizzard Entertainment",
        "release_date": "2022-10-04",
    },
    {
        "id": 516,
        "title": "PUBG: BATTLEGROUNDS",
        "short_description": "Get into the action in one of the longest running battle royale games PUBG Battlegrounds.",
        "genre": "Shooter",
        "platform": "PC (Windows)",
        "game_url": "https://www.freetogame.com/open/pubg",
        "thumbnail": "https://www.freetogame.com/g/516/thumbnail.jpg",
        "publisher": "KRAFTON, Inc.",
        "developer": "KRAFTON, Inc.",
        "release_date": "2022-01-12",
    },
    {
        "id": 11,
        "title": "Neverwinter",
        "short_description": "A free-to-play 3D action MMORPG based on the acclaimed Dungeons & Dragons fantasy roleplaying game.",
        "genre": "MMORPG",
        "platform": "PC (Windows)",
        "game_url": "https://www.freetogame.com/open/neverwinter",
        "thumbnail": "https://www.freetogame.com/g/11/thumbnail.jpg",
        "publisher": "Perfect World Entertainment",
        "developer": "Cryptic Studios",
        "release_date": "2013-12-06",
    },
]


class FakeFreeToGame:
    """
    In-process stand-in for the FreeToGame API.

    Replace ``handler`` to change how it answers; every request is recorded.
    """

    def __init__(self):
        self.requests = []
        self.handler = self.answer

    def answer(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/games") or path.endswith("/filter"):
            return httpx.Response(200, json=SAMPLE_GAMES)
        if path.endswith("/game"):
            game_id = int(request.url.params["id"])
            for game in SAMPLE_GAMES:
                if game["id"] == game_id:
                    return httpx.Response(200, json=game)
            return httpx.Response(404, json={"status": 0, "status_message": "No game found"})
        return httpx.Response(404)

    def fail_with(self, status_code: int) -> None:
        self.handler = lambda request: httpx.Response(status_code, json={"status": 0})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings backed by an in-memory database"""
    return Settings(
        app_env="testing",
        database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"),
        monitoring=MonitoringSettings(log_level="WARNING", log_format="text"),
    )


@pytest.fixture
def fake_catalog() -> FakeFreeToGame:
    return FakeFreeToGame()


@pytest.fixture
def client(test_settings, fake_catalog) -> Generator[TestClient, None, None]:
    """API client running the full application lifespan"""
    app = create_api_app(test_settings, catalog_transport=fake_catalog.transport)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_user(client) -> Callable[..., dict]:
    """Create users through the API, unique by default"""
    counter = itertools.count(1)

    def _create(**overrides) -> dict:
        n = next(counter)
        payload = {
            "username": f"player{n}",
            "email": f"player{n}@mail.com",
            "password": "secret123",
        }
        payload.update(overrides)
        response = client.post("/users", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_product(client) -> Callable[..., dict]:
    """Create products through the API"""
    counter = itertools.count(1)

    def _create(price: float = 10.0, **overrides) -> dict:
        n = next(counter)
        payload = {"name": f"Product {n}", "about": f"Description {n}", "price": price}
        payload.update(overrides)
        response = client.post("/products", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def sample_games() -> list:
    """FreeToGame listing served by the fake upstream"""
    return SAMPLE_GAMES
