"""
TripChat Test Configuration
Pytest fixtures and test database setup
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tripchat.config import Settings
from tripchat.main import app
from tripchat.models.database import AttractionModel, Base, enable_sqlite_foreign_keys, get_db
from tripchat.services.llm import DialogueEngine, get_dialogue_engine


# Test database - in-memory SQLite
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
event.listen(engine, "connect", enable_sqlite_foreign_keys)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_completion(content):
    """Shape of an openai chat completion response."""
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = content
    return completion


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def settings():
    """Settings independent of the environment."""
    return Settings(
        _env_file=None,
        llm_api_key="test-key",
        share_base_url="https://trips.example.com",
        default_city="Сочи",
        default_days=3,
    )


@pytest.fixture
def llm_client():
    """AsyncOpenAI stand-in; set llm_client.chat.completions.create.return_value."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=make_completion("Привет!"))
    return client


@pytest.fixture
def dialogue_engine(llm_client):
    return DialogueEngine(llm_client, model="gpt-4", temperature=0.8)


@pytest.fixture(scope="function")
def client(db_session, dialogue_engine):
    """Create a test client with database and LLM overrides."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dialogue_engine] = lambda: dialogue_engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sochi_attractions(db_session):
    """Catalog with three Sochi entries and one Moscow entry."""
    rows = [
        AttractionModel(
            name="Роза Хутор",
            city="Сочи",
            country="Россия",
            latitude=43.6727,
            longitude=40.2970,
            rating=4.9,
            description="Горный курорт",
            working_status="Круглый год",
            photos=["https://img.example.com/roza-1.jpg", "https://img.example.com/roza-2.jpg"],
        ),
        AttractionModel(
            name="Дендрарий",
            city="Сочи",
            country="Россия",
            latitude=43.5740,
            longitude=39.7410,
            rating=4.7,
            description="Парк с субтропическими растениями",
            working_status=None,
            photos=["https://img.example.com/dendrarium.jpg"],
        ),
        AttractionModel(
            name="Олимпийский парк",
            city="Сочи",
            country="Россия",
            latitude=43.4022,
            longitude=39.9558,
            rating=4.5,
            description="Объекты Олимпиады 2014",
            working_status="Ежедневно",
            photos=[],
        ),
        AttractionModel(
            name="Красная площадь",
            city="Москва",
            country="Россия",
            latitude=55.7539,
            longitude=37.6208,
            rating=5.0,
            description="Главная площадь страны",
            working_status="Ежедневно",
            photos=["https://img.example.com/red-square.jpg"],
        ),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture
def completion():
    """Factory for fake chat completion responses."""
    return make_completion
