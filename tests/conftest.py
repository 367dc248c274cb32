import copy
from pathlib import Path

import pytest
import pytest_asyncio
import yaml
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.db.models import Base
from src.db.session import db_session
from src.routers import results as results_router
from src.routers import surveys as surveys_router

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SURVEY_FIXTURE_PATH = FIXTURES_DIR / "personality_survey.yml"

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def survey_fixture_path():
    return SURVEY_FIXTURE_PATH


@pytest.fixture(scope="session")
def survey_data_template(survey_fixture_path):
    with open(survey_fixture_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def survey_data(survey_data_template):
    """A fresh raw survey mapping for each test, safe to mutate."""
    return copy.deepcopy(survey_data_template)


@pytest_asyncio.fixture
async def session_factory():
    """Creates an isolated in-memory database with the schema for one test."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory):
    """A FastAPI app with the API routers, wired to the test database."""
    test_app = FastAPI()
    test_app.include_router(results_router.router, prefix="/api/v1")
    test_app.include_router(surveys_router.router, prefix="/api/v1")

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    test_app.dependency_overrides[db_session] = override_db_session
    return test_app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as api_client:
        yield api_client
