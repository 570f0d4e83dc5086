"""
Portfolio admin backend - Test Configuration and Fixtures
"""
import os
from typing import Any, AsyncGenerator, Dict

import mongomock
import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient

# Set testing environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["JWT_SECRET"] = "test-jwt-secret-for-testing-only"

from main import app
from auth import TokenIssuer
from config import Settings, get_settings
from database import Database, get_database

fake = Faker()

ADMIN_PAGES = {
    "login.html": "<html><body>login</body></html>",
    "index.html": "<html><body>dashboard</body></html>",
    "create.html": "<html><body>create</body></html>",
}


def mongomock_factory(uri: str, **kwargs: Any) -> mongomock.MongoClient:
    return mongomock.MongoClient()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing uploads and admin pages at a temp directory"""
    admin_dir = tmp_path / "admin"
    admin_dir.mkdir()
    for name, html in ADMIN_PAGES.items():
        (admin_dir / name).write_text(html, encoding="utf-8")
    return Settings(
        environment="test",
        mongodb_database="portfolio-test",
        admin_username="admin",
        admin_password="admin123",
        jwt_secret="test-jwt-secret-for-testing-only",
        admin_dir=str(admin_dir),
        upload_dir=str(tmp_path / "uploads"),
        log_level="WARNING",
    )


@pytest.fixture
def database(settings: Settings):
    """Connected in-memory MongoDB"""
    db = Database(settings.mongodb_uri, settings.mongodb_database, client_factory=mongomock_factory)
    assert db.connect()
    yield db
    db.close()


@pytest.fixture
def offline_database(settings: Settings) -> Database:
    """A handle that never connected"""
    return Database(settings.mongodb_uri, settings.mongodb_database, client_factory=mongomock_factory)


def _client(settings: Settings, database: Database) -> AsyncClient:
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_database] = lambda: database
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
async def client(settings: Settings, database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Test client bound to the in-memory database"""
    async with _client(settings, database) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def offline_client(settings: Settings, offline_database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose database is down"""
    async with _client(settings, offline_database) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token(settings: Settings) -> str:
    return TokenIssuer.from_settings(settings).issue(settings.admin_username)


@pytest.fixture
def auth_headers(admin_token: str) -> Dict[str, str]:
    """Bearer header for the admin"""
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def cookie_headers(settings: Settings, admin_token: str) -> Dict[str, str]:
    """The admin token as the browser would send it"""
    return {"Cookie": f"{settings.cookie_name}={admin_token}"}


@pytest.fixture
def project_data() -> Dict[str, Any]:
    return {
        "title": fake.catch_phrase(),
        "subtitle": fake.bs(),
        "description": fake.sentence(),
        "fullDescription": fake.paragraph(),
        "tags": ["UX", "Research"],
        "category": "web",
        "role": "Lead designer",
        "achievements": ["Shipped on time"],
    }


@pytest.fixture
def contact_data() -> Dict[str, str]:
    return {
        "name": fake.name(),
        "email": fake.email(),
        "message": fake.sentence(),
    }
