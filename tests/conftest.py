"""
Pytest configuration and fixtures for Book Tracker tests.
"""

import sys
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from booktracker.api.main import create_app
from booktracker.api.dependencies import Settings
from booktracker.security import PasswordHasher, TokenService
from booktracker.storage import (
    BookRepository,
    UserRepository,
    create_database_engine,
    create_session_factory,
    create_tables,
)


TEST_SECRET = "test-secret-key"


# =============================================================================
# Test Settings
# =============================================================================

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings configured for testing."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        environment="test",
        debug=False,
    )


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def session_factory(tmp_path):
    """Session factory over a fresh SQLite file."""
    engine = create_database_engine(f"sqlite:///{tmp_path / 'unit.db'}")
    create_tables(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret_key=TEST_SECRET)


@pytest.fixture
def user_repo(session_factory, password_hasher) -> UserRepository:
    return UserRepository(session_factory, password_hasher)


@pytest.fixture
def book_repo(session_factory) -> BookRepository:
    return BookRepository(session_factory)


@pytest.fixture
def alice(user_repo):
    return user_repo.register("alice@example.com", "alice-password")


@pytest.fixture
def bob(user_repo):
    return user_repo.register("bob@example.com", "bob-password")


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(test_settings):
    """Create FastAPI application for testing."""
    application = create_app(test_settings)
    yield application
    application.state.services.close()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _register_and_login(client: AsyncClient, email: str, password: str) -> dict:
    response = await client.post("/api/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    response = await client.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest_asyncio.fixture
async def auth_headers(client) -> dict:
    """Authorization headers for a freshly registered user."""
    return await _register_and_login(client, "reader@example.com", "reader-password")


@pytest_asyncio.fixture
async def other_auth_headers(client) -> dict:
    """Authorization headers for a second, unrelated user."""
    return await _register_and_login(client, "other@example.com", "other-password")


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def sample_book_data() -> dict:
    """Sample book data for testing."""
    return {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "isbn": "9780743273565",
        "date_purchased": "2024-05-01",
        "publisher": "Scribner",
        "notes": "Paperback",
    }


@pytest.fixture
def sample_books_batch() -> list[dict]:
    """Multiple sample books for batch testing."""
    return [
        {
            "title": "1984",
            "author": "George Orwell",
            "isbn": "9780451524935",
        },
        {
            "title": "To Kill a Mockingbird",
            "author": "Harper Lee",
            "isbn": "9780061120084",
        },
        {
            "title": "Pride and Prejudice",
            "author": "Jane Austen",
            "isbn": "0141439513",
        },
        {
            "title": "Sapiens 978",
            "author": "Yuval Noah Harari",
            "isbn": "0062316095",
        },
    ]
