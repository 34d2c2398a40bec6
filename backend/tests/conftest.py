"""
Bookstore Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, created fresh for each test):
    ├── record_store: ResourceStore of plain dicts with title/year ordering
    ├── book_service: BookService with its own empty store
    ├── sample_books: BookData payloads with distinct years
    └── test_client: HTTPX AsyncClient bound to a freshly created app
"""

import os

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before bookstore.config is imported anywhere
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["REQUIRE_SYNC_TOKEN"] = "false"
os.environ["DEFAULT_PAGE_SIZE"] = "20"
os.environ["MAX_PAGE_SIZE"] = "100"

from bookstore.schemas.book import BookData  # noqa: E402
from bookstore.services.book_service import BookService  # noqa: E402
from bookstore.services.resource_store import ResourceStore  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def record_store():
    """
    A store holding plain dicts.

    Orderable by "title" and "year"; any other field is unknown to it.
    """
    return ResourceStore(
        resource="item",
        sort_keys={
            "title": lambda data: data["title"],
            "year": lambda data: data["year"],
        },
    )


@pytest.fixture
def book_service():
    return BookService()


@pytest.fixture
def sample_books():
    """Three books created in this order, with years 2020, 2019, 2021."""
    return [
        BookData(title="Middle", author="Bea Author", year=2020, isbn="978-0-00-000001-1"),
        BookData(title="Oldest", author="Cal Writer", year=2019),
        BookData(title="Newest", author="Ann Scribe", year=2021),
    ]


@pytest_asyncio.fixture
async def test_client():
    """
    Async HTTP client talking to a brand-new app (and therefore an empty store).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from bookstore.main import create_app
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
