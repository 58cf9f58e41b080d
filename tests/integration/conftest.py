from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from regview.api.registry import get_registry_service
from regview.core.auth import create_access_token
from regview.main import app


@pytest_asyncio.fixture
async def client(service) -> AsyncGenerator[AsyncClient, None]:
    """Provide an AsyncClient for the FastAPI app backed by the fake registry."""
    app.dependency_overrides[get_registry_service] = lambda: service

    # Use ASGITransport for testing FastAPI apps
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Provide a valid bearer token for the configured user."""
    return {"Authorization": f"Bearer {create_access_token('admin')}"}
