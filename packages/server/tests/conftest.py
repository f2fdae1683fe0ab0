"""
Shared fixtures for server tests: in-memory SQLite app, sessions and seed data.
"""

from __future__ import annotations

import uuid
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.auth import create_session_token
from app.core.config import Settings
from app.core.database import init_db, session_scope
from app.main import create_app
from app.models.organization import ORGANIZATION_MODELS, OrganizationBase
from app.models.user import User
from listing_shared.schemas.organizations import OrganizationType


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        secret_key="test-secret",
        log_level="warning",
        log_format="text",
    )


@pytest.fixture
async def app(settings):
    application = create_app(settings)
    await init_db(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest.fixture
async def session(app):
    async with app.state.session_factory() as s:
        yield s


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------

class Seeder:
    """Writes rows in their own committed transaction."""

    def __init__(self, app, settings: Settings):
        self._factory = app.state.session_factory
        self._settings = settings

    async def user(
        self,
        account_type: str = "admin",
        status: str = "active",
        organization_id: Optional[uuid.UUID] = None,
        is_org_admin: bool = False,
        email: Optional[str] = None,
    ) -> User:
        user = User(
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            account_type=account_type,
            status=status,
            organization_id=organization_id,
            is_org_admin=is_org_admin,
        )
        async with session_scope(self._factory) as s:
            s.add(user)
        return user

    async def organization(
        self,
        organization_type: OrganizationType = OrganizationType.SPONSOR,
        name: str = "Acme Capital",
        status: str = "pending",
        admin_user_id: Optional[uuid.UUID] = None,
    ) -> OrganizationBase:
        model = ORGANIZATION_MODELS[organization_type]
        org = model(name=name, status=status, admin_user_id=admin_user_id)
        async with session_scope(self._factory) as s:
            s.add(org)
        return org

    def headers(self, user: User) -> dict[str, str]:
        token = create_session_token(user.id, settings=self._settings)
        return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def seed(app, settings) -> Seeder:
    return Seeder(app, settings)
