"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL.  Every test gets a fresh engine and schema; API tests
override ``get_db`` so routes use the same database.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.domain.entities import Identity
from src.domain.enums import Role
from src.infrastructure.database import Base
from src.infrastructure.repositories import Store
from src.infrastructure.security import create_access_token, hash_password
from src.services.identity import issue_credential


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "secret-pass"

# One hash shared by every factory-built account.
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    test_engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session: AsyncSession) -> Store:
    return Store(db_session)


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by the per-test SQLite database."""
    from src.api.app import create_app
    from src.api.dependencies import get_db
    from src.api.middleware import limiter

    limiter.reset()

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db] = _test_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ── Factories ─────────────────────────────────────────────────────────


def identity_of(account: Any, role: Role) -> Identity:
    return Identity(subject_id=account.id, role=role, email=account.email)


async def make_customer(store: Store, **fields: Any):
    values = {"email": "ana@example.com", "name": "Ana", "address": "1 Elm St"}
    values.update(fields)
    return await store.customers.insert(password_hash=_PASSWORD_HASH, **values)


async def make_driver(store: Store, **fields: Any):
    values = {"email": "dan@example.com", "name": "Dan", "vehicle": "Bike"}
    values.update(fields)
    return await store.drivers.insert(password_hash=_PASSWORD_HASH, **values)


async def make_partner(store: Store, **fields: Any):
    values = {"email": "pho@example.com", "name": "Pho House", "address": "9 Main St"}
    values.update(fields)
    return await store.partners.insert(password_hash=_PASSWORD_HASH, **values)


async def make_admin(store: Store, **fields: Any):
    values = {"email": "root@example.com", "name": "Root"}
    values.update(fields)
    return await store.admins.insert(password_hash=_PASSWORD_HASH, **values)


def auth_headers(account: Any, role: Role) -> dict[str, str]:
    credential = issue_credential(identity_of(account, role))
    return {"Authorization": f"Bearer {credential.token}"}


def expired_headers(account: Any, role: Role) -> dict[str, str]:
    token, _ = create_access_token(
        {"sub": str(account.id), "role": role.value, "email": account.email},
        expires_in=-60,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def seeded(session_factory) -> dict[str, Any]:
    """Committed accounts + menu for API tests (two of each actor)."""
    async with session_factory() as session:
        store = Store(session)
        data = {
            "customer": await make_customer(store),
            "other_customer": await make_customer(
                store, email="bea@example.com", name="Bea"
            ),
            "driver": await make_driver(store),
            "other_driver": await make_driver(
                store, email="eve@example.com", name="Eve"
            ),
            "partner": await make_partner(store),
            "other_partner": await make_partner(
                store, email="taco@example.com", name="Taco Stand", address="5 Side St"
            ),
            "admin": await make_admin(store),
        }
        # Menu ids 1..5 belong to ``partner``; id 6 to ``other_partner``
        for name, price in [
            ("Spring Rolls", 4.0),
            ("Pho Bo", 12.5),
            ("Iced Coffee", 3.0),
            ("Banh Mi", 7.0),
            ("Bun Cha", 10.0),
        ]:
            await store.menu_items.insert(
                partner_id=data["partner"].id, name=name, price=price
            )
        await store.menu_items.insert(
            partner_id=data["other_partner"].id, name="Al Pastor", price=3.5
        )
        await session.commit()
    return data
