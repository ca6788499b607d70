"""FastAPI dependency injection helpers."""

from typing import Callable, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.authorization import require_role as check_role
from src.domain.entities import Identity
from src.domain.enums import Role
from src.infrastructure.database import async_session_factory
from src.infrastructure.repositories import Store
from src.services import identity as identity_service


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_store(db: AsyncSession = Depends(get_db)) -> Store:
    return Store(db)


async def get_identity(authorization: Optional[str] = Header(None)) -> Identity:
    """Resolve the bearer credential; ``Unauthorized`` when missing or invalid."""
    return identity_service.verify(authorization)


def require_role(*roles: Role) -> Callable[..., Identity]:
    """Dependency factory: authenticated caller whose role is one of *roles*."""

    async def dependency(identity: Identity = Depends(get_identity)) -> Identity:
        return check_role(identity, *roles)

    return dependency


require_customer = require_role(Role.CUSTOMER)
require_driver = require_role(Role.DRIVER)
require_partner = require_role(Role.PARTNER)
require_admin = require_role(Role.ADMIN)
