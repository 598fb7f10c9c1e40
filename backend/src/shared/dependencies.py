from collections.abc import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.application.services import verify_token
from auth.domain.entities import Principal, Role
from auth.domain.permissions import has_minimum_role
from shared.exceptions import AuthenticationError, AuthorizationError
from shared.infrastructure.database import async_session
from shared.infrastructure.unit_of_work import DbUnitOfWork
from shared.logging import log_context

security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


async def get_uow(db: AsyncSession = Depends(get_db)) -> DbUnitOfWork:
    return DbUnitOfWork(db)


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    if credentials is None:
        raise AuthenticationError()
    principal = verify_token(credentials.credentials)
    log_context(principal_id=principal.id, role=principal.role.value)
    return principal


def require_role(role: Role):
    """Coarse per-endpoint gate; resource-level checks happen in the services."""

    async def _require(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not has_minimum_role(principal.role, role):
            raise AuthorizationError(f"Requires {role.value} role or higher")
        return principal

    return _require
