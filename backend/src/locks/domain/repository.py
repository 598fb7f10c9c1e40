from typing import Protocol
from uuid import UUID

from locks.domain.entities import ArticleLock


class LockRepository(Protocol):
    async def get(self, article_id: UUID) -> ArticleLock | None: ...

    async def get_many(self, article_ids: list[UUID]) -> dict[UUID, ArticleLock]: ...

    async def save(self, lock: ArticleLock) -> ArticleLock: ...

    async def delete(self, article_id: UUID) -> bool: ...

    async def list_all(self) -> list[ArticleLock]: ...
