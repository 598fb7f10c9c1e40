from typing import Protocol
from uuid import UUID

from versions.domain.entities import ArticleVersion


class VersionRepository(Protocol):
    async def create(self, version: ArticleVersion) -> ArticleVersion: ...

    async def list_for_article(self, article_id: UUID) -> list[ArticleVersion]: ...

    async def get(self, article_id: UUID, version: int) -> ArticleVersion | None: ...

    async def count_for_article(self, article_id: UUID) -> int: ...

    async def purge(self, article_id: UUID) -> int: ...
