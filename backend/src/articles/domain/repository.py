from typing import Protocol
from uuid import UUID

from articles.domain.entities import Article, ArticleSearchParams, ArticleStatus


class ArticleRepository(Protocol):
    async def get_by_id(self, article_id: UUID) -> Article | None: ...

    async def create(self, article: Article) -> Article: ...

    async def update(self, article: Article, expected_version: int) -> Article: ...

    async def set_status(
        self, article: Article, status: ArticleStatus, expected_version: int
    ) -> Article: ...

    async def increment_view_count(self, article_id: UUID, viewed_by: str) -> None: ...

    async def delete(self, article_id: UUID) -> None: ...

    async def search(
        self, params: ArticleSearchParams, viewer_id: str, can_view_all_drafts: bool
    ) -> tuple[list[Article], int]: ...

    async def list_not_deleted(self) -> list[Article]: ...

    async def list_published(self) -> list[Article]: ...

    async def count_by_category(self) -> dict[str, int]: ...
