from typing import Protocol
from uuid import UUID

from comments.domain.entities import Comment


class CommentRepository(Protocol):
    async def get_by_id(self, comment_id: UUID) -> Comment | None: ...

    async def list_for_article(self, article_id: UUID) -> list[Comment]: ...

    async def create(self, comment: Comment) -> Comment: ...

    async def update(self, comment: Comment) -> Comment: ...

    async def delete(self, comment_id: UUID) -> None: ...

    async def delete_for_article(self, article_id: UUID) -> int: ...
