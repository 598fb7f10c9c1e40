from datetime import datetime
from uuid import UUID

from shared.schemas import CamelModel


class CommentRequest(CamelModel):
    content: str | None = None


class CommentResponse(CamelModel):
    id: UUID
    article_id: UUID
    author_id: str
    author_name: str
    content: str
    is_edited: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CommentListResponse(CamelModel):
    article_id: UUID
    comments: list[CommentResponse]
    total_count: int
