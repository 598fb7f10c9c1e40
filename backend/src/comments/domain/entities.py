from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

CONTENT_MIN_LENGTH = 1
CONTENT_MAX_LENGTH = 2000


@dataclass
class Comment:
    article_id: UUID
    author_id: str
    author_name: str
    content: str
    is_edited: bool = False
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)


@dataclass
class CommentThread:
    article_id: UUID
    comments: list[Comment]

    @property
    def total_count(self) -> int:
        return len(self.comments)


def validate_comment_content(content: str | None) -> dict[str, list[str]]:
    if not content or not content.strip():
        return {"content": ["Comment content is required"]}
    if len(content.strip()) > CONTENT_MAX_LENGTH:
        return {"content": [f"Comment must not exceed {CONTENT_MAX_LENGTH} characters"]}
    return {}
