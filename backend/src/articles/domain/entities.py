from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from math import ceil
from uuid import UUID


class ArticleStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    DELETED = "deleted"


class ContentFormat(StrEnum):
    MARKDOWN = "markdown"
    RICHTEXT = "richtext"


@dataclass
class Article:
    title: str
    body: str
    category: str
    author_id: str
    author_name: str
    tags: list[str] = field(default_factory=list)
    related_articles: list[str] = field(default_factory=list)
    status: ArticleStatus = ArticleStatus.DRAFT
    version: int = 1
    content_format: ContentFormat = ContentFormat.RICHTEXT
    expiration_date: datetime | None = None
    view_count: int = 0
    last_viewed_at: datetime | None = None
    last_viewed_by: str | None = None
    published_at: datetime | None = None
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)
    # Mirror of the live edit lock, filled on read, never persisted
    locked_by: str | None = None
    locked_by_name: str | None = None
    locked_at: datetime | None = None

    @property
    def is_locked(self) -> bool:
        return self.locked_by is not None


@dataclass
class ArticleChanges:
    """Partial update; ``None`` means "leave unchanged".

    ``clear_expiration_date`` removes the expiration date, which ``None``
    alone cannot express.
    """

    title: str | None = None
    body: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    related_articles: list[str] | None = None
    expiration_date: datetime | None = None
    clear_expiration_date: bool = False

    def fields(self) -> dict[str, object]:
        """Supplied field values, keyed by ``Article`` attribute name."""
        supplied = {
            name: value
            for name, value in vars(self).items()
            if name != "clear_expiration_date" and value is not None
        }
        if self.clear_expiration_date:
            supplied["expiration_date"] = None
        return supplied

    def is_empty(self) -> bool:
        return not self.fields()


class SortField(StrEnum):
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    TITLE = "title"
    BRIEF_TITLE = "briefTitle"
    VIEW_COUNT = "viewCount"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class ArticleSearchParams:
    query: str | None = None
    statuses: list[ArticleStatus] = field(default_factory=list)
    category: str | None = None
    tags: list[str] = field(default_factory=list)
    author_id: str | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
    updated_after: datetime | None = None
    updated_before: datetime | None = None
    sort_by: SortField = SortField.UPDATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = 1
    limit: int = 20


@dataclass
class ArticlePage:
    items: list[Article]
    page: int
    limit: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return ceil(self.total_items / self.limit) if self.limit else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1


@dataclass
class TagCount:
    name: str
    count: int
