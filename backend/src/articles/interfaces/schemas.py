from datetime import datetime
from uuid import UUID

from articles.domain.entities import ArticleChanges, ArticleStatus, ContentFormat
from shared.schemas import CamelModel


class CreateArticleRequest(CamelModel):
    # Left optional so missing fields surface in the aggregated 422 instead of a 400
    title: str | None = None
    body: str | None = None
    category: str | None = None
    tags: list[str] = []
    related_articles: list[str] = []
    content_format: ContentFormat = ContentFormat.RICHTEXT
    expiration_date: datetime | None = None


class UpdateArticleRequest(CamelModel):
    title: str | None = None
    body: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    related_articles: list[str] | None = None
    expiration_date: datetime | None = None

    def to_changes(self) -> ArticleChanges:
        return ArticleChanges(
            title=self.title,
            body=self.body,
            category=self.category,
            tags=self.tags,
            related_articles=self.related_articles,
            expiration_date=self.expiration_date,
            clear_expiration_date=(
                "expiration_date" in self.model_fields_set and self.expiration_date is None
            ),
        )


class ArticleResponse(CamelModel):
    id: UUID
    title: str
    body: str
    category: str
    tags: list[str]
    related_articles: list[str]
    status: ArticleStatus
    author_id: str
    author_name: str
    version: int
    content_format: ContentFormat
    expiration_date: datetime | None = None
    view_count: int
    last_viewed_at: datetime | None = None
    last_viewed_by: str | None = None
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_locked: bool = False
    locked_by: str | None = None
    locked_by_name: str | None = None
    locked_at: datetime | None = None


class ArticleSummaryResponse(CamelModel):
    id: UUID
    title: str
    category: str
    tags: list[str]
    status: ArticleStatus
    author_id: str
    author_name: str
    version: int
    view_count: int
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_locked: bool = False
    locked_by_name: str | None = None


class PaginationResponse(CamelModel):
    page: int
    limit: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class ArticleListResponse(CamelModel):
    data: list[ArticleSummaryResponse]
    pagination: PaginationResponse


class TagCountResponse(CamelModel):
    name: str
    count: int
