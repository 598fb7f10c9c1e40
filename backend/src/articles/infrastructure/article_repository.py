from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from articles.domain.entities import (
    Article,
    ArticleSearchParams,
    ArticleStatus,
    ContentFormat,
    SortField,
    SortOrder,
)
from articles.infrastructure.models import ArticleModel
from shared.clock import as_utc, utcnow
from shared.exceptions import ConflictError


class DbArticleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, article_id: UUID) -> Article | None:
        result = await self.session.execute(
            select(ArticleModel)
            .where(ArticleModel.id == article_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def create(self, article: Article) -> Article:
        now = utcnow()
        model = ArticleModel(
            title=article.title,
            body=article.body,
            category=article.category,
            tags=list(article.tags),
            related_articles=list(article.related_articles),
            status=article.status.value,
            author_id=article.author_id,
            author_name=article.author_name,
            version=1,
            content_format=article.content_format.value,
            expiration_date=article.expiration_date,
            published_at=article.published_at,
            created_at=now,
            updated_at=now,
        )
        self.session.add(model)
        await self.session.flush()
        return _to_entity(model)

    async def update(self, article: Article, expected_version: int) -> Article:
        """Write the editable fields and bump the version, guarded on ``expected_version``."""
        return await self._guarded_update(
            article.id,
            expected_version,
            title=article.title,
            body=article.body,
            category=article.category,
            tags=list(article.tags),
            related_articles=list(article.related_articles),
            status=article.status.value,
            expiration_date=article.expiration_date,
            published_at=article.published_at,
        )

    async def set_status(
        self, article: Article, status: ArticleStatus, expected_version: int
    ) -> Article:
        values: dict = {"status": status.value}
        if status == ArticleStatus.PUBLISHED and article.published_at is None:
            values["published_at"] = utcnow()
        return await self._guarded_update(article.id, expected_version, **values)

    async def _guarded_update(self, article_id: UUID, expected_version: int, **values) -> Article:
        result = await self.session.execute(
            update(ArticleModel)
            .where(
                ArticleModel.id == article_id,
                ArticleModel.version == expected_version,
            )
            .values(version=expected_version + 1, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError("Article was modified by another request")

        refreshed = await self.session.execute(
            select(ArticleModel)
            .where(ArticleModel.id == article_id)
            .execution_options(populate_existing=True)
        )
        return _to_entity(refreshed.scalar_one())

    async def increment_view_count(self, article_id: UUID, viewed_by: str) -> None:
        await self.session.execute(
            update(ArticleModel)
            .where(ArticleModel.id == article_id)
            .values(
                view_count=ArticleModel.view_count + 1,
                last_viewed_at=utcnow(),
                last_viewed_by=viewed_by,
            )
            .execution_options(synchronize_session=False)
        )

    async def delete(self, article_id: UUID) -> None:
        await self.session.execute(delete(ArticleModel).where(ArticleModel.id == article_id))

    async def search(
        self, params: ArticleSearchParams, viewer_id: str, can_view_all_drafts: bool
    ) -> tuple[list[Article], int]:
        stmt = select(ArticleModel).where(ArticleModel.status != ArticleStatus.DELETED.value)
        if params.statuses:
            stmt = stmt.where(ArticleModel.status.in_([s.value for s in params.statuses]))
        if params.category:
            stmt = stmt.where(ArticleModel.category == params.category)
        if params.author_id:
            stmt = stmt.where(ArticleModel.author_id == params.author_id)
        if params.created_after:
            stmt = stmt.where(ArticleModel.created_at >= params.created_after)
        if params.created_before:
            stmt = stmt.where(ArticleModel.created_at <= params.created_before)
        if params.updated_after:
            stmt = stmt.where(ArticleModel.updated_at >= params.updated_after)
        if params.updated_before:
            stmt = stmt.where(ArticleModel.updated_at <= params.updated_before)
        if not can_view_all_drafts:
            stmt = stmt.where(
                (ArticleModel.status != ArticleStatus.DRAFT.value)
                | (ArticleModel.author_id == viewer_id)
            )

        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        articles = [_to_entity(m) for m in result.scalars().all()]

        # Substring and tag matching stay in Python so they behave the same on every backend
        if params.query:
            needle = params.query.lower()
            articles = [a for a in articles if _matches_query(a, needle)]
        if params.tags:
            wanted = {t.lower() for t in params.tags}
            articles = [a for a in articles if wanted <= {t.lower() for t in a.tags}]

        articles.sort(key=_sort_key(params.sort_by), reverse=params.sort_order == SortOrder.DESC)
        total = len(articles)
        start = (params.page - 1) * params.limit
        return articles[start : start + params.limit], total

    async def list_not_deleted(self) -> list[Article]:
        result = await self.session.execute(
            select(ArticleModel)
            .where(ArticleModel.status != ArticleStatus.DELETED.value)
            .execution_options(populate_existing=True)
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def list_published(self) -> list[Article]:
        result = await self.session.execute(
            select(ArticleModel)
            .where(ArticleModel.status == ArticleStatus.PUBLISHED.value)
            .order_by(ArticleModel.view_count.desc())
            .execution_options(populate_existing=True)
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def count_by_category(self) -> dict[str, int]:
        result = await self.session.execute(
            select(ArticleModel.category, func.count())
            .where(ArticleModel.status != ArticleStatus.DELETED.value)
            .group_by(ArticleModel.category)
        )
        return {category: count for category, count in result.all()}


def _matches_query(article: Article, needle: str) -> bool:
    return (
        needle in article.title.lower()
        or needle in article.body.lower()
        or any(needle in tag.lower() for tag in article.tags)
    )


def _sort_key(sort_by: SortField):
    if sort_by in (SortField.TITLE, SortField.BRIEF_TITLE):
        return lambda a: a.title.lower()
    if sort_by == SortField.VIEW_COUNT:
        return lambda a: a.view_count
    if sort_by == SortField.CREATED_AT:
        return lambda a: a.created_at
    return lambda a: a.updated_at


def _to_entity(model: ArticleModel) -> Article:
    return Article(
        id=model.id,
        title=model.title,
        body=model.body,
        category=model.category,
        tags=list(model.tags or []),
        related_articles=list(model.related_articles or []),
        status=ArticleStatus(model.status),
        author_id=model.author_id,
        author_name=model.author_name,
        version=model.version,
        content_format=ContentFormat(model.content_format),
        expiration_date=as_utc(model.expiration_date),
        view_count=model.view_count,
        last_viewed_at=as_utc(model.last_viewed_at),
        last_viewed_by=model.last_viewed_by,
        published_at=as_utc(model.published_at),
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )
