from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from articles.domain.entities import ArticleStatus
from shared.clock import as_utc
from shared.exceptions import InternalConsistencyError
from versions.domain.entities import ArticleVersion
from versions.infrastructure.models import ArticleVersionModel


class DbVersionRepository:
    """Insert-only store of article snapshots."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, version: ArticleVersion) -> ArticleVersion:
        model = ArticleVersionModel(
            article_id=version.article_id,
            version=version.version,
            title=version.title,
            body=version.body,
            category=version.category,
            tags=list(version.tags),
            related_articles=list(version.related_articles),
            status=version.status.value,
            changed_by=version.changed_by,
            changed_by_name=version.changed_by_name,
            changed_at=version.changed_at,
            change_reason=version.change_reason,
            change_summary=version.change_summary,
        )
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise InternalConsistencyError(
                f"Version {version.version} of article {version.article_id} already exists"
            ) from exc
        return _to_entity(model)

    async def list_for_article(self, article_id: UUID) -> list[ArticleVersion]:
        result = await self.session.execute(
            select(ArticleVersionModel)
            .where(ArticleVersionModel.article_id == article_id)
            .order_by(ArticleVersionModel.version.desc())
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def get(self, article_id: UUID, version: int) -> ArticleVersion | None:
        result = await self.session.execute(
            select(ArticleVersionModel).where(
                ArticleVersionModel.article_id == article_id,
                ArticleVersionModel.version == version,
            )
        )
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def count_for_article(self, article_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(ArticleVersionModel)
            .where(ArticleVersionModel.article_id == article_id)
        )
        return result.scalar_one()

    async def purge(self, article_id: UUID) -> int:
        result = await self.session.execute(
            delete(ArticleVersionModel).where(ArticleVersionModel.article_id == article_id)
        )
        return result.rowcount


def _to_entity(model: ArticleVersionModel) -> ArticleVersion:
    return ArticleVersion(
        id=model.id,
        article_id=model.article_id,
        version=model.version,
        title=model.title,
        body=model.body,
        category=model.category,
        tags=tuple(model.tags or ()),
        related_articles=tuple(model.related_articles or ()),
        status=ArticleStatus(model.status),
        changed_by=model.changed_by,
        changed_by_name=model.changed_by_name,
        changed_at=as_utc(model.changed_at),
        change_reason=model.change_reason,
        change_summary=model.change_summary,
    )
