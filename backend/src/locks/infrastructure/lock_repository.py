from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from locks.domain.entities import ArticleLock
from locks.infrastructure.models import ArticleLockModel
from shared.clock import as_utc


class DbLockRepository:
    """At most one row per article; expiry is judged by the caller."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, article_id: UUID) -> ArticleLock | None:
        model = await self.session.get(ArticleLockModel, article_id, populate_existing=True)
        return _to_entity(model) if model else None

    async def get_many(self, article_ids: list[UUID]) -> dict[UUID, ArticleLock]:
        if not article_ids:
            return {}
        result = await self.session.execute(
            select(ArticleLockModel).where(ArticleLockModel.article_id.in_(article_ids))
        )
        return {m.article_id: _to_entity(m) for m in result.scalars().all()}

    async def save(self, lock: ArticleLock) -> ArticleLock:
        model = await self.session.get(ArticleLockModel, lock.article_id)
        if model is None:
            model = ArticleLockModel(article_id=lock.article_id)
            self.session.add(model)
        model.locked_by = lock.locked_by
        model.locked_by_name = lock.locked_by_name
        model.locked_at = lock.locked_at
        model.expires_at = lock.expires_at
        await self.session.flush()
        return _to_entity(model)

    async def delete(self, article_id: UUID) -> bool:
        result = await self.session.execute(
            delete(ArticleLockModel).where(ArticleLockModel.article_id == article_id)
        )
        return result.rowcount > 0

    async def list_all(self) -> list[ArticleLock]:
        result = await self.session.execute(select(ArticleLockModel))
        return [_to_entity(m) for m in result.scalars().all()]


def _to_entity(model: ArticleLockModel) -> ArticleLock:
    return ArticleLock(
        article_id=model.article_id,
        locked_by=model.locked_by,
        locked_by_name=model.locked_by_name,
        locked_at=as_utc(model.locked_at),
        expires_at=as_utc(model.expires_at),
    )
