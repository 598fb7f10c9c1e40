from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from comments.domain.entities import Comment
from comments.infrastructure.models import CommentModel
from shared.clock import as_utc, utcnow


class DbCommentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, comment_id: UUID) -> Comment | None:
        model = await self.session.get(CommentModel, comment_id)
        return _to_entity(model) if model else None

    async def list_for_article(self, article_id: UUID) -> list[Comment]:
        result = await self.session.execute(
            select(CommentModel)
            .where(CommentModel.article_id == article_id)
            .order_by(CommentModel.created_at.asc())
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def create(self, comment: Comment) -> Comment:
        now = utcnow()
        model = CommentModel(
            article_id=comment.article_id,
            author_id=comment.author_id,
            author_name=comment.author_name,
            content=comment.content,
            created_at=now,
            updated_at=now,
        )
        self.session.add(model)
        await self.session.flush()
        return _to_entity(model)

    async def update(self, comment: Comment) -> Comment:
        model = await self.session.get(CommentModel, comment.id)
        model.content = comment.content
        model.is_edited = comment.is_edited
        model.updated_at = utcnow()
        await self.session.flush()
        return _to_entity(model)

    async def delete(self, comment_id: UUID) -> None:
        await self.session.execute(delete(CommentModel).where(CommentModel.id == comment_id))

    async def delete_for_article(self, article_id: UUID) -> int:
        result = await self.session.execute(
            delete(CommentModel).where(CommentModel.article_id == article_id)
        )
        return result.rowcount


def _to_entity(model: CommentModel) -> Comment:
    return Comment(
        id=model.id,
        article_id=model.article_id,
        author_id=model.author_id,
        author_name=model.author_name,
        content=model.content,
        is_edited=model.is_edited,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )
