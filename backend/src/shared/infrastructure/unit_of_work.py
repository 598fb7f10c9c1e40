from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from articles.infrastructure.article_repository import DbArticleRepository
from categories.infrastructure.category_repository import DbCategoryRepository
from comments.infrastructure.comment_repository import DbCommentRepository
from locks.infrastructure.lock_repository import DbLockRepository
from versions.infrastructure.version_repository import DbVersionRepository


class DbUnitOfWork:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.articles = DbArticleRepository(session)
        self.versions = DbVersionRepository(session)
        self.locks = DbLockRepository(session)
        self.categories = DbCategoryRepository(session)
        self.comments = DbCommentRepository(session)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Commit everything written inside the block, or nothing at all."""
        try:
            yield
        except BaseException:
            await self.session.rollback()
            raise
        await self.session.commit()
