from contextlib import AbstractAsyncContextManager
from typing import Protocol

from articles.domain.repository import ArticleRepository
from categories.domain.repository import CategoryRepository
from comments.domain.repository import CommentRepository
from locks.domain.repository import LockRepository
from versions.domain.repository import VersionRepository


class UnitOfWork(Protocol):
    """Repositories sharing one storage session, committed together."""

    articles: ArticleRepository
    versions: VersionRepository
    locks: LockRepository
    categories: CategoryRepository
    comments: CommentRepository

    def transaction(self) -> AbstractAsyncContextManager[None]: ...
