from uuid import UUID

from articles.domain.entities import Article, ArticleStatus
from articles.domain.repository import ArticleRepository
from auth.domain.entities import Principal
from auth.domain.permissions import Permission, has_permission
from shared.exceptions import NotFoundError


def can_view(principal: Principal, article: Article) -> bool:
    is_author = article.author_id == principal.id
    if article.status == ArticleStatus.DRAFT:
        return has_permission(principal, Permission.ARTICLE_VIEW_DRAFT_ALL) or (
            is_author and has_permission(principal, Permission.ARTICLE_VIEW_DRAFT_OWN)
        )
    if article.status == ArticleStatus.DELETED:
        return has_permission(principal, Permission.ARTICLE_DELETE_ALL) or (
            is_author and has_permission(principal, Permission.ARTICLE_RESTORE_OWN)
        )
    return has_permission(principal, Permission.ARTICLE_VIEW_PUBLISHED)


async def get_visible_article(
    repo: ArticleRepository, principal: Principal, article_id: UUID
) -> Article:
    """Load an article, reporting invisible ones exactly like missing ones."""
    article = await repo.get_by_id(article_id)
    if article is None or not can_view(principal, article):
        raise NotFoundError("Article", str(article_id))
    return article
