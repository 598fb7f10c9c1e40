from uuid import UUID

from articles.application.access import get_visible_article
from articles.domain.entities import ArticleStatus
from auth.domain.entities import Principal
from auth.domain.permissions import Permission, has_permission, may_act_on
from comments.domain.entities import Comment, CommentThread, validate_comment_content
from shared.exceptions import (
    AuthorizationError,
    BadRequestError,
    NotFoundError,
    ValidationFailedError,
)
from shared.logging import get_logger
from shared.unit_of_work import UnitOfWork

logger = get_logger(__name__)


def _clean_content(content: str | None) -> str:
    errors = validate_comment_content(content)
    if errors:
        raise ValidationFailedError(errors)
    return content.strip()


async def create_comment(
    uow: UnitOfWork, principal: Principal, article_id: UUID, content: str
) -> Comment:
    if not has_permission(principal, Permission.COMMENT_CREATE):
        raise AuthorizationError("You do not have permission to comment")
    content = _clean_content(content)

    async with uow.transaction():
        article = await get_visible_article(uow.articles, principal, article_id)
        if article.status != ArticleStatus.PUBLISHED:
            raise BadRequestError("Comments can only be added to published articles")
        comment = await uow.comments.create(
            Comment(
                article_id=article_id,
                author_id=principal.id,
                author_name=principal.display_name,
                content=content,
            )
        )
    logger.info("Comment created", comment_id=str(comment.id), article_id=str(article_id))
    return comment


async def list_comments(uow: UnitOfWork, principal: Principal, article_id: UUID) -> CommentThread:
    if not has_permission(principal, Permission.COMMENT_VIEW):
        raise AuthorizationError("You do not have permission to view comments")
    await get_visible_article(uow.articles, principal, article_id)
    return CommentThread(
        article_id=article_id,
        comments=await uow.comments.list_for_article(article_id),
    )


async def _get_comment(uow: UnitOfWork, comment_id: UUID) -> Comment:
    comment = await uow.comments.get_by_id(comment_id)
    if not comment:
        raise NotFoundError("Comment", str(comment_id))
    return comment


async def update_comment(
    uow: UnitOfWork, principal: Principal, comment_id: UUID, content: str
) -> Comment:
    content = _clean_content(content)
    async with uow.transaction():
        comment = await _get_comment(uow, comment_id)
        if not may_act_on(
            principal, comment.author_id, Permission.COMMENT_EDIT_OWN, Permission.COMMENT_EDIT_ALL
        ):
            raise AuthorizationError("You can only edit your own comments")
        comment.content = content
        comment.is_edited = True
        comment = await uow.comments.update(comment)
    logger.info("Comment updated", comment_id=str(comment_id))
    return comment


async def delete_comment(uow: UnitOfWork, principal: Principal, comment_id: UUID) -> None:
    async with uow.transaction():
        comment = await _get_comment(uow, comment_id)
        if not may_act_on(
            principal, comment.author_id, Permission.COMMENT_DELETE_OWN, Permission.COMMENT_DELETE_ALL
        ):
            raise AuthorizationError("You can only delete your own comments")
        await uow.comments.delete(comment_id)
    logger.info("Comment deleted", comment_id=str(comment_id), article_id=str(comment.article_id))
