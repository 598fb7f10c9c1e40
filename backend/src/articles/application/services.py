from collections import Counter
from dataclasses import replace
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from articles.application.access import can_view, get_visible_article
from articles.domain.entities import (
    Article,
    ArticleChanges,
    ArticlePage,
    ArticleSearchParams,
    ArticleStatus,
    ContentFormat,
    TagCount,
)
from articles.domain.lifecycle import ensure_transition
from articles.domain.validation import validate_article_fields
from auth.domain.entities import Principal
from auth.domain.permissions import Permission, has_permission, may_act_on
from categories.application.services import adjust_article_count
from locks.application.services import discard_lock, find_live_lock, live_locks
from locks.domain.entities import ArticleLock
from shared.clock import as_utc, utcnow
from shared.concurrency import article_sections, lock_sections
from shared.exceptions import (
    AuthorizationError,
    BadRequestError,
    NotFoundError,
    ResourceLockedError,
    ValidationFailedError,
)
from shared.logging import get_logger
from shared.unit_of_work import UnitOfWork
from versions.application.services import record_version
from versions.domain.entities import ArticleVersion

logger = get_logger(__name__)

MAX_PAGE_LIMIT = 100
DEFAULT_RELATED_LIMIT = 5


def _clean_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    cleaned: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        tag = tag.strip()
        if tag and tag.lower() not in seen:
            seen.add(tag.lower())
            cleaned.append(tag)
    return cleaned


def _with_lock(article: Article, lock: ArticleLock | None) -> Article:
    if lock is None:
        article.locked_by = article.locked_by_name = article.locked_at = None
    else:
        article.locked_by = lock.locked_by
        article.locked_by_name = lock.locked_by_name
        article.locked_at = lock.locked_at
    return article


def _require(
    principal: Principal,
    article: Article,
    own: Permission,
    any_: Permission,
    action: str,
) -> None:
    if not may_act_on(principal, article.author_id, own, any_):
        raise AuthorizationError(f"You do not have permission to {action} this article")


async def _ensure_not_locked_by_other(uow: UnitOfWork, principal: Principal, article_id: UUID) -> None:
    lock = await find_live_lock(uow.locks, article_id)
    if lock is not None and not lock.is_held_by(principal.id):
        raise ResourceLockedError(lock.locked_by_name, lock.locked_at, lock.expires_at)


async def create_article(
    uow: UnitOfWork,
    principal: Principal,
    title: str,
    body: str,
    category: str,
    tags: list[str] | None = None,
    related_articles: list[str] | None = None,
    content_format: ContentFormat = ContentFormat.RICHTEXT,
    expiration_date: datetime | None = None,
) -> Article:
    if not has_permission(principal, Permission.ARTICLE_CREATE):
        raise AuthorizationError("You do not have permission to create articles")

    changes = ArticleChanges(
        title=title.strip() if title else title,
        body=body,
        category=category.strip() if category else category,
        tags=_clean_tags(tags) or [],
        related_articles=list(related_articles or []),
        expiration_date=expiration_date,
    )
    errors = validate_article_fields(changes, creating=True)
    if errors:
        raise ValidationFailedError(errors)

    async with uow.transaction():
        article = await uow.articles.create(
            Article(
                title=changes.title,
                body=changes.body,
                category=changes.category,
                tags=changes.tags,
                related_articles=changes.related_articles,
                author_id=principal.id,
                author_name=principal.display_name,
                content_format=content_format,
                expiration_date=expiration_date,
            )
        )
        await record_version(uow.versions, article, principal, "Initial creation")
        await adjust_article_count(uow.categories, article.category, +1)

    logger.info("Article created", article_id=str(article.id), category=article.category)
    return article


async def get_article(uow: UnitOfWork, principal: Principal, article_id: UUID) -> Article:
    article = await get_visible_article(uow.articles, principal, article_id)

    if article.status == ArticleStatus.PUBLISHED:
        # Best-effort metadata; never versioned, never blocks the read
        try:
            async with uow.transaction():
                await uow.articles.increment_view_count(article.id, principal.id)
        except SQLAlchemyError as exc:
            logger.warning("View count update failed", article_id=str(article_id), error=str(exc))
        else:
            article.view_count += 1
            article.last_viewed_at = utcnow()
            article.last_viewed_by = principal.id

    return _with_lock(article, await find_live_lock(uow.locks, article.id))


async def search_articles(
    uow: UnitOfWork, principal: Principal, params: ArticleSearchParams
) -> ArticlePage:
    if not has_permission(principal, Permission.SEARCH_BASIC):
        raise AuthorizationError("You do not have permission to search articles")
    advanced = (
        params.author_id,
        params.created_after,
        params.created_before,
        params.updated_after,
        params.updated_before,
    )
    if any(value is not None for value in advanced) and not has_permission(
        principal, Permission.SEARCH_ADVANCED
    ):
        raise AuthorizationError("Author and date filters require advanced search")
    if params.page < 1:
        raise BadRequestError("Page must be 1 or greater")
    if not 1 <= params.limit <= MAX_PAGE_LIMIT:
        raise BadRequestError(f"Limit must be between 1 and {MAX_PAGE_LIMIT}")
    if ArticleStatus.DELETED in params.statuses:
        raise BadRequestError("Deleted articles are not searchable")
    params.created_after = as_utc(params.created_after)
    params.created_before = as_utc(params.created_before)
    params.updated_after = as_utc(params.updated_after)
    params.updated_before = as_utc(params.updated_before)

    items, total = await uow.articles.search(
        params,
        viewer_id=principal.id,
        can_view_all_drafts=has_permission(principal, Permission.ARTICLE_VIEW_DRAFT_ALL),
    )
    locks = await live_locks(uow.locks, [a.id for a in items])
    return ArticlePage(
        items=[_with_lock(a, locks.get(a.id)) for a in items],
        page=params.page,
        limit=params.limit,
        total_items=total,
    )


async def update_article(
    uow: UnitOfWork,
    principal: Principal,
    article_id: UUID,
    changes: ArticleChanges,
    reason: str | None = None,
) -> Article:
    if changes.is_empty():
        raise BadRequestError("At least one field must be provided")
    changes = replace(
        changes,
        tags=_clean_tags(changes.tags),
        title=changes.title.strip() if changes.title is not None else None,
        category=changes.category.strip() if changes.category is not None else None,
    )

    # The lock section stays held until commit so nobody can take the lock
    # between the check and the write.
    async with article_sections.hold(article_id), lock_sections.hold(article_id):
        async with uow.transaction():
            article = await get_visible_article(uow.articles, principal, article_id)
            if article.status == ArticleStatus.DELETED:
                raise BadRequestError("Cannot edit an article in trash")
            _require(principal, article, Permission.ARTICLE_EDIT_OWN, Permission.ARTICLE_EDIT_ALL, "edit")
            await _ensure_not_locked_by_other(uow, principal, article_id)

            errors = validate_article_fields(changes)
            if errors:
                raise ValidationFailedError(errors)

            old_category = article.category
            for name, value in changes.fields().items():
                setattr(article, name, value)

            updated = await uow.articles.update(article, expected_version=article.version)
            await record_version(uow.versions, updated, principal, reason)
            if updated.category != old_category:
                await adjust_article_count(uow.categories, old_category, -1)
                await adjust_article_count(uow.categories, updated.category, +1)

    logger.info("Article updated", article_id=str(article_id), version=updated.version)
    return _with_lock(updated, await find_live_lock(uow.locks, article_id))


async def _change_status(
    uow: UnitOfWork,
    principal: Principal,
    article_id: UUID,
    target: ArticleStatus,
    reason: str,
) -> Article:
    async with article_sections.hold(article_id):
        async with uow.transaction():
            article = await get_visible_article(uow.articles, principal, article_id)
            _check_status_permission(principal, article, target)
            ensure_transition(article, target)

            if target == ArticleStatus.DELETED:
                await discard_lock(uow.locks, article_id)

            updated = await uow.articles.set_status(article, target, expected_version=article.version)
            if target == ArticleStatus.DELETED:
                await adjust_article_count(uow.categories, updated.category, -1)
            elif article.status == ArticleStatus.DELETED:
                await adjust_article_count(uow.categories, updated.category, +1)
            await record_version(uow.versions, updated, principal, reason)

    logger.info(
        "Article status changed",
        article_id=str(article_id),
        from_status=article.status.value,
        to_status=target.value,
        version=updated.version,
    )
    return updated


def _check_status_permission(principal: Principal, article: Article, target: ArticleStatus) -> None:
    if target == ArticleStatus.PUBLISHED:
        _require(
            principal, article, Permission.ARTICLE_PUBLISH_OWN, Permission.ARTICLE_PUBLISH_ALL, "publish"
        )
    elif target == ArticleStatus.ARCHIVED:
        if not has_permission(principal, Permission.ARTICLE_ARCHIVE):
            raise AuthorizationError("Only editors can archive articles")
    elif target == ArticleStatus.DELETED:
        _require(
            principal, article, Permission.ARTICLE_DELETE_OWN, Permission.ARTICLE_DELETE_ALL, "delete"
        )
    else:
        _require(
            principal, article, Permission.ARTICLE_RESTORE_OWN, Permission.ARTICLE_RESTORE_ALL, "restore"
        )


async def publish_article(uow: UnitOfWork, principal: Principal, article_id: UUID) -> Article:
    return await _change_status(uow, principal, article_id, ArticleStatus.PUBLISHED, "Published")


async def archive_article(uow: UnitOfWork, principal: Principal, article_id: UUID) -> Article:
    return await _change_status(uow, principal, article_id, ArticleStatus.ARCHIVED, "Archived")


async def delete_article(uow: UnitOfWork, principal: Principal, article_id: UUID) -> Article:
    """Move an article to trash; any edit lock on it is dropped."""
    return await _change_status(uow, principal, article_id, ArticleStatus.DELETED, "Moved to trash")


async def restore_article(uow: UnitOfWork, principal: Principal, article_id: UUID) -> Article:
    return await _change_status(uow, principal, article_id, ArticleStatus.DRAFT, "Restored from trash")


async def restore_article_version(
    uow: UnitOfWork, principal: Principal, article_id: UUID, version: int
) -> ArticleVersion:
    """Copy a past snapshot's content onto the article as a brand-new version."""
    if version < 1:
        raise BadRequestError("Version numbers must be positive integers")

    async with article_sections.hold(article_id):
        async with uow.transaction():
            article = await get_visible_article(uow.articles, principal, article_id)
            _require(
                principal,
                article,
                Permission.VERSION_RESTORE_OWN,
                Permission.VERSION_RESTORE_ALL,
                "restore versions of",
            )
            if article.status == ArticleStatus.DELETED:
                raise BadRequestError("Cannot restore a version of an article in trash")
            target = await uow.versions.get(article_id, version)
            if target is None:
                raise NotFoundError("Version", f"{article_id}@{version}")
            if target.version == article.version:
                raise BadRequestError("Article is already at this version")

            old_category = article.category
            article.title = target.title
            article.body = target.body
            article.category = target.category
            article.tags = list(target.tags)
            article.related_articles = list(target.related_articles)

            updated = await uow.articles.update(article, expected_version=article.version)
            snapshot = await record_version(
                uow.versions, updated, principal, f"Restored from version {version}"
            )
            if updated.category != old_category:
                await adjust_article_count(uow.categories, old_category, -1)
                await adjust_article_count(uow.categories, updated.category, +1)

    logger.info(
        "Article restored to version",
        article_id=str(article_id),
        restored_from=version,
        version=snapshot.version,
    )
    return snapshot


async def permanently_delete_article(uow: UnitOfWork, principal: Principal, article_id: UUID) -> None:
    """Erase a trashed article together with its history, comments and lock."""
    async with article_sections.hold(article_id):
        async with uow.transaction():
            article = await get_visible_article(uow.articles, principal, article_id)
            if not has_permission(principal, Permission.ARTICLE_DELETE_ALL):
                raise AuthorizationError("Only editors can permanently delete articles")
            if article.status != ArticleStatus.DELETED:
                raise BadRequestError("Only articles in trash can be permanently deleted")

            await discard_lock(uow.locks, article_id)
            purged = await uow.versions.purge(article_id)
            comments = await uow.comments.delete_for_article(article_id)
            await uow.articles.delete(article_id)

    logger.warning(
        "Article permanently deleted",
        article_id=str(article_id),
        versions_purged=purged,
        comments_purged=comments,
    )


async def list_tags(uow: UnitOfWork, principal: Principal) -> list[TagCount]:
    counter: Counter[str] = Counter()
    for article in await uow.articles.list_not_deleted():
        if can_view(principal, article):
            counter.update(article.tags)
    return [TagCount(name=name, count=count) for name, count in counter.most_common()]


async def related_articles(
    uow: UnitOfWork,
    principal: Principal,
    article_id: UUID,
    limit: int = DEFAULT_RELATED_LIMIT,
) -> list[Article]:
    """Explicitly related published articles first, then ones sharing a category or tag."""
    if not 1 <= limit <= MAX_PAGE_LIMIT:
        raise BadRequestError(f"Limit must be between 1 and {MAX_PAGE_LIMIT}")
    article = await get_visible_article(uow.articles, principal, article_id)

    published = [a for a in await uow.articles.list_published() if a.id != article.id]
    by_id = {str(a.id): a for a in published}
    related = [by_id[rid] for rid in article.related_articles if rid in by_id]

    tags = {t.lower() for t in article.tags}
    for candidate in published:
        if len(related) >= limit:
            break
        if candidate in related:
            continue
        if candidate.category == article.category or tags & {t.lower() for t in candidate.tags}:
            related.append(candidate)
    return related[:limit]
