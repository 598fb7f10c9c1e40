from datetime import timedelta
from uuid import UUID

from articles.application.access import get_visible_article
from articles.domain.entities import Article, ArticleStatus
from auth.domain.entities import Principal
from auth.domain.permissions import Permission, has_permission, may_act_on
from locks.domain.entities import ArticleLock, LockResult, LockStatus, new_lock
from locks.domain.repository import LockRepository
from shared.clock import utcnow
from shared.concurrency import lock_sections
from shared.config import settings
from shared.exceptions import AuthorizationError, BadRequestError
from shared.logging import get_logger
from shared.unit_of_work import UnitOfWork

logger = get_logger(__name__)


def lock_timeout() -> timedelta:
    return timedelta(minutes=settings.LOCK_TIMEOUT_MINUTES)


async def _editable_article(uow: UnitOfWork, principal: Principal, article_id: UUID) -> Article:
    article = await get_visible_article(uow.articles, principal, article_id)
    if article.status == ArticleStatus.DELETED:
        raise BadRequestError("Cannot lock an article in trash")
    if not may_act_on(
        principal, article.author_id, Permission.ARTICLE_EDIT_OWN, Permission.ARTICLE_EDIT_ALL
    ):
        raise AuthorizationError("You do not have permission to edit this article")
    return article


async def _take(locks: LockRepository, principal: Principal, article_id: UUID) -> LockResult:
    now = utcnow()
    current = await locks.get(article_id)
    live = current is not None and not current.is_expired(now)

    if live and not current.is_held_by(principal.id):
        return LockResult(
            success=False,
            message=f"Article is currently being edited by {current.locked_by_name}",
            lock=current,
        )

    lock = new_lock(article_id, principal.id, principal.display_name, now, lock_timeout())
    if live:
        lock.locked_at = current.locked_at
    saved = await locks.save(lock)

    event = "Lock renewed" if live else "Lock acquired"
    logger.info(event, article_id=str(article_id), expires_at=saved.expires_at.isoformat())
    return LockResult(success=True, message=event, lock=saved)


async def acquire_lock(uow: UnitOfWork, principal: Principal, article_id: UUID) -> LockResult:
    """Take the edit lock, or renew it when the caller already holds it.

    Never blocks: a live lock held by someone else is reported back in a
    failed ``LockResult`` carrying the holder's lock.
    """
    await _editable_article(uow, principal, article_id)
    async with lock_sections.hold(article_id):
        async with uow.transaction():
            return await _take(uow.locks, principal, article_id)


async def renew_lock(uow: UnitOfWork, principal: Principal, article_id: UUID) -> LockResult:
    # Renewing a lock nobody holds acquires it.
    return await acquire_lock(uow, principal, article_id)


async def _drop(locks: LockRepository, principal: Principal, article_id: UUID) -> bool:
    current = await locks.get(article_id)
    if current is None:
        return True
    if current.is_expired(utcnow()):
        await locks.delete(article_id)
        return True
    if not current.is_held_by(principal.id):
        if not has_permission(principal, Permission.ARTICLE_LOCK_OVERRIDE):
            raise AuthorizationError(
                f"Lock is held by {current.locked_by_name}; only editors can release it"
            )
        logger.warning(
            "Lock force-released",
            article_id=str(article_id),
            released_by=principal.id,
            released_by_name=principal.display_name,
            holder_id=current.locked_by,
            holder_name=current.locked_by_name,
        )
    else:
        logger.info("Lock released", article_id=str(article_id))
    await locks.delete(article_id)
    return True


async def release_lock(uow: UnitOfWork, principal: Principal, article_id: UUID) -> bool:
    await get_visible_article(uow.articles, principal, article_id)
    async with lock_sections.hold(article_id):
        async with uow.transaction():
            return await _drop(uow.locks, principal, article_id)


async def discard_lock(locks: LockRepository, article_id: UUID) -> ArticleLock | None:
    """Remove whatever lock an article has, inside the caller's transaction.

    Used by soft and permanent deletion, which already own the article's
    critical section.
    """
    async with lock_sections.hold(article_id):
        current = await locks.get(article_id)
        if current is not None:
            await locks.delete(article_id)
            logger.info(
                "Lock discarded", article_id=str(article_id), holder_id=current.locked_by
            )
        return current


async def get_lock_status(uow: UnitOfWork, principal: Principal, article_id: UUID) -> LockStatus:
    article = await get_visible_article(uow.articles, principal, article_id)
    may_edit = article.status != ArticleStatus.DELETED and may_act_on(
        principal, article.author_id, Permission.ARTICLE_EDIT_OWN, Permission.ARTICLE_EDIT_ALL
    )

    async with lock_sections.hold(article_id):
        async with uow.transaction():
            current = await uow.locks.get(article_id)
            if current is not None and current.is_expired(utcnow()):
                await uow.locks.delete(article_id)
                logger.info("Expired lock cleared", article_id=str(article_id))
                current = None

    if current is None:
        return LockStatus(is_locked=False, can_edit=may_edit)
    if current.is_held_by(principal.id):
        return LockStatus(is_locked=True, can_edit=may_edit, lock=current, message="You hold the lock")
    return LockStatus(
        is_locked=True,
        can_edit=False,
        lock=current,
        message=f"Article is currently being edited by {current.locked_by_name}",
    )


async def find_live_lock(locks: LockRepository, article_id: UUID) -> ArticleLock | None:
    current = await locks.get(article_id)
    if current is None or current.is_expired(utcnow()):
        return None
    return current


async def live_locks(locks: LockRepository, article_ids: list[UUID]) -> dict[UUID, ArticleLock]:
    now = utcnow()
    found = await locks.get_many(article_ids)
    return {aid: lock for aid, lock in found.items() if not lock.is_expired(now)}


async def sweep_expired_locks(uow: UnitOfWork) -> int:
    """Delete every expired lock; returns how many were reaped."""
    now = utcnow()
    reaped = 0
    for lock in await uow.locks.list_all():
        if not lock.is_expired(now):
            continue
        async with lock_sections.hold(lock.article_id):
            async with uow.transaction():
                # Re-check under the section: the holder may have renewed meanwhile
                current = await uow.locks.get(lock.article_id)
                if current is not None and current.is_expired(utcnow()):
                    await uow.locks.delete(lock.article_id)
                    reaped += 1
    if reaped:
        logger.info("Expired locks swept", count=reaped)
    return reaped
