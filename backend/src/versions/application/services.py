from uuid import UUID

from articles.application.access import get_visible_article
from articles.domain.entities import Article
from auth.domain.entities import Principal
from auth.domain.permissions import Permission, has_permission
from shared.clock import utcnow
from shared.exceptions import AuthorizationError, BadRequestError, NotFoundError
from shared.logging import get_logger
from shared.unit_of_work import UnitOfWork
from versions.domain.entities import (
    ArticleVersion,
    VersionComparison,
    VersionHistory,
    diff_versions,
    snapshot_article,
)
from versions.domain.repository import VersionRepository

logger = get_logger(__name__)


async def record_version(
    repo: VersionRepository,
    article: Article,
    changed_by: Principal,
    reason: str | None = None,
) -> ArticleVersion:
    """Append the snapshot for the article's current version number."""
    version = await repo.create(snapshot_article(article, changed_by, utcnow(), reason))
    logger.info(
        "Version recorded",
        article_id=str(article.id),
        version=version.version,
        reason=reason,
    )
    return version


async def _readable_article(uow: UnitOfWork, principal: Principal, article_id: UUID) -> Article:
    if not has_permission(principal, Permission.VERSION_VIEW):
        raise AuthorizationError("You do not have permission to view version history")
    return await get_visible_article(uow.articles, principal, article_id)


async def list_versions(uow: UnitOfWork, principal: Principal, article_id: UUID) -> VersionHistory:
    article = await _readable_article(uow, principal, article_id)
    return VersionHistory(
        article_id=article.id,
        current_version=article.version,
        versions=await uow.versions.list_for_article(article.id),
    )


def _check_number(version: int) -> None:
    if version < 1:
        raise BadRequestError("Version numbers must be positive integers")


async def get_version(
    uow: UnitOfWork, principal: Principal, article_id: UUID, version: int
) -> ArticleVersion:
    _check_number(version)
    await _readable_article(uow, principal, article_id)
    found = await uow.versions.get(article_id, version)
    if found is None:
        raise NotFoundError("Version", f"{article_id}@{version}")
    return found


async def compare_versions(
    uow: UnitOfWork, principal: Principal, article_id: UUID, v1: int, v2: int
) -> VersionComparison:
    _check_number(v1)
    _check_number(v2)
    await _readable_article(uow, principal, article_id)

    low, high = sorted((v1, v2))
    older = await uow.versions.get(article_id, low)
    if older is None:
        raise NotFoundError("Version", f"{article_id}@{low}")
    newer = await uow.versions.get(article_id, high)
    if newer is None:
        raise NotFoundError("Version", f"{article_id}@{high}")
    return VersionComparison(older=older, newer=newer, diff=diff_versions(older, newer))
