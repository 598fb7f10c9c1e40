from uuid import UUID

from fastapi import APIRouter, Depends

from articles.application.services import restore_article_version
from auth.domain.entities import Principal, Role
from shared.dependencies import get_uow, require_role
from shared.infrastructure.unit_of_work import DbUnitOfWork
from versions.application.services import compare_versions, get_version, list_versions
from versions.interfaces.schemas import (
    VersionComparisonResponse,
    VersionHistoryResponse,
    VersionResponse,
)

router = APIRouter(prefix="/api/articles", tags=["versions"])


@router.get("/{article_id}/versions", response_model=VersionHistoryResponse)
async def history(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return VersionHistoryResponse.model_validate(await list_versions(uow, current_user, article_id))


# Declared before /versions/{version} so "compare" is not parsed as a version number
@router.get("/{article_id}/versions/compare", response_model=VersionComparisonResponse)
async def compare(
    article_id: UUID,
    v1: int,
    v2: int,
    current_user: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    comparison = await compare_versions(uow, current_user, article_id, v1, v2)
    return VersionComparisonResponse.model_validate(comparison)


@router.get("/{article_id}/versions/{version}", response_model=VersionResponse)
async def get_one(
    article_id: UUID,
    version: int,
    current_user: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return VersionResponse.model_validate(await get_version(uow, current_user, article_id, version))


@router.post("/{article_id}/versions/{version}/restore", response_model=VersionResponse)
async def restore(
    article_id: UUID,
    version: int,
    current_user: Principal = Depends(require_role(Role.AUTHOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    restored = await restore_article_version(uow, current_user, article_id, version)
    return VersionResponse.model_validate(restored)
