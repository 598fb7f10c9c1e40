from uuid import UUID

from fastapi import APIRouter, Depends

from auth.domain.entities import Principal, Role
from locks.application.services import acquire_lock, get_lock_status, release_lock, renew_lock
from locks.domain.entities import LockResult, LockStatus
from locks.interfaces.schemas import LockResponse, LockStatusResponse
from shared.dependencies import get_uow, require_role
from shared.exceptions import LockConflictError
from shared.infrastructure.unit_of_work import DbUnitOfWork
from shared.schemas import MessageResponse

router = APIRouter(prefix="/api/articles", tags=["locks"])


def _granted(result: LockResult) -> LockResponse:
    if not result.success:
        lock = result.lock
        raise LockConflictError(lock.locked_by_name, lock.locked_at, lock.expires_at)
    return LockResponse.model_validate(result.lock)


def _status_response(status: LockStatus) -> LockStatusResponse:
    lock = status.lock
    return LockStatusResponse(
        is_locked=status.is_locked,
        can_edit=status.can_edit,
        locked_by=lock.locked_by if lock else None,
        locked_by_name=lock.locked_by_name if lock else None,
        locked_at=lock.locked_at if lock else None,
        expires_at=lock.expires_at if lock else None,
        message=status.message,
    )


@router.get("/{article_id}/lock", response_model=LockStatusResponse)
async def lock_status(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return _status_response(await get_lock_status(uow, current_user, article_id))


@router.post("/{article_id}/lock", response_model=LockResponse)
async def acquire(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.AUTHOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return _granted(await acquire_lock(uow, current_user, article_id))


@router.put("/{article_id}/lock", response_model=LockResponse)
async def renew(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.AUTHOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return _granted(await renew_lock(uow, current_user, article_id))


@router.delete("/{article_id}/lock", response_model=MessageResponse)
async def release(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.AUTHOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    await release_lock(uow, current_user, article_id)
    return MessageResponse(message="Lock released")
