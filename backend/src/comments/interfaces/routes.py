from uuid import UUID

from fastapi import APIRouter, Depends

from auth.domain.entities import Principal, Role
from comments.application.services import (
    create_comment,
    delete_comment,
    list_comments,
    update_comment,
)
from comments.interfaces.schemas import CommentListResponse, CommentRequest, CommentResponse
from shared.dependencies import get_uow, require_role
from shared.infrastructure.unit_of_work import DbUnitOfWork

router = APIRouter(prefix="/api", tags=["comments"])


@router.get("/articles/{article_id}/comments", response_model=CommentListResponse)
async def list_for_article(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    thread = await list_comments(uow, current_user, article_id)
    return CommentListResponse(
        article_id=thread.article_id,
        comments=[CommentResponse.model_validate(c) for c in thread.comments],
        total_count=thread.total_count,
    )


@router.post("/articles/{article_id}/comments", response_model=CommentResponse, status_code=201)
async def create(
    article_id: UUID,
    body: CommentRequest,
    current_user: Principal = Depends(require_role(Role.ACTOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    comment = await create_comment(uow, current_user, article_id, body.content)
    return CommentResponse.model_validate(comment)


@router.put("/comments/{comment_id}", response_model=CommentResponse)
async def update(
    comment_id: UUID,
    body: CommentRequest,
    current_user: Principal = Depends(require_role(Role.ACTOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    comment = await update_comment(uow, current_user, comment_id, body.content)
    return CommentResponse.model_validate(comment)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete(
    comment_id: UUID,
    current_user: Principal = Depends(require_role(Role.ACTOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    await delete_comment(uow, current_user, comment_id)
