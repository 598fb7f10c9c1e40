from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query

from articles.application.services import (
    DEFAULT_RELATED_LIMIT,
    archive_article,
    create_article,
    delete_article,
    get_article,
    list_tags,
    permanently_delete_article,
    publish_article,
    related_articles,
    restore_article,
    search_articles,
    update_article,
)
from articles.domain.entities import (
    Article,
    ArticlePage,
    ArticleSearchParams,
    ArticleStatus,
    SortField,
    SortOrder,
)
from articles.interfaces.schemas import (
    ArticleListResponse,
    ArticleResponse,
    ArticleSummaryResponse,
    CreateArticleRequest,
    PaginationResponse,
    TagCountResponse,
    UpdateArticleRequest,
)
from auth.domain.entities import Principal, Role
from shared.dependencies import get_uow, require_role
from shared.exceptions import BadRequestError
from shared.infrastructure.unit_of_work import DbUnitOfWork

router = APIRouter(prefix="/api/articles", tags=["articles"])


def _split(values: list[str] | None) -> list[str]:
    """Accept both ``?tags=a&tags=b`` and ``?tags=a,b``."""
    return [part.strip() for value in values or [] for part in value.split(",") if part.strip()]


def _to_response(article: Article) -> ArticleResponse:
    return ArticleResponse.model_validate(article)


def _to_list_response(page: ArticlePage) -> ArticleListResponse:
    return ArticleListResponse(
        data=[ArticleSummaryResponse.model_validate(a) for a in page.items],
        pagination=PaginationResponse(
            page=page.page,
            limit=page.limit,
            total_items=page.total_items,
            total_pages=page.total_pages,
            has_next_page=page.has_next_page,
            has_previous_page=page.has_previous_page,
        ),
    )


@router.get("", response_model=ArticleListResponse)
async def search(
    query: str | None = None,
    status: list[str] | None = Query(None),
    category: str | None = None,
    tags: list[str] | None = Query(None),
    author_id: str | None = Query(None, alias="authorId"),
    created_after: datetime | None = Query(None, alias="createdAfter"),
    created_before: datetime | None = Query(None, alias="createdBefore"),
    updated_after: datetime | None = Query(None, alias="updatedAfter"),
    updated_before: datetime | None = Query(None, alias="updatedBefore"),
    sort_by: SortField = Query(SortField.UPDATED_AT, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    page: int = 1,
    limit: int = 20,
    current_user: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    try:
        statuses = [ArticleStatus(s) for s in _split(status)]
    except ValueError:
        raise BadRequestError(f"Unknown status filter: {', '.join(_split(status))}")

    params = ArticleSearchParams(
        query=query or None,
        statuses=statuses,
        category=category or None,
        tags=_split(tags),
        author_id=author_id or None,
        created_after=created_after,
        created_before=created_before,
        updated_after=updated_after,
        updated_before=updated_before,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return _to_list_response(await search_articles(uow, current_user, params))


@router.post("", response_model=ArticleResponse, status_code=201)
async def create(
    body: CreateArticleRequest,
    current_user: Principal = Depends(require_role(Role.AUTHOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    article = await create_article(
        uow,
        current_user,
        title=body.title,
        body=body.body,
        category=body.category,
        tags=body.tags,
        related_articles=body.related_articles,
        content_format=body.content_format,
        expiration_date=body.expiration_date,
    )
    return _to_response(article)


@router.get("/tags", response_model=list[TagCountResponse])
async def tags(
    current_user: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return [TagCountResponse.model_validate(t) for t in await list_tags(uow, current_user)]


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_one(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return _to_response(await get_article(uow, current_user, article_id))


@router.put("/{article_id}", response_model=ArticleResponse)
async def update(
    article_id: UUID,
    body: UpdateArticleRequest,
    change_reason: str | None = Header(None, alias="X-Change-Reason"),
    current_user: Principal = Depends(require_role(Role.AUTHOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    article = await update_article(
        uow, current_user, article_id, body.to_changes(), reason=change_reason or None
    )
    return _to_response(article)


@router.delete("/{article_id}", response_model=ArticleResponse)
async def delete(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.AUTHOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return _to_response(await delete_article(uow, current_user, article_id))


@router.delete("/{article_id}/permanent", status_code=204)
async def delete_permanently(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.EDITOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    await permanently_delete_article(uow, current_user, article_id)


@router.post("/{article_id}/restore", response_model=ArticleResponse)
async def restore(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.AUTHOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return _to_response(await restore_article(uow, current_user, article_id))


@router.post("/{article_id}/publish", response_model=ArticleResponse)
async def publish(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.AUTHOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return _to_response(await publish_article(uow, current_user, article_id))


@router.post("/{article_id}/archive", response_model=ArticleResponse)
async def archive(
    article_id: UUID,
    current_user: Principal = Depends(require_role(Role.EDITOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return _to_response(await archive_article(uow, current_user, article_id))


@router.get("/{article_id}/related", response_model=list[ArticleSummaryResponse])
async def related(
    article_id: UUID,
    limit: int = DEFAULT_RELATED_LIMIT,
    current_user: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    found = await related_articles(uow, current_user, article_id, limit=limit)
    return [ArticleSummaryResponse.model_validate(a) for a in found]
