from uuid import UUID

from fastapi import APIRouter, Depends

from auth.domain.entities import Principal, Role
from categories.application.services import (
    create_category,
    delete_category,
    get_category,
    list_categories,
    reconcile_article_counts,
    update_category,
)
from categories.interfaces.schemas import (
    CategoryResponse,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from shared.dependencies import get_uow, require_role
from shared.infrastructure.unit_of_work import DbUnitOfWork

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse])
async def list_all(
    _: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return [CategoryResponse.model_validate(c) for c in await list_categories(uow.categories)]


@router.post("", response_model=CategoryResponse, status_code=201)
async def create(
    body: CreateCategoryRequest,
    current_user: Principal = Depends(require_role(Role.EDITOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    category = await create_category(
        uow,
        current_user,
        name=body.name,
        description=body.description,
        parent_id=body.parent_id,
        order=body.order,
    )
    return CategoryResponse.model_validate(category)


@router.post("/reconcile", response_model=list[CategoryResponse])
async def reconcile(
    current_user: Principal = Depends(require_role(Role.EDITOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return [CategoryResponse.model_validate(c) for c in await reconcile_article_counts(uow, current_user)]


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_one(
    category_id: UUID,
    _: Principal = Depends(require_role(Role.READER)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    return CategoryResponse.model_validate(await get_category(uow.categories, category_id))


@router.put("/{category_id}", response_model=CategoryResponse)
async def update(
    category_id: UUID,
    body: UpdateCategoryRequest,
    current_user: Principal = Depends(require_role(Role.EDITOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    category = await update_category(
        uow,
        current_user,
        category_id,
        name=body.name,
        description=body.description,
        parent_id=body.parent_id,
        order=body.order,
    )
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=204)
async def delete(
    category_id: UUID,
    current_user: Principal = Depends(require_role(Role.EDITOR)),
    uow: DbUnitOfWork = Depends(get_uow),
):
    await delete_category(uow, current_user, category_id)
