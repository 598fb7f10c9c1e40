from uuid import UUID

from auth.domain.entities import Principal
from auth.domain.permissions import Permission, has_permission
from categories.domain.entities import DEFAULT_CATEGORIES, Category, validate_category_fields
from categories.domain.repository import CategoryRepository
from shared.exceptions import (
    AuthorizationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from shared.logging import get_logger
from shared.unit_of_work import UnitOfWork

logger = get_logger(__name__)


def _ensure_manager(principal: Principal) -> None:
    if not has_permission(principal, Permission.CATEGORY_MANAGE):
        raise AuthorizationError("Only editors can manage categories")


async def list_categories(repo: CategoryRepository) -> list[Category]:
    return await repo.list_all()


async def get_category(repo: CategoryRepository, category_id: UUID) -> Category:
    category = await repo.get_by_id(category_id)
    if not category:
        raise NotFoundError("Category", str(category_id))
    return category


async def _ensure_unique(repo: CategoryRepository, name: str, exclude: UUID | None = None) -> None:
    existing = await repo.get_by_name(name)
    if existing and existing.id != exclude:
        raise ConflictError(f"Category '{existing.name}' already exists")


async def create_category(
    uow: UnitOfWork,
    principal: Principal,
    name: str,
    description: str | None = None,
    parent_id: UUID | None = None,
    order: int | None = None,
) -> Category:
    _ensure_manager(principal)
    errors = validate_category_fields(name, description, creating=True)
    if errors:
        raise ValidationFailedError(errors)
    name = name.strip()

    async with uow.transaction():
        await _ensure_unique(uow.categories, name)
        if parent_id is not None:
            await get_category(uow.categories, parent_id)
        if order is None:
            order = len(await uow.categories.list_all()) + 1
        counts = await uow.articles.count_by_category()
        category = await uow.categories.create(
            Category(
                name=name,
                description=description,
                parent_id=parent_id,
                order=order,
                article_count=_count_for(counts, name),
            )
        )
    logger.info("Category created", category_id=str(category.id), name=category.name)
    return category


async def update_category(
    uow: UnitOfWork,
    principal: Principal,
    category_id: UUID,
    name: str | None = None,
    description: str | None = None,
    parent_id: UUID | None = None,
    order: int | None = None,
) -> Category:
    _ensure_manager(principal)
    errors = validate_category_fields(name, description)
    if errors:
        raise ValidationFailedError(errors)

    async with uow.transaction():
        category = await get_category(uow.categories, category_id)
        if name is not None and name.strip() != category.name:
            await _ensure_unique(uow.categories, name, exclude=category_id)
            category.name = name.strip()
            counts = await uow.articles.count_by_category()
            category.article_count = _count_for(counts, category.name)
        if description is not None:
            category.description = description
        if parent_id is not None:
            if parent_id == category_id:
                raise BadRequestError("A category cannot be its own parent")
            await get_category(uow.categories, parent_id)
            category.parent_id = parent_id
        if order is not None:
            category.order = order
        category = await uow.categories.update(category)
    logger.info("Category updated", category_id=str(category_id))
    return category


async def delete_category(uow: UnitOfWork, principal: Principal, category_id: UUID) -> None:
    _ensure_manager(principal)
    async with uow.transaction():
        category = await get_category(uow.categories, category_id)
        if category.article_count > 0:
            raise ConflictError(
                f"Cannot delete category with {category.article_count} articles",
                details={"articleCount": category.article_count},
            )
        await uow.categories.delete(category_id)
    logger.info("Category deleted", category_id=str(category_id), name=category.name)


async def adjust_article_count(repo: CategoryRepository, name: str, delta: int) -> None:
    await repo.adjust_article_count(name, delta)


async def reconcile_article_counts(uow: UnitOfWork, principal: Principal) -> list[Category]:
    """Recompute every category's count from the articles themselves."""
    _ensure_manager(principal)
    async with uow.transaction():
        counts = await uow.articles.count_by_category()
        for category in await uow.categories.list_all():
            actual = _count_for(counts, category.name)
            if actual != category.article_count:
                logger.warning(
                    "Category count drift corrected",
                    category=category.name,
                    stored=category.article_count,
                    actual=actual,
                )
                await uow.categories.set_article_count(category.id, actual)
    return await uow.categories.list_all()


async def seed_default_categories(uow: UnitOfWork) -> int:
    async with uow.transaction():
        if await uow.categories.list_all():
            return 0
        for order, (name, description) in enumerate(DEFAULT_CATEGORIES, start=1):
            await uow.categories.create(Category(name=name, description=description, order=order))
    logger.info("Default categories seeded", count=len(DEFAULT_CATEGORIES))
    return len(DEFAULT_CATEGORIES)


def _count_for(counts: dict[str, int], name: str) -> int:
    key = name.lower()
    return sum(count for category, count in counts.items() if category.lower() == key)
