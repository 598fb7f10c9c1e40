from uuid import UUID

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from categories.domain.entities import Category
from categories.infrastructure.models import CategoryModel
from shared.clock import as_utc


class DbCategoryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> list[Category]:
        result = await self.session.execute(
            select(CategoryModel)
            .order_by(CategoryModel.order, CategoryModel.name)
            .execution_options(populate_existing=True)
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def get_by_id(self, category_id: UUID) -> Category | None:
        model = await self.session.get(CategoryModel, category_id, populate_existing=True)
        return _to_entity(model) if model else None

    async def get_by_name(self, name: str) -> Category | None:
        result = await self.session.execute(
            select(CategoryModel)
            .where(func.lower(CategoryModel.name) == name.strip().lower())
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def create(self, category: Category) -> Category:
        model = CategoryModel(
            name=category.name,
            description=category.description,
            parent_id=category.parent_id,
            order=category.order,
            article_count=category.article_count,
        )
        self.session.add(model)
        await self.session.flush()
        return _to_entity(model)

    async def update(self, category: Category) -> Category:
        model = await self.session.get(CategoryModel, category.id)
        model.name = category.name
        model.description = category.description
        model.parent_id = category.parent_id
        model.order = category.order
        model.article_count = category.article_count
        await self.session.flush()
        return _to_entity(model)

    async def delete(self, category_id: UUID) -> None:
        await self.session.execute(delete(CategoryModel).where(CategoryModel.id == category_id))

    async def adjust_article_count(self, name: str, delta: int) -> None:
        """Atomic increment/decrement clamped at zero; unknown names are ignored."""
        new_count = CategoryModel.article_count + delta
        await self.session.execute(
            update(CategoryModel)
            .where(func.lower(CategoryModel.name) == name.strip().lower())
            .values(article_count=case((new_count < 0, 0), else_=new_count))
            .execution_options(synchronize_session=False)
        )

    async def set_article_count(self, category_id: UUID, count: int) -> None:
        await self.session.execute(
            update(CategoryModel)
            .where(CategoryModel.id == category_id)
            .values(article_count=count)
            .execution_options(synchronize_session=False)
        )


def _to_entity(model: CategoryModel) -> Category:
    return Category(
        id=model.id,
        name=model.name,
        description=model.description,
        parent_id=model.parent_id,
        order=model.order,
        article_count=model.article_count,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )
