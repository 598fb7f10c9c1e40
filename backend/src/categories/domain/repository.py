from typing import Protocol
from uuid import UUID

from categories.domain.entities import Category


class CategoryRepository(Protocol):
    async def list_all(self) -> list[Category]: ...

    async def get_by_id(self, category_id: UUID) -> Category | None: ...

    async def get_by_name(self, name: str) -> Category | None: ...

    async def create(self, category: Category) -> Category: ...

    async def update(self, category: Category) -> Category: ...

    async def delete(self, category_id: UUID) -> None: ...

    async def adjust_article_count(self, name: str, delta: int) -> None: ...

    async def set_article_count(self, category_id: UUID, count: int) -> None: ...
