from datetime import datetime
from uuid import UUID

from shared.schemas import CamelModel


class CreateCategoryRequest(CamelModel):
    name: str | None = None
    description: str | None = None
    parent_id: UUID | None = None
    order: int | None = None


class UpdateCategoryRequest(CamelModel):
    name: str | None = None
    description: str | None = None
    parent_id: UUID | None = None
    order: int | None = None


class CategoryResponse(CamelModel):
    id: UUID
    name: str
    description: str | None = None
    parent_id: UUID | None = None
    order: int
    article_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
