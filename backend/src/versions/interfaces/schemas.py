from datetime import datetime
from typing import Any
from uuid import UUID

from articles.domain.entities import ArticleStatus
from shared.schemas import CamelModel


class VersionResponse(CamelModel):
    id: UUID | None = None
    article_id: UUID
    version: int
    title: str
    body: str
    category: str
    tags: list[str]
    related_articles: list[str]
    status: ArticleStatus
    changed_by: str
    changed_by_name: str
    changed_at: datetime
    change_reason: str | None = None
    change_summary: str | None = None


class VersionHistoryResponse(CamelModel):
    article_id: UUID
    current_version: int
    versions: list[VersionResponse]


class FieldDiffResponse(CamelModel):
    field: str
    old_value: Any = None
    new_value: Any = None


class VersionComparisonResponse(CamelModel):
    older: VersionResponse
    newer: VersionResponse
    diff: list[FieldDiffResponse]
