from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from articles.domain.entities import Article, ArticleStatus
from auth.domain.entities import Principal


@dataclass(frozen=True)
class ArticleVersion:
    article_id: UUID
    version: int
    title: str
    body: str
    category: str
    tags: tuple[str, ...]
    related_articles: tuple[str, ...]
    status: ArticleStatus
    changed_by: str
    changed_by_name: str
    changed_at: datetime
    change_reason: str | None = None
    change_summary: str | None = None
    id: UUID | None = field(default=None)


@dataclass(frozen=True)
class FieldDiff:
    field: str
    old_value: Any
    new_value: Any


@dataclass
class VersionHistory:
    article_id: UUID
    current_version: int
    versions: list[ArticleVersion]


@dataclass
class VersionComparison:
    older: ArticleVersion
    newer: ArticleVersion
    diff: list[FieldDiff]


DIFF_FIELDS = ("title", "body", "category", "status", "tags", "related_articles")


def summarize_change(article: Article) -> str:
    parts = ["Initial version created" if article.version == 1 else f"Updated to version {article.version}"]
    if article.status == ArticleStatus.PUBLISHED:
        parts.append("Published")
    elif article.status == ArticleStatus.ARCHIVED:
        parts.append("Archived")
    return ". ".join(parts)


def snapshot_article(
    article: Article,
    changed_by: Principal,
    changed_at: datetime,
    reason: str | None = None,
) -> ArticleVersion:
    """Freeze the article's post-mutation state under its current version number."""
    return ArticleVersion(
        article_id=article.id,
        version=article.version,
        title=article.title,
        body=article.body,
        category=article.category,
        tags=tuple(article.tags),
        related_articles=tuple(article.related_articles),
        status=article.status,
        changed_by=changed_by.id,
        changed_by_name=changed_by.display_name,
        changed_at=changed_at,
        change_reason=reason,
        change_summary=summarize_change(article),
    )


def diff_versions(older: ArticleVersion, newer: ArticleVersion) -> list[FieldDiff]:
    return [
        FieldDiff(name, getattr(older, name), getattr(newer, name))
        for name in DIFF_FIELDS
        if getattr(older, name) != getattr(newer, name)
    ]
