from articles.domain.entities import Article, ArticleStatus
from shared.exceptions import InvalidTransitionError

# archived -> published is deliberately absent: an archived article goes
# back to published only via deleted -> draft -> published.
TRANSITIONS: dict[ArticleStatus, frozenset[ArticleStatus]] = {
    ArticleStatus.DRAFT: frozenset({ArticleStatus.PUBLISHED, ArticleStatus.DELETED}),
    ArticleStatus.PUBLISHED: frozenset({ArticleStatus.ARCHIVED, ArticleStatus.DELETED}),
    ArticleStatus.ARCHIVED: frozenset({ArticleStatus.DELETED}),
    ArticleStatus.DELETED: frozenset({ArticleStatus.DRAFT}),
}

_REJECTIONS: dict[ArticleStatus, str] = {
    ArticleStatus.PUBLISHED: "Only draft articles can be published",
    ArticleStatus.ARCHIVED: "Only published articles can be archived",
    ArticleStatus.DELETED: "Article is already in trash",
    ArticleStatus.DRAFT: "Article is not in trash",
}


def can_transition(current: ArticleStatus, target: ArticleStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_transition(article: Article, target: ArticleStatus) -> None:
    if not can_transition(article.status, target):
        raise InvalidTransitionError(_REJECTIONS[target])
