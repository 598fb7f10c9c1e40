from articles.domain.entities import ArticleChanges

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 150
BODY_MIN_LENGTH = 10
BODY_MAX_LENGTH = 50_000
CATEGORY_MAX_LENGTH = 50
TAG_MAX_LENGTH = 30
MAX_TAGS = 10
MAX_RELATED_ARTICLES = 10


def validate_article_fields(changes: ArticleChanges, creating: bool = False) -> dict[str, list[str]]:
    """Collect every field problem instead of stopping at the first one.

    On create the title, body and category are required; on update only the
    supplied fields are checked.
    """
    errors: dict[str, list[str]] = {}

    if changes.title is not None or creating:
        title = changes.title or ""
        if not title:
            errors["title"] = ["Title is required"]
        elif len(title) < TITLE_MIN_LENGTH:
            errors["title"] = [f"Title must be at least {TITLE_MIN_LENGTH} characters"]
        elif len(title) > TITLE_MAX_LENGTH:
            errors["title"] = [f"Title must not exceed {TITLE_MAX_LENGTH} characters"]

    if changes.body is not None or creating:
        body = changes.body or ""
        if not body:
            errors["body"] = ["Body is required"]
        elif len(body) < BODY_MIN_LENGTH:
            errors["body"] = [f"Body must be at least {BODY_MIN_LENGTH} characters"]
        elif len(body) > BODY_MAX_LENGTH:
            errors["body"] = [f"Body must not exceed {BODY_MAX_LENGTH} characters"]

    if changes.category is not None or creating:
        category = changes.category or ""
        if not category:
            errors["category"] = ["Category is required"]
        elif len(category) > CATEGORY_MAX_LENGTH:
            errors["category"] = [f"Category must not exceed {CATEGORY_MAX_LENGTH} characters"]

    if changes.tags is not None:
        tag_errors = []
        if len(changes.tags) > MAX_TAGS:
            tag_errors.append(f"Maximum {MAX_TAGS} tags allowed")
        if any(len(tag) > TAG_MAX_LENGTH for tag in changes.tags):
            tag_errors.append(f"Tags must not exceed {TAG_MAX_LENGTH} characters")
        if tag_errors:
            errors["tags"] = tag_errors

    if changes.related_articles is not None and len(changes.related_articles) > MAX_RELATED_ARTICLES:
        errors["relatedArticles"] = [f"Maximum {MAX_RELATED_ARTICLES} related articles allowed"]

    return errors
