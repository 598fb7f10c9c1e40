from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 200


@dataclass
class Category:
    name: str
    order: int
    description: str | None = None
    parent_id: UUID | None = None
    article_count: int = 0
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)


DEFAULT_CATEGORIES: list[tuple[str, str]] = [
    ("Incident Resolution", "Articles related to resolving incidents and outages"),
    ("Service Request", "How-to guides for common service requests"),
    ("Change Management", "Change procedures and documentation"),
    ("Problem Management", "Root cause analysis and known error documentation"),
    ("Asset Management", "Hardware and software asset information"),
    ("Security", "Security policies and procedures"),
    ("Network", "Network infrastructure and connectivity"),
    ("Applications", "Application-specific documentation"),
    ("End User Support", "General end-user support articles"),
    ("Training", "Training materials and tutorials"),
]


def validate_category_fields(
    name: str | None, description: str | None, creating: bool = False
) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if name is not None or creating:
        stripped = (name or "").strip()
        if not stripped:
            errors["name"] = ["Name is required"]
        elif len(stripped) > NAME_MAX_LENGTH:
            errors["name"] = [f"Name must not exceed {NAME_MAX_LENGTH} characters"]
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        errors["description"] = [f"Description must not exceed {DESCRIPTION_MAX_LENGTH} characters"]
    return errors
