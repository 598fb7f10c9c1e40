from datetime import datetime
from uuid import UUID

from shared.schemas import CamelModel


class LockResponse(CamelModel):
    article_id: UUID
    locked_by: str
    locked_by_name: str
    locked_at: datetime
    expires_at: datetime


class LockStatusResponse(CamelModel):
    is_locked: bool
    can_edit: bool
    locked_by: str | None = None
    locked_by_name: str | None = None
    locked_at: datetime | None = None
    expires_at: datetime | None = None
    message: str | None = None
