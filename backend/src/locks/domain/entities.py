from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID


@dataclass
class ArticleLock:
    article_id: UUID
    locked_by: str
    locked_by_name: str
    locked_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_held_by(self, principal_id: str) -> bool:
        return self.locked_by == principal_id


def new_lock(
    article_id: UUID, principal_id: str, principal_name: str, now: datetime, timeout: timedelta
) -> ArticleLock:
    return ArticleLock(
        article_id=article_id,
        locked_by=principal_id,
        locked_by_name=principal_name,
        locked_at=now,
        expires_at=now + timeout,
    )


@dataclass
class LockResult:
    success: bool
    message: str
    lock: ArticleLock | None = None


@dataclass
class LockStatus:
    is_locked: bool
    can_edit: bool
    lock: ArticleLock | None = None
    message: str | None = None

    @property
    def holder_name(self) -> str | None:
        return self.lock.locked_by_name if self.lock else None
