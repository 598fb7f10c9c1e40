import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from shared.infrastructure.database import Base


class ArticleLockModel(Base):
    __tablename__ = "article_locks"

    article_id: Mapped[uuid.UUID] = mapped_column(primary_key=True)
    locked_by: Mapped[str] = mapped_column(String(100), nullable=False)
    locked_by_name: Mapped[str] = mapped_column(String(200), nullable=False)
    locked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
