"""SQLAlchemy ORM models backing the persistent state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class CatalogUpdate(Base):
    """One refresh cycle of the in-memory content table."""

    __tablename__ = "catalog_updates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_type: Mapped[str] = mapped_column(String(16), default="full")
    trigger: Mapped[str] = mapped_column(String(16), default="scheduled")
    status: Mapped[str] = mapped_column(String(16), default="running")
    titles_processed: Mapped[int] = mapped_column(Integer, default=0)
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "updateType": self.update_type,
            "trigger": self.trigger,
            "status": self.status,
            "titlesProcessed": self.titles_processed,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
            "errorMessage": self.error_message,
        }
