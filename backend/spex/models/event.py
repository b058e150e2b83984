"""Event ORM — append-only scan/visit analytics.

Invariants:
    - Rows are inserted, never updated or deleted
    - uid is NOT a foreign key: events may reference unknown or removed cards

Design Decisions:
    - Logging table, not enforcement: no business logic reads it
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from spex.db.base import Base


class Event(Base):
    """Analytics event — one scan or visit."""
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(64), nullable=False)
    ua: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
