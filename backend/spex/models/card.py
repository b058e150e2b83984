"""Card ORM — one row per opaque card identifier.

Invariants:
    - uid is the primary key, server-generated, immutable
    - claimed_at NULL means unclaimed; it is set exactly once and never reset
    - claimed_by_email is informational only, never used for authorization
    - Profile columns are the only columns the edit paths write

Design Decisions:
    - Nullable timestamp instead of a status column: one source of truth for
      claim state, no flag/timestamp divergence
    - JSON column for socials: free-form platform -> handle/URL mapping
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from spex.core.domain_types import ClaimState, claim_state_of
from spex.core.profile import Profile, profile_from_row
from spex.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Card(Base):
    """Business card slot — blank until claimed."""
    __tablename__ = "cards"

    uid: Mapped[str] = mapped_column(String(32), primary_key=True)

    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    company: Mapped[str | None] = mapped_column(Text, nullable=True)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    mobile: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    email_public: Mapped[str | None] = mapped_column(Text, nullable=True)
    website: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    socials: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    claimed_by_email: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=_utcnow, onupdate=_utcnow,
    )

    @property
    def claim_state(self) -> ClaimState:
        return claim_state_of(self.claimed_at, self.claimed_by_email)

    def to_profile(self) -> Profile:
        return profile_from_row(self)
