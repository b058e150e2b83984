"""Admin Schemas — provisioning and listing payloads.

Invariants:
    - Bulk create count is clamped to 1..MAX_BULK_CREATE (never rejected)
    - Listing rows expose a derived `claimed` flag computed from claimed_at only
"""

from datetime import datetime

from pydantic import Field, field_validator

from spex.core.domain_types import MAX_BULK_CREATE, Claimed
from spex.schemas.card import CamelModel, ProfileOut


class CreateUidsRequest(CamelModel):
    count: int | None = Field(None, validate_default=True)

    @field_validator("count")
    @classmethod
    def clamp_count(cls, v: int | None) -> int:
        return min(max(v or 1, 1), MAX_BULK_CREATE)


class CardSummary(ProfileOut):
    """Admin listing row: profile plus timestamps and claim flag."""
    uid: str
    created_at: datetime
    updated_at: datetime
    claimed_at: datetime | None = None
    claimed: bool = False

    @classmethod
    def from_card(cls, card) -> "CardSummary":
        return cls(
            uid=card.uid,
            created_at=card.created_at,
            updated_at=card.updated_at,
            claimed_at=card.claimed_at,
            claimed=isinstance(card.claim_state, Claimed),
            **card.to_profile().to_columns(),
        )


class CardListResponse(CamelModel):
    total: int
    rows: list[CardSummary] = Field(default_factory=list)
    take: int
    skip: int
