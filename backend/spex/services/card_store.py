"""Card Store — SQLAlchemy implementation of CardRepository.

Invariants:
    - claim_if_unclaimed is ONE conditional UPDATE (WHERE claimed_at IS NULL),
      committed immediately: the database arbitrates concurrent claimants,
      at most one sees rowcount == 1
    - No SELECT precedes the claim UPDATE in the same transaction (no read-then-write race)
    - update_profile writes profile columns only; claim columns are never in its SET list
    - get() always refreshes from the database (populate_existing)

Design Decisions:
    - Core-style UPDATE with synchronize_session=False: the identity map is not
      consulted, rowcount is the linearization signal
    - No application locks, no retries (ADR: store-native atomicity suffices)
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from spex.core.domain_types import new_card_uid
from spex.core.profile import Profile
from spex.models.card import Card

logger = logging.getLogger(__name__)


class CardStore:
    """Card persistence over one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, uid: str) -> Card | None:
        result = await self.db.execute(
            select(Card)
            .where(Card.uid == uid)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def claim_if_unclaimed(
        self, uid: str, profile: Profile, claimed_by_email: str | None,
    ) -> bool:
        """Atomic compare-and-swap on claimed_at. True only for the winner."""
        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            update(Card)
            .where(Card.uid == uid, Card.claimed_at.is_(None))
            .values(
                **profile.to_columns(),
                claimed_at=now,
                claimed_by_email=claimed_by_email,
                updated_at=now,
            )
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        return result.rowcount == 1

    async def update_profile(self, uid: str, profile: Profile) -> bool:
        """Unconditional profile overwrite. False when the card does not exist."""
        result = await self.db.execute(
            update(Card)
            .where(Card.uid == uid)
            .values(**profile.to_columns(), updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        return result.rowcount == 1

    async def create(self, count: int = 1) -> list[str]:
        """Provision blank cards."""
        uids = [new_card_uid() for _ in range(count)]
        self.db.add_all([Card(uid=uid) for uid in uids])
        await self.db.commit()
        logger.info(f"Provisioned {count} card(s)", extra={"count": count})
        return uids

    async def list_cards(self, take: int, skip: int) -> tuple[list[Card], int]:
        """Newest first, with total count for pagination."""
        rows = await self.db.execute(
            select(Card)
            .order_by(Card.created_at.desc())
            .limit(take)
            .offset(skip),
        )
        total = await self.db.scalar(select(func.count()).select_from(Card))
        return list(rows.scalars().all()), total or 0
