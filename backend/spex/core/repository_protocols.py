"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - claim_if_unclaimed is the single atomic compare-and-swap on claimed_at:
      under concurrent calls for one uid, at most one caller sees True
    - update_profile never touches claim fields

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO
"""

from datetime import datetime
from typing import Protocol

from spex.core.domain_types import ClaimState
from spex.core.profile import Profile


class CardLike(Protocol):
    """Structural contract for Card rows passed to services and routes."""
    uid: str
    claimed_at: datetime | None
    claimed_by_email: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def claim_state(self) -> ClaimState: ...

    def to_profile(self) -> Profile: ...


class CardRepository(Protocol):
    """Contract for card persistence — implemented by shell."""
    async def get(self, uid: str) -> CardLike | None: ...
    async def claim_if_unclaimed(
        self, uid: str, profile: Profile, claimed_by_email: str | None,
    ) -> bool: ...
    async def update_profile(self, uid: str, profile: Profile) -> bool: ...
    async def create(self, count: int = 1) -> list[str]: ...
    async def list_cards(
        self, take: int, skip: int,
    ) -> tuple[list[CardLike], int]: ...


class EventSink(Protocol):
    """Contract for the append-only analytics sink."""
    async def record(
        self, uid: str, kind: str, ua: str | None, ip: str | None,
    ) -> None: ...
