"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - CardUid wraps the opaque card identifier — never user-chosen
    - Claim state is derived ONLY from claimed_at (no "has a photo" heuristics)
    - ClaimState is a closed two-state sum: Unclaimed | Claimed

Design Decisions:
    - NewType for identifiers: zero runtime cost, full type-checker support
    - Frozen dataclasses for the claim sum type: pattern-matchable, hashable
    - str Enums: serialize to JSON without custom encoders
"""

import secrets
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import NewType, Union


# ─── Identity Types ──────────────────────────────────────────────

CardUid = NewType("CardUid", str)

UID_ALPHABET = (
    "useandom-26T198340PX75pxJACKVERYMINDBUSHWOLF_GQZbfghjklqvwyzrict"
)
UID_LENGTH = 10

MAX_BULK_CREATE = 200
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 500

UNKNOWN_EVENT_UID = "unknown"
DEFAULT_EVENT_KIND = "visit"


def new_card_uid(size: int = UID_LENGTH) -> CardUid:
    """Generate an opaque, URL-safe card identifier."""
    return CardUid("".join(secrets.choice(UID_ALPHABET) for _ in range(size)))


# ─── Enums ───────────────────────────────────────────────────────

class TokenPurpose(str, Enum):
    """What a signed credential authorizes."""
    CLAIM = "claim"
    OWNER = "owner"


# ─── Claim State ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Unclaimed:
    """Card has no owner yet."""


@dataclass(frozen=True)
class Claimed:
    """Card was claimed once, at `at`. `by_email` is informational only."""
    at: datetime
    by_email: str | None = None


ClaimState = Union[Unclaimed, Claimed]


def claim_state_of(
    claimed_at: datetime | None, claimed_by_email: str | None = None,
) -> ClaimState:
    """Derive claim state from the persisted claim timestamp."""
    if claimed_at is None:
        return Unclaimed()
    return Claimed(at=claimed_at, by_email=claimed_by_email)
