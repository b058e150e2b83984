"""Card Claims — the claim/ownership state machine.

Invariants:
    - claim: verify claim token (purpose + uid) -> conditional write -> mint ownership token
    - The conditional write is the linearization point; a lost race is
      AlreadyClaimedError and is never retried
    - Replaying a successful claim yields AlreadyClaimedError (state did change)
    - lookup never persists credentials: every unclaimed lookup mints a fresh,
      interchangeable claim token
    - edit_profile and admin_update_profile never touch claimed_at / claimed_by_email
    - Claim state comes from claimed_at only

Design Decisions:
    - Service depends on CardRepository protocol + CredentialCodec, not on the ORM
      session, so the state machine is testable against any store
    - An unknown uid on claim surfaces as AlreadyClaimedError: the conditional
      write cannot tell "missing" from "taken" without a second read, and a second
      read would reintroduce the race the CAS removes
"""

import logging
from dataclasses import dataclass

from spex.core.credentials import CredentialCodec
from spex.core.domain_types import Claimed, Unclaimed
from spex.core.errors import (
    AlreadyClaimedError,
    CardNotFoundError,
    ForbiddenError,
    MissingParamsError,
    UnauthenticatedError,
)
from spex.core.profile import Profile
from spex.core.repository_protocols import CardRepository
from spex.core.vcard import render_vcard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupResult:
    """Either a claim token (unclaimed) or the public profile (claimed)."""
    uid: str
    claimed: bool
    claim_token: str | None = None
    profile: Profile | None = None


@dataclass(frozen=True)
class ClaimResult:
    uid: str
    ownership_token: str


class CardClaimService:
    """Orchestrates lookup, claim and authenticated edits for one request."""

    def __init__(self, store: CardRepository, codec: CredentialCodec):
        self.store = store
        self.codec = codec

    async def lookup(self, uid: str) -> LookupResult:
        card = await self.store.get(uid)
        if card is None:
            raise CardNotFoundError(uid)

        match card.claim_state:
            case Unclaimed():
                return LookupResult(
                    uid=uid, claimed=False,
                    claim_token=self.codec.issue_claim_credential(uid),
                )
            case Claimed():
                return LookupResult(uid=uid, claimed=True, profile=card.to_profile())

    async def claim(
        self,
        uid: str | None,
        claim_token: str | None,
        profile: Profile | None = None,
        email_for_login: str | None = None,
    ) -> ClaimResult:
        missing = [
            name for name, value in (("uid", uid), ("claimToken", claim_token))
            if not value
        ]
        if missing:
            raise MissingParamsError(missing)

        self.codec.verify_claim(claim_token, uid)

        won = await self.store.claim_if_unclaimed(
            uid, profile or Profile(), email_for_login,
        )
        if not won:
            logger.info(f"Claim rejected, card {uid} already claimed", extra={"uid": uid})
            raise AlreadyClaimedError(uid)

        logger.info(
            f"Card {uid} claimed", extra={"uid": uid, "email": email_for_login},
        )
        return ClaimResult(
            uid=uid, ownership_token=self.codec.issue_ownership_credential(uid),
        )

    async def edit_profile(
        self, uid: str, ownership_token: str | None, profile: Profile,
    ) -> None:
        if not ownership_token:
            raise UnauthenticatedError()
        payload = self.codec.verify_ownership(ownership_token)
        if payload.uid != uid:
            logger.warning(
                f"Ownership token for {payload.uid} used on {uid}",
                extra={"uid": uid},
            )
            raise ForbiddenError()
        if not await self.store.update_profile(uid, profile):
            raise CardNotFoundError(uid)

    async def admin_update_profile(self, uid: str, profile: Profile) -> None:
        if not await self.store.update_profile(uid, profile):
            raise CardNotFoundError(uid)

    async def export_contact_file(self, uid: str) -> str | None:
        """vCard text, or None when there is nothing to export."""
        card = await self.store.get(uid)
        if card is None:
            raise CardNotFoundError(uid)
        return render_vcard(card.to_profile())
