"""Claim state machine tests — CardClaimService against an in-memory store.

Invariants:
    - lookup: unknown -> NOT_FOUND, unclaimed -> fresh claim token, claimed -> profile
    - claim: missing params, token scoping, at-most-one winner, replay -> ALREADY_CLAIMED
    - edit: bearer required, ownership purpose required, uid scoping, claim fields untouched

Design Decisions:
    - FakeCardStore implements CardRepository with a dict; its CAS is trivially atomic
      on one event loop, which isolates the state machine from SQL concerns
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone

import pytest

from spex.core.credentials import CredentialCodec
from spex.core.domain_types import Claimed, Unclaimed, claim_state_of
from spex.core.errors import (
    AlreadyClaimedError, CardNotFoundError, ForbiddenError,
    InvalidCredentialError, MissingParamsError, UnauthenticatedError,
)
from spex.core.profile import Profile
from spex.infrastructure.observability import JSONFormatter
from spex.services.card_claims import CardClaimService

SECRET = "state-machine-secret"


@dataclass
class FakeCard:
    uid: str
    profile: Profile = field(default_factory=Profile)
    claimed_at: datetime | None = None
    claimed_by_email: str | None = None

    @property
    def claim_state(self):
        return claim_state_of(self.claimed_at, self.claimed_by_email)

    def to_profile(self) -> Profile:
        return self.profile


class FakeCardStore:
    def __init__(self, *uids: str):
        self.cards = {uid: FakeCard(uid) for uid in uids}
        self.updates = 0

    async def get(self, uid):
        return self.cards.get(uid)

    async def claim_if_unclaimed(self, uid, profile, claimed_by_email):
        await asyncio.sleep(0)  # let competing claimants interleave
        card = self.cards.get(uid)
        if card is None or card.claimed_at is not None:
            return False
        self.cards[uid] = replace(
            card, profile=profile,
            claimed_at=datetime.now(timezone.utc),
            claimed_by_email=claimed_by_email,
        )
        return True

    async def update_profile(self, uid, profile):
        card = self.cards.get(uid)
        if card is None:
            return False
        self.cards[uid] = replace(card, profile=profile)
        self.updates += 1
        return True


@pytest.fixture
def store():
    return FakeCardStore("card-a", "card-b")


@pytest.fixture
def codec():
    return CredentialCodec(SECRET)


@pytest.fixture
def service(store, codec):
    return CardClaimService(store, codec)


async def _claim(service, uid="card-a", profile=Profile(name="Ada"), email=None):
    token = (await service.lookup(uid)).claim_token
    return await service.claim(uid, token, profile, email)


# --- lookup ---------------------------------------------------------------------

async def test_lookup_unknown_card(service):
    with pytest.raises(CardNotFoundError):
        await service.lookup("nope")


async def test_lookup_unclaimed_returns_claim_token(service, codec):
    result = await service.lookup("card-a")
    assert result.claimed is False
    assert result.profile is None
    assert codec.verify_claim(result.claim_token, "card-a").uid == "card-a"


async def test_every_unclaimed_lookup_yields_a_working_token(service):
    first = (await service.lookup("card-a")).claim_token
    second = (await service.lookup("card-a")).claim_token
    # Either token can claim; possession does not arbitrate, the CAS does
    await service.claim("card-a", second, Profile(name="Second viewer"))
    with pytest.raises(AlreadyClaimedError):
        await service.claim("card-a", first, Profile(name="First viewer"))


async def test_lookup_claimed_returns_profile_without_token(service):
    await _claim(service, profile=Profile(name="Ada", company="Engines"))
    result = await service.lookup("card-a")
    assert result.claimed is True
    assert result.claim_token is None
    assert result.profile == Profile(name="Ada", company="Engines")


# --- claim ----------------------------------------------------------------------

@pytest.mark.parametrize("uid, token, missing", [
    (None, "t", ["uid"]),
    ("card-a", None, ["claimToken"]),
    ("", "", ["uid", "claimToken"]),
])
async def test_claim_missing_params(service, uid, token, missing):
    with pytest.raises(MissingParamsError) as exc:
        await service.claim(uid, token, Profile())
    assert exc.value.missing == missing


async def test_claim_success_mints_ownership_token(service, store, codec):
    result = await _claim(service, email="ada@example.com")
    assert result.uid == "card-a"
    payload = codec.verify_ownership(result.ownership_token)
    assert payload.uid == "card-a"
    assert store.cards["card-a"].claimed_by_email == "ada@example.com"
    assert isinstance(store.cards["card-a"].claim_state, Claimed)


async def test_claim_logged_with_masked_owner_email(service, caplog):
    with caplog.at_level(logging.INFO, logger="spex.services.card_claims"):
        await _claim(service, email="ada@example.com")
    [record] = [r for r in caplog.records if r.getMessage() == "Card card-a claimed"]
    assert record.uid == "card-a"
    formatted = JSONFormatter().format(record)
    assert "a***@example.com" in formatted
    assert "ada@example.com" not in formatted


async def test_claim_without_profile_stores_empty_profile(service, store):
    token = (await service.lookup("card-a")).claim_token
    await service.claim("card-a", token)
    assert store.cards["card-a"].profile == Profile()


async def test_claim_token_for_other_card_rejected(service, store):
    token_a = (await service.lookup("card-a")).claim_token
    with pytest.raises(InvalidCredentialError):
        await service.claim("card-b", token_a, Profile(name="Mallory"))
    assert store.cards["card-b"].claim_state == Unclaimed()


async def test_ownership_token_cannot_claim(service, codec):
    with pytest.raises(InvalidCredentialError):
        await service.claim("card-a", codec.issue_ownership_credential("card-a"), Profile())


async def test_forged_claim_token_rejected(service):
    forged = CredentialCodec("guessed").issue_claim_credential("card-a")
    with pytest.raises(InvalidCredentialError):
        await service.claim("card-a", forged, Profile())


async def test_replayed_claim_is_already_claimed(service, store, codec):
    token = codec.issue_claim_credential("card-a")
    await service.claim("card-a", token, Profile(name="Ada"))
    with pytest.raises(AlreadyClaimedError):
        await service.claim("card-a", token, Profile(name="Ada again"))
    assert store.cards["card-a"].profile == Profile(name="Ada")


async def test_claim_on_claimed_card_never_mutates(service, store, codec):
    await _claim(service, profile=Profile(name="Owner"), email="owner@example.com")
    snapshot = store.cards["card-a"]
    for i in range(3):
        with pytest.raises(AlreadyClaimedError):
            await service.claim(
                "card-a", codec.issue_claim_credential("card-a"),
                Profile(name=f"Intruder {i}"), "intruder@example.com",
            )
    assert store.cards["card-a"] == snapshot


async def test_claim_unknown_card_reports_already_claimed(service, codec):
    with pytest.raises(AlreadyClaimedError):
        await service.claim("missing", codec.issue_claim_credential("missing"), Profile())


async def test_concurrent_claims_one_winner(service, store, codec):
    async def attempt(i):
        return await service.claim(
            "card-a", codec.issue_claim_credential("card-a"), Profile(name=f"C{i}"),
        )

    results = await asyncio.gather(*(attempt(i) for i in range(10)), return_exceptions=True)

    winners = [r for r in results if not isinstance(r, Exception)]
    losers = [r for r in results if isinstance(r, Exception)]
    assert len(winners) == 1
    assert all(isinstance(e, AlreadyClaimedError) for e in losers)
    winner_index = results.index(winners[0])
    assert store.cards["card-a"].profile == Profile(name=f"C{winner_index}")


# --- edit_profile ---------------------------------------------------------------

async def test_edit_requires_token(service):
    with pytest.raises(UnauthenticatedError):
        await service.edit_profile("card-a", None, Profile())


async def test_edit_rejects_invalid_token(service):
    with pytest.raises(InvalidCredentialError):
        await service.edit_profile("card-a", "garbage", Profile())


async def test_edit_rejects_expired_token(service):
    stale = CredentialCodec(
        SECRET, clock=lambda: datetime.now(timezone.utc) - timedelta(days=91),
    ).issue_ownership_credential("card-a")
    with pytest.raises(InvalidCredentialError):
        await service.edit_profile("card-a", stale, Profile())


async def test_edit_rejects_claim_token_as_bearer(service, store):
    claim_token = (await service.lookup("card-a")).claim_token
    with pytest.raises(InvalidCredentialError):
        await service.edit_profile("card-a", claim_token, Profile(name="Mallory"))
    assert store.updates == 0


async def test_edit_other_card_forbidden(service, store):
    result = await _claim(service, uid="card-a")
    with pytest.raises(ForbiddenError):
        await service.edit_profile("card-b", result.ownership_token, Profile(name="x"))
    assert store.updates == 0


async def test_edit_preserves_claim_fields(service, store):
    result = await _claim(service, email="ada@example.com")
    claimed = store.cards["card-a"]

    await service.edit_profile("card-a", result.ownership_token, Profile(name="Ada L."))

    card = store.cards["card-a"]
    assert card.profile == Profile(name="Ada L.")
    assert card.claimed_at == claimed.claimed_at
    assert card.claimed_by_email == "ada@example.com"


async def test_edit_deleted_card_not_found(service, store):
    result = await _claim(service)
    del store.cards["card-a"]
    with pytest.raises(CardNotFoundError):
        await service.edit_profile("card-a", result.ownership_token, Profile())


# --- admin override & export ----------------------------------------------------

async def test_admin_update_unknown_card(service):
    with pytest.raises(CardNotFoundError):
        await service.admin_update_profile("nope", Profile())


async def test_admin_update_keeps_unclaimed(service, store):
    await service.admin_update_profile("card-a", Profile(company="Prefilled"))
    assert store.cards["card-a"].claim_state == Unclaimed()


async def test_export_unknown_card(service):
    with pytest.raises(CardNotFoundError):
        await service.export_contact_file("nope")


async def test_export_empty_card_is_none(service):
    assert await service.export_contact_file("card-a") is None


async def test_export_reflects_latest_edit(service):
    result = await _claim(service, profile=Profile(name="Ada Lovelace"))
    assert "FN:Ada Lovelace" in await service.export_contact_file("card-a")
    await service.edit_profile("card-a", result.ownership_token, Profile(name="Ada King"))
    vcf = await service.export_contact_file("card-a")
    assert "FN:Ada King" in vcf
    assert "Lovelace" not in vcf
