"""Admin Routes — provisioning, listing and profile override.

Invariants:
    - Every route requires X-Admin-Key (require_admin dependency on the router)
    - Bulk create clamps count to 1..200; listing clamps take to 1..500
    - Profile override shares the owner-edit store path: claim fields untouched
"""

from fastapi import APIRouter, Depends, Query

from spex.api.dependencies import get_card_service, get_card_store, require_admin
from spex.core.domain_types import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from spex.schemas.admin import CardListResponse, CardSummary, CreateUidsRequest
from spex.schemas.card import ProfileUpdateRequest
from spex.services.card_claims import CardClaimService
from spex.services.card_store import CardStore

router = APIRouter(
    prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)],
)


@router.post("/create-uid")
async def create_uid(store: CardStore = Depends(get_card_store)):
    """Provision one blank card."""
    uids = await store.create(1)
    return {"uid": uids[0]}


@router.post("/create-uids")
async def create_uids(
    body: CreateUidsRequest | None = None,
    store: CardStore = Depends(get_card_store),
):
    """Provision up to 200 blank cards."""
    count = body.count if body else 1
    uids = await store.create(count)
    return {"ok": True, "rows": [{"uid": uid} for uid in uids]}


@router.get("/cards", response_model=CardListResponse)
async def list_cards(
    take: int = Query(DEFAULT_PAGE_SIZE),
    skip: int = Query(0),
    store: CardStore = Depends(get_card_store),
):
    """Newest first. Out-of-range paging values are clamped, not rejected."""
    take = min(max(take, 1), MAX_PAGE_SIZE)
    skip = max(skip, 0)
    rows, total = await store.list_cards(take, skip)
    return CardListResponse(
        total=total,
        rows=[CardSummary.from_card(card) for card in rows],
        take=take,
        skip=skip,
    )


@router.put("/cards/{uid}")
async def override_profile(
    uid: str,
    body: ProfileUpdateRequest,
    service: CardClaimService = Depends(get_card_service),
):
    """Replace a card's profile without touching its claim state."""
    await service.admin_update_profile(uid, body.profile.to_domain())
    return {"ok": True}
