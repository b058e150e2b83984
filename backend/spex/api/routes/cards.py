"""Card Routes — public lookup, claim, owner edit and vCard export.

Invariants:
    - Routes never contain business logic (delegate to CardClaimService)
    - GET /{uid}.vcf is registered before GET /{uid} so the suffix wins
    - vCard export returns 204 (not 404) when the card exists but has nothing to share
    - Ownership token arrives as a Bearer credential; claim token in the JSON body
    - A missing bearer is 401 before the edit body is validated
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from spex.api.dependencies import get_card_service, require_bearer
from spex.schemas.card import (
    ClaimRequest, ClaimResponse, ProfileOut, ProfileUpdateRequest,
)
from spex.services.card_claims import CardClaimService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/card", tags=["cards"])


@router.get("/{uid}.vcf")
async def export_vcard(
    uid: str, service: CardClaimService = Depends(get_card_service),
):
    """Download the card as a vCard, or 204 when the profile is empty."""
    vcf = await service.export_contact_file(uid)
    if vcf is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return Response(
        content=vcf,
        media_type="text/vcard; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{uid}.vcf"'},
    )


@router.get("/{uid}")
async def get_card(
    uid: str, service: CardClaimService = Depends(get_card_service),
):
    """Unclaimed: fresh claim token. Claimed: public profile."""
    result = await service.lookup(uid)
    if not result.claimed:
        return {"uid": result.uid, "claimed": False, "claimToken": result.claim_token}
    return {
        "uid": result.uid,
        "claimed": True,
        "profile": ProfileOut.from_domain(result.profile).model_dump(by_alias=True),
    }


@router.post("/claim", response_model=ClaimResponse)
async def claim_card(
    body: ClaimRequest, service: CardClaimService = Depends(get_card_service),
):
    """First valid claim wins; everyone after gets 409."""
    result = await service.claim(
        body.uid,
        body.claim_token,
        body.profile.to_domain() if body.profile else None,
        body.email_for_login,
    )
    return ClaimResponse(uid=result.uid, ownership_token=result.ownership_token)


@router.put("/{uid}")
async def update_card(
    uid: str,
    body: ProfileUpdateRequest,
    token: str = Depends(require_bearer),
    service: CardClaimService = Depends(get_card_service),
):
    """Owner edit. Claim metadata is never touched."""
    await service.edit_profile(uid, token, body.profile.to_domain())
    return {"ok": True}
