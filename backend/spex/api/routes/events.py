"""Event Route — fire-and-forget analytics.

Invariants:
    - Always answers {"ok": true}; recording failures are the recorder's problem
    - Any JSON body is accepted: non-object payloads record an "unknown"/"visit" event
    - ua falls back to the User-Agent header; ip is the client address
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from spex.api.dependencies import get_event_recorder
from spex.core.repository_protocols import EventSink
from spex.schemas.card import EventIn

router = APIRouter(prefix="/api", tags=["events"])


@router.post("/event")
async def record_event(
    request: Request,
    payload: Any = Body(None),
    recorder: EventSink = Depends(get_event_recorder),
):
    body = EventIn.model_validate(payload) if isinstance(payload, dict) else EventIn()
    await recorder.record(
        uid=body.uid,
        kind=body.kind,
        ua=body.ua or request.headers.get("user-agent"),
        ip=request.client.host if request.client else None,
    )
    return {"ok": True}
