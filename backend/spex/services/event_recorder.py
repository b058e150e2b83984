"""Event Recorder — best-effort append of scan/visit analytics.

Invariants:
    - record() never raises: analytics must not fail the user action that triggered it
    - Missing uid/kind fall back to sentinels ("unknown" / "visit")
    - Values are clipped to column widths before insert

Design Decisions:
    - Failures logged at warning and rolled back, then dropped (ADR: no retry,
      no dead-letter queue for analytics)
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from spex.core.domain_types import DEFAULT_EVENT_KIND, UNKNOWN_EVENT_UID
from spex.models.event import Event

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 64
MAX_UA_LENGTH = 512


class EventRecorder:
    """Append-only analytics sink over one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        uid: str | None,
        kind: str | None,
        ua: str | None = None,
        ip: str | None = None,
    ) -> None:
        event = Event(
            uid=(uid or UNKNOWN_EVENT_UID)[:MAX_KEY_LENGTH],
            kind=(kind or DEFAULT_EVENT_KIND)[:MAX_KEY_LENGTH],
            ua=ua[:MAX_UA_LENGTH] if ua else None,
            ip=ip[:MAX_KEY_LENGTH] if ip else None,
        )
        try:
            self.db.add(event)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning(
                f"Dropped analytics event: {e}",
                extra={"uid": event.uid, "kind": event.kind},
            )
