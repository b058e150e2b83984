"""API Dependencies — FastAPI providers for codec, services, storage and admin guard.

Invariants:
    - One CredentialCodec per process, built from settings on first use (lru_cache)
    - Services are constructed per request around the request's DB session
    - Admin guard compares keys in constant time; an unset admin_key rejects everything
    - Bearer guard rejects a missing token before request bodies are validated

Design Decisions:
    - Providers over module globals: tests swap them via app.dependency_overrides
"""

import secrets
from functools import lru_cache

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from spex.config import get_settings
from spex.core.credentials import CredentialCodec
from spex.core.errors import AdminOnlyError, UnauthenticatedError
from spex.infrastructure.database import get_db
from spex.infrastructure.uploads import LocalUploadStore
from spex.services.card_claims import CardClaimService
from spex.services.card_store import CardStore
from spex.services.event_recorder import EventRecorder

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_codec() -> CredentialCodec:
    settings = get_settings()
    return CredentialCodec(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ownership_ttl=settings.ownership_ttl,
        claim_ttl=settings.claim_ttl,
    )


@lru_cache
def get_upload_store() -> LocalUploadStore:
    settings = get_settings()
    return LocalUploadStore(
        settings.upload_dir, settings.base_url, settings.upload_max_bytes,
    )


def get_card_service(
    db: AsyncSession = Depends(get_db),
    codec: CredentialCodec = Depends(get_codec),
) -> CardClaimService:
    return CardClaimService(CardStore(db), codec)


def get_card_store(db: AsyncSession = Depends(get_db)) -> CardStore:
    return CardStore(db)


def get_event_recorder(db: AsyncSession = Depends(get_db)) -> EventRecorder:
    return EventRecorder(db)


def bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Raw bearer token, or None when the header is absent or not Bearer."""
    return credentials.credentials if credentials else None


def require_admin(x_admin_key: str | None = Header(None)) -> None:
    admin_key = get_settings().admin_key
    if not admin_key or not x_admin_key or not secrets.compare_digest(
        x_admin_key.encode(), admin_key.encode(),
    ):
        raise AdminOnlyError()


def require_bearer(token: str | None = Depends(bearer_token)) -> str:
    """Bearer token, or UnauthenticatedError before the body is even looked at."""
    if not token:
        raise UnauthenticatedError()
    return token
