"""Credential Codec — signs and verifies claim/ownership bearer tokens.

Invariants:
    - Claim token payload: {uid, purpose="claim", iat} (+ exp only if a claim TTL is configured)
    - Ownership token payload: {uid, purpose="owner", iat, exp}
    - verify() fails uniformly with InvalidCredentialError (malformed, bad signature,
      expired and incomplete payloads all look the same to callers)
    - No IO, no state beyond the injected secret and clock

Design Decisions:
    - HS256 JWT via python-jose: opaque bearer strings, stateless verification
    - Secret injected at construction, never read from settings here
      (ADR: process-wide config loaded once at startup)
    - Ownership tokens carry purpose="owner" so a never-expiring claim token
      can't be replayed as an edit credential
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from jose import jwt, JWTError

from spex.core.domain_types import CardUid, TokenPurpose
from spex.core.errors import InvalidCredentialError

logger = logging.getLogger(__name__)

DEFAULT_OWNERSHIP_TTL = timedelta(days=90)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CredentialPayload:
    """Decoded, verified token contents."""
    uid: CardUid
    purpose: TokenPurpose
    expires_at: datetime | None = None


class CredentialCodec:
    """Issue and verify purpose-scoped tokens over a shared secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ownership_ttl: timedelta = DEFAULT_OWNERSHIP_TTL,
        claim_ttl: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ValueError("credential secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ownership_ttl = ownership_ttl
        self._claim_ttl = claim_ttl
        self._clock = clock

    # ─── Issue ───────────────────────────────────────────────────

    def issue_claim_credential(self, uid: str) -> str:
        """Mint a claim token. No expiry unless claim_ttl was configured."""
        return self._sign(uid, TokenPurpose.CLAIM, self._claim_ttl)

    def issue_ownership_credential(self, uid: str) -> str:
        """Mint an ownership token valid for ownership_ttl."""
        return self._sign(uid, TokenPurpose.OWNER, self._ownership_ttl)

    def _sign(self, uid: str, purpose: TokenPurpose, ttl: timedelta | None) -> str:
        now = self._clock()
        claims = {"uid": uid, "purpose": purpose.value, "iat": now}
        if ttl is not None:
            claims["exp"] = now + ttl
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    # ─── Verify ──────────────────────────────────────────────────

    def verify(self, token: str) -> CredentialPayload:
        """Check signature, format and freshness. Raises InvalidCredentialError."""
        if not isinstance(token, str) or not token:
            raise InvalidCredentialError()
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            logger.debug(f"Credential rejected: {e}")
            raise InvalidCredentialError()

        uid = claims.get("uid")
        if not isinstance(uid, str) or not uid:
            logger.debug("Credential rejected: missing uid")
            raise InvalidCredentialError()
        try:
            purpose = TokenPurpose(claims.get("purpose"))
        except ValueError:
            logger.debug("Credential rejected: unknown purpose")
            raise InvalidCredentialError()

        exp = claims.get("exp")
        expires_at = (
            datetime.fromtimestamp(exp, tz=timezone.utc)
            if isinstance(exp, (int, float)) else None
        )
        return CredentialPayload(uid=CardUid(uid), purpose=purpose, expires_at=expires_at)

    def verify_claim(self, token: str, uid: str) -> CredentialPayload:
        """Claim tokens are only good for the card they were minted for."""
        payload = self.verify(token)
        if payload.purpose is not TokenPurpose.CLAIM or payload.uid != uid:
            logger.debug(
                "Claim credential rejected: purpose or uid mismatch",
                extra={"uid": uid, "purpose": payload.purpose.value},
            )
            raise InvalidCredentialError()
        return payload

    def verify_ownership(self, token: str) -> CredentialPayload:
        """Ownership tokens only. Scope (uid) is checked by the caller."""
        payload = self.verify(token)
        if payload.purpose is not TokenPurpose.OWNER:
            logger.debug(
                "Ownership credential rejected: wrong purpose",
                extra={"uid": payload.uid, "purpose": payload.purpose.value},
            )
            raise InvalidCredentialError()
        return payload
