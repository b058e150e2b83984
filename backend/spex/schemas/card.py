"""Card Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - JSON keys are camelCase on the wire (imageUrl, claimToken, ...); snake_case accepted too
    - Every profile string is stripped; blank strings become None
    - Profile payloads are converted to the core Profile value object before reaching services
    - socials keys are lower-cased, empty entries dropped, at most MAX_SOCIALS entries

Design Decisions:
    - claim fields (uid, claimToken) are optional here: their absence is reported as
      MISSING_PARAMS by the service, not as a generic validation error
    - Light email shape check instead of EmailStr: legacy cards hold free-form values
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from spex.core.profile import Profile

MAX_SOCIALS = 20
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+$")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _strip_or_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class ProfileIn(CamelModel):
    """Editable profile fields, sanitized."""
    name: str | None = Field(None, max_length=200)
    company: str | None = Field(None, max_length=200)
    title: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=50)
    mobile: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=320)
    email_public: str | None = Field(None, max_length=320)
    website: str | None = Field(None, max_length=2048)
    address: str | None = Field(None, max_length=500)
    image_url: str | None = Field(None, max_length=2048)
    socials: dict[str, str] = Field(default_factory=dict)

    @field_validator(
        "name", "company", "title", "phone", "mobile", "email",
        "email_public", "website", "address", "image_url",
        mode="before",
    )
    @classmethod
    def strip_blank(cls, v):
        return _strip_or_none(v)

    @field_validator("email", "email_public")
    @classmethod
    def check_email_shape(cls, v: str | None) -> str | None:
        if v is not None and not _EMAIL.match(v):
            raise ValueError("not an email address")
        return v

    @field_validator("socials", mode="before")
    @classmethod
    def socials_default(cls, v):
        return {} if v is None else v

    @field_validator("socials")
    @classmethod
    def clean_socials(cls, v: dict[str, str]) -> dict[str, str]:
        cleaned = {}
        for key, value in v.items():
            key, value = key.strip().lower(), value.strip()
            if not key or not value:
                continue
            if len(key) > 32 or len(value) > 512:
                raise ValueError(f"social entry '{key[:32]}' too long")
            cleaned[key] = value
        if len(cleaned) > MAX_SOCIALS:
            raise ValueError(f"at most {MAX_SOCIALS} social links")
        return cleaned

    def to_domain(self) -> Profile:
        return Profile(**self.model_dump())


class ProfileOut(CamelModel):
    """Public profile view for claimed cards."""
    name: str | None = None
    company: str | None = None
    title: str | None = None
    phone: str | None = None
    mobile: str | None = None
    email: str | None = None
    email_public: str | None = None
    website: str | None = None
    address: str | None = None
    image_url: str | None = None
    socials: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, profile: Profile) -> "ProfileOut":
        return cls(**profile.to_columns())


class ClaimRequest(CamelModel):
    uid: str | None = None
    claim_token: str | None = None
    profile: ProfileIn | None = None
    email_for_login: str | None = Field(None, max_length=320)

    @field_validator("uid", "claim_token", "email_for_login", mode="before")
    @classmethod
    def strip_blank(cls, v):
        return _strip_or_none(v)


class ClaimResponse(CamelModel):
    uid: str
    ownership_token: str


class ProfileUpdateRequest(CamelModel):
    profile: ProfileIn = Field(default_factory=ProfileIn)

    @field_validator("profile", mode="before")
    @classmethod
    def profile_default(cls, v):
        return {} if v is None else v


class EventIn(CamelModel):
    """Analytics payload. Lenient: scalars are stringified, never rejected."""
    uid: str | None = None
    kind: str | None = None
    ua: str | None = None

    @field_validator("uid", "kind", "ua", mode="before")
    @classmethod
    def stringify(cls, v):
        if v is not None and not isinstance(v, str):
            v = str(v)
        return _strip_or_none(v)
