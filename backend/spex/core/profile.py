"""Profile Value Object — the fixed set of editable business-card fields.

Invariants:
    - All fields optional; None means "absent" (never an empty string)
    - Carries no claim metadata — claim fields cannot travel through edits
    - Immutable: constructed once at the boundary, read everywhere else

Design Decisions:
    - Frozen dataclass over dict: no untyped bags crossing the core boundary
    - Validation/sanitisation lives in schemas/card.py (Pydantic), not here
"""

from dataclasses import dataclass, field, fields

PROFILE_FIELDS = (
    "name", "company", "title", "phone", "mobile",
    "email", "email_public", "website", "address", "image_url",
)


@dataclass(frozen=True)
class Profile:
    """Editable business-card profile."""
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
    socials: dict[str, str] = field(default_factory=dict)

    @property
    def preferred_email(self) -> str | None:
        """Public-facing email wins over the private one."""
        return self.email_public or self.email

    def to_columns(self) -> dict:
        """Column values for a full profile overwrite."""
        return {f.name: getattr(self, f.name) for f in fields(self)} | {
            "socials": dict(self.socials),
        }


def profile_from_row(row) -> Profile:
    """Build a Profile from any object exposing the profile columns."""
    return Profile(
        **{name: getattr(row, name, None) for name in PROFILE_FIELDS},
        socials=dict(getattr(row, "socials", None) or {}),
    )
