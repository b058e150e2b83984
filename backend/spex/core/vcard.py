"""vCard Renderer — pure Profile -> vCard 3.0 text.

Invariants:
    - Returns None when no identity field is populated (no boilerplate-only files)
    - Absent fields produce no line at all
    - Every value escapes backslash, comma, semicolon and line breaks
    - No physical line exceeds FOLD_WIDTH characters (CRLF + space continuation)
    - Pure: rendered on demand from current state, never cached

Design Decisions:
    - Name split: last whitespace token is the family name, everything before it
      is the given name; single-word names have an empty family name
    - Public email preferred over private email
    - image_url does not count as exportable content (it produces no line)
"""

import re

from spex.core.profile import Profile

FOLD_WIDTH = 70
CRLF = "\r\n"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def has_exportable_content(profile: Profile) -> bool:
    """True when at least one field would produce a contact line."""
    return any((
        profile.name, profile.company, profile.title,
        profile.phone, profile.mobile, profile.preferred_email,
        profile.website, profile.address,
    ))


def escape_text(value: str) -> str:
    """Escape a TEXT value per RFC 2426 §4."""
    value = value.replace("\\", "\\\\")
    value = value.replace(",", "\\,").replace(";", "\\;")
    return _LINE_BREAK.sub("\\\\n", value)


def fold_line(line: str, width: int = FOLD_WIDTH) -> str:
    """Soft-wrap a content line; continuation lines start with one space."""
    if len(line) <= width:
        return line
    chunks = [line[:width]]
    rest = line[width:]
    while rest:
        chunks.append(" " + rest[:width - 1])
        rest = rest[width - 1:]
    return CRLF.join(chunks)


def split_name(name: str) -> tuple[str, str]:
    """Return (first, last)."""
    parts = name.split()
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return " ".join(parts[:-1]), parts[-1]


def render_vcard(profile: Profile) -> str | None:
    """Render a vCard 3.0 document, or None when there is nothing to export."""
    if not has_exportable_content(profile):
        return None

    lines = ["BEGIN:VCARD", "VERSION:3.0"]

    name = (profile.name or "").strip()
    if name:
        first, last = split_name(name)
        lines.append(f"N:{escape_text(last)};{escape_text(first)};;;")
        lines.append(f"FN:{escape_text(name)}")

    optional = (
        ("ORG", profile.company),
        ("TITLE", profile.title),
        ("TEL;TYPE=CELL,VOICE", profile.mobile),
        ("TEL;TYPE=WORK,VOICE", profile.phone),
        ("EMAIL;TYPE=INTERNET", profile.preferred_email),
        ("URL", profile.website),
    )
    for prop, value in optional:
        if value:
            lines.append(f"{prop}:{escape_text(value)}")

    if profile.address:
        lines.append(f"ADR;TYPE=WORK:;;{escape_text(profile.address)};;;;")

    lines.append("END:VCARD")
    return CRLF.join(fold_line(line) for line in lines)
