import re
from typing import List, NamedTuple, Optional

CANONICAL_HOST = "www.linkedin.com"
CANONICAL_PREFIX = f"https://{CANONICAL_HOST}/in/"

LINGUISTIC_PREFIXES = frozenset({"van", "de", "der", "den", "von", "zu", "ter", "ten"})

_NON_NAME_CHARS = re.compile(r"[^a-z\s\-]")
_PROFILE_ID = re.compile(r"linkedin\.com/in/([^/?#&\s\"'<>]+)", re.IGNORECASE)
# Platform-assigned disambiguator, e.g. -a812ba194 or -22687b99
_ID_SUFFIX = re.compile(r"-[0-9a-f]{6,}$")


class NameParts(NamedTuple):
    first: str
    last: str


def normalize_text(text: str) -> str:
    cleaned = _NON_NAME_CHARS.sub("", (text or "").lower())
    return " ".join(cleaned.split())


def normalize(text: str) -> List[str]:
    return normalize_text(text).split()


def split_name(normalized: str) -> NameParts:
    parts = normalized.split()
    if not parts:
        return NameParts("", "")
    return NameParts(parts[0], parts[-1] if len(parts) > 1 else "")


def split_profile_id(identifier: str) -> List[str]:
    """Split a profile identifier like ``sam-schalkwijk-22687b99`` into name parts."""
    ident = _ID_SUFFIX.sub("", identifier.strip().lower().rstrip("/"))
    return [p for p in ident.split("-") if p]


def strip_prefixes(tokens: List[str]) -> List[str]:
    return [t for t in tokens if t not in LINGUISTIC_PREFIXES]


def extract_profile_id(text: str) -> Optional[str]:
    match = _PROFILE_ID.search(text or "")
    return match.group(1) if match else None


def canonicalize_profile_url(url: str) -> str:
    """
    Normalize a profile reference to ``https://www.linkedin.com/in/<id>/``.

    Accepts full URLs, scheme-less URLs and bare identifiers. Canonicalizing
    an already canonical URL returns it unchanged.
    """
    u = re.split(r"[?#]", url.strip(), maxsplit=1)[0]
    if "/" not in u and "." not in u:
        u = CANONICAL_PREFIX + u
    if not re.match(r"^https?://", u, re.IGNORECASE):
        u = "https://" + u.lstrip("/")
    u = re.sub(r"^https?://", "https://", u, flags=re.IGNORECASE)
    # Typo'd hosts like wwww.linkedin.com
    u = re.sub(r"^https://w+\.", "https://www.", u, flags=re.IGNORECASE)
    # Country subdomains (nl.linkedin.com) and the bare host
    u = re.sub(
        r"^https://(?:[a-z]{2}\.|www\.)?linkedin\.com",
        f"https://{CANONICAL_HOST}",
        u,
        flags=re.IGNORECASE,
    )
    return u.rstrip("/") + "/"
