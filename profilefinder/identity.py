from dataclasses import dataclass, replace
from typing import Optional

from .normalize import LINGUISTIC_PREFIXES, normalize_text, split_name


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = " ".join(value.split())
    return cleaned or None


@dataclass(frozen=True)
class Identity:
    """The person being searched for. Immutable for one resolution attempt."""

    display_name: str
    employer: Optional[str] = None
    source_email: Optional[str] = None

    @classmethod
    def create(cls, name: str, employer: Optional[str] = None, email: Optional[str] = None) -> "Identity":
        return cls(
            display_name=_clean(name) or "",
            employer=_clean(employer),
            source_email=_clean(email),
        )

    @property
    def normalized_name(self) -> str:
        return normalize_text(self.display_name)

    @property
    def first_name(self) -> str:
        return split_name(self.normalized_name).first

    @property
    def last_name(self) -> str:
        return split_name(self.normalized_name).last


def _expand_prefix(segment: str) -> str:
    # vandehaar -> van de haar, vanderberg -> van der berg, devries -> de vries
    if segment.startswith("vande") and not segment.startswith("vander"):
        return "van de " + segment[5:]
    if segment.startswith("vander"):
        return "van der " + segment[6:]
    if segment.startswith("van"):
        return "van " + segment[3:]
    if segment.startswith("de"):
        return "de " + segment[2:]
    return segment


def name_from_email(email: str) -> Optional[str]:
    """
    Derive a display name from an email local part such as ``cees.vandehaar``.

    Returns None when the local part has no ``.`` separator. Compound Dutch
    prefixes are only expanded after the first segment, which is taken to be
    the given name.
    """
    local = email.lower().split("@")[0]
    if "." not in local:
        return None

    segments = [s for s in local.split(".") if s]
    if not segments:
        return None
    expanded = [segments[0]] + [_expand_prefix(s) for s in segments[1:]]

    words = " ".join(expanded).split()
    return " ".join(w if w in LINGUISTIC_PREFIXES else w.capitalize() for w in words)


def enhance_identity(identity: Identity) -> Identity:
    """
    Backfill a missing surname from the source email.

    Only applies when the display name is a single bare word. The derived
    name is used only if it still contains that word.
    """
    name = identity.display_name
    if not identity.source_email or not name or " " in name:
        return identity

    derived = name_from_email(identity.source_email)
    if derived and name.lower() in derived.lower():
        return replace(identity, display_name=derived)
    return identity
