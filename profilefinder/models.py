"""
Data model for a single resolution request.

Everything here is created fresh per request and discarded afterwards.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

from .identity import Identity
from .normalize import CANONICAL_PREFIX

_PROFILE_URL = re.compile(r"https?://[^/\s?#]*linkedin\.com/in/[^/?#&\s]+", re.IGNORECASE)


class Provenance(Enum):
    """Extraction strategy that produced a candidate, highest precedence first."""

    DIRECT_LINK = "DirectLink"
    REDIRECT_DECODED = "RedirectDecoded"
    CITE_TEXT = "CiteText"
    PATTERN_GUESS = "PatternGuess"
    PAGE_TEXT_SCAN = "PageTextScan"

    @property
    def rank(self) -> int:
        return list(Provenance).index(self)

    def outranks(self, other: "Provenance") -> bool:
        return self.rank < other.rank


@dataclass(frozen=True)
class ProfileCandidate:
    raw_url: str
    profile_id: str
    display_text: str = ""
    provenance: Provenance = Provenance.DIRECT_LINK

    def __post_init__(self):
        if not self.profile_id or any(c in self.profile_id for c in "?#"):
            raise ValueError(f"Invalid profile id: {self.profile_id!r}")

    @property
    def key(self) -> str:
        """Dedup key: two candidates with the same key denote the same profile."""
        return unquote(self.profile_id).lower().rstrip("/")

    @property
    def profile_url(self) -> str:
        match = _PROFILE_URL.search(self.raw_url)
        if match:
            return match.group(0)
        return CANONICAL_PREFIX + self.profile_id


@dataclass(frozen=True)
class VerificationVerdict:
    candidate: ProfileCandidate
    accepted: bool
    reason: str
    match_score: Optional[int] = None
    tokens: tuple = ()


@dataclass
class StepAttempt:
    step: str
    provider: str
    query: str
    outcome: str
    candidate_count: int = 0
    accepted_count: int = 0
    provenance: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "provider": self.provider,
            "query": self.query,
            "outcome": self.outcome,
            "candidateCount": self.candidate_count,
            "acceptedCount": self.accepted_count,
            "provenance": self.provenance,
            "error": self.error,
        }


ACQUISITION_OUTCOMES = {"timeout", "failure"}


@dataclass
class ResolutionResult:
    identity: Identity
    winner: Optional[ProfileCandidate] = None
    canonical_url: Optional[str] = None
    verdict: Optional[VerificationVerdict] = None
    attempts_log: List[StepAttempt] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.winner is not None

    @property
    def reason(self) -> Optional[str]:
        """Diagnostic reason for a miss; None when a winner was found."""
        if self.found:
            return None
        outcomes = [a.outcome for a in self.attempts_log]
        if outcomes and all(o in ACQUISITION_OUTCOMES for o in outcomes):
            return "acquisition_failed"
        if "no_verified_candidate" in outcomes:
            return "no_verified_candidate"
        return "no_candidates"

    def to_dict(self, contact_id: Optional[str] = None, scraped_at: Optional[datetime] = None) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.found,
            "name": self.identity.display_name,
            "contactId": contact_id,
            "scrapedAt": (scraped_at or datetime.now()).isoformat(),
        }
        if self.found:
            data["profileUrl"] = self.canonical_url
        else:
            data["error"] = "No verified LinkedIn profile found"
            data["reason"] = self.reason
        return data
