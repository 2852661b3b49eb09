"""
Identity verification for profile candidates.

Decides whether a profile identifier (or the caption shown next to it)
plausibly denotes the queried person. The decision is an ordered cascade of
pure rules; the first rule that applies decides the verdict.

Precedence:
    first_name_miss         reject  first name (or its 3-letter stem) absent
    single_name_exact       accept  bare-name query, candidate is that name only
    single_name_ambiguous   reject  bare-name query, anything else
    exact_surname           accept
    surname_initial         accept  e.g. "sam-s" for "Sam Schalkwijk"
    fuzzy_surname           accept  similarity > 0.8
    different_surname       reject  last part clearly another surname (< 0.3)
    core_surname            accept  match after dropping van/de/der/... prefixes
    employer_corroboration  accept  weak: employer stem appears in candidate
    insufficient_match      reject
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from urllib.parse import unquote

from .identity import Identity
from .logger import get_logger
from .models import ProfileCandidate, VerificationVerdict
from .normalize import (
    extract_profile_id,
    normalize,
    normalize_text,
    split_profile_id,
    strip_prefixes,
)
from .ranker import score_match
from .similarity import similarity

FUZZY_THRESHOLD = 0.8
DIFFERENT_THRESHOLD = 0.3
EMPLOYER_STEM = 5


@dataclass(frozen=True)
class MatchContext:
    first: str
    last: str
    query_tokens: Tuple[str, ...]
    parts: Tuple[str, ...]
    text: str
    employer: Optional[str]


@dataclass(frozen=True)
class Rule:
    reason: str
    accepts: bool
    applies: Callable[[MatchContext], bool]


def candidate_parts(candidate_text: str) -> List[str]:
    """Token parts of a URL, profile identifier or caption."""
    ident = unquote(extract_profile_id(candidate_text) or candidate_text)
    parts: List[str] = []
    for raw in split_profile_id(ident):
        parts.extend(normalize(raw))
    return parts


def _first_name_present(ctx: MatchContext) -> bool:
    stem = ctx.first[:3]
    return any(
        part == ctx.first or (len(ctx.first) > 2 and part.startswith(stem))
        for part in ctx.parts
    )


def _surname_initial(ctx: MatchContext) -> bool:
    return any(len(part) == 1 and part == ctx.last[0] for part in ctx.parts)


def _fuzzy_surname(ctx: MatchContext) -> bool:
    return any(similarity(part, ctx.last) > FUZZY_THRESHOLD for part in ctx.parts)


def _different_surname(ctx: MatchContext) -> bool:
    tail = ctx.parts[-1]
    return len(tail) > 2 and similarity(tail, ctx.last) < DIFFERENT_THRESHOLD


def _core_surname(ctx: MatchContext) -> bool:
    query_core = strip_prefixes(list(ctx.query_tokens))
    candidate_core = strip_prefixes(list(ctx.parts))
    if len(query_core) < 2 or not candidate_core:
        return False
    core = query_core[-1]
    return any(part == core or similarity(part, core) > FUZZY_THRESHOLD for part in candidate_core)


def _employer_corroborates(ctx: MatchContext) -> bool:
    if not ctx.employer:
        return False
    stem = normalize_text(ctx.employer)[:EMPLOYER_STEM].strip()
    return bool(stem) and stem in ctx.text


RULES: Tuple[Rule, ...] = (
    Rule("first_name_miss", False, lambda c: not _first_name_present(c)),
    Rule("single_name_exact", True, lambda c: not c.last and c.parts == (c.first,)),
    Rule("single_name_ambiguous", False, lambda c: not c.last),
    Rule("exact_surname", True, lambda c: c.last in c.parts),
    Rule("surname_initial", True, _surname_initial),
    Rule("fuzzy_surname", True, _fuzzy_surname),
    Rule("different_surname", False, _different_surname),
    Rule("core_surname", True, _core_surname),
    Rule("employer_corroboration", True, _employer_corroborates),
    Rule("insufficient_match", False, lambda c: True),
)


def _build_context(identity: Identity, candidate_text: str) -> MatchContext:
    parts = tuple(candidate_parts(candidate_text))
    return MatchContext(
        first=identity.first_name,
        last=identity.last_name,
        query_tokens=tuple(normalize(identity.display_name)),
        parts=parts,
        text=" ".join(parts),
        employer=identity.employer,
    )


def verify(
    identity: Identity,
    candidate_text: str,
    candidate: Optional[ProfileCandidate] = None,
) -> VerificationVerdict:
    """Run the rule cascade for one piece of candidate text."""
    ctx = _build_context(identity, candidate_text)
    if candidate is None:
        ident = extract_profile_id(candidate_text) or "-".join(ctx.parts) or "-"
        candidate = ProfileCandidate(raw_url=candidate_text, profile_id=ident)

    if not ctx.parts or not ctx.first:
        rule = RULES[0]
    else:
        rule = next(r for r in RULES if r.applies(ctx))

    score = score_match(identity, ctx.parts) if rule.accepts else None
    get_logger().debug(
        "Verification decision",
        query=identity.display_name,
        candidate=candidate_text,
        parts=list(ctx.parts),
        accepted=rule.accepts,
        reason=rule.reason,
    )
    return VerificationVerdict(
        candidate=candidate,
        accepted=rule.accepts,
        reason=rule.reason,
        match_score=score,
        tokens=ctx.parts,
    )


def verify_candidate(identity: Identity, candidate: ProfileCandidate) -> VerificationVerdict:
    """
    Verify a candidate by its profile identifier, falling back to its caption.

    An accepted caption verdict wins over a rejected identifier verdict.
    """
    verdict = verify(identity, candidate.profile_id, candidate)
    if verdict.accepted or not candidate.display_text:
        return verdict
    caption = verify(identity, candidate.display_text, candidate)
    return caption if caption.accepted else verdict
