"""
Relative query-fit scoring and winner selection.

Scores are coarse buckets (100/80/60/40). The best-scoring accepted verdict
wins; ties keep the first-seen verdict.
"""

from typing import Iterable, Optional, Sequence

from .identity import Identity
from .models import VerificationVerdict

EXACT = 100
ALL_PARTS = 80
INITIALS = 60
BASELINE = 40


def score_match(identity: Identity, tokens: Sequence[str]) -> int:
    candidate = "-".join(tokens)
    name = identity.display_name.lower()
    query_tokens = name.split()

    if candidate == "-".join(query_tokens):
        return EXACT
    if query_tokens and all(part in candidate for part in query_tokens):
        return ALL_PARTS
    if len(query_tokens) >= 2 and query_tokens[0] in candidate and query_tokens[-1][0] in candidate:
        return INITIALS
    return BASELINE


def rank(verdicts: Iterable[VerificationVerdict]) -> Optional[VerificationVerdict]:
    best: Optional[VerificationVerdict] = None
    for verdict in verdicts:
        if not verdict.accepted:
            continue
        score = verdict.match_score or 0
        if best is None or score > (best.match_score or 0):
            best = verdict
    return best
