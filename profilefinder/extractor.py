"""
Candidate extraction from search results pages.

Each strategy is an independent function ``(page, provider) -> candidates``.
Their outputs are unioned and deduplicated by profile key. On a duplicate,
the higher-precedence provenance survives, so the result does not depend on
the order strategies run in and a low-precision guess never replaces a
direct link.
"""

import base64
import re
from typing import Callable, Dict, Iterable, List, Optional, Sequence
from urllib.parse import parse_qsl, unquote, urlsplit

from .logger import get_logger
from .models import ProfileCandidate, Provenance
from .normalize import extract_profile_id
from .page import PageContent
from .providers import SearchProvider

Strategy = Callable[[PageContent, SearchProvider], List[ProfileCandidate]]

PLATFORM_NAME = "linkedin"

_DIRECT_LINK = re.compile(r"^https?://(?:[\w-]+\.)*linkedin\.com/in/([^/?#&\s\"'<>]+)", re.IGNORECASE)
_TEXT_PROFILE = re.compile(r"linkedin\.com/in/([\w%-]+)", re.IGNORECASE)
_BREADCRUMB = re.compile(r"\s*›\s*")
_GUESS_PATTERNS = (
    re.compile(r"/in/([\w%-]+)", re.IGNORECASE),
    # name parts followed by a numeric/hex disambiguator, e.g. sam-schalkwijk-22687b99
    re.compile(r"\b([a-z]{2,}(?:-[a-z]{2,})+-[0-9a-f]*\d[0-9a-f]*)\b", re.IGNORECASE),
)


def _profile_url(profile_id: str) -> str:
    return f"https://www.linkedin.com/in/{profile_id}"


def _decode_base64(value: str) -> Optional[str]:
    # Bing click-tracking: u=a1<base64 of the target URL>
    if not value.startswith("a1"):
        return None
    payload = value[2:]
    try:
        return base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)).decode("utf-8")
    except ValueError:
        return None


def decode_redirect(href: str) -> Optional[str]:
    """Return the profile URL embedded in a redirect/click-tracking href, if any."""
    for _, value in parse_qsl(urlsplit(href).query):
        for decoded in (value, _decode_base64(value)):
            if decoded:
                match = _TEXT_PROFILE.search(decoded)
                if match:
                    return _profile_url(match.group(1))

    match = _TEXT_PROFILE.search(unquote(href))
    if match:
        return _profile_url(match.group(1))
    return None


def scan_direct_links(page: PageContent, provider: SearchProvider) -> List[ProfileCandidate]:
    candidates = []
    for link in page.links:
        match = _DIRECT_LINK.match(link.href)
        if match:
            candidates.append(ProfileCandidate(
                raw_url=link.href,
                profile_id=match.group(1),
                display_text=link.text,
                provenance=Provenance.DIRECT_LINK,
            ))
    return candidates


def decode_redirects(page: PageContent, provider: SearchProvider) -> List[ProfileCandidate]:
    candidates = []
    for link in page.links:
        if not provider.is_redirect(link.href):
            continue
        url = decode_redirect(link.href)
        if url:
            candidates.append(ProfileCandidate(
                raw_url=url,
                profile_id=extract_profile_id(url),
                display_text=link.text,
                provenance=Provenance.REDIRECT_DECODED,
            ))
    return candidates


def scan_citations(page: PageContent, provider: SearchProvider) -> List[ProfileCandidate]:
    candidates = []
    for result in page.results:
        cite = _BREADCRUMB.sub("/", result.cite_text)
        match = _TEXT_PROFILE.search(cite)
        if match:
            candidates.append(ProfileCandidate(
                raw_url=_profile_url(match.group(1)),
                profile_id=match.group(1),
                display_text=result.title_text,
                provenance=Provenance.CITE_TEXT,
            ))
    return candidates


def guess_patterns(page: PageContent, provider: SearchProvider) -> List[ProfileCandidate]:
    candidates = []
    for link in page.links:
        if PLATFORM_NAME not in link.text.lower():
            continue
        sources = (unquote(link.href), link.text)
        for pattern in _GUESS_PATTERNS:
            match = next((m for m in (pattern.search(s) for s in sources) if m), None)
            if match:
                candidates.append(ProfileCandidate(
                    raw_url=_profile_url(match.group(1)),
                    profile_id=match.group(1),
                    display_text=link.text,
                    provenance=Provenance.PATTERN_GUESS,
                ))
                break
    return candidates


def scan_page_text(page: PageContent, provider: SearchProvider) -> List[ProfileCandidate]:
    return [
        ProfileCandidate(
            raw_url=_profile_url(match.group(1)),
            profile_id=match.group(1),
            provenance=Provenance.PAGE_TEXT_SCAN,
        )
        for match in _TEXT_PROFILE.finditer(_BREADCRUMB.sub("/", page.text))
    ]


PRIMARY_STRATEGIES: Sequence[Strategy] = (
    scan_direct_links,
    decode_redirects,
    scan_citations,
    guess_patterns,
)
FALLBACK_STRATEGY: Strategy = scan_page_text


def merge_candidates(candidates: Iterable[ProfileCandidate]) -> List[ProfileCandidate]:
    """Deduplicate by key, keeping first-seen position and the best provenance."""
    merged: Dict[str, ProfileCandidate] = {}
    for candidate in candidates:
        existing = merged.get(candidate.key)
        if existing is None or candidate.provenance.outranks(existing.provenance):
            merged[candidate.key] = candidate
    return list(merged.values())


def extract(
    page: PageContent,
    provider: SearchProvider,
    strategies: Optional[Sequence[Strategy]] = None,
    stop_early: bool = False,
) -> List[ProfileCandidate]:
    """
    Extract profile candidates from a results page.

    Args:
        page: Parsed results page
        provider: Provider that produced the page (redirect endpoint, selectors)
        strategies: Primary strategies to run (default: all, in precedence order)
        stop_early: Skip remaining primary strategies once one yields candidates

    Returns:
        Deduplicated candidates. The full-page text scan only runs when no
        primary strategy found anything.
    """
    logger = get_logger()
    found: List[ProfileCandidate] = []
    for strategy in strategies or PRIMARY_STRATEGIES:
        results = strategy(page, provider)
        logger.debug(f"Strategy {strategy.__name__} found {len(results)} candidates", provider=provider.name)
        found.extend(results)
        if stop_early and found:
            break

    if not found:
        found = FALLBACK_STRATEGY(page, provider)
        logger.debug(f"Page text scan found {len(found)} candidates", provider=provider.name)

    return merge_candidates(found)
