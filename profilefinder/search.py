from typing import List

from .identity import Identity
from .providers import SearchProvider

PLATFORM_KEYWORD = "LinkedIn"


def build_query(identity: Identity, include_employer: bool = True) -> str:
    """
    Returns the search text for an identity: "<name> [<employer>] LinkedIn".
    No quotes and no site: operator; plain queries return more profile results.
    """
    employer = identity.employer if include_employer else None
    terms = [identity.display_name, employer or "", PLATFORM_KEYWORD]
    return " ".join(t for t in terms if t)


def build_query_urls(identity: Identity, providers: List[SearchProvider]) -> List[str]:
    """Search URLs for every provider and query variant, in fallback order."""
    urls: List[str] = []
    for provider in providers:
        for include_employer in (True, False):
            url = provider.search_url(build_query(identity, include_employer))
            if url not in urls:
                urls.append(url)
    return urls
