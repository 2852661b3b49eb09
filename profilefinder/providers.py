"""Search provider definitions: URL templates, redirect endpoints and result-page selectors."""

from dataclasses import dataclass
from typing import Dict, Tuple
from urllib.parse import quote_plus


@dataclass(frozen=True)
class SearchProvider:
    name: str
    search_base: str
    redirect_markers: Tuple[str, ...]
    result_selector: str
    cite_selector: str
    title_selector: str

    def search_url(self, query: str) -> str:
        return self.search_base + quote_plus(query)

    def is_redirect(self, href: str) -> bool:
        return any(marker in href for marker in self.redirect_markers)


BING = SearchProvider(
    name="bing",
    search_base="https://www.bing.com/search?q=",
    redirect_markers=("bing.com/ck/",),
    result_selector="li.b_algo",
    cite_selector="cite",
    title_selector="h2 a",
)

GOOGLE = SearchProvider(
    name="google",
    search_base="https://www.google.com/search?q=",
    redirect_markers=("google.com/url",),
    result_selector="div.g",
    cite_selector="cite",
    title_selector="a:has(h3)",
)

PROVIDERS: Dict[str, SearchProvider] = {p.name: p for p in (BING, GOOGLE)}


def get_provider(name: str) -> SearchProvider:
    try:
        return PROVIDERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown search provider: {name}. Use one of: {', '.join(PROVIDERS)}")
