"""
Queryable view of a search results page.

The extractor never touches raw markup; it works on the links, result
blocks and visible text collected here.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .providers import SearchProvider


@dataclass(frozen=True)
class Link:
    href: str
    text: str = ""


@dataclass(frozen=True)
class ResultBlock:
    cite_text: str = ""
    title_href: str = ""
    title_text: str = ""


@dataclass
class PageContent:
    url: str = ""
    title: str = ""
    links: List[Link] = field(default_factory=list)
    results: List[ResultBlock] = field(default_factory=list)
    text: str = ""
    has_captcha_element: bool = False


def parse_results_page(html: str, provider: SearchProvider, base_url: Optional[str] = None) -> PageContent:
    """Parse results-page HTML into a PageContent. Relative hrefs are resolved against base_url."""
    base = base_url or provider.search_base
    soup = BeautifulSoup(html, "html.parser")

    links = []
    for a in soup.find_all("a", href=True):
        links.append(Link(href=urljoin(base, a["href"]), text=a.get_text(" ", strip=True)))

    results = []
    for block in soup.select(provider.result_selector):
        cite = block.select_one(provider.cite_selector)
        title = block.select_one(provider.title_selector)
        results.append(ResultBlock(
            cite_text=cite.get_text(" ", strip=True) if cite else "",
            title_href=urljoin(base, title.get("href", "")) if title else "",
            title_text=title.get_text(" ", strip=True) if title else "",
        ))

    title_el = soup.find("title")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    body = soup.body or soup

    return PageContent(
        url=base,
        title=title_el.get_text(strip=True) if title_el else "",
        links=links,
        results=results,
        text=body.get_text(" ", strip=True),
        has_captcha_element=soup.find(id="captcha") is not None,
    )
