"""Results-page acquisition over HTTP with standardized error handling."""

import random
from typing import Optional

import requests

from .errors import AcquisitionFailure, AcquisitionTimeout, BlockedByChallenge
from .logger import get_logger
from .page import PageContent, parse_results_page
from .providers import SearchProvider

logger = get_logger()

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:122.0) Gecko/20100101 Firefox/122.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
)

CHALLENGE_MARKERS = ("captcha", "unusual traffic")
CHALLENGE_PATHS = ("/sorry/",)


def is_challenge_page(page: PageContent) -> bool:
    """
    True when the page is an anti-automation interstitial rather than results.

    Title and body text count only on pages without result blocks; a results
    page echoes the query in its title.
    """
    if page.has_captcha_element or any(path in page.url for path in CHALLENGE_PATHS):
        return True
    if page.results:
        return False
    text = f"{page.title} {page.text}".lower()
    return any(marker in text for marker in CHALLENGE_MARKERS)


class RequestsPageFetcher:
    """
    Fetch and parse provider results pages.

    A seeded ``random.Random`` picks the User-Agent for each request, keeping
    runs reproducible in tests.
    """

    def __init__(
        self,
        provider: SearchProvider,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        rng: Optional[random.Random] = None,
    ):
        self.provider = provider
        self.timeout = timeout
        self.session = session or requests.Session()
        self.rng = rng or random.Random()

    def _headers(self) -> dict:
        return {
            "User-Agent": self.rng.choice(USER_AGENTS),
            "Accept": "text/html,application/xhtml+xml",
            "Accept-Language": "en-US,en;q=0.9",
        }

    def fetch(self, url: str) -> PageContent:
        """Fetch a search URL and return its parsed content.

        Raises:
            AcquisitionTimeout: The request exceeded the timeout
            BlockedByChallenge: HTTP 429 or a captcha/interstitial page
            AcquisitionFailure: Any other HTTP or network error
        """
        name = self.provider.name
        logger.record_search_attempt(name)
        try:
            resp = self.session.get(url, headers=self._headers(), timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "HTTPError"
            logger.record_search_failure(name, f"HTTPError_{status}")
            if status == 429:
                logger.warning(f"{name.capitalize()} rate limited the search", url=url, status=429)
                raise BlockedByChallenge(f"{name.capitalize()} rate limited the search (429)", url=url)
            logger.error(f"{name.capitalize()} request failed", url=url, status=status)
            raise AcquisitionFailure(f"{name.capitalize()} request failed ({status})", url=url)
        except requests.exceptions.Timeout:
            logger.record_search_failure(name, "Timeout")
            logger.warning(f"{name.capitalize()} request timed out", url=url)
            raise AcquisitionTimeout(f"{name.capitalize()} request timed out after {self.timeout}s", url=url)
        except requests.exceptions.RequestException as e:
            logger.record_search_failure(name, "RequestException")
            logger.error(f"{name.capitalize()} request error", url=url, error=str(e))
            raise AcquisitionFailure(f"{name.capitalize()} request error: {e}", url=url)

        page = parse_results_page(resp.text, self.provider, base_url=resp.url or url)
        if is_challenge_page(page):
            logger.record_search_failure(name, "Challenge")
            logger.warning(f"{name.capitalize()} served a challenge page", url=url, title=page.title)
            raise BlockedByChallenge(f"{name.capitalize()} CAPTCHA detected. Please try again later.", url=url)

        logger.record_search_success(name)
        logger.debug(f"Fetched {name} results", url=url, title=page.title, links=len(page.links))
        return page
