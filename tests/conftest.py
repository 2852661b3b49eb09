"""
Pytest configuration and shared fixtures.
"""

import os
import tempfile

# Keep log files out of the working tree; must run before profilefinder modules are imported.
os.environ.setdefault("PROFILEFINDER_LOG_DIR", tempfile.mkdtemp(prefix="profilefinder-logs-"))

import pytest
from datetime import date
from typing import Dict, List, Union

from profilefinder.identity import Identity
from profilefinder.page import PageContent, parse_results_page
from profilefinder.providers import BING, GOOGLE


# Bing click-tracking payloads: "a1" + urlsafe base64 of the target URL
SAM_REDIRECT = (
    "https://www.bing.com/ck/a?!&&p=4f1c2e9a&ptn=3&ver=2"
    "&u=a1aHR0cHM6Ly9ubC5saW5rZWRpbi5jb20vaW4vc2FtLXNjaGFsa3dpamstMjI2ODdiOTk&ntb=1"
)
CEES_REDIRECT = (
    "https://www.bing.com/ck/a?!&&p=77aa01&ptn=3"
    "&u=a1aHR0cHM6Ly93d3cubGlua2VkaW4uY29tL2luL2NlZXMtdmFuLWRlLWhhYXItYTgxMmJhMTk0&ntb=1"
)
OTHER_REDIRECT = "https://www.bing.com/ck/a?!&&p=12ab&u=a1aHR0cHM6Ly93d3cuZXhhbXBsZS5jb20vYWJvdXQ&ntb=1"


@pytest.fixture
def bing_results_html() -> str:
    """Bing results page: one redirect-wrapped match and one direct link to a different Sam."""
    return f"""
    <html>
    <head><title>Sam Schalkwijk Acme LinkedIn - Search</title></head>
    <body>
        <ol id="b_results">
            <li class="b_algo">
                <h2><a href="{SAM_REDIRECT}">Sam Schalkwijk - Software Engineer - Acme | LinkedIn</a></h2>
                <div class="b_attribution"><cite>nl.linkedin.com › in › sam-schalkwijk-22687b99</cite></div>
                <p>Sam Schalkwijk. Software Engineer at Acme. Amsterdam.</p>
            </li>
            <li class="b_algo">
                <h2><a href="https://www.linkedin.com/in/sam-stevens-44112233?trk=public">Sam Stevens - Product Lead | LinkedIn</a></h2>
                <div class="b_attribution"><cite>https://www.linkedin.com › in › sam-stevens-44112233</cite></div>
            </li>
            <li class="b_algo">
                <h2><a href="{OTHER_REDIRECT}">About Acme</a></h2>
                <div class="b_attribution"><cite>https://www.example.com › about</cite></div>
            </li>
        </ol>
    </body>
    </html>
    """


@pytest.fixture
def google_results_html() -> str:
    """Google results page with /url?q= redirect links."""
    return """
    <html>
    <head><title>Sam Schalkwijk Acme LinkedIn - Google Search</title></head>
    <body>
        <div id="search">
            <div class="g">
                <a href="/url?q=https://www.linkedin.com/in/sam-schalkwijk-22687b99&sa=U&ved=2ahUKE">
                    <h3>Sam Schalkwijk - Acme | LinkedIn</h3>
                </a>
                <cite>https://nl.linkedin.com › in › sam-schalkwijk-22687b99</cite>
            </div>
        </div>
    </body>
    </html>
    """


@pytest.fixture
def empty_results_html() -> str:
    return """
    <html><head><title>Nobody - Search</title></head>
    <body><ol id="b_results"><li class="b_no"><h1>There are no results for Nobody</h1></li></ol></body></html>
    """


@pytest.fixture
def bing_page(bing_results_html) -> PageContent:
    return parse_results_page(bing_results_html, BING, base_url="https://www.bing.com/search?q=sam")


@pytest.fixture
def google_page(google_results_html) -> PageContent:
    return parse_results_page(google_results_html, GOOGLE, base_url="https://www.google.com/search?q=sam")


@pytest.fixture
def sam() -> Identity:
    return Identity.create("Sam Schalkwijk", employer="Acme")


class FakeFetcher:
    """Page fetcher that replays canned pages or raises canned errors, keyed by call order."""

    def __init__(self, responses: List[Union[PageContent, Exception]]):
        self.responses = list(responses)
        self.calls: List[str] = []

    def fetch(self, url: str) -> PageContent:
        self.calls.append(url)
        response = self.responses.pop(0) if self.responses else PageContent(url=url)
        if isinstance(response, Exception):
            raise response
        return response


class FakeQuota:
    """Quota double recording reservations and completed results."""

    def __init__(self, allow: bool = True, limit: int = 500):
        self.allow = allow
        self.limit = limit
        self.count = 0
        self.recorded = []

    def check_and_reserve(self) -> bool:
        if self.allow:
            self.count += 1
        return self.allow

    def record(self, result):
        self.recorded.append(result)

    def snapshot(self) -> Dict[str, object]:
        return {"date": date.today().isoformat(), "count": self.count, "limit": self.limit}


@pytest.fixture
def fake_quota() -> FakeQuota:
    return FakeQuota()
