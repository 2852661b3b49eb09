"""
Tests for candidate extraction from results pages.
"""

from profilefinder.extractor import (
    PRIMARY_STRATEGIES,
    decode_redirect,
    decode_redirects,
    extract,
    guess_patterns,
    merge_candidates,
    scan_citations,
    scan_direct_links,
    scan_page_text,
)
from profilefinder.models import ProfileCandidate, Provenance
from profilefinder.page import Link, PageContent
from profilefinder.providers import BING, GOOGLE

SAM_REDIRECT = (
    "https://www.bing.com/ck/a?!&&p=4f1c2e9a&ptn=3&ver=2"
    "&u=a1aHR0cHM6Ly9ubC5saW5rZWRpbi5jb20vaW4vc2FtLXNjaGFsa3dpamstMjI2ODdiOTk&ntb=1"
)


def _summary(candidates):
    return [(c.profile_id, c.provenance) for c in candidates]


class TestDecodeRedirect:
    """Test redirect and click-tracking decoding."""

    def test_base64_payload(self):
        assert decode_redirect(SAM_REDIRECT) == "https://www.linkedin.com/in/sam-schalkwijk-22687b99"

    def test_percent_encoded_parameter(self):
        href = "https://www.bing.com/ck/a?u=https%3A%2F%2Fnl.linkedin.com%2Fin%2Fjan-de-vries&ntb=1"
        assert decode_redirect(href) == "https://www.linkedin.com/in/jan-de-vries"

    def test_percent_encoded_path(self):
        href = "https://r.example.com/redirect/https%3A%2F%2Fwww.linkedin.com%2Fin%2Fjan-de-vries"
        assert decode_redirect(href) == "https://www.linkedin.com/in/jan-de-vries"

    def test_google_url_parameter(self):
        href = "https://www.google.com/url?q=https://www.linkedin.com/in/sam-schalkwijk-22687b99&sa=U"
        assert decode_redirect(href) == "https://www.linkedin.com/in/sam-schalkwijk-22687b99"

    def test_non_profile_target(self):
        href = "https://www.bing.com/ck/a?!&&p=12ab&u=a1aHR0cHM6Ly93d3cuZXhhbXBsZS5jb20vYWJvdXQ&ntb=1"
        assert decode_redirect(href) is None

    def test_invalid_base64_is_swallowed(self):
        assert decode_redirect("https://www.bing.com/ck/a?u=a1%%%notbase64") is None

    def test_non_utf8_payload_is_swallowed(self):
        assert decode_redirect("https://www.bing.com/ck/a?u=a1____") is None


class TestStrategies:
    """Test each extraction strategy on its own."""

    def test_direct_links(self, bing_page):
        candidates = scan_direct_links(bing_page, BING)
        assert _summary(candidates) == [("sam-stevens-44112233", Provenance.DIRECT_LINK)]
        assert candidates[0].display_text == "Sam Stevens - Product Lead | LinkedIn"

    def test_direct_link_id_stops_at_markup(self):
        page = PageContent(links=[Link('https://www.linkedin.com/in/sam-smith-0a1b2c3d"><b>', "Sam Smith | LinkedIn")])
        assert _summary(scan_direct_links(page, BING)) == [("sam-smith-0a1b2c3d", Provenance.DIRECT_LINK)]

    def test_direct_link_with_quoted_id_is_skipped(self):
        page = PageContent(links=[Link("https://www.linkedin.com/in/'sam-smith", "Sam Smith | LinkedIn")])
        assert scan_direct_links(page, BING) == []
        assert extract(page, BING) == []

    def test_redirects(self, bing_page):
        candidates = decode_redirects(bing_page, BING)
        assert _summary(candidates) == [("sam-schalkwijk-22687b99", Provenance.REDIRECT_DECODED)]
        assert candidates[0].raw_url == "https://www.linkedin.com/in/sam-schalkwijk-22687b99"

    def test_redirects_only_for_provider_endpoint(self, bing_page):
        # Bing click-tracking links are not Google redirects
        assert decode_redirects(bing_page, GOOGLE) == []

    def test_citations(self, bing_page):
        candidates = scan_citations(bing_page, BING)
        assert _summary(candidates) == [
            ("sam-schalkwijk-22687b99", Provenance.CITE_TEXT),
            ("sam-stevens-44112233", Provenance.CITE_TEXT),
        ]
        assert candidates[0].display_text == "Sam Schalkwijk - Software Engineer - Acme | LinkedIn"

    def test_pattern_guess_from_href(self):
        page = PageContent(links=[
            Link("https://example.com/profile?x=jan-de-vries-1a2b3c4d", "Jan de Vries - LinkedIn"),
        ])
        assert _summary(guess_patterns(page, BING)) == [("jan-de-vries-1a2b3c4d", Provenance.PATTERN_GUESS)]

    def test_pattern_guess_requires_platform_mention(self):
        page = PageContent(links=[Link("https://example.com/in/jan-de-vries", "Jan de Vries")])
        assert guess_patterns(page, BING) == []

    def test_page_text_scan(self):
        page = PageContent(text="Jan de Vries nl.linkedin.com › in › jan-de-vries-1a2b3c Amsterdam")
        assert _summary(scan_page_text(page, BING)) == [("jan-de-vries-1a2b3c", Provenance.PAGE_TEXT_SCAN)]


class TestExtract:
    """Test the merged extraction pipeline."""

    def test_bing_results(self, bing_page):
        candidates = extract(bing_page, BING)
        assert _summary(candidates) == [
            ("sam-stevens-44112233", Provenance.DIRECT_LINK),
            ("sam-schalkwijk-22687b99", Provenance.REDIRECT_DECODED),
        ]

    def test_google_results(self, google_page):
        candidates = extract(google_page, GOOGLE)
        assert _summary(candidates) == [("sam-schalkwijk-22687b99", Provenance.REDIRECT_DECODED)]

    def test_order_independent(self, bing_page):
        forward = extract(bing_page, BING, strategies=list(PRIMARY_STRATEGIES))
        backward = extract(bing_page, BING, strategies=list(reversed(PRIMARY_STRATEGIES)))
        assert {(c.key, c.provenance) for c in forward} == {(c.key, c.provenance) for c in backward}

    def test_pattern_guess_never_overrides_direct_link(self, bing_page):
        candidates = extract(bing_page, BING, strategies=[guess_patterns, scan_direct_links])
        assert _summary(candidates) == [("sam-stevens-44112233", Provenance.DIRECT_LINK)]

    def test_stop_early(self, bing_page):
        candidates = extract(bing_page, BING, stop_early=True)
        assert _summary(candidates) == [("sam-stevens-44112233", Provenance.DIRECT_LINK)]

    def test_page_text_scan_is_fallback_only(self):
        page = PageContent(
            links=[Link("https://www.linkedin.com/in/jan-de-vries", "Jan de Vries")],
            text="Also see linkedin.com/in/piet-jansen-99aa11",
        )
        assert _summary(extract(page, BING)) == [("jan-de-vries", Provenance.DIRECT_LINK)]

    def test_page_text_scan_when_nothing_else(self):
        page = PageContent(
            text="nl.linkedin.com › in › jan-de-vries-1a2b3c and linkedin.com/in/JAN-DE-VRIES-1a2b3c",
        )
        candidates = extract(page, BING)
        assert _summary(candidates) == [("jan-de-vries-1a2b3c", Provenance.PAGE_TEXT_SCAN)]

    def test_empty_page(self):
        assert extract(PageContent(url="https://www.bing.com/search?q=x"), BING) == []


class TestMergeCandidates:
    """Test deduplication by profile key."""

    def test_keeps_position_and_best_provenance(self):
        guess = ProfileCandidate("https://www.linkedin.com/in/jan", "jan", provenance=Provenance.PATTERN_GUESS)
        other = ProfileCandidate("https://www.linkedin.com/in/piet", "piet", provenance=Provenance.CITE_TEXT)
        direct = ProfileCandidate("https://www.linkedin.com/in/Jan/", "Jan", provenance=Provenance.DIRECT_LINK)

        merged = merge_candidates([guess, other, direct])

        assert merged == [direct, other]

    def test_first_seen_kept_on_equal_provenance(self):
        first = ProfileCandidate("https://www.linkedin.com/in/jan", "jan", display_text="first")
        second = ProfileCandidate("https://nl.linkedin.com/in/jan", "jan", display_text="second")
        assert merge_candidates([first, second]) == [first]

    def test_percent_encoded_duplicates(self):
        plain = ProfileCandidate("https://www.linkedin.com/in/jos%C3%A9", "jos%C3%A9")
        decoded = ProfileCandidate("https://www.linkedin.com/in/josé", "josé")
        assert len(merge_candidates([plain, decoded])) == 1
