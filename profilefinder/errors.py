"""
Error taxonomy for profile resolution.

Misses (no candidates, nothing verified) are not errors; they are reported
through ``ResolutionResult.reason``. Only acquisition problems and quota
exhaustion are raised.
"""


class ProfileFinderError(Exception):
    """Base class for all profilefinder errors."""


class AcquisitionError(ProfileFinderError):
    """A search results page could not be acquired."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class AcquisitionTimeout(AcquisitionError):
    """The provider did not answer within the navigation timeout."""


class AcquisitionFailure(AcquisitionError):
    """Network or HTTP failure while fetching a results page."""


class BlockedByChallenge(AcquisitionError):
    """The provider served an anti-automation interstitial (captcha, 429)."""


class QuotaExceeded(ProfileFinderError):
    """The daily search quota is used up."""
