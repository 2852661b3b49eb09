"""
Resolution orchestrator.

Drives extraction, verification and ranking over a fallback chain of
provider steps:

    ProviderA (with employer) -> ProviderA (employer dropped)
        -> ProviderB ... -> Exhausted

The next step runs only when the current one produced no winner. A
challenge page aborts the whole request; timeouts and other acquisition
failures just advance the chain.
"""

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence

from .breaker import CircuitBreaker
from .config import Settings
from .errors import AcquisitionError, AcquisitionTimeout, BlockedByChallenge, QuotaExceeded
from .extractor import extract
from .identity import Identity, enhance_identity
from .logger import StructuredLogger, get_logger
from .models import ResolutionResult, StepAttempt
from .normalize import canonicalize_profile_url
from .pacing import PacingGate
from .page import PageContent
from .providers import SearchProvider, get_provider
from .quota import DailyQuota
from .ranker import rank
from .search import build_query
from .verifier import verify_candidate


class PageFetcher(Protocol):
    def fetch(self, url: str) -> PageContent:
        ...


@dataclass(frozen=True)
class ResolutionStep:
    provider: SearchProvider
    include_employer: bool
    query: str

    @property
    def label(self) -> str:
        suffix = "" if self.include_employer else "_no_company"
        return f"{self.provider.name}{suffix}"


class ProfileResolver:
    """Resolve an identity to a canonical profile URL using the fallback chain."""

    def __init__(
        self,
        fetchers: Dict[str, PageFetcher],
        providers: Sequence[SearchProvider],
        pacing: Optional[PacingGate] = None,
        quota: Optional[DailyQuota] = None,
        logger: Optional[StructuredLogger] = None,
        breaker_threshold: int = 5,
        breaker_recovery: float = 300,
    ):
        missing = [p.name for p in providers if p.name not in fetchers]
        if missing:
            raise ValueError(f"No fetcher configured for providers: {', '.join(missing)}")
        self.fetchers = fetchers
        self.providers = list(providers)
        self.pacing = pacing
        self.quota = quota
        self.logger = logger or get_logger()
        self.breakers = {
            p.name: CircuitBreaker(failure_threshold=breaker_threshold, recovery_timeout=breaker_recovery)
            for p in self.providers
        }

    def plan_steps(self, identity: Identity) -> List[ResolutionStep]:
        steps: List[ResolutionStep] = []
        for provider in self.providers:
            seen = set()
            for include_employer in (True, False):
                query = build_query(identity, include_employer)
                if query in seen:
                    continue
                seen.add(query)
                steps.append(ResolutionStep(provider, include_employer, query))
        return steps

    def resolve(self, identity: Identity) -> ResolutionResult:
        """
        Resolve one identity.

        Raises:
            QuotaExceeded: Daily quota used up (checked before any acquisition)
            BlockedByChallenge: A provider served an anti-automation page

        Returns:
            ResolutionResult with a winner, or with none and an attempts log
            explaining the miss.
        """
        if self.quota is not None and not self.quota.check_and_reserve():
            self.logger.warning("Daily limit reached", limit=self.quota.limit)
            raise QuotaExceeded(f"Daily limit reached ({self.quota.count}/{self.quota.limit})")

        enhanced = enhance_identity(identity)
        if enhanced.display_name != identity.display_name:
            self.logger.info(
                f'Enhanced search query from email: "{identity.display_name}" -> "{enhanced.display_name}"'
            )
        self.logger.info(
            "=== New search request ===",
            name=enhanced.display_name,
            company=enhanced.employer or "N/A",
        )

        result = ResolutionResult(identity=enhanced)
        for step in self.plan_steps(enhanced):
            attempt = self._run_step(step, enhanced, result)
            result.attempts_log.append(attempt)
            if result.found:
                self.logger.info(f"Found LinkedIn URL via {step.provider.name}: {result.canonical_url}")
                break
        else:
            self.logger.warning(f"No verified LinkedIn profile found for: {enhanced.display_name}")

        self.logger.record_resolution(result.found)
        if self.quota is not None:
            self.quota.record(result)
        return result

    def _run_step(self, step: ResolutionStep, identity: Identity, result: ResolutionResult) -> StepAttempt:
        provider = step.provider
        attempt = StepAttempt(step=step.label, provider=provider.name, query=step.query, outcome="failure")
        self.logger.info(f"Searching {provider.name.capitalize()} for: {step.query}")

        if self.pacing is not None:
            self.pacing.wait()

        try:
            page = self.breakers[provider.name].call(
                self.fetchers[provider.name].fetch, provider.search_url(step.query)
            )
        except BlockedByChallenge as e:
            self.logger.error(f"{provider.name.capitalize()} blocked the search", step=step.label, error=str(e))
            raise
        except AcquisitionError as e:
            attempt.outcome = "timeout" if isinstance(e, AcquisitionTimeout) else "failure"
            attempt.error = str(e)
            self.logger.warning(f"Step {step.label} failed, advancing", error=str(e))
            return attempt

        candidates = extract(page, provider)
        attempt.candidate_count = len(candidates)
        self.logger.info(f"Found {len(candidates)} LinkedIn profiles to verify", step=step.label)
        if not candidates:
            attempt.outcome = "no_candidates"
            return attempt

        verdicts = [verify_candidate(identity, c) for c in candidates]
        for verdict in verdicts:
            self.logger.debug(
                f"Profile {verdict.candidate.profile_id}: {verdict.reason}",
                accepted=verdict.accepted,
                score=verdict.match_score,
            )
        attempt.accepted_count = sum(1 for v in verdicts if v.accepted)

        best = rank(verdicts)
        if best is None:
            attempt.outcome = "no_verified_candidate"
            return attempt

        result.winner = best.candidate
        result.verdict = best
        result.canonical_url = canonicalize_profile_url(best.candidate.profile_url)
        attempt.outcome = "found"
        attempt.provenance = best.candidate.provenance.value
        self.logger.info(
            f"Selected best match: {best.candidate.profile_id} (score: {best.match_score})",
            reason=best.reason,
            provenance=attempt.provenance,
        )
        return attempt


def build_resolver(settings: Settings, quota: Optional[DailyQuota] = None) -> ProfileResolver:
    """Wire a resolver with HTTP fetchers, pacing and quota from settings."""
    from .fetch import RequestsPageFetcher

    rng = random.Random(settings.seed)
    providers = [get_provider(name) for name in settings.providers]
    fetchers = {
        p.name: RequestsPageFetcher(p, timeout=settings.timeout, rng=rng)
        for p in providers
    }
    return ProfileResolver(
        fetchers=fetchers,
        providers=providers,
        pacing=PacingGate(settings.min_interval, settings.jitter, rng=rng),
        quota=quota if quota is not None else DailyQuota(settings.max_daily),
    )
