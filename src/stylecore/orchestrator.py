"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Thin request flow tying the limiter, cache, provider cascade, palette
extraction and diversity scoring together.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from .cache.base import ResponseCacheBackend
from .cache.consistency import write_then_invalidate
from .cache.factory import create_response_cache
from .cache.typed import TypedResponseCache
from .colors.colorspace import hex_to_rgb, rgb_to_hex
from .colors.extractor import ExtractionConfig, extract_palette_from_image
from .colors.naming import color_name
from .colors.types import InsufficientSignal, PaletteColor
from .diversity.scorer import DiversityScorer, ResultSummary
from .errors import ProviderError, ProviderExhaustedError, RateLimitedError
from .runtime.background import BackgroundTaskGroup
from .runtime.cascade import Caller, ProviderCandidate, ProviderCascade
from .runtime.coalescing import RequestCoalescer
from .runtime.health import CandidateHealth
from .runtime.metrics import CoreMetrics, NoOpCoreMetrics
from .runtime.rate_limit import FixedWindowRateLimiter, RateLimiter
from .settings import StyleCoreSettings
from .types import (
    GeneratedLook,
    PaletteSource,
    Recommendation,
    RecommendationRequest,
    StyledLook,
)

T = TypeVar("T")

logger = logging.getLogger("stylecore.orchestrator")

_LOOKS = TypeAdapter(list[GeneratedLook])


def provider_palette(colors: Sequence[str]) -> tuple[PaletteColor, ...]:
    """Equal-weight palette from provider-supplied hex strings; bad values are skipped."""
    parsed: list[tuple[int, int, int]] = []
    for value in colors:
        try:
            rgb = hex_to_rgb(value)
        except ValueError:
            logger.warning("Ignoring provider color %r: not a hex color", value)
            continue
        if rgb not in parsed:
            parsed.append(rgb)
    if not parsed:
        return ()
    weight = 1.0 / len(parsed)
    return tuple(
        PaletteColor(
            hex=rgb_to_hex(*rgb),
            weight=weight,
            name=color_name(*rgb),
            rgb=rgb,
        )
        for rgb in parsed
    )


class RecommendationOrchestrator:
    """
    Serve recommendation requests through the resilience core.

    Flow per request: rate limit, cache lookup, then a coalesced compute
    (provider cascade, palette extraction per look, diversity scoring,
    cache write). Identical concurrent requests share one compute, and a
    compute whose caller disconnects keeps running under the background
    group so its result still lands in the cache.

    Args:
        cache: Cache backend; wrapped in a typed view for `Recommendation`.
        rate_limiter: Admission control keyed by `caller_id`.
        cascade: Provider cascade producing `GeneratedLook` sequences.
        background: Owner of fire-and-forget work.
        scorer: Diversity scorer; advisory only.
        extraction_config: Palette extraction tuning.
        default_ttl_s: TTL for requests without `ttl_s`; `None` defers to the backend.
        metrics: Counter sink.
        sweep_interval_s: Period of the expired-state sweeper started on the
            first request; `None` disables it.
    """

    def __init__(
        self,
        cache: ResponseCacheBackend,
        rate_limiter: RateLimiter,
        cascade: ProviderCascade,
        *,
        background: BackgroundTaskGroup | None = None,
        scorer: DiversityScorer | None = None,
        extraction_config: ExtractionConfig | None = None,
        default_ttl_s: float | None = None,
        metrics: CoreMetrics | None = None,
        sweep_interval_s: float | None = None,
    ) -> None:
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.cascade = cascade
        self.background = background or BackgroundTaskGroup()
        self.scorer = scorer or DiversityScorer()
        self.extraction_config = extraction_config or ExtractionConfig()
        self.default_ttl_s = default_ttl_s
        self.metrics: CoreMetrics = metrics or NoOpCoreMetrics()
        self._results: TypedResponseCache[Recommendation] = TypedResponseCache(
            cache, Recommendation
        )
        self._coalescer = RequestCoalescer(self.background)
        self.sweep_interval_s = sweep_interval_s
        self._sweeper: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: StyleCoreSettings,
        *,
        candidates: Sequence[ProviderCandidate],
        call: Caller,
        redis_client: Any | None = None,
        metrics: CoreMetrics | None = None,
    ) -> "RecommendationOrchestrator":
        """Wire in-process components from settings."""
        cascade = ProviderCascade(
            candidates,
            call,
            timeout_s=settings.provider_timeout_s,
            max_attempts_per_candidate=settings.provider_max_attempts,
            backoff_max_ms=settings.provider_backoff_max_ms,
            health=CandidateHealth(cooldown_s=settings.provider_cooldown_s),
        )
        return cls(
            create_response_cache(settings, redis_client=redis_client),
            FixedWindowRateLimiter(
                limit=settings.rate_limit_requests,
                window_s=settings.rate_limit_window_s,
            ),
            cascade,
            extraction_config=ExtractionConfig(
                min_delta_e=settings.palette_min_delta_e,
                max_candidates=settings.palette_max_candidates,
            ),
            metrics=metrics,
            sweep_interval_s=settings.sweep_interval_s,
        )

    async def recommend(self, request: RecommendationRequest) -> Recommendation:
        """
        Return looks for `request`.

        Raises:
            RateLimitedError: The caller is over its budget for the window.
            ProviderExhaustedError: No provider candidate produced looks.
        """
        if self.sweep_interval_s is not None:
            self.start_sweeper()

        decision = await self.rate_limiter.check(request.caller_id)
        if not decision.allowed:
            self.metrics.incr("rate_limited")
            logger.info("Rejected request from %s: rate limited", request.caller_id)
            raise RateLimitedError(
                request.caller_id, reset_at=decision.reset_at, limit=decision.limit
            )

        cached = await self._results.get(request.cache_key)
        if cached is not None:
            self.metrics.incr("cache.hit")
            logger.debug("Cache hit for %s", request.cache_key)
            return dataclasses.replace(cached, from_cache=True)

        self.metrics.incr("cache.miss")
        return await self._coalescer.run(
            request.cache_key, lambda: self._compute(request)
        )

    async def _compute(self, request: RecommendationRequest) -> Recommendation:
        try:
            report = await self.cascade.invoke_with_report(request.payload)
        except ProviderExhaustedError:
            self.metrics.incr("provider.exhausted")
            raise

        looks = self._coerce_looks(report.value, report.candidate)
        styled = [await self._style(look) for look in looks]
        diversity = self.scorer.score(
            [
                ResultSummary(
                    style_tag=look.style_tag,
                    palette=look.hexes,
                    items=look.items,
                    title=look.title,
                )
                for look in styled
            ]
        )
        if diversity.violations:
            logger.warning(
                "Diversity score %.0f for %s: %s",
                diversity.score,
                request.cache_key,
                "; ".join(diversity.violations),
            )
        else:
            logger.info("Diversity score %.0f for %s", diversity.score, request.cache_key)

        recommendation = Recommendation(
            looks=tuple(styled),
            diversity=diversity,
            provider=report.candidate,
            failed_candidates=tuple(row.candidate for row in report.failures),
        )
        ttl_s = request.ttl_s if request.ttl_s is not None else self.default_ttl_s
        await self._results.set(request.cache_key, recommendation, ttl_s=ttl_s)
        return recommendation

    def _coerce_looks(self, value: Any, candidate: str) -> list[GeneratedLook]:
        try:
            return _LOOKS.validate_python(list(value))
        except (TypeError, ValidationError) as exc:
            raise ProviderError(
                f"Provider {candidate} returned a malformed result: {exc}"
            ) from exc

    async def _style(self, look: GeneratedLook) -> StyledLook:
        palette: tuple[PaletteColor, ...] = ()
        source: PaletteSource = "none"
        if look.image:
            try:
                extracted = await asyncio.to_thread(
                    extract_palette_from_image,
                    look.image,
                    config=self.extraction_config,
                )
            except (OSError, ValueError) as exc:
                logger.warning("Could not decode image for look %r: %s", look.title, exc)
                extracted = InsufficientSignal(reason=f"undecodable image: {exc}")
            if isinstance(extracted, InsufficientSignal):
                self.metrics.incr("palette.insufficient_signal")
                logger.info(
                    "Falling back to provider colors for %r: %s", look.title, extracted.reason
                )
            else:
                palette, source = extracted.colors, "image"

        if not palette:
            palette = provider_palette(look.colors)
            source = "provider" if palette else "none"

        return StyledLook(
            title=look.title,
            style_tag=look.style_tag,
            items=look.items,
            palette=palette,
            palette_source=source,
        )

    def schedule_refinement(
        self,
        recommendation: Recommendation,
        refine: Callable[[Recommendation], Awaitable[Any]],
        *,
        name: str = "refinement",
    ) -> asyncio.Task[Any]:
        """Run `refine` after the response is sent; failures go to the error reporter."""
        return self.background.spawn(refine(recommendation), name=name)

    async def update_backing_store(
        self,
        key_or_prefix: str,
        write: Callable[[], Awaitable[T]],
    ) -> T:
        """Apply a write to the backing store and drop cache entries it makes stale."""
        return await write_then_invalidate(self.cache, key_or_prefix, write)

    async def sweep(self) -> tuple[int, int]:
        """
        Drop expired cache entries and ended rate-limit windows.

        Backends that expire state on their own (Redis) have no `sweep` and
        are skipped.

        Returns:
            Number of cache entries and limiter windows removed.
        """
        entries = await _sweep(self.cache)
        windows = await _sweep(self.rate_limiter)
        if entries or windows:
            self.metrics.incr("sweep.removed", entries + windows)
            logger.debug("Swept %d cache entries and %d limiter windows", entries, windows)
        return entries, windows

    def start_sweeper(self, interval_s: float | None = None) -> asyncio.Task[None]:
        """Start the periodic sweeper under the background group; idempotent."""
        if self._sweeper is not None and not self._sweeper.done():
            return self._sweeper
        interval = interval_s if interval_s is not None else self.sweep_interval_s
        if interval is None or interval <= 0:
            raise ValueError("sweep interval must be > 0")
        self._sweeper = self.background.spawn(self._sweep_loop(interval), name="sweeper")
        return self._sweeper

    async def _sweep_loop(self, interval_s: float) -> None:
        while True:
            await asyncio.sleep(interval_s)
            try:
                await self.sweep()
            except Exception:
                logger.exception("Sweep failed; retrying in %.1fs", interval_s)

    async def aclose(self, timeout_s: float | None = None) -> None:
        """Stop the sweeper and wait for remaining background work."""
        sweeper, self._sweeper = self._sweeper, None
        if sweeper is not None:
            sweeper.cancel()
            await asyncio.gather(sweeper, return_exceptions=True)
        await self.background.drain(timeout_s)


async def _sweep(component: Any) -> int:
    sweep = getattr(component, "sweep", None)
    if sweep is None:
        return 0
    return await sweep()
