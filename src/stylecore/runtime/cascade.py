"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Ordered provider fallback with per-candidate retry budgets.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..errors import ProviderExhaustedError
from ..utils import backoff_delay_ms
from .health import CandidateHealth
from .retry import (
    CallOutcome,
    CallSucceeded,
    Failure,
    PermanentFailure,
    TransientFailure,
    classify_failure,
)
from .timeouts import await_with_timeout

T = TypeVar("T")

logger = logging.getLogger("stylecore.runtime.cascade")

Caller = Callable[[str, Any], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class ProviderCandidate:
    """One named provider with its own retry budget and backoff base."""

    name: str
    max_retries: int = 0
    backoff_base_ms: int = 500

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Candidate name must be non-empty")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.backoff_base_ms < 0:
            raise ValueError("backoff_base_ms must be >= 0")


@dataclass(frozen=True, slots=True)
class CandidateFailure:
    """Diagnostic row for a candidate that did not produce a result."""

    candidate: str
    attempts: int
    reason: str
    permanent: bool = False
    skipped: bool = False
    errors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CascadeResult(Generic[T]):
    """Successful cascade run with the failures that preceded it."""

    value: T
    candidate: str
    attempts: int
    failures: tuple[CandidateFailure, ...] = ()


class ProviderCascade:
    """
    Try interchangeable providers in order until one succeeds.

    Each candidate gets `1 + max_retries` attempts, capped at
    `max_attempts_per_candidate`. Transient failures (timeouts, overload,
    throttling) back off exponentially and retry; a permanent failure
    (credentials, exhausted quota) abandons the candidate at once. When all
    candidates are spent the cascade raises `ProviderExhaustedError` with one
    diagnostic row per candidate, in order.

    The injected `call(candidate_name, request)` either returns a result,
    raises, or returns a `TransientFailure`/`PermanentFailure` directly. The
    cascade holds no network state of its own.

    Args:
        candidates: Ordered provider candidates.
        call: Coroutine function performing one provider call.
        timeout_s: Per-call timeout; `None` disables it.
        max_attempts_per_candidate: Hard cap on attempts for any candidate.
        backoff_max_ms: Cap applied to each backoff delay.
        classify: Maps a raised exception to a tagged failure.
        sleep: Awaitable sleep used between retries; injectable for tests.
        health: Optional shared table parking candidates after permanent failures.
    """

    def __init__(
        self,
        candidates: Sequence[ProviderCandidate],
        call: Caller,
        *,
        timeout_s: float | None = 30.0,
        max_attempts_per_candidate: int = 4,
        backoff_max_ms: int = 32000,
        classify: Callable[[Exception], Failure] = classify_failure,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        health: CandidateHealth | None = None,
    ) -> None:
        if max_attempts_per_candidate < 1:
            raise ValueError("max_attempts_per_candidate must be >= 1")
        self._candidates = tuple(candidates)
        self._call = call
        self._timeout_s = timeout_s
        self._max_attempts = max_attempts_per_candidate
        self._backoff_max_ms = backoff_max_ms
        self._classify = classify
        self._sleep = sleep
        self._health = health

    @property
    def candidates(self) -> tuple[ProviderCandidate, ...]:
        return self._candidates

    async def invoke(self, request: Any) -> Any:
        """Return the first successful provider result for `request`."""
        return (await self.invoke_with_report(request)).value

    async def invoke_with_report(self, request: Any) -> CascadeResult[Any]:
        """Run the cascade and return the result with per-candidate diagnostics."""
        failures: list[CandidateFailure] = []
        for candidate in self._candidates:
            if self._health is not None and not await self._health.is_available(
                candidate.name
            ):
                logger.info("Skipping parked provider candidate %s", candidate.name)
                failures.append(
                    CandidateFailure(
                        candidate=candidate.name,
                        attempts=0,
                        reason="parked after a permanent failure",
                        permanent=True,
                        skipped=True,
                    )
                )
                continue

            outcome, attempts, errors = await self._run_candidate(candidate, request)
            if isinstance(outcome, CallSucceeded):
                if self._health is not None:
                    await self._health.record_success(candidate.name)
                return CascadeResult(
                    value=outcome.value,
                    candidate=candidate.name,
                    attempts=attempts,
                    failures=tuple(failures),
                )

            permanent = isinstance(outcome, PermanentFailure)
            if permanent and self._health is not None:
                await self._health.record_permanent_failure(candidate.name)
            logger.warning(
                "Provider candidate %s gave up after %d attempt(s): %s",
                candidate.name,
                attempts,
                outcome.reason,
            )
            failures.append(
                CandidateFailure(
                    candidate=candidate.name,
                    attempts=attempts,
                    reason=outcome.reason,
                    permanent=permanent,
                    errors=tuple(errors),
                )
            )

        logger.error(
            "Provider cascade exhausted after %d candidate(s)", len(self._candidates)
        )
        raise ProviderExhaustedError(failures)

    async def _attempt(self, candidate: ProviderCandidate, request: Any) -> CallOutcome:
        try:
            value = await await_with_timeout(
                self._call(candidate.name, request),
                self._timeout_s,
            )
        except asyncio.CancelledError:
            raise
        except Exception as error:
            return self._classify(error)
        if isinstance(value, (TransientFailure, PermanentFailure)):
            return value
        return CallSucceeded(value)

    async def _run_candidate(
        self,
        candidate: ProviderCandidate,
        request: Any,
    ) -> tuple[CallOutcome, int, list[str]]:
        budget = min(candidate.max_retries + 1, self._max_attempts)
        errors: list[str] = []
        outcome: CallOutcome | None = None
        for attempt in range(budget):
            outcome = await self._attempt(candidate, request)
            if isinstance(outcome, CallSucceeded):
                return outcome, attempt + 1, errors
            errors.append(outcome.reason)
            if isinstance(outcome, PermanentFailure):
                return outcome, attempt + 1, errors
            if attempt + 1 < budget:
                delay_ms = backoff_delay_ms(
                    attempt, candidate.backoff_base_ms, self._backoff_max_ms
                )
                logger.warning(
                    "Provider %s failed transiently (attempt %d/%d): %s; retrying in %dms",
                    candidate.name,
                    attempt + 1,
                    budget,
                    outcome.reason,
                    delay_ms,
                )
                await self._sleep(delay_ms / 1000.0)
        assert outcome is not None
        return outcome, budget, errors
