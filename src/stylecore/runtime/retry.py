"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/retry.py.
"""

from __future__ import annotations

import asyncio
import re
import socket
from dataclasses import dataclass
from typing import Any, Generic, TypeAlias, TypeVar

from ..errors import (
    PermanentProviderError,
    ProviderTimeoutError,
    TransientProviderError,
)

T = TypeVar("T")

TRANSIENT_PATTERN = re.compile(
    r"rate limit|timeout|timed out|temporarily|overloaded|service unavailable"
    r"|\b(?:429|5\d\d)\b"
)

PERMANENT_PATTERN = re.compile(
    r"invalid api key|invalid credentials|unauthorized|permission denied"
    r"|quota (?:exhausted|exceeded)|\b40[13]\b"
)


@dataclass(frozen=True, slots=True)
class CallSucceeded(Generic[T]):
    """Candidate call returned a usable result."""

    value: T


@dataclass(frozen=True, slots=True)
class TransientFailure:
    """Candidate call failed in a way that may heal on retry."""

    reason: str
    error: BaseException


@dataclass(frozen=True, slots=True)
class PermanentFailure:
    """Candidate call failed in a way retries cannot fix."""

    reason: str
    error: BaseException


CallOutcome: TypeAlias = CallSucceeded[Any] | TransientFailure | PermanentFailure
Failure: TypeAlias = TransientFailure | PermanentFailure


def classify_failure(error: Exception) -> Failure:
    """Classify an exception raised by a provider call into a tagged failure."""
    reason = str(error) or type(error).__name__
    if isinstance(error, PermanentProviderError):
        return PermanentFailure(reason=reason, error=error)
    if isinstance(error, TransientProviderError):
        return TransientFailure(reason=reason, error=error)
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, socket.timeout)):
        return TransientFailure(reason=reason, error=ProviderTimeoutError(reason))
    if isinstance(error, (ConnectionError, OSError)):
        return TransientFailure(reason=reason, error=error)

    msg = reason.lower()
    if TRANSIENT_PATTERN.search(msg):
        return TransientFailure(reason=reason, error=error)
    if PERMANENT_PATTERN.search(msg):
        return PermanentFailure(reason=reason, error=error)
    # Anything unrecognized is retried within budget.
    return TransientFailure(reason=reason, error=error)
