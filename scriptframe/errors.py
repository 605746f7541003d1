"""Centralized error types and utilities for scriptframe.

Provides the adapter exception taxonomy and a simple retry decorator with
exponential backoff.
"""
from __future__ import annotations

import functools
import asyncio
from typing import Awaitable, Callable, Type, Tuple, Any, Optional


class ScriptFrameError(Exception):
    """Base exception for all scriptframe failures."""


class ConfigurationError(ScriptFrameError):
    """A provider is missing its credential or is otherwise misconfigured."""


class PromptGenerationError(ScriptFrameError):
    """Prompt generation failed; the message is safe to show to end users."""


class StyleAnalysisError(ScriptFrameError):
    """Reference image style analysis failed."""


class StabilityAPIError(ScriptFrameError):
    """Stability AI answered with a non-success HTTP status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class TransientError(ScriptFrameError):
    """Indicates an error that may succeed if retried (network, timeouts)."""


def retry(
    exceptions: Tuple[Type[BaseException], ...] = (TransientError,),
    retries: int = 3,
    backoff_factor: float = 0.5,
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
    """A simple retry decorator with exponential backoff for coroutines.

    Args:
        exceptions: Tuple of exception types that should trigger a retry.
        retries: Number of retry attempts (not counting initial call).
        backoff_factor: Base backoff in seconds, multiplied exponentially.

    Usage:
        @retry((TransientError,), retries=3, backoff_factor=0.2)
        async def flaky():
            ...
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions:
                    if attempt >= retries:
                        raise
                    sleep_time = backoff_factor * (2 ** attempt)
                    await asyncio.sleep(sleep_time)
                    attempt += 1

        return wrapper

    return decorator
