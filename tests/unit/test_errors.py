"""Unit tests for centralized error types and retry decorator."""

import pytest

from scriptframe import errors


def test_exceptions_hierarchy():
    assert issubclass(errors.ScriptFrameError, Exception)
    for exc in (
        errors.ConfigurationError,
        errors.PromptGenerationError,
        errors.StyleAnalysisError,
        errors.StabilityAPIError,
        errors.TransientError,
    ):
        assert issubclass(exc, errors.ScriptFrameError)


def test_stability_error_keeps_status():
    error = errors.StabilityAPIError("bad request", status=400)
    assert str(error) == "bad request"
    assert error.status == 400


@pytest.mark.asyncio
async def test_retry_decorator_succeeds_after_retries(monkeypatch):
    calls = {"count": 0}
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    monkeypatch.setattr(errors.asyncio, "sleep", fake_sleep)

    class MyTransient(errors.TransientError):
        pass

    @errors.retry((MyTransient,), retries=2, backoff_factor=0.5)
    async def flaky():
        calls["count"] += 1
        if calls["count"] < 3:
            raise MyTransient("temporary")
        return "ok"

    assert await flaky() == "ok"
    assert calls["count"] == 3
    # Exponential backoff between attempts
    assert sleeps == [0.5, 1.0]


@pytest.mark.asyncio
async def test_retry_decorator_raises_after_max_attempts():
    class MyTransient(errors.TransientError):
        pass

    @errors.retry((MyTransient,), retries=1, backoff_factor=0.0)
    async def always_fail():
        raise MyTransient("still failing")

    with pytest.raises(MyTransient):
        await always_fail()


@pytest.mark.asyncio
async def test_retry_zero_retries_raises_immediately():
    calls = {"count": 0}

    @errors.retry(retries=0)
    async def fail():
        calls["count"] += 1
        raise errors.TransientError("down")

    with pytest.raises(errors.TransientError):
        await fail()
    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_retry_decorator_async():
    calls = {"count": 0}

    @errors.retry((errors.TransientError,), retries=3, backoff_factor=0.0)
    async def flaky():
        calls["count"] += 1
        if calls["count"] < 3:
            raise errors.TransientError("temporary")
        return "ok"

    assert await flaky() == "ok"
    assert calls["count"] == 3


@pytest.mark.asyncio
async def test_retry_ignores_other_exceptions():
    calls = {"count": 0}

    @errors.retry((errors.TransientError,), retries=3, backoff_factor=0.0)
    async def broken():
        calls["count"] += 1
        raise ValueError("not retryable")

    with pytest.raises(ValueError):
        await broken()
    assert calls["count"] == 1
