"""Tests for the model fallback combinator."""

from unittest.mock import AsyncMock

import pytest

from cinegoods.exceptions import AllModelsFailedError
from cinegoods.utils.retry import for_each_model


class RateLimited(Exception):
    pass


def is_rate_limited(error: Exception) -> bool:
    return isinstance(error, RateLimited)


@pytest.mark.asyncio
async def test_returns_first_success():
    attempt = AsyncMock(return_value="ok")
    assert await for_each_model(["a", "b"], attempt, is_rate_limited, sleep=AsyncMock()) == "ok"
    attempt.assert_awaited_once_with("a")


@pytest.mark.asyncio
async def test_retryable_error_sleeps_after_every_attempt():
    attempt = AsyncMock(side_effect=[RateLimited(), RateLimited(), RateLimited(), "ok"])
    sleep = AsyncMock()

    result = await for_each_model(
        ["a", "b"], attempt, is_rate_limited, max_attempts_per_model=2, cooldown=5, sleep=sleep
    )

    assert result == "ok"
    assert [c.args[0] for c in attempt.await_args_list] == ["a", "a", "b", "b"]
    assert sleep.await_count == 3
    sleep.assert_awaited_with(5)


@pytest.mark.asyncio
async def test_non_retryable_error_skips_to_next_model():
    attempt = AsyncMock(side_effect=[ValueError("bad request"), "ok"])
    sleep = AsyncMock()

    assert await for_each_model(["a", "b"], attempt, is_rate_limited, sleep=sleep) == "ok"
    assert [c.args[0] for c in attempt.await_args_list] == ["a", "b"]
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_all_models_failing_raises_with_last_error():
    last = ValueError("last")
    attempt = AsyncMock(side_effect=[RateLimited(), RateLimited(), last])

    with pytest.raises(AllModelsFailedError) as exc_info:
        await for_each_model(["a", "b"], attempt, is_rate_limited, sleep=AsyncMock())

    assert exc_info.value.models == ["a", "b"]
    assert exc_info.value.last_error is last


@pytest.mark.asyncio
async def test_empty_model_list_raises():
    with pytest.raises(AllModelsFailedError):
        await for_each_model([], AsyncMock(), is_rate_limited, sleep=AsyncMock())
