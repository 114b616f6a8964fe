"""Model fallback combinator used for generation calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from cinegoods.exceptions import AllModelsFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def for_each_model(
    models: Sequence[str],
    attempt: Callable[[str], Awaitable[T]],
    is_retryable: Callable[[Exception], bool],
    max_attempts_per_model: int = 2,
    cooldown: float = 10.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Try *attempt* with each model in order until one succeeds.

    A retryable error (rate limit) waits *cooldown* seconds and retries the
    same model, up to *max_attempts_per_model* attempts. Any other error moves
    straight on to the next model.

    Args:
        models: Model names, cheapest first
        attempt: Coroutine function called with a model name
        is_retryable: Predicate deciding whether an error is worth retrying
        max_attempts_per_model: Attempts per model before moving on
        cooldown: Seconds to wait after a retryable error
        sleep: Sleep function (injectable for tests)

    Returns:
        The first successful result

    Raises:
        AllModelsFailedError: When every model failed
    """
    last_error: Exception | None = None

    for model in models:
        for attempt_number in range(1, max_attempts_per_model + 1):
            try:
                return await attempt(model)
            except Exception as e:
                last_error = e
                if not is_retryable(e):
                    logger.warning(f"{model} failed: {e}. Trying next model")
                    break
                logger.warning(
                    f"Rate limit on {model} "
                    f"(attempt {attempt_number}/{max_attempts_per_model}), "
                    f"waiting {cooldown:g}s"
                )
                await sleep(cooldown)

    raise AllModelsFailedError(list(models), last_error)
