"""Bounded polling for state that a host updates asynchronously."""

import asyncio
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel, Field

from clicktoplay.core.errors import ConditionTimeoutError

logger = logging.getLogger(__name__)


class WaitSettings(BaseModel):
    """Configuration for condition polling."""
    timeout: float = Field(default=3.0, gt=0, description="Seconds before giving up")
    interval: float = Field(default=0.1, gt=0, description="Initial delay between polls")
    exponential_base: float = Field(default=1.5, ge=1.0, description="Delay growth per poll")
    max_interval: float = Field(default=0.5, gt=0, description="Upper bound for the delay")


class _PollClock:
    """Tracks attempts, elapsed time and the next delay for one poll loop."""

    def __init__(self, settings: WaitSettings):
        self.settings = settings
        self.start = time.monotonic()
        self.attempts = 0
        self.delay = settings.interval

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.start

    def next_delay(self) -> Optional[float]:
        """Delay before the next poll, or None once the deadline has passed."""
        remaining = self.settings.timeout - self.elapsed
        if remaining <= 0:
            return None
        delay = min(self.delay, remaining)
        self.delay = min(self.delay * self.settings.exponential_base, self.settings.max_interval)
        return delay

    def timeout_error(self, description: str) -> ConditionTimeoutError:
        return ConditionTimeoutError(
            description,
            {
                "attempts": self.attempts,
                "elapsed": round(self.elapsed, 3),
                "timeout": self.settings.timeout
            }
        )


def wait_for_condition(
    condition: Callable[[], Any],
    description: str,
    settings: Optional[WaitSettings] = None,
    **overrides: float
) -> Any:
    """Poll a condition until it is truthy or the deadline passes.

    Args:
        condition: Callable returning a truthy value once satisfied
        description: Message used when the wait times out
        settings: Poll configuration, defaults to WaitSettings()
        **overrides: Individual WaitSettings fields to override

    Returns:
        The truthy value returned by the condition

    Raises:
        ConditionTimeoutError: If the condition is not met in time
    """
    settings = _merge(settings, overrides)
    clock = _PollClock(settings)

    while True:
        clock.attempts += 1
        value = condition()
        if value:
            logger.debug(f"Condition met after {clock.attempts} polls: {description}")
            return value

        delay = clock.next_delay()
        if delay is None:
            logger.error(f"Timed out after {clock.elapsed:.3f}s: {description}")
            raise clock.timeout_error(description)
        time.sleep(delay)


async def async_wait_for_condition(
    condition: Callable[[], Union[Any, Awaitable[Any]]],
    description: str,
    settings: Optional[WaitSettings] = None,
    **overrides: float
) -> Any:
    """Asyncio variant of wait_for_condition.

    The condition may be a plain callable or return an awaitable.
    """
    settings = _merge(settings, overrides)
    clock = _PollClock(settings)

    while True:
        clock.attempts += 1
        value = condition()
        if inspect.isawaitable(value):
            value = await value
        if value:
            logger.debug(f"Condition met after {clock.attempts} polls: {description}")
            return value

        delay = clock.next_delay()
        if delay is None:
            logger.error(f"Timed out after {clock.elapsed:.3f}s: {description}")
            raise clock.timeout_error(description)
        await asyncio.sleep(delay)


def _merge(settings: Optional[WaitSettings], overrides: dict) -> WaitSettings:
    settings = settings or WaitSettings()
    if overrides:
        # Overrides must pass the same field constraints as the defaults
        settings = WaitSettings.model_validate({**settings.model_dump(), **overrides})
    return settings
