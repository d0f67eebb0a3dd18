"""Single-slot time-to-live cache for expensive aggregate values."""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Generic, Optional, TypeVar


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class TTLCache(Generic[T]):
    """Holds one value until ``ttl_seconds`` have elapsed or it is invalidated.

    There is no locking: two concurrent callers on an expired slot may both
    refresh it, and the last writer wins.  Every :meth:`invalidate` bumps
    :attr:`generation`; a refresh started before it is never stored.
    """

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._value: Optional[T] = None
        self._expires_at: Optional[float] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_fresh(self) -> bool:
        return self._expires_at is not None and self._clock() < self._expires_at

    def get(self) -> Optional[T]:
        if self.is_fresh:
            return self._value
        return None

    def set(self, value: T) -> None:
        self._value = value
        self._expires_at = self._clock() + self.ttl_seconds

    def invalidate(self) -> None:
        self._value = None
        self._expires_at = None
        self._generation += 1

    async def get_or_refresh(
        self,
        fetcher: Callable[[], Awaitable[T]],
        *,
        should_store: Callable[[T], bool] = lambda value: True,
    ) -> T:
        """Return the cached value or await ``fetcher`` for a fresh one.

        ``should_store`` decides whether the fetched value may be cached;
        rejected values are returned to the caller but not kept.
        """

        if self.is_fresh:
            LOGGER.debug("Cache hit (expires in %.1fs)", self._expires_at - self._clock())
            return self._value

        generation = self._generation
        value = await fetcher()
        if generation != self._generation:
            LOGGER.debug("Cache invalidated during refresh; discarding fetched value")
        elif should_store(value):
            self.set(value)
        else:
            LOGGER.debug("Fetched value rejected for caching")
        return value


__all__ = ["TTLCache"]
