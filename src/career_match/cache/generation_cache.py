"""In-memory memoization of generated artifacts with an in-flight guard."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Hashable, TypeVar

from career_match.errors import GenerationInFlight, StaleGeneration

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GenerationCache:
    """Per-key artifact cache allowing at most one pending generation per key.

    Entries belong to one listing set. :meth:`reset` starts a new epoch; a
    generation dispatched under an older epoch is discarded when it finishes
    instead of being written into the new set's cache.
    """

    def __init__(self):
        self._entries: dict[Hashable, object] = {}
        self._in_flight: dict[Hashable, int] = {}  # key -> epoch it was dispatched in
        self._epoch = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    def get(self, key: Hashable):
        return self._entries.get(key)

    def is_pending(self, key: Hashable) -> bool:
        return key in self._in_flight

    def reset(self) -> None:
        """Drop every entry and orphan pending generations."""
        if self._in_flight:
            logger.info("Orphaning %d pending generation(s)", len(self._in_flight))
        self._entries.clear()
        self._in_flight.clear()
        self._epoch += 1

    async def get_or_generate(self, key: Hashable, generator: Callable[[], Awaitable[T]]) -> T:
        """Return the cached artifact for ``key``, generating it on first request.

        Raises:
            GenerationInFlight: a generation for ``key`` is already pending.
            StaleGeneration: the cache was reset while this generation ran.
            Anything ``generator`` raises; nothing is cached and the key is
            released so a retry is allowed.
        """
        if key in self._entries:
            return self._entries[key]
        if key in self._in_flight:
            logger.info("Generation already pending for %s", key)
            raise GenerationInFlight(f"Generation already in progress for {key}")

        epoch = self._epoch
        self._in_flight[key] = epoch
        try:
            artifact = await generator()
        finally:
            if self._in_flight.get(key) == epoch:
                del self._in_flight[key]

        if epoch != self._epoch:
            logger.info("Discarding stale result for %s (epoch %d, now %d)", key, epoch, self._epoch)
            raise StaleGeneration(f"Listings changed while generating {key}")
        self._entries[key] = artifact
        return artifact
