import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from regview.schemas.registry import RepositorySummary

logger = logging.getLogger(__name__)


class RepositorySummaryCache:
    """
    Process-wide map of repository name -> RepositorySummary.

    Lifecycle: created empty at startup, populated on first request for each
    repository, never expired and never bounded in size. An entry only
    changes when it is explicitly invalidated (e.g. after a tag deletion) and
    recomputed on the next miss.

    Population is single-flight: while one task computes the summary for a
    name, concurrent callers for the same name await that result instead of
    issuing their own upstream requests.

    All access happens on the event loop thread, so no locking is needed.
    Callers always receive copies; the cache owns the stored instances.
    """

    def __init__(self):
        self._entries: Dict[str, RepositorySummary] = {}
        self._in_flight: Dict[str, "asyncio.Future[RepositorySummary]"] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def get(self, name: str) -> Optional[RepositorySummary]:
        entry = self._entries.get(name)
        if entry is None:
            return None
        return entry.model_copy()

    def put(self, name: str, summary: RepositorySummary) -> None:
        self._entries[name] = summary.model_copy()

    def invalidate(self, name: str) -> bool:
        """Drop the entry for `name`. Returns True if one existed."""
        removed = self._entries.pop(name, None) is not None
        if removed:
            logger.debug(f"Invalidated cached summary for {name}")
        return removed

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_create(
        self,
        name: str,
        factory: Callable[[], Awaitable[RepositorySummary]],
    ) -> RepositorySummary:
        """
        Return the cached summary for `name`, computing it with `factory` on a miss.

        If the factory raises, nothing is cached and every caller waiting on
        that computation receives the same exception. If the computing task is
        cancelled, the first waiter still running takes over the computation.
        """
        while True:
            cached = self.get(name)
            if cached is not None:
                logger.debug(f"Cache hit for {name}")
                return cached

            pending = self._in_flight.get(name)
            if pending is None:
                break

            logger.debug(f"Awaiting in-flight summary for {name}")
            try:
                # shield: a cancelled follower must not cancel the leader's computation
                summary = await asyncio.shield(pending)
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if pending.cancelled() and current is not None and not current.cancelling():
                    # the leader was cancelled, not us: take over the computation
                    logger.debug(f"In-flight summary for {name} was cancelled, recomputing")
                    continue
                raise
            return summary.model_copy()

        logger.debug(f"Cache miss for {name}")
        future: "asyncio.Future[RepositorySummary]" = asyncio.get_running_loop().create_future()
        self._in_flight[name] = future
        try:
            summary = await factory()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # mark retrieved so asyncio does not warn when nobody was waiting
            future.exception()
            raise
        else:
            self.put(name, summary)
            future.set_result(summary)
        finally:
            self._in_flight.pop(name, None)

        return summary.model_copy()
