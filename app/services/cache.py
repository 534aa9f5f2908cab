"""In-process result cache with TTL, tag invalidation and single-flight loads.

Entries are served stale once their TTL lapses (or their tag is invalidated)
while a single background task recomputes them. Concurrent misses for the same
key share one in-flight production, so a cold burst never multiplies upstream
load.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import time
from collections import OrderedDict, defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from app.logging import logger
from app.services.exceptions import CacheProductionError

T = TypeVar("T")
Producer = Callable[[], Awaitable[T]]
Clock = Callable[[], float]


def make_cache_key(namespace: str, *parts: Any) -> str:
    """Build a deterministic key from a producer name and its logical arguments."""

    serialized = json.dumps(parts, sort_keys=True, ensure_ascii=False, default=str)
    digest = hashlib.sha256(serialized.encode("utf-8")).hexdigest()[:32]
    return f"{namespace}:{digest}"


@dataclass(slots=True)
class CacheEntry:
    key: str
    ttl_seconds: float
    tags: tuple[str, ...]
    value: Any
    computed_at: float
    invalidated: bool = False

    def is_stale(self, now: float) -> bool:
        return self.invalidated or now - self.computed_at > self.ttl_seconds


@dataclass(slots=True)
class CacheStats:
    hits: int = 0
    misses: int = 0
    stale_hits: int = 0
    refreshes: int = 0
    refresh_failures: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "stale_hits": self.stale_hits,
            "refreshes": self.refreshes,
            "refresh_failures": self.refresh_failures,
        }


@dataclass(slots=True)
class _Inflight:
    task: asyncio.Task
    refresh: bool = False


class ResultCache:
    """Memoize async producers by key.

    One instance is meant to be shared process-wide; all coordination is
    key-local, so unrelated keys never wait on each other.
    """

    def __init__(self, *, clock: Clock = time.monotonic, max_entries: int = 2048) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._clock = clock
        self._max_entries = max_entries
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._inflight: dict[str, _Inflight] = {}
        self._tag_index: dict[str, set[str]] = defaultdict(set)
        self._epoch = 0
        self._tag_epochs: dict[str, int] = {}
        self.stats = CacheStats()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    async def memoize(
        self,
        key: str,
        ttl_seconds: float,
        tags: Iterable[str],
        producer: Producer[T],
    ) -> T:
        tag_tuple = tuple(tags)
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
            if entry.is_stale(self._clock()):
                self.stats.stale_hits += 1
                self._schedule_refresh(key, ttl_seconds, tag_tuple, producer)
            else:
                self.stats.hits += 1
            return entry.value

        self.stats.misses += 1
        inflight = self._inflight.get(key)
        if inflight is None:
            inflight = self._start(key, ttl_seconds, tag_tuple, producer, refresh=False)
        else:
            logger.debug("cache_join_inflight", key=key)
        # Shielded so a cancelled caller does not abort the shared production.
        return await asyncio.shield(inflight.task)

    def invalidate(self, tag: str) -> int:
        """Expire every entry carrying ``tag``; returns how many were marked."""

        # Productions already running for this tag land expired.
        self._epoch += 1
        self._tag_epochs[tag] = self._epoch
        marked = 0
        for key in self._tag_index.get(tag, ()):
            entry = self._entries.get(key)
            if entry is not None and not entry.invalidated:
                entry.invalidated = True
                marked += 1
        logger.info("cache_tag_invalidated", tag=tag, entries=marked)
        return marked

    def peek(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    async def drain(self) -> None:
        """Wait for all in-flight productions and refreshes to settle."""

        while self._inflight:
            tasks = [inflight.task for inflight in self._inflight.values()]
            await asyncio.gather(*tasks, return_exceptions=True)

    def clear(self) -> None:
        self._entries.clear()
        self._tag_index.clear()

    def _start(
        self,
        key: str,
        ttl_seconds: float,
        tags: tuple[str, ...],
        producer: Producer[Any],
        *,
        refresh: bool,
    ) -> _Inflight:
        task = asyncio.ensure_future(self._produce(key, ttl_seconds, tags, producer, self._epoch))
        inflight = _Inflight(task=task, refresh=refresh)
        self._inflight[key] = inflight

        def _done(finished: asyncio.Task) -> None:
            current = self._inflight.get(key)
            if current is not None and current.task is finished:
                del self._inflight[key]
            if finished.cancelled():
                return
            # Always retrieve the exception; callers may have been cancelled.
            exc = finished.exception()
            if refresh and exc is not None:
                self._log_refresh_failure(key, exc)

        task.add_done_callback(_done)
        return inflight

    def _schedule_refresh(
        self,
        key: str,
        ttl_seconds: float,
        tags: tuple[str, ...],
        producer: Producer[Any],
    ) -> None:
        if key in self._inflight:
            return
        self.stats.refreshes += 1
        logger.debug("cache_refresh_scheduled", key=key)
        self._start(key, ttl_seconds, tags, producer, refresh=True)

    def _log_refresh_failure(self, key: str, exc: BaseException) -> None:
        self.stats.refresh_failures += 1
        cause = exc.cause if isinstance(exc, CacheProductionError) else exc
        logger.warning(
            "cache_refresh_failed",
            key=key,
            error_type=type(cause).__name__,
            error=str(cause),
        )

    async def _produce(
        self,
        key: str,
        ttl_seconds: float,
        tags: tuple[str, ...],
        producer: Producer[Any],
        started_epoch: int,
    ) -> Any:
        try:
            value = await producer()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise CacheProductionError(key, exc) from exc
        self._store(key, ttl_seconds, tags, value, started_epoch)
        return value

    def _store(
        self,
        key: str,
        ttl_seconds: float,
        tags: tuple[str, ...],
        value: Any,
        started_epoch: int,
    ) -> None:
        previous = self._entries.pop(key, None)
        if previous is not None:
            self._unindex(previous)
        entry = CacheEntry(
            key=key,
            ttl_seconds=ttl_seconds,
            tags=tags,
            value=value,
            computed_at=self._clock(),
            invalidated=any(self._tag_epochs.get(tag, 0) > started_epoch for tag in tags),
        )
        self._entries[key] = entry
        for tag in tags:
            self._tag_index[tag].add(key)
        while len(self._entries) > self._max_entries:
            _, evicted = self._entries.popitem(last=False)
            self._unindex(evicted)
            logger.debug("cache_entry_evicted", key=evicted.key)

    def _unindex(self, entry: CacheEntry) -> None:
        for tag in entry.tags:
            keys = self._tag_index.get(tag)
            if keys is None:
                continue
            keys.discard(entry.key)
            if not keys:
                del self._tag_index[tag]


__all__ = ["CacheEntry", "CacheStats", "ResultCache", "make_cache_key"]
