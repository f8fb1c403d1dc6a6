"""In-memory snapshot of contact suggestions with a staleness clock."""

from __future__ import annotations

import dataclasses
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable

from . import config
from .models import ContactSource, ContactSuggestion, parse_timestamp

log = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheStats:
    """Point-in-time description of the cache, for diagnostics."""

    entries: int = 0
    generation: int = 0
    last_rebuild: datetime | None = None
    by_source: dict[str, int] = field(default_factory=dict)


class CacheStore:
    """Owns the current generation of suggestions.

    The map is keyed by normalized email, so it can never hold two entries
    for the same address.  ``replace`` swaps it wholesale and restarts the
    TTL; ``upsert`` mutates a single entry and leaves the TTL alone.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.ttl_seconds = config.CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, ContactSuggestion] = {}
        self._last_rebuild: datetime | None = None
        self._generation = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def last_rebuild(self) -> datetime | None:
        return self._last_rebuild

    @property
    def generation(self) -> int:
        return self._generation

    def is_stale(self, now: datetime | None = None) -> bool:
        """True when the snapshot is empty or older than the TTL."""
        now = parse_timestamp(now or self._clock())
        with self._lock:
            if not self._entries or self._last_rebuild is None:
                return True
            age = (now - self._last_rebuild).total_seconds()
            return age > self.ttl_seconds

    def snapshot(self) -> tuple[ContactSuggestion, ...]:
        """Return copies of the current entries in stored order."""
        with self._lock:
            return tuple(dataclasses.replace(s) for s in self._entries.values())

    def get(self, email: str) -> ContactSuggestion | None:
        with self._lock:
            entry = self._entries.get(email)
            return dataclasses.replace(entry) if entry else None

    def replace(
        self,
        entries: Iterable[ContactSuggestion],
        *,
        preserve_manual: bool = False,
    ) -> None:
        """Swap in a new generation and restart the staleness clock.

        With *preserve_manual*, ``manual`` entries from the outgoing
        generation whose email the new generation does not contain are
        appended after the new entries.
        """
        new_map: dict[str, ContactSuggestion] = {}
        for entry in entries:
            new_map.setdefault(entry.email, dataclasses.replace(entry))

        with self._lock:
            carried = 0
            if preserve_manual:
                for email, old in self._entries.items():
                    if old.source is ContactSource.MANUAL and email not in new_map:
                        new_map[email] = old
                        carried += 1
            self._entries = new_map
            self._last_rebuild = parse_timestamp(self._clock())
            self._generation += 1

        log.debug(
            "Cache generation %d: %d entries (%d manual carried over)",
            self._generation, len(new_map), carried,
        )

    def upsert(
        self,
        email: str,
        name: str | None,
        timestamp: datetime,
        *,
        source: ContactSource = ContactSource.MANUAL,
    ) -> ContactSuggestion:
        """Record one use of *email* (already normalized) and return a copy.

        Existing entries get ``frequency + 1`` and the later timestamp; a
        missing name is filled in but an existing one is kept.  New entries
        start at frequency 1 with the given *source*.
        """
        timestamp = parse_timestamp(timestamp)
        with self._lock:
            entry = self._entries.get(email)
            if entry is None:
                entry = ContactSuggestion(
                    email=email,
                    name=name or None,
                    frequency=1,
                    last_used=timestamp,
                    source=source,
                )
                self._entries[email] = entry
            else:
                entry.frequency += 1
                if timestamp > entry.last_used:
                    entry.last_used = timestamp
                if not entry.name and name:
                    entry.name = name
            return dataclasses.replace(entry)

    def stats(self) -> CacheStats:
        with self._lock:
            by_source: dict[str, int] = {}
            for entry in self._entries.values():
                by_source[entry.source.value] = by_source.get(entry.source.value, 0) + 1
            return CacheStats(
                entries=len(self._entries),
                generation=self._generation,
                last_rebuild=self._last_rebuild,
                by_source=by_source,
            )
