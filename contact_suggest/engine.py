"""Autocomplete service: the owned composition of aggregator, cache and ranker."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable

from . import config
from .aggregator import rebuild
from .cache_store import CacheStats, CacheStore, utc_now
from .models import ContactSource, ContactSuggestion, SuggestionView
from .normalizer import is_valid_email, normalize_address
from .ranker import normalize_query, rank
from .records import RecordSource
from .signals import Signal

log = logging.getLogger(__name__)


class ContactAutoCompleteService:
    """Answers address-autocomplete queries from an in-memory suggestion cache.

    Created and owned by whoever composes the application; there is no
    shared global instance.  The composition root calls
    ``notify_records_changed()`` after it updates the *source* records.

    Every read and write of the cache goes through one re-entrant lock, so
    a rebuild can never replace the map while a ranking pass reads it and
    usage upserts never interleave with a rebuild's commit.

    Reactive consumers subscribe with ``on_suggestions.connect(fn)`` (called
    with the new list of :class:`SuggestionView`) and
    ``on_loading.connect(fn)`` (called with ``True`` / ``False`` around each
    rebuild).
    """

    def __init__(
        self,
        source: RecordSource,
        *,
        store: CacheStore | None = None,
        clock: Callable[[], datetime] = utc_now,
        limit: int | None = None,
        preserve_manual: bool | None = None,
    ) -> None:
        self.source = source
        self.store = store if store is not None else CacheStore(clock=clock)
        self.limit = config.RESULT_LIMIT if limit is None else limit
        self.preserve_manual = (
            config.PRESERVE_MANUAL if preserve_manual is None else preserve_manual
        )
        self._clock = clock
        self._lock = threading.RLock()
        self._suggestions: list[SuggestionView] = []
        self._loading = False

        self.on_suggestions = Signal("suggestions_changed")
        self.on_loading = Signal("loading_changed")

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def suggestions(self) -> list[SuggestionView]:
        return list(self._suggestions)

    @property
    def is_loading(self) -> bool:
        return self._loading

    def _set_loading(self, value: bool) -> None:
        self._loading = value
        self.on_loading.emit(value)

    def _publish(self, views: list[SuggestionView]) -> None:
        self._suggestions = views
        self.on_suggestions.emit(list(views))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def search_suggestions(self, query: str) -> list[SuggestionView]:
        """Rank cached contacts against *query* and publish the result.

        A stale or empty cache is rebuilt first.  An empty query publishes
        and returns an empty list without touching the cache.
        """
        if not normalize_query(query):
            with self._lock:
                self._publish([])
            return []

        with self._lock:
            if self.store.is_stale(self._clock()):
                log.info("Suggestion cache stale, rebuilding before search")
                self._rebuild_locked()
            results = rank(query, self.store.snapshot(), self.limit)
            views = [s.to_view() for s in results]
            self._publish(views)
        return views

    def record_usage(self, address: str, name: str | None = None) -> ContactSuggestion | None:
        """Count one use of *address*, e.g. after the user picks a recipient.

        Unknown addresses are added with ``manual`` provenance.  Returns the
        updated entry, or None if the address has no '@'.
        """
        email, parsed_name = normalize_address(address)
        if not is_valid_email(email):
            log.debug("Ignoring usage of invalid address %r", address)
            return None

        with self._lock:
            entry = self.store.upsert(
                email, name or parsed_name, self._clock(), source=ContactSource.MANUAL,
            )
        log.debug("Recorded usage of %s (frequency %d)", email, entry.frequency)
        return entry

    def force_refresh(self) -> int:
        """Rebuild the cache now, regardless of staleness.  Returns the entry count."""
        with self._lock:
            return self._rebuild_locked()

    def notify_records_changed(self) -> int:
        """Called by the composition root after the source records change."""
        log.debug("Records changed, rebuilding suggestion cache")
        return self.force_refresh()

    def stats(self) -> CacheStats:
        return self.store.stats()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _rebuild_locked(self) -> int:
        self._set_loading(True)
        try:
            result = rebuild(self.source.mail_records, self.source.conversation_records)
            self.store.replace(result.entries, preserve_manual=self.preserve_manual)
        finally:
            self._set_loading(False)
        return len(self.store)
