"""Query filtering and ordering of contact suggestions.

Ordering cascade (first decisive criterion wins):
  1. name starts with the query   (entries without a name never match)
  2. email starts with the query
  3. higher frequency
  4. more recent last use
  5. email, ascending               (keeps equal entries in a stable order)
"""

from __future__ import annotations

from typing import Iterable

from . import config
from .models import ContactSuggestion


def normalize_query(query: str | None) -> str:
    return (query or "").strip().lower()


def matches(suggestion: ContactSuggestion, query: str) -> bool:
    """True if *query* (already normalized) occurs in the email, name or domain."""
    if query in suggestion.email:
        return True
    if suggestion.name and query in suggestion.name.lower():
        return True
    return query in suggestion.domain


def _rank_key(suggestion: ContactSuggestion, query: str) -> tuple:
    name_prefix = bool(suggestion.name) and suggestion.name.lower().startswith(query)
    email_prefix = suggestion.email.startswith(query)
    return (
        not name_prefix,
        not email_prefix,
        -suggestion.frequency,
        -suggestion.last_used.timestamp(),
        suggestion.email,
    )


def rank(
    query: str | None,
    snapshot: Iterable[ContactSuggestion],
    limit: int | None = None,
) -> list[ContactSuggestion]:
    """Return at most *limit* suggestions matching *query*, best first.

    An empty or whitespace-only query matches nothing.  The snapshot is
    only read, never mutated.
    """
    limit = config.RESULT_LIMIT if limit is None else max(0, limit)
    q = normalize_query(query)
    if not q or limit == 0:
        return []

    candidates = [s for s in snapshot if matches(s, q)]
    candidates.sort(key=lambda s: _rank_key(s, q))
    return candidates[:limit]
