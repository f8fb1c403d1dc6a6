"""Fold mail and conversation records into deduplicated contact suggestions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from .models import (
    ContactSource,
    ContactSuggestion,
    ConversationRecord,
    MailDirection,
    MailRecord,
)
from .normalizer import is_valid_email, normalize_address

log = logging.getLogger(__name__)


@dataclass
class AggregateResult:
    """Output of one rebuild pass."""

    entries: list[ContactSuggestion] = field(default_factory=list)
    observations: int = 0
    rejected: int = 0


def add_observation(
    contact_map: dict[str, ContactSuggestion],
    raw_address: str,
    timestamp: datetime,
    source: ContactSource,
) -> bool:
    """Merge one sighting of *raw_address* into *contact_map* (mutates in place).

    An existing entry gets ``frequency + 1`` and the later of the two
    timestamps; its name and source are never overwritten.  Returns False
    when the address is rejected for lacking an '@'.
    """
    email, name = normalize_address(raw_address)
    if not is_valid_email(email):
        log.debug("Rejected address without '@': %r", raw_address)
        return False

    existing = contact_map.get(email)
    if existing is None:
        contact_map[email] = ContactSuggestion(
            email=email,
            name=name,
            frequency=1,
            last_used=timestamp,
            source=source,
        )
        return True

    existing.frequency += 1
    if timestamp > existing.last_used:
        existing.last_used = timestamp
    return True


def default_order_key(suggestion: ContactSuggestion):
    """Stored iteration order: most frequent first, then most recent."""
    return (-suggestion.frequency, -suggestion.last_used.timestamp())


def rebuild(
    mail_records: Iterable[MailRecord],
    conversation_records: Iterable[ConversationRecord],
) -> AggregateResult:
    """Derive a fresh generation of suggestions from the source records.

    - Every mail sender is observed with the record's own direction
      (``sent`` for outbound mail, ``received`` for inbound).
    - Recipients of outbound mail are observed with the complementary
      provenance.
    - Every conversation participant is observed as ``conversation`` at the
      conversation's last-activity time.

    Empty inputs yield an empty result.
    """
    contact_map: dict[str, ContactSuggestion] = {}
    result = AggregateResult()
    mail_count = 0
    conversation_count = 0

    def _observe(address: str, timestamp: datetime, source: ContactSource) -> None:
        result.observations += 1
        if not add_observation(contact_map, address, timestamp, source):
            result.rejected += 1

    for record in mail_records:
        mail_count += 1
        _observe(record.sender, record.date, record.direction.sender_source)
        if record.direction is MailDirection.OUTBOUND:
            for recipient in record.recipients:
                _observe(recipient, record.date, record.direction.recipient_source)

    for conversation in conversation_records:
        conversation_count += 1
        for participant in conversation.participants:
            _observe(participant, conversation.last_activity, ContactSource.CONVERSATION)

    result.entries = sorted(contact_map.values(), key=default_order_key)

    log.info(
        "Aggregated %d suggestions from %d mail records and %d conversations "
        "(%d observations, %d rejected)",
        len(result.entries),
        mail_count,
        conversation_count,
        result.observations,
        result.rejected,
    )
    return result
