"""Source-of-truth record collections consumed by the aggregator."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Iterable

from .models import ConversationRecord, MailRecord

log = logging.getLogger(__name__)


class RecordSource:
    """Holds the mail and conversation records currently loaded.

    The owner of the mail data keeps this up to date and then tells the
    engine via ``notify_records_changed()``.  Readers always get a list
    copy, so a rebuild never iterates a collection being swapped.
    """

    def __init__(
        self,
        mail_records: Iterable[MailRecord] = (),
        conversation_records: Iterable[ConversationRecord] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._mail = list(mail_records)
        self._conversations = list(conversation_records)

    @property
    def mail_records(self) -> list[MailRecord]:
        with self._lock:
            return list(self._mail)

    @property
    def conversation_records(self) -> list[ConversationRecord]:
        with self._lock:
            return list(self._conversations)

    def set_records(
        self,
        mail_records: Iterable[MailRecord],
        conversation_records: Iterable[ConversationRecord],
    ) -> None:
        mail = list(mail_records)
        conversations = list(conversation_records)
        with self._lock:
            self._mail = mail
            self._conversations = conversations


def load_records(path: Path | str) -> RecordSource:
    """Load records from a JSON file.

    Expected shape::

        {"mail": [{"sender": "...", "recipients": [...],
                   "direction": "inbound|outbound", "date": "ISO-8601"}],
         "conversations": [{"participants": [...], "last_activity": "ISO-8601"}]}

    Raises ``FileNotFoundError`` for a missing file and ``ValueError`` for
    malformed JSON or records.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path}: invalid JSON ({exc})") from exc

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object at top level")

    mail: list[MailRecord] = []
    for i, item in enumerate(data.get("mail") or []):
        try:
            mail.append(MailRecord.from_dict(item))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"{path}: bad mail record #{i}: {exc}") from exc

    conversations: list[ConversationRecord] = []
    for i, item in enumerate(data.get("conversations") or []):
        try:
            conversations.append(ConversationRecord.from_dict(item))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"{path}: bad conversation record #{i}: {exc}") from exc

    log.info(
        "Loaded %d mail records and %d conversations from %s",
        len(mail), len(conversations), path,
    )
    return RecordSource(mail, conversations)
