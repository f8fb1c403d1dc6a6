"""Data models for the contact-suggestion engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ContactSource(Enum):
    """Signal type that first created a suggestion entry."""

    SENT = "sent"
    RECEIVED = "received"
    CONVERSATION = "conversation"
    MANUAL = "manual"


class MailDirection(Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"

    @property
    def sender_source(self) -> ContactSource:
        """Provenance given to the sender of a record with this direction."""
        return ContactSource.SENT if self is MailDirection.OUTBOUND else ContactSource.RECEIVED

    @property
    def recipient_source(self) -> ContactSource:
        """Provenance given to the recipients, complementary to the sender's."""
        return ContactSource.RECEIVED if self is MailDirection.OUTBOUND else ContactSource.SENT


@dataclass
class ContactSuggestion:
    """One autocomplete candidate, keyed by its normalized email."""

    email: str
    name: str | None = None
    frequency: int = 1
    last_used: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: ContactSource = ContactSource.MANUAL

    def __post_init__(self) -> None:
        self.last_used = parse_timestamp(self.last_used)

    @property
    def domain(self) -> str:
        if "@" not in self.email:
            return self.email
        return self.email.rsplit("@", 1)[1]

    @property
    def display_name(self) -> str:
        if self.name:
            return f"{self.name} <{self.email}>"
        return self.email

    @property
    def short_display_name(self) -> str:
        return self.name or self.email

    @property
    def initials(self) -> str:
        """Up to two uppercase letters for an avatar badge.

        Taken from the first two words of the name, or from the first two
        characters of the email when there is no name.
        """
        if self.name:
            letters = [part[0] for part in self.name.split(" ") if part]
            return "".join(letters[:2]).upper()
        return self.email[:2].upper()

    def to_view(self) -> SuggestionView:
        return SuggestionView(
            email=self.email,
            display_name=self.display_name,
            domain=self.domain,
            initials=self.initials,
        )

    def to_dict(self) -> dict:
        return {
            "email": self.email,
            "name": self.name,
            "frequency": self.frequency,
            "last_used": self.last_used.isoformat(),
            "source": self.source.value,
        }


@dataclass(frozen=True)
class SuggestionView:
    """What a UI needs to render one suggestion row."""

    email: str
    display_name: str
    domain: str
    initials: str


@dataclass
class MailRecord:
    """A single mail message as supplied by the mail collaborator."""

    sender: str
    date: datetime
    direction: MailDirection = MailDirection.INBOUND
    recipients: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.date = parse_timestamp(self.date)

    @classmethod
    def from_dict(cls, data: dict) -> MailRecord:
        """Construct from a decoded JSON object."""
        return cls(
            sender=data["sender"],
            date=data["date"],
            direction=MailDirection(data.get("direction") or "inbound"),
            recipients=list(data.get("recipients") or []),
        )


@dataclass
class ConversationRecord:
    """A conversation thread as supplied by the mail collaborator."""

    participants: list[str]
    last_activity: datetime

    def __post_init__(self) -> None:
        self.last_activity = parse_timestamp(self.last_activity)

    @classmethod
    def from_dict(cls, data: dict) -> ConversationRecord:
        """Construct from a decoded JSON object."""
        return cls(
            participants=list(data.get("participants") or []),
            last_activity=data["last_activity"],
        )


def parse_timestamp(value) -> datetime:
    """Accept a datetime or an ISO-8601 string; naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value)
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
