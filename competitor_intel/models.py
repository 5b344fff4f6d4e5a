"""
Data models for the competitor intelligence pipeline.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class Competitor:
    """A tracked company, owned by one user."""
    user_id: int
    name: str
    id: Optional[int] = None
    website: Optional[str] = None
    rss_feeds: List[str] = field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0


@dataclass
class NewsArticle:
    """A candidate article fetched from one of the sources. Never persisted."""
    title: str
    url: str
    source: str
    published_at: int
    description: str = ""
    content: Optional[str] = None


@dataclass
class Signal:
    """A classified article about a competitor, as stored."""
    competitor_id: int
    user_id: int
    title: str
    summary: str
    signal_type: str
    source_url: str
    content_hash: str
    id: Optional[int] = None
    sentiment: Optional[str] = None
    source_name: Optional[str] = None
    is_high_priority: bool = False
    published_at: Optional[int] = None
    created_at: int = 0
    notified_at: Optional[int] = None


@dataclass
class UserPreferences:
    """What a user wants surfaced and how it should be delivered."""
    user_id: int
    signal_types: List[str] = field(default_factory=list)
    delivery_email: bool = True
    delivery_dashboard: bool = True
    check_frequency_hours: int = 4
    email_digest_frequency_hours: int = 12
    id: Optional[int] = None


@dataclass
class UserProfile:
    id: int
    email: str
    created_at: int = 0


@dataclass
class SignalAnalysis:
    """Structured classification of one article."""
    summary: str
    signal_type: str
    sentiment: str
    is_high_priority: bool


@dataclass
class ParseResult(Generic[T]):
    """Outcome of validating an external payload.

    Either ``ok`` with a ``value``, or not ok with an ``error`` message.
    """
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "ParseResult[T]":
        return cls(ok=False, error=error)


@dataclass
class DigestGroup:
    """The signals for one competitor within a digest."""
    competitor: Competitor
    signals: List[Signal] = field(default_factory=list)


@dataclass
class DigestRecipient:
    """An email-enabled user together with their address."""
    preferences: UserPreferences
    email: str


class ItemStatus(Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"
    FILTERED = "filtered"
    FAILED = "failed"
    SENT = "sent"
    SKIPPED = "skipped"


@dataclass
class ItemResult:
    """Outcome for one unit of work.

    `label` names the unit: "<competitor>: <title>" for an article, the
    competitor name for a failed fetch, "user <id>" for a digest.
    """
    status: ItemStatus
    label: str
    reason: Optional[str] = None


@dataclass
class CollectionReport:
    """Per-item results of one signal collection run."""
    results: List[ItemResult] = field(default_factory=list)

    @property
    def signals_created(self) -> int:
        return sum(1 for r in self.results if r.status == ItemStatus.CREATED)

    @property
    def failures(self) -> List[ItemResult]:
        return [r for r in self.results if r.status == ItemStatus.FAILED]

    def status_counts(self) -> dict:
        return dict(Counter(r.status.value for r in self.results))


@dataclass
class DigestReport:
    """Per-user results of one digest run."""
    results: List[ItemResult] = field(default_factory=list)

    @property
    def emails_sent(self) -> int:
        return sum(1 for r in self.results if r.status == ItemStatus.SENT)

    @property
    def failures(self) -> List[ItemResult]:
        return [r for r in self.results if r.status == ItemStatus.FAILED]

    def status_counts(self) -> dict:
        return dict(Counter(r.status.value for r in self.results))
