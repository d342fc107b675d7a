"""Domain models representing core business entities."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from pr_reminder.domain.errors import ReminderError


@dataclass(frozen=True)
class Label:
    """A label attached to a pull request."""
    name: str


@dataclass(frozen=True)
class PullRequest:
    """Immutable domain entity representing an open GitHub pull request.

    Labels are not part of the listing response. They stay ``None`` until
    the enrichment step attaches them through ``with_labels``.
    """
    number: int
    title: str
    author: str
    created_at: datetime
    url: str
    body: Optional[str] = None
    labels: Optional[Tuple[Label, ...]] = None

    @property
    def is_enriched(self) -> bool:
        """Whether labels have been attached."""
        return self.labels is not None

    @property
    def label_names(self) -> Tuple[str, ...]:
        """Names of the attached labels, empty before enrichment."""
        return tuple(label.name for label in self.labels or ())

    def with_labels(self, labels) -> 'PullRequest':
        """Returns a new PullRequest instance with the provided labels.

        Raises:
            ValueError: If labels were already attached
        """
        if self.labels is not None:
            raise ValueError(f"Pull request #{self.number} is already enriched")
        return PullRequest(
            number=self.number,
            title=self.title,
            author=self.author,
            created_at=self.created_at,
            url=self.url,
            body=self.body,
            labels=tuple(labels)
        )


@dataclass(frozen=True)
class RepositoryConfig:
    """Immutable settings for one monitored repository."""
    owner: str
    name: str
    channel: str
    display_name: str
    icon: str
    ignore_labels: FrozenSet[str] = frozenset()
    deployment_footer: bool = False

    @property
    def full_name(self) -> str:
        """Returns the full repository name (owner/name)."""
        return f"{self.owner}/{self.name}"

    @property
    def display_slug(self) -> str:
        """Returns the name shown in notifications (owner-name)."""
        return f"{self.owner}-{self.name}"


@dataclass(frozen=True)
class ReminderConfig:
    """The full set of repositories monitored by one run."""
    company: str
    repositories: Tuple[RepositoryConfig, ...]


@dataclass(frozen=True)
class ClassifiedPullRequests:
    """Pull requests split by merge readiness."""
    needs_review: Tuple[PullRequest, ...] = ()
    blocked: Tuple[PullRequest, ...] = ()

    @property
    def total(self) -> int:
        return len(self.needs_review) + len(self.blocked)

    @property
    def is_empty(self) -> bool:
        return self.total == 0


@dataclass(frozen=True)
class NotificationMessage:
    """A formatted message ready for delivery to one channel."""
    repository: str
    channel: str
    display_name: str
    icon: str
    text: str


@dataclass(frozen=True)
class RepositoryOutcome:
    """Result of the reminder pipeline for one repository."""
    repository: str
    succeeded: bool
    pull_request_count: int = 0
    error: Optional['ReminderError'] = None


@dataclass(frozen=True)
class RunReport:
    """Metrics for a reminder run across all repositories."""
    outcomes: Tuple[RepositoryOutcome, ...] = field(default_factory=tuple)
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> Tuple[str, ...]:
        return tuple(o.repository for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> Tuple[str, ...]:
        return tuple(o.repository for o in self.outcomes if not o.succeeded)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed
