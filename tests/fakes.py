"""In-memory implementations of the domain ports used by the tests."""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple
from pr_reminder.domain.github_interface import IGitHubClient
from pr_reminder.domain.models import Label, PullRequest, RepositoryConfig
from pr_reminder.domain.notifier_interface import INotifier


NOW = datetime(2024, 1, 1, 12, 15, 0, tzinfo=timezone.utc)


def make_pr(number: int, hours: float = 1, body: Optional[str] = None, labels=None) -> PullRequest:
    pr = PullRequest(
        number=number,
        title=f"Change {number}",
        author="alice",
        created_at=NOW - timedelta(hours=hours),
        url=f"https://github.com/acme/web/pull/{number}",
        body=body
    )
    if labels is not None:
        pr = pr.with_labels(Label(name=name) for name in labels)
    return pr


def make_repo(name: str = "web", ignore_labels=("do not merge",), deployment_footer: bool = False) -> RepositoryConfig:
    return RepositoryConfig(
        owner="acme",
        name=name,
        channel=f"#{name}-dev",
        display_name="PR Reminder",
        icon=":robot_face:",
        ignore_labels=frozenset(ignore_labels),
        deployment_footer=deployment_footer
    )


class FakeGitHubClient(IGitHubClient):
    """Serves pull requests and labels from dictionaries keyed by repository."""

    def __init__(self):
        self.pull_requests: Dict[str, List[PullRequest]] = {}
        self.labels: Dict[Tuple[str, int], List[str]] = {}
        self.failing_listings = set()
        self.failing_labels = set()
        self.label_errors: Dict[Tuple[str, int], BaseException] = {}
        self.label_calls: List[Tuple[str, int]] = []
        self.closed = False

    async def list_open_pull_requests(self, owner, repo):
        await asyncio.sleep(0)
        if repo in self.failing_listings:
            raise RuntimeError("listing failed")
        return list(self.pull_requests.get(repo, []))

    async def list_issue_labels(self, owner, repo, number):
        # Later pull requests resolve first to exercise ordering
        await asyncio.sleep(0.001 * (10 - number % 10))
        self.label_calls.append((repo, number))
        if (repo, number) in self.failing_labels:
            raise RuntimeError(f"labels for #{number} failed")
        if (repo, number) in self.label_errors:
            raise self.label_errors[(repo, number)]
        return [Label(name=name) for name in self.labels.get((repo, number), [])]

    async def close(self):
        self.closed = True


class FakeNotifier(INotifier):
    """Records posted messages instead of sending them."""

    def __init__(self, accept: bool = True, error: Optional[Exception] = None):
        self.accept = accept
        self.error = error
        self.posts: List[Dict[str, str]] = []
        self.closed = False

    async def post(self, message, channel, display_name, icon):
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        self.posts.append({
            "message": message,
            "channel": channel,
            "display_name": display_name,
            "icon": icon,
        })
        return self.accept

    async def close(self):
        self.closed = True
