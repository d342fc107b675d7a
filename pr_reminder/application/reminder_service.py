"""Reminder service orchestrating the per-repository notification runs."""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional
from pr_reminder.application.pull_request_service import PullRequestService
from pr_reminder.domain.classifier import classify
from pr_reminder.domain.errors import NotifyError, ReminderError
from pr_reminder.domain.formatting import build_notification
from pr_reminder.domain.github_interface import IGitHubClient
from pr_reminder.domain.models import RepositoryConfig, RepositoryOutcome, RunReport
from pr_reminder.domain.notifier_interface import INotifier


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReminderService:
    """Application service for sending pull request reminders.

    Runs one fetch, classify, compose and notify pipeline per repository.
    Pipelines run concurrently and a failure in one never stops the others.
    """

    def __init__(
        self,
        github_client: IGitHubClient,
        notifier: INotifier,
        max_concurrency: int = 5,
        now_provider: Optional[Callable[[], datetime]] = None
    ):
        """Initialize reminder service.

        Args:
            github_client: GitHub API client implementation
            notifier: Messaging client implementation
            max_concurrency: Number of repositories processed at once
            now_provider: Clock used for pull request ages, UTC now by default
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._github_client = github_client
        self._notifier = notifier
        self._pull_requests = PullRequestService(github_client)
        self._max_concurrency = max_concurrency
        self._now_provider = now_provider or utc_now

    async def remind_repository(self, repo_config: RepositoryConfig) -> RepositoryOutcome:
        """Run the reminder pipeline for one repository.

        Args:
            repo_config: Repository to report on

        Returns:
            RepositoryOutcome of a successful run

        Raises:
            FetchError: When the pull request listing fails
            LabelFetchError: When any label lookup fails
            NotifyError: When the message is not delivered
        """
        repository = repo_config.full_name

        pull_requests = await self._pull_requests.fetch_enriched(repo_config)
        classified = classify(pull_requests, repo_config.ignore_labels)
        logger.info(
            f"{repository}: {len(classified.needs_review)} need review, "
            f"{len(classified.blocked)} blocked"
        )

        notification = build_notification(classified, repo_config, self._now_provider)

        try:
            delivered = await self._notifier.post(
                notification.text,
                notification.channel,
                notification.display_name,
                notification.icon
            )
        except Exception as e:
            raise NotifyError(
                f"Failed to notify {notification.channel} for {repository}: {e}",
                repository=repository
            ) from e

        if not delivered:
            raise NotifyError(
                f"Notification to {notification.channel} for {repository} was rejected",
                repository=repository
            )

        logger.info(f"Sent reminder for {repository} to {notification.channel}")

        return RepositoryOutcome(
            repository=repository,
            succeeded=True,
            pull_request_count=classified.total
        )

    async def _settle(self, semaphore: asyncio.Semaphore, repo_config: RepositoryConfig) -> RepositoryOutcome:
        repository = repo_config.full_name
        async with semaphore:
            try:
                return await self.remind_repository(repo_config)
            except ReminderError as e:
                logger.error(f"Reminder failed for {repository}: {e}")
                return RepositoryOutcome(repository=repository, succeeded=False, error=e)
            except Exception as e:
                logger.error(f"Unexpected error for {repository}: {e}", exc_info=True)
                error = ReminderError(str(e), repository=repository)
                error.__cause__ = e
                return RepositoryOutcome(repository=repository, succeeded=False, error=error)

    async def run(self, repositories: Iterable[RepositoryConfig]) -> RunReport:
        """Send reminders for every configured repository.

        Completes once every pipeline has settled.

        Args:
            repositories: Repositories to report on

        Returns:
            RunReport with one outcome per repository, in input order
        """
        start_time = time.time()
        repositories = list(repositories)
        semaphore = asyncio.Semaphore(self._max_concurrency)

        logger.info(f"Starting reminders for {len(repositories)} repositories")

        outcomes = await asyncio.gather(
            *[self._settle(semaphore, repo_config) for repo_config in repositories]
        )

        report = RunReport(
            outcomes=tuple(outcomes),
            duration_seconds=time.time() - start_time
        )

        logger.info(
            f"Reminders completed: {len(report.succeeded)} succeeded, "
            f"{len(report.failed)} failed in {report.duration_seconds:.2f} seconds"
        )

        return report

    async def close(self) -> None:
        """Close connections."""
        await self._github_client.close()
        await self._notifier.close()
