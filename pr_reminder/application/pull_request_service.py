"""Service fetching open pull requests and attaching their labels."""
import asyncio
import logging
from typing import List
from pr_reminder.domain.errors import FetchError, LabelFetchError
from pr_reminder.domain.github_interface import IGitHubClient
from pr_reminder.domain.models import PullRequest, RepositoryConfig


logger = logging.getLogger(__name__)


class PullRequestService:
    """Application service for reading a repository's open pull requests.

    Listing and label lookups are delegated to the GitHub client; this
    service only sequences them and translates failures.
    """

    def __init__(self, github_client: IGitHubClient):
        """Initialize pull request service.

        Args:
            github_client: GitHub API client implementation
        """
        self._github_client = github_client

    async def fetch_enriched(self, repo_config: RepositoryConfig) -> List[PullRequest]:
        """Fetch open pull requests with their labels attached.

        Label lookups run concurrently. The result keeps the listing order.

        Args:
            repo_config: Repository to read

        Returns:
            Enriched pull requests

        Raises:
            FetchError: When the pull request listing fails
            LabelFetchError: When any label lookup fails
        """
        repository = repo_config.full_name

        try:
            pull_requests = await self._github_client.list_open_pull_requests(
                repo_config.owner, repo_config.name
            )
        except Exception as e:
            raise FetchError(
                f"Failed to list pull requests for {repository}: {e}",
                repository=repository
            ) from e

        logger.info(f"Fetched {len(pull_requests)} open pull requests for {repository}")

        results = await asyncio.gather(
            *[self._attach_labels(repo_config, pr) for pr in pull_requests],
            return_exceptions=True
        )

        for pr, result in zip(pull_requests, results):
            if isinstance(result, BaseException):
                raise LabelFetchError(
                    f"Failed to fetch labels for {repository}#{pr.number}: {result}",
                    pr_number=pr.number,
                    repository=repository
                ) from result

        return list(results)

    async def _attach_labels(self, repo_config: RepositoryConfig, pr: PullRequest) -> PullRequest:
        labels = await self._github_client.list_issue_labels(
            repo_config.owner, repo_config.name, pr.number
        )
        return pr.with_labels(labels)
