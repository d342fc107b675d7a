"""GitHub GraphQL API client implementation with rate limiting and retry logic."""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from gql import gql, Client
from gql.client import AsyncClientSession
from gql.transport.aiohttp import AIOHTTPTransport
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)
from pr_reminder.domain.github_interface import IGitHubClient
from pr_reminder.domain.models import Label, PullRequest


logger = logging.getLogger(__name__)


GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"


class RateLimitException(Exception):
    """Exception raised when rate limit is hit."""
    pass


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO 8601 timestamp into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_pull_request(node: Dict[str, Any]) -> PullRequest:
    """Transform a GraphQL pull request node into a domain entity."""
    # Deleted accounts come back as a null author
    author = (node.get("author") or {}).get("login") or "ghost"
    return PullRequest(
        number=node["number"],
        title=node.get("title") or "",
        author=author,
        created_at=parse_timestamp(node["createdAt"]),
        url=node.get("url") or "",
        body=node.get("body") or None
    )


def parse_labels(nodes: List[Dict[str, Any]]) -> List[Label]:
    """Transform GraphQL label nodes into domain entities."""
    return [Label(name=node["name"]) for node in nodes if node and node.get("name")]


class GitHubGraphQLClient(IGitHubClient):
    """GitHub GraphQL API client with rate limiting and retry mechanisms.

    Implements the IGitHubClient port, providing an anti-corruption layer
    between the domain and GitHub's API. One connected session is shared by
    all concurrent queries.
    """

    OPEN_PULL_REQUESTS_QUERY = gql("""
        query OpenPullRequests($owner: String!, $name: String!, $cursor: String) {
            repository(owner: $owner, name: $name) {
                pullRequests(
                    states: OPEN
                    first: 100
                    after: $cursor
                    orderBy: {field: CREATED_AT, direction: DESC}
                ) {
                    pageInfo {
                        hasNextPage
                        endCursor
                    }
                    nodes {
                        number
                        title
                        body
                        url
                        createdAt
                        author {
                            login
                        }
                    }
                }
            }
            rateLimit {
                remaining
                resetAt
            }
        }
    """)

    PULL_REQUEST_LABELS_QUERY = gql("""
        query PullRequestLabels($owner: String!, $name: String!, $number: Int!) {
            repository(owner: $owner, name: $name) {
                pullRequest(number: $number) {
                    labels(first: 100) {
                        nodes {
                            name
                        }
                    }
                }
            }
            rateLimit {
                remaining
                resetAt
            }
        }
    """)

    def __init__(self, access_token: str, user_agent: str = "pr-reminder", timeout_seconds: int = 5):
        """Initialize GitHub client.

        Args:
            access_token: GitHub personal access token
            user_agent: User-Agent header, usually the organization name
            timeout_seconds: Timeout applied to each GraphQL request
        """
        self._access_token = access_token
        self._user_agent = user_agent
        self._timeout_seconds = timeout_seconds
        self._client: Optional[Client] = None
        self._session: Optional[AsyncClientSession] = None
        self._connect_lock = asyncio.Lock()
        self._rate_limit_remaining: int = 5000
        self._rate_limit_reset_at: Optional[datetime] = None

    async def _get_session(self) -> AsyncClientSession:
        """Connect the GraphQL client once (lazy initialization)."""
        async with self._connect_lock:
            if self._session is None:
                headers = {
                    "Authorization": f"Bearer {self._access_token}",
                    "User-Agent": self._user_agent
                }
                transport = AIOHTTPTransport(
                    url=GITHUB_GRAPHQL_URL,
                    headers=headers
                )
                self._client = Client(
                    transport=transport,
                    fetch_schema_from_transport=False,
                    execute_timeout=self._timeout_seconds
                )
                self._session = await self._client.connect_async()
        return self._session

    async def _check_rate_limit(self) -> None:
        """Check and handle rate limiting."""
        if self._rate_limit_remaining <= 10:
            if self._rate_limit_reset_at:
                wait_time = (self._rate_limit_reset_at - datetime.now(timezone.utc)).total_seconds()
                if wait_time > 0:
                    logger.warning(
                        f"Rate limit nearly exhausted. Waiting {wait_time:.0f} seconds "
                        f"until reset at {self._rate_limit_reset_at}"
                    )
                    await asyncio.sleep(wait_time + 1)  # Add 1 second buffer

    def _update_rate_limit(self, result: Dict[str, Any]) -> None:
        rate_limit = result.get("rateLimit") or {}
        self._rate_limit_remaining = rate_limit.get("remaining", self._rate_limit_remaining)
        reset_at_str = rate_limit.get("resetAt")
        if reset_at_str:
            self._rate_limit_reset_at = parse_timestamp(reset_at_str)
        logger.debug(
            f"Rate limit remaining: {self._rate_limit_remaining}, "
            f"resets at: {self._rate_limit_reset_at}"
        )

    @retry(
        retry=retry_if_exception_type((RateLimitException, asyncio.TimeoutError)),
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=1, min=4, max=60),
        reraise=True
    )
    async def _execute_query(self, query, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Execute GraphQL query with retry logic.

        Args:
            query: Parsed GraphQL document
            variables: Query variables

        Returns:
            Query result dictionary

        Raises:
            RateLimitException: When rate limit is hit
        """
        session = await self._get_session()
        await self._check_rate_limit()

        try:
            result = await session.execute(query, variable_values=variables)
        except Exception as e:
            logger.error(f"Error executing GraphQL query: {e}")
            if "rate limit" in str(e).lower():
                raise RateLimitException(str(e))
            raise

        self._update_rate_limit(result)
        return result

    @staticmethod
    def _repository(result: Dict[str, Any], owner: str, repo: str) -> Dict[str, Any]:
        repository = result.get("repository")
        if repository is None:
            raise LookupError(f"Repository {owner}/{repo} not found")
        return repository

    async def list_open_pull_requests(self, owner: str, repo: str) -> List[PullRequest]:
        """List open pull requests, newest first.

        Follows pagination until every open pull request is read.

        Args:
            owner: Repository owner or organization
            repo: Repository name

        Returns:
            PullRequest domain entities without labels
        """
        pull_requests: List[PullRequest] = []
        cursor = None

        while True:
            result = await self._execute_query(
                self.OPEN_PULL_REQUESTS_QUERY,
                {"owner": owner, "name": repo, "cursor": cursor}
            )
            connection = self._repository(result, owner, repo).get("pullRequests") or {}
            page_info = connection.get("pageInfo") or {}

            for node in connection.get("nodes") or []:
                if node:
                    pull_requests.append(parse_pull_request(node))

            if not page_info.get("hasNextPage"):
                break

            cursor = page_info.get("endCursor")
            logger.debug(f"Fetched {len(pull_requests)} pull requests from {owner}/{repo} so far")

        return pull_requests

    async def list_issue_labels(self, owner: str, repo: str, number: int) -> List[Label]:
        """List the labels attached to one pull request.

        Args:
            owner: Repository owner or organization
            repo: Repository name
            number: Pull request number

        Returns:
            Label domain entities
        """
        result = await self._execute_query(
            self.PULL_REQUEST_LABELS_QUERY,
            {"owner": owner, "name": repo, "number": number}
        )
        pull_request = self._repository(result, owner, repo).get("pullRequest")
        if pull_request is None:
            raise LookupError(f"Pull request {owner}/{repo}#{number} not found")
        return parse_labels((pull_request.get("labels") or {}).get("nodes") or [])

    async def close(self) -> None:
        """Close the GraphQL client and transport."""
        if self._client and self._session:
            await self._client.close_async()
            self._session = None
            self._client = None
