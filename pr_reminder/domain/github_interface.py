"""GitHub API interface (port) for reading pull request data.

This is the anti-corruption layer that shields the domain from GitHub API specifics.
"""
from abc import ABC, abstractmethod
from typing import List
from pr_reminder.domain.models import Label, PullRequest


class IGitHubClient(ABC):
    """Abstract interface for GitHub API operations."""
    
    @abstractmethod
    async def list_open_pull_requests(self, owner: str, repo: str) -> List[PullRequest]:
        """List the open pull requests of a repository.
        
        Args:
            owner: Repository owner or organization
            repo: Repository name
            
        Returns:
            Pull requests without labels attached
        """
        pass
    
    @abstractmethod
    async def list_issue_labels(self, owner: str, repo: str, number: int) -> List[Label]:
        """List the labels attached to a pull request.
        
        Args:
            owner: Repository owner or organization
            repo: Repository name
            number: Pull request number
            
        Returns:
            Labels in the order GitHub returns them
        """
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
