"""Exceptions raised by the reminder pipeline."""
from typing import Optional


class ReminderError(Exception):
    """Base exception for a failed reminder pipeline."""

    def __init__(self, message: str, repository: Optional[str] = None):
        super().__init__(message)
        self.repository = repository


class FetchError(ReminderError):
    """Exception raised when listing open pull requests fails."""
    pass


class LabelFetchError(ReminderError):
    """Exception raised when the labels of one pull request cannot be read."""

    def __init__(self, message: str, pr_number: int, repository: Optional[str] = None):
        super().__init__(message, repository)
        self.pr_number = pr_number


class NotifyError(ReminderError):
    """Exception raised when the webhook delivery fails."""
    pass


class ConfigError(ReminderError):
    """Exception raised when configuration or environment is invalid."""
    pass
