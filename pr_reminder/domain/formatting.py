"""Slack message formatting for pull request reminders."""
import math
from datetime import datetime
from typing import Callable
from pr_reminder.domain.models import (
    ClassifiedPullRequests,
    NotificationMessage,
    PullRequest,
    RepositoryConfig,
)


SECONDS_PER_HOUR = 3600

# (minimum age in hours, marker), highest threshold first
URGENCY_MARKERS = (
    (12, ":bangbang::exclamation::angry:"),
    (6, ":bangbang:"),
    (3, ":exclamation:"),
)

NO_ACTIVE_PULL_REQUESTS = ">No active pull requests :tada:"


def hours_old(created_at: datetime, now: datetime) -> int:
    """Whole hours elapsed since creation, rounded half up.

    Timestamps in the future count as zero hours old.
    """
    elapsed = (now - created_at).total_seconds() / SECONDS_PER_HOUR
    return max(0, math.floor(elapsed + 0.5))


def reminder_text(hours: int) -> str:
    """Age of a pull request with an urgency marker that escalates at 3, 6 and 12 hours."""
    hours = max(0, hours)
    message = f"{hours} hours ago"
    for threshold, marker in URGENCY_MARKERS:
        if hours >= threshold:
            return f"{message} {marker}"
    return message


def minutes_until_next_deploy(now: datetime) -> int:
    """Minutes until the next automatic deployment.

    Assumes one deployment at the top of every hour, so the value is an
    estimate for display only.
    """
    return 60 - now.minute


def _format_entry(index: int, pr: PullRequest, now: datetime) -> str:
    title_line = f">* ({index}) {pr.title}*"
    if pr.body:
        title_line += f" - {pr.body}"
    age = reminder_text(hours_old(pr.created_at, now))
    return (
        f"{title_line}\n"
        f">_Raised by {pr.author} {age}_\n"
        f">{pr.url}\n\n"
    )


def compose_message(
    classified: ClassifiedPullRequests,
    repo_config: RepositoryConfig,
    now_provider: Callable[[], datetime]
) -> str:
    """Build the reminder text for one repository.

    Args:
        classified: The repository's classified pull requests
        repo_config: Settings of the repository being reported
        now_provider: Returns the current time, called once

    Returns:
        Slack formatted message text
    """
    now = now_provider()
    slug = repo_config.display_slug

    message = f"*The current status of github {slug} is:*\n"

    if classified.is_empty:
        message += f"{NO_ACTIVE_PULL_REQUESTS}\n\n"
    else:
        message += f">Outstanding pull requests: {classified.total}\n"
        message += f">Don't merge now: {len(classified.blocked)}\n"
        message += f">Review Needed: {len(classified.needs_review)}\n\n"

        if classified.needs_review:
            message += "*Review Needed:*\n"
            for index, pr in enumerate(classified.needs_review, start=1):
                message += _format_entry(index, pr, now)

    if repo_config.deployment_footer:
        message += (
            f"*:stopwatch: Next automatic deployment for {slug} in "
            f"{minutes_until_next_deploy(now)} minutes :stopwatch:*"
        )

    return message


def build_notification(
    classified: ClassifiedPullRequests,
    repo_config: RepositoryConfig,
    now_provider: Callable[[], datetime]
) -> NotificationMessage:
    """Compose the message and address it to the repository's channel."""
    return NotificationMessage(
        repository=repo_config.full_name,
        channel=repo_config.channel,
        display_name=repo_config.display_name,
        icon=repo_config.icon,
        text=compose_message(classified, repo_config, now_provider)
    )
