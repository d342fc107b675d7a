"""Label based merge-readiness classification."""
from typing import AbstractSet, Iterable
from pr_reminder.domain.models import ClassifiedPullRequests, PullRequest


def is_blocked(pull_request: PullRequest, ignore_labels: AbstractSet[str]) -> bool:
    """Whether any label of the pull request is in the ignore set."""
    if not pull_request.is_enriched:
        raise ValueError(f"Pull request #{pull_request.number} has no labels attached")
    return any(name in ignore_labels for name in pull_request.label_names)


def classify(
    pull_requests: Iterable[PullRequest],
    ignore_labels: AbstractSet[str]
) -> ClassifiedPullRequests:
    """Split enriched pull requests into "needs review" and "blocked".

    A pull request carrying at least one ignore label is blocked, any other
    pull request needs review. Input order is kept within each bucket.

    Args:
        pull_requests: Pull requests with labels attached
        ignore_labels: Label names that mark a pull request as not mergeable

    Returns:
        ClassifiedPullRequests with disjoint buckets
    """
    needs_review = []
    blocked = []

    for pr in pull_requests:
        if is_blocked(pr, ignore_labels):
            blocked.append(pr)
        else:
            needs_review.append(pr)

    return ClassifiedPullRequests(
        needs_review=tuple(needs_review),
        blocked=tuple(blocked)
    )
