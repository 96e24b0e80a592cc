# =============================================================================
# PR ASSIGNEE - GITHUB INTEGRATION PACKAGE
# =============================================================================
"""
GitHub Integration Package

Everything the assigner needs to talk to GitHub.

Components:
    - GitHubClient: Low-level REST client with retry and error mapping
    - PullRequestEvent: The triggering event payload

Usage:
    from pr_assignee.github import GitHubClient, load_event

    event = load_event(os.environ["GITHUB_EVENT_PATH"])
    client = GitHubClient(token="ghp_xxx", repo="owner/repo")
    client.add_assignees(event.number, ["alice"])
"""

from pr_assignee.github.client import (
    GitHubClient,
    GitHubAPIError,
    RateLimitError,
    NotFoundError,
    AuthenticationError,
    ValidationError,
)

from pr_assignee.github.events import (
    PullRequestEvent,
    EventPayloadError,
    load_event,
    SUPPORTED_ACTIONS,
    SUPPORTED_EVENTS,
)

__all__ = [
    # Client
    "GitHubClient",
    # Client Exceptions
    "GitHubAPIError",
    "RateLimitError",
    "NotFoundError",
    "AuthenticationError",
    "ValidationError",
    # Events
    "PullRequestEvent",
    "EventPayloadError",
    "load_event",
    "SUPPORTED_ACTIONS",
    "SUPPORTED_EVENTS",
]
