# =============================================================================
# PR ASSIGNEE - PULL REQUEST EVENT PAYLOAD
# =============================================================================
"""
Pull Request Event Payload

Reads the event payload GitHub Actions writes to ``GITHUB_EVENT_PATH`` and
turns it into a small read-only :class:`PullRequestEvent`.

Supported Events:
    - pull_request_target: opened, reopened, ready_for_review
    - pull_request: same actions (useful when testing the workflow on forks)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class EventPayloadError(Exception):
    """Raised when the event payload cannot be read or parsed."""
    pass


# =============================================================================
# CONSTANTS
# =============================================================================

SUPPORTED_EVENTS = {"pull_request_target", "pull_request"}

SUPPORTED_ACTIONS = {"opened", "reopened", "ready_for_review"}


# =============================================================================
# EVENT MODEL
# =============================================================================


@dataclass(frozen=True)
class PullRequestEvent:
    """
    The parts of a pull request event the assigner looks at.

    Attributes:
        action: Event action (opened, reopened, ...)
        number: Pull request number
        author: Login of the pull request author
        assignees: Assignee logins at the time the event was emitted
        draft: Whether the pull request is a draft
        repository: Repository in owner/repo format
    """

    action: str
    number: int
    author: str
    assignees: Tuple[str, ...] = field(default_factory=tuple)
    draft: bool = False
    repository: Optional[str] = None

    @classmethod
    def from_payload(
        cls,
        payload: Dict[str, Any],
        repository: Optional[str] = None,
    ) -> "PullRequestEvent":
        """
        Build an event from a decoded webhook payload.

        Args:
            payload: Decoded event payload
            repository: owner/repo; read from the payload when omitted

        Raises:
            EventPayloadError: If required fields are missing
        """
        pull_request = payload.get("pull_request")
        if not isinstance(pull_request, dict):
            raise EventPayloadError("Payload has no pull_request object")

        number = pull_request.get("number")
        if not isinstance(number, int):
            raise EventPayloadError("Payload has no pull_request.number")

        author = (pull_request.get("user") or {}).get("login")
        if not author:
            raise EventPayloadError("Payload has no pull_request.user.login")

        raw_assignees = pull_request.get("assignees") or []
        if not isinstance(raw_assignees, list) or not all(
            isinstance(assignee, dict) for assignee in raw_assignees
        ):
            raise EventPayloadError("Payload has malformed pull_request.assignees")
        assignees = tuple(
            assignee["login"] for assignee in raw_assignees if assignee.get("login")
        )

        if repository is None:
            repository = (payload.get("repository") or {}).get("full_name")

        return cls(
            action=payload.get("action", ""),
            number=number,
            author=author,
            assignees=assignees,
            draft=bool(pull_request.get("draft", False)),
            repository=repository,
        )

    def should_handle(self) -> Tuple[bool, str]:
        """
        Check whether this event should go through the assigner.

        Returns:
            (handle, reason)
        """
        if self.action not in SUPPORTED_ACTIONS:
            return False, f"Unhandled action: {self.action}"
        if self.draft:
            return False, "Pull request is a draft"
        return True, ""


# =============================================================================
# LOADING
# =============================================================================


def load_event(
    event_path: str,
    event_name: Optional[str] = None,
    repository: Optional[str] = None,
) -> PullRequestEvent:
    """
    Load the triggering pull request event.

    Args:
        event_path: Path of the JSON payload (``GITHUB_EVENT_PATH``)
        event_name: Event name (``GITHUB_EVENT_NAME``); checked when given
        repository: owner/repo (``GITHUB_REPOSITORY``)

    Returns:
        PullRequestEvent

    Raises:
        EventPayloadError: If the payload is missing, malformed, or not a
            pull request event
    """
    if event_name and event_name not in SUPPORTED_EVENTS:
        raise EventPayloadError(f"Unsupported event type: {event_name}")

    try:
        body = Path(event_path).read_bytes()
    except OSError as e:
        raise EventPayloadError(f"Cannot read event payload {event_path}: {e}")

    try:
        payload = json.loads(body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise EventPayloadError(f"Invalid JSON payload: {e}")

    if not isinstance(payload, dict):
        raise EventPayloadError("Event payload is not a JSON object")

    event = PullRequestEvent.from_payload(payload, repository=repository)
    logger.debug(f"Loaded {event_name or 'pull request'}.{event.action} for PR #{event.number}")
    return event
