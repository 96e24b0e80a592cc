"""
Shared pytest fixtures for the PR assignee tests.
"""

import json
import logging
import random
from unittest.mock import Mock

import pytest
import structlog

from pr_assignee.github.client import GitHubClient
from pr_assignee.github.events import PullRequestEvent


# ============================================================================
# Payloads
# ============================================================================

def make_payload(
    action="opened",
    number=42,
    author="contributor",
    assignees=(),
    draft=False,
    repository="octo/widgets",
):
    """Build a minimal pull_request_target payload."""
    return {
        "action": action,
        "number": number,
        "pull_request": {
            "number": number,
            "draft": draft,
            "user": {"login": author},
            "assignees": [{"login": login} for login in assignees],
        },
        "repository": {"full_name": repository},
    }


@pytest.fixture
def payload_factory():
    return make_payload


@pytest.fixture
def payload():
    return make_payload()


@pytest.fixture
def event_file(tmp_path, payload):
    """Write the default payload where GITHUB_EVENT_PATH would point."""
    path = tmp_path / "event.json"
    path.write_text(json.dumps(payload))
    return path


@pytest.fixture
def event():
    return PullRequestEvent(
        action="opened",
        number=42,
        author="contributor",
        assignees=(),
        draft=False,
        repository="octo/widgets",
    )


# ============================================================================
# Client
# ============================================================================

@pytest.fixture
def mock_client():
    """
    A GitHubClient stand-in with a happy-path setup: no collaborators,
    one candidate, and the assignment shows up on read-back.
    """
    client = Mock(spec=GitHubClient)
    client.list_all_collaborators.return_value = []
    client.get_file_text.return_value = "@alice\n"
    client.get_pull_request_assignees.return_value = ["alice"]
    return client


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture
def restore_logging():
    """Undo setup_logging's changes to the root logger and structlog."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
