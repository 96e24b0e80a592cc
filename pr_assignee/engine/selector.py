# =============================================================================
# PR ASSIGNEE - ASSIGNEE SELECTOR
# =============================================================================
"""
Assignee Selector

Decides whether a newly opened pull request should get a random reviewer
assigned and, if so, assigns one and checks that the assignment stuck.

Decision chain (each gate can end the run early):
    1. Event gate: unsupported action or draft PR -> no-op
    2. Already-assigned gate: PR has an assignee -> no-op
    3. Collaborator gate: author is a collaborator (or an ignored bot)
       -> no-op, unless runner debug mode is on
    4. Candidate fetch; empty list -> CandidateListEmptyError
    5. Random pick, assignment, verification; mismatch ->
       AssignmentVerificationError

The selector performs at most one mutation (the add-assignees call).
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from pr_assignee.engine.candidates import fetch_candidates
from pr_assignee.github.client import GitHubClient
from pr_assignee.github.events import PullRequestEvent


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEBUG_TRUE_VALUES = {"true", "1"}

# Add "triage" to also skip PRs from triagers.
DEFAULT_TRUSTED_PERMISSIONS = ("push", "maintain", "admin")

# BumpStdlibs.jl PRs and Dependabot PRs never get an auto-assignee.
DEFAULT_IGNORED_AUTHORS = ("DilumAluthgeBot", "dependabot")

DEFAULT_CANDIDATE_SOURCE = {
    "repo": "JuliaLang/pr-assignment",
    "path": "users.txt",
    "ref": "main",
}


# =============================================================================
# EXCEPTIONS
# =============================================================================


class AssignerError(Exception):
    """
    Base exception for assigner failures.

    Attributes:
        result: The failed RunResult, when raised from a run
    """

    def __init__(self, message: str = "", result: Optional["RunResult"] = None):
        super().__init__(message)
        self.result = result


class CandidateListEmptyError(AssignerError):
    """The candidate file did not contain any usable username."""
    pass


class AssignmentVerificationError(AssignerError):
    """The selected assignee was not found on the PR after assignment."""

    def __init__(
        self,
        assignee: str,
        assignees: List[str],
        result: Optional["RunResult"] = None,
    ):
        super().__init__(
            f"Failed to assign @{assignee}; PR assignees are now {assignees}",
            result=result,
        )
        self.assignee = assignee
        self.assignees = assignees


# =============================================================================
# RESULT
# =============================================================================


class RunOutcome(Enum):
    """How a run ended."""
    ASSIGNED = "assigned"
    ALREADY_ASSIGNED = "already_assigned"
    TRUSTED_AUTHOR = "trusted_author"
    IGNORED_EVENT = "ignored_event"


@dataclass
class RunResult:
    """Outcome of a single selector run."""

    outcome: Optional[RunOutcome] = None
    assignee: Optional[str] = None
    success: bool = True
    messages: List[str] = field(default_factory=list)

    def note(self, message: str, level: int = logging.INFO) -> None:
        """Record a decision and log it."""
        self.messages.append(message)
        logger.log(level, message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "outcome": self.outcome.value if self.outcome else None,
            "assignee": self.assignee,
            "messages": list(self.messages),
        }


# =============================================================================
# DEBUG FLAG
# =============================================================================


def parse_debug_flag(value: Optional[str]) -> bool:
    """
    Interpret the runner debug variable.

    Unset, empty and whitespace-only values are false. After trimming and
    lower-casing, only "true" and "1" are true.
    """
    if value is None:
        return False
    value = value.strip().lower()
    if not value:
        return False
    return value in DEBUG_TRUE_VALUES


# =============================================================================
# SELECTOR
# =============================================================================


class AssigneeSelector:
    """
    Picks and assigns a random reviewer for one pull request.

    Attributes:
        client: GitHubClient bound to the triggering repository
        event: The triggering pull request event
        debug: Runner debug mode; bypasses the collaborator gate
        trusted_permissions: Permission levels whose holders count as trusted
        ignored_authors: Logins always treated as trusted
        candidate_source: {"repo", "path", "ref"} of the candidate file
    """

    def __init__(
        self,
        client: GitHubClient,
        event: PullRequestEvent,
        debug: bool = False,
        trusted_permissions: Optional[List[str]] = None,
        ignored_authors: Optional[List[str]] = None,
        candidate_source: Optional[Dict[str, str]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.client = client
        self.event = event
        self.debug = debug
        self.trusted_permissions = list(
            trusted_permissions if trusted_permissions is not None
            else DEFAULT_TRUSTED_PERMISSIONS
        )
        self.ignored_authors = list(
            ignored_authors if ignored_authors is not None
            else DEFAULT_IGNORED_AUTHORS
        )
        self.candidate_source = {**DEFAULT_CANDIDATE_SOURCE, **(candidate_source or {})}
        self.rng = rng or random.Random()

    # =========================================================================
    # GATES
    # =========================================================================

    def fetch_collaborators(self) -> Set[str]:
        """
        Union the collaborators of every trusted permission level.

        The ignored authors are always part of the set.
        """
        collaborators: Set[str] = set()
        for permission in self.trusted_permissions:
            collaborators.update(self.client.list_all_collaborators(permission))
        collaborators.update(self.ignored_authors)
        return collaborators

    def is_trusted_author(self) -> bool:
        """Whether the PR author is a collaborator or an ignored bot."""
        return self.event.author in self.fetch_collaborators()

    def select(self, candidates: List[str]) -> str:
        """Pick one candidate uniformly at random."""
        if not candidates:
            raise CandidateListEmptyError("Could not find any assignee candidates")
        return self.rng.choice(candidates)

    # =========================================================================
    # RUN
    # =========================================================================

    def run(self) -> RunResult:
        """
        Execute the decision chain for the pull request.

        Returns:
            RunResult for every successful ending, including no-ops. Failures
            raise with the failed RunResult attached as ``error.result``.

        Raises:
            CandidateListEmptyError: If the candidate file has no usernames
            AssignmentVerificationError: If the assignee is missing afterwards
            GitHubAPIError: If a GitHub call fails for good
        """
        result = RunResult()
        event = self.event

        handle, reason = event.should_handle()
        if not handle:
            result.outcome = RunOutcome.IGNORED_EVENT
            result.note(f"Skipping PR #{event.number}: {reason}")
            return result

        logger.info(f"Old PR assignees: {list(event.assignees)}")
        if event.assignees:
            result.outcome = RunOutcome.ALREADY_ASSIGNED
            result.note(
                "Skipping this PR, because it already has at least one assignee"
            )
            return result

        is_collaborator = self.is_trusted_author()
        logger.info(f"PR author: {event.author}")
        logger.info(f"Is collaborator: {is_collaborator}")
        logger.info(f"Runner debug mode: {self.debug}")

        if is_collaborator:
            if not self.debug:
                result.outcome = RunOutcome.TRUSTED_AUTHOR
                result.note(f"Skipping PR authored by collaborator: {event.author}")
                result.note(
                    "Note: to run the full assigner even though the PR author is "
                    "a collaborator, re-run this job with Actions debug logging enabled"
                )
                return result
            result.note(
                f"PR is authored by collaborator {event.author}, but runner debug "
                "mode is on, so the rest of the assigner still runs"
            )

        source = self.candidate_source
        candidates = fetch_candidates(
            self.client, source["repo"], path=source["path"], ref=source["ref"]
        )
        if not candidates:
            msg = "Could not find any assignee candidates"
            result.success = False
            result.note(msg, logging.ERROR)
            raise CandidateListEmptyError(msg, result=result)

        selected = self.select(candidates)
        result.assignee = selected
        result.note(f"Attempting to assign @{selected} to PR #{event.number}...")
        self.client.add_assignees(event.number, [selected])

        new_assignees = self.client.get_pull_request_assignees(event.number)
        logger.info(f"New PR assignees: {new_assignees}")
        if selected not in new_assignees:
            result.success = False
            result.note(f"Failed to assign @{selected}", logging.ERROR)
            raise AssignmentVerificationError(selected, new_assignees, result=result)

        result.outcome = RunOutcome.ASSIGNED
        result.note(f"Successfully assigned @{selected}")
        return result
