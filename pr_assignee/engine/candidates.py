# =============================================================================
# PR ASSIGNEE - CANDIDATE LIST
# =============================================================================
"""
Candidate List

The assignable reviewers live in a plain text file in a separate, trusted
repository (``JuliaLang/pr-assignment``, ``users.txt`` on ``main``). Committers
who want to be assigned to new PRs add their GitHub username to that file.

File format, one entry per line::

    @alice
    @bob-2   # optional trailing comment

Anything else (blank lines, prose, headings) is ignored.
"""

import logging
import re
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from pr_assignee.github.client import GitHubClient


logger = logging.getLogger(__name__)


CANDIDATE_PATTERN = re.compile(r"^@([A-Za-z0-9-]+)\s*(?:#.*)?$")


def parse_candidate_line(line: str):
    """Return the username on a candidate line, or None."""
    match = CANDIDATE_PATTERN.match(line.strip().strip("\ufeff"))
    if match is None:
        return None
    return match.group(1)


def parse_candidates(text: str) -> List[str]:
    """
    Extract candidate usernames from the contents of the candidate file.

    Arguments:
        text: the decoded file contents

    Returns:
        Usernames in order of appearance, without the leading ``@``.
    """
    candidates = []
    for line in text.split("\n"):
        username = parse_candidate_line(line)
        if username is not None:
            candidates.append(username)
    return candidates


def fetch_candidates(
    client: "GitHubClient",
    repo: str,
    path: str = "users.txt",
    ref: str = "main",
) -> List[str]:
    """
    Fetch and parse the candidate file.

    Arguments:
        client: API client used for the request
        repo: owner/repo holding the candidate file
        path: path of the file inside ``repo``
        ref: branch, tag or commit to read

    Returns:
        The parsed candidate usernames, possibly empty.
    """
    text = client.get_file_text(path, ref=ref, repo=repo)
    candidates = parse_candidates(text)
    logger.info(f"Assignee candidates from {repo}/{path}@{ref}: {candidates}")
    return candidates
