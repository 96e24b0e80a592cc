"""Assignment decision logic: candidate parsing and the assignee selector."""

from pr_assignee.engine.candidates import (
    CANDIDATE_PATTERN,
    fetch_candidates,
    parse_candidate_line,
    parse_candidates,
)
from pr_assignee.engine.selector import (
    AssigneeSelector,
    AssignerError,
    AssignmentVerificationError,
    CandidateListEmptyError,
    RunOutcome,
    RunResult,
    parse_debug_flag,
)

__all__ = [
    "CANDIDATE_PATTERN",
    "fetch_candidates",
    "parse_candidate_line",
    "parse_candidates",
    "AssigneeSelector",
    "AssignerError",
    "AssignmentVerificationError",
    "CandidateListEmptyError",
    "RunOutcome",
    "RunResult",
    "parse_debug_flag",
]
