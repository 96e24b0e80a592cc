# =============================================================================
# PR ASSIGNEE
# =============================================================================
"""
PR Assignee

Assigns a random reviewer from an external allow-list to newly opened pull
requests, skipping PRs from collaborators and PRs that already have an
assignee.

Packages:
    - pr_assignee.github: GitHub REST client and event payload loading
    - pr_assignee.engine: Candidate parsing and the assignee selector

Entry point:
    python -m pr_assignee.main
"""

__version__ = "1.0.0"
