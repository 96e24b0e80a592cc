# =============================================================================
# PR ASSIGNEE - MAIN ENTRY POINT
# =============================================================================
"""
PR Assignee Main Module

Entry point run by the "PR Assignee" GitHub Actions workflow on
``pull_request_target`` events. It assigns a random reviewer from the
candidate list to newly opened pull requests.

Security note: the workflow runs with a write-scoped token, so it must never
check out or execute code from the pull request. Only the base branch (this
package) runs.

Usage:
    python -m pr_assignee.main

The script has no flags. It reads the runtime context GitHub Actions
provides through environment variables; everything else is fixed in
``settings.yaml``.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from monitoring.logger import log_context, setup_logging
from pr_assignee.engine.selector import (
    AssigneeSelector,
    AssignerError,
    RunResult,
    parse_debug_flag,
)
from pr_assignee.github.client import GitHubAPIError, GitHubClient
from pr_assignee.github.events import EventPayloadError, load_event

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

SETTINGS_PATH = Path(__file__).with_name("settings.yaml")

# Runtime context set by the Actions runner
ENV_MAPPINGS = {
    "GITHUB_TOKEN": ("github", "token"),
    "GITHUB_REPOSITORY": ("github", "repository"),
    "GITHUB_API_URL": ("github", "api_url"),
    "GITHUB_EVENT_PATH": ("event", "path"),
    "GITHUB_EVENT_NAME": ("event", "name"),
    "RUNNER_DEBUG": ("runner", "debug"),
}

DEFAULTS = {
    "github": {
        "token": "",
        "repository": "",
        "api_url": "https://api.github.com",
        "timeout": 30,
        "retries": 5,
        "backoff_factor": 1.0,
        "retry_exempt_status_codes": [404],
    },
    "event": {
        "path": "",
        "name": "",
    },
    "runner": {
        "debug": False,
    },
    "collaborators": {
        "trusted_permissions": ["push", "maintain", "admin"],
        "ignored_authors": ["DilumAluthgeBot", "dependabot"],
    },
    "candidates": {
        "repo": "JuliaLang/pr-assignment",
        "path": "users.txt",
        "ref": "main",
    },
    "logging": {
        "level": "INFO",
        "format": "text",
    },
}


class ConfigError(Exception):
    """Raised when required runtime context is missing."""
    pass


def load_config(
    settings_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Load the fixed settings and overlay the runner's environment.

    Args:
        settings_path: Path to settings.yaml (default: the packaged file)
        environ: Environment mapping (default: os.environ)

    Returns:
        Merged configuration dictionary
    """
    settings_path = settings_path or SETTINGS_PATH
    environ = os.environ if environ is None else environ

    config: Dict[str, Any] = {}

    if settings_path.exists():
        with open(settings_path) as f:
            config = yaml.safe_load(f) or {}
        logger.debug(f"Loaded settings from {settings_path}")
    else:
        logger.warning(f"Settings file not found: {settings_path}, using defaults")

    for env_var, (section, key) in ENV_MAPPINGS.items():
        value = environ.get(env_var)
        if value is not None:
            config.setdefault(section, {})[key] = value

    # Empty values mean "not set"; GITHUB_API_URL can be blank on some runners
    if not config.get("github", {}).get("api_url"):
        config.get("github", {}).pop("api_url", None)

    for section, section_defaults in DEFAULTS.items():
        config.setdefault(section, {})
        for key, default_value in section_defaults.items():
            config[section].setdefault(key, default_value)

    raw_debug = config["runner"]["debug"]
    if isinstance(raw_debug, str):
        config["runner"]["debug"] = parse_debug_flag(raw_debug)
    else:
        config["runner"]["debug"] = bool(raw_debug)

    return config


def validate_config(config: Dict[str, Any]) -> None:
    """
    Check that the runner supplied everything a run needs.

    Raises:
        ConfigError: If the token, repository or event path is missing
    """
    missing = []
    if not config["github"]["token"]:
        missing.append("GITHUB_TOKEN")
    if not config["github"]["repository"]:
        missing.append("GITHUB_REPOSITORY")
    if not config["event"]["path"]:
        missing.append("GITHUB_EVENT_PATH")
    if missing:
        raise ConfigError(f"Missing environment variables: {', '.join(missing)}")

    owner, _, name = config["github"]["repository"].partition("/")
    if not owner or not name:
        raise ConfigError(
            f"Invalid GITHUB_REPOSITORY: {config['github']['repository']}. "
            "Expected format: owner/repo"
        )


def create_client(config: Dict[str, Any]) -> GitHubClient:
    """Create the API client for the triggering repository."""
    github = config["github"]
    return GitHubClient(
        token=github["token"],
        repo=github["repository"],
        base_url=github["api_url"],
        timeout=int(github["timeout"]),
        retry_count=int(github["retries"]),
        backoff_factor=float(github["backoff_factor"]),
        retry_exempt_status_codes=github["retry_exempt_status_codes"],
    )


# =============================================================================
# RUN
# =============================================================================


def run(config: Dict[str, Any]) -> int:
    """
    Run the assigner once.

    Args:
        config: Merged configuration dictionary

    Returns:
        Process exit status: 0 on success (including no-op runs), 1 on failure
    """
    try:
        validate_config(config)
        event = load_event(
            config["event"]["path"],
            event_name=config["event"]["name"] or None,
            repository=config["github"]["repository"],
        )
    except (ConfigError, EventPayloadError) as e:
        logger.critical(f"ERROR: {e}")
        return 1

    with log_context(pr_number=event.number, repository=event.repository):
        try:
            with create_client(config) as client:
                selector = AssigneeSelector(
                    client,
                    event,
                    debug=config["runner"]["debug"],
                    trusted_permissions=config["collaborators"]["trusted_permissions"],
                    ignored_authors=config["collaborators"]["ignored_authors"],
                    candidate_source=config["candidates"],
                )
                result: RunResult = selector.run()
        except (AssignerError, GitHubAPIError) as e:
            logger.critical(f"ERROR: {e}")
            logger.critical(
                "ERROR: Encountered at least one problem while running the assigner"
            )
            return 1

    logger.info(f"Run finished: {result.outcome.value}")
    return 0


def main() -> None:
    """Main entry point."""
    config = load_config()

    level = "DEBUG" if config["runner"]["debug"] else config["logging"]["level"]
    setup_logging(level=level, fmt=config["logging"]["format"])

    logger.info("=" * 60)
    logger.info("PR Assignee")
    logger.info("=" * 60)

    sys.exit(run(config))


if __name__ == "__main__":
    main()
