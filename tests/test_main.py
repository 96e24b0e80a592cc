"""
Tests for configuration loading and the exit status of a run.
"""

from unittest.mock import MagicMock, patch

import pytest

from pr_assignee import main as assigner_main
from pr_assignee.engine.selector import (
    AssignmentVerificationError,
    CandidateListEmptyError,
    RunOutcome,
    RunResult,
)
from pr_assignee.github.client import GitHubAPIError


@pytest.fixture
def environ(event_file):
    return {
        "GITHUB_TOKEN": "fake_github_token",
        "GITHUB_REPOSITORY": "octo/widgets",
        "GITHUB_EVENT_PATH": str(event_file),
        "GITHUB_EVENT_NAME": "pull_request_target",
    }


# ============================================================================
# Configuration
# ============================================================================

class TestLoadConfig:

    def test_packaged_settings(self, environ):
        config = assigner_main.load_config(environ=environ)

        assert config["collaborators"]["trusted_permissions"] == ["push", "maintain", "admin"]
        assert config["collaborators"]["ignored_authors"] == ["DilumAluthgeBot", "dependabot"]
        assert config["candidates"] == {
            "repo": "JuliaLang/pr-assignment",
            "path": "users.txt",
            "ref": "main",
        }
        assert config["github"]["retries"] == 5
        assert config["github"]["retry_exempt_status_codes"] == [404]

    def test_environment_overlay(self, environ):
        config = assigner_main.load_config(environ=environ)

        assert config["github"]["token"] == "fake_github_token"
        assert config["github"]["repository"] == "octo/widgets"
        assert config["event"]["name"] == "pull_request_target"
        assert config["runner"]["debug"] is False

    @pytest.mark.parametrize("value, expected", [
        ("1", True), (" TRUE ", True), ("0", False), ("", False), ("yes", False),
    ])
    def test_runner_debug(self, environ, value, expected):
        environ["RUNNER_DEBUG"] = value
        assert assigner_main.load_config(environ=environ)["runner"]["debug"] is expected

    def test_blank_api_url_falls_back(self, environ):
        environ["GITHUB_API_URL"] = ""
        config = assigner_main.load_config(environ=environ)
        assert config["github"]["api_url"] == "https://api.github.com"

    def test_missing_settings_file_uses_defaults(self, tmp_path, environ):
        config = assigner_main.load_config(
            settings_path=tmp_path / "missing.yaml", environ=environ
        )
        assert config["candidates"]["path"] == "users.txt"
        assert config["logging"]["format"] == "text"


class TestValidateConfig:

    def test_missing_context(self):
        config = assigner_main.load_config(environ={})

        with pytest.raises(assigner_main.ConfigError) as exc_info:
            assigner_main.validate_config(config)

        message = str(exc_info.value)
        for name in ("GITHUB_TOKEN", "GITHUB_REPOSITORY", "GITHUB_EVENT_PATH"):
            assert name in message

    def test_bad_repository(self, environ):
        environ["GITHUB_REPOSITORY"] = "widgets"
        with pytest.raises(assigner_main.ConfigError):
            assigner_main.validate_config(assigner_main.load_config(environ=environ))


def test_create_client(environ):
    client = assigner_main.create_client(assigner_main.load_config(environ=environ))

    assert client.repo == "octo/widgets"
    assert client.retry_count == 5
    assert client.retry_exempt_status_codes == frozenset({404})


# ============================================================================
# Run
# ============================================================================

@pytest.fixture
def patched_run():
    """Patch the client factory and selector used by run()."""
    with patch.object(assigner_main, "create_client") as create_client, \
            patch.object(assigner_main, "AssigneeSelector") as selector_cls:
        create_client.return_value = MagicMock()
        yield create_client, selector_cls


class TestRun:

    def test_success(self, environ, patched_run):
        _, selector_cls = patched_run
        selector_cls.return_value.run.return_value = RunResult(
            outcome=RunOutcome.ASSIGNED, assignee="alice"
        )

        assert assigner_main.run(assigner_main.load_config(environ=environ)) == 0

        args, kwargs = selector_cls.call_args
        assert args[1].number == 42
        assert kwargs["debug"] is False
        assert kwargs["candidate_source"]["repo"] == "JuliaLang/pr-assignment"

    def test_no_op_is_success(self, environ, patched_run):
        _, selector_cls = patched_run
        selector_cls.return_value.run.return_value = RunResult(
            outcome=RunOutcome.TRUSTED_AUTHOR
        )

        assert assigner_main.run(assigner_main.load_config(environ=environ)) == 0

    @pytest.mark.parametrize("error", [
        CandidateListEmptyError("Could not find any assignee candidates"),
        AssignmentVerificationError("alice", []),
        GitHubAPIError("Server Error", 500),
    ])
    def test_failures_exit_nonzero(self, environ, patched_run, error):
        _, selector_cls = patched_run
        selector_cls.return_value.run.side_effect = error

        assert assigner_main.run(assigner_main.load_config(environ=environ)) == 1

    def test_missing_context_exits_nonzero(self, patched_run):
        create_client, _ = patched_run

        assert assigner_main.run(assigner_main.load_config(environ={})) == 1
        create_client.assert_not_called()

    def test_bad_payload_exits_nonzero(self, tmp_path, environ, patched_run):
        path = tmp_path / "broken.json"
        path.write_text("{")
        environ["GITHUB_EVENT_PATH"] = str(path)

        assert assigner_main.run(assigner_main.load_config(environ=environ)) == 1


def test_main_exits_with_run_status(restore_logging):
    config = {
        "runner": {"debug": False},
        "logging": {"level": "INFO", "format": "text"},
    }
    with patch.object(assigner_main, "load_config", return_value=config), \
            patch.object(assigner_main, "run", return_value=1) as run:
        with pytest.raises(SystemExit) as exc_info:
            assigner_main.main()

    assert exc_info.value.code == 1
    run.assert_called_once_with(config)
