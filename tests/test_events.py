"""
Unit tests for loading the pull request event payload.
"""

import json

import pytest

from pr_assignee.github.events import EventPayloadError, PullRequestEvent, load_event


class TestFromPayload:

    def test_reads_fields(self, payload_factory):
        payload = payload_factory(
            action="reopened", number=7, author="zed", assignees=("a", "b"), draft=True
        )

        event = PullRequestEvent.from_payload(payload)

        assert event.action == "reopened"
        assert event.number == 7
        assert event.author == "zed"
        assert event.assignees == ("a", "b")
        assert event.draft is True
        assert event.repository == "octo/widgets"

    def test_explicit_repository_wins(self, payload):
        event = PullRequestEvent.from_payload(payload, repository="other/repo")
        assert event.repository == "other/repo"

    def test_missing_assignees_and_draft(self, payload):
        del payload["pull_request"]["assignees"]
        del payload["pull_request"]["draft"]

        event = PullRequestEvent.from_payload(payload)

        assert event.assignees == ()
        assert event.draft is False

    def test_missing_pull_request(self):
        with pytest.raises(EventPayloadError):
            PullRequestEvent.from_payload({"action": "opened", "issue": {}})

    def test_missing_number(self, payload):
        del payload["pull_request"]["number"]
        with pytest.raises(EventPayloadError):
            PullRequestEvent.from_payload(payload)

    def test_missing_author(self, payload):
        payload["pull_request"]["user"] = None
        with pytest.raises(EventPayloadError):
            PullRequestEvent.from_payload(payload)

    @pytest.mark.parametrize("assignees", [
        ["octocat"],
        [{"login": "octocat"}, None],
        {"login": "octocat"},
        "octocat",
    ])
    def test_malformed_assignees(self, payload, assignees):
        payload["pull_request"]["assignees"] = assignees
        with pytest.raises(EventPayloadError):
            PullRequestEvent.from_payload(payload)

    def test_assignee_without_login_is_skipped(self, payload):
        payload["pull_request"]["assignees"] = [{"id": 1}, {"login": "octocat"}]

        event = PullRequestEvent.from_payload(payload)

        assert event.assignees == ("octocat",)


class TestShouldHandle:

    @pytest.mark.parametrize("action", ["opened", "reopened", "ready_for_review"])
    def test_supported_actions(self, payload_factory, action):
        event = PullRequestEvent.from_payload(payload_factory(action=action))
        assert event.should_handle() == (True, "")

    @pytest.mark.parametrize("action", ["closed", "synchronize", "edited", ""])
    def test_other_actions(self, payload_factory, action):
        handle, reason = PullRequestEvent.from_payload(
            payload_factory(action=action)
        ).should_handle()

        assert handle is False
        assert "Unhandled action" in reason

    def test_draft(self, payload_factory):
        handle, reason = PullRequestEvent.from_payload(
            payload_factory(draft=True)
        ).should_handle()

        assert handle is False
        assert "draft" in reason


class TestLoadEvent:

    def test_loads_file(self, event_file):
        event = load_event(str(event_file), "pull_request_target", "octo/widgets")

        assert event.number == 42
        assert event.author == "contributor"

    def test_missing_file(self, tmp_path):
        with pytest.raises(EventPayloadError):
            load_event(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text("{not json")

        with pytest.raises(EventPayloadError):
            load_event(str(path))

    def test_non_object_payload(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text(json.dumps([1, 2, 3]))

        with pytest.raises(EventPayloadError):
            load_event(str(path))

    def test_unsupported_event_name(self, event_file):
        with pytest.raises(EventPayloadError):
            load_event(str(event_file), "push")
